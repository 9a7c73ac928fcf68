"""BarSeries and InMemoryBarProvider."""
import pytest

from smc_trader.core.bars import BarSeries, InMemoryBarProvider
from conftest import SYMBOL, bars_from_closes, make_bar


def test_shift_zero_is_most_recent():
    series = BarSeries(SYMBOL, "M5")
    series.load(bars_from_closes([1.1000, 1.1010, 1.1020]))

    assert len(series) == 3
    assert series.get_bar(0).close == 1.1020
    assert series.get_bar(2).close == 1.1000
    assert series.get_bar(3) is None
    assert series.get_bar(-1) is None


def test_window_is_newest_first():
    series = BarSeries(SYMBOL, "M5")
    series.load(bars_from_closes([1.1000, 1.1010, 1.1020, 1.1030]))

    window = series.window(3)
    assert [b.close for b in window] == [1.1030, 1.1020, 1.1010]
    assert all(window[i].ts > window[i + 1].ts for i in range(len(window) - 1))
    assert series.window(0) == []
    assert len(series.window(50)) == 4


def test_append_rejects_non_increasing_timestamps():
    series = BarSeries(SYMBOL, "M5")
    series.append(make_bar(100, 1.1, 1.1, 1.1, 1.1))

    with pytest.raises(ValueError):
        series.append(make_bar(100, 1.2, 1.2, 1.2, 1.2))
    with pytest.raises(ValueError):
        series.append(make_bar(50, 1.2, 1.2, 1.2, 1.2))


def test_maxlen_drops_oldest_bars():
    series = BarSeries(SYMBOL, "M5", maxlen=2)
    series.load(bars_from_closes([1.1000, 1.1010, 1.1020]))

    assert len(series) == 2
    assert series.get_bar(1).close == 1.1010


def test_update_last_replaces_forming_bar():
    series = BarSeries(SYMBOL, "M5")
    series.append(make_bar(100, 1.1, 1.1, 1.1, 1.1))
    series.update_last(make_bar(100, 1.1, 1.2, 1.0, 1.15))

    assert series.get_bar(0).close == 1.15
    with pytest.raises(ValueError):
        series.update_last(make_bar(200, 1.1, 1.2, 1.0, 1.15))


def test_update_last_on_empty_series():
    with pytest.raises(RuntimeError):
        BarSeries(SYMBOL, "M5").update_last(make_bar(100, 1.1, 1.1, 1.1, 1.1))


def test_provider_serves_windows_per_timeframe(provider):
    provider.load(SYMBOL, "M5", bars_from_closes([1.1000, 1.1010]))

    assert provider.bar_count(SYMBOL, "M5") == 2
    assert provider.bar_count(SYMBOL, "H1") == 0
    assert provider.get_window(SYMBOL, "H1", 10) == []
    assert provider.get_bar(SYMBOL, "M5", 0).close == 1.1010
    assert provider.get_bar(SYMBOL, "H1", 0) is None


def test_provider_requires_symbol_info():
    with pytest.raises(KeyError):
        InMemoryBarProvider().symbol_info("GBPUSD")
