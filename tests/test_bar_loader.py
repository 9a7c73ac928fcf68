"""CSV/Parquet bar loading."""
import pytest

from smc_trader.core.bars import load_bars


def test_csv_sorted_and_deduplicated(tmp_path):
    path = tmp_path / "m5.csv"
    path.write_text(
        "ts,open,high,low,close,volume\n"
        "1700000600,1.1010,1.1020,1.1000,1.1015,12\n"
        "1700000000,1.1000,1.1010,1.0990,1.1005,10\n"
        "1700000300,1.1005,1.1015,1.0995,1.1010,11\n"
        "1700000600,1.1010,1.1025,1.1000,1.1020,13\n"
    )
    bars = load_bars(path)

    assert [b.ts for b in bars] == [1700000000, 1700000300, 1700000600]
    assert bars[-1].close == pytest.approx(1.1020)
    assert bars[0].volume == 10


def test_datetime_column_and_missing_volume(tmp_path):
    path = tmp_path / "h1.csv"
    path.write_text(
        "datetime,open,high,low,close\n"
        "2024-01-01 00:00:00,1.1,1.2,1.0,1.15\n"
        "2024-01-01 01:00:00,1.15,1.25,1.1,1.2\n"
    )
    bars = load_bars(path)

    assert [b.ts for b in bars] == [1704067200, 1704070800]
    assert all(b.volume == 0.0 for b in bars)


def test_missing_price_column(tmp_path):
    path = tmp_path / "bad.csv"
    path.write_text("ts,open,high,low\n1700000000,1.1,1.2,1.0\n")
    with pytest.raises(ValueError, match="close"):
        load_bars(path)


def test_missing_time_column(tmp_path):
    path = tmp_path / "bad.csv"
    path.write_text("open,high,low,close\n1.1,1.2,1.0,1.15\n")
    with pytest.raises(ValueError):
        load_bars(path)


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_bars(tmp_path / "none.csv")
