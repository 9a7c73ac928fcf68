"""HTF -> MTF -> LTF fusion cascade."""
import pytest

from smc_trader.config.strategy import StrategyConfig
from smc_trader.decision_layer import (
    Bias,
    FusionCascade,
    LiquidityGrab,
    MarketPhase,
    MarketStructure,
    ZoneKind,
    htf_bias,
)
from conftest import SYMBOL, FixedSession, bars_from_closes

ENTRY_CLOSE = 1.1020


@pytest.mark.parametrize("structure, phase, bias", [
    (MarketStructure.UPTREND, MarketPhase.MARKUP, Bias.BULLISH),
    (MarketStructure.UPTREND, MarketPhase.LATE_ACCUMULATION, Bias.BULLISH),
    (MarketStructure.UPTREND, MarketPhase.MID_ACCUMULATION, Bias.NEUTRAL),
    (MarketStructure.DOWNTREND, MarketPhase.MARKDOWN, Bias.BEARISH),
    (MarketStructure.DOWNTREND, MarketPhase.LATE_DISTRIBUTION, Bias.BEARISH),
    (MarketStructure.DOWNTREND, MarketPhase.MARKUP, Bias.NEUTRAL),
    (MarketStructure.ACCUMULATION, MarketPhase.MARKUP, Bias.NEUTRAL),
])
def test_htf_bias_table(structure, phase, bias):
    assert htf_bias(structure, phase) is bias


def grab(sweep: float) -> LiquidityGrab:
    return LiquidityGrab(
        target_kind=ZoneKind.SELL_STOP,
        ts=0,
        sweep_level=sweep,
        liquidity_level=sweep + 0.0005,
        reversal_level=sweep + 0.0010,
        is_valid=True,
    )


def stub_cascade(
    cascade: FusionCascade,
    structures=None,
    phases=None,
    in_poi=False,
    grabbed=True,
    bos=True,
    choch=True,
    fresh=True,
    sweep=1.0990,
    target=1.1100,
):
    """Replace detector outputs with fixed answers per timeframe."""
    structures = structures or {}
    phases = phases or {}

    def per_tf(value):
        return value if callable(value) else (lambda tf, *args: value)

    cascade.structure.classify = lambda tf: structures.get(tf, MarketStructure.UPTREND)
    cascade.wyckoff.determine_market_phase = lambda tf: phases.get(tf, MarketPhase.MARKUP)
    for plugin in cascade.poi_plugins:
        plugin.is_in_relevant_zone = per_tf(in_poi)
    cascade.liquidity.has_valid_grab = per_tf(grabbed)
    cascade.structure.detect_bos = per_tf(bos)
    cascade.structure.detect_choch = per_tf(choch)
    cascade.fvg.has_fresh_zone = per_tf(fresh)
    cascade.order_blocks.has_fresh_zone = per_tf(False)
    cascade.liquidity.latest_grab = lambda tf, bias: grab(sweep) if sweep is not None else None
    cascade.liquidity.nearest_target_level = lambda tf, bias, price: target
    return cascade


@pytest.fixture
def cascade(config, provider):
    provider.load(SYMBOL, "M5", bars_from_closes([1.1000, 1.1010, ENTRY_CLOSE]))
    return FusionCascade(SYMBOL, config, provider, FixedSession(False))


def test_bias_without_poi_never_enters(cascade):
    result = stub_cascade(cascade, in_poi=False).evaluate(10_000)

    assert result.bias is Bias.BULLISH
    assert not result.in_poi
    assert not result.liquidity_grab and not result.bos and not result.choch
    assert result.entry is False
    assert result.signal is None


def test_neutral_bias_stops_cascade(cascade):
    result = stub_cascade(cascade, phases={"H4": MarketPhase.UNKNOWN}, in_poi=True).evaluate(10_000)

    assert result.bias is Bias.NEUTRAL
    assert not result.in_htf_poi and not result.in_mtf_poi
    assert result.entry is False


def test_confirmation_triple_overrides_kill_zone(cascade):
    result = stub_cascade(cascade, in_poi=True).evaluate(10_000)

    assert result.in_htf_poi and result.in_mtf_poi
    assert result.confirmation_triple
    assert result.in_kill_zone is False
    assert result.entry is True
    assert result.confirmation_timeframe == "M5"


def test_missing_confirmation_blocks_entry_even_in_kill_zone(cascade):
    cascade.session_filter = FixedSession(True)
    result = stub_cascade(cascade, in_poi=True, grabbed=False).evaluate(10_000)

    assert result.in_kill_zone
    assert not result.confirmation_triple
    assert result.entry is False


def test_signal_levels(cascade):
    signal = stub_cascade(cascade, in_poi=True).evaluate(10_000).signal

    assert signal.direction is Bias.BULLISH
    assert signal.entry_price == ENTRY_CLOSE
    # sweep low minus the 5 point buffer
    assert signal.stop_loss == pytest.approx(1.09895)
    assert signal.take_profit == 1.1100
    # 1% of 10k over a 305 point stop
    assert signal.lot_size == pytest.approx(0.32)
    assert signal.timeframe == "M5"


def test_fixed_risk_reward_without_liquidity_target(cascade):
    signal = stub_cascade(cascade, in_poi=True, target=None).evaluate(10_000).signal

    assert signal.take_profit == pytest.approx(ENTRY_CLOSE + 2 * (ENTRY_CLOSE - 1.09895))
    assert signal.risk_reward == pytest.approx(2.0)


def test_stop_on_wrong_side_cancels_signal(cascade):
    result = stub_cascade(cascade, in_poi=True, sweep=1.1030).evaluate(10_000)

    assert result.entry is True
    assert result.signal is None


def test_zero_lot_cancels_signal(cascade):
    result = stub_cascade(cascade, in_poi=True).evaluate(1.0)

    assert result.entry is True
    assert result.signal is None


def test_mtf_poi_only_on_aligned_structure(cascade):
    stub_cascade(
        cascade,
        structures={"H1": MarketStructure.DOWNTREND},
        in_poi=lambda tf, bias, *args: tf == "H1",
    )
    result = cascade.evaluate(10_000)

    assert result.structures["H1"] is MarketStructure.DOWNTREND
    assert not result.in_mtf_poi
    assert not result.in_htf_poi
    assert result.entry is False


def test_last_htf_timeframe_sets_bias(provider):
    config = StrategyConfig.from_dict({
        "timeframes": {"htf": ["D1", "H4"], "mtf": ["H1"], "ltf": ["M5"]},
        "session": {"enabled": False},
    })
    cascade = stub_cascade(
        FusionCascade(SYMBOL, config, provider),
        structures={"D1": MarketStructure.UPTREND, "H4": MarketStructure.DOWNTREND},
        phases={"D1": MarketPhase.MARKUP, "H4": MarketPhase.MARKDOWN},
    )
    assert cascade.evaluate(10_000).bias is Bias.BEARISH
    assert cascade.bias is Bias.BEARISH


def test_confirmation_timeframe_prefers_full_confirmation(provider):
    config = StrategyConfig.from_dict({
        "timeframes": {"htf": ["H4"], "mtf": ["H1"], "ltf": ["M15", "M5"]},
        "session": {"enabled": False},
    })
    provider.load(SYMBOL, "M5", bars_from_closes([1.1000, ENTRY_CLOSE]))
    provider.load(SYMBOL, "M15", bars_from_closes([1.1000, ENTRY_CLOSE]))

    cascade = stub_cascade(FusionCascade(SYMBOL, config, provider), in_poi=True, fresh=False)
    assert cascade.evaluate(10_000).confirmation_timeframe == "M15"

    cascade = stub_cascade(
        FusionCascade(SYMBOL, config, provider),
        in_poi=True,
        fresh=lambda tf, bias: tf == "M5",
    )
    result = cascade.evaluate(10_000)
    assert result.confirmation_timeframe == "M5"
    assert result.all_confirmations


def test_run_only_on_new_trigger_bar(config, provider):
    provider.load(SYMBOL, "M5", bars_from_closes([1.1000, 1.1010]))
    cascade = FusionCascade(SYMBOL, config, provider, FixedSession(True))

    first = cascade.run(10_000)
    assert first is not None
    assert first.bias is Bias.NEUTRAL
    assert cascade.run(10_000) is None

    ts = provider.get_bar(SYMBOL, "M5", 0).ts
    provider.append(SYMBOL, "M5", bars_from_closes([1.1020], start_ts=ts + 300)[0])
    assert cascade.run(10_000).ts == ts + 300
    assert cascade.latest_result.ts == ts + 300


def test_no_trigger_bars(config, provider):
    assert FusionCascade(SYMBOL, config, provider).run(10_000) is None
