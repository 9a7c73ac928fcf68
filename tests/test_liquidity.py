"""Liquidity zones, targets and grabs."""
import pytest

from smc_trader.config.strategy import LiquiditySettings
from smc_trader.decision_layer import Bias, LiquidityPlugin, ZoneKind
from conftest import SYMBOL, bars_from_ohlc, newest_first

# Highs 1.1050 and 1.10505 form equal highs; no equal lows
EQUAL_HIGHS = [
    (1.1040, 1.1050, 1.1030, 1.1045),
    (1.1045, 1.1046, 1.1020, 1.1025),
    (1.1025, 1.1030, 1.1005, 1.1015),
    (1.1015, 1.10505, 1.1012, 1.1040),
    (1.1040, 1.1042, 1.1033, 1.1035),
]

# Inside bars of a 1.1000 - 1.1070 range
RANGE = [
    (1.1020, 1.1070, 1.1000, 1.1040),
    (1.1030, 1.1060, 1.1010, 1.1050),
    (1.1040, 1.1052, 1.1018, 1.1025),
    (1.1030, 1.1044, 1.1024, 1.1038),
]

WICK_SWEEP = (1.1002, 1.1005, 1.0985, 1.1004)
RALLY = [
    (1.1004, 1.1036, 1.1003, 1.1034),
    (1.1034, 1.1048, 1.1033, 1.1046),
]


def scan(provider, rows):
    return LiquidityPlugin(SYMBOL, provider).scan(newest_first(bars_from_ohlc(rows)), "M5")


class TestLiquidityZones:

    def test_equal_highs_and_window_extremes(self, provider):
        zones = scan(provider, EQUAL_HIGHS)

        assert [z.kind for z in zones] == [ZoneKind.BUY_SIDE, ZoneKind.BUY_STOP, ZoneKind.SELL_STOP]
        assert all(z.kind.is_liquidity for z in zones)
        buy_side = zones[0]
        assert buy_side.level == 1.10505
        assert buy_side.lower == 1.1050
        assert buy_side.upper == pytest.approx(1.10515)
        assert buy_side.bias is Bias.BEARISH
        assert not buy_side.is_swept
        assert zones[2].level == 1.1005

    def test_equal_highs_swept_by_later_bar(self, provider):
        zones = scan(provider, EQUAL_HIGHS + [(1.1035, 1.1055, 1.1030, 1.1038)])

        buy_side = next(z for z in zones if z.kind is ZoneKind.BUY_SIDE)
        assert buy_side.is_swept
        assert not buy_side.is_fresh
        assert not buy_side.is_active

    def test_nearest_target_levels(self, provider):
        provider.load(SYMBOL, "M5", bars_from_ohlc(EQUAL_HIGHS))
        plugin = LiquidityPlugin(SYMBOL, provider)

        assert plugin.nearest_target_level("M5", Bias.BULLISH, 1.1035) == 1.10505
        assert plugin.nearest_target_level("M5", Bias.BEARISH, 1.1035) == 1.1005
        assert plugin.nearest_target_level("M5", Bias.BULLISH, 1.1060) is None

    def test_swept_levels_are_not_targets(self, provider):
        provider.load(SYMBOL, "M5", bars_from_ohlc(EQUAL_HIGHS + [(1.1035, 1.1055, 1.1030, 1.1038)]))
        plugin = LiquidityPlugin(SYMBOL, provider)

        assert plugin.nearest_target_level("M5", Bias.BULLISH, 1.1035) == 1.1055

    def test_empty_window(self, provider):
        assert scan(provider, []) == []


class TestLiquidityGrabs:

    def test_wick_rejection_below_range_low(self, provider):
        plugin = LiquidityPlugin(SYMBOL, provider)
        grabs = plugin.scan_grabs(newest_first(bars_from_ohlc(RANGE + [WICK_SWEEP] + RALLY)))

        assert len(grabs) == 1
        grab = grabs[0]
        assert grab.target_kind is ZoneKind.SELL_STOP
        assert grab.direction is Bias.BULLISH
        assert grab.liquidity_level == 1.1000
        assert grab.sweep_level == 1.0985
        assert grab.reversal_level == 1.1004
        assert grab.is_valid

    def test_close_beyond_level_without_reversal_is_invalid(self, provider):
        plugin = LiquidityPlugin(SYMBOL, provider)
        grabs = plugin.scan_grabs(newest_first(bars_from_ohlc(RANGE + [(1.0998, 1.1001, 1.0985, 1.0988)])))

        assert len(grabs) == 1
        assert not grabs[0].is_valid

    def test_follow_through_validates_grab(self, provider):
        rows = RANGE + [
            (1.0998, 1.1001, 1.0985, 1.0988),
            (1.0990, 1.1014, 1.0990, 1.1012),
            (1.1012, 1.1030, 1.1006, 1.1028),
        ]
        grabs = LiquidityPlugin(SYMBOL, provider).scan_grabs(newest_first(bars_from_ohlc(rows)))

        assert [(g.direction, g.is_valid) for g in grabs] == [(Bias.BULLISH, True)]

    def test_latest_grab_by_bias(self, provider):
        provider.load(SYMBOL, "M5", bars_from_ohlc(RANGE + [WICK_SWEEP] + RALLY))
        plugin = LiquidityPlugin(SYMBOL, provider)

        assert plugin.has_valid_grab("M5", Bias.BULLISH)
        assert not plugin.has_valid_grab("M5", Bias.BEARISH)
        assert plugin.latest_grab("M5", Bias.BULLISH).sweep_level == 1.0985

    def test_grab_outside_window_ignored(self, provider):
        plugin = LiquidityPlugin(SYMBOL, provider, LiquiditySettings(grab_window=2))
        grabs = plugin.scan_grabs(newest_first(bars_from_ohlc(RANGE + [WICK_SWEEP] + RALLY)))

        assert grabs == []
