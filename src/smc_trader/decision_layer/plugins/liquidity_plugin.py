"""
Liquidity Plugin

Detects resting liquidity (equal highs/lows and stops beyond the window
extremes) and liquidity grabs: sweeps of that liquidity followed by a
reversal.
"""

from typing import List, Optional, Tuple

from smc_trader.config.strategy import LiquiditySettings
from smc_trader.core.bars import Bar, BarProvider
from smc_trader.utils.units import points_to_price
from .base import POIPlugin
from ..enums import Bias, ZoneKind
from ..models import LiquidityGrab, Zone


class LiquidityPlugin(POIPlugin):
    """
    Liquidity zones and grabs.

    Zones:
    - BUY_SIDE: two highs closer than `equal_threshold_points`; level is the
      higher of the two, the zone extends `zone_buffer_points` above it
    - SELL_SIDE: the mirror image for equal lows
    - BUY_STOP / SELL_STOP: just beyond the window's extreme high / low

    A zone is swept once a bar newer than its formation trades beyond its
    level.

    Grabs:
    A bar in the last `grab_window` bars that trades beyond a liquidity level
    formed before it (equal highs/lows, or the extreme of the preceding
    `grab_range_bars` bars) is a sweep. It is a valid grab when
    (a) its rejection wick is at least `wick_body_ratio` times the body and
        it closes back inside the level, or
    (b) at least `min_reversal_closes` of the next `reversal_bars` bars close
        beyond the sweep bar's close in the reversal direction.

    Usage:
        plugin = LiquidityPlugin("EURUSD", provider, settings)
        plugin.has_valid_grab("M5", Bias.BULLISH)
        plugin.nearest_target_level("M5", Bias.BULLISH, price)
    """

    def __init__(
        self,
        symbol: str,
        provider: BarProvider,
        settings: Optional[LiquiditySettings] = None
    ):
        self.settings = settings or LiquiditySettings()
        super().__init__(symbol, provider, self.settings.lookback)

    # ========================================================================
    # ZONES
    # ========================================================================

    def _equal_levels(
        self,
        bars: List[Bar],
        above: bool
    ) -> List[Tuple[int, int, float]]:
        """
        Equal highs (above=True) or equal lows.

        Returns:
            (newer_shift, older_shift, level) for the first match of each bar
        """
        threshold = points_to_price(self.settings.equal_threshold_points, self.point_size)
        pairs = []
        for i in range(len(bars)):
            a = bars[i].high if above else bars[i].low
            for j in range(i + 1, len(bars)):
                b = bars[j].high if above else bars[j].low
                if abs(a - b) < threshold:
                    pairs.append((i, j, max(a, b) if above else min(a, b)))
                    break
        return pairs

    def scan(self, bars: List[Bar], timeframe: str) -> List[Zone]:
        zones: List[Zone] = []
        if not bars:
            return zones

        buffer = points_to_price(self.settings.zone_buffer_points, self.point_size)

        for i, j, level in self._equal_levels(bars, above=True):
            zone = Zone(
                kind=ZoneKind.BUY_SIDE,
                timeframe=timeframe,
                upper=level + buffer,
                lower=min(bars[i].high, bars[j].high),
                formation_ts=bars[i].ts,
                level=level,
            )
            zone.is_swept = any(b.high > level for b in bars[:i])
            zone.is_fresh = not zone.is_swept
            zones.append(zone)

        for i, j, level in self._equal_levels(bars, above=False):
            zone = Zone(
                kind=ZoneKind.SELL_SIDE,
                timeframe=timeframe,
                upper=max(bars[i].low, bars[j].low),
                lower=level - buffer,
                formation_ts=bars[i].ts,
                level=level,
            )
            zone.is_swept = any(b.low < level for b in bars[:i])
            zone.is_fresh = not zone.is_swept
            zones.append(zone)

        top = max(range(len(bars)), key=lambda s: bars[s].high)
        bottom = min(range(len(bars)), key=lambda s: bars[s].low)
        high, low = bars[top].high, bars[bottom].low
        zones.append(Zone(
            kind=ZoneKind.BUY_STOP,
            timeframe=timeframe,
            upper=high + buffer,
            lower=high,
            formation_ts=bars[top].ts,
            level=high,
        ))
        zones.append(Zone(
            kind=ZoneKind.SELL_STOP,
            timeframe=timeframe,
            upper=low,
            lower=low - buffer,
            formation_ts=bars[bottom].ts,
            level=low,
        ))
        return zones

    def nearest_target_level(
        self,
        timeframe: str,
        bias: Bias,
        price: float
    ) -> Optional[float]:
        """
        Nearest untouched opposing liquidity level.

        Bullish trades target liquidity above price, bearish trades below.
        """
        levels = []
        for zone in self.detect(timeframe):
            if zone.is_swept or zone.level is None:
                continue
            if bias is Bias.BULLISH and zone.kind.above_price and zone.level > price:
                levels.append(zone.level)
            elif bias is Bias.BEARISH and not zone.kind.above_price and zone.level < price:
                levels.append(zone.level)
        if not levels:
            return None
        return min(levels, key=lambda lvl: abs(lvl - price))

    # ========================================================================
    # GRABS
    # ========================================================================

    def scan_grabs(self, bars: List[Bar]) -> List[LiquidityGrab]:
        """
        Liquidity grabs in the last `grab_window` bars, most recent first.

        At most one grab per side and sweep bar: the furthest level taken.
        """
        grabs: List[LiquidityGrab] = []
        if len(bars) < 2:
            return grabs

        highs = self._equal_levels(bars, above=True)
        lows = self._equal_levels(bars, above=False)
        range_bars = self.settings.grab_range_bars

        for s in range(min(self.settings.grab_window, len(bars) - 1)):
            bar = bars[s]
            prior = bars[s + 1:s + 1 + range_bars]

            above = [(lvl, ZoneKind.BUY_SIDE) for i, _, lvl in highs if i > s]
            above.append((max(b.high for b in prior), ZoneKind.BUY_STOP))
            taken = [(lvl, kind) for lvl, kind in above if bar.high > lvl]
            if taken:
                level, kind = max(taken, key=lambda t: t[0])
                grabs.append(self._grab(bars, s, level, kind, Bias.BEARISH))

            below = [(lvl, ZoneKind.SELL_SIDE) for i, _, lvl in lows if i > s]
            below.append((min(b.low for b in prior), ZoneKind.SELL_STOP))
            taken = [(lvl, kind) for lvl, kind in below if bar.low < lvl]
            if taken:
                level, kind = min(taken, key=lambda t: t[0])
                grabs.append(self._grab(bars, s, level, kind, Bias.BULLISH))

        return grabs

    def _grab(
        self,
        bars: List[Bar],
        s: int,
        level: float,
        kind: ZoneKind,
        direction: Bias
    ) -> LiquidityGrab:
        bar = bars[s]
        if direction is Bias.BEARISH:
            wick, sweep, closed_inside = bar.upper_wick, bar.high, bar.close < level
        else:
            wick, sweep, closed_inside = bar.lower_wick, bar.low, bar.close > level

        wick_rejection = closed_inside and wick >= self.settings.wick_body_ratio * bar.body

        following = bars[max(0, s - self.settings.reversal_bars):s]
        reversal_closes = sum(
            1 for b in following
            if (b.close - bar.close) * direction.sign > 0
        )
        follow_through = reversal_closes >= self.settings.min_reversal_closes

        return LiquidityGrab(
            target_kind=kind,
            ts=bar.ts,
            sweep_level=sweep,
            liquidity_level=level,
            reversal_level=bar.close,
            is_valid=wick_rejection or follow_through,
        )

    def grabs(self, timeframe: str) -> List[LiquidityGrab]:
        return self.scan_grabs(self.window(timeframe))

    def latest_grab(self, timeframe: str, bias: Bias) -> Optional[LiquidityGrab]:
        """Most recent valid grab that supports `bias`."""
        for grab in self.grabs(timeframe):
            if grab.is_valid and grab.direction is bias:
                return grab
        return None

    def has_valid_grab(self, timeframe: str, bias: Bias) -> bool:
        return self.latest_grab(timeframe, bias) is not None
