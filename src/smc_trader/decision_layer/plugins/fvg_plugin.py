"""
Fair Value Gap (FVG) Plugin

Detects Fair Value Gaps - price imbalance zones where price moved so
quickly that the wicks of the surrounding candles never overlapped.
"""

from typing import List, Optional

from smc_trader.config.strategy import FVGSettings
from smc_trader.core.bars import Bar, BarProvider
from smc_trader.utils.units import price_to_points
from .base import POIPlugin
from ..enums import Bias, ZoneKind
from ..models import Zone


class FVGPlugin(POIPlugin):
    """
    Fair Value Gap detection plugin.

    A FVG is a 3-candle pattern around the middle candle at shift i, with
    candle-1 the newer neighbour (i-1) and candle+1 the older one (i+1):
    - Bullish: candle-1 low > candle+1 high, bounds [candle+1 high, candle-1 low]
    - Bearish: candle-1 high < candle+1 low, bounds [candle-1 high, candle+1 low]

    A gap is filled once a later bar trades into it; `is_broken` carries the
    filled state. Only the `fresh_count` most recent gaps of each polarity
    are fresh.

    Usage:
        plugin = FVGPlugin("EURUSD", provider, settings)
        gaps = plugin.detect("M15")
        plugin.has_fresh_zone("M15", Bias.BULLISH)
    """

    def __init__(
        self,
        symbol: str,
        provider: BarProvider,
        settings: Optional[FVGSettings] = None
    ):
        self.settings = settings or FVGSettings()
        super().__init__(symbol, provider, self.settings.lookback)

    def scan(self, bars: List[Bar], timeframe: str) -> List[Zone]:
        gaps: List[Zone] = []
        if len(bars) < 3:
            return gaps

        point = self.point_size
        for i in range(1, len(bars) - 1):
            newer = bars[i - 1]
            middle = bars[i]
            older = bars[i + 1]

            if newer.low > older.high:
                kind, lower, upper = ZoneKind.BULLISH_FVG, older.high, newer.low
            elif newer.high < older.low:
                kind, lower, upper = ZoneKind.BEARISH_FVG, newer.high, older.low
            else:
                continue

            size_points = price_to_points(upper - lower, point)
            if size_points < self.settings.min_size_points:
                continue

            gap = Zone(
                kind=kind,
                timeframe=timeframe,
                upper=upper,
                lower=lower,
                formation_ts=middle.ts,
                size_points=size_points,
            )
            self._update_fill(gap, bars[:i - 1])
            gaps.append(gap)

        self._mark_fresh(gaps)
        return gaps

    @staticmethod
    def _update_fill(gap: Zone, later: List[Bar]) -> None:
        """Check the bars newer than candle-1 for a fill."""
        for bar in later:
            if gap.kind is ZoneKind.BULLISH_FVG:
                filled = bar.low < gap.upper
            else:
                filled = bar.high > gap.lower
            if filled:
                gap.touch_count += 1
                gap.is_broken = True

    def _mark_fresh(self, gaps: List[Zone]) -> None:
        """Gaps arrive newest first; only the first `fresh_count` per polarity stay fresh."""
        seen = {ZoneKind.BULLISH_FVG: 0, ZoneKind.BEARISH_FVG: 0}
        for gap in gaps:
            seen[gap.kind] += 1
            gap.is_fresh = seen[gap.kind] <= self.settings.fresh_count

    def unfilled(self, timeframe: str, bias: Optional[Bias] = None) -> List[Zone]:
        return [
            gap for gap in self.detect(timeframe)
            if not gap.is_broken and (bias is None or gap.bias is bias)
        ]
