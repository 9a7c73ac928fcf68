"""
Order Block (OB) Plugin

Detects Order Blocks - the last opposite candle before a displacement,
indicating institutional order placement.
"""

from typing import List, Optional

from smc_trader.config.strategy import OrderBlockSettings
from smc_trader.core.bars import Bar, BarProvider
from smc_trader.utils.units import price_to_points
from .base import POIPlugin
from ..enums import Bias, ZoneKind
from ..models import Zone


class OrderBlockPlugin(POIPlugin):
    """
    Order Block detection plugin.

    Detection Logic:
    1. Bullish OB: a down-close candle followed by a net upward displacement
       of its close over the next `displacement_bars` bars larger than
       `min_displacement_points`, with a low below the next bar's low
    2. Bearish OB: the mirror image (up-close candle, downward displacement,
       high above the next bar's high)

    Status:
    - Fresh until a later bar's low (bearish: high) revisits the block low (high)
    - Broken once a later bar closes beyond the far boundary

    Usage:
        plugin = OrderBlockPlugin("EURUSD", provider, settings)
        zones = plugin.detect("H1")
        plugin.is_in_relevant_zone("H1", Bias.BULLISH)
    """

    def __init__(
        self,
        symbol: str,
        provider: BarProvider,
        settings: Optional[OrderBlockSettings] = None
    ):
        self.settings = settings or OrderBlockSettings()
        super().__init__(symbol, provider, self.settings.lookback)

    def scan(self, bars: List[Bar], timeframe: str) -> List[Zone]:
        """
        Detect Order Blocks.

        Candles newer than `displacement_bars` cannot be confirmed yet.
        """
        zones: List[Zone] = []
        span = self.settings.displacement_bars
        if len(bars) <= span:
            return zones

        point = self.point_size
        for i in range(span, len(bars)):
            candle = bars[i]
            following = bars[i - 1]
            after = bars[i - span]
            if candle.high <= candle.low:
                continue

            if candle.is_bearish:
                displacement = price_to_points(after.close - candle.close, point)
                if displacement > self.settings.min_displacement_points and candle.low < following.low:
                    zone = Zone(
                        kind=ZoneKind.BULLISH_ORDER_BLOCK,
                        timeframe=timeframe,
                        upper=candle.high,
                        lower=candle.low,
                        formation_ts=candle.ts,
                        size_points=displacement,
                    )
                    self._update_status(zone, bars[:i])
                    zones.append(zone)

            elif candle.is_bullish:
                displacement = price_to_points(candle.close - after.close, point)
                if displacement > self.settings.min_displacement_points and candle.high > following.high:
                    zone = Zone(
                        kind=ZoneKind.BEARISH_ORDER_BLOCK,
                        timeframe=timeframe,
                        upper=candle.high,
                        lower=candle.low,
                        formation_ts=candle.ts,
                        size_points=displacement,
                    )
                    self._update_status(zone, bars[:i])
                    zones.append(zone)

        return zones

    @staticmethod
    def _update_status(zone: Zone, later: List[Bar]) -> None:
        """Walk the bars formed after the block, oldest first."""
        bullish = zone.kind is ZoneKind.BULLISH_ORDER_BLOCK
        for bar in reversed(later):
            if bar.low <= zone.upper and bar.high >= zone.lower:
                zone.touch_count += 1
            if bullish:
                if bar.low <= zone.lower:
                    zone.is_fresh = False
                if bar.close < zone.lower:
                    zone.is_broken = True
            else:
                if bar.high >= zone.upper:
                    zone.is_fresh = False
                if bar.close > zone.upper:
                    zone.is_broken = True
            if zone.is_broken:
                break

    def latest_block(self, timeframe: str, bias: Bias) -> Optional[Zone]:
        """Most recent active block of the given polarity."""
        for zone in self.detect(timeframe):
            if zone.bias is bias and zone.is_active:
                return zone
        return None
