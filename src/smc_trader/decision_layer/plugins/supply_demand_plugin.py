"""
Supply/Demand Zone Plugin

Detects supply and demand zones at local reversal bars that are followed
by a strong departure, grades them by displacement and merges overlaps.
"""

from typing import Dict, List, Optional

from smc_trader.config.strategy import SupplyDemandSettings
from smc_trader.core.bars import Bar, BarProvider
from .base import POIPlugin
from ..detectors import merge_zones
from ..enums import Bias, ZoneKind, ZoneStrength
from ..models import Zone


class SupplyDemandPlugin(POIPlugin):
    """
    Supply/Demand detection plugin.

    Detection Logic:
    1. Demand: a bar whose low is below both neighbours' lows, followed by
       at least `min_strong_bars` of the next `follow_bars` bars each closing
       above the previous close, and a departure of at least
       `min_displacement_pct` from the low. Supply mirrors this.
    2. Strength: displacement vs the average range of the `range_bars` bars
       after the reversal bar (> strong_multiplier: STRONG,
       > normal_multiplier: NORMAL, else WEAK).
    3. Overlapping zones of the same kind are merged, then status is
       re-evaluated: broken once a later bar closes through the far
       boundary, fresh while no bar after the departure revisited the zone.

    Usage:
        plugin = SupplyDemandPlugin("EURUSD", provider, settings)
        zones = plugin.detect("H4")
    """

    def __init__(
        self,
        symbol: str,
        provider: BarProvider,
        settings: Optional[SupplyDemandSettings] = None
    ):
        self.settings = settings or SupplyDemandSettings()
        super().__init__(symbol, provider, self.settings.lookback)

    def scan(self, bars: List[Bar], timeframe: str) -> List[Zone]:
        follow = self.settings.follow_bars
        if len(bars) < follow + 2:
            return []

        zones: List[Zone] = []
        for i in range(follow, len(bars) - 1):
            bar = bars[i]
            newer, older = bars[i - 1], bars[i + 1]

            if bar.low < newer.low and bar.low < older.low:
                zone = self._demand(bars, i, timeframe)
            elif bar.high > newer.high and bar.high > older.high:
                zone = self._supply(bars, i, timeframe)
            else:
                zone = None

            if zone is not None:
                zones.append(zone)

        merged = merge_zones(zones)
        shifts = {bar.ts: shift for shift, bar in enumerate(bars)}
        for zone in merged:
            self._evaluate(zone, bars, shifts)
        return merged

    def _strong_closes(self, bars: List[Bar], i: int, direction: int) -> int:
        count = 0
        for j in range(i - 1, i - 1 - self.settings.follow_bars, -1):
            move = bars[j].close - bars[j + 1].close
            if move * direction > 0:
                count += 1
        return count

    def _grade(self, bars: List[Bar], i: int, displacement: float) -> ZoneStrength:
        departure = bars[max(0, i - self.settings.range_bars):i]
        avg_range = sum(b.range for b in departure) / len(departure)
        if avg_range <= 0:
            return ZoneStrength.WEAK
        ratio = displacement / avg_range
        if ratio > self.settings.strong_multiplier:
            return ZoneStrength.STRONG
        if ratio > self.settings.normal_multiplier:
            return ZoneStrength.NORMAL
        return ZoneStrength.WEAK

    def _demand(self, bars: List[Bar], i: int, timeframe: str) -> Optional[Zone]:
        bar = bars[i]
        if self._strong_closes(bars, i, 1) < self.settings.min_strong_bars:
            return None

        peak = max(b.close for b in bars[i - self.settings.follow_bars:i])
        displacement = peak - bar.low
        if bar.low <= 0 or displacement / bar.low < self.settings.min_displacement_pct:
            return None

        upper = max(bar.open, bar.close)
        if upper <= bar.low:
            return None
        return Zone(
            kind=ZoneKind.DEMAND,
            timeframe=timeframe,
            upper=upper,
            lower=bar.low,
            formation_ts=bar.ts,
            strength=self._grade(bars, i, displacement),
        )

    def _supply(self, bars: List[Bar], i: int, timeframe: str) -> Optional[Zone]:
        bar = bars[i]
        if self._strong_closes(bars, i, -1) < self.settings.min_strong_bars:
            return None

        trough = min(b.close for b in bars[i - self.settings.follow_bars:i])
        displacement = bar.high - trough
        if bar.high <= 0 or displacement / bar.high < self.settings.min_displacement_pct:
            return None

        lower = min(bar.open, bar.close)
        if bar.high <= lower:
            return None
        return Zone(
            kind=ZoneKind.SUPPLY,
            timeframe=timeframe,
            upper=bar.high,
            lower=lower,
            formation_ts=bar.ts,
            strength=self._grade(bars, i, displacement),
        )

    def _evaluate(self, zone: Zone, bars: List[Bar], shifts: Dict[int, int]) -> None:
        """Derive broken/fresh status from the bars after the zone formed."""
        origin = shifts.get(zone.formation_ts)
        if origin is None:
            return
        later = bars[:origin]
        departure_end = max(0, origin - self.settings.follow_bars)

        zone.is_broken = False
        zone.is_fresh = True
        zone.touch_count = 0
        for shift in range(len(later) - 1, -1, -1):
            bar = later[shift]
            if zone.kind is ZoneKind.DEMAND:
                broken = bar.close < zone.lower
            else:
                broken = bar.close > zone.upper
            if broken:
                zone.is_broken = True
                zone.is_fresh = False
                break
            if shift < departure_end and bar.low <= zone.upper and bar.high >= zone.lower:
                zone.touch_count += 1
                zone.is_fresh = False

    def nearest_zone(
        self,
        timeframe: str,
        bias: Bias,
        price: float
    ) -> Optional[Zone]:
        """Closest active zone of the given bias, measured from its midpoint."""
        candidates = [z for z in self.detect(timeframe) if z.bias is bias and z.is_active]
        if not candidates:
            return None
        return min(candidates, key=lambda z: abs(z.midpoint - price))
