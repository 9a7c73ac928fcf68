"""
Wyckoff Phase Classifier

Tags bars with Wyckoff events and derives a coarse market phase.

Events (at most one per bar, first match wins):
1. Selling climax: wide bearish bar at a new context low, volume spike,
   closes recover over the next bars
2. Buying climax: the mirror image at a new context high
3. Spring: dip below a trading range that closes back inside, then rallies
4. Upthrust: poke above a trading range that closes back inside, then drops
5. Sign of strength: wide bullish breakout above a trading range that holds
6. Sign of weakness: wide bearish breakdown below a trading range that holds

A trading range is a context window whose high-low span is below
`range_pct` of its midpoint. Volume checks only apply when the window
carries volume.

Phase:
- SMA(20) > SMA(50) > SMA(100): MARKUP; strictly reversed: MARKDOWN
- otherwise the side with more events (ties to accumulation) decides,
  LATE with a sign of strength/weakness, MID with a spring/upthrust,
  EARLY with climaxes only
- no events and no trend: UNKNOWN
"""

from typing import Dict, List, Optional, Sequence

from smc_trader.config.strategy import WyckoffSettings
from smc_trader.core.bars import Bar, BarProvider
from smc_trader.core.logger import get_logger
from smc_trader.indicators import Indicators
from .enums import MarketPhase, WyckoffEventType
from .models import WyckoffEvent

logger = get_logger(__name__)

FOLLOW_THROUGH_BARS = 3
MIN_FOLLOW_THROUGH = 2


class WyckoffClassifier:
    """
    Wyckoff event tagging and phase classification for one symbol.

    Usage:
        wyckoff = WyckoffClassifier("EURUSD", provider, settings)
        phase = wyckoff.determine_market_phase("D1")
    """

    def __init__(
        self,
        symbol: str,
        provider: BarProvider,
        settings: Optional[WyckoffSettings] = None
    ):
        self.symbol = symbol
        self.provider = provider
        self.settings = settings or WyckoffSettings()
        self.last_phase: Dict[str, MarketPhase] = {}

    # ========================================================================
    # EVENTS
    # ========================================================================

    def detect_events(self, bars: Sequence[Bar]) -> List[WyckoffEvent]:
        """
        Tag the window (newest first) with events, most recent first.

        Bars need `context_bars` older bars of context and at least
        `MIN_FOLLOW_THROUGH` newer bars of follow-through.
        """
        if len(bars) < self.settings.min_bars:
            return []

        use_volume = Indicators.has_volume(bars)
        events = []
        for shift in range(MIN_FOLLOW_THROUGH, len(bars) - self.settings.context_bars):
            event_type = self._classify_bar(bars, shift, use_volume)
            if event_type is not None:
                bar = bars[shift]
                events.append(WyckoffEvent(event_type=event_type, ts=bar.ts, price=bar.close, shift=shift))
        return events

    def _classify_bar(
        self,
        bars: Sequence[Bar],
        shift: int,
        use_volume: bool
    ) -> Optional[WyckoffEventType]:
        bar = bars[shift]
        context = bars[shift + 1:shift + 1 + self.settings.context_bars]
        range_context = bars[shift + 1:shift + 1 + self.settings.range_context_bars]
        following = bars[max(0, shift - FOLLOW_THROUGH_BARS):shift]

        avg_range = Indicators.average_range(context)
        wide = avg_range > 0 and bar.range > self.settings.climax_range_multiplier * avg_range
        volume_ok = not use_volume or bar.volume > self.settings.volume_spike_multiplier * Indicators.average_volume(context)

        context_low = min(b.low for b in context)
        context_high = max(b.high for b in context)
        range_low = min(b.low for b in range_context)
        range_high = max(b.high for b in range_context)
        in_range = Indicators.trading_range_pct(range_context) < self.settings.range_pct

        def closes_above(level: float) -> bool:
            return sum(1 for b in following if b.close > level) >= MIN_FOLLOW_THROUGH

        def closes_below(level: float) -> bool:
            return sum(1 for b in following if b.close < level) >= MIN_FOLLOW_THROUGH

        if bar.is_bearish and wide and volume_ok and bar.low < context_low and closes_above(bar.close):
            return WyckoffEventType.SELLING_CLIMAX
        if bar.is_bullish and wide and volume_ok and bar.high > context_high and closes_below(bar.close):
            return WyckoffEventType.BUYING_CLIMAX
        if in_range and bar.low < range_low and bar.close > range_low and closes_above(bar.close):
            return WyckoffEventType.SPRING
        if in_range and bar.high > range_high and bar.close < range_high and closes_below(bar.close):
            return WyckoffEventType.UPTHRUST
        if in_range and bar.is_bullish and bar.range > avg_range and volume_ok \
                and bar.close > range_high and closes_above(range_high):
            return WyckoffEventType.SIGN_OF_STRENGTH
        if in_range and bar.is_bearish and bar.range > avg_range and volume_ok \
                and bar.close < range_low and closes_below(range_low):
            return WyckoffEventType.SIGN_OF_WEAKNESS
        return None

    # ========================================================================
    # PHASE
    # ========================================================================

    def _ma_trend(self, bars: Sequence[Bar]) -> Optional[MarketPhase]:
        fast, mid, slow = self.settings.ma_periods
        if len(bars) < slow:
            return None
        closes = Indicators.closes(bars)
        sma_fast = Indicators.calculate_sma(closes, fast)
        sma_mid = Indicators.calculate_sma(closes, mid)
        sma_slow = Indicators.calculate_sma(closes, slow)
        if sma_fast > sma_mid > sma_slow:
            return MarketPhase.MARKUP
        if sma_fast < sma_mid < sma_slow:
            return MarketPhase.MARKDOWN
        return None

    @staticmethod
    def phase_from_events(events: Sequence[WyckoffEvent]) -> MarketPhase:
        types = [e.event_type for e in events]
        accumulation = [t for t in types if t.is_accumulation]
        distribution = [t for t in types if not t.is_accumulation]

        if accumulation and len(accumulation) >= len(distribution):
            if WyckoffEventType.SIGN_OF_STRENGTH in accumulation:
                return MarketPhase.LATE_ACCUMULATION
            if WyckoffEventType.SPRING in accumulation:
                return MarketPhase.MID_ACCUMULATION
            return MarketPhase.EARLY_ACCUMULATION

        if distribution:
            if WyckoffEventType.SIGN_OF_WEAKNESS in distribution:
                return MarketPhase.LATE_DISTRIBUTION
            if WyckoffEventType.UPTHRUST in distribution:
                return MarketPhase.MID_DISTRIBUTION
            return MarketPhase.EARLY_DISTRIBUTION

        return MarketPhase.UNKNOWN

    def classify_phase(self, bars: Sequence[Bar], key: str = "default") -> MarketPhase:
        """
        Phase of a bar window (newest first); UNKNOWN below `min_bars`.
        """
        if len(bars) < self.settings.min_bars:
            return MarketPhase.UNKNOWN

        phase = self._ma_trend(bars)
        if phase is None:
            phase = self.phase_from_events(self.detect_events(bars))

        previous = self.last_phase.get(key, MarketPhase.UNKNOWN)
        if phase is not previous:
            logger.info(f"{self.symbol} {key}: Wyckoff phase {previous.value} -> {phase.value}")
        self.last_phase[key] = phase
        return phase

    def determine_market_phase(self, timeframe: str) -> MarketPhase:
        bars = self.provider.get_window(self.symbol, timeframe, self.settings.lookback)
        return self.classify_phase(bars, key=timeframe)
