"""
Swing & Structure Classifier

Classifies market structure from swing points and detects structure
breaks (BOS) and changes of character (CHoCH).

Structure rules:
- UPTREND: every swing high and every swing low is strictly above the
  swing two positions further back (most recent first ordering)
- DOWNTREND: the same comparison, strictly below
- ACCUMULATION / DISTRIBUTION: after a downtrend / uptrend, the 3 most
  recent swing highs and lows span less than `range_threshold_pct` of the
  range high
- otherwise the previous non-neutral structure persists

The last structure is remembered per timeframe, the last BOS and CHoCH
bar timestamps once per classifier.
"""

from typing import Dict, List, Optional, Sequence, Tuple

from smc_trader.config.strategy import StructureSettings
from smc_trader.core.bars import Bar, BarProvider
from smc_trader.core.logger import get_logger
from .detectors import PivotDetector
from .enums import Bias, MarketStructure
from .models import SwingPoint

logger = get_logger(__name__)


def _stride_rising(points: List[SwingPoint]) -> bool:
    return all(points[i].value > points[i + 2].value for i in range(len(points) - 2))


def _stride_falling(points: List[SwingPoint]) -> bool:
    return all(points[i].value < points[i + 2].value for i in range(len(points) - 2))


class StructureClassifier:
    """
    Swing-based structure classifier for one symbol.

    Usage:
        classifier = StructureClassifier("EURUSD", provider, settings)
        structure = classifier.classify("H4")
        if classifier.detect_bos("M5", Bias.BULLISH):
            ...
    """

    def __init__(
        self,
        symbol: str,
        provider: BarProvider,
        settings: Optional[StructureSettings] = None
    ):
        self.symbol = symbol
        self.provider = provider
        self.settings = settings or StructureSettings()
        self.pivots = PivotDetector(self.settings.swing_left, self.settings.swing_right)

        self.last_structure: Dict[str, MarketStructure] = {}
        self.last_bos_ts: Optional[int] = None
        self.last_choch_ts: Optional[int] = None

    def window(self, timeframe: str) -> List[Bar]:
        return self.provider.get_window(self.symbol, timeframe, self.settings.lookback)

    def find_swing_points(self, bars: Sequence[Bar]) -> Tuple[List[SwingPoint], List[SwingPoint]]:
        """(highs, lows), most recent first."""
        return self.pivots.detect_swing_pivots(bars)

    def _enough_swings(self, highs: List[SwingPoint], lows: List[SwingPoint]) -> bool:
        return len(highs) >= self.settings.min_swings and len(lows) >= self.settings.min_swings

    # ========================================================================
    # STRUCTURE
    # ========================================================================

    def classify_structure(self, bars: Sequence[Bar], key: str = "default") -> MarketStructure:
        """
        Classify a bar window (newest first).

        Args:
            bars: Lookback window, newest first
            key: Hysteresis slot, normally the timeframe

        Returns:
            MarketStructure; NEUTRAL with too few swings
        """
        highs, lows = self.find_swing_points(bars)
        if not self._enough_swings(highs, lows):
            return MarketStructure.NEUTRAL

        previous = self.last_structure.get(key, MarketStructure.NEUTRAL)

        if _stride_rising(highs) and _stride_rising(lows):
            structure = MarketStructure.UPTREND
        elif _stride_falling(highs) and _stride_falling(lows):
            structure = MarketStructure.DOWNTREND
        else:
            range_high = max(p.value for p in highs[:3])
            range_low = min(p.value for p in lows[:3])
            narrow = range_high > 0 and (range_high - range_low) < self.settings.range_threshold_pct * range_high

            if narrow and previous is MarketStructure.DOWNTREND:
                structure = MarketStructure.ACCUMULATION
            elif narrow and previous is MarketStructure.UPTREND:
                structure = MarketStructure.DISTRIBUTION
            else:
                structure = previous

        if structure is not previous:
            logger.info(f"{self.symbol} {key}: structure {previous.value} -> {structure.value}")
        self.last_structure[key] = structure
        return structure

    def classify(self, timeframe: str) -> MarketStructure:
        return self.classify_structure(self.window(timeframe), key=timeframe)

    # ========================================================================
    # BOS / CHOCH
    # ========================================================================

    def detect_bos_in(self, bars: Sequence[Bar], bias: Bias) -> bool:
        """
        Break of structure.

        Bullish: latest close above the second most recent swing high.
        Bearish: latest close below the second most recent swing low.
        Reported once per triggering bar.
        """
        if bias is Bias.NEUTRAL or not bars:
            return False
        highs, lows = self.find_swing_points(bars)
        if not self._enough_swings(highs, lows):
            return False

        close = bars[0].close
        if bias is Bias.BULLISH:
            broken = close > highs[1].value
        else:
            broken = close < lows[1].value

        if not broken or bars[0].ts == self.last_bos_ts:
            return False
        self.last_bos_ts = bars[0].ts
        logger.debug(f"{self.symbol}: {bias.value} BOS at {bars[0].ts}")
        return True

    def detect_choch_in(self, bars: Sequence[Bar], bias: Bias) -> bool:
        """
        Change of character.

        Bullish: a higher low after a lower low (lows[0] > lows[1] < lows[2]).
        Bearish: a lower high after a higher high.
        Reported once per triggering bar.
        """
        if bias is Bias.NEUTRAL or not bars:
            return False
        highs, lows = self.find_swing_points(bars)
        if not self._enough_swings(highs, lows):
            return False

        if bias is Bias.BULLISH:
            changed = lows[0].value > lows[1].value and lows[1].value < lows[2].value
        else:
            changed = highs[0].value < highs[1].value and highs[1].value > highs[2].value

        if not changed or bars[0].ts == self.last_choch_ts:
            return False
        self.last_choch_ts = bars[0].ts
        logger.debug(f"{self.symbol}: {bias.value} CHoCH at {bars[0].ts}")
        return True

    def detect_bos(self, timeframe: str, bias: Bias) -> bool:
        return self.detect_bos_in(self.window(timeframe), bias)

    def detect_choch(self, timeframe: str, bias: Bias) -> bool:
        return self.detect_choch_in(self.window(timeframe), bias)

    # ========================================================================
    # LEVELS
    # ========================================================================

    def last_swing(self, timeframe: str, bias: Bias) -> Optional[SwingPoint]:
        """Latest protective swing: the last low for longs, the last high for shorts."""
        if bias is Bias.BULLISH:
            return self.pivots.get_most_recent_pivot_low(self.window(timeframe))
        if bias is Bias.BEARISH:
            return self.pivots.get_most_recent_pivot_high(self.window(timeframe))
        return None
