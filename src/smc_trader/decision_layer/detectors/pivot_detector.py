"""
Pivot Detector - Detects swing highs and lows using pivot confirmation.
"""

from typing import List, Optional, Sequence, Tuple

from smc_trader.core.bars import Bar
from ..enums import SwingKind
from ..models import SwingPoint


class PivotDetector:
    """
    Detects swing highs and lows using pivot confirmation logic.

    Bars are given newest first. A swing high at shift i requires:
    - High > all highs of the `pivot_left` older bars (i+1 .. i+left)
    - High > all highs of the `pivot_right` newer bars (i-right .. i-1)

    Similarly for swing lows. Confirmation lags by `pivot_right` bars.
    """

    def __init__(self, pivot_left: int = 3, pivot_right: int = 3):
        """
        Initialize pivot detector.

        Args:
            pivot_left: Number of older bars that must stay below a swing high
            pivot_right: Number of newer bars that must stay below a swing high
        """
        self.pivot_left = pivot_left
        self.pivot_right = pivot_right

    def detect_swing_pivots(
        self,
        bars: Sequence[Bar]
    ) -> Tuple[List[SwingPoint], List[SwingPoint]]:
        """
        Detect swing highs and lows.

        Args:
            bars: Window of bars, newest first

        Returns:
            (highs, lows), each ordered most recent first
        """
        highs: List[SwingPoint] = []
        lows: List[SwingPoint] = []

        n = len(bars)

        for i in range(self.pivot_right, n - self.pivot_left):
            bar = bars[i]
            neighbours = list(range(i - self.pivot_right, i)) + list(range(i + 1, i + self.pivot_left + 1))

            if all(bars[j].high < bar.high for j in neighbours):
                highs.append(SwingPoint(ts=bar.ts, value=bar.high, kind=SwingKind.HIGH, shift=i))

            if all(bars[j].low > bar.low for j in neighbours):
                lows.append(SwingPoint(ts=bar.ts, value=bar.low, kind=SwingKind.LOW, shift=i))

        return highs, lows

    def get_most_recent_pivot_high(self, bars: Sequence[Bar]) -> Optional[SwingPoint]:
        highs, _ = self.detect_swing_pivots(bars)
        return highs[0] if highs else None

    def get_most_recent_pivot_low(self, bars: Sequence[Bar]) -> Optional[SwingPoint]:
        _, lows = self.detect_swing_pivots(bars)
        return lows[0] if lows else None


def find_swing_points(
    bars: Sequence[Bar],
    left_strength: int,
    right_strength: int
) -> Tuple[List[SwingPoint], List[SwingPoint]]:
    """Functional shortcut for `PivotDetector(left, right).detect_swing_pivots(bars)`."""
    return PivotDetector(left_strength, right_strength).detect_swing_pivots(bars)
