"""
Technical Indicators Module

Calculates technical indicators from bar data.
All indicators are pure functions over numpy arrays or bar windows.

Price arrays are ordered oldest to newest, so the latest value is the last
element. Bar windows from a provider are newest first; use `closes()`,
`ranges()` and `volumes()` to get arrays in oldest-to-newest order.

Usage:
    closes = Indicators.closes(window)
    sma20 = Indicators.calculate_sma(closes, period=20)
    avg_range = Indicators.average_range(window[1:21])
"""

from typing import Sequence
import numpy as np

from smc_trader.core.bars import Bar


class Indicators:
    """
    Technical indicators calculator.

    Provides clean, reusable indicator calculations for the structure,
    Wyckoff and POI components.
    """

    # ========================================================================
    # ARRAY EXTRACTION
    # ========================================================================

    @staticmethod
    def closes(bars: Sequence[Bar]) -> np.ndarray:
        """Close prices, oldest to newest, from a newest-first window."""
        return np.array([b.close for b in reversed(bars)], dtype=float)

    @staticmethod
    def ranges(bars: Sequence[Bar]) -> np.ndarray:
        """High-low ranges, oldest to newest."""
        return np.array([b.high - b.low for b in reversed(bars)], dtype=float)

    @staticmethod
    def volumes(bars: Sequence[Bar]) -> np.ndarray:
        """Volumes, oldest to newest."""
        return np.array([b.volume for b in reversed(bars)], dtype=float)

    # ========================================================================
    # MOVING AVERAGES
    # ========================================================================

    @staticmethod
    def calculate_sma(prices: np.ndarray, period: int) -> float:
        """
        Calculate Simple Moving Average.

        Args:
            prices: Array of prices
            period: SMA period

        Returns:
            Latest SMA value
        """
        if len(prices) == 0:
            return 0.0
        if len(prices) < period:
            return float(np.mean(prices))

        return float(np.mean(prices[-period:]))

    # ========================================================================
    # RANGE / VOLUME
    # ========================================================================

    @staticmethod
    def average_range(bars: Sequence[Bar]) -> float:
        """Mean high-low range of the bars, 0.0 for an empty window."""
        if not bars:
            return 0.0
        return float(np.mean(Indicators.ranges(bars)))

    @staticmethod
    def average_volume(bars: Sequence[Bar]) -> float:
        if not bars:
            return 0.0
        return float(np.mean(Indicators.volumes(bars)))

    @staticmethod
    def has_volume(bars: Sequence[Bar]) -> bool:
        """True if any bar carries a positive volume."""
        return bool(bars) and bool(np.any(Indicators.volumes(bars) > 0))

    @staticmethod
    def trading_range_pct(bars: Sequence[Bar]) -> float:
        """
        Span of the window relative to its midpoint price.

        (max high - min low) / ((max high + min low) / 2); 0.0 when the
        midpoint is not positive.
        """
        if not bars:
            return 0.0
        high = max(b.high for b in bars)
        low = min(b.low for b in bars)
        midpoint = (high + low) / 2
        if midpoint <= 0:
            return 0.0
        return (high - low) / midpoint


__all__ = ["Indicators"]
