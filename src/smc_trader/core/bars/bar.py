"""
Bar - a single OHLCV candle.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Bar:
    """
    One OHLCV bar of a (symbol, timeframe) series.

    Windows handed to detectors are ordered newest-first: index 0 is the
    most recent bar and `ts` is non-increasing with increasing index.
    """
    ts: int                          # Bar open time (epoch seconds)
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0

    @property
    def range(self) -> float:
        """High to low span of the bar."""
        return self.high - self.low

    @property
    def body(self) -> float:
        """Absolute size of the candle body."""
        return abs(self.close - self.open)

    @property
    def upper_wick(self) -> float:
        return self.high - max(self.open, self.close)

    @property
    def lower_wick(self) -> float:
        return min(self.open, self.close) - self.low

    @property
    def is_bullish(self) -> bool:
        return self.close > self.open

    @property
    def is_bearish(self) -> bool:
        return self.close < self.open

    def __repr__(self) -> str:
        return (
            f"Bar(ts={self.ts}, O={self.open:.5f}, H={self.high:.5f}, "
            f"L={self.low:.5f}, C={self.close:.5f}, V={self.volume:.0f})"
        )
