"""
Bar providers - the market-data side of the pipeline.

The decision layer only ever reads bars through a `BarProvider`, so the
same detectors run on a live feed adapter or on in-memory test data.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from .bar import Bar
from .bar_series import BarSeries


@dataclass(frozen=True)
class SymbolInfo:
    """Contract specification needed for unit conversion and sizing."""
    symbol: str
    point_size: float                # Smallest price increment quoted
    tick_value: float                # Account-currency value of one tick per 1.0 lot
    tick_size: Optional[float] = None  # Defaults to point_size
    lot_step: float = 0.01
    min_lot: float = 0.01
    max_lot: float = 100.0

    @property
    def effective_tick_size(self) -> float:
        return self.tick_size if self.tick_size else self.point_size


class BarProvider(ABC):
    """
    Read-only access to indexed OHLCV bars per (symbol, timeframe).

    Shift 0 is the most recent bar.
    """

    @abstractmethod
    def get_bar(self, symbol: str, timeframe: str, shift: int) -> Optional[Bar]:
        """Return the bar `shift` positions back from the present, or None."""

    @abstractmethod
    def bar_count(self, symbol: str, timeframe: str) -> int:
        """Number of bars available for the series."""

    @abstractmethod
    def symbol_info(self, symbol: str) -> SymbolInfo:
        """Point size, tick value and lot constraints for the symbol."""

    def get_window(self, symbol: str, timeframe: str, count: int) -> List[Bar]:
        """Return up to `count` most recent bars, newest first."""
        n = min(count, self.bar_count(symbol, timeframe))
        window = []
        for shift in range(n):
            bar = self.get_bar(symbol, timeframe, shift)
            if bar is None:
                break
            window.append(bar)
        return window


class InMemoryBarProvider(BarProvider):
    """
    Provider backed by `BarSeries` objects held in memory.

    Usage:
        provider = InMemoryBarProvider(maxlen=500)
        provider.set_symbol_info(SymbolInfo("EURUSD", point_size=0.00001, tick_value=1.0))
        provider.load("EURUSD", "M5", bars_oldest_first)
        provider.append("EURUSD", "M5", new_bar)
    """

    def __init__(self, maxlen: int = 1000):
        self.maxlen = maxlen
        self._series: Dict[Tuple[str, str], BarSeries] = {}
        self._symbol_info: Dict[str, SymbolInfo] = {}

    def series(self, symbol: str, timeframe: str) -> BarSeries:
        key = (symbol, timeframe)
        if key not in self._series:
            self._series[key] = BarSeries(symbol, timeframe, maxlen=self.maxlen)
        return self._series[key]

    def set_symbol_info(self, info: SymbolInfo) -> None:
        self._symbol_info[info.symbol] = info

    def load(self, symbol: str, timeframe: str, bars: Iterable[Bar]) -> None:
        """Load bars given oldest first."""
        self.series(symbol, timeframe).load(bars)

    def append(self, symbol: str, timeframe: str, bar: Bar) -> None:
        self.series(symbol, timeframe).append(bar)

    def get_bar(self, symbol: str, timeframe: str, shift: int) -> Optional[Bar]:
        series = self._series.get((symbol, timeframe))
        return series.get_bar(shift) if series else None

    def bar_count(self, symbol: str, timeframe: str) -> int:
        series = self._series.get((symbol, timeframe))
        return len(series) if series else 0

    def get_window(self, symbol: str, timeframe: str, count: int) -> List[Bar]:
        series = self._series.get((symbol, timeframe))
        return series.window(count) if series else []

    def symbol_info(self, symbol: str) -> SymbolInfo:
        if symbol not in self._symbol_info:
            raise KeyError(f"No symbol info registered for {symbol}")
        return self._symbol_info[symbol]


__all__ = ["SymbolInfo", "BarProvider", "InMemoryBarProvider"]
