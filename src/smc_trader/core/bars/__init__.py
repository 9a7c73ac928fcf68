"""Bar value object, bounded series store, providers and file loader."""
from .bar import Bar
from .bar_series import BarSeries
from .loader import load_bars
from .provider import BarProvider, InMemoryBarProvider, SymbolInfo

__all__ = ["Bar", "BarSeries", "BarProvider", "InMemoryBarProvider", "SymbolInfo", "load_bars"]
