"""SMC Trader - multi-timeframe Smart Money Concepts decision engine."""

__version__ = "1.0.0"

from .bot import TradingSession, main

__all__ = ["TradingSession", "main", "__version__"]
