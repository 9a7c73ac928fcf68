"""
Data models for the decision layer.

Pure data structures, separate from detection logic (plugins, detectors).
"""

from .swing_point import SwingPoint
from .zone import Zone
from .liquidity_grab import LiquidityGrab
from .wyckoff_event import WyckoffEvent
from .trade_signal import TradeSignal, CascadeResult

__all__ = [
    "SwingPoint",          # Swing highs/lows
    "Zone",                # OB / FVG / S&D / liquidity
    "LiquidityGrab",       # Liquidity sweeps with reversal
    "WyckoffEvent",        # Climax, spring, upthrust, SOS/SOW
    "TradeSignal",         # Entry with levels
    "CascadeResult",       # Full cascade snapshot
]
