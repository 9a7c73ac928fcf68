"""
Timeframe Registry

Maps timeframe names to their bar duration so tiers can be ordered from
the highest to the lowest timeframe.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List


@dataclass(frozen=True)
class TimeframeSpec:
    """
    A named bar period.

    Higher timeframes carry structure, lower timeframes carry the entry
    confirmation, so most callers only need the ordering.
    """
    name: str
    minutes: int
    description: str

    def __post_init__(self):
        """Validate configuration parameters."""
        assert self.minutes > 0, "minutes must be positive"
        assert self.name, "name must be non-empty"


TIMEFRAMES: Dict[str, TimeframeSpec] = {
    "M1": TimeframeSpec("M1", 1, "Micro structure - scalping"),
    "M5": TimeframeSpec("M5", 5, "Entry confirmation"),
    "M15": TimeframeSpec("M15", 15, "Entry confirmation"),
    "M30": TimeframeSpec("M30", 30, "Intraday structure"),
    "H1": TimeframeSpec("H1", 60, "Intraday structure"),
    "H4": TimeframeSpec("H4", 240, "Swing structure"),
    "D1": TimeframeSpec("D1", 1440, "Major structure - daily levels"),
    "W1": TimeframeSpec("W1", 10080, "Major structure - weekly levels"),
    "MN1": TimeframeSpec("MN1", 43200, "Monthly context"),
}


def is_known_timeframe(timeframe: str) -> bool:
    return timeframe in TIMEFRAMES


def timeframe_minutes(timeframe: str) -> int:
    """
    Get the bar duration of a timeframe in minutes.

    Raises:
        KeyError: for unknown timeframe names
    """
    return TIMEFRAMES[timeframe].minutes


def order_high_to_low(timeframes: Iterable[str]) -> List[str]:
    """Sort timeframe names from the highest to the lowest period."""
    return sorted(timeframes, key=timeframe_minutes, reverse=True)


def lowest_timeframe(timeframes: Iterable[str]) -> str:
    """Return the timeframe with the shortest bar period."""
    return min(timeframes, key=timeframe_minutes)


__all__ = [
    "TimeframeSpec",
    "TIMEFRAMES",
    "is_known_timeframe",
    "timeframe_minutes",
    "order_high_to_low",
    "lowest_timeframe",
]
