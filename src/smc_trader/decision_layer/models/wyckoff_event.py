"""
WyckoffEvent - Event label attached to a bar.
"""

from dataclasses import dataclass

from ..enums import WyckoffEventType


@dataclass(frozen=True)
class WyckoffEvent:
    event_type: WyckoffEventType
    ts: int
    price: float
    shift: int

    def __repr__(self) -> str:
        return f"Wyckoff({self.event_type.value}, {self.price:.5f}, ts={self.ts})"
