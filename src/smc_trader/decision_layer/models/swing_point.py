"""
SwingPoint - A confirmed swing high or low.
"""

from dataclasses import dataclass

from ..enums import SwingKind


@dataclass(frozen=True)
class SwingPoint:
    """
    Swing high/low confirmed `right` bars after it formed.

    `shift` is the bar's position in the window it was found in
    (0 = most recent bar).
    """
    ts: int
    value: float
    kind: SwingKind
    shift: int

    @property
    def is_high(self) -> bool:
        return self.kind is SwingKind.HIGH

    def __repr__(self) -> str:
        return f"Swing({self.kind.value}, {self.value:.5f}, ts={self.ts})"
