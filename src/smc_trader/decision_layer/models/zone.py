"""
Zone - Price band shared by every point-of-interest detector.
"""

from dataclasses import dataclass
from typing import Optional

from ..enums import Bias, ZoneKind, ZoneStrength


@dataclass
class Zone:
    """
    Point-of-interest price band.

    One shape covers order blocks, fair value gaps, supply/demand and
    liquidity zones; `kind` tells them apart and the optional fields carry
    the kind-specific metadata:

    - `level`: the exact liquidity price (liquidity zones only)
    - `size_points`: gap size in points (fair value gaps)
    - `strength`: displacement grade (supply/demand)

    Zones are rebuilt on every scan; the status flags describe the bar
    history between formation and the present bar.
    """
    kind: ZoneKind
    timeframe: str
    upper: float
    lower: float
    formation_ts: int
    strength: ZoneStrength = ZoneStrength.WEAK
    touch_count: int = 0
    is_fresh: bool = True
    is_broken: bool = False            # Closed through (OB, S/D) or filled (FVG)
    is_swept: bool = False             # Liquidity taken
    level: Optional[float] = None
    size_points: float = 0.0

    def __post_init__(self):
        if self.upper < self.lower:
            raise ValueError(f"Zone upper {self.upper} below lower {self.lower}")

    @property
    def bias(self) -> Bias:
        return self.kind.bias

    @property
    def height(self) -> float:
        return self.upper - self.lower

    @property
    def midpoint(self) -> float:
        return (self.upper + self.lower) / 2

    @property
    def is_active(self) -> bool:
        """Neither broken nor swept."""
        return not self.is_broken and not self.is_swept

    def contains(self, price: float) -> bool:
        return self.lower <= price <= self.upper

    def overlaps(self, other: "Zone") -> bool:
        return self.lower <= other.upper and other.lower <= self.upper

    def __repr__(self) -> str:
        if self.is_broken:
            status = "BROKEN"
        elif self.is_swept:
            status = "SWEPT"
        else:
            status = "FRESH" if self.is_fresh else "TESTED"
        return (
            f"Zone({self.kind.value}, {self.lower:.5f}-{self.upper:.5f}, "
            f"{self.timeframe}, {status})"
        )
