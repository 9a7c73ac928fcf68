"""
LiquidityGrab - A sweep of resting liquidity followed by a reversal.
"""

from dataclasses import dataclass

from ..enums import Bias, ZoneKind


@dataclass(frozen=True)
class LiquidityGrab:
    """
    Liquidity grab event.

    Sweeping liquidity above price (BUY_SIDE / BUY_STOP) sets up a bearish
    reversal, sweeping below price a bullish one. `reversal_level` is the
    close of the sweep bar in both directions.
    """
    target_kind: ZoneKind
    ts: int
    sweep_level: float         # Extreme of the sweep bar beyond the level
    liquidity_level: float     # Level that was taken
    reversal_level: float
    is_valid: bool

    @property
    def direction(self) -> Bias:
        return self.target_kind.bias

    def __repr__(self) -> str:
        status = "VALID" if self.is_valid else "INVALID"
        return (
            f"Grab({self.target_kind.value}, level={self.liquidity_level:.5f}, "
            f"sweep={self.sweep_level:.5f}, {status})"
        )
