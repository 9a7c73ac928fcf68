"""
Managed trade model and lifecycle state machine.

States advance through milestones; the state is the most advanced one
reached so far. Breakeven and partial take-profit are independent, trailing
needs breakeven (enforced by the manager), CLOSED is reachable from every
state and terminal.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from .broker import OrderDirection

# Float tolerance for R thresholds.
R_EPSILON = 1e-9


class TradeState(Enum):
    NEW = "new"
    BREAKEVEN = "breakeven"
    PARTIAL_TP = "partial_tp"
    TRAILING = "trailing"
    CLOSED = "closed"


class TradeEvent(Enum):
    BREAKEVEN_SET = "breakeven_set"
    PARTIAL_TAKEN = "partial_taken"
    TRAILING_SET = "trailing_set"
    POSITION_CLOSED = "position_closed"


class InvalidTransitionError(Exception):
    """Raised for an event that is not allowed in the current state."""


TRANSITIONS: Dict[Tuple[TradeState, TradeEvent], TradeState] = {
    (TradeState.NEW, TradeEvent.BREAKEVEN_SET): TradeState.BREAKEVEN,
    (TradeState.NEW, TradeEvent.PARTIAL_TAKEN): TradeState.PARTIAL_TP,
    (TradeState.NEW, TradeEvent.POSITION_CLOSED): TradeState.CLOSED,

    (TradeState.BREAKEVEN, TradeEvent.PARTIAL_TAKEN): TradeState.PARTIAL_TP,
    (TradeState.BREAKEVEN, TradeEvent.TRAILING_SET): TradeState.TRAILING,
    (TradeState.BREAKEVEN, TradeEvent.POSITION_CLOSED): TradeState.CLOSED,

    (TradeState.PARTIAL_TP, TradeEvent.BREAKEVEN_SET): TradeState.PARTIAL_TP,
    (TradeState.PARTIAL_TP, TradeEvent.TRAILING_SET): TradeState.TRAILING,
    (TradeState.PARTIAL_TP, TradeEvent.POSITION_CLOSED): TradeState.CLOSED,

    (TradeState.TRAILING, TradeEvent.PARTIAL_TAKEN): TradeState.TRAILING,
    (TradeState.TRAILING, TradeEvent.POSITION_CLOSED): TradeState.CLOSED,
}


def transition(state: TradeState, event: TradeEvent) -> TradeState:
    """
    Next state for `event`.

    Raises:
        InvalidTransitionError: if the event is not allowed in `state`
    """
    try:
        return TRANSITIONS[(state, event)]
    except KeyError:
        raise InvalidTransitionError(f"{event.value} not allowed in state {state.value}") from None


@dataclass
class ManagedTrade:
    """
    A position under lifecycle management.

    `original_stop_loss` fixes the 1R distance; `stop_loss` follows the
    broker-side stop as it is moved.
    """
    ticket: int
    symbol: str
    direction: OrderDirection
    open_time: float
    open_price: float
    stop_loss: float
    original_stop_loss: float
    take_profit: Optional[float]
    lot_size: float
    partial_lot_size: float
    risk_amount: float
    state: TradeState = TradeState.NEW
    is_break_even: bool = False
    is_partial_closed: bool = False
    is_trailing_stopped: bool = False

    @property
    def risk_distance(self) -> float:
        return abs(self.open_price - self.original_stop_loss)

    @property
    def is_closed(self) -> bool:
        return self.state is TradeState.CLOSED

    def profit_distance(self, price: float) -> float:
        """Signed price move in the trade's favour."""
        return (price - self.open_price) * self.direction.sign

    def r_multiple(self, price: float) -> float:
        """Profit in multiples of the initial risk; 0.0 for a zero-risk trade."""
        if self.risk_distance == 0:
            return 0.0
        return self.profit_distance(price) / self.risk_distance

    def apply(self, event: TradeEvent) -> TradeState:
        self.state = transition(self.state, event)
        return self.state

    def __repr__(self) -> str:
        return (
            f"Trade(#{self.ticket} {self.direction.value} {self.lot_size} {self.symbol} "
            f"@ {self.open_price:.5f}, SL={self.stop_loss:.5f}, {self.state.value})"
        )


__all__ = [
    "R_EPSILON",
    "TradeState",
    "TradeEvent",
    "InvalidTransitionError",
    "TRANSITIONS",
    "transition",
    "ManagedTrade",
]
