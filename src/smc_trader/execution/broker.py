"""
Broker adapter interface.

The lifecycle manager and the trading session talk to the broker only
through `BrokerAdapter`. Rejections are reported as False/None, never as
exceptions, so a failed call can simply be retried on the next pass.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from smc_trader.decision_layer.enums import Bias


class OrderDirection(Enum):
    BUY = "buy"
    SELL = "sell"

    @property
    def sign(self) -> int:
        return 1 if self is OrderDirection.BUY else -1

    @classmethod
    def from_bias(cls, bias: Bias) -> "OrderDirection":
        if bias is Bias.BULLISH:
            return cls.BUY
        if bias is Bias.BEARISH:
            return cls.SELL
        raise ValueError("A neutral bias has no order direction")


@dataclass(frozen=True)
class PositionInfo:
    """Broker-side view of an open position."""
    ticket: int
    symbol: str
    direction: OrderDirection
    volume: float
    open_price: float
    stop_loss: Optional[float]
    take_profit: Optional[float]
    current_price: float            # Mark price used for profit in R


class BrokerAdapter(ABC):

    @abstractmethod
    def open_position(
        self,
        symbol: str,
        direction: OrderDirection,
        lots: float,
        price: float,
        stop_loss: float,
        take_profit: float
    ) -> Optional[int]:
        """Open a market position; returns the ticket or None when rejected."""

    @abstractmethod
    def modify_stop_loss(self, ticket: int, new_stop_loss: float) -> bool:
        """Move the stop of an open position."""

    @abstractmethod
    def partial_close(self, ticket: int, lots: float) -> bool:
        """Close part of an open position."""

    @abstractmethod
    def list_open_positions(self) -> List[int]:
        """Tickets of every open position."""

    @abstractmethod
    def get_position(self, ticket: int) -> Optional[PositionInfo]:
        """Position details, or None once the position is gone."""

    @abstractmethod
    def account_balance(self) -> float:
        """Balance in account currency, used for risk sizing."""


__all__ = ["OrderDirection", "PositionInfo", "BrokerAdapter"]
