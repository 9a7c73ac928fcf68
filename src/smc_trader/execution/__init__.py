"""Order execution: broker interface and position lifecycle."""
from .broker import BrokerAdapter, OrderDirection, PositionInfo
from .models import InvalidTransitionError, ManagedTrade, TradeEvent, TradeState, transition
from .position_manager import PositionLifecycleManager

__all__ = [
    "BrokerAdapter",
    "OrderDirection",
    "PositionInfo",
    "ManagedTrade",
    "TradeState",
    "TradeEvent",
    "InvalidTransitionError",
    "transition",
    "PositionLifecycleManager",
]
