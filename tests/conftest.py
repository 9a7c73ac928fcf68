"""Shared fixtures: bar builders, an in-memory provider and a fake broker."""
import os

os.environ.setdefault("LOGS_DIR", "-")

from typing import Dict, List, Optional, Sequence

import pytest

from smc_trader.config.strategy import StrategyConfig
from smc_trader.core.bars import Bar, InMemoryBarProvider, SymbolInfo
from smc_trader.execution import BrokerAdapter, OrderDirection, PositionInfo
from smc_trader.session import SessionFilter

SYMBOL = "EURUSD"
BAR_SECONDS = 300


def make_bar(ts: int, open_: float, high: float, low: float, close: float, volume: float = 0.0) -> Bar:
    return Bar(ts=ts, open=open_, high=high, low=low, close=close, volume=volume)


def bars_from_ohlc(rows: Sequence[Sequence[float]], start_ts: int = 1_700_000_000) -> List[Bar]:
    """Bars oldest first from (open, high, low, close) rows."""
    return [
        make_bar(start_ts + i * BAR_SECONDS, *row)
        for i, row in enumerate(rows)
    ]


def bars_from_closes(closes: Sequence[float], spread: float = 0.0002, start_ts: int = 1_700_000_000) -> List[Bar]:
    """Doji bars oldest first, each spanning `spread` around its close."""
    return [
        make_bar(start_ts + i * BAR_SECONDS, close, close + spread, close - spread, close)
        for i, close in enumerate(closes)
    ]


def newest_first(bars: Sequence[Bar]) -> List[Bar]:
    return list(reversed(bars))


def swing_path(pivots: Sequence[float], steps: int = 4) -> List[float]:
    """Closes moving linearly between pivot prices, oldest first."""
    path = [pivots[0]]
    for a, b in zip(pivots, pivots[1:]):
        for k in range(1, steps + 1):
            path.append(a + (b - a) * k / steps)
    return path


def swing_bars(pivots: Sequence[float], steps: int = 4) -> List[Bar]:
    """Newest-first window whose swing points sit exactly at `pivots`."""
    return newest_first(bars_from_closes(swing_path(pivots, steps)))


class FixedSession(SessionFilter):
    def __init__(self, open_: bool = True):
        self.open = open_

    def is_in_kill_zone(self) -> bool:
        return self.open


class FakeBroker(BrokerAdapter):
    """In-memory broker; flip the `reject_*` flags to simulate failures."""

    def __init__(self, balance: float = 10_000.0):
        self.balance = balance
        self.positions: Dict[int, PositionInfo] = {}
        self.next_ticket = 1
        self.reject_open = False
        self.reject_modify = False
        self.reject_close = False
        self.modify_calls: List[tuple] = []
        self.close_calls: List[tuple] = []

    def add_position(
        self,
        direction: OrderDirection,
        volume: float,
        open_price: float,
        stop_loss: Optional[float],
        take_profit: Optional[float],
        current_price: Optional[float] = None,
        symbol: str = SYMBOL,
    ) -> int:
        ticket = self.next_ticket
        self.next_ticket += 1
        self.positions[ticket] = PositionInfo(
            ticket=ticket,
            symbol=symbol,
            direction=direction,
            volume=volume,
            open_price=open_price,
            stop_loss=stop_loss,
            take_profit=take_profit,
            current_price=open_price if current_price is None else current_price,
        )
        return ticket

    def set_price(self, ticket: int, price: float) -> None:
        self._replace(ticket, current_price=price)

    def _replace(self, ticket: int, **changes) -> None:
        p = self.positions[ticket]
        data = dict(
            ticket=p.ticket, symbol=p.symbol, direction=p.direction, volume=p.volume,
            open_price=p.open_price, stop_loss=p.stop_loss, take_profit=p.take_profit,
            current_price=p.current_price,
        )
        data.update(changes)
        self.positions[ticket] = PositionInfo(**data)

    def open_position(self, symbol, direction, lots, price, stop_loss, take_profit):
        if self.reject_open:
            return None
        return self.add_position(direction, lots, price, stop_loss, take_profit, symbol=symbol)

    def modify_stop_loss(self, ticket, new_stop_loss):
        self.modify_calls.append((ticket, new_stop_loss))
        if self.reject_modify or ticket not in self.positions:
            return False
        self._replace(ticket, stop_loss=new_stop_loss)
        return True

    def partial_close(self, ticket, lots):
        self.close_calls.append((ticket, lots))
        if self.reject_close or ticket not in self.positions:
            return False
        self._replace(ticket, volume=round(self.positions[ticket].volume - lots, 8))
        return True

    def list_open_positions(self):
        return list(self.positions)

    def get_position(self, ticket):
        return self.positions.get(ticket)

    def account_balance(self):
        return self.balance


@pytest.fixture
def symbol_info() -> SymbolInfo:
    # 5-digit quote: point 0.00001, pip 0.0001
    return SymbolInfo(SYMBOL, point_size=0.00001, tick_value=1.0)


@pytest.fixture
def provider(symbol_info) -> InMemoryBarProvider:
    p = InMemoryBarProvider(maxlen=500)
    p.set_symbol_info(symbol_info)
    return p


@pytest.fixture
def broker() -> FakeBroker:
    return FakeBroker()


@pytest.fixture
def config_dict() -> dict:
    return {
        "timeframes": {"htf": ["H4"], "mtf": ["H1"], "ltf": ["M5"]},
        "session": {"enabled": False},
    }


@pytest.fixture
def config(config_dict) -> StrategyConfig:
    return StrategyConfig.from_dict(config_dict)
