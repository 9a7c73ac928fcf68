"""
Position Lifecycle Manager

Drives managed trades through breakeven, partial take-profit and trailing
based on profit measured in R (multiples of the initial stop distance).

Per management pass and trade:
1. Position gone at the broker: mark CLOSED and drop the trade
2. R >= break_even_after_r: move the stop to entry (once)
3. R >= risk_reward_ratio / 2: close `partial_tp_percent` of the original
   size, capped at the remaining volume (once)
4. Breakeven active and R >= risk_reward_ratio: move the stop to entry +
   `trailing_profit_fraction` of the current profit (once, never loosening
   the stop)

A broker rejection leaves the trade untouched, so the same condition is
retried on the next pass.
"""

import time
from typing import Callable, Dict, List, Optional

from smc_trader.config.strategy import TradeManagementSettings
from smc_trader.core.bars import SymbolInfo
from smc_trader.core.logger import get_logger
from smc_trader.utils.units import normalize_lots
from .broker import BrokerAdapter, OrderDirection, PositionInfo
from .models import R_EPSILON, ManagedTrade, TradeEvent

logger = get_logger(__name__)


class PositionLifecycleManager:
    """
    Owns the set of managed trades for one symbol.

    Usage:
        manager = PositionLifecycleManager(broker, settings, risk_reward_ratio=2.0)
        manager.register_trade(ticket, entry=1.1000, stop_loss=1.0950, take_profit=1.1100)
        manager.manage_open_trades()   # once per tick
    """

    def __init__(
        self,
        broker: BrokerAdapter,
        settings: Optional[TradeManagementSettings] = None,
        risk_reward_ratio: float = 2.0,
        symbol_info: Optional[SymbolInfo] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.broker = broker
        self.settings = settings or TradeManagementSettings()
        self.risk_reward_ratio = risk_reward_ratio
        self.symbol_info = symbol_info
        self.clock = clock
        self.trades: Dict[int, ManagedTrade] = {}

    # ========================================================================
    # REGISTRATION
    # ========================================================================

    def _partial_lots(self, lot_size: float) -> float:
        lots = lot_size * self.settings.partial_tp_percent / 100.0
        if self.symbol_info is not None:
            return normalize_lots(lots, self.symbol_info)
        return lots

    def _risk_amount(self, distance: float, lot_size: float) -> float:
        """Loss at the initial stop, in account currency when symbol info is known."""
        if self.symbol_info is not None:
            return distance / self.symbol_info.effective_tick_size * self.symbol_info.tick_value * lot_size
        return distance * lot_size

    def register_trade(
        self,
        ticket: int,
        entry: float,
        stop_loss: float,
        take_profit: Optional[float],
        lot_size: Optional[float] = None,
        direction: Optional[OrderDirection] = None,
        symbol: Optional[str] = None,
    ) -> Optional[ManagedTrade]:
        """
        Start managing a freshly opened position.

        Volume, direction and symbol default to the broker's view of the
        position; without a position and a `lot_size` nothing is registered.

        Raises:
            ValueError: if the stop equals the entry (no risk distance)
        """
        if stop_loss == entry:
            raise ValueError(f"Trade #{ticket}: stop loss equals entry {entry}")

        if lot_size is None or symbol is None:
            position = self.broker.get_position(ticket)
            if position is None and lot_size is None:
                logger.warning(f"Cannot register #{ticket}: position not found")
                return None
            if position is not None:
                lot_size = position.volume if lot_size is None else lot_size
                direction = direction or position.direction
                symbol = symbol or position.symbol

        if direction is None:
            direction = OrderDirection.BUY if stop_loss < entry else OrderDirection.SELL

        trade = ManagedTrade(
            ticket=ticket,
            symbol=symbol or (self.symbol_info.symbol if self.symbol_info else ""),
            direction=direction,
            open_time=self.clock(),
            open_price=entry,
            stop_loss=stop_loss,
            original_stop_loss=stop_loss,
            take_profit=take_profit,
            lot_size=lot_size,
            partial_lot_size=self._partial_lots(lot_size),
            risk_amount=self._risk_amount(abs(entry - stop_loss), lot_size),
        )
        self.trades[ticket] = trade
        logger.info(f"Registered {trade}")
        return trade

    def load_open_positions(self) -> int:
        """
        Rehydrate managed trades from the broker's open positions.

        A stop at entry marks breakeven as done. A stop strictly beyond
        entry can only come from trailing, which runs after the partial
        take-profit threshold, so breakeven, partial and trailing are all
        marked done. In both cases the 1R distance is rebuilt from the
        take-profit and the risk:reward ratio. Positions without a usable
        stop are left unmanaged.

        Returns:
            Number of trades added
        """
        added = 0
        for ticket in self.broker.list_open_positions():
            if ticket in self.trades:
                continue
            position = self.broker.get_position(ticket)
            if position is None:
                continue
            trade = self._rehydrate(position)
            if trade is None:
                logger.warning(f"Position #{ticket} has no usable stop loss, not managed")
                continue
            self.trades[ticket] = trade
            added += 1
            logger.info(f"Rehydrated {trade}")
        return added

    def _rehydrate(self, position: PositionInfo) -> Optional[ManagedTrade]:
        if not position.stop_loss:
            return None

        sign = position.direction.sign
        locked_in = (position.stop_loss - position.open_price) * sign
        at_breakeven = locked_in >= 0
        trailed = locked_in > 0
        original_stop = position.stop_loss
        if at_breakeven:
            if not position.take_profit:
                return None
            distance = abs(position.take_profit - position.open_price) / self.risk_reward_ratio
            original_stop = position.open_price - sign * distance

        trade = ManagedTrade(
            ticket=position.ticket,
            symbol=position.symbol,
            direction=position.direction,
            open_time=self.clock(),
            open_price=position.open_price,
            stop_loss=position.stop_loss,
            original_stop_loss=original_stop,
            take_profit=position.take_profit,
            lot_size=position.volume,
            partial_lot_size=self._partial_lots(position.volume),
            risk_amount=self._risk_amount(abs(position.open_price - original_stop), position.volume),
        )
        if at_breakeven:
            trade.is_break_even = True
            trade.apply(TradeEvent.BREAKEVEN_SET)
        if trailed:
            trade.is_partial_closed = True
            trade.apply(TradeEvent.PARTIAL_TAKEN)
            trade.is_trailing_stopped = True
            trade.apply(TradeEvent.TRAILING_SET)
        return trade

    # ========================================================================
    # MANAGEMENT PASS
    # ========================================================================

    def manage_open_trades(self) -> None:
        """One management pass over every managed trade."""
        for ticket in list(self.trades):
            trade = self.trades[ticket]
            position = self.broker.get_position(ticket)
            if position is None:
                trade.apply(TradeEvent.POSITION_CLOSED)
                del self.trades[ticket]
                logger.info(f"#{ticket} closed, no longer managed")
                continue
            self._manage(trade, position)

    def _manage(self, trade: ManagedTrade, position: PositionInfo) -> None:
        r = trade.r_multiple(position.current_price)

        if not trade.is_break_even and r >= self.settings.break_even_after_r - R_EPSILON:
            self._set_breakeven(trade, r)

        if not trade.is_partial_closed and r >= self.risk_reward_ratio / 2 - R_EPSILON:
            self._take_partial(trade, position, r)

        if trade.is_break_even and not trade.is_trailing_stopped \
                and r >= self.risk_reward_ratio - R_EPSILON:
            self._set_trailing(trade, position, r)

    def _set_breakeven(self, trade: ManagedTrade, r: float) -> None:
        if not self.broker.modify_stop_loss(trade.ticket, trade.open_price):
            logger.warning(f"#{trade.ticket}: breakeven modify rejected at {r:.2f}R, retrying next pass")
            return
        trade.stop_loss = trade.open_price
        trade.is_break_even = True
        trade.apply(TradeEvent.BREAKEVEN_SET)
        logger.info(f"#{trade.ticket}: stop to breakeven {trade.open_price:.5f} at {r:.2f}R")

    def _take_partial(self, trade: ManagedTrade, position: PositionInfo, r: float) -> None:
        lots = min(trade.partial_lot_size, position.volume)
        if lots <= 0:
            logger.debug(f"#{trade.ticket}: partial size rounds to zero, skipped")
            return
        if not self.broker.partial_close(trade.ticket, lots):
            logger.warning(f"#{trade.ticket}: partial close of {lots} rejected at {r:.2f}R, retrying next pass")
            return
        trade.lot_size = position.volume - lots
        trade.is_partial_closed = True
        trade.apply(TradeEvent.PARTIAL_TAKEN)
        logger.info(f"#{trade.ticket}: closed {lots} lots at {r:.2f}R")

    def _set_trailing(self, trade: ManagedTrade, position: PositionInfo, r: float) -> None:
        profit = trade.profit_distance(position.current_price)
        sign = trade.direction.sign
        new_stop = trade.open_price + sign * self.settings.trailing_profit_fraction * profit
        if (new_stop - trade.stop_loss) * sign <= 0:
            # Stops only ever tighten
            trade.is_trailing_stopped = True
            trade.apply(TradeEvent.TRAILING_SET)
            logger.info(f"#{trade.ticket}: trailing stop {new_stop:.5f} would loosen {trade.stop_loss:.5f}, kept")
            return
        if not self.broker.modify_stop_loss(trade.ticket, new_stop):
            logger.warning(f"#{trade.ticket}: trailing modify rejected at {r:.2f}R, retrying next pass")
            return
        trade.stop_loss = new_stop
        trade.is_trailing_stopped = True
        trade.apply(TradeEvent.TRAILING_SET)
        logger.info(f"#{trade.ticket}: trailing stop to {new_stop:.5f} at {r:.2f}R")

    # ========================================================================
    # QUERIES
    # ========================================================================

    def open_trades(self) -> List[ManagedTrade]:
        return list(self.trades.values())

    def get_trade(self, ticket: int) -> Optional[ManagedTrade]:
        return self.trades.get(ticket)


__all__ = ["PositionLifecycleManager"]
