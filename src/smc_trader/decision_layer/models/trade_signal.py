"""
TradeSignal and CascadeResult - Output of the fusion cascade.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

from ..enums import Bias, MarketPhase, MarketStructure


@dataclass(frozen=True)
class TradeSignal:
    """
    Entry signal with fully computed levels.

    A bullish direction means buy.
    """
    symbol: str
    direction: Bias
    entry_price: float
    stop_loss: float
    take_profit: float
    lot_size: float
    timeframe: str             # Confirmation timeframe
    ts: int                    # Bar that fired the signal

    @property
    def is_buy(self) -> bool:
        return self.direction is Bias.BULLISH

    @property
    def stop_distance(self) -> float:
        return abs(self.entry_price - self.stop_loss)

    @property
    def risk_reward(self) -> float:
        if self.stop_distance == 0:
            return 0.0
        return abs(self.take_profit - self.entry_price) / self.stop_distance

    def __repr__(self) -> str:
        side = "BUY" if self.is_buy else "SELL"
        return (
            f"Signal({side} {self.symbol} {self.lot_size} @ {self.entry_price:.5f}, "
            f"SL={self.stop_loss:.5f}, TP={self.take_profit:.5f})"
        )


@dataclass
class CascadeResult:
    """
    Snapshot of one cascade run.

    Filled stage by stage; later stages stay at their defaults when an
    earlier stage stops the cascade.
    """
    ts: int
    bias: Bias = Bias.NEUTRAL
    structures: Dict[str, MarketStructure] = field(default_factory=dict)
    phases: Dict[str, MarketPhase] = field(default_factory=dict)
    in_htf_poi: bool = False
    in_mtf_poi: bool = False
    liquidity_grab: bool = False
    bos: bool = False
    choch: bool = False
    fresh_confirmation: bool = False
    confirmation_timeframe: Optional[str] = None
    in_kill_zone: bool = False
    entry: bool = False
    signal: Optional[TradeSignal] = None

    @property
    def in_poi(self) -> bool:
        return self.in_htf_poi or self.in_mtf_poi

    @property
    def confirmation_triple(self) -> bool:
        return self.liquidity_grab and self.choch and self.bos

    @property
    def all_confirmations(self) -> bool:
        return self.confirmation_triple and self.fresh_confirmation

    def summary(self) -> str:
        return (
            f"bias={self.bias.value} htf_poi={self.in_htf_poi} mtf_poi={self.in_mtf_poi} "
            f"grab={self.liquidity_grab} bos={self.bos} choch={self.choch} "
            f"fresh={self.fresh_confirmation} kz={self.in_kill_zone} entry={self.entry}"
        )
