"""
Base Plugin Interface

All point-of-interest plugins inherit from this base class.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from smc_trader.core.bars import Bar, BarProvider
from smc_trader.core.logger import get_logger
from ..enums import Bias
from ..models import Zone


class POIPlugin(ABC):
    """
    Base class for point-of-interest detectors.

    One plugin instance serves every timeframe of a symbol. Zones are never
    cached: each query rescans the most recent `lookback` bars, so results
    depend only on the bars the provider currently holds. Subclasses that
    want an incremental variant override `detect()` and keep `scan()` as
    the reference.

    Interface:
    - scan() - Pure detection over a window of bars (newest first)
    - detect() - Rescan the provider window of a timeframe
    - is_in_relevant_zone() - Price inside an active bias-aligned zone
    - has_fresh_zone() - A fresh, active bias-aligned zone exists
    """

    def __init__(
        self,
        symbol: str,
        provider: BarProvider,
        lookback: int,
    ):
        """
        Initialize plugin.

        Args:
            symbol: Trading symbol (e.g., "EURUSD")
            provider: Bar source for every timeframe
            lookback: Bars rescanned per detection call
        """
        self.symbol = symbol
        self.provider = provider
        self.lookback = lookback
        self.logger = get_logger(f"decision_layer.{self.name}")

    @abstractmethod
    def scan(self, bars: List[Bar], timeframe: str) -> List[Zone]:
        """
        Detect zones in a window of bars.

        Args:
            bars: Bars ordered newest first
            timeframe: Timeframe label attached to the zones

        Returns:
            Zones ordered newest formation first
        """

    @property
    def point_size(self) -> float:
        return self.provider.symbol_info(self.symbol).point_size

    def window(self, timeframe: str, count: Optional[int] = None) -> List[Bar]:
        return self.provider.get_window(self.symbol, timeframe, count or self.lookback)

    def detect(self, timeframe: str) -> List[Zone]:
        """Full rescan of the lookback window for `timeframe`."""
        bars = self.window(timeframe)
        zones = self.scan(bars, timeframe)
        self.logger.debug(f"{self.symbol} {timeframe}: {len(zones)} zones from {len(bars)} bars")
        return zones

    def current_price(self, timeframe: str) -> Optional[float]:
        bar = self.provider.get_bar(self.symbol, timeframe, 0)
        return bar.close if bar else None

    def is_in_relevant_zone(
        self,
        timeframe: str,
        bias: Bias,
        price: Optional[float] = None
    ) -> bool:
        """True if `price` (default: latest close) sits inside an active zone aligned with `bias`."""
        if bias is Bias.NEUTRAL:
            return False
        if price is None:
            price = self.current_price(timeframe)
            if price is None:
                return False
        return any(
            zone.bias is bias and zone.is_active and zone.contains(price)
            for zone in self.detect(timeframe)
        )

    def has_fresh_zone(self, timeframe: str, bias: Bias) -> bool:
        if bias is Bias.NEUTRAL:
            return False
        return any(
            zone.bias is bias and zone.is_active and zone.is_fresh
            for zone in self.detect(timeframe)
        )

    def get_statistics(self, timeframe: str) -> Dict[str, Any]:
        zones = self.detect(timeframe)
        return {
            "total_zones": len(zones),
            "active": sum(1 for z in zones if z.is_active),
            "fresh": sum(1 for z in zones if z.is_fresh and z.is_active),
        }

    @property
    def name(self) -> str:
        """Return plugin name."""
        return self.__class__.__name__.replace("Plugin", "")
