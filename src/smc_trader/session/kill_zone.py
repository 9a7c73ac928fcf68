"""
Session filter - kill-zone time windows.

Kill zones are daily windows defined in a market timezone (New York by
default). The current UTC time is converted to each zone's timezone with
pytz, so DST shifts are handled by the tz database.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, time
from typing import Callable, Iterable, List, Optional

import pytz

from smc_trader.config.strategy import KillZoneSettings
from smc_trader.core.logger import get_logger

logger = get_logger(__name__)


class SessionFilter(ABC):
    """Answers whether the market is currently inside a trading window."""

    @abstractmethod
    def is_in_kill_zone(self) -> bool:
        """True while trading is allowed."""


class AlwaysOpenSession(SessionFilter):
    """Filter for applications without session rules."""

    def is_in_kill_zone(self) -> bool:
        return True


def _parse_hhmm(value: str) -> time:
    hour, minute = value.split(":")
    return time(int(hour), int(minute))


@dataclass(frozen=True)
class KillZone:
    """
    Daily window [start, end) in `timezone`.

    A window whose end is before its start wraps past midnight.
    """
    name: str
    start: time
    end: time
    timezone: str = "America/New_York"

    @classmethod
    def from_settings(cls, settings: KillZoneSettings) -> "KillZone":
        return cls(
            name=settings.name,
            start=_parse_hhmm(settings.start),
            end=_parse_hhmm(settings.end),
            timezone=settings.timezone,
        )

    def contains(self, moment: datetime) -> bool:
        """
        Check an aware datetime against the window.

        Raises:
            ValueError: for naive datetimes
        """
        if moment.tzinfo is None:
            raise ValueError("KillZone.contains() needs a timezone-aware datetime")

        local = moment.astimezone(pytz.timezone(self.timezone)).time()
        if self.start <= self.end:
            return self.start <= local < self.end
        return local >= self.start or local < self.end


def _utc_now() -> datetime:
    return datetime.now(pytz.UTC)


class KillZoneFilter(SessionFilter):
    """
    Session filter over a set of kill zones.

    Usage:
        kz_filter = KillZoneFilter.from_settings(config.session.kill_zones)
        if kz_filter.is_in_kill_zone():
            ...
    """

    def __init__(
        self,
        kill_zones: Iterable[KillZone],
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.kill_zones: List[KillZone] = list(kill_zones)
        self.clock = clock or _utc_now
        self._last_zone: Optional[str] = None

    @classmethod
    def from_settings(
        cls,
        kill_zones: Iterable[KillZoneSettings],
        clock: Optional[Callable[[], datetime]] = None
    ) -> "KillZoneFilter":
        return cls([KillZone.from_settings(kz) for kz in kill_zones], clock=clock)

    def active_zone(self, moment: Optional[datetime] = None) -> Optional[KillZone]:
        moment = moment or self.clock()
        for zone in self.kill_zones:
            if zone.contains(moment):
                return zone
        return None

    def is_in_kill_zone(self) -> bool:
        zone = self.active_zone()
        name = zone.name if zone else None
        if name != self._last_zone:
            if name:
                logger.info(f"Entered kill zone {name}")
            else:
                logger.info(f"Left kill zone {self._last_zone}")
            self._last_zone = name
        return zone is not None


__all__ = ["SessionFilter", "AlwaysOpenSession", "KillZone", "KillZoneFilter"]
