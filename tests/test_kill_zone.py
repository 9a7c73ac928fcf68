"""Kill-zone session windows."""
from datetime import datetime, time

import pytest
import pytz

from smc_trader.config.strategy import DEFAULT_KILL_ZONES, KillZoneSettings
from smc_trader.session import AlwaysOpenSession, KillZone, KillZoneFilter

NY_AM = KillZone("NY_AM", time(7, 0), time(10, 0))


def utc(*args) -> datetime:
    return pytz.UTC.localize(datetime(*args))


@pytest.mark.parametrize("moment, inside", [
    (utc(2024, 7, 15, 11, 0), True),     # 07:00 EDT, start inclusive
    (utc(2024, 7, 15, 13, 59), True),
    (utc(2024, 7, 15, 14, 0), False),    # 10:00 EDT, end exclusive
    (utc(2024, 7, 15, 10, 59), False),
])
def test_window_bounds(moment, inside):
    assert NY_AM.contains(moment) is inside


def test_daylight_saving_shift():
    assert NY_AM.contains(utc(2024, 7, 15, 11, 30))
    # 06:30 EST in winter
    assert not NY_AM.contains(utc(2024, 1, 15, 11, 30))
    assert NY_AM.contains(utc(2024, 1, 15, 12, 30))


def test_window_wrapping_midnight():
    asia = KillZone("Asia", time(22, 0), time(2, 0), timezone="UTC")

    assert asia.contains(utc(2024, 3, 1, 23, 0))
    assert asia.contains(utc(2024, 3, 2, 1, 59))
    assert not asia.contains(utc(2024, 3, 2, 2, 0))
    assert not asia.contains(utc(2024, 3, 2, 12, 0))


def test_naive_datetime_rejected():
    with pytest.raises(ValueError):
        NY_AM.contains(datetime(2024, 7, 15, 11, 30))


def test_from_settings():
    zone = KillZone.from_settings(KillZoneSettings("London_Open", "02:00", "05:00"))
    assert zone.start == time(2, 0)
    assert zone.end == time(5, 0)
    assert zone.timezone == "America/New_York"


def test_filter_uses_clock():
    now = {"value": utc(2024, 7, 15, 7, 0)}   # 03:00 EDT
    kz_filter = KillZoneFilter.from_settings(DEFAULT_KILL_ZONES, clock=lambda: now["value"])

    assert kz_filter.is_in_kill_zone()
    assert kz_filter.active_zone().name == "London_Open"

    now["value"] = utc(2024, 7, 15, 10, 0)    # 06:00 EDT
    assert not kz_filter.is_in_kill_zone()
    assert kz_filter.active_zone() is None

    assert kz_filter.active_zone(utc(2024, 7, 15, 12, 0)).name == "NY_AM"


def test_empty_filter_never_open():
    assert not KillZoneFilter([], clock=lambda: utc(2024, 7, 15, 12, 0)).is_in_kill_zone()


def test_always_open():
    assert AlwaysOpenSession().is_in_kill_zone()
