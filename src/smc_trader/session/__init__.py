"""Trading session filters."""
from .kill_zone import AlwaysOpenSession, KillZone, KillZoneFilter, SessionFilter

__all__ = ["SessionFilter", "AlwaysOpenSession", "KillZone", "KillZoneFilter"]
