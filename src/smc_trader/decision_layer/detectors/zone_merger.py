"""
Zone Merger - Collapses overlapping zones of the same kind.
"""

from typing import Dict, Iterable, List

from ..enums import ZoneKind
from ..models import Zone


def _union(a: Zone, b: Zone) -> Zone:
    return Zone(
        kind=a.kind,
        timeframe=a.timeframe,
        upper=max(a.upper, b.upper),
        lower=min(a.lower, b.lower),
        formation_ts=min(a.formation_ts, b.formation_ts),
        strength=max(a.strength, b.strength, key=lambda s: s.value),
        touch_count=max(a.touch_count, b.touch_count),
        is_fresh=a.is_fresh and b.is_fresh,
        is_broken=a.is_broken or b.is_broken,
        is_swept=a.is_swept or b.is_swept,
        level=a.level,
        size_points=max(a.size_points, b.size_points),
    )


def merge_zones(zones: Iterable[Zone]) -> List[Zone]:
    """
    Merge overlapping zones of the same kind.

    Zones are swept in order of their lower bound, so chains of overlaps
    collapse into one zone and the output holds no overlapping same-kind
    pair. Merging the output again returns an equal set.

    Returns:
        Merged zones, newest formation first
    """
    by_kind: Dict[ZoneKind, List[Zone]] = {}
    for zone in zones:
        by_kind.setdefault(zone.kind, []).append(zone)

    merged: List[Zone] = []
    for kind_zones in by_kind.values():
        kind_zones.sort(key=lambda z: (z.lower, z.upper))
        current = kind_zones[0]
        for zone in kind_zones[1:]:
            if current.overlaps(zone):
                current = _union(current, zone)
            else:
                merged.append(current)
                current = zone
        merged.append(current)

    merged.sort(key=lambda z: z.formation_ts, reverse=True)
    return merged
