"""
Helper algorithms for the decision layer.
"""

from .pivot_detector import PivotDetector, find_swing_points
from .zone_merger import merge_zones

__all__ = [
    "PivotDetector",
    "find_swing_points",
    "merge_zones",
]
