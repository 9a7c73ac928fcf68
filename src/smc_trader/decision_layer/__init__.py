"""
Decision Layer - Multi-Timeframe SMC Analysis

Modules for market analysis and entry decisions:
- StructureClassifier: swing-based trend/range classification, BOS and CHoCH
- WyckoffClassifier: climax/spring/upthrust/SOS/SOW events and market phase
- FusionCascade: HTF bias -> MTF POI -> LTF confirmation -> entry levels

Architecture:
- enums: Centralized enumerations
- models: Pure data structures
- plugins: Point-of-interest detection (order blocks, FVGs, supply/demand, liquidity)
- detectors: Helper algorithms (pivots, zone merging)

Every component reads bars through a BarProvider and rescans its window on
each call; only the classifiers and the cascade keep cross-tick state.
"""

# Main components
from .structure_classifier import StructureClassifier
from .wyckoff_classifier import WyckoffClassifier
from .fusion_cascade import FusionCascade, htf_bias

# Enumerations
from .enums import (
    Bias,
    MarketStructure,
    MarketPhase,
    WyckoffEventType,
    ZoneKind,
    ZoneStrength,
    SwingKind,
)

# Models (all data structures)
from .models import (
    SwingPoint,
    Zone,
    LiquidityGrab,
    WyckoffEvent,
    TradeSignal,
    CascadeResult,
)

# Plugins
from .plugins import (
    POIPlugin,
    OrderBlockPlugin,
    FVGPlugin,
    SupplyDemandPlugin,
    LiquidityPlugin,
)

# Detectors
from .detectors import PivotDetector, find_swing_points, merge_zones

__all__ = [
    # Main components
    "StructureClassifier",
    "WyckoffClassifier",
    "FusionCascade",
    "htf_bias",

    # Enums
    "Bias",
    "MarketStructure",
    "MarketPhase",
    "WyckoffEventType",
    "ZoneKind",
    "ZoneStrength",
    "SwingKind",

    # Models
    "SwingPoint",
    "Zone",
    "LiquidityGrab",
    "WyckoffEvent",
    "TradeSignal",
    "CascadeResult",

    # Plugins
    "POIPlugin",
    "OrderBlockPlugin",
    "FVGPlugin",
    "SupplyDemandPlugin",
    "LiquidityPlugin",

    # Detectors
    "PivotDetector",
    "find_swing_points",
    "merge_zones",
]
