"""
Point-of-interest plugins.

Architecture:
- Plugins contain ONLY detection logic (no data structures)
- All data models are imported from models/
- Each plugin follows the POIPlugin interface:
  - scan() - Pure detection over a bar window
  - detect() - Full rescan for a timeframe
  - is_in_relevant_zone() / has_fresh_zone() - Queries used by the cascade

Separation of Concerns:
  models/    → Data structures (WHAT the data is)
  plugins/   → Business logic (HOW to detect)
  detectors/ → Helper algorithms (pivot detection, zone merging)
"""

from .base import POIPlugin
from .order_block_plugin import OrderBlockPlugin
from .fvg_plugin import FVGPlugin
from .supply_demand_plugin import SupplyDemandPlugin
from .liquidity_plugin import LiquidityPlugin

__all__ = [
    # Base class
    "POIPlugin",

    # Plugin implementations
    "OrderBlockPlugin",    # Institutional blocks
    "FVGPlugin",           # Fair Value Gaps
    "SupplyDemandPlugin",  # Supply/demand zones
    "LiquidityPlugin",     # Equal highs/lows, stops, grabs
]
