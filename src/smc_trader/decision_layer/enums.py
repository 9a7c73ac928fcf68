"""
Enumerations for decision layer components.

Centralized location for all enum types used across the decision layer.
"""

from enum import Enum


# ============================================================================
# BIAS / STRUCTURE ENUMS
# ============================================================================

class Bias(Enum):
    """Directional bias produced by the fusion cascade."""
    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"

    @property
    def sign(self) -> int:
        """+1 for bullish, -1 for bearish, 0 for neutral."""
        if self is Bias.BULLISH:
            return 1
        if self is Bias.BEARISH:
            return -1
        return 0


class MarketStructure(Enum):
    """Swing-based structure classification."""
    NEUTRAL = "neutral"
    UPTREND = "uptrend"
    DOWNTREND = "downtrend"
    ACCUMULATION = "accumulation"
    DISTRIBUTION = "distribution"

    def aligns_with(self, bias: Bias) -> bool:
        """Uptrend/accumulation back a bullish bias, downtrend/distribution a bearish one."""
        if bias is Bias.BULLISH:
            return self in (MarketStructure.UPTREND, MarketStructure.ACCUMULATION)
        if bias is Bias.BEARISH:
            return self in (MarketStructure.DOWNTREND, MarketStructure.DISTRIBUTION)
        return False


# ============================================================================
# WYCKOFF ENUMS
# ============================================================================

class MarketPhase(Enum):
    """Coarse Wyckoff phase label."""
    UNKNOWN = "unknown"
    EARLY_ACCUMULATION = "early_accumulation"
    MID_ACCUMULATION = "mid_accumulation"
    LATE_ACCUMULATION = "late_accumulation"
    MARKUP = "markup"
    EARLY_DISTRIBUTION = "early_distribution"
    MID_DISTRIBUTION = "mid_distribution"
    LATE_DISTRIBUTION = "late_distribution"
    MARKDOWN = "markdown"


class WyckoffEventType(Enum):
    """Point-in-time Wyckoff events, listed in tagging priority order."""
    SELLING_CLIMAX = "selling_climax"
    BUYING_CLIMAX = "buying_climax"
    SPRING = "spring"
    UPTHRUST = "upthrust"
    SIGN_OF_STRENGTH = "sign_of_strength"
    SIGN_OF_WEAKNESS = "sign_of_weakness"

    @property
    def is_accumulation(self) -> bool:
        return self in (
            WyckoffEventType.SELLING_CLIMAX,
            WyckoffEventType.SPRING,
            WyckoffEventType.SIGN_OF_STRENGTH,
        )


# ============================================================================
# ZONE ENUMS
# ============================================================================

class ZoneKind(Enum):
    """Tag of the zone variant."""
    BULLISH_ORDER_BLOCK = "bullish_order_block"
    BEARISH_ORDER_BLOCK = "bearish_order_block"
    BULLISH_FVG = "bullish_fvg"
    BEARISH_FVG = "bearish_fvg"
    DEMAND = "demand"
    SUPPLY = "supply"
    BUY_SIDE = "buy_side"        # Equal highs
    SELL_SIDE = "sell_side"      # Equal lows
    BUY_STOP = "buy_stop"        # Above the window high
    SELL_STOP = "sell_stop"      # Below the window low

    @property
    def bias(self) -> Bias:
        """Direction a trade taken from this zone would have.

        Liquidity resting above price (buy side, buy stops) is the target of
        bullish moves and the fuel for bearish reversals; it maps to BEARISH.
        """
        return _ZONE_BIAS[self]

    @property
    def is_liquidity(self) -> bool:
        return self in (ZoneKind.BUY_SIDE, ZoneKind.SELL_SIDE, ZoneKind.BUY_STOP, ZoneKind.SELL_STOP)

    @property
    def above_price(self) -> bool:
        """Liquidity pools resting above the market."""
        return self in (ZoneKind.BUY_SIDE, ZoneKind.BUY_STOP)


_ZONE_BIAS = {
    ZoneKind.BULLISH_ORDER_BLOCK: Bias.BULLISH,
    ZoneKind.BEARISH_ORDER_BLOCK: Bias.BEARISH,
    ZoneKind.BULLISH_FVG: Bias.BULLISH,
    ZoneKind.BEARISH_FVG: Bias.BEARISH,
    ZoneKind.DEMAND: Bias.BULLISH,
    ZoneKind.SUPPLY: Bias.BEARISH,
    ZoneKind.BUY_SIDE: Bias.BEARISH,
    ZoneKind.SELL_SIDE: Bias.BULLISH,
    ZoneKind.BUY_STOP: Bias.BEARISH,
    ZoneKind.SELL_STOP: Bias.BULLISH,
}


class ZoneStrength(Enum):
    """Supply/demand strength grade. Values order the grades."""
    WEAK = 1
    NORMAL = 2
    STRONG = 3


class SwingKind(Enum):
    HIGH = "high"
    LOW = "low"
