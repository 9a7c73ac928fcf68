"""
Multi-Timeframe Fusion Cascade

Combines structure, Wyckoff phase and point-of-interest detection across
three timeframe tiers into one entry decision.

Cascade (once per new bar on the lowest LTF timeframe):
1. HTF: per timeframe, uptrend + (late accumulation | markup) is bullish,
   downtrend + (late distribution | markdown) bearish. The last non-neutral
   timeframe evaluated (highest to lowest) sets the bias. Price inside a
   bias-aligned supply/demand zone, order block or FVG on any HTF timeframe
   sets `in_htf_poi`.
2. MTF (bias set): the same zone test on timeframes whose structure aligns
   with the bias sets `in_mtf_poi`.
3. LTF (in a POI): liquidity grab, BOS, CHoCH and a fresh FVG/order block
   aligned with the bias, OR-ed across timeframes; stops at the first
   timeframe carrying all four.
4. Entry: bias set, in a POI, confirmation triple (grab, CHoCH, BOS), and
   inside a kill zone or overridden by that triple.
5. Levels: stop beyond the grab sweep (else the last swing) plus buffer;
   target at the nearest untouched opposing liquidity (else fixed R:R);
   lots from the account risk amount.
"""

from typing import List, Optional

from smc_trader.config.strategy import StrategyConfig
from smc_trader.core.bars import BarProvider
from smc_trader.core.logger import get_logger
from smc_trader.session import AlwaysOpenSession, SessionFilter
from smc_trader.utils.units import calculate_lot_size, points_to_price
from .enums import Bias, MarketPhase, MarketStructure
from .models import CascadeResult, TradeSignal
from .plugins import FVGPlugin, LiquidityPlugin, OrderBlockPlugin, SupplyDemandPlugin, POIPlugin
from .structure_classifier import StructureClassifier
from .wyckoff_classifier import WyckoffClassifier

logger = get_logger(__name__)

BULLISH_PHASES = (MarketPhase.LATE_ACCUMULATION, MarketPhase.MARKUP)
BEARISH_PHASES = (MarketPhase.LATE_DISTRIBUTION, MarketPhase.MARKDOWN)


def htf_bias(structure: MarketStructure, phase: MarketPhase) -> Bias:
    """Bias of a single higher timeframe."""
    if structure is MarketStructure.UPTREND and phase in BULLISH_PHASES:
        return Bias.BULLISH
    if structure is MarketStructure.DOWNTREND and phase in BEARISH_PHASES:
        return Bias.BEARISH
    return Bias.NEUTRAL


class FusionCascade:
    """
    Hierarchical HTF -> MTF -> LTF decision engine for one symbol.

    Holds the only cross-tick decision state: the last seen trigger bar,
    the current bias, and (inside the classifiers) structure/phase
    hysteresis and BOS/CHoCH de-duplication.

    Usage:
        cascade = FusionCascade("EURUSD", config, provider, session_filter)
        result = cascade.run(account_balance=10_000)
        if result and result.signal:
            ...
    """

    def __init__(
        self,
        symbol: str,
        config: StrategyConfig,
        provider: BarProvider,
        session_filter: Optional[SessionFilter] = None,
    ):
        self.symbol = symbol
        self.config = config
        self.provider = provider
        self.session_filter = session_filter or AlwaysOpenSession()

        self.structure = StructureClassifier(symbol, provider, config.structure)
        self.wyckoff = WyckoffClassifier(symbol, provider, config.wyckoff)
        self.order_blocks = OrderBlockPlugin(symbol, provider, config.order_blocks)
        self.fvg = FVGPlugin(symbol, provider, config.fvg)
        self.supply_demand = SupplyDemandPlugin(symbol, provider, config.supply_demand)
        self.liquidity = LiquidityPlugin(symbol, provider, config.liquidity)

        self.trigger_timeframe = config.timeframes.lowest
        self.last_bar_ts: Optional[int] = None
        self.bias = Bias.NEUTRAL
        self.latest_result: Optional[CascadeResult] = None

        # Zone plugins used for POI membership, in evaluation order
        self.poi_plugins: List[POIPlugin] = [self.supply_demand, self.order_blocks, self.fvg]

    # ========================================================================
    # NEW-BAR GATE
    # ========================================================================

    def is_new_bar(self) -> bool:
        """True once per new bar on the trigger timeframe."""
        bar = self.provider.get_bar(self.symbol, self.trigger_timeframe, 0)
        if bar is None or bar.ts == self.last_bar_ts:
            return False
        self.last_bar_ts = bar.ts
        return True

    def run(self, account_balance: float) -> Optional[CascadeResult]:
        """Evaluate the cascade if the trigger timeframe has a new bar."""
        if not self.is_new_bar():
            return None
        return self.evaluate(account_balance)

    # ========================================================================
    # STAGES
    # ========================================================================

    def evaluate(self, account_balance: float) -> CascadeResult:
        """Run every stage unconditionally (no new-bar gate)."""
        result = CascadeResult(ts=self.last_bar_ts or 0)

        self._htf_stage(result)
        if result.bias is not Bias.NEUTRAL:
            self._mtf_stage(result)
        if result.in_poi:
            self._ltf_stage(result)

        result.in_kill_zone = self.session_filter.is_in_kill_zone()
        result.entry = (
            result.bias is not Bias.NEUTRAL
            and result.in_poi
            and (result.in_kill_zone or result.confirmation_triple)
            and result.confirmation_triple
        )

        if result.entry:
            result.signal = self._build_signal(result, account_balance)
            logger.info(f"{self.symbol}: entry decision {result.summary()} -> {result.signal}")
        else:
            logger.debug(f"{self.symbol}: {result.summary()}")

        self.latest_result = result
        return result

    def _in_poi(self, timeframe: str, bias: Bias) -> bool:
        return any(plugin.is_in_relevant_zone(timeframe, bias) for plugin in self.poi_plugins)

    def _htf_stage(self, result: CascadeResult) -> None:
        bias = Bias.NEUTRAL
        for tf in self.config.timeframes.htf:
            structure = self.structure.classify(tf)
            phase = self.wyckoff.determine_market_phase(tf)
            result.structures[tf] = structure
            result.phases[tf] = phase

            tf_bias = htf_bias(structure, phase)
            if tf_bias is not Bias.NEUTRAL:
                bias = tf_bias

        if bias is not self.bias:
            logger.info(f"{self.symbol}: bias {self.bias.value} -> {bias.value}")
        self.bias = bias
        result.bias = bias

        if bias is not Bias.NEUTRAL:
            result.in_htf_poi = any(self._in_poi(tf, bias) for tf in self.config.timeframes.htf)

    def _mtf_stage(self, result: CascadeResult) -> None:
        for tf in self.config.timeframes.mtf:
            structure = self.structure.classify(tf)
            result.structures[tf] = structure
            if structure.aligns_with(result.bias) and not result.in_mtf_poi:
                result.in_mtf_poi = self._in_poi(tf, result.bias)

    def _ltf_stage(self, result: CascadeResult) -> None:
        bias = result.bias
        for tf in self.config.timeframes.ltf:
            grab = self.liquidity.has_valid_grab(tf, bias)
            bos = self.structure.detect_bos(tf, bias)
            choch = self.structure.detect_choch(tf, bias)
            fresh = self.fvg.has_fresh_zone(tf, bias) or self.order_blocks.has_fresh_zone(tf, bias)

            result.liquidity_grab = result.liquidity_grab or grab
            result.bos = result.bos or bos
            result.choch = result.choch or choch
            result.fresh_confirmation = result.fresh_confirmation or fresh

            if grab and bos and choch:
                if result.confirmation_timeframe is None or fresh:
                    result.confirmation_timeframe = tf
                if fresh:
                    break

        if result.confirmation_timeframe is None and self.config.timeframes.ltf:
            result.confirmation_timeframe = self.config.timeframes.ltf[-1]

    # ========================================================================
    # LEVELS
    # ========================================================================

    def _build_signal(self, result: CascadeResult, account_balance: float) -> Optional[TradeSignal]:
        bias = result.bias
        tf = result.confirmation_timeframe or self.trigger_timeframe
        bar = self.provider.get_bar(self.symbol, tf, 0)
        if bar is None:
            return None

        info = self.provider.symbol_info(self.symbol)
        entry = bar.close
        buffer = points_to_price(self.config.risk.sl_buffer_points, info.point_size)
        sign = bias.sign

        stop_loss = None
        grab = self.liquidity.latest_grab(tf, bias)
        if grab is not None:
            stop_loss = grab.sweep_level - sign * buffer
        else:
            swing = self.structure.last_swing(tf, bias)
            if swing is not None:
                stop_loss = swing.value - sign * buffer

        if stop_loss is None or (entry - stop_loss) * sign <= 0:
            logger.warning(f"{self.symbol}: no valid stop for {bias.value} entry at {entry}, signal cancelled")
            return None
        distance = abs(entry - stop_loss)

        take_profit = self.liquidity.nearest_target_level(tf, bias, entry)
        if take_profit is None:
            take_profit = entry + sign * self.config.risk.risk_reward_ratio * distance

        risk_amount = account_balance * self.config.risk.risk_percent / 100.0
        lots = calculate_lot_size(risk_amount, distance, info)
        if lots <= 0:
            logger.warning(f"{self.symbol}: lot size rounds to zero (risk {risk_amount:.2f}), signal cancelled")
            return None

        return TradeSignal(
            symbol=self.symbol,
            direction=bias,
            entry_price=entry,
            stop_loss=stop_loss,
            take_profit=take_profit,
            lot_size=lots,
            timeframe=tf,
            ts=bar.ts,
        )


__all__ = ["FusionCascade", "htf_bias"]
