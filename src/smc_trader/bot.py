"""
Trading Session Orchestrator

One `TradingSession` per symbol owns every piece of cross-tick state:

    1. Validate the config tiers (fatal before any tick)
    2. start(): rehydrate open positions from the broker
    3. on_tick(): one lifecycle pass, then the fusion cascade on a new bar;
       a signal opens a position and registers it for management

`main()` is the `smc-trader` console script:

    smc-trader check   --config config/strategy.yml
    smc-trader analyze --config config/strategy.yml --symbol EURUSD \
        --point-size 0.00001 --tick-value 1 --bars D1=d1.csv --bars H4=h4.csv ...
"""

import argparse
import logging
import os
import sys
from typing import List, Optional, Sequence

from dotenv import load_dotenv
from tabulate import tabulate

from smc_trader.config import ConfigError, StrategyConfig, load_strategy_config
from smc_trader.config.strategy.validators import TIERS
from smc_trader.core.bars import BarProvider, InMemoryBarProvider, SymbolInfo, load_bars
from smc_trader.core.logger import get_logger, get_symbol_logger
from smc_trader.decision_layer import CascadeResult, FusionCascade, TradeSignal
from smc_trader.execution import (
    BrokerAdapter,
    ManagedTrade,
    OrderDirection,
    PositionLifecycleManager,
)
from smc_trader.session import AlwaysOpenSession, KillZoneFilter, SessionFilter


def session_filter_for(config: StrategyConfig) -> SessionFilter:
    if not config.session.enabled:
        return AlwaysOpenSession()
    return KillZoneFilter.from_settings(config.session.kill_zones)


class TradingSession:
    """
    Long-lived decision and management pipeline for one symbol.

    Usage:
        session = TradingSession("EURUSD", config, provider, broker)
        session.start()
        for tick in feed:                # after the provider received the bar
            signal = session.on_tick()
    """

    def __init__(
        self,
        symbol: str,
        config: StrategyConfig,
        provider: BarProvider,
        broker: BrokerAdapter,
        session_filter: Optional[SessionFilter] = None,
    ):
        """
        Raises:
            ConfigError: if a timeframe tier is empty
            KeyError: if the provider has no symbol info for `symbol`
        """
        empty = [tier for tier in TIERS if not getattr(config.timeframes, tier)]
        if empty:
            raise ConfigError(f"No timeframe enabled for tier(s): {', '.join(empty)}")

        self.symbol = symbol
        self.config = config
        self.provider = provider
        self.broker = broker
        self.logger = get_symbol_logger(symbol)

        self.cascade = FusionCascade(
            symbol,
            config,
            provider,
            session_filter or session_filter_for(config),
        )
        self.positions = PositionLifecycleManager(
            broker,
            config.trade_management,
            risk_reward_ratio=config.risk.risk_reward_ratio,
            symbol_info=provider.symbol_info(symbol),
        )
        self.is_started = False

    # -------------------------------------------------------------------------
    # LIFECYCLE
    # -------------------------------------------------------------------------
    def start(self) -> int:
        """Pick up positions left open by a previous run."""
        added = self.positions.load_open_positions()
        self.is_started = True
        self.logger.info(f"Session started: {self.config.summary(self.symbol)}")
        self.logger.info(f"Rehydrated {added} open position(s)")
        return added

    def register_trade(
        self,
        ticket: int,
        entry: float,
        stop_loss: float,
        take_profit: Optional[float],
        lot_size: Optional[float] = None,
        direction: Optional[OrderDirection] = None,
    ) -> Optional[ManagedTrade]:
        return self.positions.register_trade(
            ticket, entry, stop_loss, take_profit,
            lot_size=lot_size, direction=direction, symbol=self.symbol,
        )

    def manage_open_trades(self) -> None:
        self.positions.manage_open_trades()

    # -------------------------------------------------------------------------
    # PER-TICK ENTRY POINT
    # -------------------------------------------------------------------------
    def on_tick(self) -> Optional[TradeSignal]:
        """
        Process one price update.

        Returns:
            The signal that opened a position, or None
        """
        self.positions.manage_open_trades()

        if not self.cascade.is_new_bar():
            return None

        result = self.cascade.evaluate(self.broker.account_balance())
        signal = result.signal
        if signal is None:
            return None

        if len(self.positions.trades) >= self.config.risk.max_open_trades:
            self.logger.info(f"Signal skipped, {len(self.positions.trades)} trade(s) already open: {signal}")
            return None

        ticket = self.broker.open_position(
            self.symbol,
            OrderDirection.from_bias(signal.direction),
            signal.lot_size,
            signal.entry_price,
            signal.stop_loss,
            signal.take_profit,
        )
        if ticket is None:
            self.logger.warning(f"Broker rejected {signal}")
            return None

        self.register_trade(
            ticket,
            signal.entry_price,
            signal.stop_loss,
            signal.take_profit,
            lot_size=signal.lot_size,
            direction=OrderDirection.from_bias(signal.direction),
        )
        self.logger.info(f"Opened #{ticket}: {signal}")
        return signal

    @property
    def latest_result(self) -> Optional[CascadeResult]:
        return self.cascade.latest_result


# -------------------------------------------------------------------------
# CLI
# -------------------------------------------------------------------------
def _tier_rows(config: StrategyConfig) -> List[List[str]]:
    return [[tier.upper(), ", ".join(getattr(config.timeframes, tier))] for tier in TIERS]


def _cmd_check(config: StrategyConfig) -> int:
    print(tabulate(_tier_rows(config), headers=["Tier", "Timeframes"], tablefmt="grid"))
    rows = [
        ["Risk per trade", f"{config.risk.risk_percent}%"],
        ["Risk:reward", config.risk.risk_reward_ratio],
        ["Breakeven after", f"{config.trade_management.break_even_after_r}R"],
        ["Partial TP", f"{config.trade_management.partial_tp_percent}%"],
        ["Kill zones", ", ".join(kz.name for kz in config.session.kill_zones) if config.session.enabled else "off"],
    ]
    print(tabulate(rows, tablefmt="grid"))
    return 0


def _parse_bar_specs(specs: Sequence[str]) -> List[List[str]]:
    parsed = []
    for spec in specs:
        timeframe, sep, path = spec.partition("=")
        if not sep or not timeframe or not path:
            raise ValueError(f"--bars expects TF=PATH, got {spec!r}")
        parsed.append([timeframe, path])
    return parsed


def _cmd_analyze(config: StrategyConfig, args: argparse.Namespace) -> int:
    logger = get_logger(__name__)
    provider = InMemoryBarProvider(maxlen=args.maxlen)
    provider.set_symbol_info(SymbolInfo(args.symbol, point_size=args.point_size, tick_value=args.tick_value))

    for timeframe, path in _parse_bar_specs(args.bars):
        bars = load_bars(path)
        provider.load(args.symbol, timeframe, bars)
        logger.info(f"Loaded {len(bars)} {timeframe} bars from {path}")

    for timeframe in config.timeframes.all:
        if provider.bar_count(args.symbol, timeframe) == 0:
            logger.warning(f"No {timeframe} bars loaded, its stages see an empty window")

    cascade = FusionCascade(args.symbol, config, provider, session_filter_for(config))
    result = cascade.run(args.balance)
    if result is None:
        logger.error(f"No bars for trigger timeframe {cascade.trigger_timeframe}")
        return 1

    rows = []
    for tier in TIERS:
        for timeframe in getattr(config.timeframes, tier):
            structure = result.structures.get(timeframe)
            phase = result.phases.get(timeframe)
            rows.append([
                tier.upper(),
                timeframe,
                provider.bar_count(args.symbol, timeframe),
                structure.value if structure else "-",
                phase.value if phase else "-",
            ])
    print(tabulate(rows, headers=["Tier", "TF", "Bars", "Structure", "Phase"], tablefmt="grid"))
    print(result.summary())
    print(result.signal if result.signal else "No entry")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="smc-trader", description="SMC multi-timeframe decision engine")
    parser.add_argument(
        "--config",
        default=os.getenv("SMC_CONFIG", "config/strategy.yml"),
        help="Strategy YAML file (default: $SMC_CONFIG or config/strategy.yml)",
    )
    sub = parser.add_subparsers(dest="command")
    sub.add_parser("check", help="Validate the config and print the pipeline summary")

    analyze = sub.add_parser("analyze", help="Run the cascade once over bar files")
    analyze.add_argument("--symbol", required=True)
    analyze.add_argument("--point-size", type=float, required=True)
    analyze.add_argument("--tick-value", type=float, default=1.0)
    analyze.add_argument("--balance", type=float, default=10_000.0)
    analyze.add_argument("--maxlen", type=int, default=1000)
    analyze.add_argument("--bars", action="append", default=[], metavar="TF=PATH")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    logger = get_logger(__name__)

    try:
        config = load_strategy_config(args.config)
    except (FileNotFoundError, ValueError, RuntimeError) as e:
        logger.error(f"Config error: {e}")
        return 1

    if "LOG_LEVEL" not in os.environ:
        get_logger().setLevel(getattr(logging, config.app.log_level))
    logger.info(config.summary())

    if args.command == "analyze":
        try:
            return _cmd_analyze(config, args)
        except (FileNotFoundError, ValueError) as e:
            logger.error(f"Bar data error: {e}")
            return 1
    return _cmd_check(config)


if __name__ == "__main__":
    sys.exit(main())
