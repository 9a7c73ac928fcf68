"""Validators for strategy configuration."""
from typing import Any, Dict, Optional

from ..base import BaseValidator, ConfigError, context
from ..tf_config import TIMEFRAMES

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
TIERS = ("htf", "mtf", "ltf")


def _sub(base: Optional[str], name: str) -> str:
    return f"{base}.{name}" if base else name


class StrategyConfigValidator(BaseValidator):
    """Validator for strategy configuration objects.

    Validators accept an optional `path` parameter that is prefixed to
    error messages to help locate the failing item in a nested config.
    """

    @staticmethod
    def validate_app_info(obj: Dict[str, Any], path: Optional[str] = None) -> None:
        BaseValidator.validate_dict(obj, "app", path)

        BaseValidator.validate_string(obj.get("name", "smc-trader"), "app.name", path=path)
        BaseValidator.validate_choice(obj.get("log_level", "INFO"), "app.log_level", LOG_LEVELS, path=path)

    @staticmethod
    def validate_timeframes(obj: Dict[str, Any], path: Optional[str] = None) -> None:
        """Every tier needs at least one known timeframe."""
        BaseValidator.validate_dict(obj, "timeframes", path)
        ctx = context(path)

        seen = {}
        for tier in TIERS:
            tfs = obj.get(tier)
            if not tfs:
                raise ConfigError(f"{ctx}timeframes.{tier} must enable at least one timeframe")
            BaseValidator.validate_list(tfs, f"timeframes.{tier}", path=path)

            for tf in tfs:
                BaseValidator.validate_string(tf, f"timeframes.{tier} entry", path=path)
                if tf not in TIMEFRAMES:
                    raise ConfigError(
                        f"{ctx}timeframes.{tier}: unknown timeframe {tf!r} "
                        f"(known: {list(TIMEFRAMES)})"
                    )
                if tf in seen and seen[tf] != tier:
                    raise ConfigError(f"{ctx}timeframe {tf} is enabled in both {seen[tf]} and {tier}")
                seen[tf] = tier

    @staticmethod
    def validate_structure(obj: Dict[str, Any], path: Optional[str] = None) -> None:
        BaseValidator.validate_dict(obj, "structure", path)
        BaseValidator.validate_int(obj.get("swing_left", 3), "structure.swing_left", min_value=1, max_value=20, path=path)
        BaseValidator.validate_int(obj.get("swing_right", 3), "structure.swing_right", min_value=1, max_value=20, path=path)
        BaseValidator.validate_int(obj.get("lookback", 100), "structure.lookback", min_value=10, path=path)
        BaseValidator.validate_float(obj.get("range_threshold_pct", 0.003), "structure.range_threshold_pct", min_value=0, max_value=1, path=path)
        BaseValidator.validate_int(obj.get("min_swings", 3), "structure.min_swings", min_value=3, path=path)

    @staticmethod
    def validate_order_blocks(obj: Dict[str, Any], path: Optional[str] = None) -> None:
        BaseValidator.validate_dict(obj, "order_blocks", path)
        BaseValidator.validate_int(obj.get("lookback", 100), "order_blocks.lookback", min_value=5, path=path)
        BaseValidator.validate_float(obj.get("min_displacement_points", 100.0), "order_blocks.min_displacement_points", min_value=0, path=path)
        BaseValidator.validate_int(obj.get("displacement_bars", 3), "order_blocks.displacement_bars", min_value=1, path=path)

    @staticmethod
    def validate_fvg(obj: Dict[str, Any], path: Optional[str] = None) -> None:
        BaseValidator.validate_dict(obj, "fvg", path)
        BaseValidator.validate_int(obj.get("lookback", 100), "fvg.lookback", min_value=3, path=path)
        BaseValidator.validate_float(obj.get("min_size_points", 5.0), "fvg.min_size_points", min_value=0, path=path)
        BaseValidator.validate_int(obj.get("fresh_count", 3), "fvg.fresh_count", min_value=1, path=path)

    @staticmethod
    def validate_supply_demand(obj: Dict[str, Any], path: Optional[str] = None) -> None:
        BaseValidator.validate_dict(obj, "supply_demand", path)
        BaseValidator.validate_int(obj.get("lookback", 100), "supply_demand.lookback", min_value=5, path=path)
        BaseValidator.validate_float(obj.get("min_displacement_pct", 0.003), "supply_demand.min_displacement_pct", min_value=0, max_value=1, path=path)
        BaseValidator.validate_int(obj.get("follow_bars", 3), "supply_demand.follow_bars", min_value=1, path=path)
        BaseValidator.validate_int(obj.get("min_strong_bars", 2), "supply_demand.min_strong_bars", min_value=1, path=path)
        BaseValidator.validate_float(obj.get("strong_multiplier", 3.0), "supply_demand.strong_multiplier", min_value=0, path=path)
        BaseValidator.validate_float(obj.get("normal_multiplier", 1.5), "supply_demand.normal_multiplier", min_value=0, path=path)
        BaseValidator.validate_int(obj.get("range_bars", 5), "supply_demand.range_bars", min_value=1, path=path)

        ctx = context(path)
        if obj.get("min_strong_bars", 2) > obj.get("follow_bars", 3):
            raise ConfigError(f"{ctx}supply_demand.min_strong_bars cannot exceed follow_bars")
        if obj.get("normal_multiplier", 1.5) > obj.get("strong_multiplier", 3.0):
            raise ConfigError(f"{ctx}supply_demand.normal_multiplier cannot exceed strong_multiplier")

    @staticmethod
    def validate_liquidity(obj: Dict[str, Any], path: Optional[str] = None) -> None:
        BaseValidator.validate_dict(obj, "liquidity", path)
        BaseValidator.validate_int(obj.get("lookback", 50), "liquidity.lookback", min_value=3, path=path)
        BaseValidator.validate_float(obj.get("equal_threshold_points", 20.0), "liquidity.equal_threshold_points", min_value=0, path=path)
        BaseValidator.validate_float(obj.get("zone_buffer_points", 10.0), "liquidity.zone_buffer_points", min_value=0, path=path)
        BaseValidator.validate_int(obj.get("grab_window", 10), "liquidity.grab_window", min_value=1, path=path)
        BaseValidator.validate_int(obj.get("grab_range_bars", 20), "liquidity.grab_range_bars", min_value=2, path=path)
        BaseValidator.validate_float(obj.get("wick_body_ratio", 2.0), "liquidity.wick_body_ratio", min_value=0, path=path)
        BaseValidator.validate_int(obj.get("reversal_bars", 3), "liquidity.reversal_bars", min_value=1, path=path)
        BaseValidator.validate_int(obj.get("min_reversal_closes", 2), "liquidity.min_reversal_closes", min_value=1, path=path)

    @staticmethod
    def validate_wyckoff(obj: Dict[str, Any], path: Optional[str] = None) -> None:
        BaseValidator.validate_dict(obj, "wyckoff", path)
        BaseValidator.validate_int(obj.get("lookback", 100), "wyckoff.lookback", min_value=50, path=path)
        BaseValidator.validate_int(obj.get("min_bars", 50), "wyckoff.min_bars", min_value=50, path=path)
        BaseValidator.validate_int(obj.get("context_bars", 20), "wyckoff.context_bars", min_value=10, max_value=20, path=path)
        BaseValidator.validate_int(obj.get("range_context_bars", 10), "wyckoff.range_context_bars", min_value=10, max_value=20, path=path)
        BaseValidator.validate_float(obj.get("range_pct", 0.07), "wyckoff.range_pct", min_value=0, max_value=1, path=path)
        BaseValidator.validate_float(obj.get("climax_range_multiplier", 2.0), "wyckoff.climax_range_multiplier", min_value=1, path=path)
        BaseValidator.validate_float(obj.get("volume_spike_multiplier", 1.5), "wyckoff.volume_spike_multiplier", min_value=1, path=path)

        ma_periods = obj.get("ma_periods", [20, 50, 100])
        BaseValidator.validate_list(ma_periods, "wyckoff.ma_periods", path=path)
        ctx = context(path)
        if len(ma_periods) != 3:
            raise ConfigError(f"{ctx}wyckoff.ma_periods must list exactly 3 periods")
        for period in ma_periods:
            BaseValidator.validate_int(period, "wyckoff.ma_periods entry", min_value=1, path=path)
        if list(ma_periods) != sorted(set(ma_periods)):
            raise ConfigError(f"{ctx}wyckoff.ma_periods must be strictly increasing")
        if obj.get("lookback", 100) < obj.get("min_bars", 50):
            raise ConfigError(f"{ctx}wyckoff.lookback cannot be smaller than wyckoff.min_bars")

    @staticmethod
    def validate_risk(obj: Dict[str, Any], path: Optional[str] = None) -> None:
        BaseValidator.validate_dict(obj, "risk", path)
        BaseValidator.validate_float(obj.get("risk_percent", 1.0), "risk.risk_percent", min_value=0, max_value=100, path=path)
        BaseValidator.validate_float(obj.get("risk_reward_ratio", 2.0), "risk.risk_reward_ratio", min_value=0.1, path=path)
        BaseValidator.validate_float(obj.get("sl_buffer_points", 5.0), "risk.sl_buffer_points", min_value=0, path=path)
        BaseValidator.validate_int(obj.get("max_open_trades", 1), "risk.max_open_trades", min_value=1, path=path)

    @staticmethod
    def validate_trade_management(obj: Dict[str, Any], path: Optional[str] = None) -> None:
        BaseValidator.validate_dict(obj, "trade_management", path)
        BaseValidator.validate_float(obj.get("break_even_after_r", 1.0), "trade_management.break_even_after_r", min_value=0, path=path)
        BaseValidator.validate_float(obj.get("partial_tp_percent", 50.0), "trade_management.partial_tp_percent", min_value=0, max_value=100, path=path)
        BaseValidator.validate_float(obj.get("trailing_profit_fraction", 0.5), "trade_management.trailing_profit_fraction", min_value=0, max_value=1, path=path)

    @staticmethod
    def validate_kill_zone(obj: Dict[str, Any], path: Optional[str] = None) -> None:
        BaseValidator.validate_dict(obj, "kill_zone", path)
        BaseValidator.validate_string(obj.get("name"), "kill_zone.name", path=path)
        for key in ("start", "end"):
            BaseValidator.validate_time_of_day(obj.get(key), f"kill_zone.{key}", path=path)
        BaseValidator.validate_string(obj.get("timezone", "America/New_York"), "kill_zone.timezone", path=path)

    @staticmethod
    def validate_session(obj: Dict[str, Any], path: Optional[str] = None) -> None:
        BaseValidator.validate_dict(obj, "session", path)
        BaseValidator.validate_bool(obj.get("enabled", True), "session.enabled", path=path)

        kill_zones = obj.get("kill_zones", [])
        BaseValidator.validate_list(kill_zones, "session.kill_zones", path=path)
        for i, kz in enumerate(kill_zones):
            StrategyConfigValidator.validate_kill_zone(kz, path=_sub(path, f"kill_zones[{i}]"))

    @staticmethod
    def validate_strategy_config(obj: Dict[str, Any], path: Optional[str] = None) -> None:
        ctx = context(path)

        BaseValidator.validate_dict(obj, "config", path)

        StrategyConfigValidator.validate_app_info(obj.get("app") or {}, path=_sub(path, "app"))

        timeframes = obj.get("timeframes")
        if not timeframes:
            raise ConfigError(f"{ctx}missing required 'timeframes' section")
        StrategyConfigValidator.validate_timeframes(timeframes, path=_sub(path, "timeframes"))

        sections = {
            "structure": StrategyConfigValidator.validate_structure,
            "order_blocks": StrategyConfigValidator.validate_order_blocks,
            "fvg": StrategyConfigValidator.validate_fvg,
            "supply_demand": StrategyConfigValidator.validate_supply_demand,
            "liquidity": StrategyConfigValidator.validate_liquidity,
            "wyckoff": StrategyConfigValidator.validate_wyckoff,
            "risk": StrategyConfigValidator.validate_risk,
            "trade_management": StrategyConfigValidator.validate_trade_management,
            "session": StrategyConfigValidator.validate_session,
        }
        for name, validate in sections.items():
            validate(obj.get(name) or {}, path=_sub(path, name))


__all__ = ["StrategyConfigValidator", "ConfigError"]
