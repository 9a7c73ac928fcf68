"""Dataclass models for strategy configuration.

Every detector threshold is a fixed heuristic constant; the defaults below
are the production values and a YAML file only needs to override what it
changes.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional, Tuple

from .validators import StrategyConfigValidator
from ..base import ConfigError
from ..tf_config import lowest_timeframe, order_high_to_low


def _build(cls, obj: Dict[str, Any]):
    """Instantiate a flat settings dataclass, rejecting unknown keys."""
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(obj) - known)
    if unknown:
        raise ConfigError(f"{cls.__name__}: unknown keys {unknown}")
    return cls(**obj)


@dataclass(frozen=True)
class AppInfo:
    """Application metadata."""
    name: str = "smc-trader"
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, obj: Dict[str, Any]) -> "AppInfo":
        StrategyConfigValidator.validate_app_info(obj)
        return cls(
            name=obj.get("name", "smc-trader"),
            log_level=obj.get("log_level", "INFO"),
        )


@dataclass(frozen=True)
class TimeframeTiers:
    """Enabled timeframes per tier, each ordered highest to lowest."""
    htf: Tuple[str, ...]
    mtf: Tuple[str, ...]
    ltf: Tuple[str, ...]

    @classmethod
    def from_dict(cls, obj: Dict[str, Any]) -> "TimeframeTiers":
        StrategyConfigValidator.validate_timeframes(obj)
        return cls(
            htf=tuple(order_high_to_low(obj["htf"])),
            mtf=tuple(order_high_to_low(obj["mtf"])),
            ltf=tuple(order_high_to_low(obj["ltf"])),
        )

    @property
    def lowest(self) -> str:
        """The timeframe whose new bars drive the cascade."""
        return lowest_timeframe(self.ltf)

    @property
    def all(self) -> Tuple[str, ...]:
        return self.htf + self.mtf + self.ltf

    def __repr__(self) -> str:
        return f"TimeframeTiers(htf={list(self.htf)}, mtf={list(self.mtf)}, ltf={list(self.ltf)})"


@dataclass(frozen=True)
class StructureSettings:
    """Swing detection and structure classification."""
    swing_left: int = 3
    swing_right: int = 3
    lookback: int = 100
    range_threshold_pct: float = 0.003
    min_swings: int = 3

    @classmethod
    def from_dict(cls, obj: Dict[str, Any]) -> "StructureSettings":
        StrategyConfigValidator.validate_structure(obj)
        return _build(cls, obj)


@dataclass(frozen=True)
class OrderBlockSettings:
    lookback: int = 100
    min_displacement_points: float = 100.0
    displacement_bars: int = 3

    @classmethod
    def from_dict(cls, obj: Dict[str, Any]) -> "OrderBlockSettings":
        StrategyConfigValidator.validate_order_blocks(obj)
        return _build(cls, obj)


@dataclass(frozen=True)
class FVGSettings:
    lookback: int = 100
    min_size_points: float = 5.0
    fresh_count: int = 3

    @classmethod
    def from_dict(cls, obj: Dict[str, Any]) -> "FVGSettings":
        StrategyConfigValidator.validate_fvg(obj)
        return _build(cls, obj)


@dataclass(frozen=True)
class SupplyDemandSettings:
    lookback: int = 100
    min_displacement_pct: float = 0.003
    follow_bars: int = 3
    min_strong_bars: int = 2
    strong_multiplier: float = 3.0
    normal_multiplier: float = 1.5
    range_bars: int = 5

    @classmethod
    def from_dict(cls, obj: Dict[str, Any]) -> "SupplyDemandSettings":
        StrategyConfigValidator.validate_supply_demand(obj)
        return _build(cls, obj)


@dataclass(frozen=True)
class LiquiditySettings:
    lookback: int = 50
    equal_threshold_points: float = 20.0
    zone_buffer_points: float = 10.0
    grab_window: int = 10
    grab_range_bars: int = 20
    wick_body_ratio: float = 2.0
    reversal_bars: int = 3
    min_reversal_closes: int = 2

    @classmethod
    def from_dict(cls, obj: Dict[str, Any]) -> "LiquiditySettings":
        StrategyConfigValidator.validate_liquidity(obj)
        return _build(cls, obj)


@dataclass(frozen=True)
class WyckoffSettings:
    lookback: int = 100
    min_bars: int = 50
    context_bars: int = 20
    range_context_bars: int = 10
    range_pct: float = 0.07
    climax_range_multiplier: float = 2.0
    volume_spike_multiplier: float = 1.5
    ma_periods: Tuple[int, int, int] = (20, 50, 100)

    @classmethod
    def from_dict(cls, obj: Dict[str, Any]) -> "WyckoffSettings":
        StrategyConfigValidator.validate_wyckoff(obj)
        data = dict(obj)
        if "ma_periods" in data:
            data["ma_periods"] = tuple(data["ma_periods"])
        return _build(cls, data)


@dataclass(frozen=True)
class RiskSettings:
    risk_percent: float = 1.0
    risk_reward_ratio: float = 2.0
    sl_buffer_points: float = 5.0
    max_open_trades: int = 1

    @classmethod
    def from_dict(cls, obj: Dict[str, Any]) -> "RiskSettings":
        StrategyConfigValidator.validate_risk(obj)
        return _build(cls, obj)


@dataclass(frozen=True)
class TradeManagementSettings:
    break_even_after_r: float = 1.0
    partial_tp_percent: float = 50.0
    trailing_profit_fraction: float = 0.5

    @classmethod
    def from_dict(cls, obj: Dict[str, Any]) -> "TradeManagementSettings":
        StrategyConfigValidator.validate_trade_management(obj)
        return _build(cls, obj)


@dataclass(frozen=True)
class KillZoneSettings:
    """A daily trading window, `start` inclusive and `end` exclusive."""
    name: str
    start: str
    end: str
    timezone: str = "America/New_York"

    @classmethod
    def from_dict(cls, obj: Dict[str, Any]) -> "KillZoneSettings":
        StrategyConfigValidator.validate_kill_zone(obj)
        return cls(
            name=obj["name"],
            start=obj["start"],
            end=obj["end"],
            timezone=obj.get("timezone", "America/New_York"),
        )


DEFAULT_KILL_ZONES: Tuple[KillZoneSettings, ...] = (
    KillZoneSettings(name="London_Open", start="02:00", end="05:00"),
    KillZoneSettings(name="NY_AM", start="07:00", end="10:00"),
)


@dataclass(frozen=True)
class SessionSettings:
    enabled: bool = True
    kill_zones: Tuple[KillZoneSettings, ...] = DEFAULT_KILL_ZONES

    @classmethod
    def from_dict(cls, obj: Dict[str, Any]) -> "SessionSettings":
        StrategyConfigValidator.validate_session(obj)
        if "kill_zones" in obj:
            kill_zones = tuple(KillZoneSettings.from_dict(kz) for kz in obj["kill_zones"])
        else:
            kill_zones = DEFAULT_KILL_ZONES
        return cls(enabled=obj.get("enabled", True), kill_zones=kill_zones)


@dataclass(frozen=True)
class StrategyConfig:
    """Root strategy configuration."""
    timeframes: TimeframeTiers
    app: AppInfo = field(default_factory=AppInfo)
    structure: StructureSettings = field(default_factory=StructureSettings)
    order_blocks: OrderBlockSettings = field(default_factory=OrderBlockSettings)
    fvg: FVGSettings = field(default_factory=FVGSettings)
    supply_demand: SupplyDemandSettings = field(default_factory=SupplyDemandSettings)
    liquidity: LiquiditySettings = field(default_factory=LiquiditySettings)
    wyckoff: WyckoffSettings = field(default_factory=WyckoffSettings)
    risk: RiskSettings = field(default_factory=RiskSettings)
    trade_management: TradeManagementSettings = field(default_factory=TradeManagementSettings)
    session: SessionSettings = field(default_factory=SessionSettings)

    @classmethod
    def from_dict(cls, obj: Dict[str, Any]) -> "StrategyConfig":
        StrategyConfigValidator.validate_strategy_config(obj)

        def section(name: str) -> Dict[str, Any]:
            return obj.get(name) or {}

        return cls(
            timeframes=TimeframeTiers.from_dict(obj["timeframes"]),
            app=AppInfo.from_dict(section("app")),
            structure=StructureSettings.from_dict(section("structure")),
            order_blocks=OrderBlockSettings.from_dict(section("order_blocks")),
            fvg=FVGSettings.from_dict(section("fvg")),
            supply_demand=SupplyDemandSettings.from_dict(section("supply_demand")),
            liquidity=LiquiditySettings.from_dict(section("liquidity")),
            wyckoff=WyckoffSettings.from_dict(section("wyckoff")),
            risk=RiskSettings.from_dict(section("risk")),
            trade_management=TradeManagementSettings.from_dict(section("trade_management")),
            session=SessionSettings.from_dict(section("session")),
        )

    def summary(self, symbol: Optional[str] = None) -> str:
        head = f"{self.app.name}" + (f" [{symbol}]" if symbol else "")
        return (
            f"{head}: HTF={list(self.timeframes.htf)} MTF={list(self.timeframes.mtf)} "
            f"LTF={list(self.timeframes.ltf)} trigger={self.timeframes.lowest} "
            f"RR={self.risk.risk_reward_ratio} risk={self.risk.risk_percent}% "
            f"BE@{self.trade_management.break_even_after_r}R "
            f"partial={self.trade_management.partial_tp_percent}%"
        )

    def __repr__(self) -> str:
        return f"StrategyConfig(app={self.app!r}, timeframes={self.timeframes!r})"


__all__ = [
    "StrategyConfig",
    "AppInfo",
    "TimeframeTiers",
    "StructureSettings",
    "OrderBlockSettings",
    "FVGSettings",
    "SupplyDemandSettings",
    "LiquiditySettings",
    "WyckoffSettings",
    "RiskSettings",
    "TradeManagementSettings",
    "KillZoneSettings",
    "SessionSettings",
    "DEFAULT_KILL_ZONES",
]
