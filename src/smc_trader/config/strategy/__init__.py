"""Strategy config package exports."""
from .loader import load_strategy_config, StrategyConfigLoader, DEFAULT_CONFIG_PATH
from .models import (
    AppInfo,
    DEFAULT_KILL_ZONES,
    FVGSettings,
    KillZoneSettings,
    LiquiditySettings,
    OrderBlockSettings,
    RiskSettings,
    SessionSettings,
    StrategyConfig,
    StructureSettings,
    SupplyDemandSettings,
    TimeframeTiers,
    TradeManagementSettings,
    WyckoffSettings,
)
from .validators import StrategyConfigValidator
from ..base import ConfigError

__all__ = [
    "load_strategy_config",
    "StrategyConfigLoader",
    "DEFAULT_CONFIG_PATH",
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
    "DEFAULT_KILL_ZONES",
    "SessionSettings",
    "StrategyConfigValidator",
    "ConfigError",
]
