"""Configuration: validated dataclasses loaded from YAML."""
from .base import ConfigError, BaseValidator
from .strategy import StrategyConfig, StrategyConfigLoader, load_strategy_config

__all__ = [
    "ConfigError",
    "BaseValidator",
    "StrategyConfig",
    "StrategyConfigLoader",
    "load_strategy_config",
]
