"""Strategy config loader."""
from __future__ import annotations

from typing import Any, Dict
from pathlib import Path

import yaml

from .models import StrategyConfig
from ..base import ConfigError


DEFAULT_CONFIG_PATH = Path("config/strategy.yml")


class StrategyConfigLoader:
    """Loader for YAML strategy configuration."""

    @staticmethod
    def _read_file(path: Path | str) -> Dict[str, Any]:
        p = Path(path)
        if not p.exists():
            raise FileNotFoundError(f"Config file not found: {p}")

        with p.open("r", encoding="utf-8") as f:
            return yaml.safe_load(f)

    @staticmethod
    def load(path: Path | str = DEFAULT_CONFIG_PATH) -> StrategyConfig:
        """Load and validate the strategy configuration file.

        Args:
            path: Path to the YAML config file

        Returns:
            StrategyConfig instance with parsed and validated config

        Raises:
            FileNotFoundError: if config file does not exist
            ValueError: if the file is empty
            RuntimeError: if the config is invalid
        """
        data = StrategyConfigLoader._read_file(path)
        if data is None:
            raise ValueError(f"Config file {path} is empty or invalid")

        return StrategyConfigLoader.from_dict(data, source=str(path))

    @staticmethod
    def from_dict(data: Dict[str, Any], source: str = "<dict>") -> StrategyConfig:
        try:
            return StrategyConfig.from_dict(data)
        except ConfigError as e:
            raise RuntimeError(f"Invalid config in {source}: {e}") from e


def load_strategy_config(path: Path | str = DEFAULT_CONFIG_PATH) -> StrategyConfig:
    """Convenience function to load strategy config."""
    return StrategyConfigLoader.load(path)


__all__ = ["StrategyConfigLoader", "load_strategy_config", "DEFAULT_CONFIG_PATH"]
