"""
Config validation primitives.

Strategy settings are plain YAML mappings; every section is checked with
these helpers before the frozen dataclasses are built, so a bad value fails
at load time with the dotted path of the offending key.
"""
from typing import Any, Iterable, Optional, Union

Number = Union[int, float]


class ConfigError(Exception):
    """Invalid or inconsistent strategy configuration."""


def context(path: Optional[str]) -> str:
    """Error message prefix locating a value inside a nested config."""
    return f"{path}: " if path else ""


def _check_bounds(
    value: Number,
    field_name: str,
    min_value: Optional[Number],
    max_value: Optional[Number],
    path: Optional[str],
) -> None:
    if min_value is not None and value < min_value:
        raise ConfigError(f"{context(path)}{field_name} must be >= {min_value}, got {value}")
    if max_value is not None and value > max_value:
        raise ConfigError(f"{context(path)}{field_name} must be <= {max_value}, got {value}")


class BaseValidator:
    """Type and range checks shared by the strategy section validators."""

    @staticmethod
    def validate_dict(obj: Any, name: str, path: Optional[str] = None) -> None:
        if not isinstance(obj, dict):
            raise ConfigError(f"{context(path)}{name} must be a mapping")

    @staticmethod
    def validate_string(
        obj: Any,
        field_name: str,
        allow_empty: bool = False,
        path: Optional[str] = None
    ) -> None:
        if not isinstance(obj, str):
            raise ConfigError(f"{context(path)}{field_name} must be a string")
        if not allow_empty and not obj:
            raise ConfigError(f"{context(path)}{field_name} must be a non-empty string")

    @staticmethod
    def validate_int(
        obj: Any,
        field_name: str,
        min_value: Optional[int] = None,
        max_value: Optional[int] = None,
        path: Optional[str] = None
    ) -> None:
        """Bar counts, periods and other whole-number settings.

        Raises:
            ConfigError: for non-integers (bools included) or values out of bounds
        """
        if isinstance(obj, bool) or not isinstance(obj, int):
            raise ConfigError(f"{context(path)}{field_name} must be an integer")
        _check_bounds(obj, field_name, min_value, max_value, path)

    @staticmethod
    def validate_float(
        obj: Any,
        field_name: str,
        min_value: Optional[float] = None,
        max_value: Optional[float] = None,
        path: Optional[str] = None
    ) -> None:
        """Ratios, percentages and point distances; integers are accepted."""
        if isinstance(obj, bool) or not isinstance(obj, (int, float)):
            raise ConfigError(f"{context(path)}{field_name} must be a number")
        _check_bounds(obj, field_name, min_value, max_value, path)

    @staticmethod
    def validate_bool(obj: Any, field_name: str, path: Optional[str] = None) -> None:
        if not isinstance(obj, bool):
            raise ConfigError(f"{context(path)}{field_name} must be true or false")

    @staticmethod
    def validate_list(obj: Any, field_name: str, path: Optional[str] = None) -> None:
        if not isinstance(obj, (list, tuple)):
            raise ConfigError(f"{context(path)}{field_name} must be a list")

    @staticmethod
    def validate_choice(
        obj: Any,
        field_name: str,
        choices: Iterable[Any],
        path: Optional[str] = None
    ) -> None:
        allowed = list(choices)
        if obj not in allowed:
            raise ConfigError(f"{context(path)}{field_name} must be one of {allowed}, got {obj!r}")

    @staticmethod
    def validate_time_of_day(obj: Any, field_name: str, path: Optional[str] = None) -> None:
        """Wall-clock time written as HH:MM (24h)."""
        BaseValidator.validate_string(obj, field_name, path=path)
        parts = obj.split(":")
        if len(parts) != 2 or not all(p.isdigit() for p in parts):
            raise ConfigError(f"{context(path)}{field_name} must be HH:MM, got {obj!r}")
        hour, minute = int(parts[0]), int(parts[1])
        if not (0 <= hour <= 23 and 0 <= minute <= 59):
            raise ConfigError(f"{context(path)}{field_name} out of range: {obj!r}")


__all__ = ["ConfigError", "BaseValidator", "context"]
