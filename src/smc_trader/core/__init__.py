"""Core infrastructure: logging and bar storage."""
from .logger import get_logger, get_symbol_logger

__all__ = ["get_logger", "get_symbol_logger"]
