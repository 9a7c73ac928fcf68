"""Utility helpers."""
from .units import (
    calculate_lot_size,
    normalize_lots,
    pip_size,
    pips_to_points,
    points_per_pip,
    points_to_pips,
    points_to_price,
    price_digits,
    price_to_points,
)

__all__ = [
    "calculate_lot_size",
    "normalize_lots",
    "pip_size",
    "pips_to_points",
    "points_per_pip",
    "points_to_pips",
    "points_to_price",
    "price_digits",
    "price_to_points",
]
