"""
Unit conversion helpers: points, pips and lots.

A point is the symbol's smallest quoted increment (`SymbolInfo.point_size`).
On 3- and 5-digit quotes a pip is 10 points (EURUSD 0.00001 point, 0.0001
pip); on 2- and 4-digit quotes a pip equals a point.
"""

import math
from decimal import ROUND_DOWN, Decimal

from smc_trader.core.bars import SymbolInfo


def price_digits(point_size: float) -> int:
    """Number of decimals quoted for a point size (0.00001 -> 5)."""
    if point_size <= 0:
        raise ValueError(f"point_size must be positive, got {point_size}")
    return max(0, round(-math.log10(point_size)))


def points_per_pip(point_size: float) -> int:
    return 10 if price_digits(point_size) in (3, 5) else 1


def pip_size(point_size: float) -> float:
    return point_size * points_per_pip(point_size)


def price_to_points(distance: float, point_size: float) -> float:
    """Convert a price distance to points."""
    return distance / point_size


def points_to_price(points: float, point_size: float) -> float:
    """Convert points to a price distance."""
    return points * point_size


def pips_to_points(pips: float, point_size: float) -> float:
    return pips * points_per_pip(point_size)


def points_to_pips(points: float, point_size: float) -> float:
    return points / points_per_pip(point_size)


def normalize_lots(lots: float, info: SymbolInfo) -> float:
    """
    Round a lot size down to the broker step and clamp it to the maximum.

    Sizes below the minimum lot return 0.0 so the caller skips the trade
    rather than risking more than planned.
    """
    if lots <= 0 or info.lot_step <= 0:
        return 0.0

    step = Decimal(str(info.lot_step))
    steps = (Decimal(str(lots)) / step).to_integral_value(rounding=ROUND_DOWN)
    normalized = float(steps * step)

    if normalized < info.min_lot:
        return 0.0
    return min(normalized, info.max_lot)


def calculate_lot_size(
    risk_amount: float,
    stop_distance: float,
    info: SymbolInfo
) -> float:
    """
    Position size that loses `risk_amount` when the stop is hit.

    lots = risk_amount / (stop_distance / tick_size * tick_value),
    normalized to the broker's lot constraints.
    """
    if risk_amount <= 0 or stop_distance <= 0 or info.tick_value <= 0:
        return 0.0

    loss_per_lot = stop_distance / info.effective_tick_size * info.tick_value
    return normalize_lots(risk_amount / loss_per_lot, info)


__all__ = [
    "price_digits",
    "points_per_pip",
    "pip_size",
    "price_to_points",
    "points_to_price",
    "pips_to_points",
    "points_to_pips",
    "normalize_lots",
    "calculate_lot_size",
]
