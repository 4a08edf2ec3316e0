"""
Core math modules

Целочисленные fixed-point примитивы и tick math с детерминированным
округлением.
"""

# Fixed-Point Math
from src.core.math.fixed_point import (
    MAX_UINT256,
    SECONDS_PER_YEAR,
    WAD,
    Rounding,
    from_wad,
    mul_div,
    to_wad,
    usd_to_amount,
    value_in_usd,
    wad_div,
    wad_mul,
)

# Tick Math
from src.core.math.tick_math import (
    MAX_TICK,
    MIN_TICK,
    mean_tick,
    price_to_tick,
    tick_to_price_wad,
)

__all__ = [
    # Fixed-Point: Constants
    "MAX_UINT256",
    "SECONDS_PER_YEAR",
    "WAD",
    # Fixed-Point: Types
    "Rounding",
    # Fixed-Point: Functions
    "from_wad",
    "mul_div",
    "to_wad",
    "usd_to_amount",
    "value_in_usd",
    "wad_div",
    "wad_mul",
    # Tick Math
    "MAX_TICK",
    "MIN_TICK",
    "mean_tick",
    "price_to_tick",
    "tick_to_price_wad",
]
