"""
Core math modules для LP vault

Целочисленные примитивы, конверсии и swap-математика с детерминированным
округлением в пользу vault.
"""

# Uint Math
from src.core.math.uint_math import (
    BPS_DENOMINATOR,
    MAX_UINT256,
    Rounding,
    ceil_div,
    isqrt,
    mul_div,
    validate_uint,
)

# Slippage Guard
from src.core.math.slippage import (
    TOLERANCE_MAX_EXCLUSIVE_BPS,
    TOLERANCE_MIN_EXCLUSIVE_BPS,
    SlippageGuard,
    minimum_accepted,
    validate_tolerance,
)

# Swap Math
from src.core.math.swap_math import (
    get_amount_out,
    get_swap_amount,
    simulate_swap,
)

# Conversion Engine
from src.core.math.conversions import (
    ConversionEngine,
    assets_to_shares,
    nominal_to_pool_shares,
    optimal_contribution,
    pool_shares_to_nominal,
    quote,
    shares_to_assets,
    to_pool_shares,
    to_vault_shares,
)

__all__ = [
    # Uint Math — Constants
    "BPS_DENOMINATOR",
    "MAX_UINT256",
    # Uint Math — Types
    "Rounding",
    # Uint Math — Functions
    "ceil_div",
    "isqrt",
    "mul_div",
    "validate_uint",
    # Slippage — Constants
    "TOLERANCE_MAX_EXCLUSIVE_BPS",
    "TOLERANCE_MIN_EXCLUSIVE_BPS",
    # Slippage — Types
    "SlippageGuard",
    # Slippage — Functions
    "minimum_accepted",
    "validate_tolerance",
    # Swap Math — Functions
    "get_amount_out",
    "get_swap_amount",
    "simulate_swap",
    # Conversions — Types
    "ConversionEngine",
    # Conversions — Functions
    "assets_to_shares",
    "nominal_to_pool_shares",
    "optimal_contribution",
    "pool_shares_to_nominal",
    "quote",
    "shares_to_assets",
    "to_pool_shares",
    "to_vault_shares",
]
