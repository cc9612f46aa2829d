"""
Domain models and value objects.

Contains fundamental domain entities: PoolState, VaultConfig, VaultMode and
operation results.
"""

from src.core.domain.pool_state import PoolState
from src.core.domain.results import (
    DepositResult,
    ProvideResult,
    RebalanceResult,
    WithdrawResult,
)
from src.core.domain.vault_config import (
    DEFAULT_DEADLINE_SEC,
    DEFAULT_SLIPPAGE_TOLERANCE_BPS,
    DEFAULT_SWAP_FEE_DENOMINATOR,
    DEFAULT_SWAP_FEE_NUMERATOR,
    VaultConfig,
)
from src.core.domain.vault_mode import VaultMode

__all__ = [
    # Pool state
    "PoolState",
    # Config
    "DEFAULT_DEADLINE_SEC",
    "DEFAULT_SLIPPAGE_TOLERANCE_BPS",
    "DEFAULT_SWAP_FEE_DENOMINATOR",
    "DEFAULT_SWAP_FEE_NUMERATOR",
    "VaultConfig",
    "VaultMode",
    # Results
    "DepositResult",
    "ProvideResult",
    "RebalanceResult",
    "WithdrawResult",
]
