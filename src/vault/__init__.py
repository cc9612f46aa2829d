"""Vault — оркестрация deposit/mint/withdraw/redeem поверх AMM пула.

Поток: LPVault → ReserveOracle → SwapRebalancer (SINGLE_ASSET)
       → LiquidityProvisioningEngine → IPool
"""

from .engine import LPVault
from .harvester import HarvestRoute, IRewardHarvester
from .liquidity import LiquidityProvisioningEngine
from .locking import CollaboratorLock, hold_collaborators, lock_for
from .ports import DEAD_ADDRESS, IPool, IShareLedger, ITokenLedger
from .rebalancer import SwapRebalancer
from .reserve_oracle import ReserveOracle

__all__ = [
    "LPVault",
    "HarvestRoute",
    "IRewardHarvester",
    "LiquidityProvisioningEngine",
    "CollaboratorLock",
    "hold_collaborators",
    "lock_for",
    "DEAD_ADDRESS",
    "IPool",
    "IShareLedger",
    "ITokenLedger",
    "SwapRebalancer",
    "ReserveOracle",
]
