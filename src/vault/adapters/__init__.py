"""Адаптеры портов vault."""

from .memory import (
    DEAD_ADDRESS,
    MIN_LIQUIDITY,
    ConstantProductPool,
    InMemoryShareLedger,
    InMemoryTokenLedger,
    ManualClock,
    seed_pool,
)

__all__ = [
    "DEAD_ADDRESS",
    "MIN_LIQUIDITY",
    "ConstantProductPool",
    "InMemoryShareLedger",
    "InMemoryTokenLedger",
    "ManualClock",
    "seed_pool",
]
