"""
PoolState — Снапшот состояния AMM пула

Immutable Pydantic модель: reserves двух токенов и total supply pool shares
в каноническом порядке (token A, token B), независимо от того, как сам пул
упорядочивает свои токены внутри.

Модель не кэшируется: каждая котировка строит новый снапшот через
ReserveOracle.
"""

from typing import Any, Dict

from pydantic import BaseModel, Field

from src.core.contracts import validate_pool_state
from src.core.errors import EmptyPool


class PoolState(BaseModel):
    """
    Снапшот пула (reserves + total pool shares).

    Immutable модель (frozen=True). Все значения — целые неотрицательные
    (единицы наименьшего деления токена).
    """

    reserve_a: int = Field(..., ge=0, strict=True, description="Reserve token A")
    reserve_b: int = Field(..., ge=0, strict=True, description="Reserve token B")
    total_pool_shares: int = Field(
        ..., ge=0, strict=True, description="Total supply pool shares (LP)"
    )

    model_config = {"frozen": True}  # Immutable

    @property
    def is_empty(self) -> bool:
        """True если любой из reserves или supply равен нулю."""
        return self.reserve_a == 0 or self.reserve_b == 0 or self.total_pool_shares == 0

    def require_liquid(self) -> "PoolState":
        """
        Проверка, что по снапшоту можно котировать.

        Returns:
            self (для chaining)

        Raises:
            EmptyPool: если reserves или total_pool_shares равны нулю
        """
        if self.is_empty:
            raise EmptyPool(
                f"Pool is empty: reserve_a={self.reserve_a}, reserve_b={self.reserve_b}, "
                f"total_pool_shares={self.total_pool_shares}"
            )
        return self

    def flipped(self) -> "PoolState":
        """Снапшот с переставленными токенами (B, A)."""
        return PoolState(
            reserve_a=self.reserve_b,
            reserve_b=self.reserve_a,
            total_pool_shares=self.total_pool_shares,
        )

    @classmethod
    def from_contract(cls, data: Dict[str, Any]) -> "PoolState":
        """
        Снапшот из внешнего dict с проверкой JSON Schema `pool_state`.

        Raises:
            jsonschema.ValidationError: если dict не соответствует схеме
        """
        validate_pool_state(data)
        return cls.model_validate(data)
