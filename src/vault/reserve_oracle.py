"""Reserve Oracle — чтение reserves пула в каноническом порядке (A, B).

Чистый источник данных, без мутаций и без кэша: каждый вызов заново
читает пул, потому что между операциями reserves могут измениться.
"""

from src.core.domain.pool_state import PoolState
from src.vault.ports import IPool


class ReserveOracle:
    """Reserves и supply пула в порядке (token_a, token_b) vault.

    Пул может хранить токены в обратном порядке (token0 == token_b) —
    оракул переводит всё в канонический порядок и обратно.
    """

    def __init__(self, pool: IPool, token_a: str, token_b: str):
        """
        Args:
            pool: пул (адаптер)
            token_a: канонический первый токен vault
            token_b: канонический второй токен vault

        Raises:
            ValueError: если пул не торгует парой (token_a, token_b)
        """
        token0, token1 = pool.tokens()
        if (token0, token1) == (token_a, token_b):
            self._flipped = False
        elif (token0, token1) == (token_b, token_a):
            self._flipped = True
        else:
            raise ValueError(
                f"Pool tokens ({token0}, {token1}) do not match vault pair ({token_a}, {token_b})"
            )

        self._pool = pool
        self.token_a = token_a
        self.token_b = token_b

    @property
    def flipped(self) -> bool:
        """True если в пуле token0 == token_b."""
        return self._flipped

    def reserves(self) -> tuple[int, int]:
        """(reserve_a, reserve_b) — свежее чтение."""
        reserve0, reserve1 = self._pool.get_reserves()
        return self.from_pool_order(reserve0, reserve1)

    def total_pool_shares(self) -> int:
        return self._pool.total_supply()

    def snapshot(self) -> PoolState:
        """Свежий PoolState (может быть пустым)."""
        reserve_a, reserve_b = self.reserves()
        return PoolState(
            reserve_a=reserve_a,
            reserve_b=reserve_b,
            total_pool_shares=self.total_pool_shares(),
        )

    def require_liquid(self) -> PoolState:
        """
        Свежий PoolState, пригодный для котировки.

        Raises:
            EmptyPool: если reserves или supply равны нулю
        """
        return self.snapshot().require_liquid()

    def to_pool_order(self, amount_a: int, amount_b: int) -> tuple[int, int]:
        """(A, B) → (token0, token1)."""
        if self._flipped:
            return amount_b, amount_a
        return amount_a, amount_b

    def from_pool_order(self, amount0: int, amount1: int) -> tuple[int, int]:
        """(token0, token1) → (A, B)."""
        if self._flipped:
            return amount1, amount0
        return amount0, amount1
