"""Liquidity Provisioning Engine — add/remove liquidity с slippage-защитой.

Каждый вызов пула получает и запрошенные количества, и их минимумы
(SlippageGuard), плюс deadline = now + deadline_sec. После возврата
фактические количества перепроверяются: пул-адаптер мог не проверить
минимумы сам.
"""

import logging
from typing import Callable

from src.core.domain.results import ProvideResult
from src.core.errors import SlippageExceeded, ZeroResult
from src.core.math.slippage import SlippageGuard
from src.vault.ports import IPool, ITokenLedger
from src.vault.reserve_oracle import ReserveOracle

logger = logging.getLogger(__name__)


class LiquidityProvisioningEngine:
    """Add/remove liquidity для vault в каноническом порядке токенов."""

    def __init__(
        self,
        pool: IPool,
        oracle: ReserveOracle,
        token_ledger: ITokenLedger,
        guard: SlippageGuard,
        vault_address: str,
        deadline_sec: int,
        clock: Callable[[], float],
    ):
        self._pool = pool
        self._oracle = oracle
        self._token_ledger = token_ledger
        self._guard = guard
        self._vault_address = vault_address
        self._deadline_sec = deadline_sec
        self._clock = clock

    def _deadline(self) -> int:
        return int(self._clock()) + self._deadline_sec

    def _check_floor(self, leg: str, actual: int, minimum: int) -> None:
        if actual < minimum:
            raise SlippageExceeded(f"{leg}: got {actual}, minimum accepted {minimum}")

    def provide(self, amount_a: int, amount_b: int) -> ProvideResult:
        """
        Добавить ликвидность (amount_a, amount_b) с баланса vault.

        Returns:
            ProvideResult(used_a, used_b, pool_shares)

        Raises:
            SlippageExceeded: если пул использовал меньше минимума по любой ноге
            DeadlineExceeded: если пул отклонил вызов по deadline
            ZeroResult: если пул не выпустил pool shares
        """
        min_a = self._guard.minimum(amount_a)
        min_b = self._guard.minimum(amount_b)

        token0, token1 = self._pool.tokens()
        amount0, amount1 = self._oracle.to_pool_order(amount_a, amount_b)
        min0, min1 = self._oracle.to_pool_order(min_a, min_b)

        self._token_ledger.approve(token0, self._vault_address, self._pool.address, amount0)
        self._token_ledger.approve(token1, self._vault_address, self._pool.address, amount1)

        try:
            used0, used1, pool_shares = self._pool.add_liquidity(
                amount0,
                amount1,
                min0,
                min1,
                payer=self._vault_address,
                recipient=self._vault_address,
                deadline=self._deadline(),
            )
        finally:
            # Неиспользованные approvals не оставляем, даже если пул отказал
            self._token_ledger.approve(token0, self._vault_address, self._pool.address, 0)
            self._token_ledger.approve(token1, self._vault_address, self._pool.address, 0)

        used_a, used_b = self._oracle.from_pool_order(used0, used1)
        self._check_floor(self._oracle.token_a, used_a, min_a)
        self._check_floor(self._oracle.token_b, used_b, min_b)

        if pool_shares == 0:
            raise ZeroResult(f"add_liquidity({amount_a}, {amount_b}) minted zero pool shares")

        logger.debug(
            f"Provided liquidity: used=({used_a}, {used_b}) of ({amount_a}, {amount_b}), "
            f"pool_shares={pool_shares}"
        )
        return ProvideResult(used_a=used_a, used_b=used_b, pool_shares=pool_shares)

    def withdraw_liquidity(
        self, pool_shares: int, expected_a: int, expected_b: int
    ) -> tuple[int, int]:
        """
        Сжечь pool_shares vault и получить оба токена на баланс vault.

        Args:
            pool_shares: сколько pool shares сжечь
            expected_a: котировка token A (shares_to_assets)
            expected_b: котировка token B

        Returns:
            (amount_a, amount_b) фактически полученные

        Raises:
            SlippageExceeded: если любая нога ниже минимума
            DeadlineExceeded: если пул отклонил вызов по deadline
        """
        min_a = self._guard.minimum(expected_a)
        min_b = self._guard.minimum(expected_b)
        min0, min1 = self._oracle.to_pool_order(min_a, min_b)

        amount0, amount1 = self._pool.remove_liquidity(
            pool_shares,
            min0,
            min1,
            owner=self._vault_address,
            recipient=self._vault_address,
            deadline=self._deadline(),
        )

        amount_a, amount_b = self._oracle.from_pool_order(amount0, amount1)
        self._check_floor(self._oracle.token_a, amount_a, min_a)
        self._check_floor(self._oracle.token_b, amount_b, min_b)

        logger.debug(
            f"Withdrew liquidity: pool_shares={pool_shares} -> ({amount_a}, {amount_b}), "
            f"expected ({expected_a}, {expected_b})"
        )
        return amount_a, amount_b
