"""Swap Rebalancer — балансировка single-asset депозита перед add-liquidity.

Из депозита X одного токена обменивается ровно S = get_swap_amount(...)
на парный токен так, чтобы остатки (X - S, out) были в отношении
пост-swap reserves и add-liquidity прошёл без остатка (при неподвижной цене).

Swap-нога выполняется БЕЗ slippage-минимума — в отличие от всех остальных
вызовов пула. Асимметрия сохранена намеренно.
"""

import logging
from typing import Optional

from src.core.domain.pool_state import PoolState
from src.core.domain.results import RebalanceResult
from src.core.errors import ZeroResult
from src.core.math.swap_math import get_amount_out, get_swap_amount, simulate_swap
from src.vault.ports import IPool, ITokenLedger
from src.vault.reserve_oracle import ReserveOracle

logger = logging.getLogger(__name__)


class SwapRebalancer:
    """Swap-ребалансировка депозита одного токена пары."""

    def __init__(
        self,
        pool: IPool,
        oracle: ReserveOracle,
        token_ledger: ITokenLedger,
        vault_address: str,
        fee_numerator: int = 997,
        fee_denominator: int = 1000,
    ):
        self._pool = pool
        self._oracle = oracle
        self._token_ledger = token_ledger
        self._vault_address = vault_address
        self.fee_numerator = fee_numerator
        self.fee_denominator = fee_denominator

    def _direction(self, state: PoolState, token_in: str) -> tuple[str, int, int]:
        """(token_out, reserve_in, reserve_out) для депонируемого токена."""
        if token_in == self._oracle.token_a:
            return self._oracle.token_b, state.reserve_a, state.reserve_b
        if token_in == self._oracle.token_b:
            return self._oracle.token_a, state.reserve_b, state.reserve_a
        raise ValueError(f"token {token_in} is not part of the vault pair")

    def simulate(
        self, state: PoolState, amount: int, token_in: Optional[str] = None
    ) -> tuple[RebalanceResult, PoolState]:
        """
        Ребалансировка на снапшоте без побочных эффектов.

        Returns:
            (результат swap, пост-swap снапшот пула)

        Raises:
            EmptyPool: если пул пуст
            ZeroResult: если swap ничего не даёт
        """
        token_in = token_in or self._oracle.token_a
        state.require_liquid()
        _, reserve_in, reserve_out = self._direction(state, token_in)

        swap_amount, amount_out = simulate_swap(
            amount, reserve_in, reserve_out, self.fee_numerator, self.fee_denominator
        )
        result = RebalanceResult(
            swapped_in=swap_amount,
            received_out=amount_out,
            remaining_in=amount - swap_amount,
        )

        if token_in == self._oracle.token_a:
            post_state = PoolState(
                reserve_a=state.reserve_a + swap_amount,
                reserve_b=state.reserve_b - amount_out,
                total_pool_shares=state.total_pool_shares,
            )
        else:
            post_state = PoolState(
                reserve_a=state.reserve_a - amount_out,
                reserve_b=state.reserve_b + swap_amount,
                total_pool_shares=state.total_pool_shares,
            )
        return result, post_state

    def rebalance(self, amount: int, token_in: Optional[str] = None) -> RebalanceResult:
        """
        Обменять оптимальную часть депозита на парный токен.

        Reserves читаются заново непосредственно перед swap.

        Args:
            amount: размер депозита (уже на балансе vault)
            token_in: депонируемый токен (default: token_a)

        Raises:
            EmptyPool: если пул пуст
            ZeroResult: если размер swap или его output равен нулю
        """
        token_in = token_in or self._oracle.token_a
        state = self._oracle.require_liquid()
        token_out, reserve_in, reserve_out = self._direction(state, token_in)

        swap_amount = get_swap_amount(
            reserve_in, amount, self.fee_numerator, self.fee_denominator
        )
        if swap_amount == 0:
            raise ZeroResult(f"deposit {amount} too small to rebalance (swap amount is zero)")

        expected_out = get_amount_out(
            swap_amount, reserve_in, reserve_out, self.fee_numerator, self.fee_denominator
        )

        self._token_ledger.approve(token_in, self._vault_address, self._pool.address, swap_amount)
        amount_out = self._pool.swap_exact_in(
            swap_amount,
            token_in,
            token_out,
            payer=self._vault_address,
            recipient=self._vault_address,
        )
        if amount_out == 0:
            raise ZeroResult(f"swap of {swap_amount} {token_in} returned zero {token_out}")

        logger.debug(
            f"Rebalanced deposit {amount} {token_in}: swapped {swap_amount} -> "
            f"{amount_out} {token_out} (expected {expected_out})"
        )
        return RebalanceResult(
            swapped_in=swap_amount,
            received_out=amount_out,
            remaining_in=amount - swap_amount,
        )
