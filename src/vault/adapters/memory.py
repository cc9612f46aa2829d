"""In-memory адаптеры: детерминированные пул, token ledger, share ledger, часы.

Тестовые двойники портов vault и основа offline-симуляций.
ConstantProductPool повторяет семантику Uniswap-v2 pair + router:
- первый депозит выпускает isqrt(a0 * a1) - MIN_LIQUIDITY, MIN_LIQUIDITY блокируется
- add_liquidity берёт оптимальную по цене пару и проверяет минимумы
- remove_liquidity платит пропорционально, floor
- swap берёт комиссию fee_numerator / fee_denominator
"""

import copy
import logging
from typing import Any, Dict, Final, Optional

from src.core.errors import (
    DeadlineExceeded,
    EmptyPool,
    InsufficientBalance,
    SlippageExceeded,
    Unauthorized,
    ZeroResult,
)
from src.core.math.conversions import quote
from src.core.math.swap_math import get_amount_out
from src.core.math.uint_math import MAX_UINT256, isqrt, mul_div, validate_uint
from src.vault.ports import DEAD_ADDRESS

logger = logging.getLogger(__name__)

# Pool shares, навсегда заблокированные при первом депозите
MIN_LIQUIDITY: Final[int] = 1000


class ManualClock:
    """Часы, которые двигаются только вручную (unix seconds)."""

    def __init__(self, now: int = 1_700_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


# =============================================================================
# TOKEN LEDGER
# =============================================================================


class InMemoryTokenLedger:
    """Balances и allowances для любого количества токенов."""

    def __init__(self):
        self._balances: Dict[str, Dict[str, int]] = {}
        self._allowances: Dict[str, Dict[tuple[str, str], int]] = {}

    def balance_of(self, token: str, owner: str) -> int:
        return self._balances.get(token, {}).get(owner, 0)

    def allowance(self, token: str, owner: str, spender: str) -> int:
        return self._allowances.get(token, {}).get((owner, spender), 0)

    def mint(self, token: str, to: str, amount: int) -> None:
        """Выпуск токенов (только для тестов / симуляции)."""
        validate_uint(amount, "amount")
        balances = self._balances.setdefault(token, {})
        balances[to] = balances.get(to, 0) + amount

    def approve(self, token: str, owner: str, spender: str, amount: int) -> None:
        validate_uint(amount, "amount")
        self._allowances.setdefault(token, {})[(owner, spender)] = amount

    def transfer(self, token: str, sender: str, to: str, amount: int) -> None:
        validate_uint(amount, "amount")
        balances = self._balances.setdefault(token, {})
        available = balances.get(sender, 0)
        if available < amount:
            raise InsufficientBalance(
                f"{sender} has {available} {token}, cannot transfer {amount}"
            )
        balances[sender] = available - amount
        balances[to] = balances.get(to, 0) + amount

    def transfer_from(self, token: str, spender: str, owner: str, to: str, amount: int) -> None:
        if spender != owner:
            current = self.allowance(token, owner, spender)
            if current < amount:
                raise Unauthorized(
                    f"{spender} allowance {current} {token} from {owner} is below {amount}"
                )
            if current != MAX_UINT256:
                self._allowances[token][(owner, spender)] = current - amount
        self.transfer(token, owner, to, amount)

    def snapshot(self) -> Any:
        return copy.deepcopy((self._balances, self._allowances))

    def restore(self, state: Any) -> None:
        self._balances, self._allowances = copy.deepcopy(state)


# =============================================================================
# SHARE LEDGER
# =============================================================================


class InMemoryShareLedger:
    """Ledger vault shares (ERC-20-подобный)."""

    def __init__(self):
        self._total_supply = 0
        self._balances: Dict[str, int] = {}
        self._allowances: Dict[tuple[str, str], int] = {}

    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, owner: str) -> int:
        return self._balances.get(owner, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner, spender), 0)

    def approve(self, owner: str, spender: str, amount: int) -> None:
        validate_uint(amount, "amount")
        self._allowances[(owner, spender)] = amount

    def spend_allowance(self, owner: str, spender: str, amount: int) -> None:
        current = self.allowance(owner, spender)
        if current == MAX_UINT256:
            return
        if current < amount:
            raise Unauthorized(
                f"{spender} share allowance {current} from {owner} is below {amount}"
            )
        self._allowances[(owner, spender)] = current - amount

    def mint(self, to: str, amount: int) -> None:
        validate_uint(amount, "amount")
        self._balances[to] = self._balances.get(to, 0) + amount
        self._total_supply += amount

    def burn(self, owner: str, amount: int) -> None:
        validate_uint(amount, "amount")
        available = self.balance_of(owner)
        if available < amount:
            raise InsufficientBalance(f"{owner} has {available} shares, cannot burn {amount}")
        self._balances[owner] = available - amount
        self._total_supply -= amount

    def snapshot(self) -> Any:
        return (self._total_supply, dict(self._balances), dict(self._allowances))

    def restore(self, state: Any) -> None:
        total_supply, balances, allowances = state
        self._total_supply = total_supply
        self._balances = dict(balances)
        self._allowances = dict(allowances)


# =============================================================================
# CONSTANT-PRODUCT POOL
# =============================================================================


class ConstantProductPool:
    """Uniswap-v2-подобный пул (pair + router) поверх InMemoryTokenLedger.

    Reserves хранятся внутри пула и совпадают с балансами пула в ledger,
    пока в пул не переводят токены напрямую.
    """

    def __init__(
        self,
        ledger: InMemoryTokenLedger,
        token0: str,
        token1: str,
        clock: ManualClock,
        address: str = "pool",
        fee_numerator: int = 997,
        fee_denominator: int = 1000,
    ):
        if token0 == token1:
            raise ValueError("pool tokens must differ")
        self._ledger = ledger
        self._token0 = token0
        self._token1 = token1
        self._clock = clock
        self._address = address
        self.fee_numerator = fee_numerator
        self.fee_denominator = fee_denominator

        self._reserve0 = 0
        self._reserve1 = 0
        self._total_supply = 0
        self._lp_balances: Dict[str, int] = {}

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @property
    def address(self) -> str:
        return self._address

    def tokens(self) -> tuple[str, str]:
        return self._token0, self._token1

    def get_reserves(self) -> tuple[int, int]:
        return self._reserve0, self._reserve1

    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, owner: str) -> int:
        return self._lp_balances.get(owner, 0)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _check_deadline(self, deadline: int) -> None:
        now = self._clock()
        if now > deadline:
            raise DeadlineExceeded(f"deadline {deadline} passed (now={now})")

    def _pull(self, token: str, payer: str, amount: int) -> None:
        self._ledger.transfer_from(token, self._address, payer, self._address, amount)

    def _mint_lp(self, to: str, amount: int) -> None:
        self._lp_balances[to] = self._lp_balances.get(to, 0) + amount
        self._total_supply += amount

    def _optimal_amounts(
        self, amount0_desired: int, amount1_desired: int, amount0_min: int, amount1_min: int
    ) -> tuple[int, int]:
        if self._reserve0 == 0 and self._reserve1 == 0:
            return amount0_desired, amount1_desired

        amount1_optimal = quote(amount0_desired, self._reserve0, self._reserve1)
        if amount1_optimal <= amount1_desired:
            if amount1_optimal < amount1_min:
                raise SlippageExceeded(
                    f"insufficient token1 amount: optimal {amount1_optimal} < min {amount1_min}"
                )
            return amount0_desired, amount1_optimal

        amount0_optimal = quote(amount1_desired, self._reserve1, self._reserve0)
        if amount0_optimal < amount0_min:
            raise SlippageExceeded(
                f"insufficient token0 amount: optimal {amount0_optimal} < min {amount0_min}"
            )
        return amount0_optimal, amount1_desired

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add_liquidity(
        self,
        amount0_desired: int,
        amount1_desired: int,
        amount0_min: int,
        amount1_min: int,
        payer: str,
        recipient: str,
        deadline: int,
    ) -> tuple[int, int, int]:
        self._check_deadline(deadline)
        amount0, amount1 = self._optimal_amounts(
            amount0_desired, amount1_desired, amount0_min, amount1_min
        )

        if self._total_supply == 0:
            root = isqrt(amount0 * amount1)
            if root <= MIN_LIQUIDITY:
                raise ZeroResult(f"initial liquidity {root} does not exceed {MIN_LIQUIDITY}")
            liquidity = root - MIN_LIQUIDITY
            self._mint_lp(DEAD_ADDRESS, MIN_LIQUIDITY)
        else:
            liquidity = min(
                mul_div(amount0, self._total_supply, self._reserve0),
                mul_div(amount1, self._total_supply, self._reserve1),
            )
        if liquidity == 0:
            raise ZeroResult("insufficient liquidity minted")

        self._pull(self._token0, payer, amount0)
        self._pull(self._token1, payer, amount1)
        self._reserve0 += amount0
        self._reserve1 += amount1
        self._mint_lp(recipient, liquidity)
        return amount0, amount1, liquidity

    def remove_liquidity(
        self,
        pool_shares: int,
        amount0_min: int,
        amount1_min: int,
        owner: str,
        recipient: str,
        deadline: int,
    ) -> tuple[int, int]:
        self._check_deadline(deadline)
        validate_uint(pool_shares, "pool_shares")
        if self._total_supply == 0:
            raise EmptyPool("pool has no liquidity")

        held = self.balance_of(owner)
        if held < pool_shares:
            raise InsufficientBalance(f"{owner} holds {held} pool shares, cannot burn {pool_shares}")

        amount0 = mul_div(pool_shares, self._reserve0, self._total_supply)
        amount1 = mul_div(pool_shares, self._reserve1, self._total_supply)
        if amount0 == 0 or amount1 == 0:
            raise ZeroResult("insufficient liquidity burned")
        if amount0 < amount0_min:
            raise SlippageExceeded(f"insufficient token0 amount: {amount0} < min {amount0_min}")
        if amount1 < amount1_min:
            raise SlippageExceeded(f"insufficient token1 amount: {amount1} < min {amount1_min}")

        self._lp_balances[owner] = held - pool_shares
        self._total_supply -= pool_shares
        self._reserve0 -= amount0
        self._reserve1 -= amount1
        self._ledger.transfer(self._token0, self._address, recipient, amount0)
        self._ledger.transfer(self._token1, self._address, recipient, amount1)
        return amount0, amount1

    def swap_exact_in(
        self,
        amount_in: int,
        token_in: str,
        token_out: str,
        payer: str,
        recipient: str,
    ) -> int:
        if (token_in, token_out) == (self._token0, self._token1):
            reserve_in, reserve_out = self._reserve0, self._reserve1
        elif (token_in, token_out) == (self._token1, self._token0):
            reserve_in, reserve_out = self._reserve1, self._reserve0
        else:
            raise ValueError(f"pool does not trade {token_in} -> {token_out}")

        if amount_in == 0:
            raise ZeroResult("insufficient input amount")
        amount_out = get_amount_out(
            amount_in, reserve_in, reserve_out, self.fee_numerator, self.fee_denominator
        )
        if amount_out == 0:
            raise ZeroResult("insufficient output amount")

        self._pull(token_in, payer, amount_in)
        self._ledger.transfer(token_out, self._address, recipient, amount_out)
        if token_in == self._token0:
            self._reserve0 += amount_in
            self._reserve1 -= amount_out
        else:
            self._reserve1 += amount_in
            self._reserve0 -= amount_out
        return amount_out

    def accrue_fees(self, amount0: int, amount1: int, donor: str) -> None:
        """
        Перевод токенов в reserves без выпуска pool shares.

        Моделирует накопленные торговые комиссии: стоимость pool share растёт.
        """
        self._ledger.transfer(self._token0, donor, self._address, amount0)
        self._ledger.transfer(self._token1, donor, self._address, amount1)
        self._reserve0 += amount0
        self._reserve1 += amount1

    def snapshot(self) -> Any:
        return (
            self._reserve0,
            self._reserve1,
            self._total_supply,
            dict(self._lp_balances),
        )

    def restore(self, state: Any) -> None:
        reserve0, reserve1, total_supply, lp_balances = state
        self._reserve0 = reserve0
        self._reserve1 = reserve1
        self._total_supply = total_supply
        self._lp_balances = dict(lp_balances)


def seed_pool(
    pool: ConstantProductPool,
    ledger: InMemoryTokenLedger,
    provider: str,
    amount0: int,
    amount1: int,
    deadline: Optional[int] = None,
) -> int:
    """
    Выпустить провайдеру токены и внести начальную ликвидность.

    Returns:
        pool shares провайдера
    """
    token0, token1 = pool.tokens()
    ledger.mint(token0, provider, amount0)
    ledger.mint(token1, provider, amount1)
    ledger.approve(token0, provider, pool.address, amount0)
    ledger.approve(token1, provider, pool.address, amount1)
    _, _, liquidity = pool.add_liquidity(
        amount0,
        amount1,
        0,
        0,
        payer=provider,
        recipient=provider,
        deadline=deadline if deadline is not None else MAX_UINT256,
    )
    logger.debug(f"Seeded pool {pool.address} with ({amount0}, {amount1}) -> {liquidity} shares")
    return liquidity
