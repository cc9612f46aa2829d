"""
Тесты для Liquidity Provisioning Engine

Проверяет:
1. provide(): минимумы по обеим ногам, deadline, сброс approvals
2. Повторная проверка минимумов, если адаптер пула их не проверил
3. withdraw_liquidity(): slippage-минимумы и канонический порядок
4. Обратный порядок токенов в пуле
"""

import pytest

from src.core.errors import DeadlineExceeded, SlippageExceeded
from src.core.math.slippage import SlippageGuard
from src.vault.adapters.memory import ConstantProductPool, InMemoryTokenLedger, ManualClock, seed_pool
from src.vault.liquidity import LiquidityProvisioningEngine
from src.vault.reserve_oracle import ReserveOracle

VAULT = "vault"


class LenientPool(ConstantProductPool):
    """Пул, игнорирующий переданные минимумы"""

    def add_liquidity(
        self, amount0_desired, amount1_desired, amount0_min, amount1_min, payer, recipient, deadline
    ):
        return super().add_liquidity(
            amount0_desired, amount1_desired, 0, 0, payer, recipient, deadline
        )

    def remove_liquidity(self, pool_shares, amount0_min, amount1_min, owner, recipient, deadline):
        return super().remove_liquidity(pool_shares, 0, 0, owner, recipient, deadline)


def build_engine(pool: ConstantProductPool, ledger: InMemoryTokenLedger, clock: ManualClock):
    return LiquidityProvisioningEngine(
        pool=pool,
        oracle=ReserveOracle(pool, "TKA", "TKB"),
        token_ledger=ledger,
        guard=SlippageGuard(manager="manager", tolerance_bps=9950),
        vault_address=VAULT,
        deadline_sec=100,
        clock=clock,
    )


@pytest.fixture
def ledger() -> InMemoryTokenLedger:
    return InMemoryTokenLedger()


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def pool(ledger: InMemoryTokenLedger, clock: ManualClock) -> ConstantProductPool:
    """reserves (2_000_000, 8_000_000), supply 4_000_000"""
    pool = ConstantProductPool(ledger, "TKA", "TKB", clock)
    seed_pool(pool, ledger, "lp", 2_000_000, 8_000_000)
    return pool


@pytest.fixture
def engine(pool, ledger, clock) -> LiquidityProvisioningEngine:
    ledger.mint("TKA", VAULT, 100_000)
    ledger.mint("TKB", VAULT, 100_000)
    return build_engine(pool, ledger, clock)


# =============================================================================
# PROVIDE
# =============================================================================


class TestProvide:
    """Тесты для provide()"""

    def test_balanced(self, engine, pool, ledger) -> None:
        result = engine.provide(500, 2000)

        assert (result.used_a, result.used_b, result.pool_shares) == (500, 2000, 1000)
        assert pool.balance_of(VAULT) == 1000
        assert ledger.balance_of("TKA", VAULT) == 100_000 - 500

    def test_approvals_reset(self, engine, pool, ledger) -> None:
        engine.provide(500, 2000)
        assert ledger.allowance("TKA", VAULT, pool.address) == 0
        assert ledger.allowance("TKB", VAULT, pool.address) == 0

    def test_pool_enforces_minimum(self, engine) -> None:
        """2100 B запрошено, пул берёт 2000 < floor(2100 * 0.995)"""
        with pytest.raises(SlippageExceeded):
            engine.provide(500, 2100)

    def test_approvals_reset_when_pool_rejects(self, engine, pool, ledger) -> None:
        with pytest.raises(SlippageExceeded):
            engine.provide(500, 2100)
        assert ledger.allowance("TKA", VAULT, pool.address) == 0
        assert ledger.allowance("TKB", VAULT, pool.address) == 0

    def test_engine_rechecks_minimum(self, ledger, clock) -> None:
        pool = LenientPool(ledger, "TKA", "TKB", clock)
        seed_pool(pool, ledger, "lp", 2_000_000, 8_000_000)
        ledger.mint("TKA", VAULT, 100_000)
        ledger.mint("TKB", VAULT, 100_000)
        engine = build_engine(pool, ledger, clock)

        with pytest.raises(SlippageExceeded, match="minimum accepted 2089"):
            engine.provide(500, 2100)

    def test_within_tolerance_accepted(self, engine) -> None:
        """2005 B запрошено, пул берёт 2000 >= floor(2005 * 0.995) = 1994"""
        result = engine.provide(500, 2005)
        assert result.used_b == 2000

    def test_deadline_exceeded(self, pool, ledger, clock) -> None:
        """Часы движка отстают от часов пула больше, чем на deadline_sec"""
        ledger.mint("TKA", VAULT, 100_000)
        ledger.mint("TKB", VAULT, 100_000)
        engine = build_engine(pool, ledger, ManualClock(now=clock() - 101))

        with pytest.raises(DeadlineExceeded):
            engine.provide(500, 2000)

    def test_flipped_pool(self, ledger, clock) -> None:
        pool = ConstantProductPool(ledger, "TKB", "TKA", clock)
        seed_pool(pool, ledger, "lp", 8_000_000, 2_000_000)
        ledger.mint("TKA", VAULT, 100_000)
        ledger.mint("TKB", VAULT, 100_000)
        engine = build_engine(pool, ledger, clock)

        result = engine.provide(500, 2000)
        assert (result.used_a, result.used_b, result.pool_shares) == (500, 2000, 1000)


# =============================================================================
# WITHDRAW LIQUIDITY
# =============================================================================


class TestWithdrawLiquidity:
    """Тесты для withdraw_liquidity()"""

    def test_round_trip(self, engine, ledger) -> None:
        engine.provide(500, 2000)
        amounts = engine.withdraw_liquidity(1000, 500, 2000)
        assert amounts == (500, 2000)
        assert ledger.balance_of("TKA", VAULT) == 100_000

    def test_price_moved_beyond_tolerance(self, engine, pool, ledger) -> None:
        engine.provide(500, 2000)

        # Котировка (500, 2000) устарела: большой swap двигает цену
        ledger.mint("TKA", "whale", 1_000_000)
        ledger.approve("TKA", "whale", pool.address, 1_000_000)
        pool.swap_exact_in(1_000_000, "TKA", "TKB", payer="whale", recipient="whale")

        with pytest.raises(SlippageExceeded):
            engine.withdraw_liquidity(1000, 500, 2000)

    def test_engine_rechecks_withdraw_minimum(self, ledger, clock) -> None:
        pool = LenientPool(ledger, "TKA", "TKB", clock)
        seed_pool(pool, ledger, "lp", 2_000_000, 8_000_000)
        ledger.mint("TKA", VAULT, 100_000)
        ledger.mint("TKB", VAULT, 100_000)
        engine = build_engine(pool, ledger, clock)
        engine.provide(500, 2000)

        with pytest.raises(SlippageExceeded, match="TKB"):
            engine.withdraw_liquidity(1000, 500, 2100)
