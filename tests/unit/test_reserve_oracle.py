"""
Тесты для Reserve Oracle

Проверяет:
1. Канонический порядок (A, B) при прямом и обратном порядке токенов в пуле
2. Отсутствие кэша: каждое чтение видит свежие reserves
3. EmptyPool для пустого пула
"""

import pytest

from src.core.domain import PoolState
from src.core.errors import EmptyPool
from src.core.math.uint_math import MAX_UINT256
from src.vault.adapters.memory import ConstantProductPool, InMemoryTokenLedger, ManualClock, seed_pool
from src.vault.reserve_oracle import ReserveOracle


@pytest.fixture
def ledger() -> InMemoryTokenLedger:
    return InMemoryTokenLedger()


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def flipped_pool(ledger: InMemoryTokenLedger, clock: ManualClock) -> ConstantProductPool:
    """Пул хранит TKB как token0"""
    pool = ConstantProductPool(ledger, "TKB", "TKA", clock)
    seed_pool(pool, ledger, "lp", 2_000_000, 1_000_000)
    return pool


class TestReserveOracle:
    """Тесты для ReserveOracle"""

    def test_direct_order(self, ledger: InMemoryTokenLedger, clock: ManualClock) -> None:
        pool = ConstantProductPool(ledger, "TKA", "TKB", clock)
        seed_pool(pool, ledger, "lp", 1_000_000, 2_000_000)
        oracle = ReserveOracle(pool, "TKA", "TKB")

        assert not oracle.flipped
        assert oracle.reserves() == (1_000_000, 2_000_000)
        assert oracle.to_pool_order(1, 2) == (1, 2)

    def test_flipped_order(self, flipped_pool: ConstantProductPool) -> None:
        oracle = ReserveOracle(flipped_pool, "TKA", "TKB")

        assert oracle.flipped
        assert oracle.reserves() == (1_000_000, 2_000_000)
        assert oracle.to_pool_order(1, 2) == (2, 1)
        assert oracle.from_pool_order(2, 1) == (1, 2)

    def test_snapshot(self, flipped_pool: ConstantProductPool) -> None:
        oracle = ReserveOracle(flipped_pool, "TKA", "TKB")
        assert oracle.snapshot() == PoolState(
            reserve_a=1_000_000, reserve_b=2_000_000, total_pool_shares=1_414_213
        )
        assert oracle.total_pool_shares() == 1_414_213

    def test_foreign_pair_rejected(self, flipped_pool: ConstantProductPool) -> None:
        with pytest.raises(ValueError, match="do not match"):
            ReserveOracle(flipped_pool, "TKA", "TKC")

    def test_reads_are_fresh(
        self, flipped_pool: ConstantProductPool, ledger: InMemoryTokenLedger
    ) -> None:
        oracle = ReserveOracle(flipped_pool, "TKA", "TKB")
        before = oracle.snapshot()

        ledger.mint("TKA", "trader", 10_000)
        ledger.approve("TKA", "trader", flipped_pool.address, MAX_UINT256)
        flipped_pool.swap_exact_in(10_000, "TKA", "TKB", payer="trader", recipient="trader")

        after = oracle.snapshot()
        assert after.reserve_a == before.reserve_a + 10_000
        assert after.reserve_b < before.reserve_b

    def test_empty_pool(self, ledger: InMemoryTokenLedger, clock: ManualClock) -> None:
        pool = ConstantProductPool(ledger, "TKA", "TKB", clock)
        oracle = ReserveOracle(pool, "TKA", "TKB")
        assert oracle.snapshot().is_empty
        with pytest.raises(EmptyPool):
            oracle.require_liquid()
