"""
Тесты для доменных моделей: PoolState, VaultConfig, результаты операций

Проверяет:
1. Создание и валидацию моделей Pydantic / dataclass
2. Immutability (frozen=True)
3. Сериализацию/десериализацию JSON
4. Граничные случаи и невалидные данные
"""

import dataclasses
import json

import pytest
from pydantic import ValidationError

from src.core.domain import (
    DEFAULT_DEADLINE_SEC,
    DEFAULT_SLIPPAGE_TOLERANCE_BPS,
    DepositResult,
    PoolState,
    VaultConfig,
    VaultMode,
    WithdrawResult,
)
from src.core.errors import EmptyPool, InvalidTolerance

# =============================================================================
# POOL STATE TESTS
# =============================================================================


class TestPoolState:
    """Тесты для модели PoolState"""

    @pytest.fixture
    def state(self) -> PoolState:
        return PoolState(reserve_a=1000, reserve_b=2000, total_pool_shares=1414)

    def test_valid_creation(self, state: PoolState) -> None:
        assert state.reserve_a == 1000
        assert state.reserve_b == 2000
        assert state.total_pool_shares == 1414
        assert not state.is_empty

    def test_frozen(self, state: PoolState) -> None:
        with pytest.raises(ValidationError):
            state.reserve_a = 1  # type: ignore[misc]

    def test_negative_rejected(self) -> None:
        with pytest.raises(ValidationError):
            PoolState(reserve_a=-1, reserve_b=2000, total_pool_shares=1414)

    def test_float_rejected(self) -> None:
        """Strict int: float не приводится молча"""
        with pytest.raises(ValidationError):
            PoolState(reserve_a=1000.0, reserve_b=2000, total_pool_shares=1414)

    def test_huge_values(self) -> None:
        state = PoolState(reserve_a=2**255, reserve_b=2**255, total_pool_shares=2**255)
        assert state.reserve_a == 2**255

    @pytest.mark.parametrize(
        "reserve_a,reserve_b,total",
        [(0, 2000, 1414), (1000, 0, 1414), (1000, 2000, 0), (0, 0, 0)],
    )
    def test_empty(self, reserve_a: int, reserve_b: int, total: int) -> None:
        state = PoolState(reserve_a=reserve_a, reserve_b=reserve_b, total_pool_shares=total)
        assert state.is_empty
        with pytest.raises(EmptyPool, match="Pool is empty"):
            state.require_liquid()

    def test_require_liquid_returns_self(self, state: PoolState) -> None:
        assert state.require_liquid() is state

    def test_flipped(self, state: PoolState) -> None:
        flipped = state.flipped()
        assert (flipped.reserve_a, flipped.reserve_b) == (2000, 1000)
        assert flipped.total_pool_shares == 1414
        assert flipped.flipped() == state

    def test_json_round_trip(self, state: PoolState) -> None:
        restored = PoolState.model_validate_json(state.model_dump_json())
        assert restored == state

    def test_from_contract(self) -> None:
        state = PoolState.from_contract(
            {"reserve_a": 10, "reserve_b": 20, "total_pool_shares": 14}
        )
        assert state.total_pool_shares == 14


# =============================================================================
# VAULT CONFIG TESTS
# =============================================================================


class TestVaultConfig:
    """Тесты для VaultConfig"""

    def test_defaults(self) -> None:
        config = VaultConfig(manager="manager", token_a="TKA", token_b="TKB")
        assert config.mode == VaultMode.SINGLE_ASSET
        assert config.is_single_asset
        assert config.slippage_tolerance_bps == DEFAULT_SLIPPAGE_TOLERANCE_BPS == 9950
        assert config.deadline_sec == DEFAULT_DEADLINE_SEC == 100
        assert (config.swap_fee_numerator, config.swap_fee_denominator) == (997, 1000)

    def test_frozen(self) -> None:
        config = VaultConfig(manager="manager", token_a="TKA", token_b="TKB")
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.manager = "mallory"  # type: ignore[misc]

    def test_string_mode_coerced(self) -> None:
        config = VaultConfig(manager="m", token_a="TKA", token_b="TKB", mode="two_asset")
        assert config.mode is VaultMode.TWO_ASSET
        assert not config.is_single_asset

    def test_unknown_mode_rejected(self) -> None:
        with pytest.raises(ValueError):
            VaultConfig(manager="m", token_a="TKA", token_b="TKB", mode="three_asset")

    def test_same_tokens_rejected(self) -> None:
        with pytest.raises(ValueError, match="must differ"):
            VaultConfig(manager="m", token_a="TKA", token_b="TKA")

    def test_empty_manager_rejected(self) -> None:
        with pytest.raises(ValueError, match="manager"):
            VaultConfig(manager="", token_a="TKA", token_b="TKB")

    @pytest.mark.parametrize("tolerance", [9000, 10000])
    def test_tolerance_bounds(self, tolerance: int) -> None:
        with pytest.raises(InvalidTolerance):
            VaultConfig(manager="m", token_a="TKA", token_b="TKB", slippage_tolerance_bps=tolerance)

    def test_non_positive_deadline_rejected(self) -> None:
        with pytest.raises(ValueError, match="deadline_sec"):
            VaultConfig(manager="m", token_a="TKA", token_b="TKB", deadline_sec=0)

    def test_fee_above_one_rejected(self) -> None:
        with pytest.raises(ValueError, match="swap fee"):
            VaultConfig(
                manager="m",
                token_a="TKA",
                token_b="TKB",
                swap_fee_numerator=1001,
                swap_fee_denominator=1000,
            )

    def test_from_dict(self) -> None:
        raw = json.loads(
            '{"manager": "m", "token_a": "TKA", "token_b": "TKB", '
            '"mode": "two_asset", "deadline_sec": 300, "slippage_tolerance_bps": 9900}'
        )
        config = VaultConfig.from_dict(raw)
        assert config.mode is VaultMode.TWO_ASSET
        assert config.deadline_sec == 300
        assert config.slippage_tolerance_bps == 9900


# =============================================================================
# RESULT TESTS
# =============================================================================


class TestResults:
    """Тесты для результатов операций"""

    def test_deposit_result_defaults(self) -> None:
        result = DepositResult(
            assets=1000,
            shares=999,
            pool_shares=999,
            used_a=707,
            used_b=1415,
            leftover_a=1,
            leftover_b=0,
        )
        assert result.swapped_in == 0

    def test_withdraw_result_frozen(self) -> None:
        result = WithdrawResult(assets=400, shares=400, pool_shares=400, sent_a=200, sent_b=800)
        assert result.stranded_b == 0
        with pytest.raises(dataclasses.FrozenInstanceError):
            result.sent_a = 0  # type: ignore[misc]
