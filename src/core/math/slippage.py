"""
Slippage Guard — минимально допустимый output liquidity-вызовов

Tolerance задаётся в bps (частях от 10000): 9950 означает, что принимается
не менее 99.5% от запрошенного количества.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. 9000 < tolerance < 10000 (максимум 10% slippage, строго)
2. minimum_accepted(amount) = floor(amount * t / 10000) <= amount
3. Каждый add/remove-liquidity вызов передаёт и запрошенное количество,
   и его minimum_accepted
"""

import logging
from typing import Final

from src.core.errors import InvalidTolerance, Unauthorized
from src.core.math.uint_math import BPS_DENOMINATOR, mul_div, validate_uint

logger = logging.getLogger(__name__)

# Границы tolerance (обе исключены)
TOLERANCE_MIN_EXCLUSIVE_BPS: Final[int] = 9000
TOLERANCE_MAX_EXCLUSIVE_BPS: Final[int] = BPS_DENOMINATOR


def validate_tolerance(tolerance_bps: int) -> None:
    """
    Проверка tolerance: int строго внутри (9000, 10000).

    Raises:
        InvalidTolerance: если значение не int или вне диапазона
    """
    if not isinstance(tolerance_bps, int) or isinstance(tolerance_bps, bool):
        raise InvalidTolerance(
            f"slippage tolerance must be an int (bps), got {type(tolerance_bps).__name__}"
        )

    if not TOLERANCE_MIN_EXCLUSIVE_BPS < tolerance_bps < TOLERANCE_MAX_EXCLUSIVE_BPS:
        raise InvalidTolerance(
            f"slippage tolerance must be in ({TOLERANCE_MIN_EXCLUSIVE_BPS}, "
            f"{TOLERANCE_MAX_EXCLUSIVE_BPS}) exclusive, got {tolerance_bps}"
        )


def minimum_accepted(amount: int, tolerance_bps: int) -> int:
    """
    Минимально допустимый output для запрошенного amount.

    Examples:
        >>> minimum_accepted(1000, 9950)
        995
        >>> minimum_accepted(7, 9999)
        6
    """
    validate_uint(amount, "amount")
    return mul_div(amount, tolerance_bps, BPS_DENOMINATOR)


class SlippageGuard:
    """Изменяемая slippage tolerance, которой владеет manager.

    Manager фиксируется при создании и не меняется. Tolerance меняется
    только через set_tolerance() и никогда не подстраивается автоматически.
    """

    def __init__(self, manager: str, tolerance_bps: int):
        """
        Args:
            manager: единственный principal, которому разрешён setter
            tolerance_bps: начальная tolerance
        """
        validate_tolerance(tolerance_bps)
        self._manager = manager
        self._tolerance_bps = tolerance_bps

    @property
    def manager(self) -> str:
        return self._manager

    @property
    def tolerance_bps(self) -> int:
        return self._tolerance_bps

    def set_tolerance(self, value: int, *, caller: str) -> None:
        """
        Установка новой tolerance.

        Raises:
            Unauthorized: если caller не manager
            InvalidTolerance: если value вне (9000, 10000)
        """
        if caller != self._manager:
            raise Unauthorized(f"only manager may set slippage tolerance, caller={caller}")

        validate_tolerance(value)

        previous = self._tolerance_bps
        self._tolerance_bps = value
        logger.info(f"Slippage tolerance changed: {previous} -> {value} bps")

    def minimum(self, amount: int) -> int:
        """minimum_accepted() с текущей tolerance."""
        return minimum_accepted(amount, self._tolerance_bps)
