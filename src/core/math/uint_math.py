"""
Uint Math — целочисленные примитивы

Модуль обеспечивает детерминированную целочисленную арифметику vault:
- Деление только с явным направлением округления (DOWN/UP)
- Валидация uint-входов (int, не bool, >= 0)
- Никаких float: все суммы в наименьших единицах токена

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Округление по умолчанию — floor (в пользу vault)
2. Деление на ноль никогда не происходит молча — вызывающий код проверяет
   знаменатель заранее и поднимает доменную ошибку (EmptyPool)
3. Все операции детерминированы и воспроизводимы
"""

import math
from enum import Enum
from typing import Final

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

# Максимальный uint256 — "безлимитный" allowance
MAX_UINT256: Final[int] = 2**256 - 1

# Базис для bps-величин (slippage tolerance)
BPS_DENOMINATOR: Final[int] = 10_000


class Rounding(str, Enum):
    """Направление округления целочисленного деления."""

    DOWN = "down"
    UP = "up"


# =============================================================================
# ВАЛИДАЦИЯ
# =============================================================================


def validate_uint(value: int, name: str) -> None:
    """
    Валидация, что значение — неотрицательный int.

    bool явно отвергается (bool является подклассом int).

    Args:
        value: Проверяемое значение
        name: Имя параметра (для сообщения об ошибке)

    Raises:
        TypeError: Если value не int
        ValueError: Если value < 0
    """
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")

    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")


# =============================================================================
# ДЕЛЕНИЕ
# =============================================================================


def ceil_div(numerator: int, denominator: int) -> int:
    """
    Деление с округлением вверх для неотрицательных int.

    Examples:
        >>> ceil_div(10, 3)
        4
        >>> ceil_div(9, 3)
        3
        >>> ceil_div(0, 3)
        0
    """
    if denominator <= 0:
        raise ValueError(f"denominator must be positive, got {denominator}")
    return -(-numerator // denominator)


def mul_div(a: int, b: int, denominator: int, rounding: Rounding = Rounding.DOWN) -> int:
    """
    a * b / denominator с явным округлением.

    Python int не переполняется, поэтому промежуточное произведение
    считается точно (аналог full-precision mulDiv).

    Args:
        a: Первый множитель (>= 0)
        b: Второй множитель (>= 0)
        denominator: Делитель (> 0)
        rounding: DOWN (floor, default) или UP (ceil)

    Returns:
        Результат деления

    Raises:
        ValueError: Если denominator <= 0

    Examples:
        >>> mul_div(1000, 10, 100)
        100
        >>> mul_div(2001, 10, 100)
        200
        >>> mul_div(2001, 10, 100, Rounding.UP)
        201
    """
    if denominator <= 0:
        raise ValueError(f"denominator must be positive, got {denominator}")

    product = a * b
    if rounding == Rounding.UP:
        return ceil_div(product, denominator)
    return product // denominator


def isqrt(value: int) -> int:
    """Целочисленный квадратный корень (floor)."""
    validate_uint(value, "value")
    return math.isqrt(value)
