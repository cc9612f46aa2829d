"""
Swap Math — constant-product swap с комиссией и оптимальный размер swap

ФОРМУЛЫ:
    amount_out = (a * n * r_out) / (r_in * d + a * n)          (fee = n/d)

    Оптимальный swap S для single-asset депозита A в пул (r_in, r_out):
    после swap S → out остатки (A - S, out) должны иметь то же отношение,
    что и пост-swap reserves (r_in + S, r_out - out). Решение квадратного
    уравнения:

        S = (sqrt(r * (r * (d + n)^2 + 4 * n * d * A)) - r * (d + n)) / (2 * n)

    Для fee 0.3% (n=997, d=1000) это классическая формула
        S = (sqrt(r * (r * 3988009 + A * 3988000)) - r * 1997) / 1994

Все деления — floor.
"""

from src.core.errors import EmptyPool, ZeroResult
from src.core.math.uint_math import isqrt, validate_uint


def _validate_fee(fee_numerator: int, fee_denominator: int) -> None:
    if not 0 < fee_numerator <= fee_denominator:
        raise ValueError(
            f"fee must satisfy 0 < numerator <= denominator, "
            f"got {fee_numerator}/{fee_denominator}"
        )


def get_amount_out(
    amount_in: int,
    reserve_in: int,
    reserve_out: int,
    fee_numerator: int = 997,
    fee_denominator: int = 1000,
) -> int:
    """
    Output constant-product swap с комиссией (Uniswap-v2).

    Args:
        amount_in: входное количество
        reserve_in: reserve входного токена
        reserve_out: reserve выходного токена
        fee_numerator: доля, остающаяся после комиссии (числитель)
        fee_denominator: знаменатель комиссии

    Returns:
        Выходное количество (floor)

    Raises:
        EmptyPool: если любой reserve равен нулю

    Examples:
        >>> get_amount_out(140, 1000, 2000)
        244
    """
    validate_uint(amount_in, "amount_in")
    validate_uint(reserve_in, "reserve_in")
    validate_uint(reserve_out, "reserve_out")
    _validate_fee(fee_numerator, fee_denominator)

    if reserve_in == 0 or reserve_out == 0:
        raise EmptyPool(f"cannot swap against empty reserves ({reserve_in}, {reserve_out})")

    amount_in_with_fee = amount_in * fee_numerator
    numerator = amount_in_with_fee * reserve_out
    denominator = reserve_in * fee_denominator + amount_in_with_fee
    return numerator // denominator


def get_swap_amount(
    reserve_in: int,
    amount_in: int,
    fee_numerator: int = 997,
    fee_denominator: int = 1000,
) -> int:
    """
    Сколько из single-asset депозита amount_in нужно обменять на парный токен.

    Решение учитывает, что сам swap сдвигает reserves: целевое отношение
    считается по пост-swap reserves.

    Args:
        reserve_in: reserve депонируемого токена
        amount_in: размер депозита
        fee_numerator: доля, остающаяся после комиссии
        fee_denominator: знаменатель комиссии

    Returns:
        S — количество для swap (0 <= S < amount_in)

    Raises:
        EmptyPool: если reserve_in == 0

    Examples:
        >>> get_swap_amount(1000, 300)
        140
    """
    validate_uint(reserve_in, "reserve_in")
    validate_uint(amount_in, "amount_in")
    _validate_fee(fee_numerator, fee_denominator)

    if reserve_in == 0:
        raise EmptyPool("cannot size swap against empty reserve")

    fee_sum = fee_denominator + fee_numerator  # 1997 для 0.3%
    discriminant = reserve_in * (
        reserve_in * fee_sum * fee_sum + amount_in * 4 * fee_numerator * fee_denominator
    )
    return (isqrt(discriminant) - reserve_in * fee_sum) // (2 * fee_numerator)


def simulate_swap(
    amount_in: int,
    reserve_in: int,
    reserve_out: int,
    fee_numerator: int = 997,
    fee_denominator: int = 1000,
) -> tuple[int, int]:
    """
    Оптимальный swap депозита amount_in: размер и ожидаемый output.

    Returns:
        (swap_amount, amount_out)

    Raises:
        ZeroResult: если swap не дал выходного токена
    """
    swap_amount = get_swap_amount(reserve_in, amount_in, fee_numerator, fee_denominator)
    amount_out = get_amount_out(swap_amount, reserve_in, reserve_out, fee_numerator, fee_denominator)
    if amount_out == 0:
        raise ZeroResult(f"swap of {swap_amount} produced zero output (deposit {amount_in} too small)")
    return swap_amount, amount_out
