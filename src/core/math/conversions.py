"""
Conversion Engine — конверсии pool shares ⇄ токены ⇄ nominal asset ⇄ vault shares

Единственный допустимый способ преобразований между:
- pool shares (LP пула)
- (amount_a, amount_b) — токены, обеспечивающие pool shares
- nominal asset — единая единица учёта (token A в SINGLE_ASSET режиме,
  pool share в TWO_ASSET режиме)
- vault shares — доли депозиторов vault

ФОРМУЛЫ (constant-product):
    amount_x   = reserve_x * pool_shares / total_pool_shares          (floor)
    pool_shares = min(a * T / reserve_a, b * T / reserve_b)            (floor)
    quote(x, r_in, r_out) = x * r_out / r_in                           (floor)
    nominal(L) = a0 + quote(a1, reserve_b, reserve_a),  0 если a1 == 0

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Все деления — floor, если явно не запрошено Rounding.UP: vault никогда
   не обещает больше, чем есть
2. assets_to_shares(shares_to_assets(S)) <= S
3. Пустой пул → EmptyPool, деление на ноль не выполняется
4. nominal(L) — верхняя оценка: реальный вывод требует swap, который
   двигает цену
"""

from src.core.domain.pool_state import PoolState
from src.core.domain.vault_mode import VaultMode
from src.core.errors import EmptyPool
from src.core.math.uint_math import Rounding, ceil_div, mul_div, validate_uint


# =============================================================================
# POOL SHARES ⇄ TOKENS
# =============================================================================


def shares_to_assets(state: PoolState, pool_shares: int) -> tuple[int, int]:
    """
    Сколько каждого токена обеспечивает pool_shares.

    Args:
        state: снапшот пула (канонический порядок A/B)
        pool_shares: количество pool shares

    Returns:
        (amount_a, amount_b), каждый floor независимо

    Raises:
        EmptyPool: если пул пуст

    Examples:
        >>> shares_to_assets(PoolState(reserve_a=1000, reserve_b=2001, total_pool_shares=100), 10)
        (100, 200)
    """
    validate_uint(pool_shares, "pool_shares")
    state.require_liquid()

    amount_a = mul_div(state.reserve_a, pool_shares, state.total_pool_shares)
    amount_b = mul_div(state.reserve_b, pool_shares, state.total_pool_shares)
    return amount_a, amount_b


def assets_to_shares(state: PoolState, amount_a: int, amount_b: int) -> int:
    """
    Сколько pool shares дают (amount_a, amount_b).

    Вклад принимается только до ограничивающего токена, поэтому результат —
    минимум из двух оценок. Балансировка входов — задача вызывающего кода.

    Raises:
        EmptyPool: если пул пуст
    """
    validate_uint(amount_a, "amount_a")
    validate_uint(amount_b, "amount_b")
    state.require_liquid()

    shares_by_a = mul_div(amount_a, state.total_pool_shares, state.reserve_a)
    shares_by_b = mul_div(amount_b, state.total_pool_shares, state.reserve_b)
    return min(shares_by_a, shares_by_b)


def optimal_contribution(state: PoolState, amount_a: int, amount_b: int) -> tuple[int, int]:
    """
    Какую часть (amount_a, amount_b) пул примет при add-liquidity.

    Правило router'а: токен A вносится целиком, если парного B хватает
    по текущей цене; иначе целиком вносится B, а A урезается до котировки.

    Raises:
        EmptyPool: если пул пуст
    """
    state.require_liquid()
    optimal_b = quote(amount_a, state.reserve_a, state.reserve_b)
    if optimal_b <= amount_b:
        return amount_a, optimal_b
    return quote(amount_b, state.reserve_b, state.reserve_a), amount_b


def quote(amount: int, reserve_in: int, reserve_out: int) -> int:
    """
    Spot-конверсия amount по текущим reserves (без комиссии и price impact).

    Raises:
        EmptyPool: если любой reserve равен нулю
    """
    validate_uint(amount, "amount")
    if reserve_in == 0 or reserve_out == 0:
        raise EmptyPool(f"cannot quote against empty reserves ({reserve_in}, {reserve_out})")
    return mul_div(amount, reserve_out, reserve_in)


# =============================================================================
# POOL SHARES ⇄ NOMINAL (SINGLE_ASSET)
# =============================================================================


def pool_shares_to_nominal(state: PoolState, pool_shares: int) -> int:
    """
    Стоимость pool_shares в token A.

    Оценка сверху: фактическая реализация позиции в одном токене требует
    swap, который сдвигает цену.

    Returns:
        a0 + quote(a1, reserve_b, reserve_a); 0 если a1 == 0
    """
    amount_a, amount_b = shares_to_assets(state, pool_shares)
    if amount_b == 0:
        # вырожденная позиция
        return 0
    return amount_a + quote(amount_b, state.reserve_b, state.reserve_a)


def nominal_to_pool_shares(state: PoolState, nominal: int) -> int:
    """
    Минимальное количество pool shares, чья nominal-стоимость >= nominal.

    pool_shares_to_nominal монотонна по L, поэтому ищем бинарным поиском
    между нижней оценкой (без округлений) и верхней (с запасом на три floor).

    Raises:
        EmptyPool: если пул пуст
    """
    validate_uint(nominal, "nominal")
    state.require_liquid()

    if nominal == 0:
        return 0

    # value(L) >= 2*rA*L/T - 2 - rA/rB
    total_value = 2 * state.reserve_a
    lo = ceil_div(nominal * state.total_pool_shares, total_value)
    slack = 2 + ceil_div(state.reserve_a, state.reserve_b)
    hi = ceil_div((nominal + slack) * state.total_pool_shares, total_value)
    # a1 >= 1, иначе nominal(L) == 0
    hi = max(hi, ceil_div(state.total_pool_shares, state.reserve_b))

    while lo < hi:
        mid = (lo + hi) // 2
        if pool_shares_to_nominal(state, mid) >= nominal:
            hi = mid
        else:
            lo = mid + 1
    return lo


# =============================================================================
# VAULT SHARES ⇄ POOL SHARES
# =============================================================================


def to_vault_shares(
    pool_shares: int,
    total_vault_shares: int,
    pool_shares_held: int,
    rounding: Rounding = Rounding.DOWN,
) -> int:
    """
    Конверсия pool shares → vault shares.

    Пока vault shares не выпущены, курс 1:1.

    Raises:
        EmptyPool: если vault shares есть, а pool shares у vault нет
    """
    validate_uint(pool_shares, "pool_shares")
    if total_vault_shares == 0:
        return pool_shares
    if pool_shares_held == 0:
        raise EmptyPool(
            f"vault holds no pool shares backing {total_vault_shares} vault shares"
        )
    return mul_div(pool_shares, total_vault_shares, pool_shares_held, rounding)


def to_pool_shares(
    vault_shares: int,
    total_vault_shares: int,
    pool_shares_held: int,
    rounding: Rounding = Rounding.DOWN,
) -> int:
    """Конверсия vault shares → pool shares (1:1 пока supply == 0)."""
    validate_uint(vault_shares, "vault_shares")
    if total_vault_shares == 0:
        return vault_shares
    return mul_div(vault_shares, pool_shares_held, total_vault_shares, rounding)


# =============================================================================
# CONVERSION ENGINE
# =============================================================================


class ConversionEngine:
    """Конверсии nominal ⇄ pool shares, параметризованные режимом vault.

    TWO_ASSET:    nominal единица = pool share (тождественная конверсия).
    SINGLE_ASSET: nominal единица = token A (оценка через quote).
    """

    def __init__(self, mode: VaultMode):
        self.mode = mode

    @property
    def is_single_asset(self) -> bool:
        return self.mode == VaultMode.SINGLE_ASSET

    def pool_shares_to_nominal(self, state: PoolState, pool_shares: int) -> int:
        """Nominal-стоимость pool_shares (floor)."""
        if not self.is_single_asset:
            validate_uint(pool_shares, "pool_shares")
            return pool_shares
        return pool_shares_to_nominal(state, pool_shares)

    def nominal_to_pool_shares(
        self, state: PoolState, nominal: int, rounding: Rounding = Rounding.UP
    ) -> int:
        """
        Pool shares для nominal.

        Rounding.UP   — минимум L, покрывающий nominal (размер withdraw).
        Rounding.DOWN — L, чья стоимость гарантированно <= nominal
                        (convert_to_shares): floor(nominal * T / (2 * reserve_a)).
        """
        if not self.is_single_asset:
            validate_uint(nominal, "nominal")
            return nominal
        if rounding == Rounding.UP:
            return nominal_to_pool_shares(state, nominal)

        validate_uint(nominal, "nominal")
        state.require_liquid()
        return mul_div(nominal, state.total_pool_shares, 2 * state.reserve_a)

    def token_amounts_for(
        self, state: PoolState, pool_shares: int, rounding: Rounding = Rounding.DOWN
    ) -> tuple[int, int]:
        """
        Токены под pool_shares.

        Rounding.UP используется, когда vault *получает* токены (mint в
        TWO_ASSET режиме): депозитор докладывает до целого, а не vault.
        """
        if rounding == Rounding.DOWN:
            return shares_to_assets(state, pool_shares)

        validate_uint(pool_shares, "pool_shares")
        state.require_liquid()
        return (
            mul_div(state.reserve_a, pool_shares, state.total_pool_shares, Rounding.UP),
            mul_div(state.reserve_b, pool_shares, state.total_pool_shares, Rounding.UP),
        )
