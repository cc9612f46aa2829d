"""LP Vault — deposit / mint / withdraw / redeem поверх AMM пула.

Vault Operation State Machine: четыре публичные операции, каждая атомарна.
Состояния как такового нет — только supply vault shares, балансы токенов и
позиция vault в пуле.

Поток управления:
    операция → Conversion Engine (котировка по свежим reserves)
             → Swap Rebalancer (только SINGLE_ASSET депозит)
             → Liquidity Provisioning Engine → Pool
             → Share ledger (mint/burn строго ПОСЛЕ вызовов пула)

Атомарность: перед операцией снимаются снапшоты пула, token ledger и share
ledger; любое исключение откатывает все три и пробрасывается дальше.

Конкурентность: операция держит locks всех своих коллабораторов
(src.vault.locking), поэтому vault на общем пуле или ledger выполняются
строго по очереди и откат одного не стирает работу другого. Повторный
вход из того же потока (callback коллаборатора) → ReentrantCall.

Режимы:
- TWO_ASSET:    nominal = pool shares; депозитор вносит оба токена (с
                округлением вверх), при выводе получает оба токена.
- SINGLE_ASSET: nominal = token A; депозит ребалансируется swap'ом, при
                выводе receiver получает только ногу token A, нога token B
                остаётся на балансе vault.
"""

import logging
import time
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from src.core.domain.pool_state import PoolState
from src.core.domain.results import DepositResult, WithdrawResult
from src.core.domain.vault_config import VaultConfig
from src.core.errors import EmptyPool, InsufficientBalance, SlippageExceeded, ZeroResult
from src.core.math.conversions import (
    ConversionEngine,
    assets_to_shares,
    optimal_contribution,
    shares_to_assets,
    to_pool_shares,
    to_vault_shares,
)
from src.core.math.slippage import SlippageGuard
from src.core.math.uint_math import MAX_UINT256, Rounding, validate_uint
from src.vault.liquidity import LiquidityProvisioningEngine
from src.vault.locking import hold_collaborators
from src.vault.ports import DEAD_ADDRESS, IPool, IShareLedger, ITokenLedger
from src.vault.rebalancer import SwapRebalancer
from src.vault.reserve_oracle import ReserveOracle

logger = logging.getLogger(__name__)

# Лимит удвоений верхней границы при поиске депозита под mint
_MINT_SEARCH_MAX_DOUBLINGS = 256


class LPVault:
    """Vault поверх пары (token_a, token_b) AMM пула.

    Vault shares пропорциональны pool shares, которыми владеет vault;
    первый депозит выпускается 1:1.
    """

    def __init__(
        self,
        config: VaultConfig,
        pool: IPool,
        token_ledger: ITokenLedger,
        share_ledger: IShareLedger,
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Args:
            config: неизменяемая конфигурация vault
            pool: адаптер пула
            token_ledger: ledger токенов пары
            share_ledger: ledger vault shares
            clock: источник времени для deadline (default: time.time)
        """
        self.config = config
        self._pool = pool
        self._token_ledger = token_ledger
        self._share_ledger = share_ledger
        self._clock = clock or time.time

        self.guard = SlippageGuard(config.manager, config.slippage_tolerance_bps)
        self.oracle = ReserveOracle(pool, config.token_a, config.token_b)
        self.conversions = ConversionEngine(config.mode)
        self.liquidity = LiquidityProvisioningEngine(
            pool=pool,
            oracle=self.oracle,
            token_ledger=token_ledger,
            guard=self.guard,
            vault_address=config.vault_address,
            deadline_sec=config.deadline_sec,
            clock=self._clock,
        )
        self.rebalancer: Optional[SwapRebalancer] = None
        if config.is_single_asset:
            self.rebalancer = SwapRebalancer(
                pool=pool,
                oracle=self.oracle,
                token_ledger=token_ledger,
                vault_address=config.vault_address,
                fee_numerator=config.swap_fee_numerator,
                fee_denominator=config.swap_fee_denominator,
            )

    # =========================================================================
    # IDENTITY
    # =========================================================================

    @property
    def address(self) -> str:
        return self.config.vault_address

    @property
    def manager(self) -> str:
        return self.guard.manager

    @property
    def asset(self) -> str:
        """Nominal asset: token A (SINGLE_ASSET) или pool share (TWO_ASSET)."""
        if self.config.is_single_asset:
            return self.config.token_a
        return self._pool.address

    @property
    def slippage_tolerance_bps(self) -> int:
        return self.guard.tolerance_bps

    # =========================================================================
    # CONCURRENCY / ATOMICITY
    # =========================================================================

    @contextmanager
    def _exclusive(self) -> Iterator[None]:
        """Единственная in-flight операция на пуле и ledgers этого vault."""
        with hold_collaborators(self._pool, self._token_ledger, self._share_ledger):
            yield

    @contextmanager
    def _operation(self, name: str) -> Iterator[None]:
        """Эксклюзивная операция с откатом всех коллабораторов при ошибке."""
        with self._exclusive():
            pool_state = self._pool.snapshot()
            token_state = self._token_ledger.snapshot()
            share_state = self._share_ledger.snapshot()
            try:
                yield
            except Exception as e:
                self._pool.restore(pool_state)
                self._token_ledger.restore(token_state)
                self._share_ledger.restore(share_state)
                logger.warning(f"{name} rolled back: {type(e).__name__}: {e}")
                raise

    # =========================================================================
    # CONFIGURATION
    # =========================================================================

    def set_slippage_tolerance(self, value: int, *, caller: str) -> None:
        """
        Изменить slippage tolerance (только manager).

        Raises:
            Unauthorized: если caller не manager
            InvalidTolerance: если value вне (9000, 10000)
        """
        with self._exclusive():
            self.guard.set_tolerance(value, caller=caller)

    # =========================================================================
    # ACCOUNTING VIEWS
    # =========================================================================

    def pool_shares_held(self) -> int:
        return self._pool.balance_of(self.address)

    def total_supply(self) -> int:
        return self._share_ledger.total_supply()

    def total_assets(self) -> int:
        """Nominal-стоимость pool shares vault по текущим reserves."""
        held = self.pool_shares_held()
        if held == 0:
            return 0
        return self.conversions.pool_shares_to_nominal(self.oracle.require_liquid(), held)

    def convert_to_shares(self, assets: int) -> int:
        """Vault shares за assets (floor, без учёта swap-комиссии)."""
        validate_uint(assets, "assets")
        state = self._quote_state()
        pool_shares = self.conversions.nominal_to_pool_shares(state, assets, Rounding.DOWN)
        return self._to_vault_shares(pool_shares, Rounding.DOWN)

    def convert_to_assets(self, shares: int) -> int:
        """Nominal assets за shares (floor)."""
        validate_uint(shares, "shares")
        pool_shares = self._to_pool_shares(shares, Rounding.DOWN)
        if pool_shares == 0:
            return 0
        return self.conversions.pool_shares_to_nominal(self.oracle.require_liquid(), pool_shares)

    def max_deposit(self, receiver: str) -> int:
        return MAX_UINT256

    def max_mint(self, receiver: str) -> int:
        return MAX_UINT256

    def max_withdraw(self, owner: str) -> int:
        return self.convert_to_assets(self._share_ledger.balance_of(owner))

    def max_redeem(self, owner: str) -> int:
        return self._share_ledger.balance_of(owner)

    # =========================================================================
    # PREVIEWS
    # =========================================================================

    def preview_deposit(self, assets: int) -> int:
        """Vault shares, которые deposit(assets) выпустит при текущих reserves."""
        validate_uint(assets, "assets")
        pool_shares = self._simulate_deposit(self.oracle.require_liquid(), assets)
        return self._to_vault_shares(pool_shares, Rounding.DOWN)

    def preview_mint(self, shares: int) -> int:
        """Nominal assets, которые mint(shares) спишет при текущих reserves."""
        validate_uint(shares, "shares")
        return self._assets_for_mint(self.oracle.require_liquid(), shares)

    def preview_withdraw(self, assets: int) -> int:
        """Vault shares, которые withdraw(assets) сожжёт (округление вверх)."""
        validate_uint(assets, "assets")
        state = self.oracle.require_liquid()
        pool_shares = self.conversions.nominal_to_pool_shares(state, assets, Rounding.UP)
        return self._to_vault_shares(pool_shares, Rounding.UP)

    def preview_redeem(self, shares: int) -> int:
        """Nominal assets за redeem(shares) (floor, оценка сверху для SINGLE_ASSET)."""
        return self.convert_to_assets(shares)

    # =========================================================================
    # OPERATIONS
    # =========================================================================

    def deposit(self, assets: int, receiver: str, *, caller: str) -> DepositResult:
        """
        Внести assets nominal и выпустить vault shares receiver.

        Raises:
            ZeroResult: если assets == 0 или выпускается 0 shares
            SlippageExceeded / DeadlineExceeded: ошибки пула (полный откат)
            EmptyPool: если пул пуст
        """
        validate_uint(assets, "assets")
        if assets == 0:
            raise ZeroResult("cannot deposit zero assets")

        with self._operation("deposit"):
            supply = self._share_ledger.total_supply()
            held = self.pool_shares_held()
            supply = self._lock_orphaned_pool_shares(supply, held)

            result = self._enter(assets, caller)
            shares = to_vault_shares(result.pool_shares, supply, held, Rounding.DOWN)
            if shares == 0:
                raise ZeroResult(f"deposit of {assets} produces zero shares")

            self._share_ledger.mint(receiver, shares)

        logger.info(
            f"deposit: caller={caller} receiver={receiver} assets={assets} "
            f"shares={shares} pool_shares={result.pool_shares}"
        )
        return DepositResult(
            assets=assets,
            shares=shares,
            pool_shares=result.pool_shares,
            used_a=result.used_a,
            used_b=result.used_b,
            leftover_a=result.leftover_a,
            leftover_b=result.leftover_b,
            swapped_in=result.swapped_in,
        )

    def mint(self, shares: int, receiver: str, *, caller: str) -> DepositResult:
        """
        Выпустить ровно shares vault shares, списав необходимое количество assets.

        Raises:
            ZeroResult: если shares == 0 или требуемые assets равны нулю
            SlippageExceeded: если пул дал меньше pool shares, чем котировалось
        """
        validate_uint(shares, "shares")
        if shares == 0:
            raise ZeroResult("cannot mint zero shares")

        with self._operation("mint"):
            state = self.oracle.require_liquid()
            supply = self._share_ledger.total_supply()
            held = self.pool_shares_held()
            supply = self._lock_orphaned_pool_shares(supply, held)

            assets = self._assets_for_mint(state, shares)
            if assets == 0:
                raise ZeroResult(f"mint of {shares} shares requires zero assets")

            result = self._enter(assets, caller)
            obtained = to_vault_shares(result.pool_shares, supply, held, Rounding.DOWN)
            if obtained < shares:
                raise SlippageExceeded(
                    f"mint underfilled: pool shares back {obtained} vault shares, requested {shares}"
                )

            self._share_ledger.mint(receiver, shares)

        logger.info(
            f"mint: caller={caller} receiver={receiver} shares={shares} "
            f"assets={assets} pool_shares={result.pool_shares}"
        )
        return DepositResult(
            assets=assets,
            shares=shares,
            pool_shares=result.pool_shares,
            used_a=result.used_a,
            used_b=result.used_b,
            leftover_a=result.leftover_a,
            leftover_b=result.leftover_b,
            swapped_in=result.swapped_in,
        )

    def withdraw(self, assets: int, receiver: str, owner: str, *, caller: str) -> WithdrawResult:
        """
        Сжечь shares owner, необходимые для assets nominal, и вывести ликвидность.

        SINGLE_ASSET: receiver получает ногу token A; нога token B остаётся
        на балансе vault.

        Raises:
            ZeroResult: если assets == 0 или вывод нулевой
            Unauthorized: если caller != owner и allowance недостаточен
            InsufficientBalance: если у owner меньше shares
        """
        validate_uint(assets, "assets")
        if assets == 0:
            raise ZeroResult("cannot withdraw zero assets")

        with self._operation("withdraw"):
            state = self.oracle.require_liquid()
            supply = self._share_ledger.total_supply()
            held = self.pool_shares_held()

            pool_shares = self.conversions.nominal_to_pool_shares(state, assets, Rounding.UP)
            shares = to_vault_shares(pool_shares, supply, held, Rounding.UP)
            if shares == 0:
                raise ZeroResult(f"withdraw of {assets} burns zero shares")

            result = self._exit(state, shares, pool_shares, assets, receiver, owner, caller)

        logger.info(
            f"withdraw: caller={caller} owner={owner} receiver={receiver} assets={assets} "
            f"shares={shares} sent=({result.sent_a}, {result.sent_b})"
        )
        return result

    def redeem(self, shares: int, receiver: str, owner: str, *, caller: str) -> WithdrawResult:
        """
        Сжечь ровно shares owner и вывести пропорциональную ликвидность.

        Raises:
            ZeroResult: если shares == 0 или им соответствует 0 assets
            Unauthorized: если caller != owner и allowance недостаточен
            InsufficientBalance: если у owner меньше shares
        """
        validate_uint(shares, "shares")
        if shares == 0:
            raise ZeroResult("cannot redeem zero shares")

        with self._operation("redeem"):
            state = self.oracle.require_liquid()
            supply = self._share_ledger.total_supply()
            held = self.pool_shares_held()

            pool_shares = to_pool_shares(shares, supply, held, Rounding.DOWN)
            if pool_shares == 0:
                raise ZeroResult(f"redeem of {shares} shares maps to zero pool shares")

            assets = self.conversions.pool_shares_to_nominal(state, pool_shares)
            if assets == 0:
                raise ZeroResult(f"redeem of {shares} shares yields zero assets")

            result = self._exit(state, shares, pool_shares, assets, receiver, owner, caller)

        logger.info(
            f"redeem: caller={caller} owner={owner} receiver={receiver} shares={shares} "
            f"assets={assets} sent=({result.sent_a}, {result.sent_b})"
        )
        return result

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _quote_state(self) -> PoolState:
        if self.config.is_single_asset:
            return self.oracle.require_liquid()
        # TWO_ASSET: nominal == pool shares, reserves не нужны
        return self.oracle.snapshot()

    def _to_vault_shares(self, pool_shares: int, rounding: Rounding) -> int:
        return to_vault_shares(
            pool_shares, self._share_ledger.total_supply(), self.pool_shares_held(), rounding
        )

    def _to_pool_shares(self, shares: int, rounding: Rounding) -> int:
        return to_pool_shares(
            shares, self._share_ledger.total_supply(), self.pool_shares_held(), rounding
        )

    def _lock_orphaned_pool_shares(self, supply: int, held: int) -> int:
        """
        Закрепить за DEAD_ADDRESS pool shares, которые vault держит без
        выпущенных vault shares (прямой перевод LP токенов, пыль после
        полного вывода). Иначе их присвоил бы первый депозитор по курсу 1:1.

        Returns:
            supply vault shares после закрепления
        """
        if supply != 0 or held == 0:
            return supply
        self._share_ledger.mint(DEAD_ADDRESS, held)
        logger.info(f"Locked {held} orphaned pool shares as vault shares of {DEAD_ADDRESS}")
        return held

    def _simulate_deposit(self, state: PoolState, assets: int) -> int:
        """
        Pool shares, которые принесёт депозит assets на снапшоте state.

        0, если add-liquidity не пройдёт slippage-минимумы provide(): при
        мелких депозитах округление оптимальной пары может съесть больше
        допуска даже без движения цены.
        """
        if self.rebalancer is not None:
            rebalance, state = self.rebalancer.simulate(state, assets)
            amount_a, amount_b = rebalance.remaining_in, rebalance.received_out
        else:
            amount_a, amount_b = self.conversions.token_amounts_for(state, assets, Rounding.UP)

        used_a, used_b = optimal_contribution(state, amount_a, amount_b)
        if used_a < self.guard.minimum(amount_a) or used_b < self.guard.minimum(amount_b):
            return 0
        return assets_to_shares(state, used_a, used_b)

    def _shares_for_deposit(self, state: PoolState, assets: int) -> int:
        try:
            pool_shares = self._simulate_deposit(state, assets)
        except ZeroResult:
            return 0
        return self._to_vault_shares(pool_shares, Rounding.DOWN)

    def _assets_for_mint(self, state: PoolState, shares: int) -> int:
        """
        Минимальный депозит, выпускающий >= shares vault shares.

        Бинарный поиск по preview депозита (монотонен по assets). Стартовая
        верхняя граница — nominal-стоимость нужных pool shares; в TWO_ASSET
        она обычно и есть ответ, если reserves делятся без остатка.
        """
        pool_shares = self._to_pool_shares(shares, Rounding.UP)

        hi = max(1, self.conversions.pool_shares_to_nominal(state, pool_shares))
        for _ in range(_MINT_SEARCH_MAX_DOUBLINGS):
            if self._shares_for_deposit(state, hi) >= shares:
                break
            hi *= 2
        else:
            raise ZeroResult(f"no deposit size mints {shares} shares")

        lo = 1
        while lo < hi:
            mid = (lo + hi) // 2
            if self._shares_for_deposit(state, mid) >= shares:
                hi = mid
            else:
                lo = mid + 1
        return lo

    def _enter(self, assets: int, caller: str) -> DepositResult:
        """
        Списать assets с caller и превратить их в позицию пула.

        Возвращает DepositResult без shares (shares=0): выпуск решает
        вызывающая операция.
        """
        vault = self.address

        if self.rebalancer is not None:
            self._token_ledger.transfer_from(self.config.token_a, vault, caller, vault, assets)
            rebalance = self.rebalancer.rebalance(assets)
            provided = self.liquidity.provide(rebalance.remaining_in, rebalance.received_out)
            return DepositResult(
                assets=assets,
                shares=0,
                pool_shares=provided.pool_shares,
                used_a=provided.used_a,
                used_b=provided.used_b,
                leftover_a=rebalance.remaining_in - provided.used_a,
                leftover_b=rebalance.received_out - provided.used_b,
                swapped_in=rebalance.swapped_in,
            )

        state = self.oracle.require_liquid()
        amount_a, amount_b = self.conversions.token_amounts_for(state, assets, Rounding.UP)
        self._token_ledger.transfer_from(self.config.token_a, vault, caller, vault, amount_a)
        self._token_ledger.transfer_from(self.config.token_b, vault, caller, vault, amount_b)
        provided = self.liquidity.provide(amount_a, amount_b)
        return DepositResult(
            assets=assets,
            shares=0,
            pool_shares=provided.pool_shares,
            used_a=provided.used_a,
            used_b=provided.used_b,
            leftover_a=amount_a - provided.used_a,
            leftover_b=amount_b - provided.used_b,
        )

    def _exit(
        self,
        state: PoolState,
        shares: int,
        pool_shares: int,
        assets: int,
        receiver: str,
        owner: str,
        caller: str,
    ) -> WithdrawResult:
        """Allowance → remove liquidity → burn → transfer."""
        balance = self._share_ledger.balance_of(owner)
        if balance < shares:
            raise InsufficientBalance(f"{owner} has {balance} shares, needs {shares}")

        if pool_shares > self.pool_shares_held():
            raise EmptyPool(
                f"vault holds {self.pool_shares_held()} pool shares, needs {pool_shares}"
            )

        if caller != owner:
            self._share_ledger.spend_allowance(owner, caller, shares)

        expected_a, expected_b = shares_to_assets(state, pool_shares)
        amount_a, amount_b = self.liquidity.withdraw_liquidity(pool_shares, expected_a, expected_b)

        self._share_ledger.burn(owner, shares)

        vault = self.address
        if self.config.is_single_asset:
            if amount_a == 0:
                raise ZeroResult(f"withdrawal of {pool_shares} pool shares returned zero {self.config.token_a}")
            # нога token B остаётся на балансе vault
            self._token_ledger.transfer(self.config.token_a, vault, receiver, amount_a)
            return WithdrawResult(
                assets=assets,
                shares=shares,
                pool_shares=pool_shares,
                sent_a=amount_a,
                sent_b=0,
                stranded_b=amount_b,
            )

        if amount_a == 0 and amount_b == 0:
            raise ZeroResult(f"withdrawal of {pool_shares} pool shares returned nothing")
        self._token_ledger.transfer(self.config.token_a, vault, receiver, amount_a)
        self._token_ledger.transfer(self.config.token_b, vault, receiver, amount_b)
        return WithdrawResult(
            assets=assets,
            shares=shares,
            pool_shares=pool_shares,
            sent_a=amount_a,
            sent_b=amount_b,
        )
