"""
Порты (протоколы) коллабораторов vault.

Пул, token ledger и share ledger внешние по отношению к ядру учёта;
vault общается с ними только через эти интерфейсы, поэтому подключается
любой AMM-адаптер (или детерминированный in-memory из тестов).

snapshot()/restore() откатывают коллаборатор целиком. Это выполнимо только
для in-process адаптеров, все писатели которых проходят через vault (или
держат src.vault.locking.lock_for() того же объекта). Адаптер реального
пула не может вернуть чужое состояние: он реализует restore() как откат
собственной незавершённой транзакции (revert), а snapshot() как её начало.
"""

from abc import abstractmethod
from typing import Any, Final, Protocol

# Адрес без владельца: заблокированные pool shares и vault shares
DEAD_ADDRESS: Final[str] = "0x000000000000000000000000000000000000dEaD"


class IPool(Protocol):
    """Двухтокенный constant-product пул (вызовы pair + router)."""

    @property
    @abstractmethod
    def address(self) -> str:
        """Адрес пула (spender для approvals)"""
        ...

    @abstractmethod
    def tokens(self) -> tuple[str, str]:
        """Собственный порядок пула (token0, token1)"""
        ...

    @abstractmethod
    def get_reserves(self) -> tuple[int, int]:
        """Reserves в порядке пула (token0, token1)"""
        ...

    @abstractmethod
    def total_supply(self) -> int:
        """Supply pool shares"""
        ...

    @abstractmethod
    def balance_of(self, owner: str) -> int:
        """Pool shares владельца"""
        ...

    @abstractmethod
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
        """Добавить ликвидность; возвращает (used0, used1, pool_shares_minted)"""
        ...

    @abstractmethod
    def remove_liquidity(
        self,
        pool_shares: int,
        amount0_min: int,
        amount1_min: int,
        owner: str,
        recipient: str,
        deadline: int,
    ) -> tuple[int, int]:
        """Сжечь pool shares; возвращает (amount0, amount1)"""
        ...

    @abstractmethod
    def swap_exact_in(
        self,
        amount_in: int,
        token_in: str,
        token_out: str,
        payer: str,
        recipient: str,
    ) -> int:
        """Обменять ровно amount_in; возвращает amount_out"""
        ...

    @abstractmethod
    def snapshot(self) -> Any:
        """Непрозрачное состояние для restore()"""
        ...

    @abstractmethod
    def restore(self, state: Any) -> None:
        """Откат к snapshot()"""
        ...


class ITokenLedger(Protocol):
    """Балансы fungible токенов (семантика transfer / approve)"""

    @abstractmethod
    def balance_of(self, token: str, owner: str) -> int:
        ...

    @abstractmethod
    def allowance(self, token: str, owner: str, spender: str) -> int:
        ...

    @abstractmethod
    def approve(self, token: str, owner: str, spender: str, amount: int) -> None:
        ...

    @abstractmethod
    def transfer(self, token: str, sender: str, to: str, amount: int) -> None:
        ...

    @abstractmethod
    def transfer_from(self, token: str, spender: str, owner: str, to: str, amount: int) -> None:
        ...

    @abstractmethod
    def snapshot(self) -> Any:
        ...

    @abstractmethod
    def restore(self, state: Any) -> None:
        ...


class IShareLedger(Protocol):
    """Ledger vault shares (mint / burn / allowance)"""

    @abstractmethod
    def total_supply(self) -> int:
        ...

    @abstractmethod
    def balance_of(self, owner: str) -> int:
        ...

    @abstractmethod
    def allowance(self, owner: str, spender: str) -> int:
        ...

    @abstractmethod
    def approve(self, owner: str, spender: str, amount: int) -> None:
        ...

    @abstractmethod
    def spend_allowance(self, owner: str, spender: str, amount: int) -> None:
        """Уменьшить allowance (кроме безлимитного); Unauthorized, если не хватает"""
        ...

    @abstractmethod
    def mint(self, to: str, amount: int) -> None:
        ...

    @abstractmethod
    def burn(self, owner: str, amount: int) -> None:
        ...

    @abstractmethod
    def snapshot(self) -> Any:
        ...

    @abstractmethod
    def restore(self, state: Any) -> None:
        ...
