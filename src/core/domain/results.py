"""
Результаты vault-операций

Frozen dataclasses, возвращаемые deposit/mint/withdraw/redeem.
Кроме основных величин (shares, assets) содержат диагностику: сколько
токенов реально ушло в пул, сколько осталось на балансе vault.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ProvideResult:
    """Результат add-liquidity (в каноническом порядке A/B)."""

    used_a: int
    used_b: int
    pool_shares: int


@dataclass(frozen=True)
class RebalanceResult:
    """Результат swap-ребалансировки single-asset депозита."""

    swapped_in: int  # сколько token A ушло в swap
    received_out: int  # сколько token B получено
    remaining_in: int  # token A, оставшийся для add-liquidity


@dataclass(frozen=True)
class DepositResult:
    """Результат deposit/mint."""

    assets: int  # nominal assets, списанные с caller
    shares: int  # vault shares, выпущенные receiver
    pool_shares: int  # pool shares, полученные vault

    # Токены, ушедшие в пул
    used_a: int
    used_b: int

    # Пыль, оставшаяся на балансе vault (в пользу vault)
    leftover_a: int
    leftover_b: int

    # Только для SINGLE_ASSET (0 в TWO_ASSET)
    swapped_in: int = 0


@dataclass(frozen=True)
class WithdrawResult:
    """Результат withdraw/redeem."""

    assets: int  # nominal assets (оценка по котировке до вывода)
    shares: int  # сожжённые vault shares
    pool_shares: int  # сожжённые pool shares

    # Фактически переведено receiver
    sent_a: int
    sent_b: int

    # SINGLE_ASSET: token B остаётся на балансе vault
    stranded_b: int = 0
