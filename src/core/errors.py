"""
Vault Errors — таксономия ошибок vault-операций

Каждая ошибка фатальна: операция прерывается целиком, состояние ledger'ов
и пула откатывается к снапшоту до начала операции.

Иерархия:
- VaultError (база)
  - ZeroResult           — shares/assets == 0 там, где ожидался положительный результат
  - SlippageExceeded     — фактический output пула ниже slippage-минимума
  - DeadlineExceeded     — deadline liquidity-вызова истёк
  - Unauthorized         — не-manager вызывает setter / превышен allowance
  - EmptyPool            — reserves или total pool shares == 0 при котировке
  - InsufficientBalance  — недостаточный баланс токена / vault shares
  - ReentrantCall        — повторный вход в операцию того же vault
  - InvalidTolerance     — tolerance вне (9000, 10000)
"""


class VaultError(Exception):
    """Базовая ошибка vault-движка."""


class ZeroResult(VaultError):
    """
    Вычисленное количество shares/assets равно нулю.

    Почти всегда означает потерю стоимости из-за округления — операция
    не должна молча mint/burn/transfer ноль.
    """


class SlippageExceeded(VaultError):
    """Фактический output add/remove-liquidity ниже гарантированного минимума."""


class DeadlineExceeded(VaultError):
    """Deadline liquidity-вызова истёк до исполнения."""


class Unauthorized(VaultError):
    """Вызов без прав (не manager) или сверх allowance."""


class EmptyPool(VaultError):
    """
    Пул пуст: reserve_a, reserve_b или total_pool_shares равны нулю.

    Отдельное явное состояние вместо ZeroDivisionError.
    """


class InsufficientBalance(VaultError):
    """Недостаточный баланс токена или vault shares."""


class ReentrantCall(VaultError):
    """Операция vault вызвана повторно, пока предыдущая не завершилась."""


class InvalidTolerance(VaultError, ValueError):
    """Slippage tolerance вне допустимого диапазона (9000, 10000)."""
