"""
VaultConfig — Конфигурация LP vault

Frozen dataclass: всё, что задаётся один раз при создании vault и дальше не
меняется. Единственный изменяемый параметр (slippage tolerance) хранится в
SlippageGuard; здесь только его начальное значение.

Конфигурацию можно собрать из dict (например, загруженного из JSON) —
тогда dict сначала проверяется JSON Schema контрактом `vault_config`.
"""

from dataclasses import dataclass
from typing import Any, Dict, Final

from src.core.contracts import validate_vault_config
from src.core.domain.vault_mode import VaultMode
from src.core.math.slippage import validate_tolerance

# =============================================================================
# DEFAULTS
# =============================================================================

# Начальная tolerance: 0.5% slippage
DEFAULT_SLIPPAGE_TOLERANCE_BPS: Final[int] = 9950

# Окно deadline для liquidity-вызовов (секунды от текущего времени)
DEFAULT_DEADLINE_SEC: Final[int] = 100

# Uniswap-v2 fee: 0.3% (997/1000 остаётся в свопе)
DEFAULT_SWAP_FEE_NUMERATOR: Final[int] = 997
DEFAULT_SWAP_FEE_DENOMINATOR: Final[int] = 1000


# =============================================================================
# CONFIG
# =============================================================================


@dataclass(frozen=True)
class VaultConfig:
    """Конфигурация vault.

    token_a — канонический первый токен (в SINGLE_ASSET это nominal asset),
    token_b — парный токен. Порядок не обязан совпадать с порядком в пуле.
    """

    manager: str
    token_a: str
    token_b: str
    mode: VaultMode = VaultMode.SINGLE_ASSET
    vault_address: str = "vault"
    slippage_tolerance_bps: int = DEFAULT_SLIPPAGE_TOLERANCE_BPS
    deadline_sec: int = DEFAULT_DEADLINE_SEC
    swap_fee_numerator: int = DEFAULT_SWAP_FEE_NUMERATOR
    swap_fee_denominator: int = DEFAULT_SWAP_FEE_DENOMINATOR

    def __post_init__(self) -> None:
        if not self.manager:
            raise ValueError("manager must be non-empty")
        if not self.token_a or not self.token_b:
            raise ValueError("token_a and token_b must be non-empty")
        if self.token_a == self.token_b:
            raise ValueError(f"token_a and token_b must differ, got {self.token_a}")
        if not self.vault_address:
            raise ValueError("vault_address must be non-empty")
        if not isinstance(self.mode, VaultMode):
            # dataclass не приводит типы сам
            object.__setattr__(self, "mode", VaultMode(self.mode))

        validate_tolerance(self.slippage_tolerance_bps)

        if self.deadline_sec <= 0:
            raise ValueError(f"deadline_sec must be positive, got {self.deadline_sec}")
        if not 0 < self.swap_fee_numerator <= self.swap_fee_denominator:
            raise ValueError(
                f"swap fee must satisfy 0 < numerator <= denominator, "
                f"got {self.swap_fee_numerator}/{self.swap_fee_denominator}"
            )

    @property
    def is_single_asset(self) -> bool:
        return self.mode == VaultMode.SINGLE_ASSET

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VaultConfig":
        """
        Сборка конфигурации из dict с проверкой JSON Schema.

        Args:
            data: сырой dict (например, из JSON файла)

        Returns:
            VaultConfig

        Raises:
            jsonschema.ValidationError: если dict не соответствует схеме
            ValueError: если значения нарушают инварианты конфигурации
        """
        validate_vault_config(data)
        return cls(**data)
