"""VaultMode — режим работы vault (capability flag для Conversion Engine)."""

from enum import Enum


class VaultMode(str, Enum):
    """
    Режим vault.

    SINGLE_ASSET — депозит/вывод в одном nominal токене (token A), vault сам
                   делает swap перед add-liquidity.
    TWO_ASSET    — nominal единица = pool share, депозитор вносит оба токена.
    """

    SINGLE_ASSET = "single_asset"
    TWO_ASSET = "two_asset"
