"""
Contract Validation Module

JSON Schema контракты для данных, приходящих в ядро извне: снапшоты пула
и конфигурация vault.
"""

from .validators import (
    DEFAULT_SCHEMA_DIR,
    POOL_STATE_SCHEMA,
    VAULT_CONFIG_SCHEMA,
    ContractValidator,
    PoolStateValidator,
    SchemaLoader,
    VaultConfigValidator,
    validate_pool_state,
    validate_vault_config,
)

__all__ = [
    # Constants
    "DEFAULT_SCHEMA_DIR",
    "POOL_STATE_SCHEMA",
    "VAULT_CONFIG_SCHEMA",
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "PoolStateValidator",
    "VaultConfigValidator",
    # Functions
    "validate_pool_state",
    "validate_vault_config",
]
