"""
Contract Validators — JSON Schema проверка данных, приходящих извне ядра

Всё, что ядро получает не из собственных вычислений (снапшоты reserves от
внешнего источника, конфигурация vault из JSON файла), проверяется против
формального контракта из contracts/schema/ до построения доменных моделей.

Контракты:
- pool_state   — reserves и supply пула в каноническом порядке (A, B)
- vault_config — неизменяемая конфигурация vault
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterator, List

import jsonschema
from jsonschema import Draft202012Validator, ValidationError

# contracts/schema/ в корне проекта
DEFAULT_SCHEMA_DIR = Path(__file__).resolve().parents[3] / "contracts" / "schema"

POOL_STATE_SCHEMA = "pool_state"
VAULT_CONFIG_SCHEMA = "vault_config"


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """Чтение и meta-проверка схем (draft 2020-12) с кэшем по имени."""

    def __init__(self, schema_dir: Path | None = None):
        self._schema_dir = schema_dir or DEFAULT_SCHEMA_DIR
        if not self._schema_dir.is_dir():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")
        self._cache: Dict[str, Dict[str, Any]] = {}

    @property
    def schema_dir(self) -> Path:
        return self._schema_dir

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Схема по имени файла без расширения.

        Raises:
            FileNotFoundError: нет файла <schema_name>.json
            ValueError: файл не является корректной JSON Schema
        """
        cached = self._cache.get(schema_name)
        if cached is not None:
            return cached

        path = self._schema_dir / f"{schema_name}.json"
        if not path.is_file():
            raise FileNotFoundError(f"Schema not found: {path}")

        schema = json.loads(path.read_text(encoding="utf-8"))
        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"Invalid JSON Schema in {path.name}: {e.message}") from e

        self._cache[schema_name] = schema
        return schema


_SCHEMA_LOADER = SchemaLoader()


# =============================================================================
# CONTRACT VALIDATORS
# =============================================================================


class ContractValidator:
    """Валидатор одного контракта."""

    def __init__(self, schema_name: str, loader: SchemaLoader | None = None):
        self.schema_name = schema_name
        self.schema = (loader or _SCHEMA_LOADER).load_schema(schema_name)
        self._validator = Draft202012Validator(self.schema)

    def validate(self, data: Dict[str, Any]) -> None:
        """
        Raises:
            ValidationError: первое нарушение контракта
        """
        self._validator.validate(data)

    def is_valid(self, data: Dict[str, Any]) -> bool:
        return self._validator.is_valid(data)

    def iter_errors(self, data: Dict[str, Any]) -> Iterator[ValidationError]:
        return self._validator.iter_errors(data)

    def describe_errors(self, data: Dict[str, Any]) -> List[str]:
        """Все нарушения в виде 'path: message' (для логов и CLI)."""
        messages = []
        for error in sorted(self.iter_errors(data), key=lambda e: list(e.absolute_path)):
            path = ".".join(str(part) for part in error.absolute_path) or "<root>"
            messages.append(f"{path}: {error.message}")
        return messages


class PoolStateValidator(ContractValidator):
    def __init__(self, loader: SchemaLoader | None = None):
        super().__init__(POOL_STATE_SCHEMA, loader)


class VaultConfigValidator(ContractValidator):
    def __init__(self, loader: SchemaLoader | None = None):
        super().__init__(VAULT_CONFIG_SCHEMA, loader)


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def validate_pool_state(data: Dict[str, Any]) -> None:
    """
    Raises:
        ValidationError: снапшот не соответствует контракту pool_state
    """
    PoolStateValidator().validate(data)


def validate_vault_config(data: Dict[str, Any]) -> None:
    """
    Raises:
        ValidationError: конфигурация не соответствует контракту vault_config
    """
    VaultConfigValidator().validate(data)
