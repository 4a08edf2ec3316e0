"""
JSON Schema контракты рынка

Контракты (Draft 2020-12, contracts/schema/<name>.json):
- market_params  — payload риск-параметров рынка
- auction_config — payload параметров аукционов
- position       — snapshot позиции (Position.model_dump(mode="json"))
- auction        — snapshot аукциона (Auction.model_dump(mode="json"))

Схемы загружаются один раз и проходят meta-validation при загрузке.
Нарушение контракта поднимает jsonschema.ValidationError.
"""

import json
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterator, List, Union

import jsonschema
from jsonschema import Draft202012Validator

SCHEMA_DIR = Path(__file__).parent / "schema"


class Contract(str, Enum):
    """Имя контракта = имя файла схемы без расширения"""

    MARKET_PARAMS = "market_params"
    AUCTION_CONFIG = "auction_config"
    POSITION = "position"
    AUCTION = "auction"


# =============================================================================
# SCHEMA LOADING
# =============================================================================


@lru_cache(maxsize=None)
def load_schema(name: str) -> Dict[str, Any]:
    """
    Загрузка и meta-validation схемы контракта.

    Args:
        name: Имя файла схемы без расширения (см. Contract)

    Raises:
        FileNotFoundError: Файл схемы отсутствует
        ValueError: Схема не проходит meta-validation
    """
    path = SCHEMA_DIR / f"{name}.json"
    if not path.exists():
        raise FileNotFoundError(f"Schema not found: {path}")

    schema = json.loads(path.read_text(encoding="utf-8"))
    try:
        Draft202012Validator.check_schema(schema)
    except jsonschema.SchemaError as e:
        raise ValueError(f"Invalid JSON Schema in {path.name}: {e.message}") from e
    return schema


@lru_cache(maxsize=None)
def _validator_for(contract: Contract) -> Draft202012Validator:
    return Draft202012Validator(load_schema(contract.value))


# =============================================================================
# VALIDATOR
# =============================================================================


class ContractValidator:
    """
    Проверка данных против одного контракта.

    Args:
        contract: Contract или его строковое имя
    """

    def __init__(self, contract: Union[Contract, str]):
        self.contract = Contract(contract)
        self._validator = _validator_for(self.contract)

    @property
    def schema(self) -> Dict[str, Any]:
        return self._validator.schema

    def validate(self, data: Dict[str, Any]) -> None:
        """
        Raises:
            jsonschema.ValidationError: Первое (наиболее релевантное) нарушение
        """
        self._validator.validate(data)

    def is_valid(self, data: Dict[str, Any]) -> bool:
        return self._validator.is_valid(data)

    def iter_errors(self, data: Dict[str, Any]) -> Iterator[jsonschema.ValidationError]:
        return self._validator.iter_errors(data)

    def describe_errors(self, data: Dict[str, Any]) -> List[str]:
        """Все нарушения в виде 'path: message', отсортированные по пути."""
        described = []
        for error in self.iter_errors(data):
            path = ".".join(str(p) for p in error.path) or "<root>"
            described.append(f"{path}: {error.message}")
        return sorted(described)


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def validate_market_params(data: Dict[str, Any]) -> None:
    ContractValidator(Contract.MARKET_PARAMS).validate(data)


def validate_auction_config(data: Dict[str, Any]) -> None:
    ContractValidator(Contract.AUCTION_CONFIG).validate(data)


def validate_position(data: Dict[str, Any]) -> None:
    ContractValidator(Contract.POSITION).validate(data)


def validate_auction(data: Dict[str, Any]) -> None:
    ContractValidator(Contract.AUCTION).validate(data)
