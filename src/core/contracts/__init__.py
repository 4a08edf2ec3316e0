"""
Contract Validation Module

JSON Schema контракты для конфигурационных payload и snapshot-ов состояния.
"""

from .validators import (
    SCHEMA_DIR,
    Contract,
    ContractValidator,
    load_schema,
    validate_auction,
    validate_auction_config,
    validate_market_params,
    validate_position,
)

__all__ = [
    # Schemas
    "SCHEMA_DIR",
    "Contract",
    "load_schema",
    # Validator
    "ContractValidator",
    # Functions
    "validate_market_params",
    "validate_auction_config",
    "validate_position",
    "validate_auction",
]
