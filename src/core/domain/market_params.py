"""
MarketParams — риск-параметры изолированного рынка

Все доли в WAD (1e18 = 100%).

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. 0 < ltv < liquidation_threshold <= 1 WAD
2. liquidation_penalty <= MAX_LIQUIDATION_PENALTY
3. reserve_factor <= 1 WAD
"""

from typing import Any, Dict, Final

from pydantic import BaseModel, Field, field_validator

from src.core.contracts import validate_market_params
from src.core.math.fixed_point import WAD

# =============================================================================
# DEFAULTS
# =============================================================================

DEFAULT_LTV: Final[int] = 75 * WAD // 100
DEFAULT_LIQUIDATION_THRESHOLD: Final[int] = 80 * WAD // 100
DEFAULT_LIQUIDATION_PENALTY: Final[int] = 5 * WAD // 100
DEFAULT_RESERVE_FACTOR: Final[int] = 10 * WAD // 100

# Бонус ликвидатора выше 50% считаем ошибкой конфигурации
MAX_LIQUIDATION_PENALTY: Final[int] = WAD // 2


# =============================================================================
# MARKET PARAMS MODEL
# =============================================================================


class MarketParams(BaseModel):
    """Риск-параметры рынка (immutable)."""

    ltv: int = Field(default=DEFAULT_LTV, gt=0, le=WAD, description="Loan-to-value (WAD)")
    liquidation_threshold: int = Field(
        default=DEFAULT_LIQUIDATION_THRESHOLD,
        gt=0,
        le=WAD,
        description="Liquidation threshold (WAD), строго больше LTV",
    )
    liquidation_penalty: int = Field(
        default=DEFAULT_LIQUIDATION_PENALTY,
        ge=0,
        le=MAX_LIQUIDATION_PENALTY,
        description="Бонус ликвидатора (WAD)",
    )
    reserve_factor: int = Field(
        default=DEFAULT_RESERVE_FACTOR,
        ge=0,
        le=WAD,
        description="Доля начисленных процентов в резервы протокола (WAD)",
    )

    model_config = {"frozen": True}

    @field_validator("liquidation_threshold")
    @classmethod
    def validate_threshold_above_ltv(cls, v: int, info) -> int:
        """liquidation_threshold должен быть строже LTV"""
        if "ltv" in info.data:
            ltv = info.data["ltv"]
            if v <= ltv:
                raise ValueError(f"liquidation_threshold {v} must exceed ltv {ltv}")
        return v

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "MarketParams":
        """
        Построение из внешнего payload (dict).

        Payload сначала проверяется JSON Schema контрактом market_params,
        затем Pydantic-валидаторами модели.

        Raises:
            jsonschema.ValidationError: Нарушение контракта
            pydantic.ValidationError: Нарушение инвариантов модели
        """
        validate_market_params(payload)
        return cls(**payload)
