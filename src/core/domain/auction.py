"""
Auction — модели Dutch-аукциона ликвидации

- AuctionStatus: ACTIVE → {COMPLETED, CANCELLED}
- Auction: immutable Pydantic snapshot аукциона; partial fill создаёт новый
  экземпляр с уменьшенными debt_to_repay / collateral_for_sale
- AuctionConfig: параметры аукционов ликвидатора (frozen dataclass)
- FillResult: результат одного заполнения
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Final

from pydantic import BaseModel, Field, field_validator

from src.core.contracts import validate_auction_config
from src.core.errors import (
    InvalidAuctionConfigCloseFactor,
    InvalidAuctionConfigDuration,
    InvalidAuctionConfigEndDiscount,
    InvalidAuctionConfigStartPremium,
)
from src.core.math.fixed_point import WAD

# =============================================================================
# DEFAULTS
# =============================================================================

# 20 минут
AUCTION_DURATION: Final[int] = 20 * 60

DEFAULT_START_PREMIUM: Final[int] = 105 * WAD // 100
DEFAULT_END_DISCOUNT: Final[int] = 95 * WAD // 100
DEFAULT_CLOSE_FACTOR: Final[int] = WAD // 2

# Верхняя граница стартовой премии (200% от reference)
MAX_START_PREMIUM: Final[int] = 2 * WAD


# =============================================================================
# ENUMS
# =============================================================================


class AuctionStatus(str, Enum):
    """Состояние аукциона"""

    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# =============================================================================
# AUCTION CONFIG
# =============================================================================


@dataclass(frozen=True)
class AuctionConfig:
    """
    Параметры аукционов.

    Attributes:
        duration: Длительность аукциона (секунды, > 0)
        start_premium: Множитель стартовой цены к reference (WAD, > 100%)
        end_discount: Множитель конечной цены к reference (WAD, (0, 100%))
        close_factor: Доля долга, ликвидируемая одним аукционом (WAD, (0, 100%])
    """

    duration: int = AUCTION_DURATION
    start_premium: int = DEFAULT_START_PREMIUM
    end_discount: int = DEFAULT_END_DISCOUNT
    close_factor: int = DEFAULT_CLOSE_FACTOR

    def __post_init__(self) -> None:
        if self.duration <= 0:
            raise InvalidAuctionConfigDuration(f"duration must be positive, got {self.duration}")
        if self.start_premium <= WAD or self.start_premium > MAX_START_PREMIUM:
            raise InvalidAuctionConfigStartPremium(
                f"start_premium must be in (WAD, {MAX_START_PREMIUM}], got {self.start_premium}"
            )
        if self.end_discount <= 0 or self.end_discount >= WAD:
            raise InvalidAuctionConfigEndDiscount(
                f"end_discount must be in (0, WAD), got {self.end_discount}"
            )
        if self.close_factor <= 0 or self.close_factor > WAD:
            raise InvalidAuctionConfigCloseFactor(
                f"close_factor must be in (0, WAD], got {self.close_factor}"
            )

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "AuctionConfig":
        """Построение из payload, проверенного контрактом auction_config."""
        validate_auction_config(payload)
        return cls(**payload)


# =============================================================================
# AUCTION MODEL
# =============================================================================


class Auction(BaseModel):
    """
    Снапшот аукциона.

    Цены — стоимость 1 единицы collateral в единицах borrow токена (WAD).
    """

    auction_id: int = Field(..., ge=1, description="Идентификатор аукциона (с 1)")
    user: str = Field(..., min_length=1, description="Ликвидируемый заёмщик")
    pool: str = Field(..., min_length=1, description="Адрес пула")

    debt_to_repay: int = Field(..., ge=0, description="Оставшийся долг к погашению (borrow units)")
    collateral_for_sale: int = Field(
        ..., ge=0, description="Оставшийся collateral на продажу (collateral units)"
    )

    start_time: int = Field(..., ge=0, description="Начало (Unix, секунды)")
    end_time: int = Field(..., ge=0, description="Дедлайн (Unix, секунды)")

    start_price: int = Field(..., gt=0, description="Стартовая цена (WAD)")
    end_price: int = Field(..., gt=0, description="Конечная цена (WAD)")

    status: AuctionStatus = Field(default=AuctionStatus.ACTIVE, description="Состояние")

    model_config = {"frozen": True}  # Immutable

    @field_validator("end_time")
    @classmethod
    def validate_end_after_start(cls, v: int, info) -> int:
        """Дедлайн строго после старта"""
        if "start_time" in info.data:
            start = info.data["start_time"]
            if v <= start:
                raise ValueError(f"end_time {v} must be after start_time {start}")
        return v

    @field_validator("end_price")
    @classmethod
    def validate_price_non_increasing(cls, v: int, info) -> int:
        """Цена аукциона не растёт"""
        if "start_price" in info.data:
            start = info.data["start_price"]
            if v > start:
                raise ValueError(f"end_price {v} must not exceed start_price {start}")
        return v

    @property
    def is_active(self) -> bool:
        return self.status == AuctionStatus.ACTIVE

    @property
    def duration(self) -> int:
        return self.end_time - self.start_time


# =============================================================================
# FILL RESULT
# =============================================================================


@dataclass(frozen=True)
class FillResult:
    """Результат одного заполнения аукциона."""

    debt_repaid: int
    collateral_received: int
    execution_price: int
