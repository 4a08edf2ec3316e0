"""
Oracle types — интерфейсы источников цен и результаты оракула

- PriceFeed: primary round-based feed (также liveness feed окружения)
- TickObservationSource: fallback источник кумулятивных tick-наблюдений
- RoundData: ответ round-based feed
- OracleConfig: конфигурация оракула для одного токена
- PriceResult: цена (WAD USD) + timestamp + флаг fallback
"""

from dataclasses import dataclass
from typing import Optional, Protocol, Sequence, runtime_checkable

from pydantic import BaseModel, Field

from src.core.errors import InvalidParameters


# =============================================================================
# SOURCE INTERFACES
# =============================================================================


@dataclass(frozen=True)
class RoundData:
    """Ответ round-based feed (answer в единицах feed.decimals)."""

    round_id: int
    answer: int
    started_at: int
    updated_at: int
    answered_in_round: int


@runtime_checkable
class PriceFeed(Protocol):
    """Round-based feed."""

    @property
    def decimals(self) -> int: ...

    def latest_round_data(self) -> RoundData: ...


@runtime_checkable
class TickObservationSource(Protocol):
    """Источник кумулятивных tick-наблюдений."""

    def observe(self, seconds_agos: Sequence[int]) -> list[int]: ...


# =============================================================================
# ORACLE CONFIG
# =============================================================================


@dataclass(frozen=True)
class OracleConfig:
    """
    Конфигурация оракула для токена.

    Attributes:
        primary_feed: Primary round-based feed (USD)
        fallback_pool: Fallback источник tick-наблюдений (пара токен/quote)
        twap_window: Окно TWAP (секунды)
        max_staleness: Максимальный возраст primary ответа (секунды)
        is_token0: Токен — token0 fallback пула
        token_decimals: decimals оцениваемого токена
        quote_decimals: decimals quote-актива fallback пула (USD-pegged)
    """

    primary_feed: PriceFeed
    fallback_pool: Optional[TickObservationSource] = None
    twap_window: int = 1800
    max_staleness: int = 3600
    is_token0: bool = True
    token_decimals: int = 18
    quote_decimals: int = 6

    def __post_init__(self) -> None:
        if self.primary_feed is None:
            raise InvalidParameters("primary_feed is required")
        if self.max_staleness <= 0:
            raise InvalidParameters(f"max_staleness must be positive, got {self.max_staleness}")
        if self.fallback_pool is not None and self.twap_window <= 0:
            raise InvalidParameters(f"twap_window must be positive, got {self.twap_window}")
        if self.token_decimals < 0 or self.quote_decimals < 0:
            raise InvalidParameters("decimals must be non-negative")

    @property
    def has_fallback(self) -> bool:
        return self.fallback_pool is not None


# =============================================================================
# PRICE RESULT
# =============================================================================


class PriceResult(BaseModel):
    """Результат запроса цены."""

    price: int = Field(..., gt=0, description="Цена (WAD USD)")
    timestamp: int = Field(..., ge=0, description="Время цены (Unix, секунды)")
    is_from_fallback: bool = Field(..., description="Цена получена из fallback TWAP")

    model_config = {"frozen": True}
