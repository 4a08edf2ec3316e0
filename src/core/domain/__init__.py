"""
Domain models and value objects.

Contains Position, MarketParams, Auction and oracle value types.
"""

from src.core.domain.auction import (
    AUCTION_DURATION,
    DEFAULT_CLOSE_FACTOR,
    DEFAULT_END_DISCOUNT,
    DEFAULT_START_PREMIUM,
    Auction,
    AuctionConfig,
    AuctionStatus,
    FillResult,
)
from src.core.domain.market_params import (
    DEFAULT_LIQUIDATION_PENALTY,
    DEFAULT_LIQUIDATION_THRESHOLD,
    DEFAULT_LTV,
    DEFAULT_RESERVE_FACTOR,
    MarketParams,
)
from src.core.domain.oracle_types import (
    OracleConfig,
    PriceFeed,
    PriceResult,
    RoundData,
    TickObservationSource,
)
from src.core.domain.position import Position

__all__ = [
    # Position
    "Position",
    # Market params
    "DEFAULT_LTV",
    "DEFAULT_LIQUIDATION_THRESHOLD",
    "DEFAULT_LIQUIDATION_PENALTY",
    "DEFAULT_RESERVE_FACTOR",
    "MarketParams",
    # Auction
    "AUCTION_DURATION",
    "DEFAULT_START_PREMIUM",
    "DEFAULT_END_DISCOUNT",
    "DEFAULT_CLOSE_FACTOR",
    "AuctionStatus",
    "AuctionConfig",
    "Auction",
    "FillResult",
    # Oracle types
    "RoundData",
    "PriceFeed",
    "TickObservationSource",
    "OracleConfig",
    "PriceResult",
]
