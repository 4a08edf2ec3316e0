"""Price sources and the dual-source price oracle."""

from src.oracle.feeds import RoundBasedFeed, SequencerUptimeFeed, TickObservationPool
from src.oracle.price_oracle import (
    MAX_PRICE_DEVIATION,
    SEQUENCER_GRACE_PERIOD,
    PriceOracle,
    normalize_answer,
    price_deviation,
)

__all__ = [
    # Feeds
    "RoundBasedFeed",
    "SequencerUptimeFeed",
    "TickObservationPool",
    # Oracle
    "MAX_PRICE_DEVIATION",
    "SEQUENCER_GRACE_PERIOD",
    "PriceOracle",
    "normalize_answer",
    "price_deviation",
]
