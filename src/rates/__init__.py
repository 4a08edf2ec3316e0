"""Interest rate models."""

from src.rates.interest_rate_model import InterestRateModel

__all__ = ["InterestRateModel"]
