"""Isolated-market ledger."""

from src.ledger.lending_pool import AccrualSnapshot, LendingPool

__all__ = [
    "AccrualSnapshot",
    "LendingPool",
]
