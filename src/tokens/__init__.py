"""Fungible token interface, in-memory token and pool receipt token."""

from src.tokens.pool_token import PoolToken
from src.tokens.token import BaseToken, InMemoryToken, Token

__all__ = [
    "Token",
    "BaseToken",
    "InMemoryToken",
    "PoolToken",
]
