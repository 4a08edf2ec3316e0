"""
PoolToken — receipt token поставщика ликвидности

Баланс PoolToken = supply shares держателя. Mint/burn доступны только
пулу-владельцу.
"""

from src.core.environment import Environment, require_address
from src.core.errors import OnlyPool
from src.tokens.token import BaseToken


class PoolToken(BaseToken):
    def __init__(
        self,
        env: Environment,
        address: str,
        pool_address: str,
        symbol: str,
        decimals: int = 18,
    ):
        super().__init__(env, address, symbol, decimals)
        self.pool_address = require_address(pool_address, "pool address")

    def _only_pool(self, sender: str) -> None:
        if sender != self.pool_address:
            raise OnlyPool(f"{self.symbol}: {sender} is not the owning pool")

    def mint(self, sender: str, to: str, amount: int) -> None:
        self._only_pool(sender)
        self._mint(to, amount)

    def burn(self, sender: str, account: str, amount: int) -> None:
        self._only_pool(sender)
        self._burn(account, amount)
