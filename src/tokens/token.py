"""
Token — fungible token интерфейс и in-memory реализация

Пул рассматривает токены как недоверенные: transfer может бросить
исключение, вернуть False или выполнить повторный вход в пул.
"""

import logging
from typing import Protocol, runtime_checkable

from src.core.environment import Environment, Journaled, require_address
from src.core.errors import InsufficientAllowance, InsufficientBalance, InvalidParameters
from src.core.math.fixed_point import MAX_UINT256

logger = logging.getLogger(__name__)


@runtime_checkable
class Token(Protocol):
    """Интерфейс fungible токена (ERC20-подобный)."""

    @property
    def address(self) -> str: ...

    @property
    def decimals(self) -> int: ...

    def balance_of(self, account: str) -> int: ...

    def allowance(self, owner: str, spender: str) -> int: ...

    def approve(self, owner: str, spender: str, amount: int) -> bool: ...

    def transfer(self, sender: str, to: str, amount: int) -> bool: ...

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> bool: ...


class BaseToken(Journaled):
    """
    Балансы + allowances в памяти.

    Участвует в транзакциях окружения: при откате операции пула балансы
    токена возвращаются к состоянию на её входе.
    """

    _journal_fields = ("_balances", "_allowances", "_total_supply")

    def __init__(self, env: Environment, address: str, symbol: str, decimals: int = 18):
        require_address(address, "token address")
        if decimals < 0 or decimals > 36:
            raise InvalidParameters(f"decimals must be in [0, 36], got {decimals}")
        self.env = env
        self._address = address
        self.symbol = symbol
        self._decimals = decimals
        self._balances: dict[str, int] = {}
        self._allowances: dict[tuple[str, str], int] = {}
        self._total_supply = 0
        env.register(self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.symbol}, {self._address})"

    @property
    def address(self) -> str:
        return self._address

    @property
    def decimals(self) -> int:
        return self._decimals

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, account: str) -> int:
        return self._balances.get(account, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner, spender), 0)

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        if amount < 0:
            raise InvalidParameters(f"allowance must be non-negative, got {amount}")
        self._allowances[(owner, spender)] = amount
        return True

    def transfer(self, sender: str, to: str, amount: int) -> bool:
        self._move(sender, to, amount)
        return True

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> bool:
        current = self.allowance(owner, spender)
        if current < amount:
            raise InsufficientAllowance(
                f"{self.symbol}: allowance {current} < {amount} for {spender}"
            )
        self._move(owner, to, amount)
        if current != MAX_UINT256:
            self._allowances[(owner, spender)] = current - amount
        return True

    def _move(self, sender: str, to: str, amount: int) -> None:
        require_address(to, "recipient")
        if amount < 0:
            raise InvalidParameters(f"transfer amount must be non-negative, got {amount}")
        balance = self.balance_of(sender)
        if balance < amount:
            raise InsufficientBalance(f"{self.symbol}: balance {balance} < {amount} for {sender}")
        self._balances[sender] = balance - amount
        self._balances[to] = self.balance_of(to) + amount

    def _mint(self, to: str, amount: int) -> None:
        require_address(to, "recipient")
        if amount < 0:
            raise InvalidParameters(f"mint amount must be non-negative, got {amount}")
        self._balances[to] = self.balance_of(to) + amount
        self._total_supply += amount

    def _burn(self, account: str, amount: int) -> None:
        balance = self.balance_of(account)
        if balance < amount:
            raise InsufficientBalance(f"{self.symbol}: burn {amount} > balance {balance}")
        self._balances[account] = balance - amount
        self._total_supply -= amount


class InMemoryToken(BaseToken):
    """Тестовый/симуляционный токен со свободным mint (faucet)."""

    def mint(self, to: str, amount: int) -> None:
        self._mint(to, amount)
        logger.debug("Mint %s %d -> %s", self.symbol, amount, to)
