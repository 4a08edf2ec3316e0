"""
Tests for host Environment

Проверяет:
- монотонные часы
- all-or-nothing transaction() с откатом участников
- non_reentrant защиту
"""

import pytest

from src.core.environment import (
    DEFAULT_START_TIME,
    ZERO_ADDRESS,
    Environment,
    Journaled,
    non_reentrant,
    require_address,
)
from src.core.errors import InvalidParameters, ReentrantCall, ZeroAddress


class Counter(Journaled):
    """Минимальный участник транзакций."""

    _journal_fields = ("value", "history")

    def __init__(self, env: Environment):
        self.env = env
        self._entered = False
        self.value = 0
        self.history: list[int] = []
        env.register(self)

    @non_reentrant
    def add(self, amount: int) -> int:
        self.value += amount
        self.history.append(amount)
        if self.value < 0:
            raise InvalidParameters("negative")
        return self.value

    @non_reentrant
    def add_then_reenter(self, amount: int) -> None:
        self.value += amount
        self.add(amount)


class TestClock:
    def test_default_start(self):
        assert Environment().now == DEFAULT_START_TIME

    def test_advance(self):
        env = Environment(start_time=100)
        assert env.advance(50) == 150
        assert env.now == 150

    def test_set_time_forward(self):
        env = Environment(start_time=100)
        env.set_time(500)
        assert env.now == 500

    def test_time_cannot_go_backwards(self):
        env = Environment(start_time=100)
        with pytest.raises(InvalidParameters):
            env.set_time(99)
        with pytest.raises(InvalidParameters):
            env.advance(-1)


class TestTransaction:
    def test_commit_on_success(self):
        env = Environment()
        counter = Counter(env)
        with env.transaction():
            counter.value = 5
        assert counter.value == 5

    def test_rollback_on_error(self):
        env = Environment()
        counter = Counter(env)
        counter.value = 3
        counter.history = [3]

        with pytest.raises(RuntimeError):
            with env.transaction():
                counter.value = 10
                counter.history.append(7)
                raise RuntimeError("boom")

        assert counter.value == 3
        assert counter.history == [3]

    def test_nested_scope_joins_outer(self):
        env = Environment()
        counter = Counter(env)

        with pytest.raises(RuntimeError):
            with env.transaction():
                with env.transaction():
                    counter.value = 1
                assert env.in_transaction
                raise RuntimeError("outer fails")

        assert counter.value == 0
        assert not env.in_transaction

    def test_register_is_idempotent(self):
        env = Environment()
        counter = Counter(env)
        env.register(counter)
        counter.value = 1
        with pytest.raises(RuntimeError):
            with env.transaction():
                counter.value = 2
                raise RuntimeError
        assert counter.value == 1


class TestNonReentrant:
    def test_failed_call_rolls_back(self):
        env = Environment()
        counter = Counter(env)
        counter.add(5)

        with pytest.raises(InvalidParameters):
            counter.add(-10)

        assert counter.value == 5
        assert counter.history == [5]

    def test_reentry_rejected_and_rolled_back(self):
        env = Environment()
        counter = Counter(env)

        with pytest.raises(ReentrantCall):
            counter.add_then_reenter(1)

        assert counter.value == 0
        # блокировка снята после ошибки
        assert counter.add(2) == 2


class TestRequireAddress:
    def test_valid(self):
        assert require_address("alice", "user") == "alice"

    @pytest.mark.parametrize("address", ["", ZERO_ADDRESS])
    def test_zero_address(self, address):
        with pytest.raises(ZeroAddress):
            require_address(address, "user")
