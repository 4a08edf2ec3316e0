"""
Environment — хост-окружение исполнения

Заменяет собой execution substrate:
- Часы окружения (`now`, секунды) — единственный источник времени
- transaction(): all-or-nothing область; при исключении все
  зарегистрированные участники (пулы, токены, ликвидатор) откатываются к
  снапшоту, снятому на входе во внешнюю область
- non_reentrant: защита state-mutating точек входа от повторного входа
  через callback недоверенного токена

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Время монотонно (назад не переводится)
2. Частичные записи никогда не видны после неуспешной операции
3. Вложенные transaction() присоединяются к внешней
"""

import copy
import functools
from contextlib import contextmanager
from typing import Any, Callable, Iterator, TypeVar

from src.core.errors import InvalidParameters, ReentrantCall, ZeroAddress

# Стартовое время окружения по умолчанию (Unix timestamp)
DEFAULT_START_TIME = 1_700_000_000

ZERO_ADDRESS = "0x" + "0" * 40

F = TypeVar("F", bound=Callable[..., Any])


class Journaled:
    """
    Участник транзакций окружения.

    Наследник перечисляет в `_journal_fields` атрибуты, составляющие его
    состояние. Снапшот — глубокая копия этих атрибутов.
    """

    _journal_fields: tuple[str, ...] = ()

    def snapshot(self) -> dict[str, Any]:
        return {name: copy.deepcopy(getattr(self, name)) for name in self._journal_fields}

    def restore(self, snapshot: dict[str, Any]) -> None:
        for name, value in snapshot.items():
            setattr(self, name, value)


class Environment:
    """
    Хост-окружение: часы + транзакционная область.

    Args:
        start_time: Начальное время (Unix timestamp, секунды)
    """

    def __init__(self, start_time: int = DEFAULT_START_TIME):
        if start_time < 0:
            raise InvalidParameters(f"start_time must be non-negative, got {start_time}")
        self._now = start_time
        self._participants: list[Journaled] = []
        self._depth = 0

    @property
    def now(self) -> int:
        return self._now

    def advance(self, seconds: int) -> int:
        """Сдвиг часов вперёд. Возвращает новое время."""
        if seconds < 0:
            raise InvalidParameters(f"Cannot move time backwards by {seconds}s")
        self._now += seconds
        return self._now

    def set_time(self, timestamp: int) -> None:
        if timestamp < self._now:
            raise InvalidParameters(
                f"Cannot move time backwards: {timestamp} < {self._now}"
            )
        self._now = timestamp

    def register(self, participant: Journaled) -> None:
        if participant not in self._participants:
            self._participants.append(participant)

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """
        All-or-nothing область исполнения.

        Внешняя область снимает снапшот всех участников и восстанавливает
        его, если тело бросило исключение. Исключение пробрасывается дальше.
        """
        if self._depth > 0:
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
            return

        snapshots = [(p, p.snapshot()) for p in self._participants]
        self._depth = 1
        try:
            yield
        except BaseException:
            for participant, state in snapshots:
                participant.restore(state)
            raise
        finally:
            self._depth = 0


def non_reentrant(method: F) -> F:
    """
    Декоратор state-mutating точки входа.

    Требует у экземпляра атрибутов `env` (Environment) и `_entered` (bool).
    Повторный вход в любой защищённый метод того же экземпляра во время
    выполнения бросает ReentrantCall; тело выполняется внутри
    env.transaction().
    """

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        if self._entered:
            raise ReentrantCall(f"Reentrant call into {type(self).__name__}.{method.__name__}")
        self._entered = True
        try:
            with self.env.transaction():
                return method(self, *args, **kwargs)
        finally:
            self._entered = False

    return wrapper  # type: ignore[return-value]


def require_address(value: str, name: str) -> str:
    """Проверка, что адрес задан и не нулевой."""
    if not value or value == ZERO_ADDRESS:
        raise ZeroAddress(f"{name} must be a non-zero address")
    return value
