"""
Feeds — in-memory источники цен

- RoundBasedFeed: primary feed с раундами (latest_round_data)
- SequencerUptimeFeed: liveness feed окружения (answer 0 = up, 1 = down)
- TickObservationPool: fallback источник кумулятивных tick-наблюдений

Время источников берётся из Environment.
"""

import bisect
from typing import Optional, Sequence

from src.core.domain.oracle_types import RoundData
from src.core.environment import Environment
from src.core.errors import FeedError, InvalidParameters
from src.core.math.tick_math import MAX_TICK, MIN_TICK


# =============================================================================
# ROUND-BASED FEED
# =============================================================================


class RoundBasedFeed:
    """
    Round-based feed.

    Каждый push_answer открывает новый завершённый раунд. set_round_data
    позволяет выставить произвольный (в т.ч. незавершённый) раунд.
    """

    def __init__(self, env: Environment, decimals: int = 8, description: str = ""):
        if decimals < 0:
            raise InvalidParameters(f"decimals must be non-negative, got {decimals}")
        self.env = env
        self._decimals = decimals
        self.description = description
        self._latest: Optional[RoundData] = None

    def __repr__(self) -> str:
        return f"RoundBasedFeed({self.description or 'unnamed'}, decimals={self._decimals})"

    @property
    def decimals(self) -> int:
        return self._decimals

    def push_answer(self, answer: int, updated_at: Optional[int] = None) -> RoundData:
        """Новый раунд с ответом answer (по умолчанию на текущий момент)."""
        ts = self.env.now if updated_at is None else updated_at
        round_id = 1 if self._latest is None else self._latest.round_id + 1
        self._latest = RoundData(
            round_id=round_id,
            answer=answer,
            started_at=ts,
            updated_at=ts,
            answered_in_round=round_id,
        )
        return self._latest

    def set_round_data(self, round_data: RoundData) -> None:
        self._latest = round_data

    def latest_round_data(self) -> RoundData:
        if self._latest is None:
            raise FeedError(f"{self!r} has no rounds")
        return self._latest


class SequencerUptimeFeed(RoundBasedFeed):
    """
    Liveness feed окружения исполнения.

    answer: 0 — окружение работает, 1 — остановлено.
    started_at: момент последней смены статуса.
    """

    STATUS_UP = 0
    STATUS_DOWN = 1

    def __init__(self, env: Environment, is_up: bool = True, since: Optional[int] = None):
        super().__init__(env, decimals=0, description="sequencer uptime")
        self.set_status(is_up, since)

    def set_status(self, is_up: bool, since: Optional[int] = None) -> None:
        """Смена статуса (since — время смены, по умолчанию сейчас)."""
        answer = self.STATUS_UP if is_up else self.STATUS_DOWN
        self.push_answer(answer, updated_at=since)


# =============================================================================
# TICK OBSERVATION POOL
# =============================================================================


class TickObservationPool:
    """
    Источник кумулятивных tick-наблюдений.

    tick_cumulative(t) = Σ tick * dt по истории. Наблюдения хранятся как
    (timestamp, cumulative на timestamp, tick начиная с timestamp).

    Args:
        env: Окружение (часы)
        tick: Начальный tick
        since: Начало истории наблюдений (по умолчанию сейчас, может быть в прошлом)
    """

    def __init__(self, env: Environment, tick: int, since: Optional[int] = None):
        self.env = env
        start = env.now if since is None else since
        if start > env.now:
            raise InvalidParameters(f"history cannot start in the future: {start} > {env.now}")
        self._check_tick(tick)
        self._times: list[int] = [start]
        self._cumulatives: list[int] = [0]
        self._ticks: list[int] = [tick]

    @staticmethod
    def _check_tick(tick: int) -> None:
        if tick < MIN_TICK or tick > MAX_TICK:
            raise InvalidParameters(f"Tick {tick} out of bounds [{MIN_TICK}, {MAX_TICK}]")

    @property
    def current_tick(self) -> int:
        return self._ticks[-1]

    def set_tick(self, tick: int) -> None:
        """Смена текущего tick с текущего момента."""
        self._check_tick(tick)
        now = self.env.now
        if now == self._times[-1]:
            self._ticks[-1] = tick
            return
        self._cumulatives.append(self._cumulative_at(now))
        self._times.append(now)
        self._ticks.append(tick)

    def _cumulative_at(self, timestamp: int) -> int:
        if timestamp < self._times[0]:
            raise FeedError(
                f"Observation at {timestamp} predates history start {self._times[0]}"
            )
        idx = bisect.bisect_right(self._times, timestamp) - 1
        return self._cumulatives[idx] + self._ticks[idx] * (timestamp - self._times[idx])

    def observe(self, seconds_agos: Sequence[int]) -> list[int]:
        """
        Tick cumulatives на моменты now - seconds_ago.

        Raises:
            FeedError: История короче запрошенного окна
        """
        now = self.env.now
        result = []
        for seconds_ago in seconds_agos:
            if seconds_ago < 0:
                raise InvalidParameters(f"seconds_ago must be non-negative, got {seconds_ago}")
            result.append(self._cumulative_at(now - seconds_ago))
        return result
