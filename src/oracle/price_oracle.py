"""
Price Oracle — dual-source разрешение цены

Источники:
- primary: round-based feed (USD), проверка завершённости раунда,
  положительности ответа и возраста (age <= max_staleness)
- fallback: TWAP из кумулятивных tick-наблюдений за окно twap_window,
  decimal-нормализованный к USD через USD-pegged quote актив

Таблица решений:
    primary | fallback | deviation <= 5% | результат
    --------+----------+-----------------+---------------------------
    valid   | valid    | да              | primary (direct)
    valid   | valid    | нет             | PriceDeviationTooHigh
    valid   | invalid  | -               | primary (direct)
    invalid | valid    | -               | fallback (флаг fallback)
    invalid | invalid  | -               | OraclesUnavailable

Перед любым чтением цены проверяется liveness feed окружения: если он
сообщает "down" или поднялся в пределах grace period — отказ.
"""

import logging
from typing import Callable, Final, Optional

from src.core.domain.oracle_types import OracleConfig, PriceFeed, PriceResult
from src.core.environment import Environment, require_address
from src.core.errors import (
    FeedError,
    GracePeriodNotOver,
    InvalidPrice,
    OracleError,
    OracleNotConfigured,
    OraclesUnavailable,
    OnlyOwner,
    PriceDeviationTooHigh,
    SequencerDown,
    StalePrice,
)
from src.core.math.fixed_point import WAD, Rounding, mul_div
from src.core.math.tick_math import mean_tick, tick_to_price_wad

logger = logging.getLogger(__name__)

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

# Максимальное расхождение primary и fallback (WAD)
MAX_PRICE_DEVIATION: Final[int] = 5 * WAD // 100

# Grace period после восстановления окружения (секунды)
SEQUENCER_GRACE_PERIOD: Final[int] = 3600


def normalize_answer(answer: int, feed_decimals: int) -> int:
    """Приведение ответа feed к WAD."""
    if feed_decimals <= 18:
        return answer * 10 ** (18 - feed_decimals)
    return answer // 10 ** (feed_decimals - 18)


def price_deviation(reference: int, other: int) -> int:
    """|reference - other| / reference (WAD, округление вверх)."""
    return mul_div(abs(reference - other), WAD, reference, Rounding.UP)


# =============================================================================
# PRICE ORACLE
# =============================================================================


class PriceOracle:
    """
    Router цен токенов.

    Args:
        env: Окружение (часы)
        owner: Владелец (может менять конфигурацию)
        sequencer_uptime_feed: Liveness feed окружения (опционально)
        grace_period: Grace period после восстановления (секунды)
        max_deviation: Допустимое расхождение источников (WAD)
    """

    def __init__(
        self,
        env: Environment,
        owner: str,
        sequencer_uptime_feed: Optional[PriceFeed] = None,
        grace_period: int = SEQUENCER_GRACE_PERIOD,
        max_deviation: int = MAX_PRICE_DEVIATION,
    ):
        self.env = env
        self.owner = require_address(owner, "owner")
        self.sequencer_uptime_feed = sequencer_uptime_feed
        self.grace_period = grace_period
        self.max_deviation = max_deviation
        self._configs: dict[str, OracleConfig] = {}

    # -------------------------------------------------------------------------
    # ADMIN
    # -------------------------------------------------------------------------

    def _only_owner(self, sender: str) -> None:
        if sender != self.owner:
            raise OnlyOwner(f"{sender} is not the oracle owner")

    def set_oracle_config(self, sender: str, token: str, config: OracleConfig) -> None:
        self._only_owner(sender)
        require_address(token, "token")
        self._configs[token] = config
        logger.info(
            "OracleConfigured token=%s primary=%r fallback=%s twap_window=%d max_staleness=%d",
            token,
            config.primary_feed,
            config.has_fallback,
            config.twap_window,
            config.max_staleness,
        )

    def set_sequencer_uptime_feed(self, sender: str, feed: Optional[PriceFeed]) -> None:
        self._only_owner(sender)
        self.sequencer_uptime_feed = feed

    # -------------------------------------------------------------------------
    # VIEWS
    # -------------------------------------------------------------------------

    def is_configured(self, token: str) -> bool:
        return token in self._configs

    def get_oracle_config(self, token: str) -> OracleConfig:
        config = self._configs.get(token)
        if config is None:
            raise OracleNotConfigured(f"No oracle config for token {token}")
        return config

    def get_price(self, token: str) -> int:
        """Цена токена (WAD USD)."""
        return self.get_price_data(token).price

    def get_price_data(self, token: str) -> PriceResult:
        """
        Цена токена с метаданными (timestamp, флаг fallback).

        Raises:
            OracleNotConfigured: Токен не сконфигурирован
            SequencerDown / GracePeriodNotOver: Окружение недоступно
            PriceDeviationTooHigh: Источники расходятся больше допустимого
            OraclesUnavailable: Ни один источник не дал валидную цену
        """
        config = self.get_oracle_config(token)
        self._check_sequencer()

        primary = self._evaluate(token, "primary", self._read_primary, config)
        fallback = None
        if config.has_fallback:
            fallback = self._evaluate(token, "fallback", self._read_fallback, config)

        if primary is not None and fallback is not None:
            deviation = price_deviation(primary.price, fallback.price)
            if deviation > self.max_deviation:
                raise PriceDeviationTooHigh(
                    f"{token}: primary {primary.price} vs fallback {fallback.price} "
                    f"deviation {deviation} > {self.max_deviation}"
                )
            return primary

        if primary is not None:
            return primary

        if fallback is not None:
            logger.warning("FallbackActivated token=%s price=%d", token, fallback.price)
            return fallback

        raise OraclesUnavailable(f"No valid price source for token {token}")

    def get_twap_price(self, token: str) -> int:
        """Цена токена из fallback TWAP (WAD USD), без сравнения с primary."""
        config = self.get_oracle_config(token)
        if not config.has_fallback:
            raise OracleNotConfigured(f"No fallback source for token {token}")
        return self._read_fallback(config).price

    # -------------------------------------------------------------------------
    # SOURCES
    # -------------------------------------------------------------------------

    def _check_sequencer(self) -> None:
        feed = self.sequencer_uptime_feed
        if feed is None:
            return
        status = feed.latest_round_data()
        if status.answer != 0:
            raise SequencerDown("Execution environment reported down")
        if self.env.now - status.started_at <= self.grace_period:
            raise GracePeriodNotOver(
                f"Execution environment up since {status.started_at}, "
                f"grace period {self.grace_period}s not over"
            )

    @staticmethod
    def _evaluate(
        token: str,
        source: str,
        reader: Callable[[OracleConfig], PriceResult],
        config: OracleConfig,
    ) -> Optional[PriceResult]:
        """Невалидный источник превращается в None для таблицы решений."""
        try:
            return reader(config)
        except OracleError as e:
            logger.warning("%s source invalid for %s: %s (%s)", source, token, e, e.code)
            return None

    def _read_primary(self, config: OracleConfig) -> PriceResult:
        feed = config.primary_feed
        data = feed.latest_round_data()
        now = self.env.now

        if data.answered_in_round < data.round_id:
            raise StalePrice(f"Round {data.round_id} incomplete (answered in {data.answered_in_round})")
        if data.updated_at == 0:
            raise StalePrice(f"Round {data.round_id} has no timestamp")
        if data.answer <= 0:
            raise InvalidPrice(f"Non-positive answer {data.answer}")
        if data.updated_at > now:
            raise InvalidPrice(f"Answer timestamp {data.updated_at} is in the future")
        if now - data.updated_at > config.max_staleness:
            raise StalePrice(
                f"Answer age {now - data.updated_at}s exceeds max staleness {config.max_staleness}s"
            )

        price = normalize_answer(data.answer, feed.decimals)
        if price == 0:
            raise InvalidPrice(f"Answer {data.answer} rounds to zero at WAD precision")
        return PriceResult(price=price, timestamp=data.updated_at, is_from_fallback=False)

    def _read_fallback(self, config: OracleConfig) -> PriceResult:
        pool = config.fallback_pool
        if pool is None:
            raise FeedError("Fallback source not configured")
        window = config.twap_window
        cumulatives = pool.observe([window, 0])
        tick = mean_tick(cumulatives[0], cumulatives[1], window)
        price = tick_to_price_wad(
            tick, config.is_token0, config.token_decimals, config.quote_decimals
        )
        if price == 0:
            raise InvalidPrice(f"TWAP tick {tick} rounds to zero price")
        return PriceResult(price=price, timestamp=self.env.now, is_from_fallback=True)
