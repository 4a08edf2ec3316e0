"""
Logging setup

Модули с побочными эффектами (пул, ликвидатор, оракул) пишут доменные
события через `logging.getLogger(__name__)` и сами логгинг не настраивают.
`configure_logging` - точка входа для встраивающего приложения: вызывается
один раз при старте (как CLI делает это до запуска команд).
"""

import logging
from typing import Final

LOG_FORMAT: Final[str] = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """
    Настройка root-логгера.

    Args:
        level: Имя уровня (DEBUG/INFO/WARNING/...). Неизвестное имя → INFO.
    """
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    logging.basicConfig(format=LOG_FORMAT)
    logging.getLogger().setLevel(numeric_level)
