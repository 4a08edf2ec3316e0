"""
Tick Math — цена из кумулятивных tick-наблюдений

Fallback-источник цены отдаёт tick cumulatives (сумма tick * секунды).
Геометрическое среднее цены за окно:

    mean_tick = floor((cum_now - cum_then) / window)
    raw_price = 1.0001 ^ mean_tick      (token1 raw units за 1 token0 raw unit)

Decimal-нормализация к цене токена в единицах quote-актива (WAD):
    is_token0:  price = raw_price * 10^(token_decimals - quote_decimals)
    иначе:      price = 10^(token_decimals - quote_decimals) / raw_price

Вычисления выполняются в decimal с фиксированной точностью — результат
детерминирован и не зависит от платформенного float.
"""

from decimal import ROUND_FLOOR, Decimal, localcontext
from typing import Final

from src.core.errors import InvalidParameters
from src.core.math.fixed_point import WAD

MIN_TICK: Final[int] = -887272
MAX_TICK: Final[int] = 887272

TICK_BASE: Final[Decimal] = Decimal("1.0001")

# Точность decimal-контекста (значащие цифры)
TICK_MATH_PRECISION: Final[int] = 60


def mean_tick(tick_cumulative_start: int, tick_cumulative_end: int, window: int) -> int:
    """
    Арифметическое среднее tick за окно (округление к -inf).

    Args:
        tick_cumulative_start: tick cumulative в начале окна
        tick_cumulative_end: tick cumulative в конце окна
        window: Длина окна (секунды, > 0)

    Returns:
        Средний tick
    """
    if window <= 0:
        raise InvalidParameters(f"TWAP window must be positive, got {window}")
    # // в Python: floor division, отрицательная дельта округляется к -inf
    return (tick_cumulative_end - tick_cumulative_start) // window


def tick_to_price_wad(
    tick: int,
    is_token0: bool,
    token_decimals: int,
    quote_decimals: int,
) -> int:
    """
    Цена токена в единицах quote-актива (WAD) по tick.

    Args:
        tick: Tick пула (1.0001^tick = token1/token0 в raw units)
        is_token0: Токен — token0 пула
        token_decimals: decimals оцениваемого токена
        quote_decimals: decimals quote-актива

    Returns:
        Цена в WAD (округление вниз)
    """
    if tick < MIN_TICK or tick > MAX_TICK:
        raise InvalidParameters(f"Tick {tick} out of bounds [{MIN_TICK}, {MAX_TICK}]")

    with localcontext() as ctx:
        ctx.prec = TICK_MATH_PRECISION
        raw = TICK_BASE**tick
        scale = Decimal(10) ** (token_decimals - quote_decimals)
        if is_token0:
            human = raw * scale
        else:
            human = scale / raw
        return int((human * WAD).to_integral_value(rounding=ROUND_FLOOR))


def price_to_tick(
    price_wad: int,
    is_token0: bool,
    token_decimals: int,
    quote_decimals: int,
) -> int:
    """
    Обратное преобразование: ближайший снизу tick для цены (WAD).

    Используется для настройки fallback-источника в симуляции и тестах.
    """
    if price_wad <= 0:
        raise InvalidParameters(f"price must be positive, got {price_wad}")

    with localcontext() as ctx:
        ctx.prec = TICK_MATH_PRECISION
        human = Decimal(price_wad) / WAD
        scale = Decimal(10) ** (token_decimals - quote_decimals)
        raw = human / scale if is_token0 else scale / human
        tick = int((raw.ln() / TICK_BASE.ln()).to_integral_value(rounding=ROUND_FLOOR))

    return max(MIN_TICK, min(MAX_TICK, tick))
