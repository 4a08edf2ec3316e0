"""
Fixed-Point Math — WAD арифметика с явным направлением округления

Все денежные величины протокола — целые числа. Доли (ставки, LTV, цены)
хранятся в WAD (1e18 = 1.0).

Модуль обеспечивает:
- mul_div с явной политикой округления (DOWN/UP)
- WAD умножение/деление
- Нормализацию decimals токенов к WAD и обратно

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Промежуточное произведение a * b вычисляется без переполнения
   (Python int — произвольной длины, деление выполняется один раз в конце)
2. Направление округления всегда выбирает вызывающий код:
   - shares minted → DOWN, shares burned → UP
   - долг к оплате → UP, освобождаемый collateral → DOWN
3. Отрицательные операнды и деление на ноль запрещены
"""

from enum import Enum
from typing import Final

from src.core.errors import InvalidParameters

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

# 1.0 в fixed-point представлении
WAD: Final[int] = 10**18

# Секунд в году (365 дней)
SECONDS_PER_YEAR: Final[int] = 365 * 24 * 60 * 60

# Максимум uint256: "бесконечный" health factor и allowance
MAX_UINT256: Final[int] = 2**256 - 1


# =============================================================================
# ROUNDING
# =============================================================================


class Rounding(str, Enum):
    """Направление округления результата деления."""

    DOWN = "down"
    UP = "up"


# =============================================================================
# MUL/DIV
# =============================================================================


def mul_div(a: int, b: int, denominator: int, rounding: Rounding = Rounding.DOWN) -> int:
    """
    Вычисление a * b / denominator с явным округлением.

    Произведение вычисляется полностью (double-width и шире), после чего
    выполняется единственное деление. Остаток никогда не теряется в
    "неправильную" сторону: при Rounding.UP ненулевой остаток добавляет 1.

    Args:
        a: Первый множитель (>= 0)
        b: Второй множитель (>= 0)
        denominator: Делитель (> 0)
        rounding: Направление округления

    Returns:
        floor(a * b / denominator) или ceil(a * b / denominator)

    Raises:
        InvalidParameters: Если операнды отрицательны или denominator == 0

    Examples:
        >>> mul_div(10, 3, 4)
        7
        >>> mul_div(10, 3, 4, Rounding.UP)
        8
    """
    if a < 0 or b < 0:
        raise InvalidParameters(f"mul_div operands must be non-negative, got a={a}, b={b}")
    if denominator <= 0:
        raise InvalidParameters(f"mul_div denominator must be positive, got {denominator}")

    quotient, remainder = divmod(a * b, denominator)
    if rounding == Rounding.UP and remainder != 0:
        quotient += 1
    return quotient


def wad_mul(a: int, b: int, rounding: Rounding = Rounding.DOWN) -> int:
    """a * b / WAD."""
    return mul_div(a, b, WAD, rounding)


def wad_div(a: int, b: int, rounding: Rounding = Rounding.DOWN) -> int:
    """a * WAD / b."""
    return mul_div(a, WAD, b, rounding)


# =============================================================================
# DECIMALS NORMALIZATION
# =============================================================================


def to_wad(amount: int, decimals: int) -> int:
    """
    Конверсия количества токена (native units) в WAD.

    Для decimals > 18 результат округляется вниз.
    """
    if decimals < 0:
        raise InvalidParameters(f"decimals must be non-negative, got {decimals}")
    if decimals <= 18:
        return amount * 10 ** (18 - decimals)
    return amount // 10 ** (decimals - 18)


def from_wad(value: int, decimals: int, rounding: Rounding = Rounding.DOWN) -> int:
    """
    Конверсия WAD значения в native units токена.

    Args:
        value: Значение в WAD
        decimals: decimals токена
        rounding: Направление округления при потере точности

    Returns:
        Количество в native units
    """
    if decimals < 0:
        raise InvalidParameters(f"decimals must be non-negative, got {decimals}")
    if decimals >= 18:
        return value * 10 ** (decimals - 18)
    return mul_div(value, 1, 10 ** (18 - decimals), rounding)


def value_in_usd(amount: int, price_wad: int, decimals: int, rounding: Rounding) -> int:
    """
    Стоимость количества токена в USD (WAD).

    value_usd = amount * price / 10^decimals
    """
    return mul_div(amount, price_wad, 10**decimals, rounding)


def usd_to_amount(value_usd: int, price_wad: int, decimals: int, rounding: Rounding) -> int:
    """
    Количество токена (native units), эквивалентное стоимости в USD (WAD).

    amount = value_usd * 10^decimals / price
    """
    return mul_div(value_usd, 10**decimals, price_wad, rounding)
