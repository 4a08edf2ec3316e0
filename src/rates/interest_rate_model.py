"""
Interest Rate Model — kinked utilization → rate кривая

    utilization = total_borrows / total_supply        (0 если supply == 0)

    u <= kink:  rate = base + u * slope_before_kink
    u >  kink:  rate = base + kink * slope_before_kink + (u - kink) * slope_after_kink

    supply_rate = borrow_rate * u * (1 - reserve_factor)

Параметры задаются годовыми (WAD) и хранятся посекундными.
Модель stateless: результат — чистая функция (total_supply, total_borrows).
"""

from src.core.errors import InvalidParameters, KinkAboveWad
from src.core.math.fixed_point import SECONDS_PER_YEAR, WAD, wad_div, wad_mul


class InterestRateModel:
    """
    Kinked interest rate model.

    Args:
        base_rate_per_year: Базовая ставка (WAD, годовая)
        slope_before_kink: Наклон до kink (WAD, годовой)
        slope_after_kink: Наклон после kink (WAD, годовой)
        kink: Точка излома utilization (WAD, <= 1 WAD)

    Raises:
        KinkAboveWad: kink > 1 WAD
    """

    def __init__(
        self,
        base_rate_per_year: int,
        slope_before_kink: int,
        slope_after_kink: int,
        kink: int,
    ):
        if kink > WAD:
            raise KinkAboveWad(f"kink {kink} exceeds 1 WAD")
        if min(base_rate_per_year, slope_before_kink, slope_after_kink, kink) < 0:
            raise InvalidParameters("rate model parameters must be non-negative")

        self.base_rate_per_second = base_rate_per_year // SECONDS_PER_YEAR
        self.slope_before_kink_per_second = slope_before_kink // SECONDS_PER_YEAR
        self.slope_after_kink_per_second = slope_after_kink // SECONDS_PER_YEAR
        self.kink = kink

    def __repr__(self) -> str:
        return (
            f"InterestRateModel(base={self.base_rate_per_second}/s, "
            f"slope1={self.slope_before_kink_per_second}/s, "
            f"slope2={self.slope_after_kink_per_second}/s, kink={self.kink})"
        )

    def get_utilization(self, total_supply: int, total_borrows: int) -> int:
        """Utilization (WAD). 0 при пустом supply."""
        if total_supply == 0:
            return 0
        return wad_div(total_borrows, total_supply)

    def get_borrow_rate(self, total_supply: int, total_borrows: int) -> int:
        """Посекундная borrow ставка (WAD)."""
        utilization = self.get_utilization(total_supply, total_borrows)

        if utilization <= self.kink:
            return self.base_rate_per_second + wad_mul(utilization, self.slope_before_kink_per_second)

        normal_rate = self.base_rate_per_second + wad_mul(self.kink, self.slope_before_kink_per_second)
        excess = utilization - self.kink
        return normal_rate + wad_mul(excess, self.slope_after_kink_per_second)

    def get_supply_rate(self, total_supply: int, total_borrows: int, reserve_factor: int) -> int:
        """Посекундная supply ставка (WAD) за вычетом reserve factor."""
        if reserve_factor < 0 or reserve_factor > WAD:
            raise InvalidParameters(f"reserve_factor must be in [0, WAD], got {reserve_factor}")
        utilization = self.get_utilization(total_supply, total_borrows)
        borrow_rate = self.get_borrow_rate(total_supply, total_borrows)
        rate_to_pool = wad_mul(borrow_rate, WAD - reserve_factor)
        return wad_mul(utilization, rate_to_pool)

    def get_borrow_rate_apr(self, total_supply: int, total_borrows: int) -> int:
        return self.get_borrow_rate(total_supply, total_borrows) * SECONDS_PER_YEAR

    def get_supply_rate_apr(self, total_supply: int, total_borrows: int, reserve_factor: int) -> int:
        return self.get_supply_rate(total_supply, total_borrows, reserve_factor) * SECONDS_PER_YEAR
