"""
Tests for kinked Interest Rate Model

Покрытие:
- utilization (включая пустой supply)
- ставка до и после kink, непрерывность в kink
- supply rate с reserve factor
- APR представление
- ошибки конструктора
"""

import pytest

from src.core.errors import InvalidParameters, KinkAboveWad
from src.core.math import SECONDS_PER_YEAR, WAD
from src.rates import InterestRateModel

BASE = 2 * WAD // 100
SLOPE1 = 10 * WAD // 100
SLOPE2 = WAD
KINK = 80 * WAD // 100


@pytest.fixture
def model() -> InterestRateModel:
    return InterestRateModel(BASE, SLOPE1, SLOPE2, KINK)


class TestConstruction:
    def test_yearly_params_converted_per_second(self, model):
        assert model.base_rate_per_second == BASE // SECONDS_PER_YEAR
        assert model.slope_before_kink_per_second == SLOPE1 // SECONDS_PER_YEAR
        assert model.slope_after_kink_per_second == SLOPE2 // SECONDS_PER_YEAR
        assert model.kink == KINK

    def test_kink_above_wad(self):
        with pytest.raises(KinkAboveWad):
            InterestRateModel(BASE, SLOPE1, SLOPE2, WAD + 1)

    def test_kink_at_wad_allowed(self):
        assert InterestRateModel(BASE, SLOPE1, SLOPE2, WAD).kink == WAD

    def test_negative_params_rejected(self):
        with pytest.raises(InvalidParameters):
            InterestRateModel(-1, SLOPE1, SLOPE2, KINK)


class TestUtilization:
    def test_zero_supply(self, model):
        assert model.get_utilization(0, 0) == 0
        assert model.get_borrow_rate(0, 0) == model.base_rate_per_second

    def test_half(self, model):
        assert model.get_utilization(1_000, 500) == WAD // 2

    def test_full(self, model):
        assert model.get_utilization(1_000, 1_000) == WAD


class TestBorrowRate:
    def test_no_borrows_pays_base(self, model):
        assert model.get_borrow_rate(1_000, 0) == model.base_rate_per_second

    def test_below_kink(self, model):
        rate = model.get_borrow_rate(1_000, 500)
        expected = model.base_rate_per_second + model.slope_before_kink_per_second // 2
        assert rate == expected

    def test_at_kink(self, model):
        rate = model.get_borrow_rate(1_000, 800)
        expected = model.base_rate_per_second + (
            KINK * model.slope_before_kink_per_second // WAD
        )
        assert rate == expected

    def test_above_kink(self, model):
        rate = model.get_borrow_rate(1_000, 900)
        normal = model.base_rate_per_second + KINK * model.slope_before_kink_per_second // WAD
        excess = (WAD * 9 // 10 - KINK) * model.slope_after_kink_per_second // WAD
        assert rate == normal + excess

    def test_monotonic_in_utilization(self, model):
        rates = [model.get_borrow_rate(1_000, borrows) for borrows in range(0, 1_001, 50)]
        assert rates == sorted(rates)

    def test_slope_steepens_after_kink(self, model):
        below = model.get_borrow_rate(1_000, 700) - model.get_borrow_rate(1_000, 600)
        above = model.get_borrow_rate(1_000, 1_000) - model.get_borrow_rate(1_000, 900)
        assert above > below


class TestSupplyRate:
    def test_no_reserve_factor(self, model):
        borrow_rate = model.get_borrow_rate(1_000, 500)
        assert model.get_supply_rate(1_000, 500, 0) == borrow_rate // 2

    def test_reserve_factor_reduces_supply_rate(self, model):
        full = model.get_supply_rate(1_000, 500, 0)
        reduced = model.get_supply_rate(1_000, 500, WAD // 10)
        assert reduced < full

    def test_full_reserve_factor(self, model):
        assert model.get_supply_rate(1_000, 500, WAD) == 0

    def test_supply_rate_zero_without_borrows(self, model):
        assert model.get_supply_rate(1_000, 0, WAD // 10) == 0

    def test_invalid_reserve_factor(self, model):
        with pytest.raises(InvalidParameters):
            model.get_supply_rate(1_000, 500, WAD + 1)


class TestApr:
    def test_borrow_apr(self, model):
        apr = model.get_borrow_rate_apr(1_000, 0)
        # потеря точности при переводе в посекундную ставку < 1 wei/сек
        assert BASE - SECONDS_PER_YEAR < apr <= BASE

    def test_supply_apr(self, model):
        assert model.get_supply_rate_apr(1_000, 500, 0) == (
            model.get_supply_rate(1_000, 500, 0) * SECONDS_PER_YEAR
        )
