"""
Tests for Fixed-Point Math

Проверяет:
- mul_div с явным округлением (DOWN/UP)
- отсутствие переполнения на больших операндах
- WAD умножение/деление
- нормализацию decimals
"""

import pytest

from src.core.errors import InvalidParameters
from src.core.math import (
    MAX_UINT256,
    SECONDS_PER_YEAR,
    WAD,
    Rounding,
    from_wad,
    mul_div,
    to_wad,
    usd_to_amount,
    value_in_usd,
    wad_div,
    wad_mul,
)


class TestMulDiv:
    """Тесты mul_div"""

    def test_exact_division_same_for_both_directions(self):
        assert mul_div(10, 4, 2) == 20
        assert mul_div(10, 4, 2, Rounding.UP) == 20

    def test_round_down_truncates(self):
        assert mul_div(10, 3, 4) == 7

    def test_round_up_adds_one_on_remainder(self):
        assert mul_div(10, 3, 4, Rounding.UP) == 8

    def test_up_minus_down_at_most_one(self):
        for a, b, d in [(7, 11, 13), (10**30, 3, 7), (1, 1, 10**18)]:
            down = mul_div(a, b, d)
            up = mul_div(a, b, d, Rounding.UP)
            assert up - down in (0, 1)

    def test_wide_intermediate_product(self):
        """a * b превышает uint256, результат — нет"""
        a = MAX_UINT256
        b = WAD
        assert mul_div(a, b, WAD) == MAX_UINT256

    def test_zero_numerator(self):
        assert mul_div(0, 123, 7, Rounding.UP) == 0

    def test_zero_denominator_rejected(self):
        with pytest.raises(InvalidParameters):
            mul_div(1, 1, 0)

    def test_negative_operand_rejected(self):
        with pytest.raises(InvalidParameters):
            mul_div(-1, 1, 1)


class TestWadOps:
    """Тесты WAD умножения/деления"""

    def test_wad_mul(self):
        assert wad_mul(2 * WAD, 3 * WAD) == 6 * WAD

    def test_wad_mul_fraction_rounding(self):
        # 1 wei * 0.5 = 0.5 wei
        assert wad_mul(1, WAD // 2) == 0
        assert wad_mul(1, WAD // 2, Rounding.UP) == 1

    def test_wad_div(self):
        assert wad_div(WAD, 4 * WAD) == WAD // 4

    def test_wad_div_by_zero(self):
        with pytest.raises(InvalidParameters):
            wad_div(WAD, 0)

    def test_seconds_per_year(self):
        assert SECONDS_PER_YEAR == 31_536_000


class TestDecimals:
    """Тесты нормализации decimals"""

    def test_to_wad_six_decimals(self):
        assert to_wad(1_000_000, 6) == WAD

    def test_to_wad_more_than_18_decimals_rounds_down(self):
        assert to_wad(1_999, 21) == 1

    def test_from_wad_rounding(self):
        assert from_wad(WAD + 1, 6) == 1_000_000
        assert from_wad(WAD + 1, 6, Rounding.UP) == 1_000_001

    def test_from_wad_more_than_18_decimals(self):
        assert from_wad(1, 20) == 100

    def test_negative_decimals_rejected(self):
        with pytest.raises(InvalidParameters):
            to_wad(1, -1)

    def test_value_in_usd(self):
        # 10 WETH по $2000 = $20,000
        assert value_in_usd(10 * 10**18, 2000 * WAD, 18, Rounding.DOWN) == 20_000 * WAD

    def test_value_in_usd_six_decimals(self):
        assert value_in_usd(15_000 * 10**6, WAD, 6, Rounding.UP) == 15_000 * WAD

    def test_usd_to_amount(self):
        assert usd_to_amount(3_000 * WAD, 2000 * WAD, 18, Rounding.DOWN) == 15 * 10**17

    def test_usd_to_amount_rounding_direction(self):
        # $1 при цене $3 → 0.333... единиц токена с 0 decimals
        assert usd_to_amount(WAD, 3 * WAD, 0, Rounding.DOWN) == 0
        assert usd_to_amount(WAD, 3 * WAD, 0, Rounding.UP) == 1
