"""Tests for the fixed-point integer helpers."""

import math

import pytest

from cpamm_core.errors import (
    AMMError,
    ArithmeticOverflow,
    ArithmeticUnderflow,
    DivisionByZero,
    DomainError,
    InvalidAmount,
    InvalidFeeRate,
)
from cpamm_core.fixed_point import (
    U64_MAX,
    U128_MAX,
    apply_rate_ceil,
    apply_rate_floor,
    check_amount,
    check_rate_bp,
    checked_add,
    checked_sub,
    integer_sqrt,
    mul_div_ceil,
    mul_div_floor,
)


class TestIntegerSqrt:
    @pytest.mark.parametrize("n", [
        0, 1, 2, 3, 4, 5, 15, 16, 17, 99, 100, 101,
        10**18, 40_000_000_000,
        U64_MAX, U64_MAX + 1,
        U64_MAX * U64_MAX,
        U128_MAX, U128_MAX - 1,
        (1 << 128), (1 << 255) + 12345,
    ])
    def test_bounds(self, n):
        r = integer_sqrt(n)
        assert r * r <= n < (r + 1) * (r + 1)

    def test_zero(self):
        assert integer_sqrt(0) == 0

    def test_matches_math_isqrt_small_range(self):
        for n in range(0, 5000):
            assert integer_sqrt(n) == math.isqrt(n)

    def test_perfect_squares(self):
        for r in (1, 7, 200_000, U64_MAX):
            assert integer_sqrt(r * r) == r
            assert integer_sqrt(r * r - 1) == r - 1

    def test_first_deposit_example(self):
        assert integer_sqrt(100_000 * 400_000) == 200_000

    def test_negative_raises_domain_error(self):
        with pytest.raises(DomainError):
            integer_sqrt(-1)

    def test_domain_error_is_value_error(self):
        with pytest.raises(ValueError):
            integer_sqrt(-4)

    def test_rejects_float(self):
        with pytest.raises(TypeError):
            integer_sqrt(4.0)

    def test_rejects_bool(self):
        with pytest.raises(TypeError):
            integer_sqrt(True)


class TestMulDiv:
    def test_floor(self):
        assert mul_div_floor(7, 3, 2) == 10

    def test_ceil(self):
        assert mul_div_ceil(7, 3, 2) == 11

    def test_exact_division_same_both_ways(self):
        assert mul_div_floor(6, 4, 3) == 8
        assert mul_div_ceil(6, 4, 3) == 8

    def test_zero_numerator(self):
        assert mul_div_floor(0, 5, 7) == 0
        assert mul_div_ceil(0, 5, 7) == 0

    def test_division_by_zero(self):
        with pytest.raises(DivisionByZero):
            mul_div_floor(1, 1, 0)
        with pytest.raises(ZeroDivisionError):
            mul_div_ceil(1, 1, 0)

    def test_full_u64_product_fits(self):
        assert mul_div_floor(U64_MAX, U64_MAX, U64_MAX) == U64_MAX

    def test_product_overflow(self):
        with pytest.raises(ArithmeticOverflow):
            mul_div_floor(U128_MAX, 2, 3)

    def test_overflow_is_overflow_error(self):
        with pytest.raises(OverflowError):
            mul_div_floor(1 << 100, 1 << 100, 1)

    def test_ceil_rounding_term_overflow(self):
        with pytest.raises(ArithmeticOverflow):
            mul_div_ceil(U128_MAX, 1, 2)

    def test_negative_operand(self):
        with pytest.raises(DomainError):
            mul_div_floor(-1, 2, 3)

    def test_errors_share_base(self):
        with pytest.raises(AMMError):
            mul_div_floor(1, 1, 0)


class TestBasisPoints:
    def test_fee_rounds_up(self):
        assert apply_rate_ceil(10_000, 100) == 100
        assert apply_rate_ceil(10_001, 100) == 101
        assert apply_rate_ceil(1, 1) == 1

    def test_output_rounds_down(self):
        assert apply_rate_floor(10_001, 100) == 100
        assert apply_rate_floor(1, 1) == 0

    def test_zero_rate(self):
        assert apply_rate_ceil(123_456, 0) == 0
        assert apply_rate_floor(123_456, 0) == 0

    def test_full_rate(self):
        assert apply_rate_ceil(777, 10_000) == 777

    @pytest.mark.parametrize("rate", [-1, 10_001])
    def test_rate_out_of_range(self, rate):
        with pytest.raises(InvalidFeeRate):
            apply_rate_ceil(100, rate)
        with pytest.raises(InvalidFeeRate):
            check_rate_bp(rate)


class TestCheckedOps:
    def test_check_amount_passes_through(self):
        assert check_amount(0) == 0
        assert check_amount(U64_MAX) == U64_MAX

    def test_check_amount_too_wide(self):
        with pytest.raises(ArithmeticOverflow):
            check_amount(U64_MAX + 1)

    def test_check_amount_negative(self):
        with pytest.raises(InvalidAmount):
            check_amount(-5)

    def test_check_amount_positive(self):
        with pytest.raises(InvalidAmount):
            check_amount(0, positive=True)

    def test_checked_add_overflow(self):
        assert checked_add(U64_MAX - 1, 1) == U64_MAX
        with pytest.raises(ArithmeticOverflow):
            checked_add(U64_MAX, 1)

    def test_checked_sub_underflow(self):
        assert checked_sub(5, 5) == 0
        with pytest.raises(ArithmeticUnderflow):
            checked_sub(1, 2)
