"""
Tests for the reference 64.64 library.

Concrete scenarios pin down exact results; the Hypothesis tests compare
each rounding operation with exact rational arithmetic.
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from fractions import Fraction
from math import floor

import pytest
from hypothesis import assume, given
from hypothesis.strategies import integers

from binary_math import MAX_64X64, MIN_64X64, ONE_64X64, Q64x64Math
from formats import Q64X64
from precision import equal_most_significant_bits_within_precision

ONE = ONE_64X64
lib = Q64x64Math()


def raw(text: str) -> int:
    return Q64X64.from_decimal(text)


def q_values():
    return integers(min_value=MIN_64X64, max_value=MAX_64X64)


def small_values():
    return integers(min_value=-(1 << 94), max_value=1 << 94)


# ---------------------------------------------------------------------------
# Concrete scenarios
# ---------------------------------------------------------------------------

class TestScenarios:
    def test_mixed_sign_addition_commutes(self):
        a, b = raw("3.5"), raw("-2.25")
        assert lib.add(a, b) == lib.add(b, a) == raw("1.25")

    def test_max_plus_epsilon_overflows(self):
        with pytest.raises(OverflowError):
            lib.add(MAX_64X64, 1)

    def test_zero_numerator(self):
        assert lib.div(0, 17 * ONE) == 0

    def test_zero_exponent(self):
        for x in (0, ONE, -ONE, raw("3.5"), MAX_64X64, MIN_64X64):
            assert lib.pow(x, 0) == ONE

    def test_double_inverse_of_eight(self):
        assert lib.inv(lib.inv(8 * ONE)) == 8 * ONE

    def test_exp2_undoes_log2(self):
        x = 1000 * ONE
        assert equal_most_significant_bits_within_precision(lib.exp2(lib.log2(x)), x, 50)


class TestArithmetic:
    def test_mul_exact(self):
        assert lib.mul(raw("3.5"), raw("-2.25")) == raw("-7.875")

    def test_mul_rounds_down(self):
        assert lib.mul(-1, 1) == -1
        assert lib.mul(1, 1) == 0

    def test_div_truncates(self):
        assert lib.div(ONE, 3 * ONE) == ONE // 3
        assert lib.div(-ONE, 3 * ONE) == -(ONE // 3)

    def test_div_by_zero(self):
        with pytest.raises(ZeroDivisionError):
            lib.div(ONE, 0)

    def test_neg_and_abs_of_min(self):
        with pytest.raises(OverflowError):
            lib.neg(MIN_64X64)
        with pytest.raises(OverflowError):
            lib.abs(MIN_64X64)
        assert lib.neg(MAX_64X64) == MIN_64X64 + 1

    def test_inv(self):
        assert lib.inv(MAX_64X64) == 2
        with pytest.raises(ZeroDivisionError):
            lib.inv(0)

    def test_averages(self):
        assert lib.avg(MAX_64X64, MAX_64X64) == MAX_64X64
        assert lib.avg(-3, 4) == 0
        assert lib.gavg(4 * ONE, 9 * ONE) == 6 * ONE
        with pytest.raises(ValueError):
            lib.gavg(-4 * ONE, ONE)

    def test_pow(self):
        assert lib.pow(2 * ONE, 10) == 1024 * ONE
        assert lib.pow(-2 * ONE, 3) == -8 * ONE
        with pytest.raises(OverflowError):
            lib.pow(MAX_64X64, 2)

    def test_sqrt(self):
        assert lib.sqrt(4 * ONE) == 2 * ONE
        with pytest.raises(ValueError):
            lib.sqrt(-1)

    def test_conversions(self):
        assert lib.to_int(-(ONE // 2)) == -1
        assert lib.from_int(-5) == -5 * ONE
        with pytest.raises(OverflowError):
            lib.from_int(1 << 63)


class TestTranscendental:
    def test_log2_of_powers_of_two(self):
        assert lib.log2(8 * ONE) == 3 * ONE
        assert lib.log2(ONE // 2) == -ONE
        assert lib.ln(ONE) == 0

    def test_log_domain(self):
        with pytest.raises(ValueError):
            lib.log2(0)
        with pytest.raises(ValueError):
            lib.ln(-ONE)

    def test_exp2_exact_integers(self):
        assert lib.exp2(0) == ONE
        assert lib.exp2(3 * ONE) == 8 * ONE
        assert lib.exp2(-ONE) == ONE // 2
        assert lib.exp(0) == ONE

    def test_exp2_limits(self):
        assert lib.exp2(-0x400000000000000000 - 1) == 0
        with pytest.raises(OverflowError):
            lib.exp2(0x400000000000000000)
        with pytest.raises(OverflowError):
            lib.exp(0x400000000000000000)


# ---------------------------------------------------------------------------
# Rounding against exact arithmetic
# ---------------------------------------------------------------------------

class TestRounding:
    @given(a=q_values(), b=q_values())
    def test_add_is_exact_or_fails(self, a, b):
        if MIN_64X64 <= a + b <= MAX_64X64:
            assert lib.add(a, b) == a + b
        else:
            with pytest.raises(OverflowError):
                lib.add(a, b)

    @given(a=small_values(), b=small_values())
    def test_mul_floors(self, a, b):
        assert lib.mul(a, b) == floor(Fraction(a * b, ONE))

    @given(a=small_values(), b=small_values())
    def test_div_truncates_toward_zero(self, a, b):
        assume(b != 0)
        expected = int(Fraction(a * ONE, b))
        if MIN_64X64 <= expected <= MAX_64X64:
            assert lib.div(a, b) == expected
        else:
            with pytest.raises(OverflowError):
                lib.div(a, b)

    @given(a=integers(min_value=0, max_value=MAX_64X64))
    def test_sqrt_is_floor_root(self, a):
        r = lib.sqrt(a)
        assert r * r <= a * ONE < (r + 1) * (r + 1)

    @given(n=integers(min_value=-(1 << 63), max_value=(1 << 63) - 1))
    def test_integer_round_trip(self, n):
        assert lib.to_int(lib.from_int(n)) == n
