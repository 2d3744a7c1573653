"""Tests for the reference decimal libraries."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from fractions import Fraction

import pytest
from hypothesis import assume, given
from hypothesis.strategies import integers

from decimal_math import SD59x18Math, UD60x18Math, UNIT
from formats import SD59X18, UD60X18

sd = SD59x18Math()
ud = UD60x18Math()


def raw(text: str) -> int:
    return SD59X18.from_decimal(text)


def sd_values():
    return integers(min_value=-(10**30), max_value=10**30)


def ud_values():
    return integers(min_value=0, max_value=10**30)


# ---------------------------------------------------------------------------
# Signed 59.18
# ---------------------------------------------------------------------------

class TestSignedScenarios:
    def test_mixed_sign_addition_commutes(self):
        a, b = raw("3.5"), raw("-2.25")
        assert sd.add(a, b) == sd.add(b, a) == raw("1.25")

    def test_max_plus_epsilon_overflows(self):
        with pytest.raises(OverflowError):
            sd.add(SD59X18.max_raw, 1)

    def test_zero_numerator(self):
        assert sd.div(0, 17 * UNIT) == 0

    def test_mul_and_div(self):
        assert sd.mul(raw("3.5"), raw("-2.25")) == raw("-7.875")
        assert sd.div(UNIT, 3 * UNIT) == 333333333333333333
        assert sd.div(-UNIT, 3 * UNIT) == -333333333333333333

    def test_division_by_zero_checked_first(self):
        with pytest.raises(ZeroDivisionError):
            sd.div(SD59X18.min_raw, 0)

    def test_min_rejected(self):
        with pytest.raises(OverflowError):
            sd.neg(SD59X18.min_raw)
        with pytest.raises(OverflowError):
            sd.abs(SD59X18.min_raw)
        with pytest.raises(OverflowError):
            sd.mul(SD59X18.min_raw, UNIT)

    def test_powu(self):
        assert sd.powu(-2 * UNIT, 3) == -8 * UNIT
        assert sd.powu(SD59X18.min_raw, 0) == UNIT
        with pytest.raises(ValueError):
            sd.powu(UNIT, -1)

    def test_pow(self):
        assert sd.pow(0, 0) == UNIT
        assert sd.pow(0, UNIT) == 0
        assert abs(sd.pow(2 * UNIT, UNIT // 2) - 1_414213562373095048) <= 10

    def test_inv_and_averages(self):
        assert sd.inv(4 * UNIT) == UNIT // 4
        assert sd.avg(-3, 4) == 0
        assert sd.avg(-3, -4) == -3
        assert sd.gavg(4 * UNIT, 9 * UNIT) == 6 * UNIT
        with pytest.raises(ValueError):
            sd.gavg(-4 * UNIT, UNIT)

    def test_sqrt(self):
        assert sd.sqrt(4 * UNIT) == 2 * UNIT
        with pytest.raises(ValueError):
            sd.sqrt(-1)

    def test_logarithms(self):
        assert sd.log2(8 * UNIT) == 3 * UNIT
        assert sd.log2(UNIT // 2) == -UNIT
        assert sd.log10(1000 * UNIT) == 3 * UNIT
        assert sd.log10(1) == -18 * UNIT
        assert sd.ln(UNIT) == 0
        with pytest.raises(ValueError):
            sd.log2(0)

    def test_exponentials(self):
        assert sd.exp2(3 * UNIT) == 8 * UNIT
        assert sd.exp2(-UNIT) == UNIT // 2
        assert sd.exp(0) == UNIT
        assert sd.exp2(SD59X18.min_permitted_exp2 - 1) == 0
        assert sd.exp(SD59X18.min_permitted_exp - 1) == 0
        with pytest.raises(OverflowError):
            sd.exp2(SD59X18.max_permitted_exp2 + 1)
        with pytest.raises(OverflowError):
            sd.exp(SD59X18.max_permitted_exp + 1)

    def test_to_int_truncates(self):
        assert sd.to_int(raw("-1.5")) == -1
        assert sd.to_int(raw("1.5")) == 1


class TestSignedRounding:
    @given(a=sd_values(), b=sd_values())
    def test_mul_truncates_toward_zero(self, a, b):
        assert sd.mul(a, b) == int(Fraction(a * b, UNIT))

    @given(a=sd_values(), b=sd_values())
    def test_div_truncates_toward_zero(self, a, b):
        assume(b != 0)
        assert sd.div(a, b) == int(Fraction(a * UNIT, b))

    @given(a=integers(min_value=0, max_value=10**40))
    def test_sqrt_is_floor_root(self, a):
        r = sd.sqrt(a)
        assert r * r <= a * UNIT < (r + 1) * (r + 1)


# ---------------------------------------------------------------------------
# Unsigned 60.18
# ---------------------------------------------------------------------------

class TestUnsigned:
    def test_sub_below_zero_fails(self):
        with pytest.raises(OverflowError):
            ud.sub(0, 1)

    def test_no_negation(self):
        assert not hasattr(ud, "neg")
        assert not hasattr(ud, "abs")

    def test_log_below_one_fails(self):
        with pytest.raises(ValueError):
            ud.log2(UNIT // 2)
        assert ud.log10(UNIT) == 0

    def test_pow_below_one(self):
        assert ud.pow(UNIT // 2, 2 * UNIT) == UNIT // 4

    def test_limits(self):
        with pytest.raises(OverflowError):
            ud.exp2(UD60X18.max_permitted_exp2 + 1)
        with pytest.raises(OverflowError):
            ud.sqrt(UD60X18.max_permitted_sqrt + 1)
        with pytest.raises(OverflowError):
            ud.from_int(-1)

    def test_avg_of_max(self):
        assert ud.avg(UD60X18.max_raw, UD60X18.max_raw) == UD60X18.max_raw

    @given(a=ud_values(), b=ud_values())
    def test_mul_floors(self, a, b):
        assert ud.mul(a, b) == a * b // UNIT

    @given(n=integers(min_value=0, max_value=UD60X18.integer_max))
    def test_integer_round_trip(self, n):
        assert ud.to_int(ud.from_int(n)) == n
