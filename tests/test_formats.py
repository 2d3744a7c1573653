"""Tests for the fixed-point format model."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from decimal import Decimal

import pytest
from hypothesis import given
from hypothesis.strategies import integers

from formats import FORMATS, Fixed, FixedPointFormat, Q64X64, SD59X18, UD60X18


class TestFormatConstants:
    def test_q64x64_range(self):
        assert Q64X64.one == 1 << 64
        assert Q64X64.min_raw == -(1 << 127)
        assert Q64X64.max_raw == (1 << 127) - 1
        assert Q64X64.precision_bits == 64

    def test_sd59x18_range(self):
        assert SD59X18.one == 10**18
        assert SD59X18.min_raw == -(1 << 255)
        assert SD59X18.max_raw == (1 << 255) - 1

    def test_ud60x18_range(self):
        assert UD60X18.min_raw == 0
        assert UD60X18.max_raw == (1 << 256) - 1
        assert not UD60X18.signed

    def test_epsilon_is_one_raw_unit(self):
        for fmt in FORMATS.values():
            assert fmt.epsilon == 1
            assert fmt.zero == 0

    def test_registry(self):
        assert set(FORMATS) == {"q64x64", "sd59x18", "ud60x18"}

    def test_integer_range_of_binary_format(self):
        assert Q64X64.integer_min == -(1 << 63)
        assert Q64X64.integer_max == (1 << 63) - 1

    def test_rejects_unknown_radix(self):
        with pytest.raises(ValueError):
            FixedPointFormat(name="bad", radix=16, fractional=4, width=32, signed=True)

    def test_rejects_empty_width(self):
        with pytest.raises(ValueError):
            FixedPointFormat(name="bad", radix=2, fractional=4, width=0, signed=True)


class TestBoundaryValues:
    def test_signed_boundaries(self):
        values = Q64X64.boundary_values()
        assert values[0] == Q64X64.min_raw
        assert values[-1] == Q64X64.max_raw
        assert -Q64X64.one in values and Q64X64.one in values
        assert len(values) == len(set(values))

    def test_unsigned_boundaries_skip_negatives(self):
        values = UD60X18.boundary_values()
        assert all(v >= 0 for v in values)
        assert 0 in values and UD60X18.one in values
        assert len(values) == len(set(values))


class TestConversions:
    def test_from_decimal(self):
        assert Q64X64.from_decimal("3.5") == 7 << 63
        assert Q64X64.from_decimal("-2.25") == -(9 << 62)
        assert SD59X18.from_decimal("0.000000000000000001") == 1

    def test_inexact_literal_rejected(self):
        with pytest.raises(ValueError):
            Q64X64.from_decimal("0.1")

    def test_inexact_literal_truncated(self):
        assert SD59X18.from_decimal("1e-19", truncate=True) == 0
        assert Q64X64.from_decimal("-0.1", truncate=True) == -(Q64X64.one // 10)

    def test_out_of_range_literal_rejected(self):
        with pytest.raises(ValueError):
            UD60X18.from_decimal("-1")

    def test_from_int_bounds(self):
        assert SD59X18.from_int(SD59X18.integer_max) <= SD59X18.max_raw
        with pytest.raises(ValueError):
            SD59X18.from_int(SD59X18.integer_max + 1)
        with pytest.raises(ValueError):
            UD60X18.from_int(-1)

    def test_to_decimal(self):
        assert SD59X18.to_decimal(1_500000000000000000) == Decimal("1.5")
        assert Q64X64.to_decimal(-(1 << 63)) == Decimal("-0.5")

    @given(integers(min_value=-(1 << 63), max_value=(1 << 63) - 1))
    def test_from_int_is_exact(self, n):
        assert Q64X64.from_int(n) == n << 64


class TestFixed:
    def test_parse_and_str(self):
        value = Fixed.parse(SD59X18, "-2.25")
        assert value.raw == -2_250000000000000000
        assert str(value) == "-2.25 (sd59x18)"

    def test_rejects_out_of_range_raw(self):
        with pytest.raises(ValueError):
            Fixed(UD60X18, -1)
        with pytest.raises(ValueError):
            Fixed(Q64X64, 1 << 127)
