"""Tests for the precision comparators."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from hypothesis import given
from hypothesis.strategies import integers

from invariants import Discard
from precision import (
    equal_most_significant_bits_within_precision,
    equal_most_significant_digits_within_precision,
    equal_within_bit_precision,
    equal_within_decimal_precision,
    equal_within_tolerance,
    most_significant_bits,
)

ONE = 10**18


class TestBitPrecision:
    def test_low_bits_ignored(self):
        assert equal_within_bit_precision(0b1000, 0b1011, 2)
        assert not equal_within_bit_precision(0b1000, 0b1100, 2)

    def test_zero_bits_means_exact(self):
        assert equal_within_bit_precision(5, 5, 0)
        assert not equal_within_bit_precision(5, 6, 0)

    @given(integers(), integers(min_value=0, max_value=300))
    def test_reflexive(self, a, bits):
        assert equal_within_bit_precision(a, a, bits)

    @given(integers(), integers(), integers(min_value=0, max_value=300))
    def test_symmetric(self, a, b, bits):
        assert equal_within_bit_precision(a, b, bits) == equal_within_bit_precision(b, a, bits)


class TestDecimalPrecision:
    def test_truncated_values_within_one(self):
        assert equal_within_decimal_precision(1234, 1299, 2)
        assert equal_within_decimal_precision(1234, 1334, 2)
        assert not equal_within_decimal_precision(1234, 1434, 2)

    def test_truncates_toward_zero(self):
        assert equal_within_decimal_precision(-99, 99, 2)

    def test_tolerance_is_absolute_across_lengths(self):
        assert equal_within_decimal_precision(999, 1001, 1)
        assert not equal_within_decimal_precision(99_900, 100_100, 1)
        # the relative variant lines up the leading digits instead
        assert equal_most_significant_digits_within_precision(99_900, 100_100, 2)

    @given(integers(), integers(min_value=0, max_value=80))
    def test_reflexive(self, a, digits):
        assert equal_within_decimal_precision(a, a, digits)


class TestTolerance:
    def test_within_percent(self):
        one_percent = ONE
        assert equal_within_tolerance(1000, 1010, one_percent, ONE)
        assert not equal_within_tolerance(1000, 1011, one_percent, ONE)

    def test_zero_tolerance_is_discarded(self):
        with pytest.raises(Discard):
            equal_within_tolerance(0, 0, ONE, ONE)


class TestMostSignificant:
    def test_keeps_top_bits(self):
        assert most_significant_bits(0b110111, 2) == 0b110000
        assert most_significant_bits(0b11, 8) == 0b11

    def test_rejects_non_positive(self):
        with pytest.raises(ValueError):
            most_significant_bits(0, 3)

    def test_bits_carry_across_power_of_two(self):
        assert equal_most_significant_bits_within_precision((1 << 64) - 1, 1 << 64, 10)

    def test_bits_sign_mismatch(self):
        assert not equal_most_significant_bits_within_precision(-8, 8, 3)

    def test_bits_zero_only_matches_zero(self):
        assert equal_most_significant_bits_within_precision(0, 0, 3)
        assert not equal_most_significant_bits_within_precision(0, 1, 3)

    def test_bits_length_gap(self):
        assert not equal_most_significant_bits_within_precision(1 << 10, 1 << 12, 3)

    def test_digits_carry_across_power_of_ten(self):
        assert equal_most_significant_digits_within_precision(999_999, 1_000_000, 4)
        assert not equal_most_significant_digits_within_precision(990_000, 1_000_000, 4)

    @given(integers(min_value=1), integers(min_value=1, max_value=40))
    def test_digits_reflexive(self, a, digits):
        assert equal_most_significant_digits_within_precision(a, a, digits)
        assert equal_most_significant_digits_within_precision(-a, -a, digits)
