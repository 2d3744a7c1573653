"""Tests for the significant-precision estimators."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from formats import Q64X64, SD59X18
from magnitude import (
    bit_length_of,
    digit_length_of,
    significant_bits_after_mult,
    significant_digits_after_mult,
    significant_digits_lost_in_mult,
)

ONE_Q = Q64X64.one
ONE_D = SD59X18.one


class TestLengths:
    def test_bit_length(self):
        assert bit_length_of(ONE_Q) == 0
        assert bit_length_of(8 * ONE_Q) == 3
        assert bit_length_of(ONE_Q // 4) == -2
        assert bit_length_of(-8 * ONE_Q) == 3

    def test_digit_length(self):
        assert digit_length_of(ONE_D) == 0
        assert digit_length_of(1000 * ONE_D) == 3
        assert digit_length_of(1) == -18
        assert digit_length_of(-25 * ONE_D) == 1

    def test_zero_has_no_length(self):
        with pytest.raises(ValueError):
            bit_length_of(0)
        with pytest.raises(ValueError):
            digit_length_of(0)


class TestSignificance:
    def test_bits_after_mult(self):
        assert significant_bits_after_mult(ONE_Q, ONE_Q) == 63
        assert significant_bits_after_mult(1, 1) == 0
        assert significant_bits_after_mult(0, ONE_Q) == 0

    def test_digits_after_mult(self):
        assert significant_digits_after_mult(ONE_D, ONE_D) == 18
        assert significant_digits_after_mult(1, 1) == 0
        assert significant_digits_after_mult(0, ONE_D) == 0

    def test_digits_lost(self):
        assert significant_digits_lost_in_mult(1, 1)
        assert significant_digits_lost_in_mult(0, ONE_D)
        assert not significant_digits_lost_in_mult(ONE_D, 1)

