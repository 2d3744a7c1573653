"""
Magnitude and significant-precision estimators.

Multiplicative laws lose precision as operands shrink: the product of two
values near the format's resolution is indistinguishable from zero.  These
estimators tell a check how many significant bits (or digits) survive so it
can discard inputs whose precision budget is exhausted instead of failing.

All logarithms here are exact integer logarithms of the raw values, so the
estimators never depend on the log functions of the library under test.
"""

from __future__ import annotations

from formats import FixedPointFormat, Q64X64, SD59X18


def _digits(n: int) -> int:
    return len(str(abs(n)))


def bit_length_of(x: int, fmt: FixedPointFormat = Q64X64) -> int:
    """floor(log2(|x|)) of the value represented by a binary raw ``x``."""
    if x == 0:
        raise ValueError("log of zero is undefined")
    return abs(x).bit_length() - 1 - fmt.precision_bits


def digit_length_of(x: int, fmt: FixedPointFormat = SD59X18) -> int:
    """floor(log10(|x|)) of the value represented by a decimal raw ``x``."""
    if x == 0:
        raise ValueError("log of zero is undefined")
    return _digits(x) - 1 - fmt.fractional


def significant_bits_after_mult(x: int, y: int, fmt: FixedPointFormat = Q64X64) -> int:
    """
    Estimated significant bits left in ``x * y``:
    fractional + floor(log2|x|) + floor(log2|y|) - 1, clamped at zero.
    """
    if x == 0 or y == 0:
        return 0
    bits = fmt.precision_bits + bit_length_of(x, fmt) + bit_length_of(y, fmt) - 1
    return max(bits, 0)


def significant_digits_after_mult(x: int, y: int, fmt: FixedPointFormat = SD59X18) -> int:
    """Estimated significant decimal digits left in ``x * y``."""
    if x == 0 or y == 0:
        return 0
    prec = digit_length_of(x, fmt) + digit_length_of(y, fmt)
    if prec < -fmt.fractional:
        return 0
    return fmt.fractional + prec


def significant_digits_lost_in_mult(x: int, y: int, fmt: FixedPointFormat = SD59X18) -> bool:
    """True when ``x * y`` falls below the format's resolution."""
    if x == 0 or y == 0:
        return True
    return digit_length_of(x, fmt) + digit_length_of(y, fmt) < -fmt.fractional
