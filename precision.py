"""
Precision comparators.

Fixed-point laws rarely hold bit-exactly, so checks compare results with a
tolerance.  Every comparator here works on raw integers with Python's
arbitrary-precision arithmetic: the library under test is never used to
decide whether its own results are close enough, and no comparison can
overflow.
"""

from __future__ import annotations

from invariants import require


def _digits(n: int) -> int:
    """Number of decimal digits of |n| (0 for 0)."""
    return len(str(abs(n))) if n else 0


def _trunc_div(a: int, b: int) -> int:
    """Integer division rounding toward zero."""
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


def equal_within_bit_precision(a: int, b: int, bits: int) -> bool:
    """True iff a and b differ only in their ``bits`` lowest bits."""
    hi, lo = (a, b) if a > b else (b, a)
    return (hi - lo) >> bits == 0


def equal_within_decimal_precision(a: int, b: int, digits: int) -> bool:
    """
    True iff a and b agree once their ``digits`` lowest decimal digits are
    dropped, allowing one unit of difference in the truncated values.

    ``digits`` counts dropped digits, not kept ones, so the tolerance is
    absolute.  For a relative comparison of values whose magnitudes may
    differ, use :func:`equal_most_significant_digits_within_precision`.
    """
    scale = 10 ** digits
    ta = _trunc_div(a, scale)
    tb = _trunc_div(b, scale)
    return abs(ta - tb) <= 1


def equal_within_tolerance(a: int, b: int, error_percent: int, one: int) -> bool:
    """
    True iff |b - a| <= |a * error_percent / 100|.

    ``error_percent`` is a fixed-point raw value with unit ``one``.  A zero
    tolerance makes the comparison meaningless, so those inputs are
    discarded rather than judged.
    """
    tolerance = abs(a) * abs(error_percent) // (100 * one)
    require(tolerance != 0)
    return abs(b - a) <= tolerance


def most_significant_bits(x: int, bits: int) -> int:
    """Keep only the ``bits`` highest set bits of a positive value."""
    if x <= 0:
        raise ValueError("most_significant_bits expects a positive value")
    drop = max(x.bit_length() - bits, 0)
    return (x >> drop) << drop


def equal_most_significant_bits_within_precision(a: int, b: int, bits: int) -> bool:
    """
    Compare the ``bits`` most significant bits of |a| and |b| within one
    unit.  The magnitudes may differ in length by at most one bit; both
    prefixes are taken at the longer length so a carry across a power of
    two still compares as close.
    """
    if (a < 0) != (b < 0) and a and b:
        return False
    ua, ub = abs(a), abs(b)
    if ua == 0 or ub == 0:
        return ua == ub
    la, lb = ua.bit_length(), ub.bit_length()
    if abs(la - lb) > 1:
        return False
    shift = max(max(la, lb) - bits, 0)
    return equal_within_bit_precision(ua >> shift, ub >> shift, 1)


def equal_most_significant_digits_within_precision(a: int, b: int, digits: int) -> bool:
    """Decimal analogue of :func:`equal_most_significant_bits_within_precision`."""
    if (a < 0) != (b < 0) and a and b:
        return False
    ua, ub = abs(a), abs(b)
    if ua == 0 or ub == 0:
        return ua == ub
    la, lb = _digits(ua), _digits(ub)
    if abs(la - lb) > 1:
        return False
    scale = 10 ** max(max(la, lb) - digits, 0)
    return abs(ua // scale - ub // scale) <= 1
