"""
Reference signed 64.64 binary fixed-point library.

Integer-only implementation of the operations a 64.64 library exposes
(the ABDK-style interface), used as the default system under test and as
the baseline the mutant libraries in ``validation/mutants.py`` deviate
from.  Values are raw int128 integers; every result is range-checked and
failures are signalled with the built-in arithmetic exceptions.
"""

from __future__ import annotations

from math import isqrt

from formats import LOG2_E_X128, Q64X64

MIN_64X64 = Q64X64.min_raw
MAX_64X64 = Q64X64.max_raw
ONE_64X64 = Q64X64.one

# ln(2) scaled by 2**128.
LN_2_X128 = 0xB17217F7D1CF79ABC9E3B39803F2F6AF


def _exp2_roots() -> list[int]:
    """2 ** (2 ** -k) scaled by 2**127, for k = 1..64."""
    roots = []
    current = 1 << 128  # 2 ** (2 ** 0)
    for _ in range(64):
        current = isqrt(current << 127)
        roots.append(current)
    return roots


EXP2_ROOTS_X127 = _exp2_roots()


def exp2_fraction_x127(fraction: int) -> int:
    """2 ** (fraction / 2**64) scaled by 2**127, for 0 <= fraction < 2**64."""
    result = 1 << 127
    for k, root in enumerate(EXP2_ROOTS_X127):
        if fraction & (1 << (63 - k)):
            result = (result * root) >> 127
    return result


def _trunc_div(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


def _checked(raw: int) -> int:
    if not MIN_64X64 <= raw <= MAX_64X64:
        raise OverflowError(f"{raw} is outside the 64.64 range")
    return raw


class Q64x64Math:
    """64.64 signed binary fixed-point arithmetic."""

    fmt = Q64X64

    # -- conversions ------------------------------------------------------

    def from_int(self, n: int) -> int:
        if not -0x8000000000000000 <= n <= 0x7FFFFFFFFFFFFFFF:
            raise OverflowError(f"{n} does not fit the integer part")
        return n << 64

    def to_int(self, x: int) -> int:
        return x >> 64

    # -- arithmetic -------------------------------------------------------

    def add(self, x: int, y: int) -> int:
        return _checked(x + y)

    def sub(self, x: int, y: int) -> int:
        return _checked(x - y)

    def mul(self, x: int, y: int) -> int:
        return _checked((x * y) >> 64)

    def div(self, x: int, y: int) -> int:
        if y == 0:
            raise ZeroDivisionError("division by zero")
        return _checked(_trunc_div(x << 64, y))

    def neg(self, x: int) -> int:
        if x == MIN_64X64:
            raise OverflowError("cannot negate MIN")
        return -x

    def abs(self, x: int) -> int:
        if x == MIN_64X64:
            raise OverflowError("cannot take abs of MIN")
        return x if x >= 0 else -x

    def inv(self, x: int) -> int:
        if x == 0:
            raise ZeroDivisionError("inverse of zero")
        return _checked(_trunc_div(1 << 128, x))

    def avg(self, x: int, y: int) -> int:
        return (x + y) >> 1

    def gavg(self, x: int, y: int) -> int:
        m = x * y
        if m < 0:
            raise ValueError("geometric average of values with different signs")
        if m >= 1 << 254:
            raise OverflowError("product too large")
        return isqrt(m)

    def pow(self, x: int, y: int) -> int:
        """x ** y for a non-negative integer exponent."""
        if y < 0:
            raise ValueError("negative exponent")
        negative = x < 0 and y & 1
        # Square-and-multiply at 192 fractional bits, truncating each step.
        scale = 192
        base = abs(x) << (scale - 64)
        result = 1 << scale
        while y:
            if y & 1:
                result = (result * base) >> scale
            y >>= 1
            if not y:
                break
            if base == 0:
                result = 0
                break
            base = (base * base) >> scale
            if base >> (scale + 64):
                raise OverflowError("power overflows")
        raw = result >> (scale - 64)
        return _checked(-raw if negative else raw)

    def sqrt(self, x: int) -> int:
        if x < 0:
            raise ValueError("square root of a negative value")
        return isqrt(x << 64)

    # -- logarithms and exponentials ----------------------------------------

    def log2(self, x: int) -> int:
        if x <= 0:
            raise ValueError("logarithm of a non-positive value")
        msb = x.bit_length() - 1
        result = (msb - 64) << 64
        ux = x << (127 - msb)
        bit = 1 << 63
        while bit:
            ux *= ux
            b = ux >> 255
            ux >>= 127 + b
            result += bit * b
            bit >>= 1
        return result

    def ln(self, x: int) -> int:
        return (self.log2(x) * LN_2_X128) >> 128

    def exp2(self, x: int) -> int:
        if x >= 0x400000000000000000:
            raise OverflowError("exp2 argument too large")
        if x < -0x400000000000000000:
            return 0
        n = x >> 64
        factor = exp2_fraction_x127(x & 0xFFFFFFFFFFFFFFFF)
        shift = 63 - n
        raw = factor >> shift if shift >= 0 else factor << -shift
        return _checked(raw)

    def exp(self, x: int) -> int:
        if x >= 0x400000000000000000:
            raise OverflowError("exp argument too large")
        if x < -0x400000000000000000:
            return 0
        return self.exp2((x * LOG2_E_X128) >> 128)
