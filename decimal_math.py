"""
Reference decimal fixed-point libraries with 18 fractional digits.

``SD59x18Math`` (signed, int256) and ``UD60x18Math`` (unsigned, uint256)
follow the PRBMath-style interface: checked arithmetic that rounds toward
zero, an integer log2 refined bit by bit, and exp2 evaluated in binary
192.64 fixed point.  They are the default systems under test for the
decimal property suite.
"""

from __future__ import annotations

from math import isqrt

from binary_math import exp2_fraction_x127
from formats import FixedPointFormat, SD59X18, UD60X18

UNIT = 10**18
HALF_UNIT = UNIT // 2
UNIT_SQUARED = UNIT * UNIT
LOG2_E = 1_442695040888963407
LOG2_10 = 3_321928094887362347


def _trunc_div(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


class _DecimalMath:
    """Operations shared by the signed and unsigned decimal formats."""

    fmt: FixedPointFormat

    def _checked(self, raw: int) -> int:
        if not self.fmt.contains(raw):
            raise OverflowError(f"{raw} is outside the {self.fmt.name} range")
        return raw

    # -- conversions ------------------------------------------------------

    def from_int(self, n: int) -> int:
        if not self.fmt.integer_min <= n <= self.fmt.integer_max:
            raise OverflowError(f"{n} does not fit {self.fmt.name}")
        return n * UNIT

    def to_int(self, x: int) -> int:
        return _trunc_div(x, UNIT)

    # -- arithmetic -------------------------------------------------------

    def add(self, x: int, y: int) -> int:
        return self._checked(x + y)

    def sub(self, x: int, y: int) -> int:
        return self._checked(x - y)

    def inv(self, x: int) -> int:
        if x == 0:
            raise ZeroDivisionError("inverse of zero")
        return _trunc_div(UNIT_SQUARED, x)

    def gavg(self, x: int, y: int) -> int:
        if x == 0 or y == 0:
            return 0
        product = x * y
        if product < 0:
            raise ValueError("geometric mean of a negative product")
        if product > self.fmt.max_raw:
            raise OverflowError("product overflows")
        return isqrt(product)

    def powu(self, x: int, n: int) -> int:
        """x ** n for a plain non-negative integer exponent."""
        if n < 0:
            raise ValueError("negative exponent")
        if n == 0:
            return UNIT
        negative = x < 0 and n & 1
        x_abs = self._magnitude(x)
        result = x_abs if n & 1 else UNIT
        n >>= 1
        while n:
            x_abs = self._mul18(x_abs, x_abs)
            if n & 1:
                result = self._mul18(result, x_abs)
            n >>= 1
        if result > self.fmt.max_raw:
            raise OverflowError("power overflows")
        return -result if negative else result

    def sqrt(self, x: int) -> int:
        if x < 0:
            raise ValueError("square root of a negative value")
        if x > self.fmt.max_permitted_sqrt:
            raise OverflowError("square root input too large")
        return isqrt(x * UNIT)

    # -- logarithms ---------------------------------------------------------

    def _log2_at_least_one(self, x: int) -> int:
        n = (x // UNIT).bit_length() - 1
        result = n * UNIT
        y = x >> n
        if y == UNIT:
            return result
        delta = HALF_UNIT
        while delta > 0:
            y = y * y // UNIT
            if y >= 2 * UNIT:
                result += delta
                y >>= 1
            delta >>= 1
        return result

    def ln(self, x: int) -> int:
        return _trunc_div(self.log2(x) * UNIT, LOG2_E)

    def log10(self, x: int) -> int:
        log2 = self.log2(x)
        digits = len(str(x)) - 1
        if x == 10**digits:
            return (digits - 18) * UNIT
        return _trunc_div(log2 * UNIT, LOG2_10)

    # -- exponentials ---------------------------------------------------------

    def _exp2_non_negative(self, x: int) -> int:
        if x > self.fmt.max_permitted_exp2:
            raise OverflowError("exp2 argument too large")
        x192x64 = (x << 64) // UNIT
        n = x192x64 >> 64
        factor = exp2_fraction_x127(x192x64 & 0xFFFFFFFFFFFFFFFF)
        return (factor * UNIT << n) >> 127

    def exp(self, x: int) -> int:
        if self.fmt.min_permitted_exp is not None and x < self.fmt.min_permitted_exp:
            return 0
        if x > self.fmt.max_permitted_exp:
            raise OverflowError("exp argument too large")
        return self.exp2(_trunc_div(x * LOG2_E, UNIT))

    # -- helpers ------------------------------------------------------------

    def _mul18(self, a: int, b: int) -> int:
        product = a * b // UNIT
        if product >= 1 << 256:
            raise OverflowError("intermediate product overflows")
        return product

    def _magnitude(self, x: int) -> int:
        return x


class SD59x18Math(_DecimalMath):
    """Signed 59.18 decimal fixed-point arithmetic."""

    fmt = SD59X18

    def _magnitude(self, x: int) -> int:
        if x == self.fmt.min_raw:
            raise OverflowError("magnitude of MIN does not fit")
        return -x if x < 0 else x

    def mul(self, x: int, y: int) -> int:
        result = self._magnitude(x) * self._magnitude(y) // UNIT
        if result > self.fmt.max_raw:
            raise OverflowError("product overflows")
        return -result if (x < 0) != (y < 0) else result

    def div(self, x: int, y: int) -> int:
        if y == 0:
            raise ZeroDivisionError("division by zero")
        x_abs, y_abs = self._magnitude(x), self._magnitude(y)
        result = x_abs * UNIT // y_abs
        if result > self.fmt.max_raw:
            raise OverflowError("quotient overflows")
        return -result if (x < 0) != (y < 0) else result

    def neg(self, x: int) -> int:
        if x == self.fmt.min_raw:
            raise OverflowError("cannot negate MIN")
        return -x

    def abs(self, x: int) -> int:
        return self._magnitude(x)

    def avg(self, x: int, y: int) -> int:
        return _trunc_div(x + y, 2)

    def pow(self, x: int, y: int) -> int:
        if x == 0:
            return UNIT if y == 0 else 0
        if x == UNIT or y == 0:
            return UNIT
        if y == UNIT:
            return x
        return self.exp2(self.mul(self.log2(x), y))

    def log2(self, x: int) -> int:
        if x <= 0:
            raise ValueError("logarithm of a non-positive value")
        if x >= UNIT:
            return self._log2_at_least_one(x)
        return -self._log2_at_least_one(UNIT_SQUARED // x)

    def exp2(self, x: int) -> int:
        if x < 0:
            if x < self.fmt.min_permitted_exp2:
                return 0
            return UNIT_SQUARED // self._exp2_non_negative(-x)
        return self._exp2_non_negative(x)


class UD60x18Math(_DecimalMath):
    """Unsigned 60.18 decimal fixed-point arithmetic."""

    fmt = UD60X18

    def mul(self, x: int, y: int) -> int:
        return self._checked(x * y // UNIT)

    def div(self, x: int, y: int) -> int:
        if y == 0:
            raise ZeroDivisionError("division by zero")
        return self._checked(x * UNIT // y)

    def avg(self, x: int, y: int) -> int:
        return (x + y) >> 1

    def pow(self, x: int, y: int) -> int:
        if x == 0:
            return UNIT if y == 0 else 0
        if x == UNIT or y == 0:
            return UNIT
        if y == UNIT:
            return x
        if x > UNIT:
            return self.exp2(self.mul(self.log2(x), y))
        inverse = UNIT_SQUARED // x
        w = self.exp2(self.mul(self.log2(inverse), y))
        if w == 0:
            raise ZeroDivisionError("power underflows")
        return UNIT_SQUARED // w

    def log2(self, x: int) -> int:
        if x < UNIT:
            raise ValueError("logarithm input below one")
        return self._log2_at_least_one(x)

    def exp2(self, x: int) -> int:
        return self._exp2_non_negative(x)
