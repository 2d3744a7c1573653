"""
Property suite for 18-digit decimal fixed-point libraries.

One template covers both the signed 59.18 and the unsigned 60.18 format.
Checks read their constants from ``w.fmt``, so the same function verifies
either library; checks that only make sense for one signedness (negation,
negative domains, values below one for unsigned logarithms) are tagged at
registration and filtered out by ``build_decimal_suite``.

Decimal libraries round toward zero, and their logarithms are refined bit
by bit in decimal arithmetic, so transcendental laws carry an absolute
error of a few hundred ulps on top of the input's rounding.  Relative laws
compare the most significant digits, shortened by the digits any rounding
error is amplified by.
"""

from __future__ import annotations

from decimal import Decimal, localcontext

from formats import FixedPointFormat
from invariants import ArgKind, PropertySuite, check_that, require
from magnitude import significant_digits_after_mult, significant_digits_lost_in_mult
from precision import (
    equal_most_significant_digits_within_precision,
    equal_within_decimal_precision,
    equal_within_tolerance,
)
from wrappers import FailureKind, LibraryAdapter, Outcome

F = ArgKind.FIXED
E = ArgKind.EXPONENT
I = ArgKind.INTEGER

ZERO_FP = 0

# Relative laws are discarded below this many significant digits.
REQUIRED_SIGNIFICANT_DIGITS = 3

# Worst-case absolute error of one logarithm, in raw units.
LOG_ERROR_ULPS = 256

# x ** 0.5 must match sqrt(x) within one / HALF_EXPONENT_TOLERANCE percent.
HALF_EXPONENT_TOLERANCE = 10**4

# log2(e) with 18 decimals.
LOG2_E_18 = 1_442695040888963407

TEMPLATE = PropertySuite(name="decimal")

# qualified name -> the signedness the check is restricted to
_RESTRICTED: dict[str, bool] = {}


def prop(operation: str, name: str, description: str, *args: ArgKind,
         requires: tuple[str, ...] = (), signed: bool | None = None):
    register = TEMPLATE.property(operation, name, description, *args, requires=requires)

    def decorate(fn):
        register(fn)
        if signed is not None:
            _RESTRICTED[f"{operation}.{name}"] = signed
        return fn

    return decorate


def build_decimal_suite(fmt: FixedPointFormat) -> PropertySuite:
    """The decimal suite instantiated for ``fmt``."""
    if fmt.radix != 10:
        raise ValueError(f"{fmt.name} is not a decimal format")
    properties = [
        p for p in TEMPLATE
        if _RESTRICTED.get(p.qualified_name, fmt.signed) == fmt.signed
    ]
    return PropertySuite(name=fmt.name, properties=properties)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _digits(n: int) -> int:
    return len(str(abs(n))) if n else 0


def _same_outcome(a: Outcome, b: Outcome) -> bool:
    if a.ok != b.ok:
        return False
    return not a.ok or a.value == b.value


def _require_magnitude(w: LibraryAdapter, *values: int) -> None:
    """|MIN| does not fit a signed format, so libraries may reject MIN anywhere."""
    if w.fmt.signed:
        require(all(v != w.fmt.min_raw for v in values))


def _agreement_digits(fmt: FixedPointFormat, *raws: int, rounding: int = 1,
                      error_ulps: int = 1, slack: int = 3) -> int:
    """
    Most significant digits two results are expected to share.

    ``rounding`` is how many times the rounding of the smallest raw is
    amplified; ``error_ulps`` is an error relative to one, in ulps, that
    does not shrink with the operands (logarithms feeding exponentials).
    """
    budget = min(
        min(_digits(r) for r in raws) - _digits(rounding),
        fmt.fractional - _digits(error_ulps),
    ) - slack
    require(budget >= REQUIRED_SIGNIFICANT_DIGITS)
    return budget


def _log_bound(fmt: FixedPointFormat, rounded_input: int, logs: int = 1, extra: int = 0) -> int:
    """Absolute error of ``logs`` logarithms plus the input's own rounding."""
    return logs * LOG_ERROR_ULPS + extra + 2 * fmt.one // abs(rounded_input) + 2


def _close(a: int, b: int, bound: int) -> bool:
    return equal_within_decimal_precision(a, b, _digits(bound))


def _exact_log(fmt: FixedPointFormat, raw: int, base: int | None) -> int:
    """log_base of the value of ``raw`` (natural log for None), truncated to raw."""
    with localcontext() as ctx:
        ctx.prec = 80
        value = (Decimal(raw) / Decimal(fmt.one)).ln()
        if base is not None:
            value /= Decimal(base).ln()
        return int(value * fmt.one)


# ===================================================================
# ADDITION
# ===================================================================

@prop("add", "commutative", "x + y == y + x", F, F)
def add_test_commutative(w: LibraryAdapter, x: int, y: int) -> None:
    x_y, y_x = w.add(x, y), w.add(y, x)
    check_that(_same_outcome(x_y, y_x), "addition must be commutative",
               x=x, y=y, x_y=x_y, y_x=y_x)


@prop("add", "associative", "(x + y) + z == x + (y + z)", F, F, F)
def add_test_associative(w: LibraryAdapter, x: int, y: int, z: int) -> None:
    xy_z = w.add(w.add(x, y).unwrap(), z).unwrap()
    y_z = w.add(y, z).unwrap()
    x_yz = w.add(x, y_z).expect("(x + y) + z is representable, x + (y + z) must be too",
                                x=x, y=y, z=z)
    check_that(xy_z == x_yz, "addition must be associative", x=x, y=y, z=z, xy_z=xy_z, x_yz=x_yz)


@prop("add", "identity", "x + 0 == x and x + (-x) == 0", F)
def add_test_identity(w: LibraryAdapter, x: int) -> None:
    x_0 = w.add(x, ZERO_FP).expect("adding zero must not fail", x=x)
    check_that(x_0 == x, "zero must be the additive identity", x=x, result=x_0)
    if w.fmt.signed and x != w.fmt.min_raw:
        x_neg_x = w.add(x, -x).expect("adding the opposite must not fail", x=x)
        check_that(x_neg_x == ZERO_FP, "x + (-x) must be zero", x=x, result=x_neg_x)


@prop("add", "values", "y >= 0 implies x + y >= x, else x + y < x", F, F)
def add_test_values(w: LibraryAdapter, x: int, y: int) -> None:
    x_y = w.add(x, y).unwrap()
    if y >= ZERO_FP:
        check_that(x_y >= x, "adding a non-negative value must not decrease x", x=x, y=y, result=x_y)
    else:
        check_that(x_y < x, "adding a negative value must decrease x", x=x, y=y, result=x_y)


@prop("add", "range", "a successful sum lies in [MIN, MAX]", F, F)
def add_test_range(w: LibraryAdapter, x: int, y: int) -> None:
    result = w.add(x, y)
    if result.ok:
        check_that(w.fmt.contains(result.value), "sum must be within range",
                   x=x, y=y, result=result.value)


@prop("add", "maximum", "MAX + 0 == MAX and MAX + 1 fails")
def add_test_maximum_value(w: LibraryAdapter) -> None:
    fmt = w.fmt
    result = w.add(fmt.max_raw, ZERO_FP).expect("MAX + 0 must not fail")
    check_that(result == fmt.max_raw, "MAX + 0 must be MAX", result=result)
    check_that(w.add(fmt.max_raw, fmt.one).failed, "MAX + 1 must fail")


@prop("add", "minimum", "MIN + 0 == MIN and MIN + (-1) fails")
def add_test_minimum_value(w: LibraryAdapter) -> None:
    fmt = w.fmt
    result = w.add(fmt.min_raw, ZERO_FP).expect("MIN + 0 must not fail")
    check_that(result == fmt.min_raw, "MIN + 0 must be MIN", result=result)
    if fmt.signed:
        check_that(w.add(fmt.min_raw, -fmt.one).failed, "MIN + (-1) must fail")


# ===================================================================
# SUBTRACTION
# ===================================================================

@prop("sub", "equivalence_to_addition", "x - y == x + (-y)", F, F,
      requires=("add", "neg"), signed=True)
def sub_test_equivalence_to_addition(w: LibraryAdapter, x: int, y: int) -> None:
    neg_y = w.neg(y).unwrap()
    x_minus_y = w.sub(x, y).unwrap()
    x_plus_neg_y = w.add(x, neg_y).expect("x + (-y) must not fail when x - y succeeds", x=x, y=y)
    check_that(x_minus_y == x_plus_neg_y, "subtraction must equal addition of the opposite",
               x=x, y=y, sub=x_minus_y, add=x_plus_neg_y)


@prop("sub", "non_commutative", "x - y == -(y - x)", F, F)
def sub_test_non_commutative(w: LibraryAdapter, x: int, y: int) -> None:
    x_y, y_x = w.sub(x, y), w.sub(y, x)
    if w.fmt.signed:
        check_that(x_y.unwrap() == -y_x.unwrap(), "x - y must be the opposite of y - x",
                   x=x, y=y, x_y=x_y, y_x=y_x)
    elif x == y:
        check_that(x_y.ok and y_x.ok and x_y.value == y_x.value == ZERO_FP,
                   "x - x must be zero both ways", x=x)
    else:
        # One of the two differences is negative, which unsigned values cannot hold.
        check_that(x_y.ok != y_x.ok, "exactly one of x - y and y - x must fail",
                   x=x, y=y, x_y=x_y, y_x=y_x)


@prop("sub", "identity", "x - 0 == x and x - x == 0", F)
def sub_test_identity(w: LibraryAdapter, x: int) -> None:
    x_0 = w.sub(x, ZERO_FP).expect("subtracting zero must not fail", x=x)
    check_that(x_0 == x, "x - 0 must be x", x=x, result=x_0)
    x_x = w.sub(x, x).expect("x - x must not fail", x=x)
    check_that(x_x == ZERO_FP, "x - x must be zero", x=x, result=x_x)


@prop("sub", "neutrality", "(x - y) + y == x and (x + y) - y == x", F, F, requires=("add",))
def sub_test_neutrality(w: LibraryAdapter, x: int, y: int) -> None:
    x_minus_y = w.sub(x, y)
    if x_minus_y.ok:
        back = w.add(x_minus_y.value, y).expect("(x - y) + y must not fail", x=x, y=y)
        check_that(back == x, "(x - y) + y must be x", x=x, y=y, result=back)
    x_plus_y = w.add(x, y)
    if x_plus_y.ok:
        back = w.sub(x_plus_y.value, y).expect("(x + y) - y must not fail", x=x, y=y)
        check_that(back == x, "(x + y) - y must be x", x=x, y=y, result=back)
    require(x_minus_y.ok or x_plus_y.ok)


@prop("sub", "values", "y >= 0 implies x - y <= x, else x - y > x", F, F)
def sub_test_values(w: LibraryAdapter, x: int, y: int) -> None:
    x_y = w.sub(x, y).unwrap()
    if y >= ZERO_FP:
        check_that(x_y <= x, "subtracting a non-negative value must not increase x", x=x, y=y, result=x_y)
    else:
        check_that(x_y > x, "subtracting a negative value must increase x", x=x, y=y, result=x_y)


@prop("sub", "range", "a successful difference lies in [MIN, MAX]", F, F)
def sub_test_range(w: LibraryAdapter, x: int, y: int) -> None:
    result = w.sub(x, y)
    if result.ok:
        check_that(w.fmt.contains(result.value), "difference must be within range",
                   x=x, y=y, result=result.value)


@prop("sub", "maximum", "MAX - 0 == MAX and MAX - (-1) fails")
def sub_test_maximum_value(w: LibraryAdapter) -> None:
    fmt = w.fmt
    result = w.sub(fmt.max_raw, ZERO_FP).expect("MAX - 0 must not fail")
    check_that(result == fmt.max_raw, "MAX - 0 must be MAX", result=result)
    if fmt.signed:
        check_that(w.sub(fmt.max_raw, -fmt.one).failed, "MAX - (-1) must fail")


@prop("sub", "minimum", "MIN - 0 == MIN and MIN - 1 fails")
def sub_test_minimum_value(w: LibraryAdapter) -> None:
    fmt = w.fmt
    result = w.sub(fmt.min_raw, ZERO_FP).expect("MIN - 0 must not fail")
    check_that(result == fmt.min_raw, "MIN - 0 must be MIN", result=result)
    check_that(w.sub(fmt.min_raw, fmt.one).failed, "MIN - 1 must fail")


# ===================================================================
# MULTIPLICATION
# ===================================================================

@prop("mul", "commutative", "x * y == y * x", F, F)
def mul_test_commutative(w: LibraryAdapter, x: int, y: int) -> None:
    x_y, y_x = w.mul(x, y), w.mul(y, x)
    check_that(_same_outcome(x_y, y_x), "multiplication must be commutative",
               x=x, y=y, x_y=x_y, y_x=y_x)


@prop("mul", "associative", "(x * y) * z ~= x * (y * z)", F, F, F)
def mul_test_associative(w: LibraryAdapter, x: int, y: int, z: int) -> None:
    fmt = w.fmt
    require(significant_digits_after_mult(x, y, fmt) >= REQUIRED_SIGNIFICANT_DIGITS)
    require(significant_digits_after_mult(y, z, fmt) >= REQUIRED_SIGNIFICANT_DIGITS)
    xy_z = w.mul(w.mul(x, y).unwrap(), z).unwrap()
    x_yz = w.mul(x, w.mul(y, z).unwrap()).unwrap()
    bound = (abs(x) + abs(z)) // fmt.one + 3
    check_that(_close(xy_z, x_yz, bound), "multiplication must be associative",
               x=x, y=y, z=z, xy_z=xy_z, x_yz=x_yz)


@prop("mul", "distributive", "x * (y + z) ~= x * y + x * z", F, F, F, requires=("add",))
def mul_test_distributive(w: LibraryAdapter, x: int, y: int, z: int) -> None:
    left = w.mul(x, w.add(y, z).unwrap()).unwrap()
    right = w.add(w.mul(x, y).unwrap(), w.mul(x, z).unwrap()).unwrap()
    check_that(abs(left - right) <= 2, "multiplication must distribute over addition",
               x=x, y=y, z=z, left=left, right=right)


@prop("mul", "identity", "x * 1 == x and x * 0 == 0", F)
def mul_test_identity(w: LibraryAdapter, x: int) -> None:
    _require_magnitude(w, x)
    x_1 = w.mul(x, w.fmt.one).expect("x * 1 must not fail", x=x)
    check_that(x_1 == x, "one must be the multiplicative identity", x=x, result=x_1)
    x_0 = w.mul(x, ZERO_FP).expect("x * 0 must not fail", x=x)
    check_that(x_0 == ZERO_FP, "x * 0 must be zero", x=x, result=x_0)


@prop("mul", "values", "|y| >= 1 moves x away from zero, |y| < 1 toward it", F, F)
def mul_test_values(w: LibraryAdapter, x: int, y: int) -> None:
    require(x != ZERO_FP and y != ZERO_FP)
    one = w.fmt.one
    x_y = w.mul(x, y).unwrap()
    if x >= ZERO_FP:
        if y >= one:
            check_that(x_y >= x, "x >= 0, y >= 1 implies x * y >= x", x=x, y=y, result=x_y)
        else:
            check_that(x_y <= x, "x >= 0, y < 1 implies x * y <= x", x=x, y=y, result=x_y)
    else:
        if y >= one:
            check_that(x_y <= x, "x < 0, y >= 1 implies x * y <= x", x=x, y=y, result=x_y)
        else:
            check_that(x_y >= x, "x < 0, y < 1 implies x * y >= x", x=x, y=y, result=x_y)


@prop("mul", "range", "a successful product lies in [MIN, MAX]", F, F)
def mul_test_range(w: LibraryAdapter, x: int, y: int) -> None:
    result = w.mul(x, y)
    if result.ok:
        check_that(w.fmt.contains(result.value), "product must be within range",
                   x=x, y=y, result=result.value)


@prop("mul", "precision_loss", "products below the resolution keep at most the last digit", F, F)
def mul_test_precision_loss(w: LibraryAdapter, x: int, y: int) -> None:
    require(x != ZERO_FP and y != ZERO_FP)
    require(significant_digits_lost_in_mult(x, y, w.fmt))
    result = w.mul(x, y).unwrap()
    check_that(abs(result) < 10, "a product below the resolution must keep at most one digit",
               x=x, y=y, result=result)


@prop("mul", "maximum", "MAX * 1 == MAX and MAX * 2 fails")
def mul_test_maximum_value(w: LibraryAdapter) -> None:
    fmt = w.fmt
    result = w.mul(fmt.max_raw, fmt.one).expect("MAX * 1 must not fail")
    check_that(result == fmt.max_raw, "MAX * 1 must be MAX", result=result)
    check_that(w.mul(fmt.max_raw, 2 * fmt.one).failed, "MAX * 2 must fail")


@prop("mul", "minimum", "MIN * 1 is MIN or fails, MIN * 2 fails")
def mul_test_minimum_value(w: LibraryAdapter) -> None:
    fmt = w.fmt
    if not fmt.signed:
        result = w.mul(fmt.min_raw, fmt.max_raw).expect("0 * MAX must not fail")
        check_that(result == ZERO_FP, "0 * MAX must be zero", result=result)
        return
    result = w.mul(fmt.min_raw, fmt.one)
    check_that(result.failed or result.value == fmt.min_raw, "MIN * 1 must be MIN when it succeeds",
               result=result)
    check_that(w.mul(fmt.min_raw, 2 * fmt.one).failed, "MIN * 2 must fail")
    result = w.mul(fmt.min_raw + 1, fmt.one).expect("(MIN + 1) * 1 must not fail")
    check_that(result == fmt.min_raw + 1, "(MIN + 1) * 1 must be MIN + 1", result=result)


# ===================================================================
# DIVISION
# ===================================================================

@prop("div", "division_by_zero", "x / 0 always fails", F)
def div_test_division_by_zero(w: LibraryAdapter, x: int) -> None:
    result = w.div(x, ZERO_FP)
    check_that(result.failed and result.kind is FailureKind.DIVISION_BY_ZERO,
               "division by zero must fail as such", x=x, result=result)


@prop("div", "numerator_zero", "0 / y == 0", F)
def div_test_division_num_zero(w: LibraryAdapter, y: int) -> None:
    require(y != ZERO_FP)
    _require_magnitude(w, y)
    result = w.div(ZERO_FP, y).expect("0 / y must not fail", y=y)
    check_that(result == ZERO_FP, "0 / y must be zero", y=y, result=result)


@prop("div", "negative_divisor", "x / (-y) == -(x / y)", F, F, signed=True)
def div_test_negative_divisor(w: LibraryAdapter, x: int, y: int) -> None:
    require(y != ZERO_FP)
    _require_magnitude(w, x, y)
    x_y = w.div(x, y).unwrap()
    x_neg_y = w.div(x, -y).expect("x / (-y) must not fail when x / y succeeds", x=x, y=y)
    check_that(x_neg_y == -x_y, "dividing by -y must negate the quotient",
               x=x, y=y, x_y=x_y, x_neg_y=x_neg_y)


@prop("div", "identity", "x / 1 == x and x / x == 1", F)
def div_test_division_identity(w: LibraryAdapter, x: int) -> None:
    _require_magnitude(w, x)
    x_1 = w.div(x, w.fmt.one).expect("x / 1 must not fail", x=x)
    check_that(x_1 == x, "x / 1 must be x", x=x, result=x_1)
    if x != ZERO_FP:
        x_x = w.div(x, x).expect("x / x must not fail", x=x)
        check_that(x_x == w.fmt.one, "x / x must be one", x=x, result=x_x)


@prop("div", "values", "|y| >= 1 implies |x / y| <= |x|, else |x / y| >= |x|", F, F)
def div_test_values(w: LibraryAdapter, x: int, y: int) -> None:
    require(y != ZERO_FP)
    x_y = abs(w.div(x, y).unwrap())
    if abs(y) >= w.fmt.one:
        check_that(x_y <= abs(x), "dividing by |y| >= 1 must not grow |x|", x=x, y=y, result=x_y)
    else:
        check_that(x_y >= abs(x), "dividing by |y| < 1 must not shrink |x|", x=x, y=y, result=x_y)


@prop("div", "range", "a successful quotient lies in [MIN, MAX]", F, F)
def div_test_range(w: LibraryAdapter, x: int, y: int) -> None:
    result = w.div(x, y)
    if result.ok:
        check_that(w.fmt.contains(result.value), "quotient must be within range",
                   x=x, y=y, result=result.value)


@prop("div", "maximum_denominator", "x / MAX succeeds with |result| <= 1", F)
def div_test_maximum_denominator(w: LibraryAdapter, x: int) -> None:
    _require_magnitude(w, x)
    result = w.div(x, w.fmt.max_raw).expect("x / MAX must not fail", x=x)
    check_that(abs(result) <= w.fmt.one, "x / MAX must be at most one in magnitude",
               x=x, result=result)


@prop("div", "maximum_numerator", "MAX / y fails exactly when |y| < 1", F)
def div_test_maximum_numerator(w: LibraryAdapter, y: int) -> None:
    _require_magnitude(w, y)
    result = w.div(w.fmt.max_raw, y)
    if abs(y) < w.fmt.one:
        check_that(result.failed, "MAX / y must fail for |y| < 1", y=y, result=result)
    else:
        check_that(result.ok, "MAX / y must not fail for |y| >= 1", y=y, result=result)


@prop("div", "minimum_numerator", "a successful MIN / y is exact and in range", F)
def div_test_minimum_numerator(w: LibraryAdapter, y: int) -> None:
    require(y != ZERO_FP)
    fmt = w.fmt
    result = w.div(fmt.min_raw, y)
    if not fmt.signed:
        check_that(result.ok and result.value == ZERO_FP, "0 / y must be zero", y=y, result=result)
    elif result.ok:
        expected = abs(fmt.min_raw) * fmt.one // abs(y)
        expected = expected if y < 0 else -expected
        check_that(result.value == expected and abs(y) >= fmt.one and y != -fmt.one,
                   "MIN / y may only succeed when the quotient fits", y=y, result=result)


# ===================================================================
# NEGATION AND ABSOLUTE VALUE (signed only)
# ===================================================================

@prop("neg", "double_negation", "-(-x) == x and x + (-x) == 0", F, requires=("add",), signed=True)
def neg_test_double_negation(w: LibraryAdapter, x: int) -> None:
    _require_magnitude(w, x)
    neg_x = w.neg(x).expect("negation must not fail", x=x)
    back = w.neg(neg_x).expect("double negation must not fail", x=x)
    check_that(back == x, "-(-x) must be x", x=x, result=back)
    total = w.add(x, neg_x).expect("x + (-x) must not fail", x=x)
    check_that(total == ZERO_FP, "x + (-x) must be zero", x=x, result=total)


@prop("neg", "zero", "-0 == 0", signed=True)
def neg_test_zero(w: LibraryAdapter) -> None:
    result = w.neg(ZERO_FP).expect("negating zero must not fail")
    check_that(result == ZERO_FP, "-0 must be zero", result=result)


@prop("neg", "maximum", "-MAX == MIN + 1", signed=True)
def neg_test_maximum(w: LibraryAdapter) -> None:
    result = w.neg(w.fmt.max_raw).expect("negating MAX must not fail")
    check_that(result == w.fmt.min_raw + 1, "-MAX must be MIN + epsilon", result=result)


@prop("neg", "minimum", "-MIN fails", signed=True)
def neg_test_minimum(w: LibraryAdapter) -> None:
    result = w.neg(w.fmt.min_raw)
    check_that(result.failed, "negating MIN must fail", result=result)


@prop("abs", "positive", "|x| >= 0", F, signed=True)
def abs_test_positive(w: LibraryAdapter, x: int) -> None:
    result = w.abs(x).unwrap()
    check_that(result >= ZERO_FP, "absolute value must be non-negative", x=x, result=result)


@prop("abs", "negative", "|-x| == |x|", F, signed=True)
def abs_test_negative(w: LibraryAdapter, x: int) -> None:
    _require_magnitude(w, x)
    abs_x = w.abs(x).expect("abs must not fail", x=x)
    abs_neg_x = w.abs(-x).expect("abs of -x must not fail", x=x)
    check_that(abs_x == abs_neg_x, "|-x| must equal |x|", x=x, abs_x=abs_x, abs_neg_x=abs_neg_x)


@prop("abs", "multiplicativeness", "|x * y| ~= |x| * |y|", F, F, requires=("mul",), signed=True)
def abs_test_multiplicativeness(w: LibraryAdapter, x: int, y: int) -> None:
    abs_x = w.abs(x).unwrap()
    abs_y = w.abs(y).unwrap()
    abs_xy = w.abs(w.mul(x, y).unwrap()).unwrap()
    abs_x_abs_y = w.mul(abs_x, abs_y).unwrap()
    check_that(abs(abs_xy - abs_x_abs_y) <= 1, "|x * y| must equal |x| * |y|",
               x=x, y=y, left=abs_xy, right=abs_x_abs_y)


@prop("abs", "subadditivity", "|x + y| <= |x| + |y|", F, F, requires=("add",), signed=True)
def abs_test_subadditivity(w: LibraryAdapter, x: int, y: int) -> None:
    abs_x = w.abs(x).unwrap()
    abs_y = w.abs(y).unwrap()
    abs_sum = w.abs(w.add(x, y).unwrap()).unwrap()
    sum_abs = w.add(abs_x, abs_y).unwrap()
    check_that(abs_sum <= sum_abs, "|x + y| must not exceed |x| + |y|",
               x=x, y=y, abs_sum=abs_sum, sum_abs=sum_abs)


@prop("abs", "zero", "|0| == 0", signed=True)
def abs_test_zero(w: LibraryAdapter) -> None:
    result = w.abs(ZERO_FP).expect("abs of zero must not fail")
    check_that(result == ZERO_FP, "|0| must be zero", result=result)


@prop("abs", "maximum", "|MAX| == MAX", signed=True)
def abs_test_maximum(w: LibraryAdapter) -> None:
    result = w.abs(w.fmt.max_raw).expect("abs of MAX must not fail")
    check_that(result == w.fmt.max_raw, "|MAX| must be MAX", result=result)


@prop("abs", "minimum", "|MIN| fails", signed=True)
def abs_test_minimum(w: LibraryAdapter) -> None:
    result = w.abs(w.fmt.min_raw)
    check_that(result.failed, "abs of MIN must fail", result=result)


# ===================================================================
# INVERSE
# ===================================================================

@prop("inv", "double_inverse", "1 / (1 / x) ~= x", F)
def inv_test_double_inverse(w: LibraryAdapter, x: int) -> None:
    require(x != ZERO_FP)
    one = w.fmt.one
    inv_x = w.inv(x).unwrap()
    require(abs(inv_x) >= 2)
    back = w.inv(inv_x).unwrap()
    # Truncating 1/x loses under one ulp; inverting again scales that
    # loss by x**2.
    bound = 2 * x * x // (one * one) + 2
    check_that(abs(back - x) <= bound, "inverting twice must give x back",
               x=x, inv_x=inv_x, result=back)


@prop("inv", "division", "1 / x == div(1, x)", F, requires=("div",))
def inv_test_division(w: LibraryAdapter, x: int) -> None:
    require(x != ZERO_FP)
    _require_magnitude(w, x)
    inv_x = w.inv(x).unwrap()
    div_1_x = w.div(w.fmt.one, x).expect("1 / x must not fail when inv(x) succeeds", x=x)
    check_that(inv_x == div_1_x, "inverse must equal division of one", x=x, inv=inv_x, div=div_1_x)


@prop("inv", "division_noncommutativity", "1 / (x / y) ~= y / x", F, F, requires=("div",))
def inv_test_division_noncommutativity(w: LibraryAdapter, x: int, y: int) -> None:
    require(x != ZERO_FP and y != ZERO_FP)
    one = w.fmt.one
    x_y = w.div(x, y).unwrap()
    require(abs(x_y) >= 2)
    y_x = w.div(y, x).unwrap()
    inv_x_y = w.inv(x_y).unwrap()
    bound = 2 * (abs(y_x) + 1) ** 2 // (one * one) + 3
    check_that(abs(inv_x_y - y_x) <= bound, "1 / (x / y) must equal y / x",
               x=x, y=y, left=inv_x_y, right=y_x)


@prop("inv", "multiplication", "1 / (x * y) ~= (1 / x) * (1 / y)", F, F, requires=("mul",))
def inv_test_multiplication(w: LibraryAdapter, x: int, y: int) -> None:
    require(x != ZERO_FP and y != ZERO_FP)
    inv_x = w.inv(x).unwrap()
    inv_y = w.inv(y).unwrap()
    x_y = w.mul(x, y).unwrap()
    require(x_y != ZERO_FP)
    left = w.inv(x_y).unwrap()
    right = w.mul(inv_x, inv_y).unwrap()
    digits = _agreement_digits(w.fmt, left, right, inv_x, inv_y, x_y, rounding=4)
    check_that(equal_most_significant_digits_within_precision(left, right, digits),
               "inverse must distribute over multiplication",
               x=x, y=y, left=left, right=right, digits=digits)


@prop("inv", "identity", "(1 / x) * x ~= 1", F, requires=("mul",))
def inv_test_identity(w: LibraryAdapter, x: int) -> None:
    require(x != ZERO_FP)
    _require_magnitude(w, x)
    one = w.fmt.one
    inv_x = w.inv(x).unwrap()
    product = w.mul(inv_x, x).expect("x * (1 / x) must not fail", x=x)
    bound = abs(x) // one + 2
    check_that(abs(product - one) <= bound, "x * (1 / x) must be one", x=x, result=product)


@prop("inv", "values", "|x| >= 1 exactly when |1 / x| <= 1", F)
def inv_test_values(w: LibraryAdapter, x: int) -> None:
    require(x != ZERO_FP)
    one = w.fmt.one
    inv_x = abs(w.inv(x).unwrap())
    if abs(x) >= one:
        check_that(inv_x <= one, "|x| >= 1 implies |1 / x| <= 1", x=x, result=inv_x)
    else:
        check_that(inv_x >= one, "|x| < 1 implies |1 / x| >= 1", x=x, result=inv_x)


@prop("inv", "sign", "1 / x has the sign of x", F, signed=True)
def inv_test_sign(w: LibraryAdapter, x: int) -> None:
    require(x != ZERO_FP)
    inv_x = w.inv(x).unwrap()
    require(inv_x != ZERO_FP)
    check_that((inv_x > 0) == (x > 0), "inverse must preserve the sign", x=x, result=inv_x)


@prop("inv", "zero", "1 / 0 fails")
def inv_test_zero(w: LibraryAdapter) -> None:
    result = w.inv(ZERO_FP)
    check_that(result.failed, "inverting zero must fail", result=result)


@prop("inv", "maximum", "1 / MAX is below the resolution")
def inv_test_maximum(w: LibraryAdapter) -> None:
    result = w.inv(w.fmt.max_raw).expect("inverting MAX must not fail")
    check_that(abs(result) <= 1, "1 / MAX must vanish", result=result)


@prop("inv", "minimum", "1 / MIN is below the resolution", signed=True)
def inv_test_minimum(w: LibraryAdapter) -> None:
    result = w.inv(w.fmt.min_raw).expect("inverting MIN must not fail")
    check_that(abs(result) <= 1, "1 / MIN must vanish", result=result)


# ===================================================================
# AVERAGES
# ===================================================================

@prop("avg", "values_in_range", "min(x, y) <= avg(x, y) <= max(x, y)", F, F)
def avg_test_values_in_range(w: LibraryAdapter, x: int, y: int) -> None:
    result = w.avg(x, y).expect("avg must not fail", x=x, y=y)
    check_that(min(x, y) <= result <= max(x, y), "average must lie between its operands",
               x=x, y=y, result=result)


@prop("avg", "one_value", "avg(x, x) == x", F)
def avg_test_one_value(w: LibraryAdapter, x: int) -> None:
    result = w.avg(x, x).expect("avg must not fail", x=x)
    check_that(result == x, "avg(x, x) must be x", x=x, result=result)


@prop("avg", "operand_order", "avg(x, y) == avg(y, x)", F, F)
def avg_test_operand_order(w: LibraryAdapter, x: int, y: int) -> None:
    x_y, y_x = w.avg(x, y), w.avg(y, x)
    check_that(_same_outcome(x_y, y_x), "average must not depend on operand order",
               x=x, y=y, x_y=x_y, y_x=y_x)


@prop("avg", "maximum", "avg(MAX, MAX) == MAX")
def avg_test_maximum(w: LibraryAdapter) -> None:
    result = w.avg(w.fmt.max_raw, w.fmt.max_raw).expect("avg(MAX, MAX) must not fail")
    check_that(result == w.fmt.max_raw, "avg(MAX, MAX) must be MAX", result=result)


@prop("avg", "minimum", "avg(MIN, MIN) == MIN")
def avg_test_minimum(w: LibraryAdapter) -> None:
    result = w.avg(w.fmt.min_raw, w.fmt.min_raw).expect("avg(MIN, MIN) must not fail")
    check_that(result == w.fmt.min_raw, "avg(MIN, MIN) must be MIN", result=result)


@prop("gavg", "values_in_range", "min(|x|, |y|) <= gavg(x, y) <= max(|x|, |y|)", F, F)
def gavg_test_values_in_range(w: LibraryAdapter, x: int, y: int) -> None:
    require(x != ZERO_FP and y != ZERO_FP and (x > 0) == (y > 0))
    result = w.gavg(x, y).unwrap()
    low, high = sorted((abs(x), abs(y)))
    check_that(low <= result <= high, "geometric average must lie between its operands",
               x=x, y=y, result=result)


@prop("gavg", "one_value", "gavg(x, x) == |x|", F)
def gavg_test_one_value(w: LibraryAdapter, x: int) -> None:
    result = w.gavg(x, x).unwrap()
    check_that(result == abs(x), "gavg(x, x) must be |x|", x=x, result=result)


@prop("gavg", "operand_order", "gavg(x, y) == gavg(y, x)", F, F)
def gavg_test_operand_order(w: LibraryAdapter, x: int, y: int) -> None:
    x_y, y_x = w.gavg(x, y), w.gavg(y, x)
    check_that(_same_outcome(x_y, y_x), "geometric average must not depend on operand order",
               x=x, y=y, x_y=x_y, y_x=y_x)


@prop("gavg", "maximum", "gavg(MAX, 0) == 0 and gavg(MAX, MAX) is MAX or fails")
def gavg_test_maximum(w: LibraryAdapter) -> None:
    fmt = w.fmt
    result = w.gavg(fmt.max_raw, ZERO_FP).expect("gavg(MAX, 0) must not fail")
    check_that(result == ZERO_FP, "gavg(MAX, 0) must be zero", result=result)
    # Libraries that form the raw product first reject it as an overflow.
    result = w.gavg(fmt.max_raw, fmt.max_raw)
    check_that(result.failed or result.value == fmt.max_raw,
               "gavg(MAX, MAX) must be MAX when it succeeds", result=result)


@prop("gavg", "minimum", "gavg(MIN, 0) == 0 and gavg(MIN, MIN) fails", signed=True)
def gavg_test_minimum(w: LibraryAdapter) -> None:
    fmt = w.fmt
    result = w.gavg(fmt.min_raw, ZERO_FP).expect("gavg(MIN, 0) must not fail")
    check_that(result == ZERO_FP, "gavg(MIN, 0) must be zero", result=result)
    check_that(w.gavg(fmt.min_raw, fmt.min_raw).failed, "gavg(MIN, MIN) must fail")


# ===================================================================
# POWER (fixed-point exponent)
# ===================================================================

def _pow_error_ulps(fmt: FixedPointFormat, *exponents: int) -> int:
    """Relative error of powers computed as exp2(y * log2(x)), in ulps of one."""
    amplification = sum(abs(e) for e in exponents) // fmt.one + 1
    return LOG_ERROR_ULPS * amplification + 2


@prop("pow", "zero_exponent", "x ** 0 == 1", F)
def pow_test_zero_exponent(w: LibraryAdapter, x: int) -> None:
    result = w.pow(x, ZERO_FP).expect("x ** 0 must not fail", x=x)
    check_that(result == w.fmt.one, "x ** 0 must be one", x=x, result=result)


@prop("pow", "zero_base", "0 ** y == 0 for y > 0, 0 ** 0 == 1", F)
def pow_test_zero_base(w: LibraryAdapter, y: int) -> None:
    require(y >= ZERO_FP)
    result = w.pow(ZERO_FP, y).expect("0 ** y must not fail", y=y)
    expected = w.fmt.one if y == ZERO_FP else ZERO_FP
    check_that(result == expected, "0 ** y must be zero for positive y", y=y, result=result)


@prop("pow", "one_exponent", "x ** 1 == x", F)
def pow_test_one_exponent(w: LibraryAdapter, x: int) -> None:
    result = w.pow(x, w.fmt.one).expect("x ** 1 must not fail", x=x)
    check_that(result == x, "x ** 1 must be x", x=x, result=result)


@prop("pow", "base_one", "1 ** y == 1", F)
def pow_test_base_one(w: LibraryAdapter, y: int) -> None:
    result = w.pow(w.fmt.one, y).expect("1 ** y must not fail", y=y)
    check_that(result == w.fmt.one, "1 ** y must be one", y=y, result=result)


@prop("pow", "product_same_base", "x ** a * x ** b ~= x ** (a + b)", F, F, F,
      requires=("mul", "add"))
def pow_test_product_same_base(w: LibraryAdapter, x: int, a: int, b: int) -> None:
    require(x > ZERO_FP)
    x_a = w.pow(x, a).unwrap()
    x_b = w.pow(x, b).unwrap()
    x_ab = w.pow(x, w.add(a, b).unwrap()).unwrap()
    product = w.mul(x_a, x_b).unwrap()
    digits = _agreement_digits(w.fmt, x_a, x_b, x_ab, product,
                               error_ulps=_pow_error_ulps(w.fmt, a, b))
    check_that(equal_most_significant_digits_within_precision(product, x_ab, digits),
               "x ** a * x ** b must equal x ** (a + b)",
               x=x, a=a, b=b, left=product, right=x_ab, digits=digits)


@prop("pow", "power_of_power", "(x ** a) ** b ~= x ** (a * b)", F, F, F, requires=("mul",))
def pow_test_power_of_power(w: LibraryAdapter, x: int, a: int, b: int) -> None:
    require(x > ZERO_FP)
    fmt = w.fmt
    a_b = w.mul(a, b).unwrap()
    x_a = w.pow(x, a).unwrap()
    require(x_a > ZERO_FP)
    left = w.pow(x_a, b).unwrap()
    right = w.pow(x, a_b).unwrap()
    # The error of x ** a is amplified b times by the outer power.
    digits = _agreement_digits(fmt, x_a, left, right,
                               rounding=abs(b) // fmt.one + 1,
                               error_ulps=_pow_error_ulps(fmt, a_b, b, abs(a * b) // fmt.one))
    check_that(equal_most_significant_digits_within_precision(left, right, digits),
               "(x ** a) ** b must equal x ** (a * b)",
               x=x, a=a, b=b, left=left, right=right, digits=digits)


@prop("pow", "distributive", "(x * y) ** a ~= x ** a * y ** a", F, F, F, requires=("mul",))
def pow_test_distributive(w: LibraryAdapter, x: int, y: int, a: int) -> None:
    require(x > ZERO_FP and y > ZERO_FP)
    fmt = w.fmt
    x_y = w.mul(x, y).unwrap()
    require(x_y > ZERO_FP)
    x_a = w.pow(x, a).unwrap()
    y_a = w.pow(y, a).unwrap()
    require(x_a > ZERO_FP and y_a > ZERO_FP)
    left = w.pow(x_y, a).unwrap()
    right = w.mul(x_a, y_a).unwrap()
    digits = _agreement_digits(fmt, x, y, x_a, y_a, x_y, left, right,
                               rounding=abs(a) // fmt.one + 1,
                               error_ulps=_pow_error_ulps(fmt, a, a, a))
    check_that(equal_most_significant_digits_within_precision(left, right, digits),
               "power must distribute over multiplication",
               x=x, y=y, a=a, left=left, right=right, digits=digits)


@prop("pow", "half_exponent", "x ** 0.5 ~= sqrt(x)", F, requires=("sqrt",))
def pow_test_half_exponent(w: LibraryAdapter, x: int) -> None:
    fmt = w.fmt
    require(ZERO_FP < x <= fmt.max_permitted_sqrt)
    root = w.sqrt(x).expect("sqrt of a permitted value must not fail", x=x)
    half = w.pow(x, fmt.one // 2).unwrap()
    check_that(equal_within_tolerance(root, half, fmt.one // HALF_EXPONENT_TOLERANCE, fmt.one),
               "x ** 0.5 must match sqrt(x)", x=x, sqrt=root, pow=half)


@prop("pow", "values", "powers of values above one move away from one with the exponent's sign",
      F, F)
def pow_test_values(w: LibraryAdapter, x: int, y: int) -> None:
    require(x > ZERO_FP)
    one = w.fmt.one
    result = w.pow(x, y).unwrap()
    if (x >= one) == (y >= ZERO_FP):
        check_that(result >= one, "x ** y must be at least one", x=x, y=y, result=result)
    else:
        check_that(result <= one, "x ** y must be at most one", x=x, y=y, result=result)


@prop("pow", "sign", "positive bases have non-negative powers", F, F)
def pow_test_sign(w: LibraryAdapter, x: int, y: int) -> None:
    require(x > ZERO_FP)
    result = w.pow(x, y).unwrap()
    check_that(result >= ZERO_FP, "a positive base must give a non-negative power",
               x=x, y=y, result=result)


@prop("pow", "maximum_base", "MAX ** y fails for y > 1", F)
def pow_test_maximum_base(w: LibraryAdapter, y: int) -> None:
    require(y > w.fmt.one)
    result = w.pow(w.fmt.max_raw, y)
    check_that(result.failed, "MAX ** y must overflow", y=y, result=result)


@prop("pow", "high_exponent", "huge exponents overflow above two and vanish below one half", F)
def pow_test_high_exponent(w: LibraryAdapter, x: int) -> None:
    one = w.fmt.one
    y = 10**30 * one
    result = w.pow(x, y)
    if x >= 2 * one:
        check_that(result.failed, "x >= 2 must overflow", x=x, result=result)
    elif x == one:
        check_that(result.ok and result.value == one, "1 ** y must stay one", x=x, result=result)
    elif ZERO_FP < x <= one // 2:
        # Reaching zero through the inverse of an overflowing power fails instead.
        check_that(result.failed or result.value == ZERO_FP, "x <= 1/2 must vanish",
                   x=x, result=result)
    else:
        require(False)


# ===================================================================
# POWER (integer exponent)
# ===================================================================

def _powu_rounding(n: int) -> int:
    """Truncations of a square-and-multiply chain for exponent n, amplified."""
    return 2 * (n + 1) * (n + 1).bit_length()


@prop("powu", "zero_exponent", "x ** 0 == 1", F)
def powu_test_zero_exponent(w: LibraryAdapter, x: int) -> None:
    result = w.powu(x, 0).expect("x ** 0 must not fail", x=x)
    check_that(result == w.fmt.one, "x ** 0 must be one", x=x, result=result)


@prop("powu", "zero_base", "0 ** n == 0 for n > 0", E)
def powu_test_zero_base(w: LibraryAdapter, n: int) -> None:
    result = w.powu(ZERO_FP, n).expect("0 ** n must not fail", n=n)
    expected = w.fmt.one if n == 0 else ZERO_FP
    check_that(result == expected, "0 ** n must be zero for positive n", n=n, result=result)


@prop("powu", "one_exponent", "x ** 1 == x", F)
def powu_test_one_exponent(w: LibraryAdapter, x: int) -> None:
    _require_magnitude(w, x)
    result = w.powu(x, 1).expect("x ** 1 must not fail", x=x)
    check_that(result == x, "x ** 1 must be x", x=x, result=result)


@prop("powu", "base_one", "1 ** n == 1", E)
def powu_test_base_one(w: LibraryAdapter, n: int) -> None:
    result = w.powu(w.fmt.one, n).expect("1 ** n must not fail", n=n)
    check_that(result == w.fmt.one, "1 ** n must be one", n=n, result=result)


@prop("powu", "product_same_base", "x ** a * x ** b ~= x ** (a + b)", F, E, E, requires=("mul",))
def powu_test_product_same_base(w: LibraryAdapter, x: int, a: int, b: int) -> None:
    x_a = w.powu(x, a).unwrap()
    x_b = w.powu(x, b).unwrap()
    x_ab = w.powu(x, a + b).unwrap()
    product = w.mul(x_a, x_b).unwrap()
    digits = _agreement_digits(w.fmt, x_a, x_b, x_ab, product, rounding=_powu_rounding(a + b),
                               error_ulps=_powu_rounding(a + b))
    check_that(equal_most_significant_digits_within_precision(product, x_ab, digits),
               "x ** a * x ** b must equal x ** (a + b)",
               x=x, a=a, b=b, left=product, right=x_ab, digits=digits)


@prop("powu", "power_of_power", "(x ** a) ** b ~= x ** (a * b)", F, E, E)
def powu_test_power_of_power(w: LibraryAdapter, x: int, a: int, b: int) -> None:
    x_a = w.powu(x, a).unwrap()
    left = w.powu(x_a, b).unwrap()
    right = w.powu(x, a * b).unwrap()
    amplification = 3 * _powu_rounding(a * b)
    digits = _agreement_digits(w.fmt, x_a, left, right, rounding=amplification,
                               error_ulps=amplification)
    check_that(equal_most_significant_digits_within_precision(left, right, digits),
               "(x ** a) ** b must equal x ** (a * b)",
               x=x, a=a, b=b, left=left, right=right, digits=digits)


@prop("powu", "distributive", "(x * y) ** n ~= x ** n * y ** n", F, F, E, requires=("mul",))
def powu_test_distributive(w: LibraryAdapter, x: int, y: int, n: int) -> None:
    x_y = w.mul(x, y).unwrap()
    x_n = w.powu(x, n).unwrap()
    y_n = w.powu(y, n).unwrap()
    left = w.powu(x_y, n).unwrap()
    right = w.mul(x_n, y_n).unwrap()
    amplification = 3 * _powu_rounding(n)
    digits = _agreement_digits(w.fmt, x, y, x_n, y_n, x_y, left, right,
                               rounding=amplification,
                               error_ulps=amplification)
    check_that(equal_most_significant_digits_within_precision(left, right, digits),
               "power must distribute over multiplication",
               x=x, y=y, n=n, left=left, right=right, digits=digits)


@prop("powu", "values", "|x| >= 1 implies |x ** n| >= 1, else |x ** n| <= 1", F, E)
def powu_test_values(w: LibraryAdapter, x: int, n: int) -> None:
    one = w.fmt.one
    result = abs(w.powu(x, n).unwrap())
    if abs(x) >= one:
        check_that(result >= one, "|x| >= 1 implies |x ** n| >= 1", x=x, n=n, result=result)
    else:
        check_that(result <= one, "|x| < 1 implies |x ** n| <= 1", x=x, n=n, result=result)


@prop("powu", "sign", "even powers are non-negative, odd powers keep the sign of x", F, E)
def powu_test_sign(w: LibraryAdapter, x: int, n: int) -> None:
    result = w.powu(x, n).unwrap()
    if n % 2 == 0:
        check_that(result >= ZERO_FP, "even powers must be non-negative", x=x, n=n, result=result)
    else:
        require(result != ZERO_FP)
        check_that((result > 0) == (x > 0), "odd powers must keep the sign of the base",
                   x=x, n=n, result=result)


@prop("powu", "maximum_base", "MAX ** n fails for n > 1", E)
def powu_test_maximum_base(w: LibraryAdapter, n: int) -> None:
    require(n > 1)
    result = w.powu(w.fmt.max_raw, n)
    check_that(result.failed, "MAX ** n must overflow", n=n, result=result)


@prop("powu", "high_exponent", "x ** 2**128 is 0 below one, 1 at one, fails above", F)
def powu_test_high_exponent(w: LibraryAdapter, x: int) -> None:
    one = w.fmt.one
    result = w.powu(x, 1 << 128)
    if abs(x) < one:
        check_that(result.ok and result.value == ZERO_FP, "|x| < 1 must vanish", x=x, result=result)
    elif abs(x) == one:
        check_that(result.ok and result.value == one, "|x| == 1 must stay one", x=x, result=result)
    else:
        check_that(result.failed, "|x| > 1 must overflow", x=x, result=result)


# ===================================================================
# SQUARE ROOT
# ===================================================================

@prop("sqrt", "inverse_mul", "sqrt(x) * sqrt(x) ~= x", F, requires=("mul",))
def sqrt_test_inverse_mul(w: LibraryAdapter, x: int) -> None:
    require(ZERO_FP <= x <= w.fmt.max_permitted_sqrt)
    s = w.sqrt(x).expect("sqrt of a permitted value must not fail", x=x)
    square = w.mul(s, s).expect("sqrt(x) ** 2 must not fail", x=x)
    bound = 2 * s // w.fmt.one + 2
    check_that(abs(square - x) <= bound, "sqrt(x) * sqrt(x) must be x", x=x, sqrt=s, result=square)


@prop("sqrt", "inverse_pow", "sqrt(x) ** 2 ~= x", F, requires=("powu",))
def sqrt_test_inverse_pow(w: LibraryAdapter, x: int) -> None:
    require(ZERO_FP <= x <= w.fmt.max_permitted_sqrt)
    s = w.sqrt(x).expect("sqrt of a permitted value must not fail", x=x)
    square = w.powu(s, 2).expect("sqrt(x) ** 2 must not fail", x=x)
    bound = 2 * s // w.fmt.one + 2
    check_that(abs(square - x) <= bound, "sqrt(x) ** 2 must be x", x=x, sqrt=s, result=square)


@prop("sqrt", "distributive", "sqrt(x * y) ~= sqrt(x) * sqrt(y)", F, F, requires=("mul",))
def sqrt_test_distributive(w: LibraryAdapter, x: int, y: int) -> None:
    require(x >= ZERO_FP and y >= ZERO_FP)
    x_y = w.mul(x, y).unwrap()
    sqrt_x = w.sqrt(x).unwrap()
    sqrt_y = w.sqrt(y).unwrap()
    left = w.sqrt(x_y).unwrap()
    right = w.mul(sqrt_x, sqrt_y).unwrap()
    digits = _agreement_digits(w.fmt, x_y, sqrt_x, sqrt_y, left, right)
    check_that(equal_most_significant_digits_within_precision(left, right, digits),
               "square root must distribute over multiplication",
               x=x, y=y, left=left, right=right, digits=digits)


@prop("sqrt", "zero", "sqrt(0) == 0")
def sqrt_test_zero(w: LibraryAdapter) -> None:
    result = w.sqrt(ZERO_FP).expect("sqrt(0) must not fail")
    check_that(result == ZERO_FP, "sqrt(0) must be zero", result=result)


@prop("sqrt", "maximum", "sqrt is exact at its largest permitted input and fails above")
def sqrt_test_maximum(w: LibraryAdapter) -> None:
    fmt = w.fmt
    limit = fmt.max_permitted_sqrt
    result = w.sqrt(limit).expect("sqrt at the largest permitted input must not fail")
    scaled = limit * fmt.one
    check_that(result * result <= scaled < (result + 1) ** 2,
               "sqrt must be the floor of the true root", x=limit, result=result)
    if limit < fmt.max_raw:
        check_that(w.sqrt(limit + 1).failed, "sqrt above the largest permitted input must fail",
                   x=limit + 1)


@prop("sqrt", "minimum", "sqrt(MIN) fails", signed=True)
def sqrt_test_minimum(w: LibraryAdapter) -> None:
    check_that(w.sqrt(w.fmt.min_raw).failed, "sqrt(MIN) must fail")


@prop("sqrt", "negative", "sqrt(x) fails for x < 0", F, signed=True)
def sqrt_test_negative(w: LibraryAdapter, x: int) -> None:
    require(x < ZERO_FP)
    result = w.sqrt(x)
    check_that(result.failed, "square root of a negative value must fail", x=x, result=result)


# ===================================================================
# LOGARITHMS
# ===================================================================

# log10 has no exp10 counterpart; its inverse is pow(10, y).
_LOG_INVERSES = {"log2": "exp2", "ln": "exp", "log10": "pow"}


def _log_law_checks(op: str, base: int | None) -> None:
    """Register the checks shared by log2, ln and log10."""

    @prop(op, "distributive_mul", f"{op}(x * y) ~= {op}(x) + {op}(y)", F, F,
          requires=("mul", "add"))
    def distributive_mul(w: LibraryAdapter, x: int, y: int) -> None:
        fmt = w.fmt
        floor = ZERO_FP if fmt.signed else fmt.one
        require(x > floor and y > floor)
        require(significant_digits_after_mult(x, y, fmt) >= REQUIRED_SIGNIFICANT_DIGITS)
        x_y = w.mul(x, y).unwrap()
        require(x_y > floor)
        log = getattr(w, op)
        left = log(x_y).unwrap()
        right = w.add(log(x).unwrap(), log(y).unwrap()).unwrap()
        check_that(_close(left, right, _log_bound(fmt, x_y, logs=3)),
                   f"{op} must turn products into sums", x=x, y=y, left=left, right=right)

    @prop(op, "power", f"{op}(x ** n) ~= n * {op}(x)", F, E, requires=("powu", "mul"))
    def power(w: LibraryAdapter, x: int, n: int) -> None:
        fmt = w.fmt
        require(x >= (ZERO_FP + 1 if fmt.signed else fmt.one))
        x_n = w.powu(x, n).unwrap()
        require(x_n > ZERO_FP)
        log = getattr(w, op)
        left = log(x_n).unwrap()
        right = w.mul(n * fmt.one, log(x).unwrap()).unwrap()
        powu_error = 2 * _powu_rounding(n) * (fmt.one // x_n + 1)
        bound = _log_bound(fmt, x_n, logs=n + 1, extra=powu_error)
        check_that(_close(left, right, bound), f"{op} must turn powers into products",
                   x=x, n=n, left=left, right=right)

    exp_op = _LOG_INVERSES[op]

    @prop(op, "inverse", f"{exp_op}({op}(x)) ~= x", F, requires=(exp_op,))
    def inverse(w: LibraryAdapter, x: int) -> None:
        fmt = w.fmt
        require(x > ZERO_FP)
        log = getattr(w, op)(x).unwrap()
        if op == "log10":
            back = w.pow(10 * fmt.one, log).unwrap()
            error_ulps = _pow_error_ulps(fmt, log) + 4 * LOG_ERROR_ULPS
        else:
            back = getattr(w, exp_op)(log).unwrap()
            error_ulps = 4 * LOG_ERROR_ULPS
        digits = _agreement_digits(fmt, x, back, error_ulps=error_ulps)
        check_that(equal_most_significant_digits_within_precision(back, x, digits),
                   f"{exp_op} must undo {op}", x=x, log=log, result=back, digits=digits)

    @prop(op, "zero", f"{op}(0) fails")
    def zero(w: LibraryAdapter) -> None:
        check_that(getattr(w, op)(ZERO_FP).failed, f"{op}(0) must fail")

    @prop(op, "one", f"{op}(1) == 0")
    def one(w: LibraryAdapter) -> None:
        result = getattr(w, op)(w.fmt.one).expect(f"{op}(1) must not fail")
        check_that(result == ZERO_FP, f"{op}(1) must be zero", result=result)

    @prop(op, "maximum", f"{op}(MAX) matches the exact logarithm")
    def maximum(w: LibraryAdapter) -> None:
        fmt = w.fmt
        result = getattr(w, op)(fmt.max_raw).expect(f"{op}(MAX) must not fail")
        expected = _exact_log(fmt, fmt.max_raw, base)
        check_that(abs(result - expected) <= LOG_ERROR_ULPS, f"{op}(MAX) is off",
                   result=result, expected=expected)

    @prop(op, "minimum", f"{op}(epsilon) matches the exact logarithm", signed=True)
    def minimum(w: LibraryAdapter) -> None:
        fmt = w.fmt
        result = getattr(w, op)(fmt.epsilon).expect(f"{op}(epsilon) must not fail")
        expected = _exact_log(fmt, fmt.epsilon, base)
        check_that(abs(result - expected) <= LOG_ERROR_ULPS, f"{op}(epsilon) is off",
                   result=result, expected=expected)

    @prop(op, "negative", f"{op}(x) fails for x < 0", F, signed=True)
    def negative(w: LibraryAdapter, x: int) -> None:
        require(x < ZERO_FP)
        result = getattr(w, op)(x)
        check_that(result.failed, f"{op} of a negative value must fail", x=x, result=result)

    @prop(op, "below_one", f"{op}(x) fails for x < 1", F, signed=False)
    def below_one(w: LibraryAdapter, x: int) -> None:
        require(x < w.fmt.one)
        result = getattr(w, op)(x)
        check_that(result.failed, f"unsigned {op} below one must fail", x=x, result=result)


_log_law_checks("log2", 2)
_log_law_checks("ln", None)
_log_law_checks("log10", 10)


@prop("log10", "powers_of_ten", "log10(10 ** k) is exact")
def log10_test_powers_of_ten(w: LibraryAdapter) -> None:
    fmt = w.fmt
    start = 0 if fmt.signed else fmt.fractional
    for k in range(start, _digits(fmt.max_raw)):
        result = w.log10(10**k).expect("log10 of a power of ten must not fail", k=k)
        expected = (k - fmt.fractional) * fmt.one
        check_that(result == expected, "log10 of a power of ten must be exact",
                   k=k, result=result, expected=expected)


# ===================================================================
# EXPONENTIALS
# ===================================================================

@prop("exp2", "equivalence_powu", "exp2(n) == 2 ** n for integer n", E, requires=("powu",))
def exp2_test_equivalence_powu(w: LibraryAdapter, n: int) -> None:
    fmt = w.fmt
    require(n * fmt.one <= fmt.max_permitted_exp2)
    exp2_n = w.exp2(n * fmt.one).expect("exp2 of a permitted integer must not fail", n=n)
    powu_2_n = w.powu(2 * fmt.one, n).expect("2 ** n must not fail", n=n)
    check_that(exp2_n == powu_2_n, "exp2(n) must equal 2 ** n", n=n, exp2=exp2_n, powu=powu_2_n)


@prop("exp", "equivalence_exp2", "exp(x) ~= exp2(x * log2(e))", F, requires=("exp2", "mul"))
def exp_test_equivalence_exp2(w: LibraryAdapter, x: int) -> None:
    fmt = w.fmt
    exp_x = w.exp(x).unwrap()
    exp2_x = w.exp2(w.mul(x, LOG2_E_18).unwrap()).unwrap()
    # log2(e) carries 18 digits, so the exponent is off by about |x| ulps.
    digits = _agreement_digits(fmt, exp_x, exp2_x, error_ulps=abs(x) // fmt.one + 2)
    check_that(equal_most_significant_digits_within_precision(exp_x, exp2_x, digits),
               "exp(x) must equal exp2(x * log2(e))", x=x, exp=exp_x, exp2=exp2_x, digits=digits)


def _exp_law_checks(op: str, log_op: str) -> None:
    """Register the checks shared by exp2 and exp."""

    def limit(fmt: FixedPointFormat) -> int:
        return getattr(fmt, f"max_permitted_{op}")

    @prop(op, "inverse", f"{log_op}({op}(x)) ~= x", F, requires=(log_op,))
    def inverse(w: LibraryAdapter, x: int) -> None:
        e = getattr(w, op)(x).unwrap()
        require(e > ZERO_FP)
        back = getattr(w, log_op)(e).unwrap()
        check_that(_close(back, x, _log_bound(w.fmt, e, extra=4)),
                   f"{log_op} must invert {op}", x=x, exp=e, result=back)

    @prop(op, "negative_exponent", f"{op}(-x) ~= 1 / {op}(x)", F, requires=("inv",), signed=True)
    def negative_exponent(w: LibraryAdapter, x: int) -> None:
        _require_magnitude(w, x)
        fn = getattr(w, op)
        e = fn(x).unwrap()
        require(e != ZERO_FP)
        left = fn(-x).unwrap()
        right = w.inv(e).unwrap()
        digits = _agreement_digits(w.fmt, e, left, right)
        check_that(equal_most_significant_digits_within_precision(left, right, digits),
                   f"{op}(-x) must be the inverse of {op}(x)",
                   x=x, left=left, right=right, digits=digits)

    @prop(op, "maximum", f"{op}(x) fails above the largest permitted argument", F)
    def maximum(w: LibraryAdapter, x: int) -> None:
        require(x > limit(w.fmt))
        result = getattr(w, op)(x)
        check_that(result.failed, f"{op} above its domain must fail", x=x, result=result)

    @prop(op, "maximum_permitted", f"{op} succeeds at its largest permitted argument")
    def maximum_permitted(w: LibraryAdapter) -> None:
        fn = getattr(w, op)
        x = limit(w.fmt)
        result = fn(x)
        check_that(result.ok, f"{op} at the largest permitted argument must not fail",
                   x=x, result=result)
        check_that(fn(x + 1).failed, f"{op} just above the largest permitted argument must fail",
                   x=x + 1)

    @prop(op, "minimum", f"{op} underflows to zero below its smallest permitted argument")
    def minimum(w: LibraryAdapter) -> None:
        fmt = w.fmt
        fn = getattr(w, op)
        if not fmt.signed:
            result = fn(ZERO_FP).expect(f"{op}(0) must not fail")
            check_that(result == fmt.one, f"{op}(0) must be one", result=result)
            return
        for x in (fmt.min_raw, getattr(fmt, f"min_permitted_{op}") - 1):
            result = fn(x).expect(f"{op} of a very negative argument must not fail", x=x)
            check_that(result == ZERO_FP, f"{op} must underflow to zero", x=x, result=result)


_exp_law_checks("exp2", "log2")
_exp_law_checks("exp", "ln")


# ===================================================================
# CONVERSIONS
# ===================================================================

@prop("from_int", "round_trip", "to_int(from_int(n)) == n", I, requires=("to_int",))
def from_int_test_round_trip(w: LibraryAdapter, n: int) -> None:
    raw = w.from_int(n).unwrap()
    back = w.to_int(raw).expect("to_int must not fail", n=n)
    check_that(back == n, "integer conversion must round trip", n=n, raw=raw, result=back)


@prop("from_int", "range", "from_int fails exactly outside the integer range", I)
def from_int_test_range(w: LibraryAdapter, n: int) -> None:
    fmt = w.fmt
    result = w.from_int(n)
    if fmt.integer_min <= n <= fmt.integer_max:
        check_that(result.ok and result.value == n * fmt.one,
                   "in-range integers must convert exactly", n=n, result=result)
    else:
        check_that(result.failed, "out-of-range integers must fail", n=n, result=result)


@prop("to_int", "within_one", "to_int rounds toward zero", F, requires=("from_int",))
def to_int_test_within_one(w: LibraryAdapter, x: int) -> None:
    n = w.to_int(x).expect("to_int must not fail", x=x)
    raw = w.from_int(n).expect("from_int(to_int(x)) must not fail", x=x)
    check_that(abs(x - raw) < w.fmt.one and abs(raw) <= abs(x),
               "to_int must truncate toward zero", x=x, n=n, raw=raw)
