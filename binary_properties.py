"""
Property suite for signed 64.64 binary fixed-point libraries.

Every check receives a ``LibraryAdapter`` plus raw fuzzed arguments.
Algebraic laws are asserted exactly where the format admits it and
otherwise within a tolerance derived from the operands: absolute bounds
in raw units for additive error, most-significant-bit agreement for
relative error.  Inputs whose operations revert, or whose results carry
too few significant bits for the law to mean anything, are discarded.
"""

from __future__ import annotations

from formats import LOG2_E_X128, Q64X64
from invariants import ArgKind, PropertySuite, check_that, require
from magnitude import significant_bits_after_mult
from precision import (
    equal_most_significant_bits_within_precision,
    equal_within_bit_precision,
)
from wrappers import FailureKind, LibraryAdapter, Outcome

F = ArgKind.FIXED
E = ArgKind.EXPONENT
I = ArgKind.INTEGER

ZERO_FP = 0
ONE_FP = Q64X64.one
TWO_FP = 2 * ONE_FP
EPSILON = Q64X64.epsilon
MIN_64X64 = Q64X64.min_raw
MAX_64X64 = Q64X64.max_raw

# Multiplicative and transcendental laws are discarded below this many
# significant bits.
REQUIRED_SIGNIFICANT_BITS = 10

# ln(2) scaled by 2**128, for expected values.
LN_2_X128 = 0xB17217F7D1CF79ABC9E3B39803F2F6AF

SUITE = PropertySuite(name=Q64X64.name)
prop = SUITE.property


def build_binary_suite() -> PropertySuite:
    """The complete 64.64 suite."""
    return PropertySuite(name=SUITE.name, properties=list(SUITE.properties))


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _same_outcome(a: Outcome, b: Outcome) -> bool:
    if a.ok != b.ok:
        return False
    return not a.ok or a.value == b.value


def _relative_bits(*raws: int, slack: int = 4) -> int:
    """Bits of agreement expected from results with the given magnitudes."""
    budget = min(abs(r).bit_length() for r in raws) - slack
    require(budget >= REQUIRED_SIGNIFICANT_BITS)
    return budget


def _bits_for(bound: int) -> int:
    """Smallest shift such that any difference <= bound shifts to zero."""
    return bound.bit_length()


def _log_error_bits(rounded_input: int, extra_ulps: int = 0) -> int:
    """
    Tolerance for a logarithm of a rounded value: a few ulps from the
    logarithm itself plus the input's relative rounding error
    (1 / |raw|) scaled to the 64.64 grid.
    """
    return _bits_for(8 + extra_ulps + (2 << 64) // abs(rounded_input))


def _significant_product(x: int, y: int) -> None:
    require(significant_bits_after_mult(x, y) >= REQUIRED_SIGNIFICANT_BITS)


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
    x_y = w.add(x, y).unwrap()
    y_z = w.add(y, z).unwrap()
    xy_z = w.add(x_y, z).unwrap()
    x_yz = w.add(x, y_z).expect("(x + y) + z is representable, x + (y + z) must be too",
                                x=x, y=y, z=z)
    check_that(xy_z == x_yz, "addition must be associative",
               x=x, y=y, z=z, xy_z=xy_z, x_yz=x_yz)


@prop("add", "identity", "x + 0 == x and x + (-x) == 0", F, requires=("neg",))
def add_test_identity(w: LibraryAdapter, x: int) -> None:
    x_0 = w.add(x, ZERO_FP).expect("adding zero must not fail", x=x)
    check_that(x_0 == x, "zero must be the additive identity", x=x, result=x_0)
    if x != MIN_64X64:
        neg_x = w.neg(x).expect("negation must not fail", x=x)
        x_neg_x = w.add(x, neg_x).expect("adding the opposite must not fail", x=x)
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
        check_that(Q64X64.contains(result.value), "sum must be within range",
                   x=x, y=y, result=result.value)


@prop("add", "maximum", "MAX + 0 == MAX and MAX + 1 fails")
def add_test_maximum_value(w: LibraryAdapter) -> None:
    result = w.add(MAX_64X64, ZERO_FP).expect("MAX + 0 must not fail")
    check_that(result == MAX_64X64, "MAX + 0 must be MAX", result=result)
    check_that(w.add(MAX_64X64, ONE_FP).failed, "MAX + 1 must fail")


@prop("add", "minimum", "MIN + 0 == MIN and MIN + (-1) fails")
def add_test_minimum_value(w: LibraryAdapter) -> None:
    result = w.add(MIN_64X64, ZERO_FP).expect("MIN + 0 must not fail")
    check_that(result == MIN_64X64, "MIN + 0 must be MIN", result=result)
    check_that(w.add(MIN_64X64, -ONE_FP).failed, "MIN + (-1) must fail")


# ===================================================================
# SUBTRACTION
# ===================================================================

@prop("sub", "equivalence_to_addition", "x - y == x + (-y)", F, F, requires=("add", "neg"))
def sub_test_equivalence_to_addition(w: LibraryAdapter, x: int, y: int) -> None:
    neg_y = w.neg(y).unwrap()
    x_minus_y = w.sub(x, y).unwrap()
    x_plus_neg_y = w.add(x, neg_y).expect("x + (-y) must not fail when x - y succeeds", x=x, y=y)
    check_that(x_minus_y == x_plus_neg_y, "subtraction must equal addition of the opposite",
               x=x, y=y, sub=x_minus_y, add=x_plus_neg_y)


@prop("sub", "non_commutative", "x - y == -(y - x)", F, F)
def sub_test_non_commutative(w: LibraryAdapter, x: int, y: int) -> None:
    x_y = w.sub(x, y).unwrap()
    y_x = w.sub(y, x).unwrap()
    check_that(x_y == -y_x, "x - y must be the opposite of y - x", x=x, y=y, x_y=x_y, y_x=y_x)


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
        check_that(Q64X64.contains(result.value), "difference must be within range",
                   x=x, y=y, result=result.value)


@prop("sub", "maximum", "MAX - 0 == MAX and MAX - (-1) fails")
def sub_test_maximum_value(w: LibraryAdapter) -> None:
    result = w.sub(MAX_64X64, ZERO_FP).expect("MAX - 0 must not fail")
    check_that(result == MAX_64X64, "MAX - 0 must be MAX", result=result)
    check_that(w.sub(MAX_64X64, -ONE_FP).failed, "MAX - (-1) must fail")


@prop("sub", "minimum", "MIN - 0 == MIN and MIN - 1 fails")
def sub_test_minimum_value(w: LibraryAdapter) -> None:
    result = w.sub(MIN_64X64, ZERO_FP).expect("MIN - 0 must not fail")
    check_that(result == MIN_64X64, "MIN - 0 must be MIN", result=result)
    check_that(w.sub(MIN_64X64, ONE_FP).failed, "MIN - 1 must fail")


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
    _significant_product(x, y)
    _significant_product(y, z)
    xy_z = w.mul(w.mul(x, y).unwrap(), z).unwrap()
    x_yz = w.mul(x, w.mul(y, z).unwrap()).unwrap()
    # Each side carries one rounding of the inner product scaled by the
    # outer operand, plus one rounding of its own.
    bound = (abs(x) + abs(z)) // ONE_FP + 3
    check_that(equal_within_bit_precision(xy_z, x_yz, _bits_for(bound)),
               "multiplication must be associative", x=x, y=y, z=z, xy_z=xy_z, x_yz=x_yz)


@prop("mul", "distributive", "x * (y + z) ~= x * y + x * z", F, F, F, requires=("add",))
def mul_test_distributive(w: LibraryAdapter, x: int, y: int, z: int) -> None:
    y_plus_z = w.add(y, z).unwrap()
    left = w.mul(x, y_plus_z).unwrap()
    x_y = w.mul(x, y).unwrap()
    x_z = w.mul(x, z).unwrap()
    right = w.add(x_y, x_z).unwrap()
    # Three independent roundings of at most one unit each.
    check_that(equal_within_bit_precision(left, right, 2),
               "multiplication must distribute over addition",
               x=x, y=y, z=z, left=left, right=right)


@prop("mul", "identity", "x * 1 == x and x * 0 == 0", F)
def mul_test_identity(w: LibraryAdapter, x: int) -> None:
    x_1 = w.mul(x, ONE_FP).expect("x * 1 must not fail", x=x)
    check_that(x_1 == x, "one must be the multiplicative identity", x=x, result=x_1)
    x_0 = w.mul(x, ZERO_FP).expect("x * 0 must not fail", x=x)
    check_that(x_0 == ZERO_FP, "x * 0 must be zero", x=x, result=x_0)


@prop("mul", "values", "|y| >= 1 moves x away from zero, |y| < 1 toward it", F, F)
def mul_test_values(w: LibraryAdapter, x: int, y: int) -> None:
    require(x != ZERO_FP and y != ZERO_FP)
    x_y = w.mul(x, y).unwrap()
    if x >= ZERO_FP:
        if y >= ONE_FP:
            check_that(x_y >= x, "x >= 0, y >= 1 implies x * y >= x", x=x, y=y, result=x_y)
        else:
            check_that(x_y <= x, "x >= 0, y < 1 implies x * y <= x", x=x, y=y, result=x_y)
    else:
        if y >= ONE_FP:
            check_that(x_y <= x, "x < 0, y >= 1 implies x * y <= x", x=x, y=y, result=x_y)
        else:
            check_that(x_y >= x, "x < 0, y < 1 implies x * y >= x", x=x, y=y, result=x_y)


@prop("mul", "range", "a successful product lies in [MIN, MAX]", F, F)
def mul_test_range(w: LibraryAdapter, x: int, y: int) -> None:
    result = w.mul(x, y)
    if result.ok:
        check_that(Q64X64.contains(result.value), "product must be within range",
                   x=x, y=y, result=result.value)


@prop("mul", "maximum", "MAX * 1 == MAX and MAX * 2 fails")
def mul_test_maximum_value(w: LibraryAdapter) -> None:
    result = w.mul(MAX_64X64, ONE_FP).expect("MAX * 1 must not fail")
    check_that(result == MAX_64X64, "MAX * 1 must be MAX", result=result)
    check_that(w.mul(MAX_64X64, TWO_FP).failed, "MAX * 2 must fail")


@prop("mul", "minimum", "MIN * 1 == MIN and MIN * 2 fails")
def mul_test_minimum_value(w: LibraryAdapter) -> None:
    result = w.mul(MIN_64X64, ONE_FP).expect("MIN * 1 must not fail")
    check_that(result == MIN_64X64, "MIN * 1 must be MIN", result=result)
    check_that(w.mul(MIN_64X64, TWO_FP).failed, "MIN * 2 must fail")


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
    result = w.div(ZERO_FP, y).expect("0 / y must not fail", y=y)
    check_that(result == ZERO_FP, "0 / y must be zero", y=y, result=result)


@prop("div", "negative_divisor", "x / (-y) == -(x / y)", F, F, requires=("neg",))
def div_test_negative_divisor(w: LibraryAdapter, x: int, y: int) -> None:
    require(y != ZERO_FP and y != MIN_64X64)
    x_y = w.div(x, y).unwrap()
    x_neg_y = w.div(x, w.neg(y).unwrap()).unwrap()
    check_that(x_neg_y == -x_y, "dividing by -y must negate the quotient",
               x=x, y=y, x_y=x_y, x_neg_y=x_neg_y)


@prop("div", "identity", "x / 1 == x and x / x == 1", F)
def div_test_division_identity(w: LibraryAdapter, x: int) -> None:
    x_1 = w.div(x, ONE_FP).expect("x / 1 must not fail", x=x)
    check_that(x_1 == x, "x / 1 must be x", x=x, result=x_1)
    if x != ZERO_FP:
        x_x = w.div(x, x).expect("x / x must not fail", x=x)
        check_that(x_x == ONE_FP, "x / x must be one", x=x, result=x_x)


@prop("div", "values", "|y| >= 1 implies |x / y| <= |x|, else |x / y| >= |x|", F, F)
def div_test_values(w: LibraryAdapter, x: int, y: int) -> None:
    require(y != ZERO_FP)
    x_y = abs(w.div(x, y).unwrap())
    if abs(y) >= ONE_FP:
        check_that(x_y <= abs(x), "dividing by |y| >= 1 must not grow |x|", x=x, y=y, result=x_y)
    else:
        check_that(x_y >= abs(x), "dividing by |y| < 1 must not shrink |x|", x=x, y=y, result=x_y)


@prop("div", "range", "a successful quotient lies in [MIN, MAX]", F, F)
def div_test_range(w: LibraryAdapter, x: int, y: int) -> None:
    result = w.div(x, y)
    if result.ok:
        check_that(Q64X64.contains(result.value), "quotient must be within range",
                   x=x, y=y, result=result.value)


@prop("div", "maximum_denominator", "x / MAX succeeds with |result| <= 1", F)
def div_test_maximum_denominator(w: LibraryAdapter, x: int) -> None:
    result = w.div(x, MAX_64X64).expect("x / MAX must not fail", x=x)
    check_that(abs(result) <= ONE_FP, "x / MAX must be at most one in magnitude", x=x, result=result)


@prop("div", "maximum_numerator", "MAX / y fails exactly when |y| < 1", F)
def div_test_maximum_numerator(w: LibraryAdapter, y: int) -> None:
    require(y != ZERO_FP)
    result = w.div(MAX_64X64, y)
    if abs(y) < ONE_FP:
        check_that(result.failed, "MAX / y must fail for |y| < 1", y=y, result=result)
    else:
        check_that(result.ok, "MAX / y must not fail for |y| >= 1", y=y, result=result)


@prop("div", "minimum_numerator", "MIN / y fails exactly when |y| < 1 or y == -1", F)
def div_test_minimum_numerator(w: LibraryAdapter, y: int) -> None:
    require(y != ZERO_FP)
    result = w.div(MIN_64X64, y)
    if abs(y) < ONE_FP or y == -ONE_FP:
        check_that(result.failed, "MIN / y must fail when the quotient exceeds MAX", y=y, result=result)
    else:
        check_that(result.ok, "MIN / y must not fail", y=y, result=result)


# ===================================================================
# NEGATION
# ===================================================================

@prop("neg", "double_negation", "-(-x) == x and x + (-x) == 0", F, requires=("add",))
def neg_test_double_negation(w: LibraryAdapter, x: int) -> None:
    require(x != MIN_64X64)
    neg_x = w.neg(x).expect("negation must not fail", x=x)
    back = w.neg(neg_x).expect("double negation must not fail", x=x)
    check_that(back == x, "-(-x) must be x", x=x, result=back)
    total = w.add(x, neg_x).expect("x + (-x) must not fail", x=x)
    check_that(total == ZERO_FP, "x + (-x) must be zero", x=x, result=total)


@prop("neg", "zero", "-0 == 0")
def neg_test_zero(w: LibraryAdapter) -> None:
    result = w.neg(ZERO_FP).expect("negating zero must not fail")
    check_that(result == ZERO_FP, "-0 must be zero", result=result)


@prop("neg", "maximum", "-MAX == MIN + 1")
def neg_test_maximum(w: LibraryAdapter) -> None:
    result = w.neg(MAX_64X64).expect("negating MAX must not fail")
    check_that(result == MIN_64X64 + EPSILON, "-MAX must be MIN + epsilon", result=result)


@prop("neg", "minimum", "-MIN fails")
def neg_test_minimum(w: LibraryAdapter) -> None:
    result = w.neg(MIN_64X64)
    check_that(result.failed, "negating MIN must fail", result=result)


# ===================================================================
# ABSOLUTE VALUE
# ===================================================================

@prop("abs", "positive", "|x| >= 0", F)
def abs_test_positive(w: LibraryAdapter, x: int) -> None:
    result = w.abs(x).unwrap()
    check_that(result >= ZERO_FP, "absolute value must be non-negative", x=x, result=result)


@prop("abs", "negative", "|-x| == |x|", F, requires=("neg",))
def abs_test_negative(w: LibraryAdapter, x: int) -> None:
    require(x != MIN_64X64)
    abs_x = w.abs(x).expect("abs must not fail", x=x)
    abs_neg_x = w.abs(w.neg(x).unwrap()).expect("abs of -x must not fail", x=x)
    check_that(abs_x == abs_neg_x, "|-x| must equal |x|", x=x, abs_x=abs_x, abs_neg_x=abs_neg_x)


@prop("abs", "multiplicativeness", "|x * y| ~= |x| * |y|", F, F, requires=("mul",))
def abs_test_multiplicativeness(w: LibraryAdapter, x: int, y: int) -> None:
    abs_x = w.abs(x).unwrap()
    abs_y = w.abs(y).unwrap()
    abs_xy = w.abs(w.mul(x, y).unwrap()).unwrap()
    abs_x_abs_y = w.mul(abs_x, abs_y).unwrap()
    # A negative product rounds away from zero, a positive one toward it.
    check_that(equal_within_bit_precision(abs_xy, abs_x_abs_y, 1),
               "|x * y| must equal |x| * |y|", x=x, y=y, left=abs_xy, right=abs_x_abs_y)


@prop("abs", "subadditivity", "|x + y| <= |x| + |y|", F, F, requires=("add",))
def abs_test_subadditivity(w: LibraryAdapter, x: int, y: int) -> None:
    abs_x = w.abs(x).unwrap()
    abs_y = w.abs(y).unwrap()
    abs_sum = w.abs(w.add(x, y).unwrap()).unwrap()
    sum_abs = w.add(abs_x, abs_y).unwrap()
    check_that(abs_sum <= sum_abs, "|x + y| must not exceed |x| + |y|",
               x=x, y=y, abs_sum=abs_sum, sum_abs=sum_abs)


@prop("abs", "zero", "|0| == 0")
def abs_test_zero(w: LibraryAdapter) -> None:
    result = w.abs(ZERO_FP).expect("abs of zero must not fail")
    check_that(result == ZERO_FP, "|0| must be zero", result=result)


@prop("abs", "maximum", "|MAX| == MAX")
def abs_test_maximum(w: LibraryAdapter) -> None:
    result = w.abs(MAX_64X64).expect("abs of MAX must not fail")
    check_that(result == MAX_64X64, "|MAX| must be MAX", result=result)


@prop("abs", "minimum", "|MIN| fails")
def abs_test_minimum(w: LibraryAdapter) -> None:
    result = w.abs(MIN_64X64)
    check_that(result.failed, "abs of MIN must fail", result=result)


# ===================================================================
# INVERSE
# ===================================================================

@prop("inv", "double_inverse", "1 / (1 / x) ~= x", F)
def inv_test_double_inverse(w: LibraryAdapter, x: int) -> None:
    require(x != ZERO_FP)
    inv_x = w.inv(x).unwrap()
    require(abs(inv_x) >= 2)
    back = w.inv(inv_x).unwrap()
    # Truncating 1/x loses under one ulp; inverting again scales that
    # loss by x**2.
    bound = (2 * x * x >> 128) + 2
    check_that(equal_within_bit_precision(back, x, _bits_for(bound)),
               "inverting twice must give x back", x=x, inv_x=inv_x, result=back)


@prop("inv", "division", "1 / x == div(1, x)", F, requires=("div",))
def inv_test_division(w: LibraryAdapter, x: int) -> None:
    require(x != ZERO_FP)
    inv_x = w.inv(x).unwrap()
    div_1_x = w.div(ONE_FP, x).expect("1 / x must not fail when inv(x) succeeds", x=x)
    check_that(inv_x == div_1_x, "inverse must equal division of one", x=x, inv=inv_x, div=div_1_x)


@prop("inv", "division_noncommutativity", "1 / (x / y) ~= y / x", F, F, requires=("div",))
def inv_test_division_noncommutativity(w: LibraryAdapter, x: int, y: int) -> None:
    require(x != ZERO_FP and y != ZERO_FP)
    x_y = w.div(x, y).unwrap()
    require(abs(x_y) >= 2)
    y_x = w.div(y, x).unwrap()
    inv_x_y = w.inv(x_y).unwrap()
    bound = (2 * (abs(y_x) + 1) ** 2 >> 128) + 3
    check_that(equal_within_bit_precision(inv_x_y, y_x, _bits_for(bound)),
               "1 / (x / y) must equal y / x", x=x, y=y, left=inv_x_y, right=y_x)


@prop("inv", "multiplication", "1 / (x * y) ~= (1 / x) * (1 / y)", F, F, requires=("mul",))
def inv_test_multiplication(w: LibraryAdapter, x: int, y: int) -> None:
    require(x != ZERO_FP and y != ZERO_FP)
    inv_x = w.inv(x).unwrap()
    inv_y = w.inv(y).unwrap()
    x_y = w.mul(x, y).unwrap()
    require(x_y != ZERO_FP)
    left = w.inv(x_y).unwrap()
    right = w.mul(inv_x, inv_y).unwrap()
    bits = _relative_bits(left, right, inv_x, inv_y, x_y, slack=6)
    check_that(equal_most_significant_bits_within_precision(left, right, bits),
               "inverse must distribute over multiplication",
               x=x, y=y, left=left, right=right, bits=bits)


@prop("inv", "identity", "(1 / x) * x ~= 1", F, requires=("mul",))
def inv_test_identity(w: LibraryAdapter, x: int) -> None:
    require(x != ZERO_FP)
    inv_x = w.inv(x).unwrap()
    product = w.mul(inv_x, x).expect("x * (1 / x) must not fail", x=x)
    bound = (abs(x) >> 64) + 2
    check_that(equal_within_bit_precision(product, ONE_FP, _bits_for(bound)),
               "x * (1 / x) must be one", x=x, result=product)


@prop("inv", "values", "|x| >= 1 exactly when |1 / x| <= 1", F)
def inv_test_values(w: LibraryAdapter, x: int) -> None:
    require(x != ZERO_FP)
    inv_x = abs(w.inv(x).unwrap())
    if abs(x) >= ONE_FP:
        check_that(inv_x <= ONE_FP, "|x| >= 1 implies |1 / x| <= 1", x=x, result=inv_x)
    else:
        check_that(inv_x >= ONE_FP, "|x| < 1 implies |1 / x| >= 1", x=x, result=inv_x)


@prop("inv", "sign", "1 / x has the sign of x", F)
def inv_test_sign(w: LibraryAdapter, x: int) -> None:
    require(x != ZERO_FP)
    inv_x = w.inv(x).unwrap()
    check_that((inv_x > 0) == (x > 0), "inverse must preserve the sign", x=x, result=inv_x)


@prop("inv", "zero", "1 / 0 fails")
def inv_test_zero(w: LibraryAdapter) -> None:
    result = w.inv(ZERO_FP)
    check_that(result.failed, "inverting zero must fail", result=result)


@prop("inv", "maximum", "1 / MAX is two raw units")
def inv_test_maximum(w: LibraryAdapter) -> None:
    result = w.inv(MAX_64X64).expect("inverting MAX must not fail")
    check_that(equal_within_bit_precision(result, 2, 1), "1 / MAX must be about 2**-63",
               result=result)


@prop("inv", "minimum", "1 / MIN is minus two raw units")
def inv_test_minimum(w: LibraryAdapter) -> None:
    result = w.inv(MIN_64X64).expect("inverting MIN must not fail")
    check_that(equal_within_bit_precision(result, -2, 1), "1 / MIN must be about -2**-63",
               result=result)


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
    result = w.avg(MAX_64X64, MAX_64X64).expect("avg(MAX, MAX) must not fail")
    check_that(result == MAX_64X64, "avg(MAX, MAX) must be MAX", result=result)


@prop("avg", "minimum", "avg(MIN, MIN) == MIN")
def avg_test_minimum(w: LibraryAdapter) -> None:
    result = w.avg(MIN_64X64, MIN_64X64).expect("avg(MIN, MIN) must not fail")
    check_that(result == MIN_64X64, "avg(MIN, MIN) must be MIN", result=result)


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


@prop("gavg", "maximum", "gavg(MAX, MAX) == MAX and gavg(MAX, 0) == 0")
def gavg_test_maximum(w: LibraryAdapter) -> None:
    result = w.gavg(MAX_64X64, MAX_64X64).expect("gavg(MAX, MAX) must not fail")
    check_that(result == MAX_64X64, "gavg(MAX, MAX) must be MAX", result=result)
    result = w.gavg(MAX_64X64, ZERO_FP).expect("gavg(MAX, 0) must not fail")
    check_that(result == ZERO_FP, "gavg(MAX, 0) must be zero", result=result)


@prop("gavg", "minimum", "gavg(MIN, MIN) fails and gavg(MIN, 0) == 0")
def gavg_test_minimum(w: LibraryAdapter) -> None:
    check_that(w.gavg(MIN_64X64, MIN_64X64).failed, "gavg(MIN, MIN) must fail")
    result = w.gavg(MIN_64X64, ZERO_FP).expect("gavg(MIN, 0) must not fail")
    check_that(result == ZERO_FP, "gavg(MIN, 0) must be zero", result=result)


# ===================================================================
# POWER (integer exponent)
# ===================================================================

@prop("pow", "zero_exponent", "x ** 0 == 1", F)
def pow_test_zero_exponent(w: LibraryAdapter, x: int) -> None:
    result = w.pow(x, 0).expect("x ** 0 must not fail", x=x)
    check_that(result == ONE_FP, "x ** 0 must be one", x=x, result=result)


@prop("pow", "zero_base", "0 ** a == 0 for a > 0, 0 ** 0 == 1", E)
def pow_test_zero_base(w: LibraryAdapter, a: int) -> None:
    result = w.pow(ZERO_FP, a).expect("0 ** a must not fail", a=a)
    expected = ONE_FP if a == 0 else ZERO_FP
    check_that(result == expected, "0 ** a must be zero for positive a", a=a, result=result)


@prop("pow", "one_exponent", "x ** 1 == x", F)
def pow_test_one_exponent(w: LibraryAdapter, x: int) -> None:
    result = w.pow(x, 1).expect("x ** 1 must not fail", x=x)
    check_that(result == x, "x ** 1 must be x", x=x, result=result)


@prop("pow", "base_one", "1 ** a == 1", E)
def pow_test_base_one(w: LibraryAdapter, a: int) -> None:
    result = w.pow(ONE_FP, a).expect("1 ** a must not fail", a=a)
    check_that(result == ONE_FP, "1 ** a must be one", a=a, result=result)


@prop("pow", "product_same_base", "x ** a * x ** b ~= x ** (a + b)", F, E, E, requires=("mul",))
def pow_test_product_same_base(w: LibraryAdapter, x: int, a: int, b: int) -> None:
    x_a = w.pow(x, a).unwrap()
    x_b = w.pow(x, b).unwrap()
    x_ab = w.pow(x, a + b).unwrap()
    product = w.mul(x_a, x_b).unwrap()
    bits = _relative_bits(x_a, x_b, x_ab, product)
    check_that(equal_most_significant_bits_within_precision(product, x_ab, bits),
               "x ** a * x ** b must equal x ** (a + b)",
               x=x, a=a, b=b, left=product, right=x_ab, bits=bits)


@prop("pow", "power_of_power", "(x ** a) ** b ~= x ** (a * b)", F, E, E)
def pow_test_power_of_power(w: LibraryAdapter, x: int, a: int, b: int) -> None:
    x_a = w.pow(x, a).unwrap()
    left = w.pow(x_a, b).unwrap()
    right = w.pow(x, a * b).unwrap()
    # The rounding of x ** a is amplified b times by the outer power.
    bits = _relative_bits(x_a, left, right, slack=4 + b.bit_length())
    check_that(equal_most_significant_bits_within_precision(left, right, bits),
               "(x ** a) ** b must equal x ** (a * b)",
               x=x, a=a, b=b, left=left, right=right, bits=bits)


@prop("pow", "distributive", "(x * y) ** a ~= x ** a * y ** a", F, F, E, requires=("mul",))
def pow_test_distributive(w: LibraryAdapter, x: int, y: int, a: int) -> None:
    x_y = w.mul(x, y).unwrap()
    x_a = w.pow(x, a).unwrap()
    y_a = w.pow(y, a).unwrap()
    left = w.pow(x_y, a).unwrap()
    right = w.mul(x_a, y_a).unwrap()
    bits = _relative_bits(x_y, x_a, y_a, left, right, slack=4 + a.bit_length())
    check_that(equal_most_significant_bits_within_precision(left, right, bits),
               "power must distribute over multiplication",
               x=x, y=y, a=a, left=left, right=right, bits=bits)


@prop("pow", "values", "|x| >= 1 implies |x ** a| >= 1, else |x ** a| <= 1", F, E)
def pow_test_values(w: LibraryAdapter, x: int, a: int) -> None:
    result = abs(w.pow(x, a).unwrap())
    if abs(x) >= ONE_FP:
        check_that(result >= ONE_FP, "|x| >= 1 implies |x ** a| >= 1", x=x, a=a, result=result)
    else:
        check_that(result <= ONE_FP, "|x| < 1 implies |x ** a| <= 1", x=x, a=a, result=result)


@prop("pow", "sign", "even powers are non-negative, odd powers keep the sign of x", F, E)
def pow_test_sign(w: LibraryAdapter, x: int, a: int) -> None:
    result = w.pow(x, a).unwrap()
    if a % 2 == 0:
        check_that(result >= ZERO_FP, "even powers must be non-negative", x=x, a=a, result=result)
    else:
        require(result != ZERO_FP)
        check_that((result > 0) == (x > 0), "odd powers must keep the sign of the base",
                   x=x, a=a, result=result)


@prop("pow", "maximum_base", "MAX ** a fails for a > 1", E)
def pow_test_maximum_base(w: LibraryAdapter, a: int) -> None:
    require(a > 1)
    result = w.pow(MAX_64X64, a)
    check_that(result.failed, "MAX ** a must overflow", a=a, result=result)


@prop("pow", "high_exponent", "x ** 2**128 is 0 below one, 1 at one, fails above", F)
def pow_test_high_exponent(w: LibraryAdapter, x: int) -> None:
    a = 1 << 128
    result = w.pow(x, a)
    if abs(x) < ONE_FP:
        check_that(result.ok and result.value == ZERO_FP, "|x| < 1 must vanish",
                   x=x, result=result)
    elif abs(x) == ONE_FP:
        check_that(result.ok and result.value == ONE_FP, "|x| == 1 must stay one",
                   x=x, result=result)
    else:
        check_that(result.failed, "|x| > 1 must overflow", x=x, result=result)


# ===================================================================
# SQUARE ROOT
# ===================================================================

@prop("sqrt", "inverse_mul", "sqrt(x) * sqrt(x) ~= x", F, requires=("mul",))
def sqrt_test_inverse_mul(w: LibraryAdapter, x: int) -> None:
    require(x >= ZERO_FP)
    s = w.sqrt(x).expect("sqrt of a non-negative value must not fail", x=x)
    square = w.mul(s, s).expect("sqrt(x) ** 2 must not fail", x=x)
    bound = (2 * s >> 64) + 2
    check_that(equal_within_bit_precision(square, x, _bits_for(bound)),
               "sqrt(x) * sqrt(x) must be x", x=x, sqrt=s, result=square)


@prop("sqrt", "inverse_pow", "sqrt(x) ** 2 ~= x", F, requires=("pow",))
def sqrt_test_inverse_pow(w: LibraryAdapter, x: int) -> None:
    require(x >= ZERO_FP)
    s = w.sqrt(x).expect("sqrt of a non-negative value must not fail", x=x)
    square = w.pow(s, 2).expect("sqrt(x) ** 2 must not fail", x=x)
    bound = (2 * s >> 64) + 2
    check_that(equal_within_bit_precision(square, x, _bits_for(bound)),
               "sqrt(x) ** 2 must be x", x=x, sqrt=s, result=square)


@prop("sqrt", "distributive", "sqrt(x * y) ~= sqrt(x) * sqrt(y)", F, F, requires=("mul",))
def sqrt_test_distributive(w: LibraryAdapter, x: int, y: int) -> None:
    require(x >= ZERO_FP and y >= ZERO_FP)
    x_y = w.mul(x, y).unwrap()
    sqrt_x = w.sqrt(x).unwrap()
    sqrt_y = w.sqrt(y).unwrap()
    left = w.sqrt(x_y).unwrap()
    right = w.mul(sqrt_x, sqrt_y).unwrap()
    bits = _relative_bits(x_y, sqrt_x, sqrt_y, left, right)
    check_that(equal_most_significant_bits_within_precision(left, right, bits),
               "square root must distribute over multiplication",
               x=x, y=y, left=left, right=right, bits=bits)


@prop("sqrt", "zero", "sqrt(0) == 0")
def sqrt_test_zero(w: LibraryAdapter) -> None:
    result = w.sqrt(ZERO_FP).expect("sqrt(0) must not fail")
    check_that(result == ZERO_FP, "sqrt(0) must be zero", result=result)


@prop("sqrt", "maximum", "sqrt(MAX) is the exact floor root")
def sqrt_test_maximum(w: LibraryAdapter) -> None:
    result = w.sqrt(MAX_64X64).expect("sqrt(MAX) must not fail")
    scaled = MAX_64X64 << 64
    check_that(result * result <= scaled < (result + 1) ** 2,
               "sqrt(MAX) must be the floor of the true root", result=result)


@prop("sqrt", "minimum", "sqrt(MIN) fails")
def sqrt_test_minimum(w: LibraryAdapter) -> None:
    check_that(w.sqrt(MIN_64X64).failed, "sqrt(MIN) must fail")


@prop("sqrt", "negative", "sqrt(x) fails for x < 0", F)
def sqrt_test_negative(w: LibraryAdapter, x: int) -> None:
    require(x < ZERO_FP)
    result = w.sqrt(x)
    check_that(result.failed, "square root of a negative value must fail", x=x, result=result)


# ===================================================================
# LOGARITHMS
# ===================================================================

def _log_law_checks(op: str, exp_op: str, max_expected: int) -> None:
    """Register the shared log2/ln checks for ``op``."""

    @prop(op, "distributive_mul", f"{op}(x * y) ~= {op}(x) + {op}(y)", F, F,
          requires=("mul", "add"))
    def distributive_mul(w: LibraryAdapter, x: int, y: int) -> None:
        require(x > ZERO_FP and y > ZERO_FP)
        _significant_product(x, y)
        x_y = w.mul(x, y).unwrap()
        require(x_y > ZERO_FP)
        log = getattr(w, op)
        left = log(x_y).unwrap()
        right = w.add(log(x).unwrap(), log(y).unwrap()).unwrap()
        check_that(equal_within_bit_precision(left, right, _log_error_bits(x_y)),
                   f"{op} must turn products into sums", x=x, y=y, left=left, right=right)

    @prop(op, "power", f"{op}(x ** a) ~= a * {op}(x)", F, E, requires=("pow", "mul"))
    def power(w: LibraryAdapter, x: int, a: int) -> None:
        require(x > ZERO_FP and a < 1 << 63)
        x_a = w.pow(x, a).unwrap()
        require(x_a > ZERO_FP)
        log = getattr(w, op)
        left = log(x_a).unwrap()
        right = w.mul(a << 64, log(x).unwrap()).unwrap()
        # Each logarithm is off by a few ulps; the right side scales that by a.
        check_that(equal_within_bit_precision(left, right, _log_error_bits(x_a, 4 * a)),
                   f"{op} must turn powers into products", x=x, a=a, left=left, right=right)

    @prop(op, "inverse", f"{exp_op}({op}(x)) ~= x", F, requires=(exp_op,))
    def inverse(w: LibraryAdapter, x: int) -> None:
        require(x > ZERO_FP)
        log = getattr(w, op)(x).unwrap()
        back = getattr(w, exp_op)(log).unwrap()
        # x carries its own rounding below about 50 bits.
        bits = min(50, _relative_bits(x, back))
        check_that(equal_most_significant_bits_within_precision(back, x, bits),
                   f"{exp_op} must undo {op}", x=x, log=log, result=back, bits=bits)

    @prop(op, "zero", f"{op}(0) fails")
    def zero(w: LibraryAdapter) -> None:
        check_that(getattr(w, op)(ZERO_FP).failed, f"{op}(0) must fail")

    @prop(op, "one", f"{op}(1) == 0")
    def one(w: LibraryAdapter) -> None:
        result = getattr(w, op)(ONE_FP).expect(f"{op}(1) must not fail")
        check_that(result == ZERO_FP, f"{op}(1) must be zero", result=result)

    @prop(op, "maximum", f"{op}(MAX) is the largest logarithm")
    def maximum(w: LibraryAdapter) -> None:
        result = getattr(w, op)(MAX_64X64).expect(f"{op}(MAX) must not fail")
        check_that(equal_within_bit_precision(result, max_expected, 2),
                   f"{op}(MAX) must match its closed form", result=result, expected=max_expected)

    @prop(op, "negative", f"{op}(x) fails for x < 0", F)
    def negative(w: LibraryAdapter, x: int) -> None:
        require(x < ZERO_FP)
        result = getattr(w, op)(x)
        check_that(result.failed, f"{op} of a negative value must fail", x=x, result=result)


_log_law_checks("log2", "exp2", 63 << 64)
_log_law_checks("ln", "exp", ((63 << 64) * LN_2_X128) >> 128)


# ===================================================================
# EXPONENTIALS
# ===================================================================

@prop("exp2", "equivalence_pow", "exp2(a) == 2 ** a for integer a", E, requires=("pow",))
def exp2_test_equivalence_pow(w: LibraryAdapter, a: int) -> None:
    require(a <= 62)
    exp2_a = w.exp2(a << 64).expect("exp2 of a small integer must not fail", a=a)
    pow_2_a = w.pow(TWO_FP, a).expect("2 ** a must not fail", a=a)
    check_that(exp2_a == pow_2_a, "exp2(a) must equal 2 ** a", a=a, exp2=exp2_a, pow=pow_2_a)


def _exp_law_checks(op: str, log_op: str, max_permitted: int) -> None:
    """Register the checks shared by exp2 and exp."""

    @prop(op, "inverse", f"{log_op}({op}(x)) ~= x", F, requires=(log_op,))
    def inverse(w: LibraryAdapter, x: int) -> None:
        e = getattr(w, op)(x).unwrap()
        require(e > ZERO_FP)
        back = getattr(w, log_op)(e).unwrap()
        check_that(equal_within_bit_precision(back, x, _log_error_bits(e, 4)),
                   f"{log_op} must invert {op}", x=x, exp=e, result=back)

    @prop(op, "negative_exponent", f"{op}(-x) ~= 1 / {op}(x)", F, requires=("inv",))
    def negative_exponent(w: LibraryAdapter, x: int) -> None:
        require(Q64X64.contains(-x))
        e = getattr(w, op)(x).unwrap()
        require(e != ZERO_FP)
        left = getattr(w, op)(-x).unwrap()
        right = w.inv(e).unwrap()
        bits = _relative_bits(e, left, right)
        check_that(equal_most_significant_bits_within_precision(left, right, bits),
                   f"{op}(-x) must be the inverse of {op}(x)",
                   x=x, left=left, right=right, bits=bits)

    @prop(op, "maximum", f"{op}(x) fails above the largest permitted argument", F)
    def maximum(w: LibraryAdapter, x: int) -> None:
        require(x > max_permitted)
        result = getattr(w, op)(x)
        check_that(result.failed, f"{op} above its domain must fail", x=x, result=result)

    @prop(op, "maximum_permitted", f"{op} succeeds at its largest permitted argument")
    def maximum_permitted(w: LibraryAdapter) -> None:
        fn = getattr(w, op)
        result = fn(max_permitted)
        check_that(result.ok, f"{op} at the largest permitted argument must not fail",
                   x=max_permitted, result=result)
        check_that(fn(max_permitted + EPSILON).failed,
                   f"{op} just above the largest permitted argument must fail",
                   x=max_permitted + EPSILON)

    @prop(op, "minimum", f"{op}(MIN) == 0")
    def minimum(w: LibraryAdapter) -> None:
        result = getattr(w, op)(MIN_64X64).expect(f"{op}(MIN) must not fail")
        check_that(result == ZERO_FP, f"{op}(MIN) must underflow to zero", result=result)


_exp_law_checks("exp2", "log2", Q64X64.max_permitted_exp2)
_exp_law_checks("exp", "ln", Q64X64.max_permitted_exp)


@prop("exp", "equivalence_exp2", "exp(x) ~= exp2(x * log2(e))", F, requires=("exp2", "mul"))
def exp_test_equivalence_exp2(w: LibraryAdapter, x: int) -> None:
    exp_x = w.exp(x).unwrap()
    x_log2_e = w.mul(x, LOG2_E_X128 >> 64).unwrap()
    exp2_x = w.exp2(x_log2_e).unwrap()
    # The 64-bit log2(e) loses |x| / 2**64 ulps in the exponent, which
    # exp2 turns into relative error.
    exponent_error_bits = ((abs(x) >> 64) + 2).bit_length()
    bits = min(_relative_bits(exp_x, exp2_x), 64 - 4 - exponent_error_bits)
    require(bits >= REQUIRED_SIGNIFICANT_BITS)
    check_that(equal_most_significant_bits_within_precision(exp_x, exp2_x, bits),
               "exp(x) must equal exp2(x * log2(e))", x=x, exp=exp_x, exp2=exp2_x, bits=bits)


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
    result = w.from_int(n)
    if Q64X64.integer_min <= n <= Q64X64.integer_max:
        check_that(result.ok and result.value == n << 64, "in-range integers must convert exactly",
                   n=n, result=result)
    else:
        check_that(result.failed, "out-of-range integers must fail", n=n, result=result)


@prop("to_int", "within_one", "0 <= x - from_int(to_int(x)) < 1", F, requires=("from_int",))
def to_int_test_within_one(w: LibraryAdapter, x: int) -> None:
    n = w.to_int(x).expect("to_int must not fail", x=x)
    raw = w.from_int(n).expect("from_int(to_int(x)) must not fail", x=x)
    check_that(0 <= x - raw < ONE_FP, "to_int must round toward negative infinity",
               x=x, n=n, raw=raw)
