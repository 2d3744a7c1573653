"""The decimal suite instantiated for both 18-decimal formats."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from decimal_math import SD59x18Math, UD60x18Math
from decimal_properties import TEMPLATE, build_decimal_suite
from formats import Q64X64, SD59X18, UD60X18
from harness import PropertyStatus, run_property
from invariants import Discard, PropertyViolation
from wrappers import LibraryAdapter

# Each property runs once per seed, with the active profile's example count.
SUITE_SEEDS = (20240, 7919, 104729)

SIGNED = build_decimal_suite(SD59X18)
UNSIGNED = build_decimal_suite(UD60X18)
SD_ADAPTER = LibraryAdapter(SD59x18Math(), SD59X18)
UD_ADAPTER = LibraryAdapter(UD60x18Math(), UD60X18)
ONE = SD59X18.one


class TestSuiteShape:
    def test_signed_only_checks_dropped_for_unsigned(self):
        unsigned_names = {p.qualified_name for p in UNSIGNED}
        assert "neg.minimum" not in unsigned_names
        assert "abs.positive" not in unsigned_names
        assert "sqrt.negative" not in unsigned_names
        assert "log2.below_one" in unsigned_names

    def test_unsigned_only_checks_dropped_for_signed(self):
        signed_names = {p.qualified_name for p in SIGNED}
        assert "log2.below_one" not in signed_names
        assert "neg.minimum" in signed_names

    def test_both_are_subsets_of_the_template(self):
        template = {p.qualified_name for p in TEMPLATE}
        assert {p.qualified_name for p in SIGNED} <= template
        assert {p.qualified_name for p in UNSIGNED} <= template
        assert len(SIGNED) + len(UNSIGNED) > len(TEMPLATE)

    def test_no_negation_for_unsigned(self):
        assert "neg" not in UNSIGNED.operations()
        assert "log10" in UNSIGNED.operations()

    def test_rejects_binary_format(self):
        with pytest.raises(ValueError):
            build_decimal_suite(Q64X64)


@pytest.mark.parametrize("seed", SUITE_SEEDS)
@pytest.mark.parametrize("name", [p.qualified_name for p in SIGNED])
def test_signed_reference_satisfies(name, seed, profile_examples):
    result = run_property(SIGNED.get(name), SD_ADAPTER,
                          max_examples=profile_examples, seed=seed)
    assert result.status is not PropertyStatus.FAILED, result.message


@pytest.mark.parametrize("seed", SUITE_SEEDS)
@pytest.mark.parametrize("name", [p.qualified_name for p in UNSIGNED])
def test_unsigned_reference_satisfies(name, seed, profile_examples):
    result = run_property(UNSIGNED.get(name), UD_ADAPTER,
                          max_examples=profile_examples, seed=seed)
    assert result.status is not PropertyStatus.FAILED, result.message


class TestDirectChecks:
    def test_commutative_mixed_signs(self):
        SIGNED.get("add.commutative").run(SD_ADAPTER, 3_500000000000000000, -2_250000000000000000)

    def test_zero_numerator(self):
        SIGNED.get("div.numerator_zero").run(SD_ADAPTER, 17 * ONE)

    def test_powers_of_ten(self):
        SIGNED.get("log10.powers_of_ten").run(SD_ADAPTER)
        UNSIGNED.get("log10.powers_of_ten").run(UD_ADAPTER)

    def test_odd_power_keeps_sign(self):
        SIGNED.get("powu.sign").run(SD_ADAPTER, -2 * ONE, 3)

    def test_dropped_sign_is_caught(self):
        class Unsigned(SD59x18Math):
            def powu(self, x, n):
                return abs(super().powu(x, n))

        adapter = LibraryAdapter(Unsigned(), SD59X18)
        with pytest.raises(PropertyViolation):
            SIGNED.get("powu.sign").run(adapter, -2 * ONE, 3)

    # -- distributive laws with a tiny intermediate power --

    def test_pow_distributive_tiny_base_is_discarded(self):
        with pytest.raises(Discard):
            SIGNED.get("pow.distributive").run(
                SD_ADAPTER, 54, 18888907407407407407408, 10**18 + 1)

    def test_pow_distributive_tiny_factor_power_is_discarded(self):
        with pytest.raises(Discard):
            SIGNED.get("pow.distributive").run(
                SD_ADAPTER, 7 * ONE, 1444771800192675, 6 * ONE)

    def test_powu_distributive_tiny_factor_power_is_discarded(self):
        with pytest.raises(Discard):
            SIGNED.get("powu.distributive").run(SD_ADAPTER, 57 * ONE, 14137590214091, 3)

    def test_pow_distributive_holds_for_moderate_operands(self):
        SIGNED.get("pow.distributive").run(SD_ADAPTER, 3 * ONE, 5 * ONE // 2, 3 * ONE // 2)

    # -- exponentials undoing logarithms --

    def test_exp_undoes_log(self):
        for op in ("log2", "ln", "log10"):
            SIGNED.get(f"{op}.inverse").run(SD_ADAPTER, 1000 * ONE)
            SIGNED.get(f"{op}.inverse").run(SD_ADAPTER, ONE // 1000)
            UNSIGNED.get(f"{op}.inverse").run(UD_ADAPTER, 1000 * ONE)

    def test_slightly_wrong_log_is_caught(self):
        class Drifting(UD60x18Math):
            def log2(self, x):
                result = super().log2(x)
                return result + result // 10**9

        adapter = LibraryAdapter(Drifting(), UD60X18)
        with pytest.raises(PropertyViolation):
            UNSIGNED.get("log2.inverse").run(adapter, 1000 * ONE)

    # -- percentage tolerance --

    def test_half_exponent_matches_square_root(self):
        SIGNED.get("pow.half_exponent").run(SD_ADAPTER, 2 * ONE)
        UNSIGNED.get("pow.half_exponent").run(UD_ADAPTER, ONE // 7)

    def test_half_exponent_catches_a_skewed_square_root(self):
        class Skewed(SD59x18Math):
            def sqrt(self, x):
                root = super().sqrt(x)
                return root + root // 10**4

        adapter = LibraryAdapter(Skewed(), SD59X18)
        with pytest.raises(PropertyViolation):
            SIGNED.get("pow.half_exponent").run(adapter, 2 * ONE)
