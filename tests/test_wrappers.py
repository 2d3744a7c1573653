"""Tests for the library adapter and its outcomes."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from formats import Q64X64
from invariants import Discard, PropertyViolation
from wrappers import OPERATIONS, Failure, FailureKind, LibraryAdapter, Ok


class _Partial:
    """A library with only a handful of operations."""

    def add(self, x, y):
        return x + y

    def div(self, x, y):
        if y == 0:
            raise ZeroDivisionError("division by zero")
        return x // y

    def sqrt(self, x):
        if x < 0:
            raise ValueError("negative")
        return x

    def exp(self, x):
        raise OverflowError("too large")

    def log2(self, x):
        raise NotImplementedError

    def ln(self, x):
        raise RuntimeError("library bug")


@pytest.fixture
def partial() -> LibraryAdapter:
    return LibraryAdapter(_Partial(), Q64X64)


class TestOutcomes:
    def test_ok(self):
        outcome = Ok(7)
        assert outcome.ok and not outcome.failed
        assert outcome.unwrap() == 7
        assert outcome.expect("never raised") == 7

    def test_failure_unwrap_discards(self):
        with pytest.raises(Discard):
            Failure(FailureKind.OVERFLOW).unwrap()

    def test_failure_expect_violates(self):
        with pytest.raises(PropertyViolation) as info:
            Failure(FailureKind.DOMAIN, "negative").expect("sqrt must succeed", x=-1)
        assert "sqrt must succeed" in str(info.value)
        assert "DOMAIN" in str(info.value)
        assert info.value.operands == {"x": -1}


class TestAdapter:
    def test_success(self, partial):
        assert partial.add(2, 3) == Ok(5)

    def test_exceptions_classified(self, partial):
        assert partial.div(1, 0).kind is FailureKind.DIVISION_BY_ZERO
        assert partial.sqrt(-1).kind is FailureKind.DOMAIN
        assert partial.exp(1).kind is FailureKind.OVERFLOW
        assert partial.log2(1).kind is FailureKind.UNSUPPORTED

    def test_missing_operation(self, partial):
        assert not partial.supports("mul")
        outcome = partial.mul(1, 2)
        assert outcome.failed and outcome.kind is FailureKind.UNSUPPORTED

    def test_unexpected_exception_propagates(self, partial):
        with pytest.raises(RuntimeError):
            partial.ln(1)

    def test_every_operation_wrapped(self, partial):
        for name in OPERATIONS:
            assert callable(getattr(partial, name))

    def test_reference_library_supported_operations(self, q64, sd59, ud60):
        assert not q64.supports("powu") and not q64.supports("log10")
        assert sd59.supports("powu") and sd59.supports("neg")
        assert not ud60.supports("neg") and not ud60.supports("abs")
