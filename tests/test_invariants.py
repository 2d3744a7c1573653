"""Tests for the property framework."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from invariants import (
    ArgKind,
    Discard,
    Property,
    PropertySuite,
    PropertyViolation,
    check_that,
    require,
)


def _suite() -> PropertySuite:
    suite = PropertySuite(name="demo")

    @suite.property("add", "commutative", "x + y == y + x", ArgKind.FIXED, ArgKind.FIXED)
    def commutative(w, x, y):
        check_that(x + y == y + x, "add must commute", x=x, y=y)

    @suite.property("add", "maximum", "MAX + 1 fails")
    def maximum(w):
        pass

    @suite.property("sub", "neutrality", "(x - y) + y == x", ArgKind.FIXED, ArgKind.FIXED,
                    requires=("add",))
    def neutrality(w, x, y):
        pass

    @suite.property("pow", "sign", "odd powers keep the sign", ArgKind.FIXED, ArgKind.EXPONENT)
    def sign(w, x, a):
        pass

    return suite


class TestSignals:
    def test_require(self):
        require(True)
        with pytest.raises(Discard):
            require(False)

    def test_check_that(self):
        check_that(True, "unused")
        with pytest.raises(PropertyViolation) as info:
            check_that(False, "x must be positive", x=-3)
        assert str(info.value) == "x must be positive [x=-3]"
        assert info.value.message == "x must be positive"

    def test_violation_is_an_assertion(self):
        assert issubclass(PropertyViolation, AssertionError)


class TestProperty:
    def test_registration(self):
        suite = _suite()
        prop = suite.get("sub.neutrality")
        assert prop.arity == 2
        assert prop.requires == ("sub", "add")
        assert prop.args == (ArgKind.FIXED, ArgKind.FIXED)

    def test_run_checks_arity(self):
        prop = _suite().get("add.commutative")
        prop.run(None, 1, 2)
        with pytest.raises(TypeError):
            prop.run(None, 1)

    def test_duplicate_rejected(self):
        suite = _suite()
        with pytest.raises(ValueError):
            suite.add(Property("maximum", "add", "again", check=lambda w: None))

    def test_unknown_property(self):
        with pytest.raises(KeyError):
            _suite().get("mul.identity")


class TestSuite:
    def test_order_and_operations(self):
        suite = _suite()
        assert len(suite) == 4
        assert [p.qualified_name for p in suite][0] == "add.commutative"
        assert suite.operations() == ["add", "sub", "pow"]

    def test_select_include(self):
        names = [p.qualified_name for p in _suite().select(include=["add.*"])]
        assert names == ["add.commutative", "add.maximum"]

    def test_select_exclude(self):
        names = [p.qualified_name for p in _suite().select(exclude=["*.maximum", "pow.*"])]
        assert names == ["add.commutative", "sub.neutrality"]

    def test_select_everything_by_default(self):
        assert len(_suite().select()) == 4
