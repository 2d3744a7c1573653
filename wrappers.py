"""
Library adapter for the fixed-point library under test.

Every operation of the library is re-exposed through a thin pass-through
wrapper that returns an ``Outcome`` instead of raising: ``Ok(value)`` when
the operation succeeded, ``Failure(kind)`` when the library signalled an
error.  Checks pattern-match on the outcome, so "must fail" and
"must succeed" scenarios are plain assertions on the discriminant.

Libraries signal failure with the built-in arithmetic exceptions:

    OverflowError        result outside [MIN, MAX]
    ZeroDivisionError    division (or inversion) by zero
    ValueError           argument outside the operation's domain
    NotImplementedError  operation not provided by this library

Anything else is a bug in the library or the harness and propagates.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Union

from formats import FixedPointFormat
from invariants import Discard, PropertyViolation

logger = logging.getLogger(__name__)


class FailureKind(Enum):
    OVERFLOW = auto()
    DIVISION_BY_ZERO = auto()
    DOMAIN = auto()
    UNSUPPORTED = auto()


_FAILURES: tuple[tuple[type[BaseException], FailureKind], ...] = (
    (ZeroDivisionError, FailureKind.DIVISION_BY_ZERO),
    (OverflowError, FailureKind.OVERFLOW),
    (NotImplementedError, FailureKind.UNSUPPORTED),
    (ValueError, FailureKind.DOMAIN),
)


@dataclass(frozen=True)
class Ok:
    value: int

    ok = True
    failed = False

    def unwrap(self) -> int:
        return self.value

    def expect(self, message: str, **operands: Any) -> int:
        return self.value


@dataclass(frozen=True)
class Failure:
    kind: FailureKind
    reason: str = ""

    ok = False
    failed = True

    def unwrap(self) -> int:
        """A failing operation removes the sample from a law check."""
        raise Discard()

    def expect(self, message: str, **operands: Any) -> int:
        """Treat the failure as a violation: the operation had to succeed."""
        raise PropertyViolation(f"{message} ({self.kind.name}: {self.reason})", operands)


Outcome = Union[Ok, Failure]


OPERATIONS = (
    "add", "sub", "mul", "div", "neg", "abs", "inv", "avg", "gavg",
    "pow", "powu", "sqrt", "log2", "ln", "log10", "exp2", "exp",
    "from_int", "to_int",
)


class LibraryAdapter:
    """Uniform, failure-catching call surface over a library under test."""

    def __init__(self, library: Any, fmt: FixedPointFormat):
        self.library = library
        self.fmt = fmt

    def supports(self, operation: str) -> bool:
        return callable(getattr(self.library, operation, None))

    def call(self, operation: str, *args: int) -> Outcome:
        fn = getattr(self.library, operation, None)
        if not callable(fn):
            outcome: Outcome = Failure(FailureKind.UNSUPPORTED, f"{operation} not provided")
        else:
            try:
                outcome = Ok(fn(*args))
            except Exception as exc:
                kind = _classify(exc)
                if kind is None:
                    raise
                outcome = Failure(kind, str(exc))
        logger.debug("%s%s -> %s", operation, args, outcome)
        return outcome

    # -- one wrapper per operation ------------------------------------------

    def add(self, x: int, y: int) -> Outcome:
        return self.call("add", x, y)

    def sub(self, x: int, y: int) -> Outcome:
        return self.call("sub", x, y)

    def mul(self, x: int, y: int) -> Outcome:
        return self.call("mul", x, y)

    def div(self, x: int, y: int) -> Outcome:
        return self.call("div", x, y)

    def neg(self, x: int) -> Outcome:
        return self.call("neg", x)

    def abs(self, x: int) -> Outcome:
        return self.call("abs", x)

    def inv(self, x: int) -> Outcome:
        return self.call("inv", x)

    def avg(self, x: int, y: int) -> Outcome:
        return self.call("avg", x, y)

    def gavg(self, x: int, y: int) -> Outcome:
        return self.call("gavg", x, y)

    def pow(self, x: int, y: int) -> Outcome:
        return self.call("pow", x, y)

    def powu(self, x: int, n: int) -> Outcome:
        return self.call("powu", x, n)

    def sqrt(self, x: int) -> Outcome:
        return self.call("sqrt", x)

    def log2(self, x: int) -> Outcome:
        return self.call("log2", x)

    def ln(self, x: int) -> Outcome:
        return self.call("ln", x)

    def log10(self, x: int) -> Outcome:
        return self.call("log10", x)

    def exp2(self, x: int) -> Outcome:
        return self.call("exp2", x)

    def exp(self, x: int) -> Outcome:
        return self.call("exp", x)

    def from_int(self, n: int) -> Outcome:
        return self.call("from_int", n)

    def to_int(self, x: int) -> Outcome:
        return self.call("to_int", x)


def _classify(exc: BaseException) -> FailureKind | None:
    for exc_type, kind in _FAILURES:
        if isinstance(exc, exc_type):
            return kind
    return None
