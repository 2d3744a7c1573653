"""
Property framework for fixed-point verification suites.

A property is a named, stateless check over one or more fuzzed arguments.
Running it against a library adapter either:
  - returns normally          -> the invariant held for these inputs
  - raises PropertyViolation  -> the invariant is falsified (a defect)
  - raises Discard            -> the inputs do not meet the check's
                                 preconditions and must be re-drawn

Layers
------
ArgKind        what a fuzzed argument represents (fixed value, exponent...)
Property       one named check and its argument signature
PropertySuite  the ordered collection of checks for one format family
"""

from __future__ import annotations

import fnmatch
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterator


# ---------------------------------------------------------------------------
# Signals
# ---------------------------------------------------------------------------

class Discard(Exception):
    """Inputs fall outside the sample space of a check."""


class PropertyViolation(AssertionError):
    """An invariant was falsified for the given operands."""

    def __init__(self, message: str, operands: dict[str, Any] | None = None):
        self.message = message
        self.operands = dict(operands or {})
        detail = ", ".join(f"{k}={v}" for k, v in self.operands.items())
        super().__init__(f"{message} [{detail}]" if detail else message)


def require(condition: bool) -> None:
    """Discard the current inputs unless ``condition`` holds."""
    if not condition:
        raise Discard()


def check_that(condition: bool, message: str, **operands: Any) -> None:
    """Raise PropertyViolation with ``message`` unless ``condition`` holds."""
    if not condition:
        raise PropertyViolation(message, operands)


# ---------------------------------------------------------------------------
# Property definitions
# ---------------------------------------------------------------------------

class ArgKind(str, Enum):
    FIXED = "fixed"        # raw value of the format under test
    EXPONENT = "exponent"  # plain non-negative integer exponent
    INTEGER = "integer"    # plain integer for conversions


@dataclass(frozen=True)
class Property:
    """A single verifiable property of a fixed-point library."""

    name: str
    operation: str
    description: str
    check: Callable[..., None]
    args: tuple[ArgKind, ...] = ()
    requires: tuple[str, ...] = ()

    @property
    def arity(self) -> int:
        return len(self.args)

    @property
    def qualified_name(self) -> str:
        return f"{self.operation}.{self.name}"

    def run(self, adapter: Any, *values: int) -> None:
        if len(values) != self.arity:
            raise TypeError(
                f"{self.qualified_name} takes {self.arity} arguments, got {len(values)}"
            )
        self.check(adapter, *values)


@dataclass
class PropertySuite:
    """An ordered collection of properties for one fixed-point family."""

    name: str
    properties: list[Property] = field(default_factory=list)

    def add(self, prop: Property) -> None:
        if any(p.qualified_name == prop.qualified_name for p in self.properties):
            raise ValueError(f"duplicate property {prop.qualified_name}")
        self.properties.append(prop)

    def property(
        self,
        operation: str,
        name: str,
        description: str,
        *args: ArgKind,
        requires: tuple[str, ...] = (),
    ) -> Callable[[Callable[..., None]], Callable[..., None]]:
        """Decorator registering a check function on this suite.

        ``requires`` lists the library operations the check calls besides
        ``operation``; the harness skips the check when any is missing.
        """

        def register(fn: Callable[..., None]) -> Callable[..., None]:
            self.add(Property(
                name=name,
                operation=operation,
                description=description,
                check=fn,
                args=tuple(args),
                requires=(operation, *requires),
            ))
            return fn

        return register

    def get(self, qualified_name: str) -> Property:
        for p in self.properties:
            if p.qualified_name == qualified_name:
                return p
        raise KeyError(qualified_name)

    def select(
        self,
        include: list[str] | None = None,
        exclude: list[str] | None = None,
    ) -> list[Property]:
        """Filter properties with glob patterns on their qualified names."""
        out = []
        for p in self.properties:
            if include and not any(fnmatch.fnmatch(p.qualified_name, pat) for pat in include):
                continue
            if exclude and any(fnmatch.fnmatch(p.qualified_name, pat) for pat in exclude):
                continue
            out.append(p)
        return out

    def operations(self) -> list[str]:
        seen: list[str] = []
        for p in self.properties:
            if p.operation not in seen:
                seen.append(p.operation)
        return seen

    def __iter__(self) -> Iterator[Property]:
        return iter(self.properties)

    def __len__(self) -> int:
        return len(self.properties)
