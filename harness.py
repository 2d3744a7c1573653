"""
Hypothesis driver for property suites.

Each property becomes a Hypothesis test built on the fly: the harness
draws one value per declared argument kind, runs the check against the
library adapter, converts ``Discard`` into ``hypothesis.reject()`` and lets
Hypothesis shrink any ``PropertyViolation`` to a minimal counterexample.

Inputs are biased toward the places fixed-point code breaks: the format's
boundary constants, values spread evenly over magnitudes (so tiny and huge
operands are as likely as mid-range ones), small integers and values next
to one.

Flow (mirrors a verifying factory):
  1. Pick the suite for the library's format.
  2. Run every selected property, collecting a PropertyResult each.
  3. Aggregate into a VerificationReport; ``verify_library`` raises
     VerificationError instead of returning a library that failed.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from hypothesis import HealthCheck, given, reject, seed as fixed_seed, settings
from hypothesis import strategies as st
from hypothesis.errors import Unsatisfiable

from binary_math import Q64x64Math
from binary_properties import build_binary_suite
from config import CampaignSettings
from decimal_math import SD59x18Math, UD60x18Math
from decimal_properties import build_decimal_suite
from formats import FORMATS, FixedPointFormat
from invariants import ArgKind, Discard, Property, PropertySuite, PropertyViolation
from wrappers import LibraryAdapter

logger = logging.getLogger(__name__)

# Exponents drawn for integer powers; large enough to overflow any base
# above two, small enough to keep square-and-multiply chains short.
MAX_EXPONENT = 256


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

def _clamp(fmt: FixedPointFormat, raw: int) -> int:
    return max(fmt.min_raw, min(fmt.max_raw, raw))


def fixed_values(fmt: FixedPointFormat) -> st.SearchStrategy[int]:
    """Raw values of ``fmt``, biased toward boundaries and magnitudes."""
    top = fmt.width - 1 if fmt.signed else fmt.width

    def of_magnitude(bits: int) -> st.SearchStrategy[int]:
        low = -(1 << bits) if fmt.signed else 0
        return st.integers(low, (1 << bits) - 1)

    by_magnitude = st.integers(0, top).flatmap(of_magnitude).map(lambda r: _clamp(fmt, r))
    low = -64 if fmt.signed else 0
    integers = st.integers(low, 64).map(lambda n: n * fmt.one)
    near_one = st.integers(-1000, 1000).map(lambda d: fmt.one + d)
    return st.one_of(
        st.sampled_from(fmt.boundary_values()),
        by_magnitude,
        integers,
        near_one,
        st.integers(fmt.min_raw, fmt.max_raw),
    )


def exponents() -> st.SearchStrategy[int]:
    return st.one_of(
        st.integers(0, 8),
        st.sampled_from([0, 1, 2, 3, 63, 64, 127, 128, 255]),
        st.integers(0, MAX_EXPONENT),
    )


def plain_integers(fmt: FixedPointFormat) -> st.SearchStrategy[int]:
    """Integers for conversions, straddling the convertible range."""
    lo, hi = fmt.integer_min, fmt.integer_max
    edges = [lo - 1, lo, lo + 1, -1, 0, 1, hi - 1, hi, hi + 1]
    return st.one_of(
        st.sampled_from(edges),
        st.integers(lo, hi),
        st.integers(-1000, 1000),
        st.integers(2 * lo - 1, 2 * hi + 1),
    )


def strategy_for(kind: ArgKind, fmt: FixedPointFormat) -> st.SearchStrategy[int]:
    if kind is ArgKind.FIXED:
        return fixed_values(fmt)
    if kind is ArgKind.EXPONENT:
        return exponents()
    if kind is ArgKind.INTEGER:
        return plain_integers(fmt)
    raise ValueError(f"no strategy for {kind}")


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

class PropertyStatus(str, Enum):
    PASSED = "PASS"
    FAILED = "FAIL"
    SKIPPED = "SKIP"


@dataclass
class PropertyResult:
    """Outcome of verifying one property."""

    property_name: str
    status: PropertyStatus
    counterexample: tuple | None = None
    message: str = ""
    tests_run: int = 0
    discarded: int = 0
    seconds: float = 0.0

    @property
    def passed(self) -> bool:
        return self.status is PropertyStatus.PASSED

    @property
    def failed(self) -> bool:
        return self.status is PropertyStatus.FAILED

    def __repr__(self) -> str:
        ce = f"  counterexample={self.counterexample}" if self.counterexample is not None else ""
        note = f"  ({self.message})" if self.message and not self.failed else ""
        return (
            f"[{self.status.value}] {self.property_name} "
            f"({self.tests_run} tests, {self.discarded} discarded){ce}{note}"
        )


@dataclass
class VerificationReport:
    """Aggregate result of verifying a whole suite."""

    suite_name: str
    results: list[PropertyResult] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not any(r.failed for r in self.results)

    @property
    def failures(self) -> list[PropertyResult]:
        return [r for r in self.results if r.failed]

    def count(self, status: PropertyStatus) -> int:
        return sum(1 for r in self.results if r.status is status)

    def summary(self) -> str:
        lines = [f"--- {self.suite_name} ---"]
        for r in self.results:
            lines.append(f"  {r}")
            if r.failed:
                lines.append(f"      {r.message}")
        lines.append(
            f"  {self.count(PropertyStatus.PASSED)} passed, "
            f"{self.count(PropertyStatus.FAILED)} failed, "
            f"{self.count(PropertyStatus.SKIPPED)} skipped"
        )
        lines.append(f"  => {'ALL PASSED' if self.passed else 'FAILED'}")
        return "\n".join(lines)


class VerificationError(Exception):
    """Raised when a library fails its suite."""

    def __init__(self, report: VerificationReport):
        self.report = report
        super().__init__(f"Verification failed:\n{report.summary()}")


# ---------------------------------------------------------------------------
# Running
# ---------------------------------------------------------------------------

def run_property(
    prop: Property,
    adapter: LibraryAdapter,
    *,
    max_examples: int = 100,
    seed: int | None = None,
    deadline_ms: int | None = None,
) -> PropertyResult:
    """Verify one property against ``adapter`` with Hypothesis."""
    name = prop.qualified_name
    missing = [op for op in prop.requires if not adapter.supports(op)]
    if missing:
        logger.warning("skipping %s: library does not provide %s", name, ", ".join(missing))
        return PropertyResult(name, PropertyStatus.SKIPPED,
                              message=f"unsupported: {', '.join(missing)}")

    started = time.perf_counter()
    if prop.arity == 0:
        try:
            prop.run(adapter)
        except PropertyViolation as exc:
            return PropertyResult(name, PropertyStatus.FAILED, counterexample=(),
                                  message=str(exc), tests_run=1,
                                  seconds=time.perf_counter() - started)
        except Discard:
            return PropertyResult(name, PropertyStatus.SKIPPED, tests_run=1,
                                  message="preconditions not met")
        return PropertyResult(name, PropertyStatus.PASSED, tests_run=1,
                              seconds=time.perf_counter() - started)

    counters = {"run": 0, "discarded": 0}
    last: dict[str, tuple] = {}
    values = st.tuples(*(strategy_for(kind, adapter.fmt) for kind in prop.args))

    @settings(
        max_examples=max_examples,
        deadline=deadline_ms,
        database=None,
        report_multiple_bugs=False,
        suppress_health_check=[
            HealthCheck.filter_too_much,
            HealthCheck.too_slow,
        ],
    )
    @given(values)
    def check(args: tuple) -> None:
        counters["run"] += 1
        last["args"] = args
        try:
            prop.run(adapter, *args)
        except Discard:
            counters["discarded"] += 1
            reject()

    if seed is not None:
        check = fixed_seed(seed)(check)

    status, message, counterexample = PropertyStatus.PASSED, "", None
    try:
        check()
    except PropertyViolation as exc:
        status, message = PropertyStatus.FAILED, str(exc)
        # The last call Hypothesis makes replays the shrunk example.
        counterexample = last.get("args")
    except Unsatisfiable:
        status, message = PropertyStatus.SKIPPED, "no input satisfied the preconditions"

    result = PropertyResult(
        name, status,
        counterexample=counterexample,
        message=message,
        tests_run=counters["run"],
        discarded=counters["discarded"],
        seconds=time.perf_counter() - started,
    )
    logger.debug("%r", result)
    return result


def run_suite(
    suite: PropertySuite,
    adapter: LibraryAdapter,
    config: CampaignSettings | None = None,
) -> VerificationReport:
    """Run every property of ``suite`` selected by ``config``."""
    config = config or CampaignSettings()
    selected = suite.select(config.include, config.exclude)
    logger.info("verifying %d of %d %s properties", len(selected), len(suite), suite.name)
    report = VerificationReport(suite_name=suite.name)
    for prop in selected:
        result = run_property(
            prop, adapter,
            max_examples=config.max_examples,
            seed=config.seed,
            deadline_ms=config.deadline_ms,
        )
        if result.failed:
            logger.info("%s failed: %s", prop.qualified_name, result.message)
        report.results.append(result)
    logger.info("%s: %d failed", suite.name, len(report.failures))
    return report


# ---------------------------------------------------------------------------
# Format wiring
# ---------------------------------------------------------------------------

_REFERENCE_LIBRARIES: dict[str, type] = {
    "q64x64": Q64x64Math,
    "sd59x18": SD59x18Math,
    "ud60x18": UD60x18Math,
}


def suite_for(fmt: FixedPointFormat) -> PropertySuite:
    if fmt.radix == 2:
        return build_binary_suite()
    return build_decimal_suite(fmt)


def reference_library(fmt: FixedPointFormat | str) -> Any:
    """The bundled reference implementation of a format."""
    name = fmt if isinstance(fmt, str) else fmt.name
    return _REFERENCE_LIBRARIES[name]()


def verify_library(
    library: Any,
    fmt: FixedPointFormat | str,
    config: CampaignSettings | None = None,
) -> LibraryAdapter:
    """Verify ``library`` and return its adapter, or raise VerificationError."""
    if isinstance(fmt, str):
        fmt = FORMATS[fmt]
    adapter = LibraryAdapter(library, fmt)
    report = run_suite(suite_for(fmt), adapter, config)
    if not report.passed:
        raise VerificationError(report)
    return adapter
