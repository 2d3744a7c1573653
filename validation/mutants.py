"""Mutation analysis for the property suites.

Each mutant is a reference library with one deliberately injected bug of
the kind fixed-point code actually ships with: a missing range check, a
wrapped negation, a division that returns instead of failing, an
off-by-one in a transcendental.  Running the full suite against every
mutant shows whether the suite notices.

Run directly::

    python -m validation.mutants
    python -m validation.mutants --max-examples 50

The goal: every mutant should be *killed* by at least one property.
Surviving mutants reveal concrete gaps in the suite.
"""
from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass, field
from typing import Any

sys.path.insert(0, ".")

from binary_math import Q64x64Math
from config import CampaignSettings
from decimal_math import SD59x18Math, UD60x18Math
from formats import FixedPointFormat, Q64X64, SD59X18, UD60X18
from harness import VerificationReport, run_suite, suite_for
from wrappers import LibraryAdapter


def _wrap(fmt: FixedPointFormat, raw: int) -> int:
    """Two's-complement wrap-around, as unchecked machine arithmetic does."""
    span = 1 << fmt.width
    return (raw - fmt.min_raw) % span + fmt.min_raw


# ---------------------------------------------------------------------------
# 64.64 mutants
# ---------------------------------------------------------------------------

class AddWraps(Q64x64Math):
    def add(self, x: int, y: int) -> int:
        return _wrap(self.fmt, x + y)


class NegMinWraps(Q64x64Math):
    def neg(self, x: int) -> int:
        return _wrap(self.fmt, -x)


class MulDropsSign(Q64x64Math):
    def mul(self, x: int, y: int) -> int:
        return super().mul(abs(x), abs(y))


class DivByZeroReturnsZero(Q64x64Math):
    def div(self, x: int, y: int) -> int:
        if y == 0:
            return 0
        return super().div(x, y)


class InvOfZeroReturnsZero(Q64x64Math):
    def inv(self, x: int) -> int:
        if x == 0:
            return 0
        return super().inv(x)


class AvgOverflows(Q64x64Math):
    def avg(self, x: int, y: int) -> int:
        return self.add(x, y) >> 1


class SqrtOfNegativeIsZero(Q64x64Math):
    def sqrt(self, x: int) -> int:
        if x < 0:
            return 0
        return super().sqrt(x)


class Log2OffByOne(Q64x64Math):
    def log2(self, x: int) -> int:
        return super().log2(x) + 1


class Exp2OffByOneOctave(Q64x64Math):
    def exp2(self, x: int) -> int:
        return super().exp2(x + (1 << 64))


class FromIntUnchecked(Q64x64Math):
    def from_int(self, n: int) -> int:
        return _wrap(self.fmt, n << 64)


# ---------------------------------------------------------------------------
# Decimal mutants
# ---------------------------------------------------------------------------

class SignedAddUnchecked(SD59x18Math):
    def add(self, x: int, y: int) -> int:
        return _wrap(self.fmt, x + y)


class SignedPowuDropsSign(SD59x18Math):
    def powu(self, x: int, n: int) -> int:
        return abs(super().powu(x, n))


class SignedSqrtOfNegativeIsZero(SD59x18Math):
    def sqrt(self, x: int) -> int:
        if x < 0:
            return 0
        return super().sqrt(x)


class SignedLog10OneUlpLow(SD59x18Math):
    def log10(self, x: int) -> int:
        return super().log10(x) - 1


class UnsignedSubUnchecked(UD60x18Math):
    def sub(self, x: int, y: int) -> int:
        return _wrap(self.fmt, x - y)


class UnsignedDivByZeroReturnsMax(UD60x18Math):
    def div(self, x: int, y: int) -> int:
        if y == 0:
            return self.fmt.max_raw
        return super().div(x, y)


class UnsignedGavgOfZero(UD60x18Math):
    def gavg(self, x: int, y: int) -> int:
        if x == 0 or y == 0:
            return max(x, y)
        return super().gavg(x, y)


# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------

@dataclass
class Mutant:
    name: str
    fmt: FixedPointFormat
    library: Any
    description: str


@dataclass
class MutantOutcome:
    mutant: Mutant
    killed: bool
    killed_by: list[str] = field(default_factory=list)


@dataclass
class MutationReport:
    outcomes: list[MutantOutcome] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def killed(self) -> int:
        return sum(1 for o in self.outcomes if o.killed)

    @property
    def survived(self) -> int:
        return self.total - self.killed

    @property
    def survivors(self) -> list[Mutant]:
        return [o.mutant for o in self.outcomes if not o.killed]

    @property
    def score(self) -> float:
        if self.total == 0:
            return 0.0
        return self.killed / self.total

    def summary(self) -> str:
        lines = [
            "Mutation Analysis Report",
            "=" * 40,
            f"Total mutants:   {self.total}",
            f"Killed:          {self.killed}",
            f"Survived:        {self.survived}",
            f"Mutation score:  {self.score:.1%}",
            "",
        ]
        for o in self.outcomes:
            status = "killed  " if o.killed else "SURVIVED"
            lines.append(f"  [{status}] {o.mutant.fmt.name}/{o.mutant.name}")
            if o.killed:
                lines.append(f"       by {', '.join(o.killed_by[:3])}")
            else:
                lines.append(f"       {o.mutant.description}")
                lines.append("       -> Add a property that detects this mutation")
        return "\n".join(lines)


def all_mutants() -> list[Mutant]:
    return [
        Mutant("add_wraps", Q64X64, AddWraps(), "add wraps around instead of failing"),
        Mutant("neg_min_wraps", Q64X64, NegMinWraps(), "-MIN returns MIN"),
        Mutant("mul_drops_sign", Q64X64, MulDropsSign(), "mul returns |x * y|"),
        Mutant("div_by_zero_returns_zero", Q64X64, DivByZeroReturnsZero(), "x / 0 returns 0"),
        Mutant("inv_of_zero_returns_zero", Q64X64, InvOfZeroReturnsZero(), "1 / 0 returns 0"),
        Mutant("avg_overflows", Q64X64, AvgOverflows(), "avg forms x + y with a range check"),
        Mutant("sqrt_of_negative_is_zero", Q64X64, SqrtOfNegativeIsZero(), "sqrt(x < 0) returns 0"),
        Mutant("log2_off_by_one", Q64X64, Log2OffByOne(), "log2 is one ulp high"),
        Mutant("exp2_off_by_one_octave", Q64X64, Exp2OffByOneOctave(), "exp2(x) returns exp2(x + 1)"),
        Mutant("from_int_unchecked", Q64X64, FromIntUnchecked(), "from_int wraps large integers"),
        Mutant("add_unchecked", SD59X18, SignedAddUnchecked(), "add wraps around instead of failing"),
        Mutant("powu_drops_sign", SD59X18, SignedPowuDropsSign(), "odd powers of negatives are positive"),
        Mutant("sqrt_of_negative_is_zero", SD59X18, SignedSqrtOfNegativeIsZero(), "sqrt(x < 0) returns 0"),
        Mutant("log10_one_ulp_low", SD59X18, SignedLog10OneUlpLow(), "log10 is one ulp low"),
        Mutant("sub_unchecked", UD60X18, UnsignedSubUnchecked(), "x - y wraps below zero"),
        Mutant("div_by_zero_returns_max", UD60X18, UnsignedDivByZeroReturnsMax(), "x / 0 returns MAX"),
        Mutant("gavg_of_zero", UD60X18, UnsignedGavgOfZero(), "gavg(x, 0) returns x"),
    ]


def run_mutant(mutant: Mutant, config: CampaignSettings | None = None) -> MutantOutcome:
    adapter = LibraryAdapter(mutant.library, mutant.fmt)
    report: VerificationReport = run_suite(suite_for(mutant.fmt), adapter, config)
    return MutantOutcome(
        mutant=mutant,
        killed=not report.passed,
        killed_by=[r.property_name for r in report.failures],
    )


def run_mutants(
    mutants: list[Mutant] | None = None,
    config: CampaignSettings | None = None,
) -> MutationReport:
    report = MutationReport()
    for mutant in mutants if mutants is not None else all_mutants():
        report.outcomes.append(run_mutant(mutant, config))
    return report


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Run the property suites against injected bugs.")
    parser.add_argument("--max-examples", type=int, default=50)
    parser.add_argument("--seed", type=int, default=0)
    args = parser.parse_args(argv)

    config = CampaignSettings(max_examples=args.max_examples, seed=args.seed, log_level="WARNING")
    print("Running mutants ...\n")
    report = run_mutants(config=config)
    print(report.summary())

    if report.score < 1.0:
        print("\nTarget:  100% mutation score")
        print(f"Current: {report.score:.1%}")
        print(f"Action:  Add properties for the {report.survived} surviving mutant(s)")
        sys.exit(1)
    else:
        print("\nMutation score target met!")


if __name__ == "__main__":
    main()
