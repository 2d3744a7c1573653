"""Verify fixed-point libraries against their property suites.

Runs every selected property of each requested format and prints one
report per format.  Exits non-zero when any property is falsified.

Usage::

    python -m validation.run_campaign
    python -m validation.run_campaign --formats q64x64 --max-examples 1000 --seed 7
    python -m validation.run_campaign --config campaign.yaml --exclude "pow.*"
    python -m validation.run_campaign --formats sd59x18 --library mylib:SignedMath

``--library`` takes ``module:Class`` and verifies an instance of that
class in place of the bundled reference implementation.
"""
from __future__ import annotations

import argparse
import importlib
import logging
import sys
from typing import Any

sys.path.insert(0, ".")

from config import CampaignSettings, LOG_LEVELS, load_settings
from formats import FORMATS
from harness import VerificationReport, reference_library, run_suite, suite_for
from wrappers import LibraryAdapter

logger = logging.getLogger(__name__)


def load_library(target: str) -> Any:
    """Instantiate ``module:Class``."""
    module_name, _, class_name = target.partition(":")
    if not module_name or not class_name:
        raise ValueError(f"--library expects module:Class, got {target!r}")
    module = importlib.import_module(module_name)
    return getattr(module, class_name)()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--config", help="YAML file with a campaign mapping")
    parser.add_argument("--formats", nargs="+", choices=sorted(FORMATS))
    parser.add_argument("--max-examples", type=int)
    parser.add_argument("--seed", type=int)
    parser.add_argument("--include", action="append", metavar="PATTERN",
                        help="only run properties matching this glob (repeatable)")
    parser.add_argument("--exclude", action="append", metavar="PATTERN",
                        help="skip properties matching this glob (repeatable)")
    parser.add_argument("--deadline-ms", type=int)
    parser.add_argument("--log-level", choices=LOG_LEVELS)
    parser.add_argument("--library", metavar="MODULE:CLASS",
                        help="library to verify instead of the reference one")
    return parser.parse_args(argv)


def build_settings(args: argparse.Namespace) -> CampaignSettings:
    overrides = {
        "formats": args.formats,
        "max_examples": args.max_examples,
        "seed": args.seed,
        "include": args.include,
        "exclude": args.exclude,
        "deadline_ms": args.deadline_ms,
        "log_level": args.log_level,
    }
    if args.config:
        return load_settings(args.config, **overrides)
    return CampaignSettings(**{k: v for k, v in overrides.items() if v is not None})


def run_campaign(config: CampaignSettings, library: Any = None) -> list[VerificationReport]:
    reports = []
    for name in config.formats:
        fmt = FORMATS[name]
        target = library if library is not None else reference_library(fmt)
        logger.info("verifying %s as %s", type(target).__name__, fmt.name)
        reports.append(run_suite(suite_for(fmt), LibraryAdapter(target, fmt), config))
    return reports


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    config = build_settings(args)
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    library = None
    if args.library:
        if len(config.formats) != 1:
            print("--library needs exactly one format (use --formats)")
            sys.exit(2)
        library = load_library(args.library)

    reports = run_campaign(config, library)
    for report in reports:
        print(report.summary())
        print()

    failed = [r.suite_name for r in reports if not r.passed]
    if failed:
        print(f"Falsified properties in: {', '.join(failed)}")
        sys.exit(1)
    print("All properties held.")


if __name__ == "__main__":
    main()
