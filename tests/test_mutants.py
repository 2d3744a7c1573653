"""Every injected bug must be caught by its format's suite."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from config import CampaignSettings
from validation.mutants import MutationReport, all_mutants, main, run_mutant, run_mutants

MUTANTS = all_mutants()
CONFIG = CampaignSettings(max_examples=25, seed=99, log_level="WARNING")


@pytest.mark.parametrize(
    "mutant", MUTANTS, ids=[f"{m.fmt.name}-{m.name}" for m in MUTANTS]
)
def test_mutant_is_killed(mutant):
    outcome = run_mutant(mutant, CONFIG)
    assert outcome.killed, f"{mutant.name} survived: {mutant.description}"
    assert outcome.killed_by


class TestMutationReport:
    def test_names_unique_per_format(self):
        keys = [(m.fmt.name, m.name) for m in MUTANTS]
        assert len(keys) == len(set(keys))

    def test_every_format_mutated(self):
        assert {m.fmt.name for m in MUTANTS} == {"q64x64", "sd59x18", "ud60x18"}

    def test_empty_report(self):
        report = MutationReport()
        assert report.score == 0.0
        assert report.survivors == []

    def test_summary(self):
        config = CampaignSettings(max_examples=10, seed=1, include=["add.maximum"])
        report = run_mutants(MUTANTS[:1], config)
        assert report.killed == 1 and report.score == 1.0
        summary = report.summary()
        assert "Mutation score:  100.0%" in summary
        assert "add.maximum" in summary

    def test_survivor_listed(self):
        config = CampaignSettings(max_examples=10, seed=1, include=["sub.identity"])
        report = run_mutants(MUTANTS[:1], config)
        assert report.survived == 1
        assert "SURVIVED" in report.summary()


def test_main_exits_cleanly_when_all_killed(capsys, monkeypatch):
    monkeypatch.setattr("validation.mutants.all_mutants", lambda: MUTANTS[:2])
    main(["--max-examples", "10"])
    assert "Mutation score target met!" in capsys.readouterr().out
