"""Tests for the campaign command line."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from config import CampaignSettings
from validation.run_campaign import build_settings, load_library, main, parse_args, run_campaign


class TestArguments:
    def test_flags_become_settings(self):
        args = parse_args([
            "--formats", "q64x64", "ud60x18", "--max-examples", "30", "--seed", "5",
            "--include", "add.*", "--include", "sub.*", "--log-level", "DEBUG",
        ])
        settings = build_settings(args)
        assert settings.formats == ["q64x64", "ud60x18"]
        assert settings.max_examples == 30
        assert settings.seed == 5
        assert settings.include == ["add.*", "sub.*"]
        assert settings.log_level == "DEBUG"

    def test_no_flags_give_defaults(self):
        assert build_settings(parse_args([])) == CampaignSettings()

    def test_config_file_with_override(self, tmp_path):
        path = tmp_path / "campaign.yaml"
        path.write_text("campaign:\n  formats: [sd59x18]\n  max_examples: 80\n")
        settings = build_settings(parse_args(["--config", str(path), "--max-examples", "12"]))
        assert settings.formats == ["sd59x18"]
        assert settings.max_examples == 12

    def test_unknown_format_rejected(self):
        with pytest.raises(SystemExit):
            parse_args(["--formats", "q8x8"])


class TestLibraryLoading:
    def test_module_and_class(self):
        library = load_library("decimal_math:UD60x18Math")
        assert type(library).__name__ == "UD60x18Math"

    def test_malformed(self):
        with pytest.raises(ValueError):
            load_library("decimal_math")


class TestCampaign:
    def test_reference_libraries_pass(self):
        config = CampaignSettings(max_examples=10, seed=3, include=["add.*", "sqrt.*"])
        reports = run_campaign(config)
        assert [r.suite_name for r in reports] == ["q64x64", "sd59x18", "ud60x18"]
        assert all(r.passed for r in reports)

    def test_main_success(self, capsys):
        main(["--formats", "q64x64", "--max-examples", "10", "--seed", "1",
              "--include", "neg.*", "--log-level", "WARNING"])
        out = capsys.readouterr().out
        assert "--- q64x64 ---" in out
        assert "All properties held." in out

    def test_main_fails_on_broken_library(self, capsys):
        with pytest.raises(SystemExit) as info:
            main(["--formats", "q64x64", "--max-examples", "10", "--seed", "1",
                  "--include", "neg.*", "--library", "validation.mutants:NegMinWraps",
                  "--log-level", "WARNING"])
        assert info.value.code == 1
        assert "[FAIL] neg.minimum" in capsys.readouterr().out

    def test_library_needs_single_format(self):
        with pytest.raises(SystemExit) as info:
            main(["--library", "binary_math:Q64x64Math", "--log-level", "WARNING"])
        assert info.value.code == 2
