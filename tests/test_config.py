"""Tests for campaign settings."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from pydantic import ValidationError

from config import CampaignSettings, load_settings


class TestCampaignSettings:
    def test_defaults(self):
        settings = CampaignSettings()
        assert settings.formats == ["q64x64", "sd59x18", "ud60x18"]
        assert settings.max_examples == 200
        assert settings.seed is None
        assert settings.log_level == "INFO"

    def test_formats_normalized(self):
        settings = CampaignSettings(formats=[" SD59X18", "q64x64", "sd59x18"])
        assert settings.formats == ["sd59x18", "q64x64"]

    def test_unknown_format(self):
        with pytest.raises(ValidationError, match="unknown format"):
            CampaignSettings(formats=["q128x128"])

    def test_empty_formats(self):
        with pytest.raises(ValidationError):
            CampaignSettings(formats=[])

    def test_max_examples_positive(self):
        with pytest.raises(ValidationError):
            CampaignSettings(max_examples=0)

    def test_log_level(self):
        assert CampaignSettings(log_level="debug").log_level == "DEBUG"
        with pytest.raises(ValidationError):
            CampaignSettings(log_level="LOUD")


class TestLoadSettings:
    def test_reads_campaign_mapping(self, tmp_path):
        path = tmp_path / "campaign.yaml"
        path.write_text(
            "campaign:\n"
            "  formats: [ud60x18]\n"
            "  max_examples: 50\n"
            "  seed: 7\n"
            "  exclude: [\"pow.*\"]\n"
        )
        settings = load_settings(path)
        assert settings.formats == ["ud60x18"]
        assert settings.max_examples == 50
        assert settings.seed == 7
        assert settings.exclude == ["pow.*"]

    def test_overrides_win_unless_none(self, tmp_path):
        path = tmp_path / "campaign.yaml"
        path.write_text("campaign:\n  max_examples: 50\n  seed: 7\n")
        settings = load_settings(path, max_examples=10, seed=None)
        assert settings.max_examples == 10
        assert settings.seed == 7

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_settings(path) == CampaignSettings()

    def test_invalid_file_values(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("campaign:\n  formats: [nope]\n")
        with pytest.raises(ValidationError):
            load_settings(path)
