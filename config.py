"""
Campaign configuration.

Settings are validated with pydantic and come either from keyword
arguments (the CLI builds them from flags) or from the ``campaign``
mapping of a YAML file:

    campaign:
      formats: [q64x64, sd59x18]
      max_examples: 500
      seed: 1234
      exclude: ["pow.high_exponent"]
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

from formats import FORMATS

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class CampaignSettings(BaseModel):
    """What to verify and how hard to try."""

    formats: list[str] = Field(default_factory=lambda: list(FORMATS))
    max_examples: int = Field(default=200, gt=0)
    seed: int | None = None
    include: list[str] = Field(default_factory=list)
    exclude: list[str] = Field(default_factory=list)
    deadline_ms: int | None = Field(default=None, gt=0)
    log_level: str = "INFO"

    @field_validator("formats")
    @classmethod
    def formats_known(cls, v: list[str]) -> list[str]:
        names = [name.strip().lower() for name in v]
        if not names:
            raise ValueError("at least one format is required")
        unknown = [name for name in names if name not in FORMATS]
        if unknown:
            raise ValueError(
                f"unknown format(s) {', '.join(unknown)}; expected one of {', '.join(FORMATS)}"
            )
        return list(dict.fromkeys(names))

    @field_validator("log_level")
    @classmethod
    def log_level_known(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level


def load_settings(path: str | Path, **overrides: Any) -> CampaignSettings:
    """
    Read the ``campaign`` mapping of a YAML file.

    Overrides whose value is None are ignored, so CLI flags that were not
    given leave the file's values in place.
    """
    with open(path, encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}
    table = dict(data.get("campaign") or {})
    table.update({k: v for k, v in overrides.items() if v is not None})
    logger.debug("campaign settings from %s: %s", path, table)
    return CampaignSettings(**table)
