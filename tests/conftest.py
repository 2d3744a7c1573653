"""Shared fixtures and Hypothesis profiles for the fixed-point tests."""

from __future__ import annotations

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from hypothesis import HealthCheck, Verbosity, settings

from binary_math import Q64x64Math
from decimal_math import SD59x18Math, UD60x18Math
from formats import Q64X64, SD59X18, UD60X18
from wrappers import LibraryAdapter

# ---------------------------------------------------------------------------
# Hypothesis profiles
# ---------------------------------------------------------------------------

settings.register_profile(
    "default",
    max_examples=100,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)

settings.register_profile(
    "ci",
    max_examples=500,
    verbosity=Verbosity.quiet,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)

settings.register_profile(
    "dev",
    max_examples=25,
    deadline=None,
)

settings.load_profile(os.environ.get("HYPOTHESIS_PROFILE", "default"))


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def q64() -> LibraryAdapter:
    return LibraryAdapter(Q64x64Math(), Q64X64)


@pytest.fixture
def sd59() -> LibraryAdapter:
    return LibraryAdapter(SD59x18Math(), SD59X18)


@pytest.fixture
def ud60() -> LibraryAdapter:
    return LibraryAdapter(UD60x18Math(), UD60X18)


@pytest.fixture
def profile_examples() -> int:
    """Examples per property under the active Hypothesis profile."""
    return settings().max_examples
