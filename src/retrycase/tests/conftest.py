"""Shared fixtures for retrycase tests."""

from __future__ import annotations

import pytest

from retrycase.foundation.config import clear_settings_cache

from .support import RecordingTimer


@pytest.fixture(autouse=True)
def clean_settings() -> object:
    """Reset cached settings around each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def timer() -> RecordingTimer:
    return RecordingTimer()
