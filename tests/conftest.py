"""Shared fixtures for the chatscroll test suite."""

from __future__ import annotations

import os

import pytest

os.environ.setdefault("CHATSCROLL_LOG_LEVEL", "WARNING")

from chatscroll.core.config import ScrollSettings  # noqa: E402
from tests.support import ManualScheduler, RecordingHost, RecordingLoader  # noqa: E402


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def host() -> RecordingHost:
    return RecordingHost()


@pytest.fixture
def loader() -> RecordingLoader:
    return RecordingLoader()


@pytest.fixture
def settings() -> ScrollSettings:
    return ScrollSettings(
        bottom_epsilon=50,
        top_threshold=200,
        user_scroll_cooldown_ms=2000,
        timestamp_gap_seconds=300,
    )
