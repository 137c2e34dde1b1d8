"""Shared fixtures for withdefer tests."""

from collections.abc import Iterator

import pytest

from withdefer import CleanupRunner, RecordingSink, use_diagnostic_sink


@pytest.fixture
def sink() -> RecordingSink:
    """Provide a sink that records cleanup diagnostics."""
    return RecordingSink()


@pytest.fixture
def runner(sink: RecordingSink) -> CleanupRunner:
    """Provide a cleanup runner reporting to ``sink``."""
    return CleanupRunner(sink)


@pytest.fixture
def global_sink() -> Iterator[RecordingSink]:
    """Install a recording sink process-wide for the duration of a test."""
    recording = RecordingSink()
    with use_diagnostic_sink(recording):
        yield recording
