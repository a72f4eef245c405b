"""Root conftest — shared test configuration and collaborator fakes."""

import os

import pytest

# Ensure tests never pick up a developer's .env overrides
os.environ.setdefault("API_DISPATCH_APP_ENV", "test")
os.environ.setdefault("API_DISPATCH_LOG_FORMAT", "text")


class RecordingLogSink:
    """LogSink that keeps every (message, category, level) call."""

    def __init__(self):
        self.records: list[tuple[str, str, str]] = []

    def log(self, message: str, category: str, level: str) -> None:
        self.records.append((message, category, level))

    def messages(self, level: str | None = None) -> list[str]:
        return [m for m, _, lvl in self.records if level is None or lvl == level]


@pytest.fixture
def log_sink():
    return RecordingLogSink()
