"""Shared test fixtures for ketik tests."""

from __future__ import annotations

import pytest
from PySide6.QtCore import QCoreApplication


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, now: int = 1_000_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(scope="session")
def qcore_app() -> QCoreApplication:
    """Single Qt application object for tests that create timers."""
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    return app
