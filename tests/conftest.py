"""
Shared fixtures.
"""

import time

import pytest


@pytest.fixture
def local_tz(monkeypatch):
    """Set the process time zone for one test, restoring it afterwards."""

    def set_zone(name: str) -> None:
        monkeypatch.setenv("TZ", name)
        time.tzset()

    yield set_zone

    monkeypatch.undo()
    time.tzset()
