"""Shared fixtures for sprintrack tests."""

import pytest

from sprintrack.store import MemoryStore
from sprintrack.tracker import Tracker


@pytest.fixture()
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture()
def tracker(store) -> Tracker:
    return Tracker(store)
