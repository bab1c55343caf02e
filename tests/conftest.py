"""Shared test fixtures."""

from pathlib import Path

import pytest

from src.delivery.router import DeliveryRouter
from src.scheduler import session as session_module
from src.scheduler.service import ReminderService
from src.scheduler.store import ReminderStore


@pytest.fixture
def store(tmp_path: Path) -> ReminderStore:
    """Create a ReminderStore backed by a temp document."""
    return ReminderStore(path=tmp_path / "reminders.json")


@pytest.fixture
def service(store: ReminderStore) -> ReminderService:
    return ReminderService(store=store, timezone="UTC")


@pytest.fixture(autouse=True)
def _reset_singletons():
    """Keep module-level state from leaking between tests."""
    ReminderStore._reset()
    DeliveryRouter._reset()
    session_module._sessions.clear()
    yield
    ReminderStore._reset()
    DeliveryRouter._reset()
    session_module._sessions.clear()
