"""Shared fixtures for the Moneybook test suite."""

from datetime import datetime, timedelta, timezone

import pytest

from moneybook.models.transaction import Transaction
from moneybook.reports import CivilClock
from moneybook.services.storage import InMemoryRecordStore


class FakeClock:
    """Callable clock whose time only moves when a test says so."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


def make_transaction(
    type: str,
    amount,
    timestamp: str,
    id: str = None,
    category: str = "General",
) -> Transaction:
    """Build a stored transaction from an ISO timestamp."""
    return Transaction(
        id=id or f"{type}-{timestamp}",
        type=type,
        amount=amount,
        category=category,
        timestamp=datetime.fromisoformat(timestamp.replace("Z", "+00:00")),
    )


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 20, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def store(clock):
    return InMemoryRecordStore(clock=clock)


@pytest.fixture
def civil():
    """UTC+8 civil clock."""
    return CivilClock(480)
