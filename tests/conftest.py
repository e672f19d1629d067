"""
Shared fixtures for the FixFlow test suite.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from core.ai_client import NotificationJudge
from models.intake import IntakeRequest
from models.notification import AIJudgment
from services.entity_store import InMemoryEntityStore


class FakeClock:
    """Deterministic clock; advance() moves it forward."""

    def __init__(self, start=None):
        self.now = start or datetime(2026, 10, 18, 9, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)
        return self.now


class SequentialIds:
    """Id factory producing cus_1, dev_1, job_1, job_2 ..."""

    def __init__(self):
        self._counters = {}

    def __call__(self, prefix):
        self._counters[prefix] = self._counters.get(prefix, 0) + 1
        return f"{prefix}_{self._counters[prefix]}"


# Fixtures

@pytest.fixture
def clock():
    """A clock frozen at 2026-10-18 09:00 UTC."""
    return FakeClock()


@pytest.fixture
def store(clock):
    """Empty in-memory store with predictable ids."""
    return InMemoryEntityStore(clock=clock, id_factory=SequentialIds())


@pytest.fixture
def mock_judge():
    """AI judge that declines by default."""
    judge = MagicMock(spec=NotificationJudge)
    judge.judge.return_value = AIJudgment(notify=False)
    return judge


@pytest.fixture
def intake_request():
    """A valid intake for John Doe's iPhone."""
    return IntakeRequest(
        customer_name="John Doe",
        customer_phone="123-456-7890",
        customer_email="john.doe@example.com",
        device_serial="SN12345678",
        device_model="iPhone 13",
        device_type="Phone",
        issue_description="Screen is cracked after a drop, touch is intermittent.",
        tags=["screen_replacement"],
        urgency="high",
    )
