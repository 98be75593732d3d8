"""
Pytest fixtures for Subscription Tracker tests.

Provides:
- A controllable clock
- In-memory storage and audit storage
- A wired tracker and caller contexts for two owners
"""

import pytest

from subtrack.audit import AuditLogger
from subtrack.clock import FixedClock
from subtrack.config import AppSettings
from subtrack.models import CallerContext
from subtrack.orchestrator import SubscriptionTracker
from subtrack.services.storage import InMemoryAuditStorage, InMemoryStorage


T0 = 1_700_000_000


@pytest.fixture
def clock():
    return FixedClock(T0)


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def tracker(storage, clock, audit_storage):
    return SubscriptionTracker(
        storage=storage,
        clock=clock,
        audit_logger=AuditLogger(audit_storage),
        settings=AppSettings(),
    )


@pytest.fixture
def alice():
    return CallerContext(owner="alice")


@pytest.fixture
def bob():
    return CallerContext(owner="bob")


@pytest.fixture
def add_subscription(tracker):
    """Add a subscription with sensible defaults."""
    def _add(context, subscription_id="netflix", **overrides):
        fields = {
            "name": "Netflix",
            "amount": 300,
            "category": "entertainment",
            "billing_cycle_days": 30,
            "start_date": T0,
            "usage_frequency": 5,
        }
        fields.update(overrides)
        tracker.add_subscription(context, subscription_id, **fields)
    return _add
