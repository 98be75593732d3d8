"""
Data Models Package

This package contains all Pydantic models used in the Subscription Tracker.
All data flowing through the system must conform to these schemas.
"""

from subtrack.models.subscription import (
    MAX_USAGE_FREQUENCY,
    SECONDS_PER_DAY,
    BudgetLimit,
    Category,
    PaymentRecord,
    StalenessEntry,
    Subscription,
    Suggestion,
    SuggestionDraft,
    SuggestionType,
    YearlySpendingChange,
    describe_subscription,
)
from subtrack.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from subtrack.models.context import CallerContext

__all__ = [
    # Subscription models
    "MAX_USAGE_FREQUENCY",
    "SECONDS_PER_DAY",
    "BudgetLimit",
    "Category",
    "PaymentRecord",
    "StalenessEntry",
    "Subscription",
    "Suggestion",
    "SuggestionDraft",
    "SuggestionType",
    "YearlySpendingChange",
    "describe_subscription",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
    # Request context
    "CallerContext",
]
