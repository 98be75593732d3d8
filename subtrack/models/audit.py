"""
Audit Models for the Subscription Tracker

Every write, every generation run and every rejected request is recorded.
This provides:
1. Traceability of how a caller's records reached their current state
2. Debugging information when a request is rejected
3. A history that survives deletes (deleting a subscription leaves its
   audit trail in place)

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Subscription lifecycle
    SUBSCRIPTION_ADDED = "subscription_added"
    USAGE_UPDATED = "usage_updated"
    PAYMENT_RECORDED = "payment_recorded"
    SUBSCRIPTION_DELETED = "subscription_deleted"

    # Budgets
    BUDGET_SET = "budget_set"

    # Suggestions
    SUGGESTIONS_GENERATED = "suggestions_generated"

    # Failures
    OPERATION_REJECTED = "operation_rejected"
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event was logged (UTC wall clock)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = Field(default=AuditSeverity.INFO)

    # Who and what
    owner: Optional[str] = Field(
        default=None,
        description="Caller the event was recorded for"
    )
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'subscription', 'budget')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="Subscription id, category name, etc."
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = None

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)

    error_code: Optional[str] = None
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "owner": self.owner,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
        }

    def to_sheets_row(self) -> list:
        """
        Convert to a row suitable for Google Sheets storage.

        Returns columns in order:
        [event_id, timestamp, event_type, severity, owner, entity_type,
         entity_id, correlation_id, description, details_json, error_code,
         error_message]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.owner or "",
            self.entity_type or "",
            self.entity_id or "",
            str(self.correlation_id) if self.correlation_id else "",
            self.description,
            json.dumps(self.details) if self.details else "",
            self.error_code or "",
            self.error_message or "",
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.subscription_added(owner, sub_id, summary, correlation_id)
        event = AuditEventBuilder.operation_rejected(owner, "add_subscription", error, correlation_id)
    """

    @staticmethod
    def subscription_added(
        owner: str,
        subscription_id: str,
        summary: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUBSCRIPTION_ADDED,
            owner=owner,
            entity_type="subscription",
            entity_id=subscription_id,
            correlation_id=correlation_id,
            description=f"Subscription added: {subscription_id}",
            details={"summary": summary},
        )

    @staticmethod
    def usage_updated(
        owner: str,
        subscription_id: str,
        old_frequency: int,
        new_frequency: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USAGE_UPDATED,
            owner=owner,
            entity_type="subscription",
            entity_id=subscription_id,
            correlation_id=correlation_id,
            description=f"Usage frequency changed {old_frequency} -> {new_frequency}",
            details={
                "old_frequency": old_frequency,
                "new_frequency": new_frequency,
            },
        )

    @staticmethod
    def payment_recorded(
        owner: str,
        subscription_id: str,
        amount: int,
        payment_date: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PAYMENT_RECORDED,
            owner=owner,
            entity_type="subscription",
            entity_id=subscription_id,
            correlation_id=correlation_id,
            description=f"Payment of {amount} recorded",
            details={
                "amount": amount,
                "payment_date": payment_date,
            },
        )

    @staticmethod
    def subscription_deleted(
        owner: str,
        subscription_id: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUBSCRIPTION_DELETED,
            owner=owner,
            entity_type="subscription",
            entity_id=subscription_id,
            correlation_id=correlation_id,
            description=f"Subscription deleted: {subscription_id}",
        )

    @staticmethod
    def budget_set(
        owner: str,
        category: str,
        monthly_limit: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_SET,
            owner=owner,
            entity_type="budget",
            entity_id=category,
            correlation_id=correlation_id,
            description=f"Budget for {category} set to {monthly_limit}",
            details={"monthly_limit": monthly_limit},
        )

    @staticmethod
    def suggestions_generated(
        owner: str,
        suggestion_ids: list[int],
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUGGESTIONS_GENERATED,
            owner=owner,
            entity_type="suggestion",
            correlation_id=correlation_id,
            description=f"Generated {len(suggestion_ids)} suggestions",
            details={"suggestion_ids": suggestion_ids},
        )

    @staticmethod
    def operation_rejected(
        owner: str,
        operation: str,
        error_code: str,
        error_message: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OPERATION_REJECTED,
            severity=AuditSeverity.WARNING,
            owner=owner,
            correlation_id=correlation_id,
            description=f"{operation} rejected: {error_code}",
            details={"operation": operation},
            error_code=error_code,
            error_message=error_message,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
