"""
Audit Logger

DESIGN DECISION: Every write and every rejected request is logged.
This provides:
1. Complete traceability
2. Debugging capability
3. A per-subscription history that outlives the subscription itself

The audit logger:
- Gracefully handles failures (doesn't break the request if logging fails)
- Supports correlation IDs to trace the events of one request
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from subtrack.models.audit import AuditEvent, AuditEventBuilder
from subtrack.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. The configured audit storage (for persistence)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger()

    @property
    def storage(self) -> Optional[AuditStorageInterface]:
        return self._storage

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_subscription_added(
        self,
        owner: str,
        subscription_id: str,
        summary: str,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.subscription_added(
            owner=owner,
            subscription_id=subscription_id,
            summary=summary,
            correlation_id=correlation_id,
        ))

    def log_usage_updated(
        self,
        owner: str,
        subscription_id: str,
        old_frequency: int,
        new_frequency: int,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.usage_updated(
            owner=owner,
            subscription_id=subscription_id,
            old_frequency=old_frequency,
            new_frequency=new_frequency,
            correlation_id=correlation_id,
        ))

    def log_payment_recorded(
        self,
        owner: str,
        subscription_id: str,
        amount: int,
        payment_date: int,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.payment_recorded(
            owner=owner,
            subscription_id=subscription_id,
            amount=amount,
            payment_date=payment_date,
            correlation_id=correlation_id,
        ))

    def log_subscription_deleted(
        self,
        owner: str,
        subscription_id: str,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.subscription_deleted(
            owner=owner,
            subscription_id=subscription_id,
            correlation_id=correlation_id,
        ))

    def log_budget_set(
        self,
        owner: str,
        category: str,
        monthly_limit: int,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.budget_set(
            owner=owner,
            category=category,
            monthly_limit=monthly_limit,
            correlation_id=correlation_id,
        ))

    def log_suggestions_generated(
        self,
        owner: str,
        suggestion_ids: list[int],
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.suggestions_generated(
            owner=owner,
            suggestion_ids=suggestion_ids,
            correlation_id=correlation_id,
        ))

    def log_rejected(
        self,
        owner: str,
        operation: str,
        error_code: str,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        """Log a request that failed validation."""
        self.log(AuditEventBuilder.operation_rejected(
            owner=owner,
            operation=operation,
            error_code=error_code,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an unexpected error."""
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    CallerContext does this by default; use it directly when building
    contexts by hand.
    """
    return uuid4()
