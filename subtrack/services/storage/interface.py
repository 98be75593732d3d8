"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep records in memory for tests and single-process use
2. Swap in Google Sheets (or a real database later)
3. Keep business logic decoupled from storage implementation

Every method takes the owner as its first argument. The services always
pass the authenticated caller's identity there, so the owner half of each
key never comes from request input.

The interface is intentionally simple - we're not building a full ORM.
Just the operations the tracker needs.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Optional
from uuid import UUID

from subtrack.models.audit import AuditEvent
from subtrack.models.subscription import (
    BudgetLimit,
    Category,
    PaymentRecord,
    Subscription,
    Suggestion,
    SuggestionDraft,
)


class SubscriptionStorageInterface(ABC):
    """Subscription records keyed by (owner, subscription_id)."""

    @abstractmethod
    def get_subscription(
        self,
        owner: str,
        subscription_id: str,
    ) -> Optional[Subscription]:
        """
        Retrieve one subscription.

        Returns:
            The subscription if found, None otherwise
        """
        pass

    @abstractmethod
    def put_subscription(self, owner: str, subscription: Subscription) -> None:
        """
        Insert or overwrite a subscription.

        Overwriting keeps the record's original enumeration position.
        """
        pass

    @abstractmethod
    def delete_subscription(self, owner: str, subscription_id: str) -> bool:
        """
        Delete a subscription.

        Returns:
            True if a record was removed, False if none existed
        """
        pass

    @abstractmethod
    def list_subscriptions(self, owner: str) -> list[Subscription]:
        """
        List the owner's subscriptions in enumeration (insertion) order.
        """
        pass


class PaymentStorageInterface(ABC):
    """Payment ledger keyed by (owner, subscription_id, payment_date)."""

    @abstractmethod
    def put_payment(self, owner: str, payment: PaymentRecord) -> None:
        """
        Record a payment.

        A payment with the same subscription and date replaces the earlier one.
        """
        pass

    @abstractmethod
    def list_payments(
        self,
        owner: str,
        subscription_id: str,
    ) -> list[PaymentRecord]:
        """
        List payments for one subscription, oldest first.
        """
        pass


class BudgetStorageInterface(ABC):
    """Budget limits keyed by (owner, category)."""

    @abstractmethod
    def put_budget(self, owner: str, budget: BudgetLimit) -> None:
        pass

    @abstractmethod
    def get_budget(self, owner: str, category: Category) -> Optional[BudgetLimit]:
        pass

    @abstractmethod
    def list_budgets(self, owner: str) -> list[BudgetLimit]:
        pass


class SuggestionStorageInterface(ABC):
    """
    Suggestions keyed by (owner, suggestion_id), plus the id sequence.

    CRITICAL: The suggestion id sequence is shared by every owner. It starts
    at 1 and only ever moves forward. An id is consumed only by
    append_suggestions, in the same step that persists the suggestion.
    """

    @abstractmethod
    def append_suggestions(
        self,
        owner: str,
        drafts: list[SuggestionDraft],
    ) -> list[Suggestion]:
        """
        Assign the next ids to the drafts, in order, and persist them.

        Returns:
            The persisted suggestions
        """
        pass

    @abstractmethod
    def list_suggestions(self, owner: str) -> list[Suggestion]:
        """List the owner's suggestions in id order."""
        pass

    @abstractmethod
    def peek_next_suggestion_id(self) -> int:
        """The id the next suggestion will receive (no side effects)."""
        pass


class TrackerStorage(
    SubscriptionStorageInterface,
    PaymentStorageInterface,
    BudgetStorageInterface,
    SuggestionStorageInterface,
):
    """
    Everything the tracker persists.

    transaction() groups the writes of one request. Backends that can
    roll back do so when the block raises.
    """

    @abstractmethod
    def transaction(self) -> AbstractContextManager:
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a correlation ID (one request).

        Returns:
            List of related events in chronological order
        """
        pass

    @abstractmethod
    def get_events_by_entity(
        self,
        owner: str,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        """
        Get all of an owner's events for a specific entity.

        Returns:
            List of events in chronological order
        """
        pass

    @abstractmethod
    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
