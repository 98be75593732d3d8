"""
In-Memory Storage Implementation

The default backend. Records live in dicts keyed by composite tuples whose
first element is always the owner.

DESIGN DECISION: A single re-entrant lock guards every table and the
suggestion id sequence. transaction() holds the lock for the whole request
and snapshots the tables first; if the block raises, the snapshot is put
back, so a failed request leaves no partial writes and consumes no ids.

Records are pydantic models that are never mutated in place (writes replace
them), so a shallow copy of each table is a complete snapshot.
"""

import threading
from contextlib import contextmanager
from typing import Iterator, Optional
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
from subtrack.services.storage.interface import (
    AuditStorageInterface,
    TrackerStorage,
)


class InMemoryStorage(TrackerStorage):
    """Process-local storage for every tracker record."""

    def __init__(self):
        self._lock = threading.RLock()
        self._subscriptions: dict[tuple[str, str], Subscription] = {}
        self._payments: dict[tuple[str, str, int], PaymentRecord] = {}
        self._budgets: dict[tuple[str, Category], BudgetLimit] = {}
        self._suggestions: dict[tuple[str, int], Suggestion] = {}
        self._next_suggestion_id = 1

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self._lock:
            snapshot = (
                dict(self._subscriptions),
                dict(self._payments),
                dict(self._budgets),
                dict(self._suggestions),
                self._next_suggestion_id,
            )
            try:
                yield
            except BaseException:
                (
                    self._subscriptions,
                    self._payments,
                    self._budgets,
                    self._suggestions,
                    self._next_suggestion_id,
                ) = snapshot
                raise

    # -------------------------------------------------------------------------
    # Subscriptions
    # -------------------------------------------------------------------------

    def get_subscription(
        self,
        owner: str,
        subscription_id: str,
    ) -> Optional[Subscription]:
        with self._lock:
            return self._subscriptions.get((owner, subscription_id))

    def put_subscription(self, owner: str, subscription: Subscription) -> None:
        with self._lock:
            self._subscriptions[(owner, subscription.subscription_id)] = subscription

    def delete_subscription(self, owner: str, subscription_id: str) -> bool:
        with self._lock:
            return self._subscriptions.pop((owner, subscription_id), None) is not None

    def list_subscriptions(self, owner: str) -> list[Subscription]:
        with self._lock:
            return [
                sub for (key_owner, _), sub in self._subscriptions.items()
                if key_owner == owner
            ]

    # -------------------------------------------------------------------------
    # Payments
    # -------------------------------------------------------------------------

    def put_payment(self, owner: str, payment: PaymentRecord) -> None:
        key = (owner, payment.subscription_id, payment.payment_date)
        with self._lock:
            self._payments[key] = payment

    def list_payments(
        self,
        owner: str,
        subscription_id: str,
    ) -> list[PaymentRecord]:
        with self._lock:
            payments = [
                payment
                for (key_owner, key_sub, _), payment in self._payments.items()
                if key_owner == owner and key_sub == subscription_id
            ]
        payments.sort(key=lambda p: p.payment_date)
        return payments

    # -------------------------------------------------------------------------
    # Budgets
    # -------------------------------------------------------------------------

    def put_budget(self, owner: str, budget: BudgetLimit) -> None:
        with self._lock:
            self._budgets[(owner, budget.category)] = budget

    def get_budget(self, owner: str, category: Category) -> Optional[BudgetLimit]:
        with self._lock:
            return self._budgets.get((owner, category))

    def list_budgets(self, owner: str) -> list[BudgetLimit]:
        with self._lock:
            return [
                budget for (key_owner, _), budget in self._budgets.items()
                if key_owner == owner
            ]

    # -------------------------------------------------------------------------
    # Suggestions
    # -------------------------------------------------------------------------

    def append_suggestions(
        self,
        owner: str,
        drafts: list[SuggestionDraft],
    ) -> list[Suggestion]:
        with self._lock:
            # Build everything first so a bad draft consumes no ids
            created = [
                draft.to_suggestion(self._next_suggestion_id + offset)
                for offset, draft in enumerate(drafts)
            ]
            for suggestion in created:
                self._suggestions[(owner, suggestion.suggestion_id)] = suggestion
            self._next_suggestion_id += len(created)
        return created

    def list_suggestions(self, owner: str) -> list[Suggestion]:
        with self._lock:
            suggestions = [
                suggestion for (key_owner, _), suggestion in self._suggestions.items()
                if key_owner == owner
            ]
        suggestions.sort(key=lambda s: s.suggestion_id)
        return suggestions

    def peek_next_suggestion_id(self) -> int:
        with self._lock:
            return self._next_suggestion_id


class InMemoryAuditStorage(AuditStorageInterface):
    """
    Process-local audit log.

    Audit events are append-only.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._events: list[AuditEvent] = []

    def append_event(self, event: AuditEvent) -> bool:
        with self._lock:
            self._events.append(event)
        return True

    def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        with self._lock:
            events = [e for e in self._events if e.correlation_id == correlation_id]
        events.sort(key=lambda e: e.timestamp)
        return events

    def get_events_by_entity(
        self,
        owner: str,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        with self._lock:
            events = [
                e for e in self._events
                if e.owner == owner
                and e.entity_type == entity_type
                and e.entity_id == entity_id
            ]
        events.sort(key=lambda e: e.timestamp)
        return events

    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        with self._lock:
            events = list(reversed(self._events))
        return events[:limit]
