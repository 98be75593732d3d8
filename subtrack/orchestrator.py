"""
Main Orchestrator for the Subscription Tracker

This module ties together all the components and exposes the request
surface. Each public method of SubscriptionTracker is one request:

- writes go through the validating services inside a storage transaction
- reads pass the caller's subscriptions through the analytics engine
- generation reads analytics output and writes through suggestion storage

DESIGN DECISION: The orchestrator enforces the boundaries:
- The owner of every record comes from the CallerContext, never from a
  request argument
- The current time comes from the injected Clock, read once per request
- Every write and every rejection is audited

Failures are raised to the caller after being recorded in the audit trail:
SubscriptionTrackerError subclasses as rejections, StorageError as a
system error.
"""

from contextlib import contextmanager
from typing import Iterator, Optional, Union

import structlog

from subtrack.analytics import (
    monthly_cost,
    rarely_used,
    spending_by_category,
    staleness_report,
    total_monthly_spending,
    upcoming_renewals,
    yearly_spending_change,
)
from subtrack.audit import AuditLogger, create_correlation_id
from subtrack.clock import Clock, SystemClock
from subtrack.config import AppSettings, get_settings
from subtrack.errors import SubscriptionTrackerError
from subtrack.models.context import CallerContext
from subtrack.models.subscription import (
    BudgetLimit,
    Category,
    PaymentRecord,
    StalenessEntry,
    Subscription,
    Suggestion,
    YearlySpendingChange,
    describe_subscription,
)
from subtrack.services import BudgetService, SubscriptionService
from subtrack.services.storage import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsStorage,
    InMemoryAuditStorage,
    InMemoryStorage,
    StorageError,
    TrackerStorage,
)
from subtrack.suggestions import SuggestionGenerator


logger = structlog.get_logger(__name__)


def caller_context(owner: str) -> CallerContext:
    """Build the context for a request made by an authenticated owner."""
    return CallerContext(owner=owner, correlation_id=create_correlation_id())


class SubscriptionTracker:
    """
    Request surface of the tracker.

    Every method takes the caller's context first. Write methods return
    None (an acknowledgement); read methods return records or totals.
    """

    def __init__(
        self,
        storage: Optional[TrackerStorage] = None,
        clock: Optional[Clock] = None,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[AppSettings] = None,
    ):
        self._storage = storage or InMemoryStorage()
        self._clock = clock or SystemClock()
        self._audit_logger = audit_logger or AuditLogger()
        self._settings = settings or get_settings().app

        self._subscriptions = SubscriptionService(self._storage)
        self._budgets = BudgetService(self._storage)
        self._generator = SuggestionGenerator(
            self._storage,
            rarely_used_threshold=self._settings.rarely_used_threshold,
            renewal_window_days=self._settings.renewal_window_days,
        )

    @property
    def storage(self) -> TrackerStorage:
        return self._storage

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit_logger

    @contextmanager
    def _audited(self, context: CallerContext, operation: str) -> Iterator[None]:
        """Record rejected requests and storage failures in the audit trail, then re-raise."""
        try:
            yield
        except StorageError as e:
            self._audit_logger.log_error(
                error_type=type(e).__name__,
                error_message=str(e),
                details={"operation": operation, "owner": context.owner},
                correlation_id=context.correlation_id,
            )
            raise
        except SubscriptionTrackerError as e:
            self._audit_logger.log_rejected(
                owner=context.owner,
                operation=operation,
                error_code=e.code,
                error_message=e.message,
                correlation_id=context.correlation_id,
            )
            raise

    # =========================================================================
    # WRITES
    # =========================================================================

    def add_subscription(
        self,
        context: CallerContext,
        subscription_id: str,
        name: str,
        amount: int,
        category: Union[str, Category],
        billing_cycle_days: int,
        start_date: int,
        usage_frequency: int,
    ) -> None:
        with self._audited(context, "add_subscription"):
            subscription = self._subscriptions.add(
                context,
                subscription_id=subscription_id,
                name=name,
                amount=amount,
                category=category,
                billing_cycle_days=billing_cycle_days,
                start_date=start_date,
                usage_frequency=usage_frequency,
                now=self._clock.now(),
            )
        self._audit_logger.log_subscription_added(
            owner=context.owner,
            subscription_id=subscription.subscription_id,
            summary=describe_subscription(subscription),
            correlation_id=context.correlation_id,
        )

    def update_usage_frequency(
        self,
        context: CallerContext,
        subscription_id: str,
        new_frequency: int,
    ) -> None:
        with self._audited(context, "update_usage_frequency"):
            previous, updated = self._subscriptions.update_usage(
                context, subscription_id, new_frequency
            )
        self._audit_logger.log_usage_updated(
            owner=context.owner,
            subscription_id=subscription_id,
            old_frequency=previous.usage_frequency,
            new_frequency=updated.usage_frequency,
            correlation_id=context.correlation_id,
        )

    def record_payment(
        self,
        context: CallerContext,
        subscription_id: str,
        amount: int,
    ) -> None:
        with self._audited(context, "record_payment"):
            payment = self._subscriptions.record_payment(
                context, subscription_id, amount, now=self._clock.now()
            )
        self._audit_logger.log_payment_recorded(
            owner=context.owner,
            subscription_id=subscription_id,
            amount=payment.amount,
            payment_date=payment.payment_date,
            correlation_id=context.correlation_id,
        )

    def delete_subscription(self, context: CallerContext, subscription_id: str) -> None:
        with self._audited(context, "delete_subscription"):
            self._subscriptions.delete(context, subscription_id)
        self._audit_logger.log_subscription_deleted(
            owner=context.owner,
            subscription_id=subscription_id,
            correlation_id=context.correlation_id,
        )

    def set_category_budget(
        self,
        context: CallerContext,
        category: Union[str, Category],
        monthly_limit: int,
    ) -> None:
        with self._audited(context, "set_category_budget"):
            budget = self._budgets.set_budget(context, category, monthly_limit)
        self._audit_logger.log_budget_set(
            owner=context.owner,
            category=budget.category.value,
            monthly_limit=budget.monthly_limit,
            correlation_id=context.correlation_id,
        )

    def generate_optimization_suggestions(self, context: CallerContext) -> None:
        with self._audited(context, "generate_optimization_suggestions"):
            created = self._generator.generate(context, now=self._clock.now())
        self._audit_logger.log_suggestions_generated(
            owner=context.owner,
            suggestion_ids=[s.suggestion_id for s in created],
            correlation_id=context.correlation_id,
        )

    # =========================================================================
    # ANALYTICS READS
    # =========================================================================

    def get_monthly_spending(self, context: CallerContext) -> int:
        return total_monthly_spending(
            self._subscriptions.list_all(context),
            self._settings.normalization_period_days,
        )

    def get_spending_by_category(
        self,
        context: CallerContext,
        category: Union[str, Category],
    ) -> int:
        with self._audited(context, "get_spending_by_category"):
            parsed = Category.parse(category)
        return spending_by_category(
            self._subscriptions.list_all(context),
            parsed,
            self._settings.normalization_period_days,
        )

    def get_upcoming_renewals(self, context: CallerContext) -> list[Subscription]:
        return upcoming_renewals(
            self._subscriptions.list_all(context),
            self._clock.now(),
            self._settings.renewal_window_days,
        )

    def get_rarely_used_subscriptions(self, context: CallerContext) -> list[Subscription]:
        return rarely_used(
            self._subscriptions.list_all(context),
            self._settings.rarely_used_threshold,
        )

    def get_optimization_suggestions(self, context: CallerContext) -> list[Suggestion]:
        return self._generator.list_suggestions(context)

    def get_yearly_spending_change(
        self,
        context: CallerContext,
        current_year: int,
        previous_year: int,
    ) -> YearlySpendingChange:
        return yearly_spending_change(current_year, previous_year)

    def get_staleness_report(self, context: CallerContext) -> list[StalenessEntry]:
        return staleness_report(self._subscriptions.list_all(context), self._clock.now())

    # =========================================================================
    # RECORD READS
    # =========================================================================

    def get_subscription(self, context: CallerContext, subscription_id: str) -> Subscription:
        with self._audited(context, "get_subscription"):
            return self._subscriptions.get(context, subscription_id)

    def list_subscriptions(self, context: CallerContext) -> list[Subscription]:
        return self._subscriptions.list_all(context)

    def get_subscription_monthly_cost(
        self,
        context: CallerContext,
        subscription_id: str,
    ) -> int:
        return monthly_cost(
            self.get_subscription(context, subscription_id),
            self._settings.normalization_period_days,
        )

    def get_payment_history(
        self,
        context: CallerContext,
        subscription_id: str,
    ) -> list[PaymentRecord]:
        return self._subscriptions.payment_history(context, subscription_id)

    def get_category_budget(
        self,
        context: CallerContext,
        category: Union[str, Category],
    ) -> Optional[BudgetLimit]:
        with self._audited(context, "get_category_budget"):
            return self._budgets.get_budget(context, category)

    def list_category_budgets(self, context: CallerContext) -> list[BudgetLimit]:
        return self._budgets.list_budgets(context)


def create_app_components(
    use_storage: bool = True,
    clock: Optional[Clock] = None,
) -> SubscriptionTracker:
    """
    Factory function to create a fully wired tracker.

    Args:
        use_storage: Whether to honour the configured storage backend.
                    Set to False to force in-memory storage (e.g., tests).
        clock: Time source. Defaults to the system clock.

    Returns:
        The tracker
    """
    settings = get_settings().app
    storage: TrackerStorage = InMemoryStorage()
    audit_logger = AuditLogger(InMemoryAuditStorage())

    if use_storage and settings.storage_backend == "google_sheets":
        try:
            sheets_client = GoogleSheetsClient()
            storage = GoogleSheetsStorage(sheets_client)
            audit_logger = AuditLogger(GoogleSheetsAuditStorage(sheets_client))
        except Exception as e:
            # Storage not configured - continue in memory
            logger.warning("storage_not_configured", backend="google_sheets", error=str(e))

    return SubscriptionTracker(
        storage=storage,
        clock=clock,
        audit_logger=audit_logger,
        settings=settings,
    )
