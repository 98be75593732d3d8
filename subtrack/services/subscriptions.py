"""
Subscription Service

Validated writes for subscriptions and the payment ledger.

IMPORTANT: Every check runs before the first write, and all writes of one
request happen inside a single storage transaction. A rejected request
leaves storage exactly as it was.

Validation order for add():
1. category      -> InvalidCategory
2. billing cycle -> InvalidPeriod
3. usage         -> InvalidSubscription
4. field shapes (id/name length, amount sign) -> InvalidSubscription
"""

from typing import Union

from pydantic import ValidationError

from subtrack.errors import InvalidPeriod, InvalidSubscription
from subtrack.models.context import CallerContext
from subtrack.models.subscription import (
    MAX_USAGE_FREQUENCY,
    Category,
    PaymentRecord,
    Subscription,
)
from subtrack.services.storage import TrackerStorage


def _validate_usage(frequency: int) -> None:
    if not 0 <= frequency <= MAX_USAGE_FREQUENCY:
        raise InvalidSubscription(
            f"Usage frequency must be between 0 and {MAX_USAGE_FREQUENCY}, got {frequency}"
        )


def _describe_validation_error(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(loc) for loc in issue['loc'])}: {issue['msg']}"
        for issue in error.errors()
    )


class SubscriptionService:
    """Owner-scoped subscription and payment writes."""

    def __init__(self, storage: TrackerStorage):
        self._storage = storage

    def get(self, context: CallerContext, subscription_id: str) -> Subscription:
        """
        Fetch one of the caller's subscriptions.

        Raises:
            InvalidSubscription: If the caller has no such subscription
        """
        subscription = self._storage.get_subscription(context.owner, subscription_id)
        if subscription is None:
            raise InvalidSubscription(f"No subscription {subscription_id!r}")
        return subscription

    def list_all(self, context: CallerContext) -> list[Subscription]:
        return self._storage.list_subscriptions(context.owner)

    def add(
        self,
        context: CallerContext,
        subscription_id: str,
        name: str,
        amount: int,
        category: Union[str, Category],
        billing_cycle_days: int,
        start_date: int,
        usage_frequency: int,
        now: int,
    ) -> Subscription:
        """
        Insert or replace a subscription.

        Re-adding an existing id silently replaces the record. last_payment
        is set to now.
        """
        parsed_category = Category.parse(category)
        if billing_cycle_days <= 0:
            raise InvalidPeriod(
                f"Billing cycle must be a positive number of days, got {billing_cycle_days}"
            )
        _validate_usage(usage_frequency)

        try:
            subscription = Subscription(
                subscription_id=subscription_id,
                name=name,
                amount=amount,
                category=parsed_category,
                billing_cycle_days=billing_cycle_days,
                start_date=start_date,
                last_payment=now,
                usage_frequency=usage_frequency,
            )
        except ValidationError as e:
            raise InvalidSubscription(_describe_validation_error(e))

        with self._storage.transaction():
            self._storage.put_subscription(context.owner, subscription)
        return subscription

    def update_usage(
        self,
        context: CallerContext,
        subscription_id: str,
        new_frequency: int,
    ) -> tuple[Subscription, Subscription]:
        """
        Replace only the usage frequency.

        The range check comes first, so an out-of-range value is rejected
        whether or not the subscription exists.

        Returns:
            (previous, updated)
        """
        _validate_usage(new_frequency)

        with self._storage.transaction():
            current = self.get(context, subscription_id)
            updated = current.model_copy(update={"usage_frequency": new_frequency})
            self._storage.put_subscription(context.owner, updated)
        return current, updated

    def record_payment(
        self,
        context: CallerContext,
        subscription_id: str,
        amount: int,
        now: int,
    ) -> PaymentRecord:
        """
        Append a payment and roll the subscription forward.

        The ledger entry and the subscription update (last_payment = now,
        amount = paid amount) are written together.
        """
        if amount < 0:
            raise InvalidSubscription(f"Payment amount cannot be negative, got {amount}")

        with self._storage.transaction():
            current = self.get(context, subscription_id)
            payment = PaymentRecord(
                subscription_id=subscription_id,
                payment_date=now,
                amount=amount,
            )
            self._storage.put_payment(context.owner, payment)
            self._storage.put_subscription(
                context.owner,
                current.model_copy(update={"last_payment": now, "amount": amount}),
            )
        return payment

    def delete(self, context: CallerContext, subscription_id: str) -> None:
        """
        Remove a subscription.

        Its payments and suggestions are left in place.
        """
        with self._storage.transaction():
            if not self._storage.delete_subscription(context.owner, subscription_id):
                raise InvalidSubscription(f"No subscription {subscription_id!r}")

    def payment_history(
        self,
        context: CallerContext,
        subscription_id: str,
    ) -> list[PaymentRecord]:
        """
        Payments for a subscription id, oldest first.

        Works for deleted subscriptions too, since payments outlive them.
        """
        return self._storage.list_payments(context.owner, subscription_id)
