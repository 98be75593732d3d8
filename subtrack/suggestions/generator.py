"""
Suggestion Generator

Turns analytics output into persisted suggestions.

For the caller's subscriptions, in store enumeration order:
1. every rarely used subscription gets a CANCEL suggestion whose estimated
   savings is the subscription's current amount
2. then every subscription renewing within the window gets a REVIEW
   suggestion with zero estimated savings

A subscription that is both rarely used and renewing soon gets both.

DESIGN DECISION: The generator only builds drafts. Ids are assigned by the
suggestion storage in the same step that persists the suggestions, so the
process-wide sequence never hands out an id without a stored suggestion.
"""

from subtrack.analytics import (
    RARELY_USED_THRESHOLD,
    RENEWAL_WINDOW_DAYS,
    rarely_used,
    upcoming_renewals,
)
from subtrack.models.context import CallerContext
from subtrack.models.subscription import (
    Subscription,
    Suggestion,
    SuggestionDraft,
    SuggestionType,
)
from subtrack.services.storage import TrackerStorage


CANCEL_REASON = "Rarely used subscription - consider canceling"
REVIEW_REASON = "Upcoming renewal - review if still needed"


def cancel_draft(subscription: Subscription, now: int) -> SuggestionDraft:
    return SuggestionDraft(
        subscription_id=subscription.subscription_id,
        suggestion_type=SuggestionType.CANCEL,
        estimated_savings=subscription.amount,
        reason=CANCEL_REASON,
        created_at=now,
    )


def review_draft(subscription: Subscription, now: int) -> SuggestionDraft:
    return SuggestionDraft(
        subscription_id=subscription.subscription_id,
        suggestion_type=SuggestionType.REVIEW,
        estimated_savings=0,
        reason=REVIEW_REASON,
        created_at=now,
    )


class SuggestionGenerator:
    """Generates and stores optimization suggestions for one caller at a time."""

    def __init__(
        self,
        storage: TrackerStorage,
        rarely_used_threshold: int = RARELY_USED_THRESHOLD,
        renewal_window_days: int = RENEWAL_WINDOW_DAYS,
    ):
        self._storage = storage
        self._rarely_used_threshold = rarely_used_threshold
        self._renewal_window_days = renewal_window_days

    def build_drafts(
        self,
        subscriptions: list[Subscription],
        now: int,
    ) -> list[SuggestionDraft]:
        """All drafts for a set of subscriptions, cancel drafts first."""
        drafts = [
            cancel_draft(sub, now)
            for sub in rarely_used(subscriptions, self._rarely_used_threshold)
        ]
        drafts.extend(
            review_draft(sub, now)
            for sub in upcoming_renewals(subscriptions, now, self._renewal_window_days)
        )
        return drafts

    def generate(self, context: CallerContext, now: int) -> list[Suggestion]:
        """
        Generate suggestions for the caller and persist them.

        Returns the new suggestions (possibly none). The read and the writes
        run in one transaction, so the suggestions match one consistent
        view of the caller's subscriptions.
        """
        with self._storage.transaction():
            subscriptions = self._storage.list_subscriptions(context.owner)
            drafts = self.build_drafts(subscriptions, now)
            if not drafts:
                return []
            return self._storage.append_suggestions(context.owner, drafts)

    def list_suggestions(self, context: CallerContext) -> list[Suggestion]:
        return self._storage.list_suggestions(context.owner)
