"""
Analytics Engine

DESIGN DECISION: Analytics are PURE functions over lists of records.
Nothing here reads storage or the clock. Callers pass in the caller's
subscriptions and, where time matters, the current timestamp.

All arithmetic is integer arithmetic with floor division, so results are
exact and reproducible:
- monthly cost      = amount * 30 // billing_cycle_days
- next payment      = last_payment + billing_cycle_days * 86400
- upcoming renewal  = now <= next payment <= now + 7 days
- rarely used       = usage_frequency <= 3
- days unused       = elapsed_days * (10 - usage_frequency) // 10
"""

from typing import Callable, Union

from subtrack.models.subscription import (
    MAX_USAGE_FREQUENCY,
    SECONDS_PER_DAY,
    Category,
    StalenessEntry,
    Subscription,
    YearlySpendingChange,
)


NORMALIZATION_PERIOD_DAYS = 30
RENEWAL_WINDOW_DAYS = 7
RARELY_USED_THRESHOLD = 3

SubscriptionPredicate = Callable[[Subscription], bool]


# =============================================================================
# COST NORMALIZATION
# =============================================================================

def monthly_cost(
    subscription: Subscription,
    period_days: int = NORMALIZATION_PERIOD_DAYS,
) -> int:
    """
    Normalize a subscription's charge to a 30-day period.

    billing_cycle_days is always positive (the Subscription model enforces
    it), so the division is safe.
    """
    return (subscription.amount * period_days) // subscription.billing_cycle_days


def total_monthly_spending(
    subscriptions: list[Subscription],
    period_days: int = NORMALIZATION_PERIOD_DAYS,
) -> int:
    """Sum of monthly costs. 0 for no subscriptions."""
    return sum(monthly_cost(sub, period_days) for sub in subscriptions)


def spending_by_category(
    subscriptions: list[Subscription],
    category: Union[str, Category],
    period_days: int = NORMALIZATION_PERIOD_DAYS,
) -> int:
    """
    Sum of monthly costs for one category.

    Raises:
        InvalidCategory: If category is not a supported category
    """
    wanted = Category.parse(category)
    return total_monthly_spending(
        select(subscriptions, lambda sub: sub.category == wanted),
        period_days,
    )


# =============================================================================
# RENEWAL FORECASTING
# =============================================================================

def next_payment_date(subscription: Subscription) -> int:
    """When the next charge is due (Unix seconds)."""
    return subscription.last_payment + subscription.billing_cycle_days * SECONDS_PER_DAY


def is_renewal_upcoming(
    subscription: Subscription,
    now: int,
    window_days: int = RENEWAL_WINDOW_DAYS,
) -> bool:
    """
    True if the next charge falls inside the lookahead window [now, now + window].

    A charge that is already overdue is outside the window.
    """
    due = next_payment_date(subscription)
    return now <= due <= now + window_days * SECONDS_PER_DAY


def upcoming_renewals(
    subscriptions: list[Subscription],
    now: int,
    window_days: int = RENEWAL_WINDOW_DAYS,
) -> list[Subscription]:
    return select(
        subscriptions,
        lambda sub: is_renewal_upcoming(sub, now, window_days),
    )


# =============================================================================
# USAGE
# =============================================================================

def is_rarely_used(
    subscription: Subscription,
    threshold: int = RARELY_USED_THRESHOLD,
) -> bool:
    return subscription.usage_frequency <= threshold


def rarely_used(
    subscriptions: list[Subscription],
    threshold: int = RARELY_USED_THRESHOLD,
) -> list[Subscription]:
    return select(subscriptions, lambda sub: is_rarely_used(sub, threshold))


def estimated_days_unused(subscription: Subscription, now: int) -> int:
    """
    Heuristic estimate of how many days a subscription went unused.

    A subscription that is never used (frequency 0) is unused for its whole
    billing cycle. Otherwise the days elapsed since the last payment are
    scaled by (10 - frequency) / 10, so heavier use means fewer unused days.

    A last payment in the future counts as zero elapsed days; the result is
    never negative.
    """
    if subscription.usage_frequency == 0:
        return subscription.billing_cycle_days

    elapsed_seconds = max(now - subscription.last_payment, 0)
    elapsed_days = elapsed_seconds // SECONDS_PER_DAY
    return (elapsed_days * (MAX_USAGE_FREQUENCY - subscription.usage_frequency)) // MAX_USAGE_FREQUENCY


def staleness_report(
    subscriptions: list[Subscription],
    now: int,
) -> list[StalenessEntry]:
    """Estimated unused days for each subscription, in enumeration order."""
    return [
        StalenessEntry(
            subscription_id=sub.subscription_id,
            name=sub.name,
            usage_frequency=sub.usage_frequency,
            estimated_days_unused=estimated_days_unused(sub, now),
        )
        for sub in subscriptions
    ]


# =============================================================================
# YEAR OVER YEAR
# =============================================================================

def yearly_spending_change(current_year: int, previous_year: int) -> YearlySpendingChange:
    """
    Year-over-year spending change.

    NOTE: Not implemented as real analytics. Payment history is not
    aggregated by year yet, so this always returns the same placeholder
    regardless of the years asked for.
    """
    return YearlySpendingChange()


# =============================================================================
# HELPERS
# =============================================================================

def select(
    subscriptions: list[Subscription],
    predicate: SubscriptionPredicate,
) -> list[Subscription]:
    """Subscriptions matching predicate, order preserved."""
    return [sub for sub in subscriptions if predicate(sub)]
