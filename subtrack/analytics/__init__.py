"""Analytics package."""

from subtrack.analytics.engine import (
    NORMALIZATION_PERIOD_DAYS,
    RARELY_USED_THRESHOLD,
    RENEWAL_WINDOW_DAYS,
    estimated_days_unused,
    is_rarely_used,
    is_renewal_upcoming,
    monthly_cost,
    next_payment_date,
    rarely_used,
    select,
    spending_by_category,
    staleness_report,
    total_monthly_spending,
    upcoming_renewals,
    yearly_spending_change,
)

__all__ = [
    "NORMALIZATION_PERIOD_DAYS",
    "RARELY_USED_THRESHOLD",
    "RENEWAL_WINDOW_DAYS",
    "estimated_days_unused",
    "is_rarely_used",
    "is_renewal_upcoming",
    "monthly_cost",
    "next_payment_date",
    "rarely_used",
    "select",
    "spending_by_category",
    "staleness_report",
    "total_monthly_spending",
    "upcoming_renewals",
    "yearly_spending_change",
]
