"""
Tests for the analytics engine.

All functions here are pure, so tests build Subscription objects directly.
"""

import pytest

from subtrack.analytics import (
    estimated_days_unused,
    is_rarely_used,
    is_renewal_upcoming,
    monthly_cost,
    next_payment_date,
    rarely_used,
    spending_by_category,
    staleness_report,
    total_monthly_spending,
    upcoming_renewals,
    yearly_spending_change,
)
from subtrack.errors import InvalidCategory
from subtrack.models import Category, Subscription


T0 = 1_700_000_000
DAY = 86400


def sub(subscription_id="s1", **overrides) -> Subscription:
    fields = {
        "subscription_id": subscription_id,
        "name": subscription_id.title(),
        "amount": 300,
        "category": Category.ENTERTAINMENT,
        "billing_cycle_days": 30,
        "start_date": T0,
        "last_payment": T0,
        "usage_frequency": 5,
    }
    fields.update(overrides)
    return Subscription(**fields)


class TestMonthlyCost:
    """Tests for billing cycle normalization."""

    def test_thirty_day_cycle_is_unchanged(self):
        """Test monthly_cost(300, 30) = 300."""
        assert monthly_cost(sub(amount=300, billing_cycle_days=30)) == 300

    def test_yearly_cycle_floors(self):
        """Test monthly_cost(1200, 365) = 98 (floor of 98.63)."""
        assert monthly_cost(sub(amount=1200, billing_cycle_days=365)) == 98

    def test_weekly_cycle(self):
        """Test a weekly charge scales up."""
        assert monthly_cost(sub(amount=70, billing_cycle_days=7)) == 300

    def test_zero_amount(self):
        """Test a free subscription costs nothing."""
        assert monthly_cost(sub(amount=0)) == 0

    def test_total_of_nothing_is_zero(self):
        """Test aggregate spending with no subscriptions."""
        assert total_monthly_spending([]) == 0

    def test_total_sums_normalized_costs(self):
        """Test aggregate spending sums per-subscription floors."""
        subs = [
            sub("a", amount=300, billing_cycle_days=30),
            sub("b", amount=1200, billing_cycle_days=365),
        ]
        assert total_monthly_spending(subs) == 398


class TestSpendingByCategory:
    """Tests for per-category spending."""

    def test_invalid_category(self):
        """Test that an unknown category raises InvalidCategory."""
        with pytest.raises(InvalidCategory):
            spending_by_category([sub()], "gaming")

    def test_invalid_category_with_no_subscriptions(self):
        """Test that validation does not depend on data."""
        with pytest.raises(InvalidCategory):
            spending_by_category([], "gaming")

    def test_no_matches_is_zero(self):
        """Test a valid category with no matching subscriptions."""
        assert spending_by_category([sub()], "health") == 0

    def test_only_matching_category_counted(self):
        """Test that other categories are excluded."""
        subs = [
            sub("gym", amount=4000, category=Category.HEALTH),
            sub("netflix", amount=300, category=Category.ENTERTAINMENT),
            sub("yoga", amount=600, billing_cycle_days=60, category=Category.HEALTH),
        ]
        assert spending_by_category(subs, Category.HEALTH) == 4300
        assert spending_by_category(subs, "entertainment") == 300


class TestRenewals:
    """Tests for renewal forecasting."""

    def test_next_payment_date(self):
        """Test next payment = last payment + cycle in seconds."""
        assert next_payment_date(sub(billing_cycle_days=5)) == T0 + 5 * DAY

    def test_upcoming_just_before_due(self):
        """Test cycle 5 is upcoming one second before it is due."""
        assert is_renewal_upcoming(sub(billing_cycle_days=5), T0 + 5 * DAY - 1)

    def test_not_upcoming_well_after_due(self):
        """Test cycle 5 is not upcoming at T + 13 days."""
        assert not is_renewal_upcoming(sub(billing_cycle_days=5), T0 + 13 * DAY)

    def test_window_edge_is_inclusive(self):
        """Test a charge exactly seven days out is upcoming."""
        assert is_renewal_upcoming(sub(billing_cycle_days=7), T0)

    def test_outside_window(self):
        """Test a charge eight days out is not upcoming."""
        assert not is_renewal_upcoming(sub(billing_cycle_days=8), T0)

    def test_due_now_is_upcoming(self):
        """Test a charge due at this very second is upcoming."""
        assert is_renewal_upcoming(sub(billing_cycle_days=5), T0 + 5 * DAY)

    def test_upcoming_renewals_preserves_order(self):
        """Test the filter keeps enumeration order."""
        subs = [
            sub("a", billing_cycle_days=3),
            sub("b", billing_cycle_days=30),
            sub("c", billing_cycle_days=1),
        ]
        result = upcoming_renewals(subs, T0)
        assert [s.subscription_id for s in result] == ["a", "c"]

    def test_custom_window(self):
        """Test a wider window."""
        assert is_renewal_upcoming(sub(billing_cycle_days=30), T0, window_days=30)


class TestRarelyUsed:
    """Tests for the rarely-used filter."""

    @pytest.mark.parametrize("frequency,expected", [
        (0, True),
        (3, True),
        (4, False),
        (10, False),
    ])
    def test_threshold(self, frequency, expected):
        """Test usage <= 3 is rarely used."""
        assert is_rarely_used(sub(usage_frequency=frequency)) is expected

    def test_filter_exactly_low_usage(self):
        """Test rarely_used returns those with usage <= 3 and only those."""
        subs = [sub(str(f), usage_frequency=f) for f in range(11)]
        result = rarely_used(subs)
        assert [s.usage_frequency for s in result] == [0, 1, 2, 3]


class TestStaleness:
    """Tests for the usage decay heuristic."""

    def test_never_used_is_whole_cycle(self):
        """Test usage 0 counts the entire billing cycle."""
        assert estimated_days_unused(sub(usage_frequency=0, billing_cycle_days=30), T0 + 100 * DAY) == 30

    def test_scaled_by_usage(self):
        """Test 20 days elapsed at usage 5 gives 10 unused days."""
        assert estimated_days_unused(sub(usage_frequency=5), T0 + 20 * DAY) == 10

    def test_floors_partial_days(self):
        """Test elapsed time is counted in whole days and the result floors."""
        # 9 whole days * 7 / 10 = 6.3 -> 6
        assert estimated_days_unused(sub(usage_frequency=3), T0 + 9 * DAY + 500) == 6

    def test_constant_use_is_zero(self):
        """Test usage 10 gives zero unused days."""
        assert estimated_days_unused(sub(usage_frequency=10), T0 + 50 * DAY) == 0

    def test_future_last_payment_clamps_to_zero(self):
        """Test a last payment after now never goes negative."""
        assert estimated_days_unused(sub(usage_frequency=4), T0 - 10 * DAY) == 0

    def test_report(self):
        """Test the staleness report lists every subscription."""
        subs = [sub("a", usage_frequency=0), sub("b", usage_frequency=8)]
        report = staleness_report(subs, T0 + 10 * DAY)
        assert [(e.subscription_id, e.estimated_days_unused) for e in report] == [
            ("a", 30),
            ("b", 2),
        ]


class TestYearlyChange:
    """Tests for the year-over-year stub."""

    def test_constant_regardless_of_input(self):
        """Test the placeholder ignores its inputs."""
        assert yearly_spending_change(2024, 2023) == yearly_spending_change(1999, 3000)
        assert yearly_spending_change(2024, 2023).is_placeholder is True


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
