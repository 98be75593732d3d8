"""
Tests for Subscription Tracker models

Test strategy:
1. Unit tests for individual components (models, analytics, services)
2. Flow tests through SubscriptionTracker with in-memory storage
3. No real API calls in tests (Sheets is replaced by fakes)
"""

import pytest
from uuid import uuid4

from pydantic import ValidationError

from subtrack.errors import (
    InvalidCategory,
    NoData,
    NotAuthorized,
    SubscriptionTrackerError,
)
from subtrack.models import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
    BudgetLimit,
    CallerContext,
    Category,
    Subscription,
    Suggestion,
    SuggestionDraft,
    SuggestionType,
    YearlySpendingChange,
    describe_subscription,
)


def make_subscription(**overrides) -> Subscription:
    fields = {
        "subscription_id": "spotify",
        "name": "Spotify",
        "amount": 999,
        "category": Category.ENTERTAINMENT,
        "billing_cycle_days": 30,
        "start_date": 0,
        "last_payment": 0,
        "usage_frequency": 7,
    }
    fields.update(overrides)
    return Subscription(**fields)


class TestCategory:
    """Tests for the category enum."""

    def test_all_categories_exist(self):
        """Test that the five supported categories exist."""
        expected = ["entertainment", "productivity", "health", "food", "other"]
        assert [c.value for c in Category] == expected

    def test_parse_accepts_text_and_enum(self):
        """Test Category.parse with raw text and an enum member."""
        assert Category.parse("health") is Category.HEALTH
        assert Category.parse(Category.FOOD) is Category.FOOD

    def test_parse_rejects_unknown(self):
        """Test that unknown text raises InvalidCategory."""
        with pytest.raises(InvalidCategory):
            Category.parse("gaming")

    def test_parse_is_case_sensitive(self):
        """Test that category text must match exactly."""
        with pytest.raises(InvalidCategory):
            Category.parse("Entertainment")


class TestSubscriptionModel:
    """Tests for the Subscription model."""

    def test_subscription_creation(self):
        """Test Subscription model creation."""
        sub = make_subscription()
        assert sub.subscription_id == "spotify"
        assert sub.category == Category.ENTERTAINMENT

    def test_subscription_strips_whitespace(self):
        """Test that whitespace is stripped from the name."""
        sub = make_subscription(name="  Spotify  ")
        assert sub.name == "Spotify"

    def test_subscription_id_not_stripped(self):
        """Test that the id, a storage key, keeps its whitespace."""
        sub = make_subscription(subscription_id=" spotify ")
        assert sub.subscription_id == " spotify "

    def test_blank_name_rejected(self):
        """Test that a name of only spaces is empty after stripping."""
        with pytest.raises(ValidationError):
            make_subscription(name="   ")

    def test_rejects_zero_billing_cycle(self):
        """Test that billing cycle must be positive."""
        with pytest.raises(ValidationError):
            make_subscription(billing_cycle_days=0)

    def test_rejects_usage_above_ten(self):
        """Test usage frequency upper bound."""
        with pytest.raises(ValidationError):
            make_subscription(usage_frequency=11)

    def test_rejects_long_id(self):
        """Test the 50 character id limit."""
        with pytest.raises(ValidationError):
            make_subscription(subscription_id="x" * 51)

    def test_rejects_long_name(self):
        """Test the 100 character name limit."""
        with pytest.raises(ValidationError):
            make_subscription(name="n" * 101)

    def test_describe_subscription(self):
        """Test the one-line description used by audit events."""
        text = describe_subscription(make_subscription())
        assert text == "Spotify (entertainment): 999 every 30 days"


class TestSuggestionModels:
    """Tests for suggestions and drafts."""

    def test_draft_to_suggestion(self):
        """Test that a draft keeps its fields and gains an id."""
        draft = SuggestionDraft(
            subscription_id="gym",
            suggestion_type=SuggestionType.CANCEL,
            estimated_savings=4000,
            reason="Rarely used",
            created_at=10,
        )
        suggestion = draft.to_suggestion(7)
        assert suggestion.suggestion_id == 7
        assert suggestion.subscription_id == "gym"
        assert suggestion.suggestion_type == SuggestionType.CANCEL
        assert suggestion.estimated_savings == 4000

    def test_suggestion_is_immutable(self):
        """Test that suggestions cannot be mutated."""
        suggestion = Suggestion(
            suggestion_id=1,
            subscription_id="gym",
            suggestion_type=SuggestionType.REVIEW,
            estimated_savings=0,
            reason="Upcoming renewal",
            created_at=0,
        )
        with pytest.raises(ValidationError):
            suggestion.estimated_savings = 10

    def test_suggestion_reason_limit(self):
        """Test the 200 character reason limit."""
        with pytest.raises(ValidationError):
            Suggestion(
                suggestion_id=1,
                subscription_id="gym",
                suggestion_type=SuggestionType.REVIEW,
                estimated_savings=0,
                reason="r" * 201,
                created_at=0,
            )

    def test_suggestion_types(self):
        """Test that all four suggestion types exist."""
        assert {t.value for t in SuggestionType} == {
            "cancel", "review", "downgrade", "consolidate",
        }


class TestYearlySpendingChange:
    """Tests for the placeholder yearly record."""

    def test_defaults_are_placeholder(self):
        """Test the placeholder defaults."""
        change = YearlySpendingChange()
        assert change.is_placeholder is True
        assert change.current_year_total == 0
        assert change.previous_year_total == 0
        assert change.change_percent == 0

    def test_placeholder_rejects_values(self):
        """Test that a placeholder cannot carry totals."""
        with pytest.raises(ValidationError, match="Placeholder"):
            YearlySpendingChange(current_year_total=100)


class TestContextAndBudget:
    """Tests for CallerContext and BudgetLimit."""

    def test_context_is_frozen(self):
        """Test that a context's owner cannot be swapped."""
        context = CallerContext(owner="alice")
        with pytest.raises(ValidationError):
            context.owner = "mallory"

    def test_context_owner_kept_verbatim(self):
        """Test that the owner identity is not normalized."""
        assert CallerContext(owner="alice ").owner == "alice "

    def test_context_requires_owner(self):
        """Test that an empty owner is rejected."""
        with pytest.raises(ValidationError):
            CallerContext(owner="")

    def test_budget_limit(self):
        """Test BudgetLimit creation from text category."""
        budget = BudgetLimit(category="food", monthly_limit=5000)
        assert budget.category == Category.FOOD


class TestErrors:
    """Tests for the error vocabulary."""

    def test_error_codes(self):
        """Test that every error carries its kind name."""
        assert InvalidCategory().code == "InvalidCategory"
        assert NotAuthorized().code == "NotAuthorized"
        assert NoData().code == "NoData"

    def test_errors_share_base(self):
        """Test that all errors derive from SubscriptionTrackerError."""
        assert issubclass(NotAuthorized, SubscriptionTrackerError)
        assert issubclass(NoData, SubscriptionTrackerError)

    def test_message_defaults_to_code(self):
        """Test the default message."""
        assert str(InvalidCategory()) == "InvalidCategory"
        assert InvalidCategory("bad").message == "bad"


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.SUBSCRIPTION_ADDED,
            description="Test subscription added",
        )
        assert event.event_type == AuditEventType.SUBSCRIPTION_ADDED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEventBuilder.budget_set(
            owner="alice",
            category="food",
            monthly_limit=5000,
            correlation_id=uuid4(),
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "budget_set"
        assert log_dict["owner"] == "alice"
        assert log_dict["details"]["monthly_limit"] == 5000

    def test_audit_event_to_sheets_row(self):
        """Test conversion to sheets row."""
        event = AuditEventBuilder.subscription_deleted(
            owner="alice",
            subscription_id="netflix",
            correlation_id=uuid4(),
        )
        row = event.to_sheets_row()
        assert len(row) == 12  # Expected number of columns
        assert row[2] == "subscription_deleted"
        assert row[4] == "alice"
        assert row[6] == "netflix"

    def test_operation_rejected_is_warning(self):
        """Test AuditEventBuilder.operation_rejected."""
        event = AuditEventBuilder.operation_rejected(
            owner="alice",
            operation="add_subscription",
            error_code="InvalidPeriod",
            error_message="Billing cycle must be positive",
            correlation_id=uuid4(),
        )
        assert event.severity == AuditSeverity.WARNING
        assert event.error_code == "InvalidPeriod"
        assert event.details["operation"] == "add_subscription"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
