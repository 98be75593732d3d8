"""
Core Data Models for the Subscription Tracker

These models define the strict schemas for every record the tracker stores:
1. Subscription - a recurring charge owned by one caller
2. PaymentRecord - one entry in a subscription's payment history
3. BudgetLimit - a per-category monthly limit (advisory only)
4. Suggestion - a generated optimization recommendation

DESIGN DECISION: Timestamps are integer Unix seconds. All renewal and
staleness arithmetic is done in whole seconds/days, so there is no need
for timezone-aware datetimes anywhere in the core.

DESIGN DECISION: Amounts are integers in the smallest currency unit.
No floating point ever touches money.
"""

from enum import Enum
from typing import Annotated

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    model_validator,
)

from subtrack.errors import InvalidCategory


SECONDS_PER_DAY = 86400
MAX_USAGE_FREQUENCY = 10


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class Category(str, Enum):
    """
    Supported subscription categories.

    DESIGN DECISION: Category text is parsed exactly once, at the boundary,
    with Category.parse(). Everything past the boundary carries the enum.
    """
    ENTERTAINMENT = "entertainment"
    PRODUCTIVITY = "productivity"
    HEALTH = "health"
    FOOD = "food"
    OTHER = "other"

    @classmethod
    def parse(cls, value: "str | Category") -> "Category":
        """Parse raw category text, raising InvalidCategory if unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidCategory(f"Unknown category: {value!r}")


class SuggestionType(str, Enum):
    """
    Kinds of optimization suggestions.

    Only CANCEL and REVIEW are produced by the current generator.
    """
    CANCEL = "cancel"
    REVIEW = "review"
    DOWNGRADE = "downgrade"
    CONSOLIDATE = "consolidate"


# =============================================================================
# CORE RECORDS
# =============================================================================

class Subscription(BaseModel):
    """
    A recurring subscription owned by one caller.

    The owner is part of the storage key, never part of the record itself.
    Storage backends key this record by (owner, subscription_id), so the id
    is kept exactly as given. Only the display name is stripped.
    """

    subscription_id: str = Field(
        ...,
        min_length=1,
        max_length=50,
        description="Caller-chosen subscription identifier"
    )
    name: Annotated[str, StringConstraints(strip_whitespace=True)] = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Display name (e.g., 'Netflix')"
    )
    amount: int = Field(
        ...,
        ge=0,
        description="Amount per billing cycle in the smallest currency unit"
    )
    category: Category
    billing_cycle_days: int = Field(
        ...,
        gt=0,
        description="Days between successive charges"
    )
    start_date: int = Field(
        ...,
        ge=0,
        description="Subscription start (Unix seconds)"
    )
    last_payment: int = Field(
        ...,
        ge=0,
        description="Last payment (Unix seconds)"
    )
    usage_frequency: int = Field(
        ...,
        ge=0,
        le=MAX_USAGE_FREQUENCY,
        description="Self-reported usage, 0 = never, 10 = constantly"
    )


class PaymentRecord(BaseModel):
    """One payment in a subscription's history."""

    subscription_id: str = Field(..., min_length=1, max_length=50)
    payment_date: int = Field(
        ...,
        ge=0,
        description="When the payment was recorded (Unix seconds)"
    )
    amount: int = Field(..., ge=0)


class BudgetLimit(BaseModel):
    """
    A monthly spending limit for one category.

    Advisory data only: nothing in the tracker enforces it.
    """

    category: Category
    monthly_limit: int


class Suggestion(BaseModel):
    """
    A generated optimization suggestion.

    CRITICAL: Suggestions are created only by the SuggestionGenerator and
    are never mutated or deleted afterwards.
    """
    model_config = ConfigDict(frozen=True)

    suggestion_id: int = Field(
        ...,
        ge=1,
        description="Value drawn from the process-wide suggestion sequence"
    )
    subscription_id: str = Field(..., min_length=1, max_length=50)
    suggestion_type: SuggestionType
    estimated_savings: int
    reason: str = Field(..., max_length=200)
    created_at: int = Field(..., ge=0)


class SuggestionDraft(BaseModel):
    """
    A suggestion before it has been assigned an id.

    Storage turns drafts into Suggestions while allocating ids, so no id
    exists without a persisted suggestion behind it.
    """

    subscription_id: str = Field(..., min_length=1, max_length=50)
    suggestion_type: SuggestionType
    estimated_savings: int
    reason: str = Field(..., max_length=200)
    created_at: int = Field(..., ge=0)

    def to_suggestion(self, suggestion_id: int) -> Suggestion:
        return Suggestion(suggestion_id=suggestion_id, **self.model_dump())


# =============================================================================
# ANALYTICS RESULTS
# =============================================================================

class StalenessEntry(BaseModel):
    """Estimated unused days for one subscription."""

    subscription_id: str
    name: str
    usage_frequency: int
    estimated_days_unused: int = Field(..., ge=0)


class YearlySpendingChange(BaseModel):
    """
    Year-over-year spending comparison.

    NOTE: This is a placeholder. The tracker does not aggregate payment
    history by year, so every field carries a fixed value.
    """

    current_year_total: int = 0
    previous_year_total: int = 0
    change_percent: int = 0
    is_placeholder: bool = True

    @model_validator(mode='after')
    def validate_placeholder(self) -> 'YearlySpendingChange':
        """A placeholder must not carry real-looking totals."""
        if self.is_placeholder and (
            self.current_year_total or self.previous_year_total or self.change_percent
        ):
            raise ValueError("Placeholder yearly change must be all zeros")
        return self


def describe_subscription(subscription: Subscription) -> str:
    """Short one-line description used in audit details."""
    return (
        f"{subscription.name} ({subscription.category.value}): "
        f"{subscription.amount} every {subscription.billing_cycle_days} days"
    )
