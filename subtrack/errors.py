"""
Error Vocabulary for the Subscription Tracker

Every failure a caller can see is one of these exceptions.

DESIGN DECISION: Validation always happens before any write, so an
operation that raises one of these has left storage untouched.

NotAuthorized and NoData are part of the vocabulary but no operation
raises them today. Ownership is enforced by key construction, and empty
results are returned as empty lists or zero totals.
"""


class SubscriptionTrackerError(Exception):
    """Base exception for all tracker operations."""

    code = "Error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.code)
        self.message = message or self.code


class InvalidCategory(SubscriptionTrackerError):
    """Category is not one of the supported categories."""

    code = "InvalidCategory"


class InvalidPeriod(SubscriptionTrackerError):
    """Billing cycle length is not a positive number of days."""

    code = "InvalidPeriod"


class InvalidSubscription(SubscriptionTrackerError):
    """Subscription does not exist for the caller, or a field is out of range."""

    code = "InvalidSubscription"


class NotAuthorized(SubscriptionTrackerError):
    """Reserved: caller may not access the requested record."""

    code = "NotAuthorized"


class NoData(SubscriptionTrackerError):
    """Reserved: no data available for the request."""

    code = "NoData"
