"""
Subscription Tracker - Source Package

Tracks a caller's recurring subscriptions, payments and category budgets,
and suggests which subscriptions to cancel or review.

DESIGN PRINCIPLES:
1. Every record belongs to exactly one caller
2. Validate first, write second, never leave half a request behind
3. Analytics are pure functions of records and the current time
4. Every write is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Subscription Tracker Team"
