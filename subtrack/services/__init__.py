"""Services package."""

from subtrack.services.budgets import BudgetService
from subtrack.services.subscriptions import SubscriptionService
from subtrack.services.storage import (
    AuditStorageInterface,
    ConnectionError,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsStorage,
    InMemoryAuditStorage,
    InMemoryStorage,
    StorageError,
    TrackerStorage,
)

__all__ = [
    # Record services
    "BudgetService",
    "SubscriptionService",
    # Storage services
    "AuditStorageInterface",
    "ConnectionError",
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsStorage",
    "InMemoryAuditStorage",
    "InMemoryStorage",
    "StorageError",
    "TrackerStorage",
]
