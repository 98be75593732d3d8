"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
The in-memory backend is the default; Google Sheets is available for
persistence. Both implement the same interfaces.
"""

from subtrack.services.storage.interface import (
    AuditStorageInterface,
    BudgetStorageInterface,
    ConnectionError,
    PaymentStorageInterface,
    StorageError,
    SubscriptionStorageInterface,
    SuggestionStorageInterface,
    TrackerStorage,
)
from subtrack.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryStorage,
)
from subtrack.services.storage.google_sheets import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "BudgetStorageInterface",
    "PaymentStorageInterface",
    "SubscriptionStorageInterface",
    "SuggestionStorageInterface",
    "TrackerStorage",
    # Exceptions
    "ConnectionError",
    "StorageError",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryStorage",
    # Google Sheets implementation
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsStorage",
]
