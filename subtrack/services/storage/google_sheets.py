"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is offered as a persistent backend because:
1. Users can view their subscriptions and payments directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- Not suitable for high-volume data (we're fine for personal use)
- No transactions. Every service validates before writing and each request
  writes in a fixed order, so a rejected request never touches the sheet.
- Limited query capabilities (we filter in Python)

Each record type has its own worksheet. The first column of every record
sheet is the owner, which is how the owner half of the key is stored.
"""

import json
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, Optional
from uuid import UUID

import gspread
import structlog
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from subtrack.config import GoogleSheetsSettings, get_settings
from subtrack.models.audit import AuditEvent, AuditEventType, AuditSeverity
from subtrack.models.subscription import (
    BudgetLimit,
    Category,
    PaymentRecord,
    Subscription,
    Suggestion,
    SuggestionDraft,
    SuggestionType,
)
from subtrack.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    StorageError,
    TrackerStorage,
)


SUBSCRIPTION_COLUMNS = [
    "owner",
    "subscription_id",
    "name",
    "amount",
    "category",
    "billing_cycle_days",
    "start_date",
    "last_payment",
    "usage_frequency",
]

PAYMENT_COLUMNS = [
    "owner",
    "subscription_id",
    "payment_date",
    "amount",
]

BUDGET_COLUMNS = [
    "owner",
    "category",
    "monthly_limit",
]

SUGGESTION_COLUMNS = [
    "owner",
    "suggestion_id",
    "subscription_id",
    "suggestion_type",
    "estimated_savings",
    "reason",
    "created_at",
]

AUDIT_COLUMNS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
    "owner",
    "entity_type",
    "entity_id",
    "correlation_id",
    "description",
    "details_json",
    "error_code",
    "error_message",
]


def _column_letter(count: int) -> str:
    """Spreadsheet column letter for a 1-based column count (A..Z)."""
    return chr(ord("A") + count - 1)


def _row_range(row_number: int, column_count: int) -> str:
    return f"A{row_number}:{_column_letter(column_count)}{row_number}"


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @property
    def settings(self) -> GoogleSheetsSettings:
        return self._settings

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_worksheet(
        self,
        title: str,
        columns: list[str],
        rows: int = 1000,
    ) -> gspread.Worksheet:
        """Get or create a worksheet with the given header row."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=rows,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet


class GoogleSheetsStorage(TrackerStorage):
    """
    Google Sheets implementation of tracker storage.

    One record per row. All cells are written RAW as strings and parsed
    back through the pydantic models.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()
        self._lock = threading.RLock()
        self._next_suggestion_id: Optional[int] = None

    @contextmanager
    def transaction(self) -> Iterator[None]:
        # Serializes requests in this process; Sheets itself has no rollback
        with self._lock:
            yield

    # -------------------------------------------------------------------------
    # Sheet helpers
    # -------------------------------------------------------------------------

    def _sheet(self, title: str, columns: list[str]) -> gspread.Worksheet:
        return self._client.get_worksheet(title, columns)

    def _subscriptions_sheet(self) -> gspread.Worksheet:
        return self._sheet(self._client.settings.subscriptions_sheet_name, SUBSCRIPTION_COLUMNS)

    def _payments_sheet(self) -> gspread.Worksheet:
        return self._sheet(self._client.settings.payments_sheet_name, PAYMENT_COLUMNS)

    def _budgets_sheet(self) -> gspread.Worksheet:
        return self._sheet(self._client.settings.budgets_sheet_name, BUDGET_COLUMNS)

    def _suggestions_sheet(self) -> gspread.Worksheet:
        return self._sheet(self._client.settings.suggestions_sheet_name, SUGGESTION_COLUMNS)

    @staticmethod
    def _data_rows(sheet: gspread.Worksheet) -> list[tuple[int, list]]:
        """All non-empty data rows with their 1-based sheet row numbers."""
        return [
            (idx, row)
            for idx, row in enumerate(sheet.get_all_values()[1:], start=2)
            if row and row[0]
        ]

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _upsert(
        self,
        sheet: gspread.Worksheet,
        key: list[str],
        row: list,
    ) -> None:
        """Overwrite the row whose leading cells equal key, or append one."""
        try:
            for idx, existing in self._data_rows(sheet):
                if existing[:len(key)] == key:
                    sheet.batch_update([
                        {"range": _row_range(idx, len(row)), "values": [row]}
                    ])
                    return
            sheet.append_row(row, value_input_option="RAW")
        except Exception as e:
            raise StorageError(f"Failed to write row {key}: {e}")

    # -------------------------------------------------------------------------
    # Row conversion
    # -------------------------------------------------------------------------

    @staticmethod
    def _subscription_to_row(owner: str, sub: Subscription) -> list:
        return [
            owner,
            sub.subscription_id,
            sub.name,
            str(sub.amount),
            sub.category.value,
            str(sub.billing_cycle_days),
            str(sub.start_date),
            str(sub.last_payment),
            str(sub.usage_frequency),
        ]

    @staticmethod
    def _row_to_subscription(row: list) -> Subscription:
        return Subscription(
            subscription_id=row[1],
            name=row[2],
            amount=int(row[3]),
            category=Category(row[4]),
            billing_cycle_days=int(row[5]),
            start_date=int(row[6]),
            last_payment=int(row[7]),
            usage_frequency=int(row[8]),
        )

    @staticmethod
    def _row_to_payment(row: list) -> PaymentRecord:
        return PaymentRecord(
            subscription_id=row[1],
            payment_date=int(row[2]),
            amount=int(row[3]),
        )

    @staticmethod
    def _suggestion_to_row(owner: str, suggestion: Suggestion) -> list:
        return [
            owner,
            str(suggestion.suggestion_id),
            suggestion.subscription_id,
            suggestion.suggestion_type.value,
            str(suggestion.estimated_savings),
            suggestion.reason,
            str(suggestion.created_at),
        ]

    @staticmethod
    def _row_to_suggestion(row: list) -> Suggestion:
        return Suggestion(
            suggestion_id=int(row[1]),
            subscription_id=row[2],
            suggestion_type=SuggestionType(row[3]),
            estimated_savings=int(row[4]),
            reason=row[5],
            created_at=int(row[6]),
        )

    # -------------------------------------------------------------------------
    # Subscriptions
    # -------------------------------------------------------------------------

    def get_subscription(
        self,
        owner: str,
        subscription_id: str,
    ) -> Optional[Subscription]:
        try:
            for _, row in self._data_rows(self._subscriptions_sheet()):
                if row[0] == owner and row[1] == subscription_id:
                    return self._row_to_subscription(row)
            return None
        except Exception as e:
            raise StorageError(f"Failed to get subscription: {e}")

    def put_subscription(self, owner: str, subscription: Subscription) -> None:
        self._upsert(
            self._subscriptions_sheet(),
            [owner, subscription.subscription_id],
            self._subscription_to_row(owner, subscription),
        )

    def delete_subscription(self, owner: str, subscription_id: str) -> bool:
        try:
            sheet = self._subscriptions_sheet()
            for idx, row in self._data_rows(sheet):
                if row[0] == owner and row[1] == subscription_id:
                    sheet.delete_rows(idx)
                    return True
            return False
        except Exception as e:
            raise StorageError(f"Failed to delete subscription: {e}")

    def list_subscriptions(self, owner: str) -> list[Subscription]:
        try:
            return [
                self._row_to_subscription(row)
                for _, row in self._data_rows(self._subscriptions_sheet())
                if row[0] == owner
            ]
        except Exception as e:
            raise StorageError(f"Failed to list subscriptions: {e}")

    # -------------------------------------------------------------------------
    # Payments
    # -------------------------------------------------------------------------

    def put_payment(self, owner: str, payment: PaymentRecord) -> None:
        self._upsert(
            self._payments_sheet(),
            [owner, payment.subscription_id, str(payment.payment_date)],
            [owner, payment.subscription_id, str(payment.payment_date), str(payment.amount)],
        )

    def list_payments(
        self,
        owner: str,
        subscription_id: str,
    ) -> list[PaymentRecord]:
        try:
            payments = [
                self._row_to_payment(row)
                for _, row in self._data_rows(self._payments_sheet())
                if row[0] == owner and row[1] == subscription_id
            ]
        except Exception as e:
            raise StorageError(f"Failed to list payments: {e}")
        payments.sort(key=lambda p: p.payment_date)
        return payments

    # -------------------------------------------------------------------------
    # Budgets
    # -------------------------------------------------------------------------

    def put_budget(self, owner: str, budget: BudgetLimit) -> None:
        self._upsert(
            self._budgets_sheet(),
            [owner, budget.category.value],
            [owner, budget.category.value, str(budget.monthly_limit)],
        )

    def get_budget(self, owner: str, category: Category) -> Optional[BudgetLimit]:
        for budget in self.list_budgets(owner):
            if budget.category == category:
                return budget
        return None

    def list_budgets(self, owner: str) -> list[BudgetLimit]:
        try:
            return [
                BudgetLimit(category=Category(row[1]), monthly_limit=int(row[2]))
                for _, row in self._data_rows(self._budgets_sheet())
                if row[0] == owner
            ]
        except Exception as e:
            raise StorageError(f"Failed to list budgets: {e}")

    # -------------------------------------------------------------------------
    # Suggestions
    # -------------------------------------------------------------------------

    def _load_next_suggestion_id(self) -> int:
        """Resume the sequence after the highest id already in the sheet."""
        if self._next_suggestion_id is None:
            try:
                ids = [
                    int(row[1])
                    for _, row in self._data_rows(self._suggestions_sheet())
                ]
            except Exception as e:
                raise StorageError(f"Failed to read suggestion ids: {e}")
            self._next_suggestion_id = max(ids, default=0) + 1
        return self._next_suggestion_id

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def append_suggestions(
        self,
        owner: str,
        drafts: list[SuggestionDraft],
    ) -> list[Suggestion]:
        with self._lock:
            next_id = self._load_next_suggestion_id()
            created = [
                draft.to_suggestion(next_id + offset)
                for offset, draft in enumerate(drafts)
            ]
            if not created:
                return []
            try:
                # One API call, so the batch lands together or not at all
                self._suggestions_sheet().append_rows(
                    [self._suggestion_to_row(owner, s) for s in created],
                    value_input_option="RAW",
                )
            except Exception as e:
                raise StorageError(f"Failed to save suggestions: {e}")
            self._next_suggestion_id = next_id + len(created)
        return created

    def list_suggestions(self, owner: str) -> list[Suggestion]:
        try:
            suggestions = [
                self._row_to_suggestion(row)
                for _, row in self._data_rows(self._suggestions_sheet())
                if row[0] == owner
            ]
        except Exception as e:
            raise StorageError(f"Failed to list suggestions: {e}")
        suggestions.sort(key=lambda s: s.suggestion_id)
        return suggestions

    def peek_next_suggestion_id(self) -> int:
        with self._lock:
            return self._load_next_suggestion_id()


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """
    Google Sheets implementation of audit log storage.

    Audit events are append-only.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()
        self._logger = structlog.get_logger()

    def _audit_sheet(self) -> gspread.Worksheet:
        return self._client.get_worksheet(
            self._client.settings.audit_sheet_name,
            AUDIT_COLUMNS,
            rows=5000,  # More rows for audit log
        )

    def _row_to_event(self, row: list) -> AuditEvent:
        """Convert a spreadsheet row to an AuditEvent."""
        def safe_get(index: int, default: str = "") -> str:
            try:
                return row[index] if row[index] else default
            except IndexError:
                return default

        return AuditEvent(
            event_id=UUID(safe_get(0)),
            timestamp=datetime.fromisoformat(safe_get(1)),
            event_type=AuditEventType(safe_get(2)),
            severity=AuditSeverity(safe_get(3)),
            owner=safe_get(4) or None,
            entity_type=safe_get(5) or None,
            entity_id=safe_get(6) or None,
            correlation_id=UUID(safe_get(7)) if safe_get(7) else None,
            description=safe_get(8),
            details=json.loads(safe_get(9)) if safe_get(9) else {},
            error_code=safe_get(10) or None,
            error_message=safe_get(11) or None,
        )

    def _all_events(self) -> list[AuditEvent]:
        try:
            all_rows = self._audit_sheet().get_all_values()[1:]
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}")

        events = []
        for row in all_rows:
            if not row or not row[0]:
                continue
            try:
                events.append(self._row_to_event(row))
            except (ValueError, IndexError) as e:
                self._logger.warning("audit_row_unreadable", error=str(e), row=row[:1])
        return events

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event."""
        try:
            self._audit_sheet().append_row(event.to_sheets_row(), value_input_option="RAW")
            return True
        except Exception as e:
            raise StorageError(f"Failed to write audit event: {e}")

    def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        events = [e for e in self._all_events() if e.correlation_id == correlation_id]
        events.sort(key=lambda e: e.timestamp)
        return events

    def get_events_by_entity(
        self,
        owner: str,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        events = [
            e for e in self._all_events()
            if e.owner == owner
            and e.entity_type == entity_type
            and e.entity_id == entity_id
        ]
        events.sort(key=lambda e: e.timestamp)
        return events

    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        events = self._all_events()
        # Sort newest first
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
