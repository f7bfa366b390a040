"""
Ledger Event Models

Every committed ledger mutation is described by a LedgerEvent and sent to
the structured log. Events are local diagnostics only; they are not
stored alongside the ledger data.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class LedgerEventType(str, Enum):
    """Types of events the ledger emits."""
    # Lifecycle
    LEDGER_LOADED = "ledger_loaded"
    LEDGER_SEEDED = "ledger_seeded"
    PERSISTED_DATA_MALFORMED = "persisted_data_malformed"
    PERSISTED_RECORD_SKIPPED = "persisted_record_skipped"

    # Accounts
    ACCOUNT_ADDED = "account_added"
    ACCOUNT_UPDATED = "account_updated"
    ACCOUNT_DELETED = "account_deleted"

    # Categories
    CATEGORY_ADDED = "category_added"
    CATEGORY_UPDATED = "category_updated"
    CATEGORY_DELETED = "category_deleted"

    # Transactions
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_UPDATED = "transaction_updated"
    TRANSACTION_DELETED = "transaction_deleted"
    RECURRING_MATERIALIZED = "recurring_materialized"

    # Budgets
    BUDGET_SET = "budget_set"
    BUDGET_DELETED = "budget_deleted"

    # Problems
    VALIDATION_FAILED = "validation_failed"


class LedgerEventSeverity(str, Enum):
    """Severity level for ledger events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LedgerEvent(BaseModel):
    """A single ledger event."""

    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )
    event_type: LedgerEventType
    severity: LedgerEventSeverity = LedgerEventSeverity.INFO
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'account', 'transaction')"
    )
    entity_id: Optional[str] = None
    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
        }


class LedgerEventBuilder:
    """
    Helper class to build ledger events with common patterns.

    Usage:
        event = LedgerEventBuilder.ledger_loaded({"accounts": 2})
        event = LedgerEventBuilder.recurring_materialized(["1700000000000-ab12cd34ef"])
    """

    @staticmethod
    def ledger_loaded(counts: dict[str, int]) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.LEDGER_LOADED,
            entity_type="ledger",
            description="Ledger collections loaded from storage",
            details=counts,
        )

    @staticmethod
    def ledger_seeded(keys: list[str]) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.LEDGER_SEEDED,
            entity_type="ledger",
            description="Seeded missing ledger collections with defaults",
            details={"keys": keys},
        )

    @staticmethod
    def persisted_data_malformed(key: str, error: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.PERSISTED_DATA_MALFORMED,
            severity=LedgerEventSeverity.WARNING,
            entity_type="ledger",
            description=f"Stored data under '{key}' is malformed, reseeding defaults",
            details={"key": key, "error": error},
        )

    @staticmethod
    def persisted_record_skipped(key: str, index: Optional[int], error: str) -> LedgerEvent:
        where = f"record {index}" if index is not None else "contents"
        return LedgerEvent(
            event_type=LedgerEventType.PERSISTED_RECORD_SKIPPED,
            severity=LedgerEventSeverity.WARNING,
            entity_type="ledger",
            description=f"Skipped unreadable {where} under '{key}'",
            details={"key": key, "index": index, "error": error},
        )

    @staticmethod
    def entity_changed(
        event_type: LedgerEventType,
        entity_type: str,
        entity_id: str,
        description: str,
        details: Optional[dict[str, Any]] = None,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            description=description,
            details=details or {},
        )

    @staticmethod
    def recurring_materialized(created_ids: list[str]) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.RECURRING_MATERIALIZED,
            entity_type="transaction",
            description=f"Materialized {len(created_ids)} recurring transaction(s)",
            details={"created_ids": created_ids},
        )

    @staticmethod
    def validation_failed(operation: str, issues: list[dict]) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.VALIDATION_FAILED,
            severity=LedgerEventSeverity.WARNING,
            description=f"Rejected {operation}",
            details={"operation": operation, "issues": issues},
        )

