"""
Data Models Package

This package contains all Pydantic models used by the ledger.
All data crossing the ledger boundary must conform to these schemas.
"""

from finledger.models.ledger import (
    Account,
    AccountType,
    Budget,
    BudgetProgress,
    Category,
    CategoryType,
    MonthlySummary,
    RecurringFrequency,
    Transaction,
    TransactionType,
    ensure_utc,
)
from finledger.models.requests import (
    AccountCreate,
    AccountUpdate,
    CategoryCreate,
    CategoryUpdate,
    TransactionCreate,
    TransactionUpdate,
)
from finledger.models.validation import ValidationIssue, ValidationResult
from finledger.models.events import (
    LedgerEvent,
    LedgerEventBuilder,
    LedgerEventSeverity,
    LedgerEventType,
)

__all__ = [
    # Ledger entities
    "Account",
    "AccountType",
    "Budget",
    "BudgetProgress",
    "Category",
    "CategoryType",
    "MonthlySummary",
    "RecurringFrequency",
    "Transaction",
    "TransactionType",
    "ensure_utc",
    # Requests
    "AccountCreate",
    "AccountUpdate",
    "CategoryCreate",
    "CategoryUpdate",
    "TransactionCreate",
    "TransactionUpdate",
    # Validation
    "ValidationIssue",
    "ValidationResult",
    # Events
    "LedgerEvent",
    "LedgerEventBuilder",
    "LedgerEventSeverity",
    "LedgerEventType",
]
