"""
Ledger core package.

LedgerState owns the collections, BalanceMaintainer keeps balances in
step with them, SummaryEngine and RecurringMaterializer derive from them,
and LedgerRepository moves them in and out of storage.
"""

from finledger.ledger.balance import BalanceMaintainer, posting_deltas
from finledger.ledger.defaults import (
    FALLBACK_CATEGORY_IDS,
    SEED_ACCOUNT_ID,
    default_categories,
    seed_account,
)
from finledger.ledger.ids import generate_id
from finledger.ledger.persistence import (
    ACCOUNTS_KEY,
    BUDGETS_KEY,
    CATEGORIES_KEY,
    TRANSACTIONS_KEY,
    LedgerRepository,
)
from finledger.ledger.recurring import RecurringMaterializer
from finledger.ledger.state import LedgerState
from finledger.ledger.summary import SummaryEngine

__all__ = [
    "ACCOUNTS_KEY",
    "BUDGETS_KEY",
    "CATEGORIES_KEY",
    "TRANSACTIONS_KEY",
    "FALLBACK_CATEGORY_IDS",
    "SEED_ACCOUNT_ID",
    "BalanceMaintainer",
    "LedgerRepository",
    "LedgerState",
    "RecurringMaterializer",
    "SummaryEngine",
    "default_categories",
    "generate_id",
    "posting_deltas",
    "seed_account",
]
