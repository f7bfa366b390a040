"""
Seed Data

The ledger starts with one debit account and a starter category set.
Fallback categories receive the transactions of deleted categories.
"""

from finledger.config import LedgerSettings
from finledger.models import Account, AccountType, Category, CategoryType


SEED_ACCOUNT_ID = "default-account"

FALLBACK_CATEGORY_IDS: dict[CategoryType, str] = {
    CategoryType.INCOME: "income-other",
    CategoryType.EXPENSE: "expense-other",
}

_INCOME_COLOR = "#40e07d"
_EXPENSE_COLOR = "#ff6b6b"

_DEFAULT_CATEGORY_ROWS = [
    ("income-salary", "Salary", CategoryType.INCOME, False),
    ("income-other", "Other Income", CategoryType.INCOME, False),
    ("expense-food", "Food", CategoryType.EXPENSE, False),
    ("expense-housing", "Housing", CategoryType.EXPENSE, True),
    ("expense-transport", "Transportation", CategoryType.EXPENSE, False),
    ("expense-outing", "Outing", CategoryType.EXPENSE, False),
    ("expense-other", "Other Expenses", CategoryType.EXPENSE, False),
]


def default_categories() -> list[Category]:
    """Fresh copies of the starter categories."""
    return [
        Category(
            id=category_id,
            name=name,
            type=category_type,
            color=_INCOME_COLOR if category_type == CategoryType.INCOME else _EXPENSE_COLOR,
            is_fixed=is_fixed,
        )
        for category_id, name, category_type, is_fixed in _DEFAULT_CATEGORY_ROWS
    ]


def default_category(category_id: str) -> Category:
    """Fresh copy of one starter category."""
    for category in default_categories():
        if category.id == category_id:
            return category
    raise KeyError(category_id)


def seed_account(settings: LedgerSettings) -> Account:
    """The account reinstated whenever the account set would be empty."""
    return Account(
        id=SEED_ACCOUNT_ID,
        name=settings.seed_account_name,
        type=AccountType.DEBIT,
        color=settings.seed_account_color,
        currency=settings.default_currency,
        is_default=True,
    )
