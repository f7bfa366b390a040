"""
Core Ledger Models

These models define the strict schemas for everything the ledger owns:
accounts, categories, transactions and budgets, plus the derived
MonthlySummary and BudgetProgress views.

DESIGN DECISION: Python code uses snake_case, but the persisted JSON keeps
the camelCase field names of the storage layout (isDefault, categoryId,
toAccountId, ...). A camelCase alias generator bridges the two, so the
same models load old data and write compatible data.

Amounts are Decimal everywhere. Floats never touch a balance.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


LEDGER_MODEL_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    str_strip_whitespace=True,
)

# Stored amounts are JSON numbers so other readers of the keys can do
# arithmetic on them. In Python they stay Decimal.
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class AccountType(str, Enum):
    """Kinds of money containers a user can track."""
    CREDIT = "credit"
    DEBIT = "debit"
    SAVINGS = "savings"
    CASH = "cash"
    INVESTMENT = "investment"


class CategoryType(str, Enum):
    """
    Category direction.

    The type tag is the only source of truth for a category's direction;
    it is never inferred from the category id.
    """
    INCOME = "income"
    EXPENSE = "expense"


class TransactionType(str, Enum):
    """Transaction kinds. Transfers move money between two accounts."""
    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"


class RecurringFrequency(str, Enum):
    """How often a recurring template repeats."""
    MONTHLY = "monthly"
    WEEKLY = "weekly"
    YEARLY = "yearly"


def ensure_utc(value: datetime) -> datetime:
    """Interpret naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# =============================================================================
# ENTITIES
# =============================================================================

class Account(BaseModel):
    """
    A financial account (bank account, credit card, wallet, ...).

    The balance is eagerly maintained by the ledger: every committed
    transaction adjusts it immediately.
    """
    model_config = LEDGER_MODEL_CONFIG

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    type: AccountType = AccountType.DEBIT
    balance: Money = Field(
        default=Decimal("0"),
        description="Signed balance, adjusted on every posting"
    )
    currency: str = Field(
        default="EUR",
        min_length=3,
        max_length=3,
        description="ISO 4217 currency code"
    )
    color: str = "#40e07d"
    is_default: bool = False

    @field_validator('currency')
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        return v.upper()


class Category(BaseModel):
    """
    A transaction category.

    is_fixed and monthly_budget only make sense for expense categories;
    they are cleared on income categories.
    """
    model_config = LEDGER_MODEL_CONFIG

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    type: CategoryType
    color: Optional[str] = None
    is_fixed: bool = Field(
        default=False,
        description="Non-discretionary spend (rent, insurance, ...)"
    )
    monthly_budget: Optional[Money] = Field(
        default=None,
        ge=0,
        description="Default monthly budget amount"
    )

    @model_validator(mode='after')
    def clear_expense_only_fields(self) -> 'Category':
        if self.type == CategoryType.INCOME:
            self.is_fixed = False
            self.monthly_budget = None
        return self


class Transaction(BaseModel):
    """
    A single dated money movement.

    Invariants enforced here (structural only; referential checks
    against other collections live in the validator):
    - amount is non-negative, the sign comes from the type
    - transfers name a destination distinct from the source
    - income/expense transactions name a category
    """
    model_config = LEDGER_MODEL_CONFIG

    id: str = Field(..., min_length=1)
    date: datetime
    description: str = Field(default="", max_length=500)
    amount: Money = Field(..., ge=0)
    type: TransactionType
    category_id: str = ""
    account_id: str = Field(..., min_length=1)
    to_account_id: Optional[str] = None
    is_recurring: bool = False
    recurring_frequency: Optional[RecurringFrequency] = None

    @field_validator('date')
    @classmethod
    def normalize_date(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @model_validator(mode='after')
    def validate_shape(self) -> 'Transaction':
        if self.type == TransactionType.TRANSFER:
            if not self.to_account_id:
                raise ValueError("Transfer requires a destination account")
            if self.to_account_id == self.account_id:
                raise ValueError("Transfer source and destination must differ")
            self.category_id = ""
        else:
            if not self.category_id:
                raise ValueError(f"{self.type.value.capitalize()} transaction requires a category")
            self.to_account_id = None

        if not self.is_recurring:
            self.recurring_frequency = None
        elif self.recurring_frequency is None:
            self.recurring_frequency = RecurringFrequency.MONTHLY
        return self

    @property
    def month_key(self) -> tuple[int, int]:
        """(year, month 0-11) of the transaction date in UTC."""
        return self.date.year, self.date.month - 1

    def touches(self, account_id: str) -> bool:
        """True if the account is the source or the destination."""
        return self.account_id == account_id or self.to_account_id == account_id


class Budget(BaseModel):
    """
    A category budget for one calendar month.

    Keyed by (category_id, month, year); at most one row per key.
    """
    model_config = LEDGER_MODEL_CONFIG

    category_id: str = Field(..., min_length=1)
    month: int = Field(..., ge=0, le=11, description="Month index, 0 = January")
    year: int = Field(..., ge=1970, le=9999)
    amount: Money = Field(..., ge=0)

    @property
    def key(self) -> tuple[str, int, int]:
        return self.category_id, self.month, self.year


# =============================================================================
# DERIVED VIEWS (never persisted)
# =============================================================================

class MonthlySummary(BaseModel):
    """
    Point-in-time financial summary for one calendar month.

    starting_balance is reconstructed by replaying history before the
    month, independent of the cached account balances.
    """
    model_config = LEDGER_MODEL_CONFIG

    month: int = Field(..., ge=0, le=11)
    year: int
    starting_balance: Decimal = Decimal("0")
    ending_balance: Decimal = Decimal("0")
    total_income: Decimal = Decimal("0")
    total_expenses: Decimal = Decimal("0")
    saved_amount: Decimal = Decimal("0")
    category_totals: dict[str, Decimal] = Field(default_factory=dict)


class BudgetProgress(BaseModel):
    """Spending against budget for one expense category in one month."""
    model_config = LEDGER_MODEL_CONFIG

    category_id: str
    category_name: str
    spent: Decimal = Decimal("0")
    budget: Decimal = Decimal("0")
    percentage: float = Field(default=0.0, ge=0.0, le=100.0)
    is_near_limit: bool = False
