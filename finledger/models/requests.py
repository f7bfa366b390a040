"""
Create / Update Request Models

DESIGN DECISION: Partial updates are NOT arbitrary dict merges.
Each entity has a fixed update request with the permitted fields only
(extra fields are rejected). Only fields the caller explicitly set are
applied, so `AccountUpdate(name="Wallet")` never touches the balance.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from finledger.models.ledger import (
    AccountType,
    CategoryType,
    RecurringFrequency,
    TransactionType,
)


REQUEST_MODEL_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    str_strip_whitespace=True,
    extra="forbid",
)


class _UpdateRequest(BaseModel):
    """Base for partial updates."""
    model_config = REQUEST_MODEL_CONFIG

    def changes(self) -> dict[str, Any]:
        """Fields explicitly provided by the caller. None means "leave as is"."""
        return self.model_dump(exclude_unset=True, exclude_none=True)


# =============================================================================
# ACCOUNTS
# =============================================================================

class AccountCreate(BaseModel):
    model_config = REQUEST_MODEL_CONFIG

    name: str = Field(..., min_length=1, max_length=200)
    type: AccountType = AccountType.DEBIT
    balance: Decimal = Decimal("0")
    currency: str = Field(default="EUR", min_length=3, max_length=3)
    color: str = "#40e07d"
    is_default: bool = False


class AccountUpdate(_UpdateRequest):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    type: Optional[AccountType] = None
    balance: Optional[Decimal] = None
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    color: Optional[str] = None
    is_default: Optional[bool] = None


# =============================================================================
# CATEGORIES
# =============================================================================

class CategoryCreate(BaseModel):
    model_config = REQUEST_MODEL_CONFIG

    name: str = Field(..., min_length=1, max_length=200)
    type: CategoryType
    color: Optional[str] = None
    is_fixed: bool = False
    monthly_budget: Optional[Decimal] = Field(default=None, ge=0)


class CategoryUpdate(_UpdateRequest):
    """
    Category patch.

    `type` is accepted only so the validator can reject a change with a
    clear message; it must equal the stored type.
    """
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    type: Optional[CategoryType] = None
    color: Optional[str] = None
    is_fixed: Optional[bool] = None
    monthly_budget: Optional[Decimal] = Field(default=None, ge=0)


# =============================================================================
# TRANSACTIONS
# =============================================================================

class TransactionCreate(BaseModel):
    model_config = REQUEST_MODEL_CONFIG

    date: datetime
    description: str = Field(default="", max_length=500)
    amount: Decimal = Field(..., ge=0)
    type: TransactionType
    category_id: str = ""
    account_id: str = Field(..., min_length=1)
    to_account_id: Optional[str] = None
    is_recurring: bool = False
    recurring_frequency: Optional[RecurringFrequency] = None


class TransactionUpdate(_UpdateRequest):
    date: Optional[datetime] = None
    description: Optional[str] = Field(default=None, max_length=500)
    amount: Optional[Decimal] = Field(default=None, ge=0)
    type: Optional[TransactionType] = None
    category_id: Optional[str] = None
    account_id: Optional[str] = Field(default=None, min_length=1)
    to_account_id: Optional[str] = None
    is_recurring: Optional[bool] = None
    recurring_frequency: Optional[RecurringFrequency] = None
