"""
Ledger Command Validation

DESIGN DECISION: Commands are checked against the current ledger BEFORE
anything mutates. Structural rules (non-negative amounts, transfer shape,
required fields) are enforced by the pydantic models themselves; this
module covers what a single model cannot see:

- referenced accounts and categories exist
- a transaction's category type matches the transaction type
- category types never change
- budgets only target expense categories
- fallback categories are never deleted

IMPORTANT: Validation NEVER silently fixes anything.
A dangling reference is rejected, not partially applied.
"""

from typing import Optional

from finledger.ledger.defaults import FALLBACK_CATEGORY_IDS
from finledger.ledger.state import LedgerState
from finledger.models import (
    CategoryType,
    CategoryUpdate,
    Transaction,
    TransactionType,
    ValidationIssue,
    ValidationResult,
)


class LedgerValidationError(Exception):
    """A command was rejected by validation."""

    def __init__(self, result: ValidationResult):
        self.result = result
        messages = "; ".join(i.message for i in result.issues if i.severity == "error")
        super().__init__(f"{result.operation} rejected: {messages}")

    @property
    def issues(self) -> list[ValidationIssue]:
        return self.result.issues


def _error(field: str, issue_type: str, message: str, suggested_fix: Optional[str] = None) -> ValidationIssue:
    return ValidationIssue(
        field=field,
        issue_type=issue_type,
        message=message,
        severity="error",
        suggested_fix=suggested_fix,
    )


class LedgerValidator:
    """
    Validates ledger commands against the current state.

    Every validate_* method returns a ValidationResult; `ensure` turns a
    failing result into a LedgerValidationError.
    """

    def __init__(self, state: LedgerState):
        self._state = state

    def ensure(self, result: ValidationResult) -> ValidationResult:
        """Raise if the result carries any error-level issue."""
        if result.has_errors:
            raise LedgerValidationError(result)
        return result

    def validate_transaction(self, transaction: Transaction, operation: str) -> ValidationResult:
        """Check a fully built transaction's references."""
        issues = []

        if self._state.get_account(transaction.account_id) is None:
            issues.append(_error(
                "account_id",
                "not_found",
                f"Account '{transaction.account_id}' does not exist",
                suggested_fix="Pick an existing source account",
            ))

        if transaction.type == TransactionType.TRANSFER:
            if self._state.get_account(transaction.to_account_id) is None:
                issues.append(_error(
                    "to_account_id",
                    "not_found",
                    f"Destination account '{transaction.to_account_id}' does not exist",
                    suggested_fix="Pick an existing destination account",
                ))
        else:
            category = self._state.get_category(transaction.category_id)
            if category is None:
                issues.append(_error(
                    "category_id",
                    "not_found",
                    f"Category '{transaction.category_id}' does not exist",
                ))
            elif category.type.value != transaction.type.value:
                issues.append(_error(
                    "category_id",
                    "type_mismatch",
                    (
                        f"Category '{category.name}' is an {category.type.value} category "
                        f"but the transaction is an {transaction.type.value}"
                    ),
                    suggested_fix=f"Use an {transaction.type.value} category",
                ))

        return ValidationResult(operation=operation, issues=issues)

    def validate_category_update(self, category_id: str, patch: CategoryUpdate) -> ValidationResult:
        issues = []
        category = self._state.get_category(category_id)
        if category is not None and patch.type is not None and patch.type != category.type:
            issues.append(_error(
                "type",
                "immutable",
                f"Category '{category.name}' cannot change type from {category.type.value} to {patch.type.value}",
                suggested_fix="Create a new category of the other type instead",
            ))
        return ValidationResult(operation="update_category", issues=issues)

    def validate_category_delete(self, category_id: str) -> ValidationResult:
        issues = []
        if category_id in FALLBACK_CATEGORY_IDS.values():
            issues.append(_error(
                "category_id",
                "protected",
                f"Category '{category_id}' receives transactions of deleted categories and cannot be deleted",
            ))
        return ValidationResult(operation="delete_category", issues=issues)

    def validate_budget(self, category_id: str) -> ValidationResult:
        issues = []
        category = self._state.get_category(category_id)
        if category is None:
            issues.append(_error(
                "category_id",
                "not_found",
                f"Category '{category_id}' does not exist",
            ))
        elif category.type != CategoryType.EXPENSE:
            issues.append(_error(
                "category_id",
                "type_mismatch",
                f"Budgets can only be set on expense categories, '{category.name}' is income",
            ))
        return ValidationResult(operation="set_budget", issues=issues)
