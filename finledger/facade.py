"""
Ledger Facade

The public command/query surface of the ledger.

DESIGN DECISION: The facade enforces the ownership boundary:
- commands are validated before LedgerState mutates anything
- every successful command persists all four collections in full
- every value returned is a copy; callers can never reach the
  canonical collections

Commands addressing a missing id return None (updates) or False
(deletes) and persist nothing. Invalid commands raise
LedgerValidationError.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Optional, TypeVar, Union

from pydantic import BaseModel

from finledger.config import LedgerSettings, get_settings
from finledger.ledger.defaults import seed_account
from finledger.ledger.persistence import LedgerRepository
from finledger.ledger.recurring import RecurringMaterializer, utc_now
from finledger.ledger.state import LedgerState
from finledger.ledger.summary import SummaryEngine
from finledger.log import LedgerEventLogger, configure_level
from finledger.models import (
    Account,
    AccountCreate,
    AccountUpdate,
    Budget,
    BudgetProgress,
    Category,
    CategoryCreate,
    CategoryType,
    CategoryUpdate,
    MonthlySummary,
    Transaction,
    TransactionCreate,
    TransactionType,
    TransactionUpdate,
    ValidationResult,
)
from finledger.services.storage import InMemoryStore, JsonFileStore, PersistenceStore
from finledger.validation import LedgerValidator


ModelT = TypeVar("ModelT", bound=BaseModel)


def _coerce(model_cls: type[ModelT], data: Union[ModelT, dict[str, Any]]) -> ModelT:
    """Accept either a request model or a plain mapping from the presentation layer."""
    if isinstance(data, model_cls):
        return data
    return model_cls.model_validate(data)


def _copy(item: ModelT) -> ModelT:
    return item.model_copy(deep=True)


def _newest_first(transactions: list[Transaction]) -> list[Transaction]:
    # sorted() is stable with reverse=True, so ties keep insertion order
    return [_copy(t) for t in sorted(transactions, key=lambda t: t.date, reverse=True)]


class LedgerFacade:
    """
    Command/query API consumed by presentation code.

    Build one with create_ledger(); hold and pass the instance rather
    than sharing a module-level ledger.
    """

    def __init__(
        self,
        state: LedgerState,
        repository: LedgerRepository,
        settings: LedgerSettings,
        summary_engine: Optional[SummaryEngine] = None,
        materializer: Optional[RecurringMaterializer] = None,
        event_logger: Optional[LedgerEventLogger] = None,
    ):
        self._state = state
        self._repository = repository
        self._settings = settings
        self._summaries = summary_engine or SummaryEngine()
        self._events = event_logger or LedgerEventLogger()
        self._materializer = materializer or RecurringMaterializer(event_logger=self._events)
        self._validator = LedgerValidator(state)

    def _commit(self) -> None:
        self._repository.save(self._state)

    def _ensure(self, result: ValidationResult) -> None:
        if result.has_errors:
            self._events.log_validation_failed(
                result.operation,
                [issue.model_dump() for issue in result.issues],
            )
        self._validator.ensure(result)

    # =========================================================================
    # ACCOUNTS
    # =========================================================================

    def get_accounts(self) -> list[Account]:
        return [_copy(a) for a in self._state.accounts]

    def get_account_by_id(self, account_id: str) -> Optional[Account]:
        account = self._state.get_account(account_id)
        return _copy(account) if account else None

    def get_default_account(self) -> Account:
        """First account flagged default, else the first account, else the seed account."""
        accounts = self._state.accounts
        for account in accounts:
            if account.is_default:
                return _copy(account)
        if accounts:
            return _copy(accounts[0])
        return seed_account(self._settings)

    def add_account(self, data: Union[AccountCreate, dict[str, Any]]) -> Account:
        account = self._state.add_account(_coerce(AccountCreate, data))
        self._commit()
        return _copy(account)

    def update_account(
        self,
        account_id: str,
        patch: Union[AccountUpdate, dict[str, Any]],
    ) -> Optional[Account]:
        account = self._state.update_account(account_id, _coerce(AccountUpdate, patch))
        if account is None:
            return None
        self._commit()
        return _copy(account)

    def delete_account(self, account_id: str) -> bool:
        if not self._state.delete_account(account_id):
            return False
        self._commit()
        return True

    def get_total_balance(self) -> Decimal:
        return sum((a.balance for a in self._state.accounts), Decimal("0"))

    # =========================================================================
    # CATEGORIES
    # =========================================================================

    def get_categories(self) -> list[Category]:
        return [_copy(c) for c in self._state.categories]

    def get_categories_by_type(self, category_type: Union[CategoryType, str]) -> list[Category]:
        category_type = CategoryType(category_type)
        return [_copy(c) for c in self._state.categories if c.type == category_type]

    def get_category_by_id(self, category_id: str) -> Optional[Category]:
        category = self._state.get_category(category_id)
        return _copy(category) if category else None

    def add_category(self, data: Union[CategoryCreate, dict[str, Any]]) -> Category:
        category = self._state.add_category(_coerce(CategoryCreate, data))
        self._commit()
        return _copy(category)

    def update_category(
        self,
        category_id: str,
        patch: Union[CategoryUpdate, dict[str, Any]],
    ) -> Optional[Category]:
        patch = _coerce(CategoryUpdate, patch)
        if self._state.get_category(category_id) is None:
            return None
        self._ensure(self._validator.validate_category_update(category_id, patch))

        category = self._state.update_category(category_id, patch)
        self._commit()
        return _copy(category)

    def delete_category(self, category_id: str) -> bool:
        if self._state.get_category(category_id) is None:
            return False
        self._ensure(self._validator.validate_category_delete(category_id))

        self._state.delete_category(category_id)
        self._commit()
        return True

    # =========================================================================
    # TRANSACTIONS
    # =========================================================================

    def get_all_transactions(self) -> list[Transaction]:
        return _newest_first(self._state.transactions)

    def get_transaction_by_id(self, transaction_id: str) -> Optional[Transaction]:
        transaction = self._state.get_transaction(transaction_id)
        return _copy(transaction) if transaction else None

    def get_transactions_by_account(self, account_id: str) -> list[Transaction]:
        """Transactions where the account is the source or the destination."""
        return _newest_first([t for t in self._state.transactions if t.touches(account_id)])

    def get_transactions_by_type(self, transaction_type: Union[TransactionType, str]) -> list[Transaction]:
        transaction_type = TransactionType(transaction_type)
        return _newest_first([t for t in self._state.transactions if t.type == transaction_type])

    def get_transactions_by_month(self, month: int, year: int) -> list[Transaction]:
        return _newest_first(self._summaries.month_transactions(self._state.transactions, month, year))

    def add_transaction(self, data: Union[TransactionCreate, dict[str, Any]]) -> Transaction:
        data = _coerce(TransactionCreate, data)
        candidate = Transaction(id="pending", **data.model_dump())
        self._ensure(self._validator.validate_transaction(candidate, "add_transaction"))

        transaction = self._state.add_transaction(data)
        self._commit()
        return _copy(transaction)

    def update_transaction(
        self,
        transaction_id: str,
        patch: Union[TransactionUpdate, dict[str, Any]],
    ) -> Optional[Transaction]:
        patch = _coerce(TransactionUpdate, patch)
        candidate = self._state.preview_transaction_update(transaction_id, patch)
        if candidate is None:
            return None
        self._ensure(self._validator.validate_transaction(candidate, "update_transaction"))

        transaction = self._state.update_transaction(transaction_id, patch)
        self._commit()
        return _copy(transaction)

    def delete_transaction(self, transaction_id: str) -> bool:
        if not self._state.delete_transaction(transaction_id):
            return False
        self._commit()
        return True

    def create_recurring_transactions_for_current_month(self) -> list[Transaction]:
        """Materialize this month's recurring instances. Safe to call repeatedly."""
        created = self._materializer.materialize(self._state)
        if created:
            self._commit()
        return [_copy(t) for t in created]

    # =========================================================================
    # BUDGETS
    # =========================================================================

    def get_budgets(self) -> list[Budget]:
        return [_copy(b) for b in self._state.budgets]

    def get_budgets_by_month(self, month: int, year: int) -> list[Budget]:
        return [_copy(b) for b in self._state.budgets if b.month == month and b.year == year]

    def set_budget(
        self,
        category_id: str,
        month: int,
        year: int,
        amount: Union[Decimal, int, str],
        update_category_default: bool = False,
    ) -> Budget:
        """
        Upsert the budget for (category, month, year).

        Args:
            update_category_default: Also store the amount as the
                category's default monthly budget
        """
        self._ensure(self._validator.validate_budget(category_id))

        budget = self._state.set_budget(category_id, month, year, Decimal(str(amount)))
        if update_category_default:
            self._state.update_category(category_id, CategoryUpdate(monthly_budget=budget.amount))
        self._commit()
        return _copy(budget)

    def delete_budget(self, category_id: str, month: int, year: int) -> bool:
        if not self._state.delete_budget(category_id, month, year):
            return False
        self._commit()
        return True

    # =========================================================================
    # SUMMARIES
    # =========================================================================

    def get_monthly_summary(self, month: int, year: int) -> MonthlySummary:
        return self._summaries.monthly_summary(
            self._state.accounts, self._state.transactions, month, year,
        )

    def get_account_summary(self, account_id: str, month: int, year: int) -> MonthlySummary:
        return self._summaries.account_summary(account_id, self._state.transactions, month, year)

    def get_spending_by_category(self, month: int, year: int) -> dict[str, Decimal]:
        month_transactions = self._summaries.month_transactions(self._state.transactions, month, year)
        return self._summaries.category_totals(month_transactions, (TransactionType.EXPENSE,))

    def get_income_by_category(self, month: int, year: int) -> dict[str, Decimal]:
        month_transactions = self._summaries.month_transactions(self._state.transactions, month, year)
        return self._summaries.category_totals(month_transactions, (TransactionType.INCOME,))

    def get_budget_progress(
        self,
        month: int,
        year: int,
        account_id: Optional[str] = None,
    ) -> list[BudgetProgress]:
        """Spending vs budget per expense category, optionally scoped to one account."""
        if account_id is None:
            summary = self.get_monthly_summary(month, year)
        else:
            summary = self.get_account_summary(account_id, month, year)
        return self._summaries.budget_progress(
            self._state.categories,
            self._state.budgets,
            summary,
            self._settings.budget_warning_threshold,
        )

    def get_balance_reconciliation(self) -> dict[str, tuple[Decimal, Decimal]]:
        """
        Cached balance vs full-history replay, per account.

        Returns {account_id: (cached, replayed)}.
        """
        return self._summaries.reconcile(self._state.accounts, self._state.transactions)


def create_ledger(
    store: Optional[PersistenceStore] = None,
    settings: Optional[LedgerSettings] = None,
    clock: Callable[[], datetime] = utc_now,
    id_factory: Optional[Callable[[], str]] = None,
) -> LedgerFacade:
    """
    Factory function to create a ready-to-use ledger.

    Args:
        store: Key-value store to persist through. Defaults to a JSON file
               store when settings.storage_path is set, else in-memory.
        settings: Ledger settings (defaults to get_settings())
        clock: Source of "now" for recurring materialization
        id_factory: Identifier generator override (tests)

    Returns:
        A LedgerFacade over freshly loaded (or seeded) state
    """
    settings = settings or get_settings()
    configure_level(settings.log_level)

    if store is None:
        if settings.storage_path is not None:
            store = JsonFileStore(settings.storage_path)
        else:
            store = InMemoryStore()

    event_logger = LedgerEventLogger()
    repository = LedgerRepository(
        store,
        seed_account_factory=lambda: seed_account(settings),
        event_logger=event_logger,
    )
    state_options = {"id_factory": id_factory} if id_factory else {}
    state = repository.load(**state_options)

    return LedgerFacade(
        state=state,
        repository=repository,
        settings=settings,
        materializer=RecurringMaterializer(clock=clock, event_logger=event_logger),
        event_logger=event_logger,
    )
