"""
Ledger State

The in-memory owner of the four ledger collections. All mutation goes
through here so referential integrity and balance coupling are enforced
in exactly one place.

Collections are insertion-ordered dicts:
- "first account" means first inserted
- sort ties between transactions fall back to insertion order

Values handed out by the accessors below are LIVE objects for use by
other ledger components only. The facade copies before anything leaves
the package.
"""

from decimal import Decimal
from typing import Callable, Iterable, Optional

from finledger.ledger.balance import BalanceMaintainer
from finledger.ledger.defaults import FALLBACK_CATEGORY_IDS, default_category
from finledger.ledger.ids import generate_id
from finledger.log import LedgerEventLogger
from finledger.models import (
    Account,
    AccountCreate,
    AccountUpdate,
    Budget,
    Category,
    CategoryCreate,
    CategoryUpdate,
    LedgerEventType,
    Transaction,
    TransactionCreate,
    TransactionUpdate,
)


BudgetKey = tuple[str, int, int]


class LedgerState:
    """
    CRUD over accounts, categories, transactions and budgets.

    Commands that target a missing id return None/False rather than
    raising. Commands assume their input already passed validation.
    """

    def __init__(
        self,
        seed_account_factory: Callable[[], Account],
        accounts: Iterable[Account] = (),
        categories: Iterable[Category] = (),
        transactions: Iterable[Transaction] = (),
        budgets: Iterable[Budget] = (),
        id_factory: Callable[[], str] = generate_id,
        event_logger: Optional[LedgerEventLogger] = None,
    ):
        self._seed_account_factory = seed_account_factory
        self._new_id = id_factory
        self._events = event_logger or LedgerEventLogger()

        self._accounts: dict[str, Account] = {a.id: a for a in accounts}
        self._categories: dict[str, Category] = {c.id: c for c in categories}
        self._transactions: dict[str, Transaction] = {t.id: t for t in transactions}
        self._budgets: dict[BudgetKey, Budget] = {b.key: b for b in budgets}

        if not self._accounts:
            self._reinstate_seed_account()

        self.balances = BalanceMaintainer(self._accounts.get, self._events)

    # -------------------------------------------------------------------------
    # Internal read access
    # -------------------------------------------------------------------------

    @property
    def accounts(self) -> list[Account]:
        return list(self._accounts.values())

    @property
    def categories(self) -> list[Category]:
        return list(self._categories.values())

    @property
    def transactions(self) -> list[Transaction]:
        return list(self._transactions.values())

    @property
    def budgets(self) -> list[Budget]:
        return list(self._budgets.values())

    def get_account(self, account_id: str) -> Optional[Account]:
        return self._accounts.get(account_id)

    def get_category(self, category_id: str) -> Optional[Category]:
        return self._categories.get(category_id)

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        return self._transactions.get(transaction_id)

    def get_budget(self, category_id: str, month: int, year: int) -> Optional[Budget]:
        return self._budgets.get((category_id, month, year))

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    def _clear_default_flags(self) -> None:
        for account in self._accounts.values():
            account.is_default = False

    def _reinstate_seed_account(self) -> Account:
        account = self._seed_account_factory()
        account.is_default = True
        self._accounts[account.id] = account
        return account

    def add_account(self, data: AccountCreate) -> Account:
        """Create an account. The first account is always the default."""
        account = Account(id=self._new_id(), **data.model_dump())

        if not self._accounts or account.is_default:
            self._clear_default_flags()
            account.is_default = True

        self._accounts[account.id] = account
        self._events.log_change(
            LedgerEventType.ACCOUNT_ADDED, "account", account.id,
            f"Account added: {account.name}",
        )
        return account

    def update_account(self, account_id: str, patch: AccountUpdate) -> Optional[Account]:
        current = self._accounts.get(account_id)
        if current is None:
            return None

        changes = patch.changes()
        if changes.get("is_default"):
            self._clear_default_flags()

        updated = Account.model_validate({**current.model_dump(), **changes})
        self._accounts[account_id] = updated
        self._events.log_change(
            LedgerEventType.ACCOUNT_UPDATED, "account", account_id,
            f"Account updated: {updated.name}",
            fields=sorted(changes),
        )
        return updated

    def delete_account(self, account_id: str) -> bool:
        """
        Remove an account and every transaction touching it.

        Removed transfers are reverted on their surviving counterpart
        account so the remaining balances still match the remaining
        transactions. If the account set becomes empty the seed account
        is reinstated.
        """
        account = self._accounts.pop(account_id, None)
        if account is None:
            return False

        if account.is_default and self._accounts:
            self._clear_default_flags()
            next(iter(self._accounts.values())).is_default = True

        removed = [t for t in self._transactions.values() if t.touches(account_id)]
        for transaction in removed:
            self.balances.revert(transaction, missing_ok=True)
            del self._transactions[transaction.id]

        if not self._accounts:
            self._reinstate_seed_account()

        self._events.log_change(
            LedgerEventType.ACCOUNT_DELETED, "account", account_id,
            f"Account deleted: {account.name}",
            removed_transactions=len(removed),
        )
        return True

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    def add_category(self, data: CategoryCreate) -> Category:
        category = Category(id=f"{data.type.value}-{self._new_id()}", **data.model_dump())
        self._categories[category.id] = category
        self._events.log_change(
            LedgerEventType.CATEGORY_ADDED, "category", category.id,
            f"Category added: {category.name}",
        )
        return category

    def update_category(self, category_id: str, patch: CategoryUpdate) -> Optional[Category]:
        current = self._categories.get(category_id)
        if current is None:
            return None

        changes = patch.changes()
        if changes.get("type", current.type) != current.type:
            raise ValueError(f"Category type is immutable: {category_id}")

        updated = Category.model_validate({**current.model_dump(), **changes})
        self._categories[category_id] = updated
        self._events.log_change(
            LedgerEventType.CATEGORY_UPDATED, "category", category_id,
            f"Category updated: {updated.name}",
            fields=sorted(changes),
        )
        return updated

    def delete_category(self, category_id: str) -> bool:
        """
        Remove a category.

        Transactions pointing at it move to the fallback category of the
        same type; budgets keyed to it are dropped.
        """
        category = self._categories.pop(category_id, None)
        if category is None:
            return False

        fallback_id = FALLBACK_CATEGORY_IDS[category.type]
        if fallback_id not in self._categories:
            self._categories[fallback_id] = default_category(fallback_id)

        reassigned = 0
        for transaction in self._transactions.values():
            if transaction.category_id == category_id:
                transaction.category_id = fallback_id
                reassigned += 1

        dropped = [key for key in self._budgets if key[0] == category_id]
        for key in dropped:
            del self._budgets[key]

        self._events.log_change(
            LedgerEventType.CATEGORY_DELETED, "category", category_id,
            f"Category deleted: {category.name}",
            fallback_category_id=fallback_id,
            reassigned_transactions=reassigned,
            removed_budgets=len(dropped),
        )
        return True

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    def add_transaction(self, data: TransactionCreate) -> Transaction:
        """Insert a transaction and post its balance effect."""
        transaction = Transaction(id=self._new_id(), **data.model_dump())
        self._transactions[transaction.id] = transaction
        self.balances.apply(transaction)
        self._events.log_change(
            LedgerEventType.TRANSACTION_ADDED, "transaction", transaction.id,
            f"{transaction.type.value.capitalize()} added: {transaction.description}",
            amount=str(transaction.amount),
            account_id=transaction.account_id,
        )
        return transaction

    def preview_transaction_update(
        self,
        transaction_id: str,
        patch: TransactionUpdate,
    ) -> Optional[Transaction]:
        """The transaction as it would look after the patch, without committing."""
        current = self._transactions.get(transaction_id)
        if current is None:
            return None
        return Transaction.model_validate({**current.model_dump(), **patch.changes()})

    def update_transaction(
        self,
        transaction_id: str,
        patch: TransactionUpdate,
    ) -> Optional[Transaction]:
        """
        Patch a transaction.

        The patched transaction is fully built (and validated) before the
        old effect is reverted, so a rejected patch leaves balances as
        they were.
        """
        old = self._transactions.get(transaction_id)
        if old is None:
            return None

        new = self.preview_transaction_update(transaction_id, patch)
        self.balances.replace(old, new)
        self._transactions[transaction_id] = new

        self._events.log_change(
            LedgerEventType.TRANSACTION_UPDATED, "transaction", transaction_id,
            f"Transaction updated: {new.description}",
            fields=sorted(patch.changes()),
        )
        return new

    def delete_transaction(self, transaction_id: str) -> bool:
        transaction = self._transactions.pop(transaction_id, None)
        if transaction is None:
            return False

        self.balances.revert(transaction)
        self._events.log_change(
            LedgerEventType.TRANSACTION_DELETED, "transaction", transaction_id,
            f"Transaction deleted: {transaction.description}",
            amount=str(transaction.amount),
        )
        return True

    # -------------------------------------------------------------------------
    # Budgets
    # -------------------------------------------------------------------------

    def set_budget(self, category_id: str, month: int, year: int, amount: Decimal) -> Budget:
        """Upsert the budget row for (category, month, year)."""
        budget = Budget(category_id=category_id, month=month, year=year, amount=amount)
        self._budgets[budget.key] = budget
        self._events.log_change(
            LedgerEventType.BUDGET_SET, "budget", category_id,
            f"Budget set for {month + 1:02d}/{year}",
            amount=str(budget.amount),
        )
        return budget

    def delete_budget(self, category_id: str, month: int, year: int) -> bool:
        if self._budgets.pop((category_id, month, year), None) is None:
            return False
        self._events.log_change(
            LedgerEventType.BUDGET_DELETED, "budget", category_id,
            f"Budget deleted for {month + 1:02d}/{year}",
        )
        return True
