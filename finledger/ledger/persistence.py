"""
Ledger Persistence

The ledger is stored as four independently keyed JSON arrays:

    finances_accounts      -> Account[]
    finances_transactions  -> Transaction[]
    finances_categories    -> Category[]
    finances_budgets       -> Budget[]

Writes always store the full current collections, never deltas.

Loading rules:
- a missing key falls back to its default (seed account, starter
  categories, empty transactions/budgets)
- an empty account or category array is reseeded the same way
- if ANY key is not valid JSON, the whole ledger is reset to the seed
  defaults so transactions never reference accounts that vanished with
  a corrupt sibling key
- a key holding valid JSON keeps every record that passes its schema;
  records that fail are skipped one by one and logged
- the loaded (or reseeded) state is written back immediately
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from pydantic import TypeAdapter, ValidationError

from finledger.ledger.defaults import default_categories
from finledger.ledger.state import LedgerState
from finledger.log import LedgerEventLogger
from finledger.models import Account, Budget, Category, Transaction
from finledger.services.storage import PersistenceStore


ACCOUNTS_KEY = "finances_accounts"
TRANSACTIONS_KEY = "finances_transactions"
CATEGORIES_KEY = "finances_categories"
BUDGETS_KEY = "finances_budgets"

_JSON = TypeAdapter(Any)

_ACCOUNTS = TypeAdapter(list[Account])
_TRANSACTIONS = TypeAdapter(list[Transaction])
_CATEGORIES = TypeAdapter(list[Category])
_BUDGETS = TypeAdapter(list[Budget])


class MalformedPersistedData(Exception):
    """Stored ledger data is not valid JSON. Never leaves this module."""

    def __init__(self, key: str, error: Exception):
        super().__init__(f"{key}: {error}")
        self.key = key
        self.error = error


@dataclass
class LedgerCollections:
    accounts: list[Account] = field(default_factory=list)
    categories: list[Category] = field(default_factory=list)
    transactions: list[Transaction] = field(default_factory=list)
    budgets: list[Budget] = field(default_factory=list)


class LedgerRepository:
    """Loads and saves ledger collections through a PersistenceStore."""

    def __init__(
        self,
        store: PersistenceStore,
        seed_account_factory: Callable[[], Account],
        event_logger: Optional[LedgerEventLogger] = None,
    ):
        self._store = store
        self._seed_account_factory = seed_account_factory
        self._events = event_logger or LedgerEventLogger()

    def _read(self, key: str, model_cls: type) -> Optional[list]:
        raw = self._store.get(key)
        if raw is None:
            return None
        try:
            data = _JSON.validate_json(raw)
        except ValidationError as e:
            raise MalformedPersistedData(key, e)

        if not isinstance(data, list):
            self._events.log_record_skipped(key, None, f"expected an array, got {type(data).__name__}")
            return []

        records = []
        for index, item in enumerate(data):
            try:
                records.append(model_cls.model_validate(item))
            except ValidationError as e:
                self._events.log_record_skipped(key, index, str(e))
        return records

    def _seed(self) -> LedgerCollections:
        return LedgerCollections(
            accounts=[self._seed_account_factory()],
            categories=default_categories(),
        )

    def read_collections(self) -> LedgerCollections:
        """
        Read all four collections, applying defaults.

        Raises:
            MalformedPersistedData: If any key is not valid JSON
        """
        accounts = self._read(ACCOUNTS_KEY, Account)
        transactions = self._read(TRANSACTIONS_KEY, Transaction)
        categories = self._read(CATEGORIES_KEY, Category)
        budgets = self._read(BUDGETS_KEY, Budget)

        seeded = []
        if not accounts:
            accounts = [self._seed_account_factory()]
            seeded.append(ACCOUNTS_KEY)
        if not categories:
            categories = default_categories()
            seeded.append(CATEGORIES_KEY)
        if seeded:
            self._events.log_seeded(seeded)

        return LedgerCollections(
            accounts=accounts,
            categories=categories,
            transactions=transactions or [],
            budgets=budgets or [],
        )

    def load(self, **state_options) -> LedgerState:
        """
        Build a LedgerState from storage and write it straight back.

        Unparseable data is recovered locally by reseeding; callers never
        see a parse error.
        """
        try:
            collections = self.read_collections()
        except MalformedPersistedData as e:
            self._events.log_malformed(e.key, str(e.error))
            collections = self._seed()

        state = LedgerState(
            seed_account_factory=self._seed_account_factory,
            accounts=collections.accounts,
            categories=collections.categories,
            transactions=collections.transactions,
            budgets=collections.budgets,
            event_logger=self._events,
            **state_options,
        )
        self.save(state)
        self._events.log_loaded({
            "accounts": len(collections.accounts),
            "categories": len(collections.categories),
            "transactions": len(collections.transactions),
            "budgets": len(collections.budgets),
        })
        return state

    def save(self, state: LedgerState) -> None:
        """Persist the full contents of all four collections."""
        self._store.set(ACCOUNTS_KEY, _ACCOUNTS.dump_json(state.accounts, by_alias=True).decode())
        self._store.set(
            TRANSACTIONS_KEY,
            _TRANSACTIONS.dump_json(state.transactions, by_alias=True).decode(),
        )
        self._store.set(CATEGORIES_KEY, _CATEGORIES.dump_json(state.categories, by_alias=True).decode())
        self._store.set(BUDGETS_KEY, _BUDGETS.dump_json(state.budgets, by_alias=True).decode())
