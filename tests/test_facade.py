"""
Tests for the LedgerFacade command/query surface.
"""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from finledger.facade import create_ledger
from finledger.ledger.persistence import (
    ACCOUNTS_KEY,
    BUDGETS_KEY,
    CATEGORIES_KEY,
    TRANSACTIONS_KEY,
)
from finledger.models import (
    AccountUpdate,
    CategoryCreate,
    CategoryType,
    CategoryUpdate,
    TransactionType,
    TransactionUpdate,
)
from finledger.services.storage import InMemoryStore
from finledger.validation import LedgerValidationError
from tests.conftest import dt, money


ALL_KEYS = {ACCOUNTS_KEY, TRANSACTIONS_KEY, CATEGORIES_KEY, BUDGETS_KEY}


class RecordingStore(InMemoryStore):
    """InMemoryStore that remembers which keys were written."""

    def __init__(self):
        super().__init__()
        self.written: list[str] = []

    def set(self, key: str, value: str) -> None:
        self.written.append(key)
        super().set(key, value)


@pytest.fixture
def recording_store():
    return RecordingStore()


@pytest.fixture
def recorded(recording_store, settings, clock):
    ledger = create_ledger(store=recording_store, settings=settings, clock=clock)
    recording_store.written.clear()
    return ledger


def expense(ledger, **overrides):
    data = {
        "date": dt(2026, 3, 1),
        "description": "Lunch",
        "amount": money(12),
        "type": "expense",
        "category_id": "expense-food",
        "account_id": ledger.get_default_account().id,
    }
    data.update(overrides)
    return ledger.add_transaction(data)


class TestCopies:
    """Values handed out never alias the ledger's own records."""

    def test_mutating_returned_account(self, ledger):
        account = ledger.get_default_account()
        account.balance = money(999)
        account.name = "Hacked"
        fresh = ledger.get_account_by_id(account.id)
        assert fresh.balance == Decimal("0")
        assert fresh.name == "1st account"

    def test_mutating_returned_list(self, ledger):
        accounts = ledger.get_accounts()
        accounts.clear()
        assert len(ledger.get_accounts()) == 1

    def test_mutating_returned_transaction(self, ledger):
        transaction = expense(ledger)
        transaction.amount = money(1)
        assert ledger.get_transaction_by_id(transaction.id).amount == Decimal("12")

    def test_mutating_returned_category(self, ledger):
        category = ledger.get_category_by_id("expense-food")
        category.name = "Snacks"
        assert ledger.get_category_by_id("expense-food").name == "Food"


class TestValidationRejections:
    """Invalid commands raise and leave the ledger untouched."""

    def test_unknown_account(self, ledger):
        with pytest.raises(LedgerValidationError) as exc_info:
            expense(ledger, account_id="nope")
        assert exc_info.value.issues[0].field == "account_id"
        assert ledger.get_all_transactions() == []

    def test_unknown_destination(self, ledger):
        with pytest.raises(LedgerValidationError, match="Destination"):
            expense(ledger, type="transfer", to_account_id="nope")

    def test_unknown_category(self, ledger):
        with pytest.raises(LedgerValidationError, match="does not exist"):
            expense(ledger, category_id="expense-gone")

    def test_category_type_mismatch(self, ledger):
        with pytest.raises(LedgerValidationError) as exc_info:
            expense(ledger, category_id="income-salary")
        assert exc_info.value.issues[0].issue_type == "type_mismatch"
        assert ledger.get_default_account().balance == Decimal("0")

    def test_structural_errors_raise_pydantic(self, ledger):
        with pytest.raises(ValidationError):
            expense(ledger, amount=money(-5))

    def test_update_rejected_keeps_balance(self, ledger):
        transaction = expense(ledger)
        with pytest.raises(LedgerValidationError):
            ledger.update_transaction(transaction.id, TransactionUpdate(account_id="nope"))
        assert ledger.get_default_account().balance == Decimal("-12")
        assert ledger.get_transaction_by_id(transaction.id).account_id == transaction.account_id

    def test_update_type_without_matching_category(self, ledger):
        transaction = expense(ledger)
        with pytest.raises(LedgerValidationError):
            ledger.update_transaction(transaction.id, {"type": "income"})

    def test_category_type_change(self, ledger):
        with pytest.raises(LedgerValidationError, match="cannot change type"):
            ledger.update_category("expense-food", CategoryUpdate(type=CategoryType.INCOME))

    def test_same_type_in_patch_is_fine(self, ledger):
        updated = ledger.update_category(
            "expense-food", CategoryUpdate(type=CategoryType.EXPENSE, name="Groceries"),
        )
        assert updated.name == "Groceries"

    def test_fallback_category_protected(self, ledger):
        with pytest.raises(LedgerValidationError, match="cannot be deleted"):
            ledger.delete_category("expense-other")
        assert ledger.get_category_by_id("expense-other") is not None

    def test_budget_on_income_category(self, ledger):
        with pytest.raises(LedgerValidationError, match="expense categories"):
            ledger.set_budget("income-salary", 2, 2026, money(10))

    def test_budget_on_missing_category(self, ledger):
        with pytest.raises(LedgerValidationError):
            ledger.set_budget("expense-gone", 2, 2026, money(10))

    def test_unknown_patch_field(self, ledger):
        with pytest.raises(ValidationError):
            ledger.update_account(ledger.get_default_account().id, {"owner": "me"})


class TestPersistence:
    """Every successful command writes all four collections."""

    def test_add_transaction_persists_all(self, recorded, recording_store):
        expense(recorded)
        assert set(recording_store.written) == ALL_KEYS

    @pytest.mark.parametrize("command", [
        lambda ledger: ledger.add_account({"name": "Cash", "type": "cash"}),
        lambda ledger: ledger.update_account(ledger.get_default_account().id, AccountUpdate(color="#123456")),
        lambda ledger: ledger.add_category(CategoryCreate(name="Gym", type=CategoryType.EXPENSE)),
        lambda ledger: ledger.update_category("expense-food", CategoryUpdate(name="Groceries")),
        lambda ledger: ledger.delete_category("expense-food"),
        lambda ledger: ledger.set_budget("expense-food", 2, 2026, money(100)),
    ])
    def test_commands_persist_all(self, recorded, recording_store, command):
        command(recorded)
        assert set(recording_store.written) == ALL_KEYS

    def test_not_found_persists_nothing(self, recorded, recording_store):
        assert recorded.update_account("nope", AccountUpdate(name="x")) is None
        assert recorded.delete_account("nope") is False
        assert recorded.update_category("nope", CategoryUpdate(name="x")) is None
        assert recorded.delete_category("nope") is False
        assert recorded.update_transaction("nope", TransactionUpdate(amount=money(1))) is None
        assert recorded.delete_transaction("nope") is False
        assert recorded.delete_budget("expense-food", 2, 2026) is False
        assert recording_store.written == []

    def test_rejected_command_persists_nothing(self, recorded, recording_store):
        with pytest.raises(LedgerValidationError):
            expense(recorded, account_id="nope")
        assert recording_store.written == []

    def test_state_survives_reload(self, recorded, recording_store, settings, clock):
        transaction = expense(recorded)
        reloaded = create_ledger(store=recording_store, settings=settings, clock=clock)
        assert reloaded.get_transaction_by_id(transaction.id).model_dump() == transaction.model_dump()
        assert reloaded.get_default_account().balance == Decimal("-12")


class TestQueries:

    def test_newest_first_ties_keep_insertion_order(self, ledger):
        first = expense(ledger, date=dt(2026, 3, 5), description="first")
        second = expense(ledger, date=dt(2026, 3, 5), description="second")
        older = expense(ledger, date=dt(2026, 3, 1), description="older")
        newer = expense(ledger, date=dt(2026, 3, 9), description="newer")
        ordered = [t.id for t in ledger.get_all_transactions()]
        assert ordered == [newer.id, first.id, second.id, older.id]

    def test_by_account_includes_destination(self, ledger, second_account):
        a = ledger.get_default_account()
        transfer = expense(
            ledger, type="transfer", account_id=a.id, to_account_id=second_account.id,
        )
        expense(ledger)
        assert [t.id for t in ledger.get_transactions_by_account(second_account.id)] == [transfer.id]
        assert len(ledger.get_transactions_by_account(a.id)) == 2

    def test_by_type(self, ledger):
        expense(ledger)
        expense(ledger, type="income", category_id="income-salary")
        assert len(ledger.get_transactions_by_type(TransactionType.INCOME)) == 1
        assert len(ledger.get_transactions_by_type("expense")) == 1

    def test_by_month(self, ledger):
        expense(ledger, date=dt(2026, 3, 31, 23))
        expense(ledger, date=dt(2026, 4, 1, 0))
        assert len(ledger.get_transactions_by_month(2, 2026)) == 1
        assert len(ledger.get_transactions_by_month(3, 2026)) == 1

    def test_categories_by_type(self, ledger):
        income = ledger.get_categories_by_type("income")
        assert {c.id for c in income} == {"income-salary", "income-other"}
        assert len(ledger.get_categories_by_type(CategoryType.EXPENSE)) == 5

    def test_default_account_follows_flag(self, ledger):
        cash = ledger.add_account({"name": "Cash", "is_default": True})
        assert ledger.get_default_account().id == cash.id
        assert sum(1 for a in ledger.get_accounts() if a.is_default) == 1

    def test_default_account_after_deleting_default(self, ledger, second_account):
        ledger.delete_account(ledger.get_default_account().id)
        assert ledger.get_default_account().id == second_account.id


class TestCommands:

    def test_dict_and_camel_case_input(self, ledger):
        transaction = ledger.add_transaction({
            "date": "2026-03-02T08:00:00Z",
            "amount": "19.99",
            "type": "expense",
            "categoryId": "expense-transport",
            "accountId": ledger.get_default_account().id,
        })
        assert transaction.category_id == "expense-transport"
        assert transaction.amount == Decimal("19.99")

    def test_delete_account_removes_its_transactions(self, ledger, second_account):
        expense(ledger, account_id=second_account.id)
        kept = expense(ledger)
        assert ledger.delete_account(second_account.id) is True
        assert [t.id for t in ledger.get_all_transactions()] == [kept.id]

    def test_delete_category_reassigns_to_fallback(self, ledger):
        transaction = expense(ledger)
        ledger.set_budget("expense-food", 2, 2026, money(80))
        assert ledger.delete_category("expense-food") is True
        assert ledger.get_transaction_by_id(transaction.id).category_id == "expense-other"
        assert ledger.get_budgets() == []

    def test_set_budget_upsert(self, ledger):
        ledger.set_budget("expense-food", 2, 2026, money(100))
        ledger.set_budget("expense-food", 2, 2026, "120.50")
        budgets = ledger.get_budgets_by_month(2, 2026)
        assert len(budgets) == 1
        assert budgets[0].amount == Decimal("120.50")

    def test_set_budget_updates_category_default(self, ledger):
        ledger.set_budget("expense-food", 2, 2026, money(75), update_category_default=True)
        assert ledger.get_category_by_id("expense-food").monthly_budget == Decimal("75")

    def test_set_budget_leaves_category_default(self, ledger):
        ledger.set_budget("expense-food", 2, 2026, money(75))
        assert ledger.get_category_by_id("expense-food").monthly_budget is None

    def test_delete_budget(self, ledger):
        ledger.set_budget("expense-food", 2, 2026, money(75))
        assert ledger.delete_budget("expense-food", 2, 2026) is True
        assert ledger.get_budgets() == []

    def test_manual_balance_edit(self, ledger):
        account = ledger.get_default_account()
        updated = ledger.update_account(account.id, {"balance": "500"})
        assert updated.balance == Decimal("500")
        expense(ledger)
        assert ledger.get_default_account().balance == Decimal("488")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
