"""
Tests for eager balance maintenance.

The cached balances are checked against an independent replay of the
live transaction set after every step.
"""

import random
from decimal import Decimal

import pytest

from finledger.ledger import BalanceMaintainer, SummaryEngine, posting_deltas
from finledger.models import (
    Account,
    AccountCreate,
    Transaction,
    TransactionCreate,
    TransactionType,
    TransactionUpdate,
)
from tests.conftest import dt, money


def net_effect(transactions) -> Decimal:
    """Signed total of income/expense effects; transfers net to zero."""
    total = Decimal("0")
    for transaction in transactions:
        for _, delta in posting_deltas(transaction):
            total += delta
    return total


class TestPostingDeltas:

    def test_income(self, state):
        transaction = state.add_transaction(TransactionCreate(
            date=dt(2026, 3, 1), amount=money(100), type="income",
            category_id="income-salary", account_id="default-account",
        ))
        assert posting_deltas(transaction) == [("default-account", Decimal("100"))]

    def test_transfer_posts_both_sides(self, state):
        other = state.add_account(AccountCreate(name="B"))
        transaction = state.add_transaction(TransactionCreate(
            date=dt(2026, 3, 1), amount=money(20), type="transfer",
            account_id="default-account", to_account_id=other.id,
        ))
        assert posting_deltas(transaction) == [
            ("default-account", Decimal("-20")),
            (other.id, Decimal("20")),
        ]


class TestBalanceMaintainer:

    def test_scenario_income_expense_transfer(self, state):
        """Seed A at 0: +100 income, -40 expense, 20 transfer to B."""
        a = state.get_account("default-account")
        b = state.add_account(AccountCreate(name="B"))

        state.add_transaction(TransactionCreate(
            date=dt(2026, 3, 2), amount=money(100), type="income",
            category_id="income-salary", account_id=a.id,
        ))
        assert a.balance == Decimal("100")

        state.add_transaction(TransactionCreate(
            date=dt(2026, 3, 3), amount=money(40), type="expense",
            category_id="expense-food", account_id=a.id,
        ))
        assert a.balance == Decimal("60")

        state.add_transaction(TransactionCreate(
            date=dt(2026, 3, 4), amount=money(20), type="transfer",
            account_id=a.id, to_account_id=b.id,
        ))
        assert a.balance == Decimal("40")
        assert state.get_account(b.id).balance == Decimal("20")

    def test_update_reverts_old_snapshot(self, state):
        """Test that an update moves the effect between accounts and types."""
        a = state.get_account("default-account")
        b = state.add_account(AccountCreate(name="B"))
        transaction = state.add_transaction(TransactionCreate(
            date=dt(2026, 3, 2), amount=money(50), type="expense",
            category_id="expense-food", account_id=a.id,
        ))
        assert a.balance == Decimal("-50")

        state.update_transaction(transaction.id, TransactionUpdate(
            type=TransactionType.INCOME,
            category_id="income-salary",
            account_id=b.id,
            amount=money(70),
        ))
        assert a.balance == Decimal("0")
        assert state.get_account(b.id).balance == Decimal("70")

    def test_delete_reverts_effect(self, state):
        a = state.get_account("default-account")
        b = state.add_account(AccountCreate(name="B"))
        transfer = state.add_transaction(TransactionCreate(
            date=dt(2026, 3, 2), amount=money(15), type="transfer",
            account_id=a.id, to_account_id=b.id,
        ))
        assert state.delete_transaction(transfer.id) is True
        assert a.balance == Decimal("0")
        assert state.get_account(b.id).balance == Decimal("0")

    def test_rejected_patch_leaves_balances(self, state):
        """Test that an invalid patch fails before anything is reverted."""
        a = state.get_account("default-account")
        transaction = state.add_transaction(TransactionCreate(
            date=dt(2026, 3, 2), amount=money(30), type="income",
            category_id="income-salary", account_id=a.id,
        ))
        with pytest.raises(ValueError):
            state.update_transaction(transaction.id, TransactionUpdate(type=TransactionType.TRANSFER))
        assert a.balance == Decimal("30")
        assert state.get_transaction(transaction.id).type == TransactionType.INCOME

    def test_missing_destination_posts_source_only(self):
        """Test tolerance of dangling references in stored data."""
        accounts = {"a": Account(id="a", name="A")}
        maintainer = BalanceMaintainer(accounts.get)

        transfer = Transaction(
            id="t", date=dt(2026, 3, 1), amount=money(10), type="transfer",
            account_id="a", to_account_id="gone",
        )
        maintainer.apply(transfer)
        assert accounts["a"].balance == Decimal("-10")
        maintainer.revert(transfer)
        assert accounts["a"].balance == Decimal("0")


class TestBalanceInvariant:
    """Sum of balances equals the net of live transaction effects."""

    def test_random_operation_sequence(self, state):
        rng = random.Random(20260315)
        a = state.get_account("default-account")
        b = state.add_account(AccountCreate(name="B"))
        c = state.add_account(AccountCreate(name="C"))
        account_ids = [a.id, b.id, c.id]
        engine = SummaryEngine()

        for step in range(300):
            live = state.transactions
            roll = rng.random()
            amount = money(rng.randint(1, 50000)) / 100

            if roll < 0.5 or not live:
                kind = rng.choice(["income", "expense", "transfer"])
                source = rng.choice(account_ids)
                data = {
                    "date": dt(2026, rng.randint(1, 12), rng.randint(1, 28)),
                    "amount": amount,
                    "type": kind,
                    "account_id": source,
                }
                if kind == "transfer":
                    data["to_account_id"] = rng.choice([x for x in account_ids if x != source])
                else:
                    data["category_id"] = "income-salary" if kind == "income" else "expense-food"
                state.add_transaction(TransactionCreate(**data))
            elif roll < 0.8:
                target = rng.choice(live)
                patch = {"amount": amount}
                if target.type != TransactionType.TRANSFER and rng.random() < 0.5:
                    flipped = "income" if target.type == TransactionType.EXPENSE else "expense"
                    patch["type"] = flipped
                    patch["category_id"] = "income-salary" if flipped == "income" else "expense-food"
                state.update_transaction(target.id, TransactionUpdate(**patch))
            else:
                state.delete_transaction(rng.choice(live).id)

            total = sum((acc.balance for acc in state.accounts), Decimal("0"))
            assert total == net_effect(state.transactions), f"drift at step {step}"

        for account_id, (cached, replayed) in engine.reconcile(
            state.accounts, state.transactions
        ).items():
            assert cached == replayed, account_id


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
