"""
Summary Engine

Computes MonthlySummary views by replaying transaction history.

DESIGN DECISION: The starting balance of a month is reconstructed from
scratch out of every transaction dated before that month. It never reads
the cached Account.balance field. The two computations are kept
independent on purpose so they can be compared (see reconcile()).

Months are 0-11 and evaluated on UTC calendar dates.
"""

from collections import defaultdict
from decimal import Decimal
from typing import Iterable, Optional

from finledger.ledger.balance import posting_deltas
from finledger.models import (
    Account,
    Budget,
    BudgetProgress,
    Category,
    CategoryType,
    MonthlySummary,
    Transaction,
    TransactionType,
)


ZERO = Decimal("0")


def in_month(transaction: Transaction, month: int, year: int) -> bool:
    return transaction.month_key == (year, month)


def before_month(transaction: Transaction, month: int, year: int) -> bool:
    return transaction.month_key < (year, month)


class SummaryEngine:
    """
    Stateless aggregation over ledger collections.

    Every method takes the collections it needs, so the engine can be
    pointed at any snapshot without touching persisted state.
    """

    def month_transactions(
        self,
        transactions: Iterable[Transaction],
        month: int,
        year: int,
    ) -> list[Transaction]:
        """Transactions dated on any day of (month, year)."""
        return [t for t in transactions if in_month(t, month, year)]

    def replay_balance(
        self,
        account_id: str,
        transactions: Iterable[Transaction],
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> Decimal:
        """
        Balance of one account rebuilt from its transactions.

        With (month, year) given, only transactions strictly before that
        month are replayed; otherwise the whole history is.
        """
        balance = ZERO
        for transaction in transactions:
            if month is not None and not before_month(transaction, month, year):
                continue
            for posted_id, delta in posting_deltas(transaction):
                if posted_id == account_id:
                    balance += delta
        return balance

    def starting_balance(
        self,
        accounts: Iterable[Account],
        transactions: Iterable[Transaction],
        month: int,
        year: int,
    ) -> Decimal:
        """Sum over live accounts of their replayed balance before the month."""
        history = [t for t in transactions if before_month(t, month, year)]
        return sum(
            (self.replay_balance(account.id, history) for account in accounts),
            ZERO,
        )

    def category_totals(
        self,
        transactions: Iterable[Transaction],
        types: tuple[TransactionType, ...] = (TransactionType.INCOME, TransactionType.EXPENSE),
    ) -> dict[str, Decimal]:
        """Summed amounts per category id. Transfers never count."""
        totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
        for transaction in transactions:
            if transaction.type == TransactionType.TRANSFER or transaction.type not in types:
                continue
            totals[transaction.category_id] += transaction.amount
        return dict(totals)

    def _summarize(
        self,
        month: int,
        year: int,
        starting_balance: Decimal,
        month_transactions: list[Transaction],
    ) -> MonthlySummary:
        total_income = sum(
            (t.amount for t in month_transactions if t.type == TransactionType.INCOME),
            ZERO,
        )
        total_expenses = sum(
            (t.amount for t in month_transactions if t.type == TransactionType.EXPENSE),
            ZERO,
        )
        saved_amount = total_income - total_expenses

        return MonthlySummary(
            month=month,
            year=year,
            starting_balance=starting_balance,
            ending_balance=starting_balance + saved_amount,
            total_income=total_income,
            total_expenses=total_expenses,
            saved_amount=saved_amount,
            category_totals=self.category_totals(month_transactions),
        )

    def monthly_summary(
        self,
        accounts: Iterable[Account],
        transactions: Iterable[Transaction],
        month: int,
        year: int,
    ) -> MonthlySummary:
        """Summary across all accounts."""
        transactions = list(transactions)
        return self._summarize(
            month,
            year,
            self.starting_balance(accounts, transactions, month, year),
            self.month_transactions(transactions, month, year),
        )

    def account_summary(
        self,
        account_id: str,
        transactions: Iterable[Transaction],
        month: int,
        year: int,
    ) -> MonthlySummary:
        """Summary restricted to transactions where the account is source or destination."""
        scoped = [t for t in transactions if t.touches(account_id)]
        return self._summarize(
            month,
            year,
            self.replay_balance(account_id, scoped, month, year),
            self.month_transactions(scoped, month, year),
        )

    def budget_progress(
        self,
        categories: Iterable[Category],
        budgets: Iterable[Budget],
        summary: MonthlySummary,
        warning_threshold: float,
    ) -> list[BudgetProgress]:
        """
        Spending against budget for every expense category.

        The budget amount is the Budget row for the summary's month when
        one exists, otherwise the category's default monthly budget.
        """
        month_budgets = {
            b.category_id: b.amount
            for b in budgets
            if b.month == summary.month and b.year == summary.year
        }

        progress = []
        for category in categories:
            if category.type != CategoryType.EXPENSE:
                continue
            spent = summary.category_totals.get(category.id, ZERO)
            budget = month_budgets.get(category.id, category.monthly_budget or ZERO)
            percentage = min(100.0, float(spent / budget * 100)) if budget > 0 else 0.0
            progress.append(BudgetProgress(
                category_id=category.id,
                category_name=category.name,
                spent=spent,
                budget=budget,
                percentage=percentage,
                is_near_limit=percentage > warning_threshold,
            ))
        return progress

    def reconcile(
        self,
        accounts: Iterable[Account],
        transactions: Iterable[Transaction],
    ) -> dict[str, tuple[Decimal, Decimal]]:
        """
        Cached balance vs full-history replay for each account.

        Returns {account_id: (cached, replayed)}. A non-zero difference is
        the account's opening balance plus any manual balance edits.
        """
        transactions = list(transactions)
        return {
            account.id: (account.balance, self.replay_balance(account.id, transactions))
            for account in accounts
        }
