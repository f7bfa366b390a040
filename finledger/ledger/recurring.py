"""
Recurring Transaction Materialization

Each activation creates, for the current calendar month, one concrete
transaction per recurring template that has no instance in that month
yet. Running it again in the same month creates nothing.

A template is any transaction flagged is_recurring. Templates are
grouped by (description, category_id, account_id); the most recently
dated template of each group is the one cloned, so edits made to last
month's instance carry forward.

The frequency tag is informational only. Every template is checked once
per calendar month, whatever its frequency.
"""

from datetime import datetime, timezone
from typing import Callable, Optional

from finledger.ledger.state import LedgerState
from finledger.log import LedgerEventLogger
from finledger.models import (
    Transaction,
    TransactionCreate,
    ensure_utc,
)


RecurringKey = tuple[str, str, str]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def recurring_key(transaction: Transaction) -> RecurringKey:
    return transaction.description, transaction.category_id, transaction.account_id


class RecurringMaterializer:
    """Creates this month's instances of recurring templates."""

    def __init__(
        self,
        clock: Callable[[], datetime] = utc_now,
        event_logger: Optional[LedgerEventLogger] = None,
    ):
        self._clock = clock
        self._events = event_logger or LedgerEventLogger()

    def _latest_templates(self, transactions: list[Transaction]) -> list[Transaction]:
        latest: dict[RecurringKey, Transaction] = {}
        for transaction in transactions:
            if not transaction.is_recurring:
                continue
            key = recurring_key(transaction)
            if key not in latest or transaction.date > latest[key].date:
                latest[key] = transaction
        return list(latest.values())

    def materialize(self, state: LedgerState) -> list[Transaction]:
        """
        Create the missing instances for the current month.

        New instances go through the normal add path, so their balance
        effect is posted like any other transaction.

        Returns:
            The newly created transactions (often empty)
        """
        now = ensure_utc(self._clock())
        month, year = now.month - 1, now.year
        instance_date = datetime(now.year, now.month, now.day, tzinfo=timezone.utc)

        transactions = state.transactions
        present = {
            recurring_key(t) for t in transactions if t.month_key == (year, month)
        }

        created = []
        for template in self._latest_templates(transactions):
            if recurring_key(template) in present:
                continue

            data = TransactionCreate.model_validate(
                {**template.model_dump(exclude={"id"}), "date": instance_date}
            )
            created.append(state.add_transaction(data))
            present.add(recurring_key(template))

        if created:
            self._events.log_recurring([t.id for t in created])
        return created
