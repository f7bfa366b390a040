"""
Balance Maintenance

Account balances are maintained eagerly: the moment a transaction is
committed, edited or removed, its effect is applied to (or reverted
from) the accounts it touches.

Signs:
- income:   source += amount
- expense:  source -= amount
- transfer: source -= amount, destination += amount

Reverting is the exact additive inverse of applying, computed from the
transaction snapshot that was originally applied.
"""

from decimal import Decimal
from typing import Callable, Optional

from finledger.log import LedgerEventLogger
from finledger.models import Account, Transaction, TransactionType


def posting_deltas(transaction: Transaction) -> list[tuple[str, Decimal]]:
    """
    Balance deltas a transaction posts, as (account_id, delta) pairs.

    This is the single definition of transaction signs; balance
    maintenance and historical replay both use it.
    """
    amount = transaction.amount
    if transaction.type == TransactionType.INCOME:
        return [(transaction.account_id, amount)]
    if transaction.type == TransactionType.EXPENSE:
        return [(transaction.account_id, -amount)]
    deltas = [(transaction.account_id, -amount)]
    if transaction.to_account_id:
        deltas.append((transaction.to_account_id, amount))
    return deltas


class BalanceMaintainer:
    """
    Applies and reverts transaction effects on live accounts.

    Accounts are resolved through a lookup callable owned by the ledger
    state, so the maintainer never holds its own references.
    """

    def __init__(
        self,
        lookup: Callable[[str], Optional[Account]],
        event_logger: Optional[LedgerEventLogger] = None,
    ):
        self._lookup = lookup
        self._events = event_logger or LedgerEventLogger()

    def apply(self, transaction: Transaction) -> None:
        """Post a transaction's effect."""
        self._post(transaction, Decimal(1))

    def revert(self, transaction: Transaction, missing_ok: bool = False) -> None:
        """
        Remove a previously applied transaction's effect.

        Args:
            transaction: The snapshot that was applied
            missing_ok: Skip absent accounts silently (used while an
                        account is being deleted)
        """
        self._post(transaction, Decimal(-1), missing_ok=missing_ok)

    def replace(self, old: Transaction, new: Transaction) -> None:
        """Revert `old` and apply `new` as one step."""
        self.revert(old)
        self.apply(new)

    def _post(self, transaction: Transaction, sign: Decimal, missing_ok: bool = False) -> None:
        for account_id, delta in posting_deltas(transaction):
            account = self._lookup(account_id)
            if account is None:
                # Dangling reference in stored data: the other side still posts.
                if not missing_ok:
                    self._events.warning(
                        "posting_skipped_missing_account",
                        transaction_id=transaction.id,
                        account_id=account_id,
                    )
                continue
            account.balance += delta * sign
