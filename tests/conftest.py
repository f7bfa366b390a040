"""
Shared fixtures.

Test strategy:
1. Unit tests for individual components (models, balance posting, summaries)
2. Facade tests over an in-memory store
3. No filesystem access except through pytest's tmp_path
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from finledger.config import LedgerSettings
from finledger.facade import create_ledger
from finledger.ledger import LedgerState, default_categories, seed_account
from finledger.models import AccountCreate
from finledger.services.storage import InMemoryStore


# 15 March 2026, month index 2
NOW = datetime(2026, 3, 15, 10, 30, tzinfo=timezone.utc)


@pytest.fixture
def settings() -> LedgerSettings:
    return LedgerSettings(
        storage_path=None,
        default_currency="EUR",
        seed_account_name="1st account",
        budget_warning_threshold=90.0,
    )


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def ledger(store, settings, clock):
    return create_ledger(store=store, settings=settings, clock=clock)


@pytest.fixture
def second_account(ledger):
    """A second, non-default account named B."""
    return ledger.add_account(AccountCreate(name="B", type="savings"))


@pytest.fixture
def state(settings) -> LedgerState:
    """Ledger state with the seed account and starter categories."""
    return LedgerState(
        seed_account_factory=lambda: seed_account(settings),
        categories=default_categories(),
    )


def dt(year: int, month: int, day: int, hour: int = 12) -> datetime:
    """UTC datetime helper (month is 1-12 here, like datetime)."""
    return datetime(year, month, day, hour, tzinfo=timezone.utc)


def money(value) -> Decimal:
    return Decimal(str(value))
