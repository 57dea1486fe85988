"""Shared fixtures: an in-memory store and a ledger with a few accounts."""

import pytest

from ledgerly.db import LedgerRepository, Store
from ledgerly.models import AccountType

T0 = 1_700_000_000_000
DAY = 86_400_000


@pytest.fixture
def store():
    """A migrated in-memory store, closed after the test."""
    store = Store(":memory:")
    store.open()
    yield store
    store.close()


@pytest.fixture
def ledger(store):
    return LedgerRepository(store)


@pytest.fixture
def checking(ledger):
    return ledger.create_account("Checking", AccountType.INTERNAL)


@pytest.fixture
def savings(ledger):
    return ledger.create_account("Savings", AccountType.INTERNAL)


@pytest.fixture
def employer(ledger):
    return ledger.create_account("Employer", AccountType.EXTERNAL)


@pytest.fixture
def landlord(ledger):
    return ledger.create_account("Landlord", AccountType.EXTERNAL)
