"""Shared fixtures. All tests run against in-memory or tmp_path storage."""

from datetime import date

import pytest

from financeio.ledger import LedgerService
from financeio.models.ledger import LendingDirection
from financeio.services.storage import InMemoryLedgerStorage


@pytest.fixture
def storage():
    return InMemoryLedgerStorage()


@pytest.fixture
def ledger(storage):
    return LedgerService(storage)


@pytest.fixture
def seeded_ledger(ledger):
    ledger.seed_default_categories()
    return ledger


@pytest.fixture
def alice(ledger):
    return ledger.add_person("Alice")


@pytest.fixture
def alice_with_records(ledger, alice):
    """Alice lent 500 ("lunch"), then received 200."""
    lent = ledger.add_lending_transaction(
        alice.id, "500", LendingDirection.LENT,
        date=date(2026, 1, 6), note="lunch",
    )
    received = ledger.add_lending_transaction(
        alice.id, "200", LendingDirection.RECEIVED,
        date=date(2026, 1, 7),
    )
    return alice, lent, received
