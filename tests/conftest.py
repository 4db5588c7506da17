"""Shared fixtures for pocketbook tests."""

from collections.abc import Iterator
from datetime import datetime
from decimal import Decimal
from pathlib import Path

import pytest
import structlog

from pocketbook.domain.models import CategoryName, EntryType, Money, Transaction
from pocketbook.store.ledger import LedgerStore
from pocketbook.store.storage import JsonStorage


@pytest.fixture(autouse=True)
def reset_structlog() -> Iterator[None]:
    """Undo any logging configuration a test (or the CLI) applied."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def storage(tmp_path: Path) -> JsonStorage:
    return JsonStorage(tmp_path / "data")


@pytest.fixture
def store(storage: JsonStorage) -> LedgerStore:
    return LedgerStore(storage, clock=lambda: datetime(2025, 3, 15, 12, 0)).init()


def make_txn(
    amount: str,
    category: str = "餐饮",
    entry_type: EntryType = EntryType.EXPENSE,
    when: datetime = datetime(2025, 3, 10, 9, 30),
    txn_id: str = "t",
) -> Transaction:
    """Build a Transaction for pure-function tests."""
    return Transaction(
        id=txn_id,
        type=entry_type,
        amount=Money(Decimal(amount)),
        category=CategoryName(category),
        note=category,
        date=when,
    )


@pytest.fixture
def txn():
    """Factory fixture wrapping make_txn."""
    return make_txn
