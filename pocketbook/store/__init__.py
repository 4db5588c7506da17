"""Store layer - provides persistence for the application.

This module re-exports the public store API for easy importing.
"""

from pocketbook.store.ledger import (
    BUDGETS_KEY,
    CATEGORIES_KEY,
    TRANSACTIONS_KEY,
    LedgerStore,
    new_id,
)
from pocketbook.store.storage import JsonStorage

__all__ = [
    # Storage
    "JsonStorage",
    # Ledger
    "BUDGETS_KEY",
    "CATEGORIES_KEY",
    "TRANSACTIONS_KEY",
    "LedgerStore",
    "new_id",
]
