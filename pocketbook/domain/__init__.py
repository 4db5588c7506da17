"""Domain models and types for pocketbook.

This package contains the functional core:
- Pure functions with no side effects
- No I/O operations
- Easy to test
- Business logic separated from infrastructure
"""

from pocketbook.domain.models import (
    Budget,
    BudgetPeriod,
    Category,
    CategoryName,
    EntryType,
    Money,
    Month,
    Transaction,
)

__all__ = [
    "Budget",
    "BudgetPeriod",
    "Category",
    "CategoryName",
    "EntryType",
    "Money",
    "Month",
    "Transaction",
]
