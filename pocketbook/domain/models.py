"""Domain type definitions for pocketbook.

These types provide semantic clarity and help with type checking:
- Money: Amount in major currency units (Decimal, unscaled)
- Month: Month in YYYY-MM format
- CategoryName: Name of a transaction/budget category
- EntryType: Whether a transaction or category is income or expense
- BudgetPeriod: Period a budget ceiling applies to

Transaction, Category and Budget are immutable records. Each converts to and
from the plain dict ("record") layout kept in storage.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, NewType

# Amounts are Decimal to avoid floating point drift when summing
Money = NewType("Money", Decimal)

# Month is always in YYYY-MM format (e.g., "2025-01")
Month = NewType("Month", str)

# Category name, referenced by transactions and budgets (not a foreign key)
CategoryName = NewType("CategoryName", str)


class EntryType(str, Enum):
    """Direction of money flow."""

    INCOME = "income"
    EXPENSE = "expense"


class BudgetPeriod(str, Enum):
    """Period a budget applies to. Only monthly budgets are tracked."""

    MONTHLY = "monthly"
    YEARLY = "yearly"


def to_money(value: Any) -> Money:
    """Convert a stored or user-supplied number to Money.

    Floats go through their shortest repr so 12.34 stays 12.34.
    """
    if isinstance(value, bool):
        raise TypeError("Amount must be a number")
    if isinstance(value, Decimal):
        return Money(value)
    if isinstance(value, (int, float, str)):
        return Money(Decimal(str(value)))
    raise TypeError(f"Amount must be a number, got {type(value).__name__}")


@dataclass(frozen=True)
class Transaction:
    """Immutable income or expense event."""

    id: str
    type: EntryType
    amount: Money
    category: CategoryName
    note: str
    date: datetime

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "amount": self.amount,
            "category": self.category,
            "note": self.note,
            "date": self.date,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Transaction":
        date = record["date"]
        if not isinstance(date, datetime):
            raise TypeError(f"Transaction {record.get('id')} has no valid date")
        return cls(
            id=str(record["id"]),
            type=EntryType(record["type"]),
            amount=to_money(record["amount"]),
            category=CategoryName(record["category"]),
            note=record.get("note") or record["category"],
            date=date,
        )


@dataclass(frozen=True)
class Category:
    """Immutable category label. Default categories cannot be deleted."""

    id: str
    name: CategoryName
    type: EntryType
    icon: str | None = None
    is_default: bool = False

    def to_record(self) -> dict[str, Any]:
        record: dict[str, Any] = {"id": self.id, "name": self.name, "type": self.type.value}
        if self.icon is not None:
            record["icon"] = self.icon
        record["isDefault"] = self.is_default
        return record

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Category":
        return cls(
            id=str(record["id"]),
            name=CategoryName(record["name"]),
            type=EntryType(record["type"]),
            icon=record.get("icon"),
            is_default=bool(record.get("isDefault", False)),
        )


@dataclass(frozen=True)
class Budget:
    """Immutable spending ceiling for one category."""

    id: str
    category: CategoryName
    amount: Money
    period: BudgetPeriod = BudgetPeriod.MONTHLY

    def with_amount(self, amount: Money) -> "Budget":
        return replace(self, amount=amount)

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "category": self.category,
            "amount": self.amount,
            "period": self.period.value,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Budget":
        return cls(
            id=str(record["id"]),
            category=CategoryName(record["category"]),
            amount=to_money(record["amount"]),
            period=BudgetPeriod(record.get("period", BudgetPeriod.MONTHLY.value)),
        )


DEFAULT_EXPENSE_CATEGORIES: tuple[Category, ...] = (
    Category(id="1", name=CategoryName("餐饮"), type=EntryType.EXPENSE, is_default=True),
    Category(id="3", name=CategoryName("购物"), type=EntryType.EXPENSE, is_default=True),
    Category(id="4", name=CategoryName("居住"), type=EntryType.EXPENSE, is_default=True),
    Category(id="5", name=CategoryName("娱乐"), type=EntryType.EXPENSE, is_default=True),
    Category(id="6", name=CategoryName("医疗"), type=EntryType.EXPENSE, is_default=True),
    Category(id="8", name=CategoryName("其他"), type=EntryType.EXPENSE, is_default=True),
)

DEFAULT_INCOME_CATEGORIES: tuple[Category, ...] = (
    Category(id="9", name=CategoryName("工资"), type=EntryType.INCOME, is_default=True),
    Category(id="14", name=CategoryName("其他"), type=EntryType.INCOME, is_default=True),
)


def default_categories() -> list[Category]:
    """Seed categories used on first run and after a reset."""
    return [*DEFAULT_EXPENSE_CATEGORIES, *DEFAULT_INCOME_CATEGORIES]
