"""Pure functions for ledger statistics and budget tracking.

This module contains the functional core for aggregate views:
- No I/O operations (no storage, no console, no files)
- No side effects
- Pure data transformations
- Easy to test

Everything is recomputed from the full collections on each call; nothing is
cached between calls.

Division policy:
- A budget of 0 with nothing spent is 0% used; with anything spent it is
  infinitely over (math.inf), which classifies as critical.
- A category's share of a zero total is 0%.
"""

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from pocketbook.dates import month_of, trailing_months
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

WARNING_THRESHOLD = 80.0
CRITICAL_THRESHOLD = 100.0

# Chart colors, reused cyclically by sorted position
PALETTE: tuple[str, ...] = (
    "#3b82f6",
    "#10b981",
    "#f59e0b",
    "#ef4444",
    "#8b5cf6",
    "#ec4899",
    "#14b8a6",
    "#f97316",
)

ZERO = Money(Decimal(0))
CENT = Decimal("0.01")


class UtilizationTier(str, Enum):
    """Budget health, used only for presentation styling."""

    NORMAL = "normal"
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass(frozen=True)
class BudgetUtilization:
    """Immutable spending status of one budget."""

    budget: Budget
    spent: Money
    remaining: Money  # Negative when over budget
    percentage: float
    tier: UtilizationTier

    @property
    def over_budget(self) -> bool:
        return self.remaining < 0


@dataclass(frozen=True)
class BudgetOverview:
    """Immutable totals across all budgets for a month."""

    total_budget: Money
    total_spent: Money
    total_remaining: Money


@dataclass(frozen=True)
class MonthSummary:
    """Immutable income/expense totals for one month."""

    month: Month
    income: Money
    expense: Money
    balance: Money


@dataclass(frozen=True)
class MonthlyTotals:
    """Immutable trend point: one month's income and expense."""

    month: Month
    income: Money
    expense: Money


@dataclass(frozen=True)
class BreakdownSlice:
    """Immutable share of one category within a month's income or expense."""

    category: CategoryName
    amount: Money
    percentage: float
    color: str


def _sum(amounts: Iterable[Money]) -> Money:
    return Money(sum(amounts, Decimal(0)))


def _round(amount: Money) -> Money:
    return Money(amount.quantize(CENT, rounding=ROUND_HALF_UP))


def total_for_type(transactions: Iterable[Transaction], entry_type: EntryType) -> Money:
    """Sum the amounts of all transactions of one type."""
    return _sum(t.amount for t in transactions if t.type == entry_type)


def total_income(transactions: Iterable[Transaction]) -> Money:
    return total_for_type(transactions, EntryType.INCOME)


def total_expense(transactions: Iterable[Transaction]) -> Money:
    return total_for_type(transactions, EntryType.EXPENSE)


def balance(transactions: Sequence[Transaction]) -> Money:
    """Income minus expense over all transactions."""
    return Money(total_income(transactions) - total_expense(transactions))


def transactions_in_month(transactions: Iterable[Transaction], month: Month) -> list[Transaction]:
    """Filter transactions to one calendar month, keeping collection order."""
    return [t for t in transactions if month_of(t.date) == month]


def sum_by_category(
    transactions: Iterable[Transaction], entry_type: EntryType
) -> dict[CategoryName, Money]:
    """Group transactions of one type by category name and sum them.

    Returns:
        Mapping in order of each category's first appearance.
    """
    totals: dict[CategoryName, Money] = {}
    for t in transactions:
        if t.type != entry_type:
            continue
        totals[t.category] = Money(totals.get(t.category, ZERO) + t.amount)
    return totals


def monthly_expenses_by_category(transactions: Iterable[Transaction], month: Month) -> dict[CategoryName, Money]:
    """Sum a month's expenses per category.

    Args:
        transactions: All transactions.
        month: Month to report (usually the current month).

    Returns:
        Dictionary mapping category names to amounts spent.
    """
    return sum_by_category(transactions_in_month(transactions, month), EntryType.EXPENSE)


def calculate_percentage(part: Money, whole: Money) -> float:
    """Calculate `part` as a percentage of `whole`.

    Returns:
        0.0 when both are zero, math.inf when only the whole is zero.
    """
    if whole <= 0:
        return 0.0 if part <= 0 else math.inf
    return float(part / whole * 100)


def classify_utilization(percentage: float) -> UtilizationTier:
    """Classify budget usage: critical at 100%+, warning from 80%, else normal."""
    if percentage >= CRITICAL_THRESHOLD:
        return UtilizationTier.CRITICAL
    if percentage >= WARNING_THRESHOLD:
        return UtilizationTier.WARNING
    return UtilizationTier.NORMAL


def budget_utilization(budget: Budget, monthly_expenses: dict[CategoryName, Money]) -> BudgetUtilization:
    """Compute how much of a budget has been used this month.

    Args:
        budget: Budget to evaluate.
        monthly_expenses: Output of monthly_expenses_by_category.

    Returns:
        BudgetUtilization with spent, remaining, percentage and tier.
    """
    spent = monthly_expenses.get(budget.category, ZERO)
    percentage = calculate_percentage(spent, budget.amount)
    return BudgetUtilization(
        budget=budget,
        spent=spent,
        remaining=Money(budget.amount - spent),
        percentage=percentage,
        tier=classify_utilization(percentage),
    )


def budget_utilizations(
    budgets: Iterable[Budget], monthly_expenses: dict[CategoryName, Money]
) -> list[BudgetUtilization]:
    return [budget_utilization(b, monthly_expenses) for b in budgets]


def budget_alerts(budgets: Iterable[Budget], monthly_expenses: dict[CategoryName, Money]) -> list[BudgetUtilization]:
    """Select monthly budgets worth surfacing on the home screen.

    A budget is surfaced once anything has been spent against it or it has
    reached the warning threshold.
    """
    monthly = (b for b in budgets if b.period == BudgetPeriod.MONTHLY)
    return [
        u
        for u in budget_utilizations(monthly, monthly_expenses)
        if u.percentage >= WARNING_THRESHOLD or u.spent > 0
    ]


def budget_overview(budgets: Iterable[Budget], monthly_expenses: dict[CategoryName, Money]) -> BudgetOverview:
    """Total budgeted, total spent this month and what is left.

    Spent covers every expense category of the month, budgeted or not.
    """
    total_budget = _sum(b.amount for b in budgets)
    total_spent = _sum(monthly_expenses.values())
    return BudgetOverview(
        total_budget=total_budget,
        total_spent=total_spent,
        total_remaining=Money(total_budget - total_spent),
    )


def available_budget_categories(categories: Iterable[Category], budgets: Iterable[Budget]) -> list[Category]:
    """Expense categories that do not have a budget yet."""
    budgeted = {b.category for b in budgets}
    return [c for c in categories if c.type == EntryType.EXPENSE and c.name not in budgeted]


def month_summary(transactions: Iterable[Transaction], month: Month) -> MonthSummary:
    in_month = transactions_in_month(transactions, month)
    income = total_income(in_month)
    expense = total_expense(in_month)
    return MonthSummary(month=month, income=income, expense=expense, balance=Money(income - expense))


def monthly_trend(transactions: Sequence[Transaction], month: Month, count: int = 6) -> list[MonthlyTotals]:
    """Income and expense for each of the `count` months ending at `month`.

    Args:
        transactions: All transactions.
        month: Last month of the series (inclusive).
        count: Number of months in the series.

    Returns:
        Trend points ordered oldest to newest, rounded to cents.
    """
    series = []
    for m in trailing_months(month, count):
        in_month = transactions_in_month(transactions, m)
        series.append(
            MonthlyTotals(
                month=m,
                income=_round(total_income(in_month)),
                expense=_round(total_expense(in_month)),
            )
        )
    return series


def category_breakdown(
    transactions: Iterable[Transaction], month: Month, entry_type: EntryType
) -> list[BreakdownSlice]:
    """Split a month's income or expense into per-category slices.

    Slices are sorted by amount, largest first. Equal amounts keep the order
    in which their categories first appeared. Colors follow sorted position.
    """
    totals = sum_by_category(transactions_in_month(transactions, month), entry_type)
    overall = _sum(totals.values())
    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return [
        BreakdownSlice(
            category=category,
            amount=_round(amount),
            percentage=calculate_percentage(amount, overall),
            color=PALETTE[index % len(PALETTE)],
        )
        for index, (category, amount) in enumerate(ranked)
    ]


def group_by_day(transactions: Iterable[Transaction]) -> dict[date, list[Transaction]]:
    """Group transactions by calendar day, keeping collection order."""
    groups: dict[date, list[Transaction]] = {}
    for t in transactions:
        groups.setdefault(t.date.date(), []).append(t)
    return groups


def calculate_histogram_bar_length(amount: Money, max_amount: Money, bar_width: int) -> int:
    """Calculate histogram bar length.

    Args:
        amount: Amount to display.
        max_amount: Maximum amount in dataset.
        bar_width: Maximum bar width in characters.

    Returns:
        Bar length in characters.
    """
    if max_amount <= 0:
        return 0
    return int(abs(amount) / max_amount * bar_width)
