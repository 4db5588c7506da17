"""Summary and statistics commands."""

from datetime import datetime

from rich.table import Table

from pocketbook.commands.common import (
    TIER_STYLES,
    console,
    format_money,
    format_percentage,
    open_store,
    resolve_month,
)
from pocketbook.dates import month_label, month_of, short_month_label
from pocketbook.domain.models import EntryType
from pocketbook.domain.stats import (
    BreakdownSlice,
    BudgetUtilization,
    MonthlyTotals,
    UtilizationTier,
    budget_alerts,
    calculate_histogram_bar_length,
    category_breakdown,
    month_summary,
    monthly_expenses_by_category,
    monthly_trend,
    total_expense,
    total_income,
)

BAR_WIDTH = 30


def render_alerts(alerts: list[BudgetUtilization], currency: str) -> None:
    """Render budget alerts, most urgent tier first."""
    for tier in (UtilizationTier.CRITICAL, UtilizationTier.WARNING, UtilizationTier.NORMAL):
        style = TIER_STYLES[tier]
        for alert in (a for a in alerts if a.tier == tier):
            budget = alert.budget
            spent = format_money(alert.spent, currency)
            limit = format_money(budget.amount, currency)
            line = f"  [{style}]{budget.category:12}[/{style}] {spent} / {limit} ({format_percentage(alert.percentage)})"
            if alert.over_budget:
                line += f" [red]over by {format_money(abs(alert.remaining), currency)}[/red]"
            else:
                line += f" [dim]{format_money(alert.remaining, currency)} left[/dim]"
            console.print(line)


def summary_command() -> None:
    """Show overall balance, totals and this month's budget alerts."""
    store, settings = open_store()
    transactions = store.transactions
    currency = settings.currency

    income = total_income(transactions)
    expense = total_expense(transactions)

    console.print(f"\n[bold]Balance:[/bold] {format_money(income - expense, currency)}")
    console.print(f"  [green]Income:[/green]  {format_money(income, currency)}")
    console.print(f"  [red]Expense:[/red] {format_money(expense, currency)}")

    monthly_expenses = monthly_expenses_by_category(transactions, month_of(datetime.now()))
    alerts = budget_alerts(store.budgets, monthly_expenses)
    if alerts:
        console.print("\n[bold]Budgets this month[/bold]")
        render_alerts(alerts, currency)
    console.print()


def render_breakdown(title: str, slices: list[BreakdownSlice], currency: str) -> None:
    if not slices:
        console.print(f"[dim]No {title.lower()} this month[/dim]\n")
        return

    table = Table(title=title, title_justify="left")
    table.add_column("Category")
    table.add_column("Amount", justify="right")
    table.add_column("Share", justify="right")
    table.add_column("")

    max_amount = slices[0].amount
    for s in slices:
        bar = "█" * calculate_histogram_bar_length(s.amount, max_amount, BAR_WIDTH)
        table.add_row(
            f"[{s.color}]■[/{s.color}] {s.category}",
            format_money(s.amount, currency),
            f"{s.percentage:.0f}%",
            f"[{s.color}]{bar}[/{s.color}]",
        )
    console.print(table)


def render_trend(series: list[MonthlyTotals], currency: str) -> None:
    table = Table(title="Last 6 months", title_justify="left")
    table.add_column("Month", style="cyan")
    table.add_column("Income", justify="right", style="green")
    table.add_column("Expense", justify="right", style="red")
    table.add_column("")

    max_amount = max([max(p.income, p.expense) for p in series], default=0)
    for point in series:
        income_bar = "█" * calculate_histogram_bar_length(point.income, max_amount, BAR_WIDTH)
        expense_bar = "█" * calculate_histogram_bar_length(point.expense, max_amount, BAR_WIDTH)
        table.add_row(
            short_month_label(point.month),
            format_money(point.income, currency),
            format_money(point.expense, currency),
            f"[green]{income_bar}[/green]\n[red]{expense_bar}[/red]",
        )
    console.print(table)


def stats_command(month: str | None = None) -> None:
    """Show income and expense statistics for a month."""
    target = resolve_month(month)
    store, settings = open_store()
    transactions = store.transactions
    currency = settings.currency

    summary = month_summary(transactions, target)
    console.print(f"\n[bold]{month_label(target)}[/bold]")
    console.print(f"  [green]Income:[/green]  {format_money(summary.income, currency)}")
    console.print(f"  [red]Expense:[/red] {format_money(summary.expense, currency)}")
    console.print(f"  Balance: {format_money(summary.balance, currency)}\n")

    render_breakdown("Expenses", category_breakdown(transactions, target, EntryType.EXPENSE), currency)
    render_breakdown("Income", category_breakdown(transactions, target, EntryType.INCOME), currency)
    render_trend(monthly_trend(transactions, target), currency)
