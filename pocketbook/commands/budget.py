"""Budget commands for managing monthly category budgets."""

from rich.table import Table

from pocketbook.commands.common import (
    TIER_STYLES,
    console,
    fail,
    format_money,
    format_percentage,
    open_store,
    resolve_month,
)
from pocketbook.dates import month_label
from pocketbook.domain.stats import (
    available_budget_categories,
    budget_overview,
    budget_utilizations,
    monthly_expenses_by_category,
)
from pocketbook.domain.validation import parse_amount
from pocketbook.errors import PocketbookError


def budget_list_command(month: str | None = None) -> None:
    """Show budget totals and per-category usage for a month."""
    target = resolve_month(month)
    store, settings = open_store()
    currency = settings.currency

    monthly_expenses = monthly_expenses_by_category(store.transactions, target)
    overview = budget_overview(store.budgets, monthly_expenses)

    console.print(f"\n[bold]Budgets for {month_label(target)}[/bold]")
    console.print(f"  Budgeted:  {format_money(overview.total_budget, currency)}")
    console.print(f"  Spent:     {format_money(overview.total_spent, currency)}")
    remaining_style = "green" if overview.total_remaining >= 0 else "red"
    console.print(
        f"  Remaining: [{remaining_style}]{format_money(overview.total_remaining, currency)}[/{remaining_style}]\n"
    )

    if not store.budgets:
        console.print("[yellow]No budgets set[/yellow]")
        console.print("[dim]Use 'pocketbook budget add CATEGORY AMOUNT' to create one[/dim]")
        return

    table = Table()
    table.add_column("ID", style="dim")
    table.add_column("Category", style="magenta")
    table.add_column("Budget", justify="right")
    table.add_column("Spent", justify="right")
    table.add_column("Remaining", justify="right")
    table.add_column("Used", justify="right")

    for u in budget_utilizations(store.budgets, monthly_expenses):
        style = TIER_STYLES[u.tier]
        remaining = format_money(abs(u.remaining), currency)
        table.add_row(
            u.budget.id,
            u.budget.category,
            f"{format_money(u.budget.amount, currency)} / {u.budget.period.value}",
            format_money(u.spent, currency),
            f"[red]over {remaining}[/red]" if u.over_budget else remaining,
            f"[{style}]{format_percentage(u.percentage)}[/{style}]",
        )

    console.print(table)


def budget_add_command(category: str, amount: str) -> None:
    """Create a monthly budget for an expense category without one."""
    money = parse_amount(amount)
    if money is None:
        fail(f"Invalid amount '{amount}' (must be a positive number)")

    try:
        store, settings = open_store()
        available = {c.name for c in available_budget_categories(store.categories, store.budgets)}
        if category.strip() not in available:
            fail(f"'{category}' is not an expense category without a budget")

        budget = store.add_budget(category, money)
        store.flush()
    except (PocketbookError, OSError) as e:
        fail(f"Error: {e}")

    console.print(
        f"[green]✓[/green] Budget set: {budget.category} {format_money(budget.amount, settings.currency)} / month"
        f" [dim]({budget.id})[/dim]"
    )


def budget_set_command(budget_id: str, amount: str) -> None:
    """Change the amount of an existing budget."""
    money = parse_amount(amount)
    if money is None:
        fail(f"Invalid amount '{amount}' (must be a positive number)")

    try:
        store, settings = open_store()
        budget = store.update_budget(budget_id, money)
        store.flush()
    except (PocketbookError, OSError) as e:
        fail(f"Error: {e}")

    if budget is None:
        fail(f"Budget {budget_id} not found")
    console.print(f"[green]✓[/green] {budget.category} now budgeted: {format_money(budget.amount, settings.currency)}")


def budget_delete_command(budget_id: str) -> None:
    """Delete a budget."""
    try:
        store, _ = open_store()
        removed = store.delete_budget(budget_id)
        store.flush()
    except OSError as e:
        fail(f"Error: {e}")

    if not removed:
        fail(f"Budget {budget_id} not found")
    console.print(f"[green]✓[/green] Deleted budget {budget_id}")
