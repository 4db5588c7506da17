"""CLI entry point for pocketbook."""

import typer

from pocketbook.commands.admin import init_command, reset_command
from pocketbook.commands.budget import (
    budget_add_command,
    budget_delete_command,
    budget_list_command,
    budget_set_command,
)
from pocketbook.commands.category import (
    category_add_command,
    category_delete_command,
    category_list_command,
)
from pocketbook.commands.report import stats_command, summary_command
from pocketbook.commands.transactions import add_command, delete_command, list_command
from pocketbook.config import load_settings
from pocketbook.domain.models import EntryType
from pocketbook.logs import configure_logging

app = typer.Typer(
    name="pocketbook",
    help="Pocketbook - track income, expenses and monthly budgets",
    add_completion=False,
)

category_app = typer.Typer(help="Manage income and expense categories.")
budget_app = typer.Typer(help="Manage monthly budgets.")
app.add_typer(category_app, name="category")
app.add_typer(budget_app, name="budget")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log store activity to stderr"),
) -> None:
    """Pocketbook - track income, expenses and monthly budgets."""
    level = "INFO" if verbose else load_settings().log_level
    configure_logging(level)


@app.command(name="init")
def init(
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing config"),
) -> None:
    """Initialize pocketbook configuration and data directory."""
    init_command(force)


@app.command()
def add(
    amount: str = typer.Argument(..., help="Amount (positive number)"),
    category: str = typer.Argument(..., help="Category name"),
    income: bool = typer.Option(False, "--income", "-i", help="Record as income (default: expense)"),
    note: str = typer.Option(None, "--note", "-n", help="Note (default: category name)"),
    date: str = typer.Option(None, "--date", "-d", help="Date (default: now)"),
) -> None:
    """Record an income or expense transaction."""
    add_command(amount, category, income, note, date)


@app.command(name="list")
def list_transactions(
    limit: int = typer.Option(50, help="Maximum transactions to show"),
    all: bool = typer.Option(False, "--all", "-a", help="Show all your transactions"),
) -> None:
    """List your transactions grouped by day."""
    list_command(limit, all)


@app.command()
def delete(txn_id: str = typer.Argument(..., help="Transaction ID")) -> None:
    """Delete a transaction."""
    delete_command(txn_id)


@app.command()
def summary() -> None:
    """Show your balance and this month's budget alerts."""
    summary_command()


@app.command()
def stats(
    month: str = typer.Option(None, "--month", help="Specific month (YYYY-MM)"),
) -> None:
    """Show income and expense statistics for a month."""
    stats_command(month)


@app.command()
def reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Erase all data and restore the default categories."""
    reset_command(yes)


@category_app.command(name="list")
def category_list(
    type: EntryType = typer.Option(None, "--type", "-t", help="Only show 'income' or 'expense' categories"),
) -> None:
    """List categories."""
    category_list_command(type)


@category_app.command(name="add")
def category_add(
    name: str = typer.Argument(..., help="Category name"),
    income: bool = typer.Option(False, "--income", "-i", help="Create an income category (default: expense)"),
    icon: str = typer.Option(None, "--icon", help="Icon tag"),
) -> None:
    """Create a category."""
    category_add_command(name, income, icon)


@category_app.command(name="delete")
def category_delete(
    category_id: str = typer.Argument(..., help="Category ID"),
    force: bool = typer.Option(False, "--force", "-f", help="Delete even if transactions or budgets use it"),
) -> None:
    """Delete a custom category."""
    category_delete_command(category_id, force)


@budget_app.command(name="list")
def budget_list(
    month: str = typer.Option(None, "--month", help="Specific month (YYYY-MM)"),
) -> None:
    """Show your budgets and how much of each is used."""
    budget_list_command(month)


@budget_app.command(name="add")
def budget_add(
    category: str = typer.Argument(..., help="Expense category name"),
    amount: str = typer.Argument(..., help="Monthly amount"),
) -> None:
    """Set a monthly budget for a category."""
    budget_add_command(category, amount)


@budget_app.command(name="set")
def budget_set(
    budget_id: str = typer.Argument(..., help="Budget ID"),
    amount: str = typer.Argument(..., help="New monthly amount"),
) -> None:
    """Change a budget's amount."""
    budget_set_command(budget_id, amount)


@budget_app.command(name="delete")
def budget_delete(budget_id: str = typer.Argument(..., help="Budget ID")) -> None:
    """Delete a budget."""
    budget_delete_command(budget_id)


if __name__ == "__main__":
    app()
