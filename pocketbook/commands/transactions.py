"""Transaction commands (add, list, delete)."""

from datetime import date, datetime

import pandas as pd
from rich.table import Table

from pocketbook.commands.common import console, fail, format_signed, open_store
from pocketbook.domain.models import EntryType
from pocketbook.domain.stats import group_by_day
from pocketbook.domain.validation import parse_amount
from pocketbook.errors import PocketbookError


def parse_date(value: str) -> datetime:
    """Parse a user-entered date leniently (YYYY-MM-DD, DD/MM/YYYY, ...).

    ISO 8601 input is read as written; anything else is read day first.

    Raises:
        ValueError: If the date cannot be understood.
    """
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        pass

    parsed = pd.to_datetime(value, dayfirst=True)
    if pd.isna(parsed):
        raise ValueError(f"Unrecognized date: {value}")
    return parsed.to_pydatetime()


def day_label(day: date, today: date) -> str:
    if day == today:
        return "Today"
    return day.strftime("%Y-%m-%d")


def add_command(
    amount: str,
    category: str,
    income: bool = False,
    note: str | None = None,
    when: str | None = None,
) -> None:
    """Record a transaction.

    Args:
        amount: Positive amount as entered.
        category: Category name.
        income: Record as income instead of expense.
        note: Optional note. Defaults to the category name.
        when: Optional date. Defaults to now.
    """
    money = parse_amount(amount)
    if money is None:
        fail(f"Invalid amount '{amount}' (must be a positive number)")

    if not category.strip():
        fail("Category must not be empty")

    txn_date = None
    if when:
        try:
            txn_date = parse_date(when)
        except (ValueError, TypeError) as e:
            console.print(f"[red]Invalid date format: {e}[/red]")
            console.print("[dim]Accepted formats: YYYY-MM-DD, DD/MM/YYYY, DD-MM-YYYY, etc.[/dim]")
            fail("Transaction not recorded")

    entry_type = EntryType.INCOME if income else EntryType.EXPENSE

    try:
        store, settings = open_store()

        known = {c.name for c in store.categories if c.type == entry_type}
        if category.strip() not in known:
            console.print(f"[yellow]Note: '{category.strip()}' is not a known {entry_type.value} category[/yellow]")

        txn = store.add_transaction(entry_type, money, category, note, txn_date)
        store.flush()
    except (PocketbookError, OSError) as e:
        fail(f"Error: {e}")

    console.print("[green]✓[/green] Transaction added:")
    console.print(f"  ID: {txn.id}")
    console.print(f"  Date: {txn.date:%Y-%m-%d %H:%M}")
    console.print(f"  Category: {txn.category}")
    console.print(f"  Note: {txn.note}")
    console.print(f"  Amount: {format_signed(txn.amount, txn.type, settings.currency)}")


def list_command(limit: int = 50, all: bool = False) -> None:
    """List transactions grouped by day, newest first."""
    store, settings = open_store()
    transactions = store.transactions if all else store.transactions[:limit]

    if not transactions:
        console.print("[yellow]No transactions found[/yellow]")
        return

    today = datetime.now().date()
    for day, items in group_by_day(transactions).items():
        table = Table(title=day_label(day, today), title_justify="left", show_header=False)
        table.add_column("Time", style="cyan")
        table.add_column("Category", style="magenta")
        table.add_column("Note", style="white")
        table.add_column("Amount", justify="right")
        table.add_column("ID", style="dim")

        for txn in items:
            table.add_row(
                txn.date.strftime("%H:%M"),
                txn.category,
                txn.note,
                format_signed(txn.amount, txn.type, settings.currency),
                txn.id,
            )
        console.print(table)

    shown = len(transactions)
    total = len(store.transactions)
    if shown < total:
        console.print(f"[dim]Showing {shown} of {total} transactions (use --all to see everything)[/dim]")


def delete_command(txn_id: str) -> None:
    """Delete a transaction by id."""
    try:
        store, _ = open_store()
        removed = store.delete_transaction(txn_id)
        store.flush()
    except OSError as e:
        fail(f"Error: {e}")

    if not removed:
        fail(f"Transaction {txn_id} not found")
    console.print(f"[green]✓[/green] Deleted transaction {txn_id}")
