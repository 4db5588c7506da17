"""Helpers shared by the command modules."""

import sys
from datetime import datetime
from decimal import Decimal

from rich.console import Console

from pocketbook.config import Settings, load_settings
from pocketbook.dates import month_of, parse_month
from pocketbook.domain.models import EntryType, Month
from pocketbook.domain.stats import UtilizationTier
from pocketbook.store.ledger import LedgerStore
from pocketbook.store.storage import JsonStorage

console = Console()

TIER_STYLES = {
    UtilizationTier.CRITICAL: "red",
    UtilizationTier.WARNING: "yellow",
    UtilizationTier.NORMAL: "green",
}


def open_store(settings: Settings | None = None) -> tuple[LedgerStore, Settings]:
    """Load settings and the ledger they point at.

    Returns:
        Tuple of (initialized store, settings).
    """
    if settings is None:
        settings = load_settings()
    store = LedgerStore(JsonStorage(settings.data_dir), autosave=settings.autosave)
    return store.init(), settings


def fail(message: str) -> None:
    """Print an error and exit with status 1."""
    console.print(f"[red]{message}[/red]", style="bold")
    sys.exit(1)


def resolve_month(month: str | None) -> Month:
    """Validate a YYYY-MM option, defaulting to the current month."""
    if not month:
        return month_of(datetime.now())
    try:
        year, month_int = parse_month(month)
    except ValueError:
        fail(f"Invalid month '{month}' (expected YYYY-MM)")
    return Month(f"{year:04d}-{month_int:02d}")


def format_money(amount: Decimal, currency: str) -> str:
    if amount < 0:
        return f"-{currency}{abs(amount):,.2f}"
    return f"{currency}{amount:,.2f}"


def format_signed(amount: Decimal, entry_type: EntryType, currency: str) -> str:
    """Colored +/- amount for transaction listings."""
    if entry_type == EntryType.INCOME:
        return f"[green]+{currency}{amount:,.2f}[/green]"
    return f"[red]-{currency}{amount:,.2f}[/red]"


def format_percentage(percentage: float) -> str:
    if percentage == float("inf"):
        return "∞%"
    return f"{percentage:.1f}%"
