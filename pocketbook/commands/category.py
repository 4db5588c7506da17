"""Category management commands."""

from rich.table import Table

from pocketbook.commands.common import console, fail, open_store
from pocketbook.domain.models import EntryType
from pocketbook.errors import CategoryInUseError, PocketbookError


def category_list_command(entry_type: EntryType | None = None) -> None:
    """List categories, optionally of one type."""
    store, _ = open_store()
    categories = [c for c in store.categories if entry_type is None or c.type == entry_type]

    if not categories:
        console.print("[yellow]No categories found[/yellow]")
        return

    table = Table(title="Categories")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="magenta")
    table.add_column("Type")
    table.add_column("Icon", style="dim")
    table.add_column("Default", justify="center")

    for c in categories:
        type_display = "[green]income[/green]" if c.type == EntryType.INCOME else "[red]expense[/red]"
        table.add_row(c.id, c.name, type_display, c.icon or "-", "✓" if c.is_default else "")

    console.print(table)


def category_add_command(name: str, income: bool = False, icon: str | None = None) -> None:
    """Create a user category."""
    entry_type = EntryType.INCOME if income else EntryType.EXPENSE
    try:
        store, _ = open_store()
        category = store.add_category(name, entry_type, icon)
        store.flush()
    except (PocketbookError, OSError) as e:
        fail(f"Error: {e}")

    console.print(f"[green]✓[/green] Created {entry_type.value} category: {category.name} [dim]({category.id})[/dim]")


def category_delete_command(category_id: str, force: bool = False) -> None:
    """Delete a user category."""
    try:
        store, _ = open_store()
        removed = store.delete_category(category_id, force=force)
        store.flush()
    except CategoryInUseError as e:
        console.print(f"[red]{e}[/red]")
        fail("Use --force to delete it anyway (existing references keep the name)")
    except (PocketbookError, OSError) as e:
        fail(f"Error: {e}")

    if not removed:
        fail(f"Category {category_id} not found")
    console.print(f"[green]✓[/green] Deleted category {category_id}")
