"""Admin commands for initialization and resetting the ledger."""

import sys

import typer

from pocketbook.commands.common import console, fail, open_store
from pocketbook.config import create_default_config, get_config_path, load_settings


def init_command(force: bool = False) -> None:
    """Create the default config file and data directory."""
    config_path = get_config_path()

    if config_path.exists() and not force:
        console.print("[red]Initialization failed:[/red]", style="bold")
        console.print(f"  Config already exists: {config_path}")
        console.print("\n[yellow]Use 'pocketbook init --force' to overwrite[/yellow]")
        sys.exit(1)

    try:
        console.print(f"[cyan]Creating config file at {config_path}...[/cyan]")
        create_default_config(config_path)
        console.print("[green]✓[/green] Config file created (permissions: 600)")

        settings = load_settings(config_path)
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        console.print("[green]✓[/green] Data directory ready")
    except OSError as e:
        fail(f"Filesystem error: {e}")

    console.print("\n[green]Initialization complete![/green]", style="bold")
    console.print(f"[dim]Config: {config_path}[/dim]")
    console.print(f"[dim]Data: {settings.data_dir}[/dim]")


def reset_command(yes: bool = False) -> None:
    """Erase every transaction, budget and custom category."""
    if not yes:
        confirmed = typer.confirm(
            "Reset all data? This deletes every record and restores the default categories.",
            default=False,
        )
        if not confirmed:
            console.print("[dim]Reset cancelled[/dim]")
            return

    try:
        store, _ = open_store()
        store.reset_all()
        store.flush()
    except OSError as e:
        fail(f"Error: {e}")

    console.print("[green]✓[/green] All data reset to defaults")
