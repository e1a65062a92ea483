"""
vaultstage accounts command - list or search Accounts.
"""

import asyncio
from typing import Optional

import typer
from rich.table import Table

from ...errors import VaultStageError
from ...mirrors import normalize_account
from ..context import build_console, console, require_session


def accounts_list_command(
    search: Optional[str] = typer.Option(
        None,
        "--search",
        "-s",
        help="Keyword search",
    ),
) -> None:
    """
    List Accounts, optionally filtered by a keyword search.

    Example:
        $ vaultstage accounts list
        $ vaultstage accounts list --search db-server
    """
    console.print("\n[bold cyan]Accounts[/bold cyan]\n")

    asyncio.run(_list_accounts(search))


async def _list_accounts(search: Optional[str]) -> None:
    """Internal async function to list Accounts."""
    staging_console = require_session(build_console())
    stage = staging_console.api_factory(staging_console.config, staging_console.session)
    try:
        raw_accounts = (
            await stage.accounts.search(search) if search else await stage.accounts.get_all()
        )
    except VaultStageError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1)
    finally:
        await stage.close()

    accounts = [normalize_account(raw) for raw in raw_accounts]
    if not accounts:
        console.print("[yellow]No accounts found[/yellow]\n")
        return

    table = Table(title=f"Accounts (showing {len(accounts)})")
    table.add_column("ID", style="cyan")
    table.add_column("User", style="white")
    table.add_column("Address", style="white")
    table.add_column("Platform", style="magenta")
    table.add_column("Safe", style="green")
    table.add_column("Managed", style="blue")

    for account in accounts:
        table.add_row(
            account.id,
            account.user_name or "—",
            account.address or "—",
            account.platform_id or "—",
            account.safe_name or "—",
            "✓" if account.automatic_management_enabled else "—",
        )

    console.print(table)
    console.print()
