"""
vaultstage safes command - list Safes on the vault.
"""

import asyncio

import typer
from rich.table import Table

from ...errors import VaultStageError
from ...mirrors import normalize_safe
from ..context import build_console, console, require_session


def safes_list_command() -> None:
    """
    List Safes visible to the session.

    Example:
        $ vaultstage safes list
    """
    console.print("\n[bold cyan]Safes[/bold cyan]\n")

    asyncio.run(_list_safes())


async def _list_safes() -> None:
    """Internal async function to list Safes."""
    staging_console = require_session(build_console())
    stage = staging_console.api_factory(staging_console.config, staging_console.session)
    try:
        safes = [normalize_safe(raw) for raw in await stage.safes.get_all()]
    except VaultStageError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1)
    finally:
        await stage.close()

    if not safes:
        console.print("[yellow]No safes found[/yellow]\n")
        return

    table = Table(title=f"Safes (showing {len(safes)})")
    table.add_column("Name", style="cyan")
    table.add_column("Managing CPM", style="white")
    table.add_column("Retention", style="green")
    table.add_column("Description", style="white")

    for safe in safes:
        retention = (
            f"{safe.retention_value} {safe.retention_mode.value}" if safe.retention_mode else "—"
        )
        table.add_row(safe.name, safe.managing_cpm or "—", retention, safe.description or "—")

    console.print(table)
    console.print()
