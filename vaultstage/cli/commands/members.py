"""
vaultstage members command - list the members of a Safe.
"""

import asyncio

import typer
from rich.table import Table

from ...errors import VaultStageError
from ...mirrors import normalize_member
from ..context import build_console, console, require_session


def members_list_command(
    safe_name: str = typer.Argument(..., help="Safe name"),
) -> None:
    """
    List the members of a Safe with their detected role.

    Example:
        $ vaultstage members list Finance-01
    """
    console.print(f"\n[bold cyan]Members of {safe_name}[/bold cyan]\n")

    asyncio.run(_list_members(safe_name))


async def _list_members(safe_name: str) -> None:
    """Internal async function to list members."""
    staging_console = require_session(build_console())
    stage = staging_console.api_factory(staging_console.config, staging_console.session)
    try:
        members = [
            normalize_member(raw, safe_name=safe_name)
            for raw in await stage.members.get_by_safe(safe_name)
        ]
    except VaultStageError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1)
    finally:
        await stage.close()

    if not members:
        console.print("[yellow]No members found[/yellow]\n")
        return

    table = Table(title=f"Members (showing {len(members)})")
    table.add_column("Member", style="cyan")
    table.add_column("Domain", style="white")
    table.add_column("Role", style="green")

    for member in members:
        table.add_row(member.member_name, member.domain, member.role_label)

    console.print(table)
    console.print()
