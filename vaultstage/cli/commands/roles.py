"""
vaultstage roles command - permission templates and role detection.
"""

import json

import typer
from rich.table import Table

from ...rbac.permissions import (
    PERMISSION_KEYS,
    PERMISSION_TEMPLATES,
    detect_role,
    normalize_permissions,
)
from ..context import console


def roles_templates_command() -> None:
    """
    Show the 22 Safe permissions granted by each template.

    Example:
        $ vaultstage roles templates
    """
    table = Table(title="Permission Templates")
    table.add_column("Permission", style="cyan")
    for name in PERMISSION_TEMPLATES:
        table.add_column(name, style="green", justify="center")

    for key in PERMISSION_KEYS:
        table.add_row(
            key,
            *("✓" if template[key] else "—" for template in PERMISSION_TEMPLATES.values()),
        )

    console.print(table)
    console.print()


def roles_detect_command(
    permissions: str = typer.Argument(
        ...,
        help='Permissions JSON object (e.g., \'{"ListAccounts": true}\')',
    ),
) -> None:
    """
    Detect the role label of a permission set.

    Missing permissions count as not granted.

    Example:
        $ vaultstage roles detect '{"UseAccounts": true, "ListAccounts": true}'
    """
    try:
        mapping = json.loads(permissions)
    except json.JSONDecodeError as e:
        console.print(f"[red]Error:[/red] Invalid JSON: {e}")
        raise typer.Exit(1)

    if not isinstance(mapping, dict):
        console.print("[red]Error:[/red] Permissions must be a JSON object")
        raise typer.Exit(1)

    console.print(f"Role: [cyan]{detect_role(normalize_permissions(mapping))}[/cyan]")
