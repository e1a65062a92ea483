"""
vaultstage session commands - login, logout and status.
"""

import asyncio
from typing import Optional

import typer

from ..context import build_console, console


def login_command(
    vault_url: str = typer.Argument(..., help="PVWA URL (e.g., https://pvwa.example.com)"),
    username: str = typer.Argument(..., help="Vault username"),
    password: Optional[str] = typer.Option(
        None,
        "--password",
        "-p",
        help="Vault password (will prompt if not provided)",
        prompt=True,
        hide_input=True,
    ),
) -> None:
    """
    Log in to the vault and store the session token.

    Example:
        $ vaultstage login https://pvwa.example.com admin
    """
    console.print("\n[bold cyan]Logging In[/bold cyan]\n")

    ok = asyncio.run(build_console().login(vault_url, username, password or ""))
    console.print()
    if not ok:
        raise typer.Exit(1)


def debug_login_command() -> None:
    """
    Start a debug session without contacting the vault.

    Requires VAULTSTAGE_DEBUG=true.
    """
    if not build_console().debug_login():
        raise typer.Exit(1)


def logout_command() -> None:
    """
    Forget the stored session.

    Example:
        $ vaultstage logout
    """
    build_console().logout()


def status_command() -> None:
    """
    Show the session and console status.

    Example:
        $ vaultstage status
    """
    staging_console = build_console()
    staging_console.restore_session()
    summary = staging_console.summary()

    console.print(f"\n[bold cyan]{summary['site_name']}[/bold cyan]\n")
    if summary["debug"]:
        console.print("[bold yellow]DEBUG MODE[/bold yellow] authentication bypass enabled\n")

    if summary["status"] == "CONNECTED":
        console.print(f"Status: [green]{summary['status']}[/green]")
        console.print(f"Vault: [cyan]{summary['vault_url']}[/cyan]\n")
    else:
        console.print(f"Status: [red]{summary['status']}[/red]\n")
