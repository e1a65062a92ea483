"""
vaultstage apply command - stage a JSON plan and deploy it.
"""

import asyncio
from pathlib import Path

import typer
from rich.table import Table

from ...console import StagingConsole
from ...deploy import DeploymentReport
from ...errors import VaultStageError
from ...plan import Plan, load_plan, stage_plan
from ..context import build_console, console, require_session


def apply_command(
    plan_path: Path = typer.Argument(..., help="Plan JSON file", exists=True, dir_okay=False),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "-n",
        help="Stage and show the queues without deploying",
    ),
) -> None:
    """
    Stage a plan and deploy it to the vault.

    Example:
        $ vaultstage apply changes.json --dry-run
        $ vaultstage apply changes.json
    """
    console.print("\n[bold cyan]Applying Plan[/bold cyan]\n")

    try:
        plan = load_plan(plan_path)
    except VaultStageError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1)

    asyncio.run(_apply(plan, dry_run))


async def _apply(plan: Plan, dry_run: bool) -> None:
    """Internal async function to stage and deploy a plan."""
    staging_console = require_session(build_console())

    failures = await stage_plan(staging_console, plan)
    print_queues(staging_console)

    if failures:
        console.print(f"[red]Error:[/red] {failures} plan entries could not be staged; nothing deployed\n")
        raise typer.Exit(1)

    if dry_run:
        console.print("[yellow]Dry run: nothing deployed[/yellow]\n")
        return

    report = await staging_console.deploy()
    print_report(report)
    if report.failed:
        raise typer.Exit(1)


def print_queues(staging_console: StagingConsole) -> None:
    """Print the nine queue lengths in deploy order."""
    summary = staging_console.summary()

    table = Table(title=f"Staged ({summary['total']} items)")
    table.add_column("Queue", style="cyan")
    table.add_column("Items", style="green", justify="right")
    table.add_column("Entries", style="white")

    for queue in staging_console.state.staging.in_deploy_order():
        labels = ", ".join(item.label for item in queue)
        table.add_row(f"{queue.kind.value}-{queue.operation.value}", str(len(queue)), labels or "—")

    console.print(table)
    console.print()


def print_report(report: DeploymentReport) -> None:
    if report.total == 0:
        return

    table = Table(title="Deployment Report")
    table.add_column("Operation", style="cyan")
    table.add_column("Item", style="white")
    table.add_column("Result", style="white")

    for outcome in report.outcomes:
        result = "[green]✓[/green]" if outcome.ok else f"[red]✗ {outcome.error}[/red]"
        table.add_row(f"{outcome.kind.value}-{outcome.operation.value}", outcome.label, result)

    console.print(table)
    console.print(
        f"\n{len(report.succeeded)} succeeded, {len(report.failed)} failed "
        f"of {report.total} items\n"
    )
