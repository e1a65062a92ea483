"""
Shared wiring for CLI commands: configuration, storage, the console and
notification rendering.
"""

from typing import Optional

import typer
from rich.console import Console

from ..config import StageConfig, load_config
from ..console import StagingConsole
from ..notifications import Notification, NotificationType
from ..storage import FileStorage

console = Console()

NOTIFICATION_STYLES = {
    NotificationType.SUCCESS: "green",
    NotificationType.ERROR: "red",
    NotificationType.WARNING: "yellow",
    NotificationType.INFO: "cyan",
}


def print_notification(notification: Notification) -> None:
    style = NOTIFICATION_STYLES[notification.type]
    console.print(f"[{style}]{notification.message}[/{style}]")


def build_console(config: Optional[StageConfig] = None) -> StagingConsole:
    """Create a console over file storage, printing its notifications."""
    config = config or load_config()
    staging_console = StagingConsole(config, FileStorage(config.state_dir))
    staging_console.notifier.subscribe(print_notification)
    return staging_console


def require_session(staging_console: StagingConsole) -> StagingConsole:
    """Restore the stored session or exit with an error."""
    if not staging_console.restore_session():
        console.print("[red]Error:[/red] Not logged in. Run [cyan]vaultstage login[/cyan] first.")
        raise typer.Exit(1)
    return staging_console
