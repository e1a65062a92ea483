"""
vaultstage CLI - Stage and deploy CyberArk PVWA changes.

Usage:
    vaultstage login            Log in and store the session token
    vaultstage logout           Forget the stored session
    vaultstage status           Show session status
    vaultstage safes            Inspect Safes
    vaultstage members          Inspect Safe members
    vaultstage accounts         Inspect Accounts
    vaultstage roles            Permission templates and role detection
    vaultstage apply            Stage a JSON plan and deploy it
"""

import typer

from ..config import load_config
from ..log import configure_logging
from .commands import accounts, apply, members, roles, safes, session

# Create the main Typer app
app = typer.Typer(
    name="vaultstage",
    help="Stage Safe, Member and Account changes and deploy them to CyberArk",
    add_completion=False,
)

# Register top-level commands
app.command(name="login")(session.login_command)
app.command(name="debug-login")(session.debug_login_command)
app.command(name="logout")(session.logout_command)
app.command(name="status")(session.status_command)
app.command(name="apply")(apply.apply_command)

# Create safes subcommand group
safes_app = typer.Typer(help="Inspect Safes")
safes_app.command(name="list")(safes.safes_list_command)
app.add_typer(safes_app, name="safes")

# Create members subcommand group
members_app = typer.Typer(help="Inspect Safe members")
members_app.command(name="list")(members.members_list_command)
app.add_typer(members_app, name="members")

# Create accounts subcommand group
accounts_app = typer.Typer(help="Inspect Accounts")
accounts_app.command(name="list")(accounts.accounts_list_command)
app.add_typer(accounts_app, name="accounts")

# Create roles subcommand group
roles_app = typer.Typer(help="Permission templates and role detection")
roles_app.command(name="templates")(roles.roles_templates_command)
roles_app.command(name="detect")(roles.roles_detect_command)
app.add_typer(roles_app, name="roles")


@app.callback()
def callback() -> None:
    """
    vaultstage - staging console for CyberArk PVWA.

    Stage changes locally, review them, deploy them in one batch.
    """
    config = load_config()
    configure_logging(config.log_level, json_output=config.log_json)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
