"""Audit trail inspection."""

import typer
from rich.console import Console
from rich.table import Table

from src.directory_bridge.core.services import ActivityService, DbSessionService
from src.directory_bridge.runtime.context import get_config

console = Console()


def list_activity(
    tenant: str = typer.Option(None, "--tenant", "-t", help="Only show this tenant's entries"),
    limit: int = typer.Option(50, "--limit", "-l", help="Maximum number of entries to show"),
) -> None:
    """Show the most recent audit trail entries."""
    db = DbSessionService(get_config()).get_session()
    try:
        entries = ActivityService(db).recent(tenant_key=tenant, limit=limit)
    finally:
        db.close()

    if not entries:
        console.print("[yellow]No activity recorded[/yellow]")
        return

    table = Table(title="Recent activity")
    table.add_column("When", style="cyan")
    table.add_column("Tenant", style="green")
    table.add_column("Type", style="yellow")
    table.add_column("Actor", style="magenta")
    table.add_column("Subject", style="blue")
    for entry in entries:
        table.add_row(
            entry.created_at.strftime("%Y-%m-%d %H:%M:%S"),
            entry.tenant_key,
            entry.activity_type.value,
            entry.actor,
            entry.subject,
        )

    console.print(table)
