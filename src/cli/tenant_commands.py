"""Tenant provisioning commands."""

import typer
from rich.console import Console
from rich.table import Table

from src.directory_bridge.core.exceptions import IdentityStoreError

from ._services import identity_store

console = Console()

tenants_app = typer.Typer(help="Manage tenants")


@tenants_app.command("add")
def add_tenant(
    key: str = typer.Argument(..., help="Tenant key referenced by directory attributes"),
    name: str = typer.Option(None, "--name", "-n", help="Human readable name"),
) -> None:
    """Provision a tenant."""
    with identity_store() as store:
        try:
            store.create_tenant(key, name)
        except IdentityStoreError as e:
            console.print(f"[red]❌ {e}[/red]")
            raise typer.Exit(code=1) from e

    console.print(f"[green]✅ Created tenant '{key}'[/green]")


@tenants_app.command("list")
def list_tenants() -> None:
    """List all tenants."""
    with identity_store() as store:
        tenants = store.list_tenants()

    if not tenants:
        console.print("[yellow]No tenants found[/yellow]")
        return

    table = Table(title="Tenants")
    table.add_column("Key", style="green")
    table.add_column("Name", style="magenta")
    table.add_column("ID", style="cyan")
    for tenant in tenants:
        table.add_row(tenant.key, tenant.name or "", tenant.id)

    console.print(table)


@tenants_app.command("groups")
def list_tenant_groups(
    key: str = typer.Argument(..., help="Tenant key"),
) -> None:
    """List a tenant's groups and how many members each has."""
    with identity_store() as store:
        try:
            groups = store.tenant_groups(key)
        except IdentityStoreError as e:
            console.print(f"[red]❌ {e}[/red]")
            raise typer.Exit(code=1) from e

    if not groups:
        console.print(f"[yellow]Tenant '{key}' has no groups[/yellow]")
        return

    table = Table(title=f"Groups in '{key}'")
    table.add_column("Group", style="cyan")
    table.add_column("Members", style="green", justify="right")
    table.add_column("Managed", style="yellow")
    table.add_column("Description", style="magenta")
    for group, members in groups:
        table.add_row(
            group.name,
            str(members),
            "directory" if group.externally_managed else "local",
            group.description or "",
        )

    console.print(table)
