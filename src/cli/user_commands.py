"""Local user management commands."""

import typer
from rich.console import Console
from rich.table import Table

from src.directory_bridge.core.exceptions import IdentityStoreError

from ._services import identity_store

console = Console()

# Create the users subcommand app
users_app = typer.Typer(help="Manage users in the local identity store")


@users_app.command("list")
def list_users() -> None:
    """List all users."""
    with identity_store() as store:
        users = store.list_users()

    if not users:
        console.print("[yellow]No users found[/yellow]")
        return

    table = Table(title="Users")
    table.add_column("Username", style="green")
    table.add_column("Email", style="blue")
    table.add_column("First Name", style="magenta")
    table.add_column("Last Name", style="magenta")
    table.add_column("Enabled", style="yellow")
    table.add_column("Source", style="cyan")

    for user in users:
        table.add_row(
            user.username,
            user.email or "",
            user.first_name or "",
            user.last_name or "",
            "✅" if user.enabled else "❌",
            "directory" if user.externally_managed else "local",
        )

    console.print(table)
    console.print(f"\n[green]Found {len(users)} users[/green]")


@users_app.command("add")
def add_user(
    username: str = typer.Argument(..., help="Username for the new user"),
    password: str = typer.Option(
        ..., "--password", "-p", prompt=True, hide_input=True, help="Password"
    ),
    email: str = typer.Option(None, "--email", "-e", help="Email address"),
    first_name: str = typer.Option(None, "--first-name", "-f", help="First name"),
    last_name: str = typer.Option(None, "--last-name", "-l", help="Last name"),
) -> None:
    """Add a locally managed user that can log in through the local fallback."""
    with identity_store() as store:
        try:
            store.create_user(username, password, first_name, last_name, email)
        except IdentityStoreError as e:
            console.print(f"[red]❌ Failed to create user: {e}[/red]")
            raise typer.Exit(code=1) from e

    console.print(f"[green]✅ Successfully created user '{username}'[/green]")


@users_app.command("groups")
def user_groups(
    username: str = typer.Argument(..., help="Username to inspect"),
) -> None:
    """Show the groups a user belongs to."""
    with identity_store() as store:
        try:
            groups = store.user_groups(username)
        except IdentityStoreError as e:
            console.print(f"[red]❌ {e}[/red]")
            raise typer.Exit(code=1) from e
        tenant_keys = {t.id: t.key for t in store.list_tenants()}

    if not groups:
        console.print(f"[yellow]User '{username}' belongs to no groups[/yellow]")
        return

    table = Table(title=f"Groups of '{username}'")
    table.add_column("Tenant", style="green")
    table.add_column("Group", style="cyan")
    table.add_column("Managed", style="yellow")
    for group in groups:
        table.add_row(
            tenant_keys.get(group.tenant_id, group.tenant_id),
            group.name,
            "directory" if group.externally_managed else "local",
        )

    console.print(table)


@users_app.command("passwd")
def set_password(
    username: str = typer.Argument(..., help="User whose password to set"),
    password: str = typer.Option(
        ..., "--password", "-p", prompt=True, hide_input=True, confirmation_prompt=True, help="New password"
    ),
) -> None:
    """Set the local password used by the fallback authenticator."""
    with identity_store() as store:
        try:
            store.set_password(username, password)
        except IdentityStoreError as e:
            console.print(f"[red]❌ {e}[/red]")
            raise typer.Exit(code=1) from e

    console.print(f"[green]✅ Password updated for '{username}'[/green]")
