"""Main CLI application module."""

import typer

from src.directory_bridge.api.utils.app_startup import configure_logging

from .activity_commands import list_activity
from .auth_commands import init_db, login
from .tenant_commands import tenants_app
from .user_commands import users_app

# Create the main CLI application
app = typer.Typer(
    help="Directory Auth Bridge administration",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


@app.callback()
def setup(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level"),
) -> None:
    configure_logging(level="DEBUG" if verbose else None)


# Register command groups
app.add_typer(tenants_app, name="tenants")
app.add_typer(users_app, name="users")
app.command("init-db")(init_db)
app.command("login")(login)
app.command("activity")(list_activity)


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
