"""Schema setup and interactive login commands."""

import typer
from rich.console import Console

from src.directory_bridge.core.exceptions import (
    AuthenticationSystemError,
    BadCredentialsError,
)
from src.directory_bridge.core.services import (
    DbSessionService,
    IdentityMapper,
    IdentityStore,
    LdapDirectoryClient,
    UserSessionService,
    build_authentication_service,
)
from src.directory_bridge.core.storage import get_session_storage
from src.directory_bridge.runtime.context import get_config
from src.directory_bridge.runtime.init_db import init_db as create_schema

console = Console()


def init_db() -> None:
    """Create the database tables."""
    create_schema()
    console.print("[green]✅ Database initialized[/green]")


def login(
    username: str = typer.Argument(..., help="Username to authenticate"),
    password: str = typer.Option(
        ..., "--password", "-p", prompt=True, hide_input=True, help="Password"
    ),
) -> None:
    """Run one authentication through the directory, importing the user on success."""
    config = get_config()
    db = DbSessionService(config).get_session()
    try:
        store = IdentityStore(db)
        sessions = UserSessionService(
            get_session_storage(config.redis), config.app.session_max_age
        )
        service = build_authentication_service(
            db,
            config,
            sessions,
            LdapDirectoryClient(config.directory),
            IdentityMapper(config.directory),
        )

        try:
            token = service.authenticate(username, password)
        except BadCredentialsError as e:
            console.print(f"[red]❌ {e}[/red]")
            raise typer.Exit(code=1) from e
        except AuthenticationSystemError as e:
            console.print(f"[red]❌ {e}: {e.__cause__}[/red]")
            raise typer.Exit(code=2) from e

        user_session = sessions.get_user_session(token)
        groups = store.user_groups(username)
    finally:
        db.close()

    source = user_session.auth_source if user_session else "unknown"
    console.print(f"[green]✅ Authenticated '{username}' ({source})[/green]")
    for group in groups:
        console.print(f"  • {group.name}")
