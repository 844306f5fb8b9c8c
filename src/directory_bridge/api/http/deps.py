"""FastAPI dependency implementations."""

from __future__ import annotations

from collections.abc import Iterator

from fastapi import Depends, HTTPException, Request
from sqlmodel import Session

from src.directory_bridge.api.http.app_data import ApplicationDependencies
from src.directory_bridge.core.models import UserSession
from src.directory_bridge.core.services import (
    DirectoryAuthenticationService,
    IdentityStore,
    UserSessionService,
    build_authentication_service,
)


def get_app_dependencies(request: Request) -> ApplicationDependencies:
    return request.app.state.app_dependencies


def get_db_session(
    app_deps: ApplicationDependencies = Depends(get_app_dependencies),
) -> Iterator[Session]:
    """Yield a database session that is closed after the request."""
    session = app_deps.database_service.get_session()
    try:
        yield session
    finally:
        session.close()


def get_user_session_service(
    app_deps: ApplicationDependencies = Depends(get_app_dependencies),
) -> UserSessionService:
    return app_deps.user_session_service


def get_identity_store(db: Session = Depends(get_db_session)) -> IdentityStore:
    return IdentityStore(db)


def get_authentication_service(
    app_deps: ApplicationDependencies = Depends(get_app_dependencies),
    db: Session = Depends(get_db_session),
) -> DirectoryAuthenticationService:
    """Assemble the login orchestrator around the request's database session."""
    return build_authentication_service(
        db,
        app_deps.config,
        app_deps.user_session_service,
        app_deps.directory_client,
        app_deps.identity_mapper,
    )


def get_session_token(
    request: Request,
    app_deps: ApplicationDependencies = Depends(get_app_dependencies),
) -> str:
    token = request.headers.get(app_deps.config.app.session_header_name)
    if not token:
        raise HTTPException(status_code=401, detail="Missing session token")
    return token


def get_current_session(
    token: str = Depends(get_session_token),
    session_service: UserSessionService = Depends(get_user_session_service),
) -> UserSession:
    """Resolve the caller's session or reject the request with 401."""
    user_session = session_service.get_user_session(token)
    if user_session is None:
        raise HTTPException(status_code=401, detail="Invalid or expired session")
    return user_session
