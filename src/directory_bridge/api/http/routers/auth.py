"""Login, logout and session introspection endpoints."""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from src.directory_bridge.api.http.deps import (
    get_authentication_service,
    get_current_session,
    get_identity_store,
    get_session_token,
    get_user_session_service,
)
from src.directory_bridge.core.models import UserSession
from src.directory_bridge.core.services import (
    DirectoryAuthenticationService,
    IdentityStore,
    UserSessionService,
)

router = APIRouter(prefix="/auth", tags=["auth"])


class LoginRequest(BaseModel):
    username: str
    password: str


class LoginResponse(BaseModel):
    token: str
    username: str


class GroupResponse(BaseModel):
    tenant_id: str
    name: str


class MeResponse(BaseModel):
    """Current session and the profile of the user it is bound to."""

    username: str
    auth_source: str
    expires_at: int
    first_name: str | None
    last_name: str | None
    email: str | None
    groups: list[GroupResponse]


class SessionSummary(BaseModel):
    auth_source: str
    created_at: int
    last_accessed_at: int
    expires_at: int
    current: bool


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    auth_service: DirectoryAuthenticationService = Depends(get_authentication_service),
) -> LoginResponse:
    """Authenticate with username and password and open a session.

    Errors raised by the authentication service are translated by the
    application's exception handlers (401 for rejected credentials, 503 for
    system failures).
    """
    token = auth_service.authenticate(body.username, body.password)
    return LoginResponse(token=token, username=body.username)


@router.get("/me", response_model=MeResponse)
def get_me(
    user_session: UserSession = Depends(get_current_session),
    store: IdentityStore = Depends(get_identity_store),
) -> MeResponse:
    user = store.get_user(user_session.username)
    if user is None:
        raise HTTPException(status_code=401, detail="Session user no longer exists")

    groups = store.user_groups(user.username)
    return MeResponse(
        username=user.username,
        auth_source=user_session.auth_source,
        expires_at=user_session.expires_at,
        first_name=user.first_name,
        last_name=user.last_name,
        email=user.email,
        groups=[GroupResponse(tenant_id=g.tenant_id, name=g.name) for g in groups],
    )


@router.get("/sessions", response_model=list[SessionSummary])
def list_sessions(
    user_session: UserSession = Depends(get_current_session),
    session_service: UserSessionService = Depends(get_user_session_service),
) -> list[SessionSummary]:
    """List the caller's live sessions, without their tokens."""
    return [
        SessionSummary(
            auth_source=s.auth_source,
            created_at=s.created_at,
            last_accessed_at=s.last_accessed_at,
            expires_at=s.expires_at,
            current=s.id == user_session.id,
        )
        for s in session_service.list_user_sessions(user_session.username)
    ]


@router.post("/logout", status_code=204)
def logout(
    token: str = Depends(get_session_token),
    session_service: UserSessionService = Depends(get_user_session_service),
) -> None:
    session_service.delete_user_session(token)
