from loguru import logger

from src.directory_bridge.core.models.session import AuthSource, UserSession
from src.directory_bridge.core.security import generate_secure_token
from src.directory_bridge.core.storage.session_storage import SessionStorage
from src.directory_bridge.entities.core.user import User


class UserSessionService:
    """Service for issuing and looking up user sessions."""

    def __init__(self, session_storage: SessionStorage, session_max_age: int = 3600) -> None:
        self._storage = session_storage
        self._session_max_age = session_max_age

    @staticmethod
    def _key(session_id: str) -> str:
        return f"user:{session_id}"

    def create_user_session(self, user: User, auth_source: AuthSource) -> str:
        """Issue a session bound to ``user.username``.

        Args:
            user: Authenticated user
            auth_source: Which authenticator accepted the credential

        Returns:
            Session token
        """
        user_session = UserSession.create(
            session_id=generate_secure_token(32),
            username=user.username,
            user_id=user.id,
            auth_source=auth_source,
            session_max_age=self._session_max_age,
        )
        self._storage.set(self._key(user_session.id), user_session, self._session_max_age)
        logger.debug("Issued {} session for {}", auth_source, user.username)
        return user_session.id

    def get_user_session(self, session_id: str) -> UserSession | None:
        """Get a live session by token, refreshing its last access time.

        Returns:
            User session or None if not found/expired
        """
        user_session = self._storage.get(self._key(session_id), UserSession)
        if not user_session:
            return None

        if user_session.is_expired():
            self._storage.delete(self._key(session_id))
            return None

        user_session.update_access()
        ttl = max(1, user_session.expires_at - user_session.last_accessed_at)
        self._storage.set(self._key(session_id), user_session, ttl)
        return user_session

    def delete_user_session(self, session_id: str) -> None:
        self._storage.delete(self._key(session_id))

    def list_user_sessions(self, username: str | None = None) -> list[UserSession]:
        """List active sessions, optionally only those of ``username``."""
        sessions = self._storage.list_sessions("user:*", UserSession)
        if username is not None:
            sessions = [s for s in sessions if s.username == username]
        return sessions
