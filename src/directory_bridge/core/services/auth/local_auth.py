from loguru import logger

from src.directory_bridge.core.exceptions import BadCredentialsError
from src.directory_bridge.core.security import verify_password
from src.directory_bridge.core.services.session.user_session import UserSessionService
from src.directory_bridge.core.services.user.identity_store import IdentityStore


class LocalAuthenticator:
    """Authenticates against credentials held in the local identity store."""

    def __init__(self, store: IdentityStore, session_service: UserSessionService):
        self._store = store
        self._session_service = session_service

    def authenticate(self, username: str, password: str) -> str:
        """Verify ``password`` for ``username`` and return a session token.

        Raises:
            BadCredentialsError: If the user is unknown, disabled, or the
                password does not verify.
        """
        user = self._store.get_user(username)
        if user is None:
            logger.debug("Local authentication failed: unknown user {}", username)
            raise BadCredentialsError()

        if not user.enabled:
            logger.info("Local authentication refused for disabled user {}", username)
            raise BadCredentialsError()

        if not password or not verify_password(password, user.password_hash):
            logger.debug("Local authentication failed: bad password for {}", username)
            raise BadCredentialsError()

        return self._session_service.create_user_session(user, "local")
