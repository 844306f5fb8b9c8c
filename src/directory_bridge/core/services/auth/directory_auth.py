"""Directory-first authentication with a local fallback.

A login is attempted against the directory first. When the directory has no
such principal, or cannot be reached, the credential is handed unchanged to
the local authenticator. Otherwise the directory decides: a rejected
credential is final, and a successful bind imports the principal into the
local store before a session is issued.
"""

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from src.directory_bridge.core.exceptions import (
    AuthenticationSystemError,
    BadCredentialsError,
    ConfigurationError,
    DirectoryError,
    DirectoryInvalidCredentialsError,
    DirectoryPrincipalNotFoundError,
    DirectoryUnavailableError,
    IdentityStoreError,
)
from src.directory_bridge.core.models.identity import DirectoryAttributeSet
from src.directory_bridge.core.services.activity.activity_service import ActivityService
from src.directory_bridge.core.services.auth.local_auth import LocalAuthenticator
from src.directory_bridge.core.services.directory.identity_mapper import IdentityMapper
from src.directory_bridge.core.services.directory.ldap_client import DirectoryClient
from src.directory_bridge.core.services.session.user_session import UserSessionService
from src.directory_bridge.core.services.user.identity_store import IdentityStore
from src.directory_bridge.core.services.user.reconciliation import ReconciliationService
from src.directory_bridge.entities.core.activity import ActivitySource, ActivityType
from src.directory_bridge.entities.core.tenant import Tenant
from src.directory_bridge.runtime.config.config_data import ConfigData, DirectoryConfig


class DirectoryAuthenticationService:
    def __init__(
        self,
        directory_client: DirectoryClient,
        identity_mapper: IdentityMapper,
        store: IdentityStore,
        reconciliation: ReconciliationService,
        session_service: UserSessionService,
        local_authenticator: LocalAuthenticator,
        config: DirectoryConfig,
        activity_service: ActivityService | None = None,
        system_tenant_key: str | None = None,
    ):
        self._client = directory_client
        self._mapper = identity_mapper
        self._store = store
        self._reconciliation = reconciliation
        self._session_service = session_service
        self._local = local_authenticator
        self._config = config
        self._activity = activity_service
        self._system_tenant_key = system_tenant_key

    def authenticate(self, username: str, password: str) -> str:
        """Authenticate ``username`` and return a session token.

        Raises:
            BadCredentialsError: If the directory (or, on fallback, the local
                store) rejects the credential.
            AuthenticationSystemError: If the directory fails unexpectedly, its
                attributes cannot be mapped, or the user cannot be imported.
        """
        if not self._config.enabled:
            logger.debug("Directory authentication disabled; using local authentication for {}", username)
            return self._local.authenticate(username, password)

        try:
            attributes = self._client.authenticate(self._config.attributes.username, username, password)
        except DirectoryPrincipalNotFoundError:
            logger.info("User {} not found in the directory; trying local authentication", username)
            return self._local.authenticate(username, password)
        except DirectoryUnavailableError as e:
            logger.info("Directory unavailable ({}); trying local authentication for {}", e, username)
            return self._local.authenticate(username, password)
        except DirectoryInvalidCredentialsError as e:
            logger.info("Directory rejected credentials for {}", username)
            raise BadCredentialsError() from e
        except DirectoryError as e:
            logger.error("Directory authentication failed for {}: {}", username, e)
            raise AuthenticationSystemError("Authentication failed with the directory") from e

        return self._login_directory_user(username, password, attributes)

    def _login_directory_user(
        self, username: str, password: str, attributes: DirectoryAttributeSet
    ) -> str:
        try:
            identity = self._mapper.map_authenticated_principal(
                username, attributes, self._resolve_tenant
            )
        except ConfigurationError as e:
            logger.error("Directory attribute mapping is misconfigured: {}", e)
            raise AuthenticationSystemError("Failed to retrieve directory user details") from e

        if identity is None:
            raise AuthenticationSystemError("Failed to retrieve directory user details")

        try:
            user = self._reconciliation.reconcile(identity, credential=password)
        except (IdentityStoreError, SQLAlchemyError) as e:
            self._store.rollback()
            logger.error("Failed to import directory user {}: {}", username, e)
            raise AuthenticationSystemError(f"Failed to import directory user {username}") from e

        token = self._session_service.create_user_session(user, "directory")

        if self._activity is not None and self._system_tenant_key:
            self._activity.record(
                self._system_tenant_key,
                username,
                username,
                ActivityType.LOGIN,
                ActivitySource.API,
            )

        logger.info("User {} authenticated against the directory", username)
        return token

    def _resolve_tenant(self, tenant_key: str) -> Tenant | None:
        # A failed lookup only costs that tenant's memberships
        try:
            return self._store.get_tenant(tenant_key)
        except SQLAlchemyError as e:
            self._store.rollback()
            logger.warning("Tenant lookup for {} failed, skipping it: {}", tenant_key, e)
            return None


def build_authentication_service(
    db_session: Session,
    config: ConfigData,
    session_service: UserSessionService,
    directory_client: DirectoryClient,
    identity_mapper: IdentityMapper,
) -> DirectoryAuthenticationService:
    """Assemble the login orchestrator around one database session."""
    store = IdentityStore(db_session)
    activity_service = ActivityService(db_session)
    system_tenant_key = config.app.system_tenant_key
    return DirectoryAuthenticationService(
        directory_client=directory_client,
        identity_mapper=identity_mapper,
        store=store,
        reconciliation=ReconciliationService(
            store, activity_service, config.directory, system_tenant_key
        ),
        session_service=session_service,
        local_authenticator=LocalAuthenticator(store, session_service),
        config=config.directory,
        activity_service=activity_service,
        system_tenant_key=system_tenant_key,
    )
