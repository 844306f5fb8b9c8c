from dataclasses import dataclass

from src.directory_bridge.core.services import (
    DbSessionService,
    DirectoryClient,
    IdentityMapper,
    LdapDirectoryClient,
    UserSessionService,
)
from src.directory_bridge.core.storage import SessionStorage, get_session_storage
from src.directory_bridge.runtime.config.config_data import ConfigData


@dataclass
class ApplicationDependencies:
    config: ConfigData
    database_service: DbSessionService
    session_storage: SessionStorage
    user_session_service: UserSessionService
    directory_client: DirectoryClient
    identity_mapper: IdentityMapper

    @classmethod
    def from_config(cls, config: ConfigData) -> "ApplicationDependencies":
        """Build the process-wide services from configuration."""
        session_storage = get_session_storage(config.redis)
        return cls(
            config=config,
            database_service=DbSessionService(config),
            session_storage=session_storage,
            user_session_service=UserSessionService(session_storage, config.app.session_max_age),
            directory_client=LdapDirectoryClient(config.directory),
            identity_mapper=IdentityMapper(config.directory),
        )
