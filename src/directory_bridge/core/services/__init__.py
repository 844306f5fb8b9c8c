"""Core services exports."""

# Activity
from .activity.activity_service import ActivityService

# Authentication
from .auth.directory_auth import DirectoryAuthenticationService, build_authentication_service
from .auth.local_auth import LocalAuthenticator

# Database Service
from .database.db_manage import DbManageService
from .database.db_session import DbSessionService

# Directory
from .directory.attribute_codec import AttributeCodec
from .directory.identity_mapper import IdentityMapper
from .directory.ldap_client import DirectoryClient, LdapDirectoryClient

# Session Services
from .session.user_session import UserSessionService

# User Services
from .user.identity_store import IdentityStore
from .user.reconciliation import ReconciliationService

__all__ = [
    "ActivityService",
    "DirectoryAuthenticationService",
    "build_authentication_service",
    "LocalAuthenticator",
    "DbManageService",
    "DbSessionService",
    "AttributeCodec",
    "IdentityMapper",
    "DirectoryClient",
    "LdapDirectoryClient",
    "UserSessionService",
    "IdentityStore",
    "ReconciliationService",
]
