"""LDAP directory client built on ldap3."""

from typing import Protocol

import ldap3
from ldap3.core.exceptions import (
    LDAPCommunicationError,
    LDAPException,
    LDAPSocketOpenError,
)
from ldap3.utils.ciDict import CaseInsensitiveDict
from ldap3.utils.conv import escape_filter_chars
from loguru import logger

from src.directory_bridge.core.exceptions import (
    DirectoryError,
    DirectoryInvalidCredentialsError,
    DirectoryPrincipalNotFoundError,
    DirectoryUnavailableError,
)
from src.directory_bridge.core.models.identity import DirectoryAttributeSet
from src.directory_bridge.runtime.config.config_data import DirectoryConfig


class DirectoryClient(Protocol):
    """Authenticates a principal and returns its directory attributes.

    Implementations raise :class:`DirectoryPrincipalNotFoundError`,
    :class:`DirectoryUnavailableError`, :class:`DirectoryInvalidCredentialsError`
    or :class:`DirectoryError` instead of returning a failure value.
    """

    def authenticate(
        self, filter_attribute: str, username: str, credential: str
    ) -> DirectoryAttributeSet: ...


class LdapDirectoryClient:
    """Search-then-bind authentication against an LDAP server.

    The service account searches for ``(<filter_attribute>=<username>)`` under
    the base DN; the single entry found is then bound with the supplied
    credential and its attributes are returned.
    """

    def __init__(self, config: DirectoryConfig):
        self._config = config
        self._server = ldap3.Server(
            config.url,
            get_info=ldap3.NONE,
            connect_timeout=config.connect_timeout,
        )

    def _connection(self, user: str | None, password: str | None) -> ldap3.Connection:
        return ldap3.Connection(
            self._server,
            user=user,
            password=password,
            receive_timeout=self._config.receive_timeout,
            raise_exceptions=False,
        )

    def authenticate(
        self, filter_attribute: str, username: str, credential: str
    ) -> DirectoryAttributeSet:
        try:
            user_dn, attributes = self._find_principal(filter_attribute, username)
            self._bind_as(user_dn, credential)
        except (LDAPSocketOpenError, LDAPCommunicationError) as e:
            raise DirectoryUnavailableError(f"Cannot reach directory at {self._config.url}") from e
        except LDAPException as e:
            raise DirectoryError(f"Directory operation failed: {e}") from e

        return attributes

    def _find_principal(self, filter_attribute: str, username: str) -> tuple[str, CaseInsensitiveDict]:
        conn = self._connection(self._config.bind_dn, self._config.bind_password)
        try:
            if not conn.bind():
                raise DirectoryError(
                    f"Service bind as {self._config.bind_dn} failed: {conn.result.get('description')}"
                )

            search_filter = f"({filter_attribute}={escape_filter_chars(username)})"
            conn.search(
                self._config.base_dn,
                search_filter,
                search_scope=ldap3.SUBTREE,
                attributes=ldap3.ALL_ATTRIBUTES,
            )
            # search() is also False for zero entries, so the result code decides
            outcome = conn.result.get("description")
            if outcome != "success":
                raise DirectoryError(
                    f"Search for {search_filter} under {self._config.base_dn} failed: {outcome}"
                )
            entries = [
                entry for entry in (conn.response or []) if entry.get("type") == "searchResEntry"
            ]
        finally:
            conn.unbind()

        if not entries:
            raise DirectoryPrincipalNotFoundError(f"No directory entry matches {search_filter}")
        if len(entries) > 1:
            raise DirectoryError(
                f"{len(entries)} directory entries match {search_filter}; expected exactly one"
            )

        entry = entries[0]
        logger.debug("Found directory entry {} for {}", entry["dn"], username)
        return entry["dn"], self._decode_attributes(entry.get("raw_attributes") or {})

    def _bind_as(self, user_dn: str, credential: str) -> None:
        # An empty password would be an unauthenticated bind, which most servers accept
        if not credential:
            raise DirectoryInvalidCredentialsError(f"Empty credential for {user_dn}")

        conn = self._connection(user_dn, credential)
        try:
            if conn.bind():
                return
            description = conn.result.get("description")
        finally:
            conn.unbind()

        if description == "invalidCredentials":
            raise DirectoryInvalidCredentialsError(f"Directory rejected credential for {user_dn}")
        raise DirectoryError(f"Bind as {user_dn} failed: {description}")

    @staticmethod
    def _decode_attributes(raw_attributes: dict) -> CaseInsensitiveDict:
        # Attribute names are case-insensitive in LDAP
        return CaseInsensitiveDict({
            name: [
                value.decode("utf-8", errors="replace") if isinstance(value, bytes) else str(value)
                for value in values
            ]
            for name, values in raw_attributes.items()
        })
