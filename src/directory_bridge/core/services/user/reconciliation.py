from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from src.directory_bridge.core.exceptions import (
    GroupAlreadyExistsError,
    IdentityStoreError,
    MembershipAlreadyExistsError,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from src.directory_bridge.core.models.identity import GroupMembership, NormalizedIdentity
from src.directory_bridge.core.services.activity.activity_service import (
    CONTENT_TYPE_KEY,
    CONTENT_TYPE_USER,
    ActivityService,
)
from src.directory_bridge.core.services.user.identity_store import IdentityStore
from src.directory_bridge.entities.core.activity import ActivitySource, ActivityType
from src.directory_bridge.entities.core.user import User
from src.directory_bridge.runtime.config.config_data import DirectoryConfig


class ReconciliationService:
    """Synchronizes a directory identity into the local store.

    The user record is created or updated first; failures there propagate.
    Each group membership is then upserted on its own, and a failure for one
    membership is logged without affecting the others. Audit entries are
    written only for changes that actually happened, so reconciling the same
    identity twice records nothing the second time.
    """

    def __init__(
        self,
        store: IdentityStore,
        activity_service: ActivityService,
        directory_config: DirectoryConfig,
        system_tenant_key: str,
    ):
        self._store = store
        self._activity = activity_service
        self._config = directory_config
        self._system_tenant_key = system_tenant_key

    def reconcile(self, identity: NormalizedIdentity, credential: str | None = None) -> User:
        """Upsert ``identity`` and its memberships and return the stored user.

        ``credential`` is only stored when ``store_directory_credential`` is
        enabled; otherwise new users get a credential nothing can match.

        Raises:
            UserNotFoundError, UserAlreadyExistsError, SQLAlchemyError: If the
                user record itself cannot be written.
        """
        self.upsert_user(identity, credential)

        for membership in identity.groups:
            try:
                self.upsert_membership(membership, identity.username)
            except (IdentityStoreError, SQLAlchemyError) as e:
                self._store.rollback()
                logger.error(
                    "Failed to upsert group {} in tenant {} for user {}: {}",
                    membership.name,
                    membership.tenant_key,
                    identity.username,
                    e,
                )

        user = self._store.get_user(identity.username)
        if user is None:
            raise UserNotFoundError(f"User {identity.username} disappeared during reconciliation")
        return user

    def upsert_user(self, identity: NormalizedIdentity, credential: str | None = None) -> None:
        if self._store.user_exists(identity.username):
            self._update_user(identity)
            return

        password = credential if self._config.store_directory_credential else None
        try:
            created = self._store.create_user(
                identity.username,
                password,
                identity.first_name,
                identity.last_name,
                identity.email,
                externally_managed=True,
            )
        except UserAlreadyExistsError:
            logger.info("User {} was created concurrently; updating instead", identity.username)
            self._update_user(identity)
            return

        if created:
            self._record_user_activity(identity.username, ActivityType.CREATED)

    def _update_user(self, identity: NormalizedIdentity) -> None:
        changed = self._store.update_user(
            identity.username,
            identity.first_name,
            identity.last_name,
            identity.email,
            externally_managed=True,
        )
        if changed:
            self._record_user_activity(identity.username, ActivityType.UPDATED)

    def upsert_membership(self, membership: GroupMembership, username: str) -> None:
        """Ensure the group exists and ``username`` belongs to it."""
        tenant_key = membership.tenant_key

        if not self._store.group_exists(tenant_key, membership.name):
            try:
                self._store.create_group(
                    membership.name,
                    membership.description,
                    tenant_key,
                    externally_managed=membership.externally_managed,
                )
            except GroupAlreadyExistsError:
                logger.debug("Group {} in tenant {} was created concurrently", membership.name, tenant_key)

        if self._store.user_exists_in_group(tenant_key, membership.name, username):
            return

        try:
            added = self._store.add_user_to_group(tenant_key, membership.name, username)
        except MembershipAlreadyExistsError:
            logger.debug("User {} joined group {} concurrently", username, membership.name)
            return

        if added:
            self._activity.record(
                tenant_key,
                self._config.activity_actor,
                f"{username} > {membership.name}",
                ActivityType.ADD_USER_TO_GROUP,
                ActivitySource.API,
                {CONTENT_TYPE_KEY: CONTENT_TYPE_USER},
            )

    def _record_user_activity(self, username: str, activity_type: ActivityType) -> None:
        self._activity.record(
            self._system_tenant_key,
            username,
            username,
            activity_type,
            ActivitySource.API,
            {CONTENT_TYPE_KEY: CONTENT_TYPE_USER},
        )
