"""Persistence operations for users, groups and memberships.

Every write commits on its own, so a failure in one operation leaves earlier
ones in place. Unique-constraint violations are reported as the matching
"already exists" error; callers racing on the same record treat that as success.
"""

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from src.directory_bridge.core.exceptions import (
    GroupAlreadyExistsError,
    GroupNotFoundError,
    IdentityStoreError,
    MembershipAlreadyExistsError,
    TenantNotFoundError,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from src.directory_bridge.core.security import hash_password, unusable_password_hash
from src.directory_bridge.entities.core.group import Group, GroupRepository
from src.directory_bridge.entities.core.tenant import Tenant, TenantRepository
from src.directory_bridge.entities.core.user import User, UserRepository


class IdentityStore:
    def __init__(self, db_session: Session):
        self._db_session = db_session
        self._users = UserRepository(db_session)
        self._groups = GroupRepository(db_session)
        self._tenants = TenantRepository(db_session)

    # Tenants

    def get_tenant(self, tenant_key: str) -> Tenant | None:
        return self._tenants.get_by_key(tenant_key)

    def list_tenants(self) -> list[Tenant]:
        return self._tenants.list_all()

    def create_tenant(self, tenant_key: str, name: str | None = None) -> Tenant:
        """Provision a tenant.

        Raises:
            IdentityStoreError: If ``tenant_key`` is already taken.
        """
        try:
            tenant = self._tenants.create(Tenant(key=tenant_key, name=name))
            self._db_session.commit()
        except IntegrityError as e:
            self._db_session.rollback()
            raise IdentityStoreError(f"Tenant {tenant_key} already exists") from e

        logger.info("Created tenant {}", tenant_key)
        return tenant

    def _require_tenant(self, tenant_key: str) -> Tenant:
        tenant = self._tenants.get_by_key(tenant_key)
        if tenant is None:
            raise TenantNotFoundError(f"Tenant {tenant_key} not found")
        return tenant

    # Users

    def get_user(self, username: str) -> User | None:
        return self._users.get_by_username(username)

    def list_users(self) -> list[User]:
        return self._users.list_all()

    def user_exists(self, username: str) -> bool:
        return self._users.exists(username)

    def create_user(
        self,
        username: str,
        password: str | None,
        first_name: str | None,
        last_name: str | None,
        email: str | None,
        externally_managed: bool = False,
    ) -> bool:
        """Create a user; ``password=None`` stores a credential nothing can match.

        Raises:
            UserAlreadyExistsError: If ``username`` is taken.
        """
        user = User(
            username=username,
            first_name=first_name,
            last_name=last_name,
            email=email,
            password_hash=hash_password(password) if password else unusable_password_hash(),
            enabled=True,
            externally_managed=externally_managed,
        )
        try:
            self._users.create(user)
            self._db_session.commit()
        except IntegrityError as e:
            self._db_session.rollback()
            raise UserAlreadyExistsError(f"User {username} already exists") from e

        logger.info("Created user {}", username)
        return True

    def update_user(
        self,
        username: str,
        first_name: str | None,
        last_name: str | None,
        email: str | None,
        externally_managed: bool = True,
    ) -> bool:
        """Overwrite profile fields, returning whether anything changed.

        Raises:
            UserNotFoundError: If no user has ``username``.
        """
        user = self._users.get_by_username(username)
        if user is None:
            raise UserNotFoundError(f"User {username} not found")

        changes = {
            "first_name": first_name,
            "last_name": last_name,
            "email": email,
            "externally_managed": externally_managed,
        }
        changed = any(getattr(user, field) != value for field, value in changes.items())

        self._users.update(user.model_copy(update=changes))
        self._db_session.commit()

        if changed:
            logger.info("Updated user {}", username)
        return changed

    def set_password(self, username: str, password: str) -> None:
        user = self._users.get_by_username(username)
        if user is None:
            raise UserNotFoundError(f"User {username} not found")
        self._users.update(user.model_copy(update={"password_hash": hash_password(password)}))
        self._db_session.commit()

    # Groups

    def group_exists(self, tenant_key: str, group_name: str) -> bool:
        tenant = self._tenants.get_by_key(tenant_key)
        if tenant is None:
            return False
        return self._groups.get_by_name(tenant.id, group_name) is not None

    def create_group(
        self,
        group_name: str,
        description: str,
        tenant_key: str,
        externally_managed: bool = False,
    ) -> bool:
        """Create a group in a tenant.

        Raises:
            TenantNotFoundError: If ``tenant_key`` does not resolve.
            GroupAlreadyExistsError: If the tenant already has ``group_name``.
        """
        tenant = self._require_tenant(tenant_key)
        group = Group(
            tenant_id=tenant.id,
            name=group_name,
            description=description,
            externally_managed=externally_managed,
        )
        try:
            self._groups.create(group)
            self._db_session.commit()
        except IntegrityError as e:
            self._db_session.rollback()
            raise GroupAlreadyExistsError(
                f"Group {group_name} already exists in tenant {tenant_key}"
            ) from e

        logger.info("Created group {} in tenant {}", group_name, tenant_key)
        return True

    def tenant_groups(self, tenant_key: str) -> list[tuple[Group, int]]:
        """List a tenant's groups with their member counts."""
        tenant = self._require_tenant(tenant_key)
        return [
            (group, self._groups.count_members(group.id))
            for group in self._groups.list_for_tenant(tenant.id)
        ]

    def user_groups(self, username: str) -> list[Group]:
        user = self._users.get_by_username(username)
        if user is None:
            raise UserNotFoundError(f"User {username} not found")
        return self._groups.list_for_user(user.id)

    # Memberships

    def user_exists_in_group(self, tenant_key: str, group_name: str, username: str) -> bool:
        tenant = self._tenants.get_by_key(tenant_key)
        user = self._users.get_by_username(username)
        if tenant is None or user is None:
            return False
        group = self._groups.get_by_name(tenant.id, group_name)
        if group is None:
            return False
        return self._groups.has_member(group.id, user.id)

    def add_user_to_group(self, tenant_key: str, group_name: str, username: str) -> bool:
        """Add a user to a group.

        Raises:
            TenantNotFoundError, GroupNotFoundError, UserNotFoundError: If a
                referenced record is missing.
            MembershipAlreadyExistsError: If the user is already a member.
        """
        tenant = self._require_tenant(tenant_key)
        group = self._groups.get_by_name(tenant.id, group_name)
        if group is None:
            raise GroupNotFoundError(f"Group {group_name} not found in tenant {tenant_key}")
        user = self._users.get_by_username(username)
        if user is None:
            raise UserNotFoundError(f"User {username} not found")

        try:
            self._groups.add_member(group.id, user.id)
            self._db_session.commit()
        except IntegrityError as e:
            self._db_session.rollback()
            raise MembershipAlreadyExistsError(
                f"User {username} is already a member of {tenant_key}/{group_name}"
            ) from e

        logger.info("Added user {} to group {} in tenant {}", username, group_name, tenant_key)
        return True

    def rollback(self) -> None:
        self._db_session.rollback()
