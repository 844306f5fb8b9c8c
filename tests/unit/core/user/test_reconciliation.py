"""Unit tests for importing directory identities into the local store."""

from unittest.mock import Mock

import pytest

from src.directory_bridge.core.exceptions import (
    GroupAlreadyExistsError,
    TenantNotFoundError,
    UserAlreadyExistsError,
)
from src.directory_bridge.core.models import GroupMembership, NormalizedIdentity
from src.directory_bridge.core.security import verify_password
from src.directory_bridge.core.services import ReconciliationService
from src.directory_bridge.entities.core.activity import ActivityType
from src.directory_bridge.entities.core.user import User


def identity(*groups: tuple[str, str], **profile) -> NormalizedIdentity:
    return NormalizedIdentity(
        username="jdoe",
        email=profile.get("email", "jdoe@example.com"),
        first_name=profile.get("first_name", "John"),
        last_name="Doe",
        groups=[
            GroupMembership(tenant_key=key, tenant_id=f"id-{key}", name=name)
            for key, name in groups
        ],
    )


def activity_types(activity_service) -> list[str]:
    return sorted(a.activity_type.value for a in activity_service.recent(limit=100))


class TestReconcile:
    def test_first_login_creates_user_groups_and_memberships(
        self, reconciliation, store, activity_service, tenants
    ):
        user = reconciliation.reconcile(identity(("mysite", "editors"), ("mysite", "reviewers")))

        assert user.username == "jdoe"
        assert user.externally_managed is True
        assert user.email == "jdoe@example.com"
        assert store.group_exists("mysite", "editors")
        assert store.user_exists_in_group("mysite", "reviewers", "jdoe")
        assert activity_types(activity_service) == [
            "ADD_USER_TO_GROUP",
            "ADD_USER_TO_GROUP",
            "CREATED",
        ]

    def test_reconcile_is_idempotent(self, reconciliation, store, activity_service, tenants):
        source = identity(("mysite", "editors"))
        reconciliation.reconcile(source)
        before = activity_types(activity_service)

        reconciliation.reconcile(source)

        assert activity_types(activity_service) == before
        assert [g.name for g in store.user_groups("jdoe")] == ["editors"]

    def test_changed_profile_is_updated(self, reconciliation, store, activity_service, tenants):
        reconciliation.reconcile(identity(email="old@example.com"))

        user = reconciliation.reconcile(identity(email="new@example.com"))

        assert user.email == "new@example.com"
        assert "UPDATED" in activity_types(activity_service)

    def test_audit_entries(self, reconciliation, activity_service, tenants):
        reconciliation.reconcile(identity(("mysite", "editors")))

        entries = {a.activity_type: a for a in activity_service.recent(limit=10)}
        created = entries[ActivityType.CREATED]
        assert (created.tenant_key, created.actor, created.subject) == ("studio_root", "jdoe", "jdoe")
        assert created.extra_info == {"contentType": "user"}

        joined = entries[ActivityType.ADD_USER_TO_GROUP]
        assert (joined.tenant_key, joined.actor, joined.subject) == ("mysite", "LDAP", "jdoe > editors")

    def test_existing_local_group_is_reused(self, reconciliation, store, tenants):
        store.create_group("editors", "Hand made", "mysite", externally_managed=False)

        reconciliation.reconcile(identity(("mysite", "editors")))

        assert store.user_exists_in_group("mysite", "editors", "jdoe")

    def test_failed_membership_does_not_stop_others(self, reconciliation, store, tenants):
        user = reconciliation.reconcile(identity(("missing", "editors"), ("mysite", "editors")))

        assert user.username == "jdoe"
        assert [g.name for g in store.user_groups("jdoe")] == ["editors"]

    def test_credential_is_not_stored_by_default(self, reconciliation, store, tenants):
        reconciliation.reconcile(identity(), credential="secret")

        assert not verify_password("secret", store.get_user("jdoe").password_hash)

    def test_credential_is_stored_when_enabled(
        self, store, activity_service, directory_config, tenants
    ):
        config = directory_config.model_copy(update={"store_directory_credential": True})
        service = ReconciliationService(store, activity_service, config, "studio_root")

        service.reconcile(identity(), credential="secret")

        assert verify_password("secret", store.get_user("jdoe").password_hash)


class TestReconcileWithMockStore:
    """Race outcomes reported by the store are treated as success."""

    @pytest.fixture
    def mock_store(self) -> Mock:
        store = Mock()
        store.user_exists.return_value = False
        store.create_user.return_value = True
        store.group_exists.return_value = False
        store.user_exists_in_group.return_value = False
        store.add_user_to_group.return_value = True
        store.get_user.return_value = User(username="jdoe", password_hash="!x")
        return store

    def test_group_created_concurrently(self, mock_store, directory_config):
        mock_store.create_group.side_effect = GroupAlreadyExistsError("exists")
        activity = Mock()
        service = ReconciliationService(mock_store, activity, directory_config, "studio_root")

        service.reconcile(identity(("mysite", "editors")))

        mock_store.add_user_to_group.assert_called_once_with("mysite", "editors", "jdoe")
        mock_store.rollback.assert_not_called()

    def test_user_created_concurrently_falls_back_to_update(self, mock_store, directory_config):
        mock_store.create_user.side_effect = UserAlreadyExistsError("exists")
        mock_store.update_user.return_value = False
        activity = Mock()
        service = ReconciliationService(mock_store, activity, directory_config, "studio_root")

        service.reconcile(identity())

        mock_store.update_user.assert_called_once()
        activity.record.assert_not_called()

    def test_membership_error_is_isolated(self, mock_store, directory_config):
        mock_store.add_user_to_group.side_effect = [TenantNotFoundError("gone"), True]
        activity = Mock()
        service = ReconciliationService(mock_store, activity, directory_config, "studio_root")

        service.reconcile(identity(("gone", "editors"), ("mysite", "editors")))

        assert mock_store.add_user_to_group.call_count == 2
        mock_store.rollback.assert_called_once()
