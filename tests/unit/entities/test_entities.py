"""Unit tests for entity models and repositories."""

from uuid import UUID

from src.directory_bridge.entities.core.activity import (
    Activity,
    ActivityRepository,
    ActivitySource,
    ActivityType,
)
from src.directory_bridge.entities.core.user import User, UserRepository


class TestUser:
    def test_user_creation_with_defaults(self):
        """User should be created with auto-generated UUID."""
        user = User(username="jdoe", password_hash="!x")

        UUID(user.id)  # Raises ValueError if invalid
        assert user.enabled is True
        assert user.externally_managed is False

    def test_equality_ignores_timestamps(self):
        user = User(id="1", username="jdoe", password_hash="!x")
        later = user.model_copy(update={"updated_at": user.updated_at.replace(year=2030)})

        assert user == later
        assert hash(user) == hash(later)

    def test_password_hash_is_not_in_repr(self):
        assert "secret-hash" not in repr(User(username="jdoe", password_hash="secret-hash"))


class TestUserRepository:
    def test_create_and_list(self, session):
        repo = UserRepository(session)
        repo.create(User(username="bob", password_hash="!x"))
        repo.create(User(username="alice", password_hash="!x"))

        assert [u.username for u in repo.list_all()] == ["alice", "bob"]
        assert repo.exists("alice")
        assert repo.get_by_username("carol") is None


class TestActivityRepository:
    def test_extra_info_round_trips_and_filters_by_tenant(self, session):
        repo = ActivityRepository(session)
        repo.create(
            Activity(
                tenant_key="mysite",
                actor="LDAP",
                subject="jdoe > editors",
                activity_type=ActivityType.ADD_USER_TO_GROUP,
                extra_info={"contentType": "user"},
            )
        )
        repo.create(
            Activity(tenant_key="studio_root", actor="jdoe", subject="jdoe", activity_type=ActivityType.CREATED)
        )

        entries = repo.list_recent(tenant_key="mysite")

        assert len(entries) == 1
        assert entries[0].extra_info == {"contentType": "user"}
        assert entries[0].source == ActivitySource.API
        assert len(repo.list_recent()) == 2
