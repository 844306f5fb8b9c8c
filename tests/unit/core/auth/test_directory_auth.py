"""Unit tests for the directory-first login flow."""

from unittest.mock import Mock

import pytest
from sqlalchemy.exc import OperationalError

from src.directory_bridge.core.exceptions import (
    AuthenticationSystemError,
    BadCredentialsError,
    ConfigurationError,
    DirectoryError,
    DirectoryUnavailableError,
)
from src.directory_bridge.core.services import (
    DirectoryAuthenticationService,
    build_authentication_service,
)
from src.directory_bridge.entities.core.activity import ActivityType


class TestDirectorySuccess:
    def test_login_imports_user_and_issues_session(
        self, auth_service, store, user_session_service, fake_directory
    ):
        token = auth_service.authenticate("jdoe", "secret")

        user_session = user_session_service.get_user_session(token)
        assert user_session.username == "jdoe"
        assert user_session.auth_source == "directory"
        assert fake_directory.calls == [("uid", "jdoe")]

        user = store.get_user("jdoe")
        assert user.externally_managed is True
        assert user.first_name == "John"
        assert sorted(g.name for g in store.user_groups("jdoe")) == ["editors", "reviewers"]

    def test_repeated_login_converges(self, auth_service, store, activity_service):
        auth_service.authenticate("jdoe", "secret")
        auth_service.authenticate("jdoe", "secret")

        types = [a.activity_type for a in activity_service.recent(limit=100)]
        assert types.count(ActivityType.CREATED) == 1
        assert types.count(ActivityType.ADD_USER_TO_GROUP) == 2
        assert types.count(ActivityType.UPDATED) == 0
        assert types.count(ActivityType.LOGIN) == 2
        assert len(store.user_groups("jdoe")) == 2

    def test_attribute_changes_are_applied(self, auth_service, store, fake_directory, jdoe_attributes):
        auth_service.authenticate("jdoe", "secret")
        jdoe_attributes["crafterSite"] = ["othersite"]
        fake_directory.add("jdoe", "secret", jdoe_attributes)

        auth_service.authenticate("jdoe", "secret")

        tenant_ids = {g.tenant_id for g in store.user_groups("jdoe")}
        assert store.get_tenant("othersite").id in tenant_ids

    def test_unresolvable_group_attribute_still_logs_in(
        self, auth_service, store, fake_directory, jdoe_attributes, user_session_service
    ):
        jdoe_attributes["crafterSite"] = ["mysite"]
        jdoe_attributes["crafterGroup"] = ["not-a-group-dn"]
        fake_directory.add("jdoe", "secret", jdoe_attributes)

        token = auth_service.authenticate("jdoe", "secret")

        assert user_session_service.get_user_session(token).username == "jdoe"
        assert store.get_user("jdoe") is not None
        assert store.user_groups("jdoe") == []

    def test_failing_tenant_lookup_is_skipped(
        self, auth_service, store, monkeypatch, user_session_service
    ):
        def broken_lookup(tenant_key):
            raise OperationalError("SELECT", {}, Exception("db gone"))

        monkeypatch.setattr(store, "get_tenant", broken_lookup)

        token = auth_service.authenticate("jdoe", "secret")

        assert user_session_service.get_user_session(token).auth_source == "directory"
        assert store.get_user("jdoe") is not None
        assert store.user_groups("jdoe") == []


class TestDirectoryFailures:
    def test_rejected_credential_does_not_fall_back(self, auth_service, store):
        store.create_user("jdoe", "secret-local", None, None, None)

        with pytest.raises(BadCredentialsError):
            auth_service.authenticate("jdoe", "secret-local")

    def test_unexpected_directory_error(self, auth_service, fake_directory):
        cause = DirectoryError("size limit exceeded")
        fake_directory.error = cause

        with pytest.raises(AuthenticationSystemError) as exc_info:
            auth_service.authenticate("jdoe", "secret")

        assert exc_info.value.__cause__ is cause
        assert str(exc_info.value) == "Authentication failed with the directory"

    def test_missing_email_is_a_system_error(self, auth_service, store, fake_directory, jdoe_attributes):
        del jdoe_attributes["mail"]
        fake_directory.add("jdoe", "secret", jdoe_attributes)

        with pytest.raises(AuthenticationSystemError, match="Failed to retrieve directory user details"):
            auth_service.authenticate("jdoe", "secret")

        assert store.get_user("jdoe") is None

    def test_mapping_configuration_error(self, auth_service):
        auth_service._mapper = Mock()
        auth_service._mapper.map_authenticated_principal.side_effect = ConfigurationError("bad index")

        with pytest.raises(AuthenticationSystemError) as exc_info:
            auth_service.authenticate("jdoe", "secret")

        assert isinstance(exc_info.value.__cause__, ConfigurationError)

    def test_user_import_failure_is_a_system_error(self, auth_service):
        auth_service._reconciliation = Mock()
        auth_service._reconciliation.reconcile.side_effect = OperationalError("INSERT", {}, Exception("db down"))

        with pytest.raises(AuthenticationSystemError):
            auth_service.authenticate("jdoe", "secret")


class TestLocalFallback:
    def test_unknown_principal_falls_back(self, auth_service, store, user_session_service):
        store.create_user("admin", "admin-pw", None, None, None)

        token = auth_service.authenticate("admin", "admin-pw")

        assert user_session_service.get_user_session(token).auth_source == "local"

    def test_unavailable_directory_falls_back(self, auth_service, store, fake_directory, user_session_service):
        fake_directory.error = DirectoryUnavailableError("connection refused")
        store.create_user("admin", "admin-pw", None, None, None)

        token = auth_service.authenticate("admin", "admin-pw")

        assert user_session_service.get_user_session(token).username == "admin"

    def test_fallback_result_propagates_unchanged(self, auth_service, fake_directory):
        fake_directory.error = DirectoryUnavailableError("connection refused")

        with pytest.raises(BadCredentialsError):
            auth_service.authenticate("ghost", "whatever")

    def test_fallback_writes_nothing(self, fake_directory, store, tenants, directory_config):
        fake_directory.error = DirectoryUnavailableError("connection refused")
        reconciliation = Mock()
        local = Mock()
        local.authenticate.return_value = "local-token"
        service = DirectoryAuthenticationService(
            directory_client=fake_directory,
            identity_mapper=Mock(),
            store=store,
            reconciliation=reconciliation,
            session_service=Mock(),
            local_authenticator=local,
            config=directory_config,
        )

        assert service.authenticate("admin", "pw") == "local-token"

        local.authenticate.assert_called_once_with("admin", "pw")
        reconciliation.reconcile.assert_not_called()

    def test_disabled_directory_goes_straight_to_local(
        self, auth_service, store, fake_directory, directory_config
    ):
        auth_service._config = directory_config.model_copy(update={"enabled": False})
        store.create_user("admin", "admin-pw", None, None, None)

        auth_service.authenticate("admin", "admin-pw")

        assert fake_directory.calls == []


def test_built_service_logs_in_and_audits(
    session, app_config, user_session_service, fake_directory, identity_mapper, tenants, activity_service
):
    service = build_authentication_service(
        session, app_config, user_session_service, fake_directory, identity_mapper
    )

    token = service.authenticate("jdoe", "secret")

    assert user_session_service.get_user_session(token).auth_source == "directory"
    logins = [a for a in activity_service.recent(limit=100) if a.activity_type == ActivityType.LOGIN]
    assert [a.tenant_key for a in logins] == [app_config.app.system_tenant_key]
