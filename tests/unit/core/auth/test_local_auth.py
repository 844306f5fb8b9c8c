"""Unit tests for authentication against locally stored credentials."""

import pytest

from src.directory_bridge.core.exceptions import BadCredentialsError


class TestLocalAuthenticator:
    def test_valid_credentials_issue_local_session(
        self, store, local_authenticator, user_session_service
    ):
        store.create_user("admin", "s3cret", None, None, None)

        token = local_authenticator.authenticate("admin", "s3cret")

        user_session = user_session_service.get_user_session(token)
        assert user_session.username == "admin"
        assert user_session.auth_source == "local"

    def test_unknown_user(self, local_authenticator):
        with pytest.raises(BadCredentialsError):
            local_authenticator.authenticate("ghost", "whatever")

    def test_wrong_password(self, store, local_authenticator):
        store.create_user("admin", "s3cret", None, None, None)

        with pytest.raises(BadCredentialsError):
            local_authenticator.authenticate("admin", "wrong")

    def test_disabled_user(self, store, local_authenticator):
        store.create_user("admin", "s3cret", None, None, None)
        user = store.get_user("admin")
        store._users.update(user.model_copy(update={"enabled": False}))

        with pytest.raises(BadCredentialsError):
            local_authenticator.authenticate("admin", "s3cret")

    def test_directory_user_without_stored_credential(self, store, local_authenticator):
        store.create_user("jdoe", None, None, None, "jdoe@example.com", externally_managed=True)

        with pytest.raises(BadCredentialsError):
            local_authenticator.authenticate("jdoe", "")
