"""Fake directory used in place of an LDAP server."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

import pytest

from src.directory_bridge.core.exceptions import (
    DirectoryInvalidCredentialsError,
    DirectoryPrincipalNotFoundError,
)


class FakeDirectoryClient:
    """In-memory directory holding ``username -> (password, attributes)``.

    Set ``error`` to make every call raise it instead.
    """

    def __init__(self) -> None:
        self.entries: dict[str, tuple[str, dict[str, list[str]]]] = {}
        self.error: Exception | None = None
        self.calls: list[tuple[str, str]] = []

    def add(self, username: str, password: str, attributes: Mapping[str, Sequence[str]]) -> None:
        self.entries[username] = (password, {k: list(v) for k, v in attributes.items()})

    def authenticate(self, filter_attribute: str, username: str, credential: str):
        self.calls.append((filter_attribute, username))
        if self.error is not None:
            raise self.error
        if username not in self.entries:
            raise DirectoryPrincipalNotFoundError(f"No entry for {username}")
        password, attributes = self.entries[username]
        if credential != password:
            raise DirectoryInvalidCredentialsError(f"Bad credential for {username}")
        return attributes


@pytest.fixture
def jdoe_attributes() -> dict[str, list[str]]:
    return {
        "uid": ["jdoe"],
        "mail": ["jdoe@example.com"],
        "givenName": ["John"],
        "sn": ["Doe"],
        "crafterSite": ["mysite:editors"],
        "crafterGroup": ["cn=reviewers,ou=groups,dc=example,dc=com"],
    }


@pytest.fixture
def fake_directory(jdoe_attributes: dict[str, list[str]]) -> FakeDirectoryClient:
    directory = FakeDirectoryClient()
    directory.add("jdoe", "secret", jdoe_attributes)
    return directory
