"""User domain entity."""

from typing import Any

from pydantic import Field

from src.directory_bridge.entities.core._base import Entity


class User(Entity):
    """A person able to log in, either locally or through the directory.

    Directory-sourced users are marked ``externally_managed``; their profile
    fields are overwritten from the directory on every successful login.
    """

    username: str = Field(description="Unique login name")
    first_name: str | None = Field(default=None, description="User's first name")
    last_name: str | None = Field(default=None, description="User's last name")
    email: str | None = Field(default=None, description="User's email address")
    password_hash: str = Field(description="Hash of the local credential", repr=False)
    enabled: bool = Field(default=True, description="Whether the user may log in")
    externally_managed: bool = Field(
        default=False, description="Whether the directory owns this record"
    )

    def __eq__(self, other: Any) -> bool:
        """Compare users by business attributes, ignoring timestamps."""
        if not isinstance(other, User):
            return False

        return (
            self.id == other.id
            and self.username == other.username
            and self.first_name == other.first_name
            and self.last_name == other.last_name
            and self.email == other.email
            and self.enabled == other.enabled
            and self.externally_managed == other.externally_managed
        )

    def __hash__(self) -> int:
        """Hash based on business attributes, ignoring timestamps."""
        return hash((
            self.id,
            self.username,
            self.first_name,
            self.last_name,
            self.email,
            self.enabled,
            self.externally_managed,
        ))
