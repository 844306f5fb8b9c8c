"""Tenant domain entity."""

from pydantic import Field

from src.directory_bridge.entities.core._base import Entity


class Tenant(Entity):
    """A site or tenant that groups are scoped to.

    Tenants are provisioned outside the authentication flow; logins only look
    them up by key.
    """

    key: str = Field(description="Unique tenant key referenced by directory attributes")
    name: str | None = Field(default=None, description="Human readable name")
