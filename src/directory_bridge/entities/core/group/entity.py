"""Group domain entity."""

from pydantic import Field

from src.directory_bridge.entities.core._base import Entity


class Group(Entity):
    """A named group of users within one tenant."""

    tenant_id: str = Field(description="Internal identifier of the owning tenant")
    name: str = Field(description="Group name, unique within the tenant")
    description: str | None = Field(default=None, description="Group description")
    externally_managed: bool = Field(
        default=False, description="Whether the directory owns this group"
    )
