"""Group database table models."""

from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from src.directory_bridge.entities.core._base import EntityTable


class GroupTable(EntityTable, table=True):
    """Database persistence model for groups."""

    __table_args__ = (
        UniqueConstraint("tenant_id", "name", name="uq_group_tenant_name"),
    )

    tenant_id: str = Field(foreign_key="tenanttable.id", index=True)
    name: str = Field(max_length=255)
    description: str | None = None
    externally_managed: bool = False


class GroupMembershipTable(EntityTable, table=True):
    """Link between a user and a group."""

    __table_args__ = (
        UniqueConstraint("group_id", "user_id", name="uq_membership_group_user"),
    )

    group_id: str = Field(foreign_key="grouptable.id", index=True)
    user_id: str = Field(foreign_key="usertable.id", index=True)
