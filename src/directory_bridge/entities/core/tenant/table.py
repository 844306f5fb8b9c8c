"""Tenant database table model."""

from sqlmodel import Field

from src.directory_bridge.entities.core._base import EntityTable


class TenantTable(EntityTable, table=True):
    """Database persistence model for tenants."""

    key: str = Field(unique=True, index=True, max_length=255)
    name: str | None = None
