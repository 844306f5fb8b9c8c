"""Activity database table model."""

from sqlalchemy import JSON, Column
from sqlmodel import Field

from src.directory_bridge.entities.core._base import EntityTable


class ActivityTable(EntityTable, table=True):
    """Database persistence model for audit trail entries."""

    tenant_key: str = Field(index=True, max_length=255)
    actor: str = Field(max_length=255)
    subject: str = Field(max_length=512)
    activity_type: str = Field(index=True, max_length=64)
    source: str = Field(max_length=32)
    extra_info: dict = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
