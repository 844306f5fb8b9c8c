"""Activity domain entity."""

from enum import Enum

from pydantic import Field

from src.directory_bridge.entities.core._base import Entity


class ActivityType(str, Enum):
    CREATED = "CREATED"
    UPDATED = "UPDATED"
    ADD_USER_TO_GROUP = "ADD_USER_TO_GROUP"
    LOGIN = "LOGIN"


class ActivitySource(str, Enum):
    API = "API"


class Activity(Entity):
    """One audit trail entry describing a change made on someone's behalf."""

    tenant_key: str = Field(description="Tenant the activity belongs to")
    actor: str = Field(description="Who performed the change")
    subject: str = Field(description="What the change was applied to")
    activity_type: ActivityType = Field(description="Kind of change")
    source: ActivitySource = Field(default=ActivitySource.API)
    extra_info: dict[str, str] = Field(default_factory=dict)
