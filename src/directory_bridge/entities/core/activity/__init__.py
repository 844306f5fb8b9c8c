"""Activity (audit trail) entity package."""

from .entity import Activity, ActivitySource, ActivityType
from .repository import ActivityRepository
from .table import ActivityTable

__all__ = [
    "Activity",
    "ActivitySource",
    "ActivityType",
    "ActivityTable",
    "ActivityRepository",
]
