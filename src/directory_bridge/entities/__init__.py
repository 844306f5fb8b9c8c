"""Entities module with entity-centric structure.

Each entity has its own package containing:
- entity.py: Domain model
- table.py: Database persistence model
- repository.py: Data access layer
"""

from .core.activity import Activity, ActivityRepository, ActivityTable
from .core.group import (
    Group,
    GroupMembershipTable,
    GroupRepository,
    GroupTable,
)
from .core.tenant import Tenant, TenantRepository, TenantTable
from .core.user import User, UserRepository, UserTable

__all__ = [
    "Activity",
    "ActivityRepository",
    "ActivityTable",
    "Group",
    "GroupMembershipTable",
    "GroupRepository",
    "GroupTable",
    "Tenant",
    "TenantRepository",
    "TenantTable",
    "User",
    "UserRepository",
    "UserTable",
]
