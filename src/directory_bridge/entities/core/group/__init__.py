"""Group entity package.

- Group: Domain entity
- GroupTable / GroupMembershipTable: Database persistence models
- GroupRepository: Data access layer for groups and their members
"""

from .entity import Group
from .repository import GroupRepository
from .table import GroupMembershipTable, GroupTable

__all__ = ["Group", "GroupTable", "GroupMembershipTable", "GroupRepository"]
