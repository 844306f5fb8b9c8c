"""User entity package.

- User: Domain entity
- UserTable: Database persistence model
- UserRepository: Data access layer
"""

from .entity import User
from .repository import UserRepository
from .table import UserTable

__all__ = ["User", "UserTable", "UserRepository"]
