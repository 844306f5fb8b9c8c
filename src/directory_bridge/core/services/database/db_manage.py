"""Schema management for the application database."""

from loguru import logger
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel


class DbManageService:
    def __init__(self, engine: Engine):
        self._engine = engine

    def create_all(self) -> None:
        """Create all database tables."""
        from src.directory_bridge.entities.core.activity import ActivityTable  # noqa: F401
        from src.directory_bridge.entities.core.group import (  # noqa: F401
            GroupMembershipTable,
            GroupTable,
        )
        from src.directory_bridge.entities.core.tenant import TenantTable  # noqa: F401
        from src.directory_bridge.entities.core.user import UserTable  # noqa: F401

        SQLModel.metadata.create_all(self._engine)
        logger.info("Database initialized with tables.")
