"""User database table model."""

from sqlmodel import Field

from src.directory_bridge.entities.core._base import EntityTable


class UserTable(EntityTable, table=True):
    """Database persistence model for users.

    The unique index on ``username`` is what makes concurrent first logins of
    the same principal collapse into a single row.
    """

    username: str = Field(unique=True, index=True, max_length=255)
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    password_hash: str
    enabled: bool = True
    externally_managed: bool = False
