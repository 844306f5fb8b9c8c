"""User repository."""

from datetime import UTC, datetime

from sqlmodel import Session, select

from .entity import User
from .table import UserTable


class UserRepository:
    """Data-access layer for users."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_by_username(self, username: str) -> User | None:
        statement = select(UserTable).where(UserTable.username == username)
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return User.model_validate(row, from_attributes=True)

    def exists(self, username: str) -> bool:
        statement = select(UserTable.id).where(UserTable.username == username)
        return self._session.exec(statement).first() is not None

    def list_all(self) -> list[User]:
        rows = self._session.exec(select(UserTable).order_by(UserTable.username)).all()
        return [User.model_validate(row, from_attributes=True) for row in rows]

    def create(self, user: User) -> User:
        row = UserTable.model_validate(user, from_attributes=True)
        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return User.model_validate(row, from_attributes=True)

    def update(self, user: User) -> User:
        row = self._session.get(UserTable, user.id)
        if row is None:
            raise ValueError(f"User {user.id} not found")

        for field in (
            "first_name",
            "last_name",
            "email",
            "password_hash",
            "enabled",
            "externally_managed",
        ):
            setattr(row, field, getattr(user, field))
        row.updated_at = datetime.now(UTC)

        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return User.model_validate(row, from_attributes=True)
