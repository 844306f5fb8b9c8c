"""Group repository."""

from sqlmodel import Session, func, select

from .entity import Group
from .table import GroupMembershipTable, GroupTable


class GroupRepository:
    """Data-access layer for groups and group memberships."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_by_name(self, tenant_id: str, name: str) -> Group | None:
        statement = select(GroupTable).where(
            (GroupTable.tenant_id == tenant_id) & (GroupTable.name == name)
        )
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return Group.model_validate(row, from_attributes=True)

    def list_for_tenant(self, tenant_id: str) -> list[Group]:
        statement = (
            select(GroupTable)
            .where(GroupTable.tenant_id == tenant_id)
            .order_by(GroupTable.name)
        )
        return [
            Group.model_validate(row, from_attributes=True)
            for row in self._session.exec(statement).all()
        ]

    def list_for_user(self, user_id: str) -> list[Group]:
        statement = (
            select(GroupTable)
            .join(GroupMembershipTable, GroupMembershipTable.group_id == GroupTable.id)
            .where(GroupMembershipTable.user_id == user_id)
            .order_by(GroupTable.tenant_id, GroupTable.name)
        )
        return [
            Group.model_validate(row, from_attributes=True)
            for row in self._session.exec(statement).all()
        ]

    def create(self, group: Group) -> Group:
        row = GroupTable.model_validate(group, from_attributes=True)
        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return Group.model_validate(row, from_attributes=True)

    def has_member(self, group_id: str, user_id: str) -> bool:
        statement = select(GroupMembershipTable.id).where(
            (GroupMembershipTable.group_id == group_id)
            & (GroupMembershipTable.user_id == user_id)
        )
        return self._session.exec(statement).first() is not None

    def add_member(self, group_id: str, user_id: str) -> None:
        self._session.add(GroupMembershipTable(group_id=group_id, user_id=user_id))
        self._session.flush()

    def count_members(self, group_id: str) -> int:
        statement = (
            select(func.count())
            .select_from(GroupMembershipTable)
            .where(GroupMembershipTable.group_id == group_id)
        )
        return self._session.exec(statement).one()
