"""Activity repository."""

from sqlmodel import Session, select

from .entity import Activity
from .table import ActivityTable


class ActivityRepository:
    """Data-access layer for audit trail entries."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def create(self, activity: Activity) -> Activity:
        row = ActivityTable(
            id=activity.id,
            tenant_key=activity.tenant_key,
            actor=activity.actor,
            subject=activity.subject,
            activity_type=activity.activity_type.value,
            source=activity.source.value,
            extra_info=dict(activity.extra_info),
        )
        self._session.add(row)
        self._session.flush()
        return activity

    def list_recent(self, tenant_key: str | None = None, limit: int = 50) -> list[Activity]:
        statement = select(ActivityTable)
        if tenant_key is not None:
            statement = statement.where(ActivityTable.tenant_key == tenant_key)
        statement = statement.order_by(ActivityTable.created_at.desc()).limit(limit)
        return [
            Activity.model_validate(row, from_attributes=True)
            for row in self._session.exec(statement).all()
        ]
