from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from src.directory_bridge.entities.core.activity import (
    Activity,
    ActivityRepository,
    ActivitySource,
    ActivityType,
)

CONTENT_TYPE_KEY = "contentType"
CONTENT_TYPE_USER = "user"


class ActivityService:
    """Records audit trail entries.

    Recording never fails the caller: a storage error is logged and dropped.
    """

    def __init__(self, db_session: Session):
        self._db_session = db_session
        self._repository = ActivityRepository(db_session)

    def record(
        self,
        tenant_key: str,
        actor: str,
        subject: str,
        activity_type: ActivityType,
        source: ActivitySource = ActivitySource.API,
        extra_info: dict[str, str] | None = None,
    ) -> None:
        activity = Activity(
            tenant_key=tenant_key,
            actor=actor,
            subject=subject,
            activity_type=activity_type,
            source=source,
            extra_info=extra_info or {},
        )
        try:
            self._repository.create(activity)
            self._db_session.commit()
        except SQLAlchemyError as e:
            self._db_session.rollback()
            logger.error(
                "Failed to record {} activity for {} in tenant {}: {}",
                activity_type.value,
                subject,
                tenant_key,
                e,
            )
            return

        logger.debug(
            "Recorded {} activity: {} -> {} in tenant {}",
            activity_type.value,
            actor,
            subject,
            tenant_key,
        )

    def recent(self, tenant_key: str | None = None, limit: int = 50) -> list[Activity]:
        return self._repository.list_recent(tenant_key=tenant_key, limit=limit)
