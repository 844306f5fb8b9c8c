"""Health check endpoint."""

from typing import Any

from fastapi import APIRouter, Depends
from starlette.responses import JSONResponse

from src.directory_bridge.api.http.app_data import ApplicationDependencies
from src.directory_bridge.api.http.deps import get_app_dependencies
from src.directory_bridge.core.storage import RedisSessionStorage

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=None)
def health(
    app_deps: ApplicationDependencies = Depends(get_app_dependencies),
) -> dict[str, Any] | JSONResponse:
    """Report database and session storage status.

    Returns 503 when the database is unreachable. Session storage is reported
    but never fails the check.
    """
    db_healthy = app_deps.database_service.health_check()
    storage = app_deps.session_storage

    checks = {
        "database": {"status": "healthy" if db_healthy else "unhealthy"},
        "session_storage": {
            "status": "healthy" if storage.is_available() else "degraded",
            "type": "redis" if isinstance(storage, RedisSessionStorage) else "in-memory",
        },
        "directory": {"enabled": app_deps.config.directory.enabled},
    }

    body = {"status": "healthy" if db_healthy else "unhealthy", "checks": checks}
    if not db_healthy:
        return JSONResponse(status_code=503, content=body)
    return body
