"""FastAPI application factory and setup."""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from starlette.responses import JSONResponse

from src.directory_bridge.api.http.app_data import ApplicationDependencies
from src.directory_bridge.api.http.routers.auth import router as auth_router
from src.directory_bridge.api.http.routers.health import router as health_router
from src.directory_bridge.api.utils.app_startup import configure_logging
from src.directory_bridge.core.exceptions import (
    AuthenticationSystemError,
    BadCredentialsError,
)
from src.directory_bridge.runtime.config.config_data import ConfigData
from src.directory_bridge.runtime.context import get_config


async def bad_credentials_handler(request: Request, exc: BadCredentialsError) -> JSONResponse:
    return JSONResponse(status_code=401, content={"detail": str(exc)})


async def authentication_system_error_handler(
    request: Request, exc: AuthenticationSystemError
) -> JSONResponse:
    logger.bind(cause=repr(exc.__cause__)).error("Authentication system error: {}", exc)
    return JSONResponse(status_code=503, content={"detail": str(exc)})


async def log_requests(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    client_ip = request.client.host if request.client else "unknown"

    start = time.perf_counter()
    with logger.contextualize(
        request_id=request_id,
        method=request.method,
        path=request.url.path,
        client_ip=client_ip,
    ):
        logger.info("request.start")
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        logger.bind(
            status_code=response.status_code,
            duration_ms=round(duration_ms, 1),
        ).info("request.end")

    response.headers.setdefault("X-Request-ID", request_id)
    return response


def create_app(
    config: ConfigData | None = None,
    dependencies: ApplicationDependencies | None = None,
) -> FastAPI:
    """Build the application.

    Args:
        config: Configuration to use; defaults to the current context's.
        dependencies: Pre-built services. When omitted they are built from
            ``config`` at startup.
    """
    main_config = config or get_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "app_dependencies", None) is None:
            app.state.app_dependencies = ApplicationDependencies.from_config(main_config)
        logger.info(
            "Starting up application in {} environment (directory {})",
            main_config.app.environment,
            "enabled" if main_config.directory.enabled else "disabled",
        )
        try:
            yield
        finally:
            logger.info("Shutting down application")

    is_production = main_config.app.environment == "production"
    app = FastAPI(
        title="Directory Auth Bridge",
        lifespan=lifespan,
        docs_url=None if is_production else "/docs",
        redoc_url=None if is_production else "/redoc",
    )
    app.state.app_dependencies = dependencies

    cors = main_config.app.cors
    if is_production and "*" in cors.origins:
        raise RuntimeError(
            "CORS misconfigured: cannot use '*' with allow_credentials=True in production"
        )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors.origins,
        allow_credentials=cors.allow_credentials,
        allow_methods=cors.allow_methods,
        allow_headers=cors.allow_headers,
    )
    app.middleware("http")(log_requests)

    app.add_exception_handler(BadCredentialsError, bad_credentials_handler)
    app.add_exception_handler(AuthenticationSystemError, authentication_system_error_handler)

    app.include_router(auth_router)
    app.include_router(health_router)
    return app


def main() -> None:
    import uvicorn

    configure_logging()
    config = get_config()
    uvicorn.run(
        create_app(config),
        host=config.app.host,
        port=config.app.port,
        access_log=False,  # Access logging happens in middleware
    )


if __name__ == "__main__":
    main()
