"""Process-wide logging setup shared by the API server and the admin CLI."""

import logging
import sys
from pathlib import Path

from loguru import logger

from src.directory_bridge.runtime.config.config_data import ConfigData, LoggingConfig
from src.directory_bridge.runtime.context import get_config

PLAIN_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "[<cyan>{extra[request_id]}</cyan>] | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


class InterceptHandler(logging.Handler):
    """Forward stdlib ``logging`` records (ldap3, SQLAlchemy, uvicorn) to Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        # Request logging happens in middleware
        if record.name == "uvicorn.access":
            return

        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        logger.opt(depth=2, exception=record.exc_info).bind(
            logger_name=record.name
        ).log(level, record.getMessage())


def _add_file_sink(cfg: LoggingConfig, level: str, verbose_traces: bool) -> None:
    path = Path(cfg.file)
    path.parent.mkdir(parents=True, exist_ok=True)
    is_json = cfg.format == "json"
    logger.add(
        str(path),
        level=level,
        format="{message}" if is_json else PLAIN_FORMAT,
        serialize=is_json,
        rotation=f"{cfg.max_size_mb} MB",
        retention=cfg.backup_count,
        compression="zip",
        enqueue=True,
        backtrace=verbose_traces,
        diagnose=verbose_traces,
    )


def _route_stdlib_logging(library_levels: dict[str, str]) -> None:
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    for name in list(logging.root.manager.loggerDict.keys()):
        stdlog = logging.getLogger(name)
        stdlog.handlers = []
        stdlog.propagate = True

    for name, level in library_levels.items():
        logging.getLogger(name).setLevel(level.upper())
    logging.getLogger("uvicorn.access").setLevel(logging.CRITICAL)


def configure_logging(config: ConfigData | None = None, level: str | None = None) -> None:
    """Replace Loguru's default sink with the configured ones.

    Args:
        config: Configuration to read; defaults to the current context's.
        level: Overrides ``logging.level`` (the CLI's ``--verbose`` uses it).
    """
    main_config = config or get_config()
    cfg = main_config.logging
    env = main_config.app.environment
    level = (level or cfg.level).upper()
    # Variable values in tracebacks can include credentials
    verbose_traces = env != "production"

    logger.remove()
    logger.configure(
        extra={"request_id": "-"},
        patcher=lambda record: record["extra"].setdefault("request_id", "-"),
    )

    logger.add(
        sys.stderr,
        level=level,
        format=PLAIN_FORMAT,
        colorize=True,
        backtrace=verbose_traces,
        diagnose=verbose_traces,
    )
    if cfg.file:
        _add_file_sink(cfg, level, verbose_traces)

    _route_stdlib_logging(cfg.library_levels)

    logger.bind(log_format=cfg.format, log_file=cfg.file, environment=env).info(
        "Logging configured at {}", level
    )
