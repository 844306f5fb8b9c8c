"""Tests for the Loguru logging setup."""

import logging
import sys

import pytest
from loguru import logger

from src.directory_bridge.api.utils.app_startup import configure_logging
from src.directory_bridge.runtime.config.config_data import ConfigData, LoggingConfig


@pytest.fixture
def log_file(tmp_path):
    path = tmp_path / "logs" / "bridge.log"
    yield path
    logger.remove()
    logger.add(sys.stderr)
    logging.root.handlers = []
    logging.root.setLevel(logging.WARNING)


def test_library_records_are_routed_by_configured_level(log_file):
    config = ConfigData(logging=LoggingConfig(file=str(log_file), level="DEBUG"))

    configure_logging(config)
    logging.getLogger("ldap3").info("ldap chatter")
    logging.getLogger("ldap3").warning("ldap trouble")
    logger.info("bridge message")
    logger.complete()

    content = log_file.read_text()
    assert "ldap trouble" in content
    assert "bridge message" in content
    assert "ldap chatter" not in content


def test_level_override(log_file):
    config = ConfigData(logging=LoggingConfig(file=str(log_file), level="WARNING"))

    configure_logging(config, level="debug")
    logger.debug("debug detail")
    logger.complete()

    assert "debug detail" in log_file.read_text()
