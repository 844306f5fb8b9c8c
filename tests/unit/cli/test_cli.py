"""Tests for the administration CLI against a temporary SQLite database."""

from unittest.mock import Mock

import pytest
from typer.testing import CliRunner

from src.cli import app
from src.directory_bridge.runtime.config.config_data import (
    ConfigData,
    DatabaseConfig,
    DirectoryConfig,
)
from src.directory_bridge.runtime.context import with_context

runner = CliRunner()


@pytest.fixture(autouse=True)
def logging_setup(monkeypatch) -> Mock:
    setup = Mock()
    monkeypatch.setattr("src.cli.configure_logging", setup)
    return setup


@pytest.fixture
def cli_config(tmp_path):
    override = ConfigData(
        database=DatabaseConfig(url=f"sqlite:///{tmp_path / 'cli.db'}"),
        directory=DirectoryConfig(enabled=False),
    )
    with with_context(override):
        assert runner.invoke(app, ["init-db"]).exit_code == 0
        yield


def test_tenants_add_and_list(cli_config):
    assert runner.invoke(app, ["tenants", "add", "mysite", "--name", "My Site"]).exit_code == 0

    result = runner.invoke(app, ["tenants", "list"])

    assert result.exit_code == 0
    assert "mysite" in result.stdout


def test_duplicate_tenant_fails(cli_config):
    runner.invoke(app, ["tenants", "add", "mysite"])

    assert runner.invoke(app, ["tenants", "add", "mysite"]).exit_code == 1


def test_local_user_can_log_in(cli_config):
    added = runner.invoke(app, ["users", "add", "admin", "--password", "pw", "--email", "admin@example.com"])
    assert added.exit_code == 0

    result = runner.invoke(app, ["login", "admin", "--password", "pw"])

    assert result.exit_code == 0
    assert "local" in result.stdout


def test_bad_login_exits_with_error(cli_config):
    result = runner.invoke(app, ["login", "ghost", "--password", "pw"])

    assert result.exit_code == 1


def test_groups_of_unknown_user(cli_config):
    assert runner.invoke(app, ["users", "groups", "ghost"]).exit_code == 1


def test_verbose_flag_logs_at_debug(cli_config, logging_setup):
    assert runner.invoke(app, ["--verbose", "tenants", "list"]).exit_code == 0

    logging_setup.assert_called_with(level="DEBUG")
