"""Tests for configuration loading and the application context."""

import re
from pathlib import Path

import pytest
from pydantic import ValidationError

from src.directory_bridge.runtime.config.config_data import ConfigData, DirectoryConfig
from src.directory_bridge.runtime.config.config_template import (
    load_templated_yaml,
    substitute_env_vars,
)
from src.directory_bridge.runtime.context import get_config, with_context

CONFIG_YAML = """
config:
  app:
    environment: "test"
  directory:
    url: "${LDAP_URL:-ldap://localhost:389}"
    tenant_id_regex: "^([^:]+)(?::(.+))?$"
    tenant_id_match_index: 1
    tenant_id_group_name_match_index: 2
    group_name_regex: "^cn=([^,]+),.*$"
    group_name_match_index: 1
"""


def write_config(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(text)
    return path


class TestSubstitution:
    def test_default_value(self, monkeypatch):
        monkeypatch.delenv("LDAP_URL", raising=False)

        assert substitute_env_vars("${LDAP_URL:-ldap://fallback}") == "ldap://fallback"

    def test_environment_wins(self, monkeypatch):
        monkeypatch.setenv("LDAP_URL", "ldaps://ldap.corp:636")

        assert substitute_env_vars("${LDAP_URL:-ldap://fallback}") == "ldaps://ldap.corp:636"

    def test_required_variable_missing(self, monkeypatch):
        monkeypatch.delenv("LDAP_BIND_PASSWORD", raising=False)

        with pytest.raises(ValueError):
            substitute_env_vars("${LDAP_BIND_PASSWORD}")


class TestLoadTemplatedYaml:
    def test_directory_section(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LDAP_URL", "ldap://ldap.test")

        config = load_templated_yaml(write_config(tmp_path, CONFIG_YAML))

        assert config.directory.url == "ldap://ldap.test"
        assert isinstance(config.directory.tenant_id_regex, re.Pattern)
        assert config.directory.tenant_id_regex.groups == 2
        assert config.directory.attributes.tenant_id == "crafterSite"

    def test_malformed_regex_is_rejected(self, tmp_path):
        text = CONFIG_YAML.replace('"^cn=([^,]+),.*$"', '"^cn=([^,]+"')

        with pytest.raises(ValueError):
            load_templated_yaml(write_config(tmp_path, text))

    def test_primary_index_beyond_groups_is_rejected(self, tmp_path):
        text = CONFIG_YAML.replace("group_name_match_index: 1", "group_name_match_index: 3")

        with pytest.raises(ValueError):
            load_templated_yaml(write_config(tmp_path, text))

    def test_empty_file_is_rejected(self, tmp_path):
        with pytest.raises(ValueError):
            load_templated_yaml(write_config(tmp_path, ""))


class TestDirectoryConfig:
    def test_defaults_match_whole_value(self):
        config = DirectoryConfig()

        assert config.tenant_id_regex.pattern == ".*"
        assert config.tenant_id_match_index == 0
        assert config.store_directory_credential is False

    def test_secondary_index_is_not_checked(self):
        """An out-of-range secondary index just means no embedded group."""
        config = DirectoryConfig(tenant_id_regex="^(.+)$", tenant_id_match_index=1, tenant_id_group_name_match_index=4)

        assert config.tenant_id_group_name_match_index == 4

    def test_negative_index_is_rejected(self):
        with pytest.raises(ValidationError):
            DirectoryConfig(group_name_match_index=-1)


class TestContext:
    def test_override_is_scoped(self):
        original = get_config().directory.default_tenant_key

        with with_context(ConfigData(directory=DirectoryConfig(default_tenant_key="acme"))):
            assert get_config().directory.default_tenant_key == "acme"

        assert get_config().directory.default_tenant_key == original

    def test_rejects_non_config(self):
        with pytest.raises(ValueError):
            with with_context({"directory": {}}):
                pass
