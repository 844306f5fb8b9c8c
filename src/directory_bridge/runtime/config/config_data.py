"""Pydantic models for parsing the config.yaml configuration file.

This module contains Pydantic models that correspond to the structure of config.yaml.
These models handle validation and type conversion of the YAML configuration data.
"""

from __future__ import annotations

import re
from typing import Literal

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator


class DirectoryAttributeNames(BaseModel):
    """Names of the directory attributes read for an authenticated principal."""

    model_config = ConfigDict(frozen=True)

    username: str = Field(default="uid", description="Attribute matched against the login name")
    email: str = Field(default="mail", description="Attribute holding the email address")
    first_name: str = Field(default="givenName", description="Attribute holding the first name")
    last_name: str = Field(default="sn", description="Attribute holding the last name")
    tenant_id: str = Field(
        default="crafterSite",
        description="Attribute holding tenant keys, optionally with an embedded group name",
    )
    group_name: str = Field(default="crafterGroup", description="Attribute holding group names")


class DirectoryConfig(BaseModel):
    """Directory (LDAP) connection and attribute mapping configuration.

    Built once when the configuration loads and passed by value into the
    attribute codec and identity mapper. Regex fields are compiled during
    validation, so a malformed pattern is rejected here rather than at login time.
    """

    model_config = ConfigDict(frozen=True)

    enabled: bool = Field(default=True, description="Authenticate against the directory")
    url: str = Field(default="ldap://localhost:389", description="Directory server URL")
    bind_dn: str | None = Field(default=None, description="Service account DN used for searches")
    bind_password: str | None = Field(default=None, description="Service account password")
    base_dn: str = Field(default="dc=example,dc=com", description="Search base for principals")
    connect_timeout: int = Field(default=10, description="Connect timeout in seconds")
    receive_timeout: int = Field(default=15, description="Receive timeout in seconds")

    attributes: DirectoryAttributeNames = Field(
        default_factory=DirectoryAttributeNames,
        description="Directory attribute names",
    )

    tenant_id_regex: re.Pattern = Field(
        default=re.compile(".*"),
        description="Full-match pattern decoding a tenant attribute value",
    )
    tenant_id_match_index: int = Field(
        default=0, ge=0, description="Capture group holding the tenant key"
    )
    tenant_id_group_name_match_index: int = Field(
        default=1,
        ge=0,
        description="Capture group holding a group name embedded in the tenant attribute",
    )
    group_name_regex: re.Pattern = Field(
        default=re.compile(".*"),
        description="Full-match pattern decoding a group attribute value",
    )
    group_name_match_index: int = Field(
        default=0, ge=0, description="Capture group holding the group name"
    )

    default_tenant_key: str = Field(
        default="default",
        description="Tenant assigned when the principal has no tenant attribute",
    )
    activity_actor: str = Field(
        default="LDAP", description="Actor recorded for directory-driven membership changes"
    )
    store_directory_credential: bool = Field(
        default=False,
        description="Store a hash of the directory credential on first import "
        "so the local fallback keeps working while the directory is down",
    )

    @model_validator(mode="after")
    def _check_primary_indices(self) -> DirectoryConfig:
        if self.tenant_id_match_index > self.tenant_id_regex.groups:
            raise ValueError(
                f"tenant_id_match_index {self.tenant_id_match_index} exceeds the "
                f"{self.tenant_id_regex.groups} groups of tenant_id_regex"
            )
        if self.group_name_match_index > self.group_name_regex.groups:
            raise ValueError(
                f"group_name_match_index {self.group_name_match_index} exceeds the "
                f"{self.group_name_regex.groups} groups of group_name_regex"
            )
        return self


class RedisConfig(BaseModel):
    """Redis configuration model."""

    enabled: bool = Field(default=False, description="Enable Redis session storage")
    url: str = Field(default="", description="Redis connection URL")
    password: str | None = Field(
        default=None, description="Password for Redis authentication"
    )
    decode_responses: bool = Field(
        default=True, description="Decode Redis responses to strings"
    )

    @computed_field
    @property
    def connection_string(self) -> str:
        """Construct the Redis connection string with password if provided."""
        if self.password:
            if "@" in self.url:
                # URL already has auth info
                return self.url
            parts = self.url.split("://", 1)
            if len(parts) == 2:
                scheme, rest = parts
                return f"{scheme}://:{self.password}@{rest}"
        return self.url


class LoggingConfig(BaseModel):
    """Logging configuration model."""

    level: str = Field(default="INFO", description="Logging level")
    format: Literal["json", "plain"] = Field(default="plain", description="Log format")
    file: str | None = Field(default=None, description="Log file path")
    max_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(
        default=5, description="Number of backup log files to keep"
    )
    library_levels: dict[str, str] = Field(
        default_factory=lambda: {
            "ldap3": "WARNING",
            "sqlalchemy.engine": "WARNING",
            "sqlalchemy.pool": "WARNING",
            "uvicorn": "INFO",
            "uvicorn.error": "INFO",
        },
        description="Levels for stdlib loggers of third-party libraries",
    )


class DatabaseConfig(BaseModel):
    """Database configuration model."""

    url: str = Field(
        default="sqlite:///./directory_bridge.db",
        description="Database connection URL",
    )
    pool_size: int = Field(default=20, description="Connection pool size")
    max_overflow: int = Field(default=10, description="Maximum pool overflow")
    pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    pool_recycle: int = Field(default=1800, description="Pool recycle time in seconds")
    password_env_var: str | None = Field(
        default=None,
        description="Environment variable name containing database password",
    )

    @computed_field
    @property
    def connection_string(self) -> str:
        """Construct the database connection string, injecting the password if configured."""
        import os

        from sqlalchemy.engine import make_url

        base_url = make_url(self.url)
        if base_url.password or not self.password_env_var:
            return self.url

        password = os.getenv(self.password_env_var)
        if not password:
            logger.warning(
                "Environment variable {} is not set; connecting without a password",
                self.password_env_var,
            )
            return self.url
        return base_url.set(password=password).render_as_string(hide_password=False)


class CORSConfig(BaseModel):
    """CORS configuration for the application."""

    origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:3001"]
    )
    allow_credentials: bool = True
    allow_methods: list[str] = Field(default=["GET", "POST", "OPTIONS"])
    allow_headers: list[str] = Field(default=["*"])


class AppConfig(BaseModel):
    """Application configuration model."""

    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    host: str = Field(default="localhost", description="Application host")
    port: int = Field(default=8000, description="Application port")
    session_max_age: int = Field(
        default=3600, description="Session maximum age in seconds"
    )
    session_header_name: str = Field(
        default="X-Session-Token", description="Header carrying the session token"
    )
    system_tenant_key: str = Field(
        default="studio_root",
        description="Tenant recorded on activity that is not tied to a specific tenant",
    )
    cors: CORSConfig = Field(
        default_factory=CORSConfig, description="CORS configuration"
    )

    @property
    def base_url(self) -> str:
        """Construct the base URL from host and port."""
        scheme = "https" if self.environment == "production" else "http"
        return f"{scheme}://{self.host}:{self.port}"


class ConfigData(BaseModel):
    """Root configuration model that matches the config.yaml structure."""

    app: AppConfig = Field(
        default_factory=AppConfig, description="Application configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )
    redis: RedisConfig = Field(
        default_factory=RedisConfig, description="Redis configuration"
    )
    directory: DirectoryConfig = Field(
        default_factory=DirectoryConfig, description="Directory configuration"
    )
