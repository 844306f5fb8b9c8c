"""Decoding of raw directory attribute values into tenant and group identifiers.

Attribute values are matched against configured regular expressions, always
against the whole value. Capture group indices come from configuration, so
they are checked against the pattern that actually matched.
"""

import re

from src.directory_bridge.core.exceptions import ConfigurationError
from src.directory_bridge.core.models.identity import CompositeIdentifier
from src.directory_bridge.runtime.config.config_data import DirectoryConfig


def _compile(pattern: re.Pattern | str) -> re.Pattern:
    if isinstance(pattern, re.Pattern):
        return pattern
    try:
        return re.compile(pattern)
    except re.error as e:
        raise ConfigurationError(f"Invalid directory attribute pattern {pattern!r}: {e}") from e


def _group(match: re.Match, index: int) -> str | None:
    if index < 0 or index > match.re.groups:
        raise ConfigurationError(
            f"Capture group {index} requested from pattern {match.re.pattern!r} "
            f"which only has {match.re.groups} groups"
        )
    return match.group(index)


def decode_group_name(raw_value: str, pattern: re.Pattern | str, group_index: int) -> str:
    """Extract a group name from ``raw_value``.

    Returns an empty string when the value does not fully match ``pattern``;
    callers treat that as nothing to add.

    Raises:
        ConfigurationError: If ``pattern`` is malformed or has no group ``group_index``.
    """
    match = _compile(pattern).fullmatch(raw_value)
    if match is None:
        return ""
    return _group(match, group_index) or ""


def decode_composite_identifier(
    raw_value: str,
    pattern: re.Pattern | str,
    primary_index: int,
    secondary_index: int,
) -> CompositeIdentifier:
    """Extract a tenant key and an optional embedded group name from ``raw_value``.

    The secondary identifier is only read when ``secondary_index`` is within
    the pattern's group count and the group participated in the match. A value
    that does not fully match yields an empty identifier.

    Raises:
        ConfigurationError: If ``pattern`` is malformed or has no group ``primary_index``.
    """
    match = _compile(pattern).fullmatch(raw_value)
    if match is None:
        return CompositeIdentifier()

    primary = _group(match, primary_index)
    secondary = None
    if 0 <= secondary_index <= match.re.groups:
        secondary = match.group(secondary_index)

    return CompositeIdentifier(primary=primary, secondary=secondary)


class AttributeCodec:
    """Applies the configured tenant and group patterns to attribute values."""

    def __init__(self, config: DirectoryConfig):
        self._config = config

    def group_name(self, raw_value: str) -> str:
        return decode_group_name(
            raw_value,
            self._config.group_name_regex,
            self._config.group_name_match_index,
        )

    def tenant_and_group(self, raw_value: str) -> CompositeIdentifier:
        return decode_composite_identifier(
            raw_value,
            self._config.tenant_id_regex,
            self._config.tenant_id_match_index,
            self._config.tenant_id_group_name_match_index,
        )
