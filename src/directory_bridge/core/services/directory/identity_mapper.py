"""Mapping of raw directory attributes onto a normalized identity."""

from collections.abc import Callable, Sequence

from loguru import logger

from src.directory_bridge.core.models.identity import (
    DirectoryAttributeSet,
    GroupMembership,
    NormalizedIdentity,
)
from src.directory_bridge.core.services.directory.attribute_codec import AttributeCodec
from src.directory_bridge.entities.core.tenant import Tenant
from src.directory_bridge.runtime.config.config_data import DirectoryConfig

TenantResolver = Callable[[str], Tenant | None]


def attribute_values(attributes: DirectoryAttributeSet, name: str) -> list[str]:
    """Return every non-null value of ``name`` as a string, in directory order."""
    raw = attributes.get(name)
    if raw is None:
        return []
    if isinstance(raw, (str, bytes)):
        raw = [raw]

    values = []
    for value in raw:
        if value is None:
            continue
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        values.append(str(value))
    return values


def first_value(attributes: DirectoryAttributeSet, name: str) -> str | None:
    values = attribute_values(attributes, name)
    return values[0] if values else None


class IdentityMapper:
    """Builds a :class:`NormalizedIdentity` from one principal's directory attributes.

    Tenant keys come from the tenant attribute, each value decoded with the
    tenant pattern (which may also carry a group name). For every tenant that
    resolves, the separate group attribute adds one membership per decoded
    group name. A principal without a tenant attribute is placed in the
    configured default tenant.
    """

    def __init__(self, config: DirectoryConfig, codec: AttributeCodec | None = None):
        self._config = config
        self._codec = codec or AttributeCodec(config)

    def map_authenticated_principal(
        self,
        username: str,
        attributes: DirectoryAttributeSet,
        tenant_resolver: TenantResolver,
    ) -> NormalizedIdentity | None:
        """Map ``attributes`` to an identity, or return ``None`` when no email is present.

        Raises:
            ConfigurationError: If a configured pattern index cannot be applied.
        """
        names = self._config.attributes

        email = first_value(attributes, names.email)
        if not email:
            logger.error(
                "No directory attribute {} found for username {}. User will not be imported.",
                names.email,
                username,
            )
            return None

        identity = NormalizedIdentity(username=username, email=email, active=True)

        identity.first_name = first_value(attributes, names.first_name)
        if identity.first_name is None:
            logger.warning("No directory attribute {} found for username {}", names.first_name, username)

        identity.last_name = first_value(attributes, names.last_name)
        if identity.last_name is None:
            logger.warning("No directory attribute {} found for username {}", names.last_name, username)

        group_values = attribute_values(attributes, names.group_name)
        tenant_values = attribute_values(attributes, names.tenant_id)

        if tenant_values:
            for raw_value in tenant_values:
                composite = self._codec.tenant_and_group(raw_value)
                if composite.is_empty:
                    logger.debug("Tenant attribute value {!r} does not match the tenant pattern", raw_value)
                    continue
                if not composite.primary:
                    logger.warning("Tenant attribute value {!r} decoded to an empty tenant key", raw_value)
                    continue

                tenant = tenant_resolver(composite.primary)
                if tenant is None:
                    logger.warning("No tenant found for key {}", composite.primary)
                    continue

                # The group embedded in the tenant value goes first
                if composite.secondary:
                    self._add_membership(identity, composite.secondary, tenant)

                self._add_groups_from_attribute(identity, group_values, tenant)
        else:
            default_key = self._config.default_tenant_key
            logger.debug("Assigning user {} to default tenant {}", username, default_key)

            tenant = tenant_resolver(default_key)
            if tenant is not None:
                self._add_groups_from_attribute(identity, group_values, tenant)
            else:
                logger.warning("No tenant found for default tenant key {}", default_key)

        return identity

    def _add_groups_from_attribute(
        self,
        identity: NormalizedIdentity,
        group_values: Sequence[str],
        tenant: Tenant,
    ) -> None:
        if not group_values:
            logger.debug(
                "No directory attribute {} found for username {}",
                self._config.attributes.group_name,
                identity.username,
            )
            return

        for raw_value in group_values:
            group_name = self._codec.group_name(raw_value)
            if group_name:
                self._add_membership(identity, group_name, tenant)

    @staticmethod
    def _add_membership(identity: NormalizedIdentity, group_name: str, tenant: Tenant) -> None:
        identity.groups.append(
            GroupMembership(tenant_key=tenant.key, tenant_id=tenant.id, name=group_name)
        )
