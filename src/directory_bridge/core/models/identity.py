"""In-memory identity models produced from directory attributes."""

from collections.abc import Mapping, Sequence

from pydantic import BaseModel, ConfigDict, Field

EXTERNALLY_MANAGED_GROUP_DESCRIPTION = "Externally managed group"

# Attribute name -> one or many raw values, as returned for one principal.
DirectoryAttributeSet = Mapping[str, Sequence[str]]


class CompositeIdentifier(BaseModel):
    """Tenant key and optional group name decoded from one attribute value.

    An identifier with no fields set is the no-match result.
    """

    model_config = ConfigDict(frozen=True)

    primary: str | None = None
    secondary: str | None = None

    @property
    def is_empty(self) -> bool:
        return self.primary is None and self.secondary is None


class GroupMembership(BaseModel):
    """A group the principal belongs to, scoped to a tenant."""

    tenant_key: str = Field(description="Key of the tenant owning the group")
    tenant_id: str = Field(description="Internal identifier of the tenant")
    name: str = Field(description="Group name")
    externally_managed: bool = Field(default=True)
    description: str = Field(default=EXTERNALLY_MANAGED_GROUP_DESCRIPTION)


class NormalizedIdentity(BaseModel):
    """Directory view of a principal, built fresh for one authentication attempt."""

    username: str = Field(description="Login name, unique and immutable")
    email: str = Field(description="Email address, required")
    first_name: str | None = Field(default=None)
    last_name: str | None = Field(default=None)
    active: bool = Field(default=True)
    groups: list[GroupMembership] = Field(default_factory=list)
