"""Identity and session models."""

from .identity import (
    CompositeIdentifier,
    DirectoryAttributeSet,
    GroupMembership,
    NormalizedIdentity,
)
from .session import UserSession

__all__ = [
    "CompositeIdentifier",
    "DirectoryAttributeSet",
    "GroupMembership",
    "NormalizedIdentity",
    "UserSession",
]
