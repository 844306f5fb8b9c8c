"""Exception hierarchy for directory authentication and identity storage."""


class DirectoryBridgeError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(DirectoryBridgeError):
    """A configured pattern or index cannot be applied."""


# Authentication outcomes surfaced to callers


class AuthenticationError(DirectoryBridgeError):
    """Base class for errors returned to an authenticating caller."""


class BadCredentialsError(AuthenticationError):
    """The credential was rejected."""

    def __init__(self, message: str = "Invalid username or password"):
        super().__init__(message)


class AuthenticationSystemError(AuthenticationError):
    """Authentication could not complete because of a system-side failure.

    The original exception, when there is one, is chained as ``__cause__``.
    """


# Directory client outcomes


class DirectoryError(DirectoryBridgeError):
    """The directory failed in a way that has no specific classification."""


class DirectoryPrincipalNotFoundError(DirectoryError):
    """No directory entry matched the principal."""


class DirectoryUnavailableError(DirectoryError):
    """The directory could not be reached."""


class DirectoryInvalidCredentialsError(DirectoryError):
    """The directory rejected the credential for an existing principal."""


# Identity store outcomes


class IdentityStoreError(DirectoryBridgeError):
    """Base class for persistence-contract failures."""


class UserNotFoundError(IdentityStoreError):
    pass


class UserAlreadyExistsError(IdentityStoreError):
    pass


class GroupNotFoundError(IdentityStoreError):
    pass


class GroupAlreadyExistsError(IdentityStoreError):
    pass


class TenantNotFoundError(IdentityStoreError):
    pass


class MembershipAlreadyExistsError(IdentityStoreError):
    pass
