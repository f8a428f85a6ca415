"""
Service Errors

Raised by the identity client and service layer, translated to HTTP
statuses by the API error handlers.
"""


class UserServiceError(RuntimeError):
    """Base class for failures surfaced to API callers."""


class ValidationError(UserServiceError):
    """Input rejected before reaching a collaborator."""


class UserNotFoundError(UserServiceError):
    """The identity provider has no such user."""


class UserAlreadyExistsError(UserServiceError):
    """A user with the requested username already exists."""


class ProtectedUserError(UserServiceError):
    """Attempt to modify a protected (SuperAdmin) account."""


class IdentityProviderError(UserServiceError):
    """Any other identity-provider failure."""
