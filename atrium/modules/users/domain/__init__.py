"""
Domain Models

Pure data models representing identity users and local addresses.
"""

from .user import IdentityUser, UserPage, UserRole, SUPER_ADMIN_GROUP
from .address import Address, ADDRESS_FIELDS
from .errors import (
    UserServiceError,
    ValidationError,
    UserNotFoundError,
    UserAlreadyExistsError,
    ProtectedUserError,
    IdentityProviderError,
)

__all__ = [
    "IdentityUser",
    "UserPage",
    "UserRole",
    "SUPER_ADMIN_GROUP",
    "Address",
    "ADDRESS_FIELDS",
    "UserServiceError",
    "ValidationError",
    "UserNotFoundError",
    "UserAlreadyExistsError",
    "ProtectedUserError",
    "IdentityProviderError",
]
