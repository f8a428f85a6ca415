"""
Identity Provider Client

Wraps the managed identity provider's administrative API.
"""

from .cognito_client import CognitoUserDirectory, build_identity_user, MAX_PAGE_SIZE

__all__ = [
    "CognitoUserDirectory",
    "build_identity_user",
    "MAX_PAGE_SIZE",
]
