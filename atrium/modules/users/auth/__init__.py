"""
Authentication and Authorization Module

Provides:
- Bearer token verification against the identity provider's JWKS
- FastAPI dependencies for the current caller and role checks
"""

from .tokens import InvalidTokenError, Principal, TokenVerifier
from .middleware import get_current_principal, get_token_verifier, require_super_admin

__all__ = [
    "InvalidTokenError",
    "Principal",
    "TokenVerifier",
    "get_current_principal",
    "get_token_verifier",
    "require_super_admin",
]
