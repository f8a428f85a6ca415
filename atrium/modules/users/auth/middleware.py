"""
Authentication Middleware

FastAPI dependencies for authentication and role checks.
"""
import logging
from functools import lru_cache
from typing import Optional
from fastapi import HTTPException, Header, Depends
from atrium.modules.config import settings
from atrium.modules.users.domain.user import SUPER_ADMIN_GROUP
from atrium.modules.users.auth.tokens import InvalidTokenError, Principal, TokenVerifier

logger = logging.getLogger("atrium.users.auth")

ACCESS_DENIED_MESSAGE = "Access Denied: You do not have the required permissions to perform this action."


@lru_cache(maxsize=1)
def get_token_verifier() -> TokenVerifier:
    """Singleton verifier; the JWKS client caches keys between requests."""
    return TokenVerifier.from_settings(settings)


def get_bearer_token(
    authorization: Optional[str] = Header(None, alias="Authorization")
) -> str:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        raise HTTPException(status_code=401, detail="Authentication required. Missing Authorization header.")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(status_code=401, detail="Authorization header must be 'Bearer <token>'.")
    return token.strip()


def get_current_principal(
    token: str = Depends(get_bearer_token),
    verifier: TokenVerifier = Depends(get_token_verifier)
) -> Principal:
    """
    FastAPI dependency to get the authenticated caller.

    Raises HTTPException(401) if the token does not verify.
    """
    try:
        claims = verifier.verify(token)
    except InvalidTokenError as e:
        logger.info(f"Rejected bearer token: {e}")
        raise HTTPException(status_code=401, detail=str(e))
    return Principal.from_claims(claims)


def require_super_admin(
    principal: Principal = Depends(get_current_principal)
) -> Principal:
    """
    FastAPI dependency to require membership of the SuperAdmins group.
    """
    if not principal.has_group(SUPER_ADMIN_GROUP):
        logger.warning(f"Denied admin access to {principal.user_id}")
        raise HTTPException(status_code=403, detail=ACCESS_DENIED_MESSAGE)
    return principal
