"""
Token Verification

Validates bearer tokens issued by the Cognito user pool against its JWKS.
Issuing tokens is the provider's job; this module only checks them.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import jwt
from jwt import PyJWKClient
from jwt.exceptions import ExpiredSignatureError, PyJWKClientError, InvalidTokenError as JWTError

from atrium.modules.config import Settings

logger = logging.getLogger("atrium.users.tokens")

GROUPS_CLAIM = "cognito:groups"


class InvalidTokenError(Exception):
    """Token is missing, malformed, expired or not issued by our pool."""


@dataclass
class Principal:
    """Authenticated caller, as described by its token claims."""
    user_id: str
    username: Optional[str] = None
    email: Optional[str] = None
    groups: List[str] = field(default_factory=list)
    claims: Dict[str, Any] = field(default_factory=dict)

    def has_group(self, group: str) -> bool:
        return group in self.groups

    @classmethod
    def from_claims(cls, claims: Dict[str, Any]) -> "Principal":
        groups = claims.get(GROUPS_CLAIM) or []
        if isinstance(groups, str):
            groups = [groups]
        return cls(
            user_id=claims["sub"],
            username=claims.get("username") or claims.get("cognito:username"),
            email=claims.get("email"),
            groups=list(groups),
            claims=dict(claims),
        )


class TokenVerifier:
    """RS256 verification against the user pool's JWKS."""

    def __init__(self, issuer: str, jwks_url: str, app_client_id: Optional[str] = None, jwks_client: Optional[PyJWKClient] = None):
        self.issuer = issuer
        self.app_client_id = app_client_id
        self.jwks_client = jwks_client or PyJWKClient(jwks_url, cache_keys=True)

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenVerifier":
        return cls(
            issuer=settings.issuer,
            jwks_url=settings.jwks_url,
            app_client_id=settings.app_client_id,
        )

    def verify(self, token: str) -> Dict[str, Any]:
        """
        Verify signature, expiry and issuer; return the claims.

        Access tokens carry ``client_id``, ID tokens carry ``aud``; either must
        match the configured app client when one is set.
        """
        try:
            signing_key = self.jwks_client.get_signing_key_from_jwt(token)
            claims: Dict[str, Any] = jwt.decode(
                token,
                signing_key.key,
                algorithms=["RS256"],
                issuer=self.issuer,
                options={"verify_aud": False, "require": ["sub", "exp", "iss"]},
            )
        except ExpiredSignatureError as e:
            raise InvalidTokenError("Token has expired") from e
        except PyJWKClientError as e:
            raise InvalidTokenError(f"Unable to find signing key: {e}") from e
        except JWTError as e:
            raise InvalidTokenError(f"Invalid token: {e}") from e

        token_use = claims.get("token_use")
        if token_use not in ("access", "id"):
            raise InvalidTokenError(f"Unsupported token_use: {token_use}")

        if self.app_client_id:
            audience = claims.get("client_id") or claims.get("aud")
            if audience != self.app_client_id:
                raise InvalidTokenError("Token was not issued for this application")

        return claims
