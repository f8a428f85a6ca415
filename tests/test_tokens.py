"""
Tests for bearer token verification with a locally generated RSA key.
"""
import time
from types import SimpleNamespace

import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa
from jwt.exceptions import PyJWKClientError

from atrium.modules.users.auth.tokens import InvalidTokenError, Principal, TokenVerifier

ISSUER = "https://cognito-idp.ap-southeast-2.amazonaws.com/ap-southeast-2_TESTPOOL"


@pytest.fixture(scope="module")
def private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="module")
def other_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


class FakeJWKClient:
    def __init__(self, public_key):
        self.public_key = public_key

    def get_signing_key_from_jwt(self, token):
        return SimpleNamespace(key=self.public_key)


def _claims(**overrides):
    now = int(time.time())
    claims = {
        "sub": "sub-1",
        "iss": ISSUER,
        "exp": now + 3600,
        "iat": now,
        "token_use": "access",
        "client_id": "app-client",
        "username": "ada@example.com",
        "cognito:groups": ["SuperAdmins"],
    }
    claims.update(overrides)
    return {k: v for k, v in claims.items() if v is not None}


def _token(key, **overrides):
    return jwt.encode(_claims(**overrides), key, algorithm="RS256", headers={"kid": "test"})


@pytest.fixture
def verifier(private_key):
    return TokenVerifier(ISSUER, f"{ISSUER}/.well-known/jwks.json", "app-client", jwks_client=FakeJWKClient(private_key.public_key()))


def test_valid_access_token(verifier, private_key):
    claims = verifier.verify(_token(private_key))

    principal = Principal.from_claims(claims)
    assert principal.user_id == "sub-1"
    assert principal.username == "ada@example.com"
    assert principal.has_group("SuperAdmins")


def test_id_token_audience_accepted(verifier, private_key):
    token = _token(private_key, token_use="id", client_id=None, aud="app-client", email="ada@example.com")

    assert verifier.verify(token)["email"] == "ada@example.com"


def test_expired_token(verifier, private_key):
    with pytest.raises(InvalidTokenError, match="expired"):
        verifier.verify(_token(private_key, exp=int(time.time()) - 60))


def test_wrong_signature(verifier, other_key):
    with pytest.raises(InvalidTokenError):
        verifier.verify(_token(other_key))


def test_wrong_issuer(verifier, private_key):
    with pytest.raises(InvalidTokenError):
        verifier.verify(_token(private_key, iss="https://evil.example.com"))


def test_wrong_client(verifier, private_key):
    with pytest.raises(InvalidTokenError, match="not issued for this application"):
        verifier.verify(_token(private_key, client_id="other-client"))


def test_unsupported_token_use(verifier, private_key):
    with pytest.raises(InvalidTokenError, match="token_use"):
        verifier.verify(_token(private_key, token_use="refresh"))


def test_missing_token_use_is_rejected(verifier, private_key):
    with pytest.raises(InvalidTokenError, match="Unsupported token_use: None"):
        verifier.verify(_token(private_key, token_use=None))


def test_missing_signing_key(private_key):
    class NoKeys:
        def get_signing_key_from_jwt(self, token):
            raise PyJWKClientError("Unable to find a signing key that matches")

    verifier = TokenVerifier(ISSUER, "unused", jwks_client=NoKeys())
    with pytest.raises(InvalidTokenError, match="signing key"):
        verifier.verify(_token(private_key))


def test_garbage_token(verifier):
    with pytest.raises(InvalidTokenError):
        verifier.verify("not-a-jwt")


def test_client_check_skipped_when_unconfigured(private_key):
    verifier = TokenVerifier(ISSUER, "unused", jwks_client=FakeJWKClient(private_key.public_key()))

    assert verifier.verify(_token(private_key, client_id="anything"))["sub"] == "sub-1"


def test_principal_wraps_single_group():
    principal = Principal.from_claims({"sub": "x", "cognito:username": "x-user", "cognito:groups": "Customers"})
    assert principal.groups == ["Customers"]
    assert principal.username == "x-user"
