"""
Shared fixtures for the user service tests.

Nothing here talks to a live identity provider or database: the Cognito
client is stubbed with botocore's Stubber, the service is mocked at the API
boundary, and audit writes are patched out.
"""
import os
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import boto3
import pytest
from botocore.stub import Stubber
from fastapi.testclient import TestClient

os.environ.setdefault("DATABASE_URL", "postgresql://localhost:5432/atrium_test")
os.environ.setdefault("COGNITO_USER_POOL_ID", "ap-southeast-2_TESTPOOL")

from atrium.app import create_app  # noqa: E402
from atrium.modules.users.auth.middleware import get_current_principal  # noqa: E402
from atrium.modules.users.auth.tokens import Principal  # noqa: E402
from atrium.modules.users.identity.cognito_client import CognitoUserDirectory  # noqa: E402
from atrium.modules.users.services.user_service import get_user_service  # noqa: E402

POOL_ID = "ap-southeast-2_TESTPOOL"
CREATED = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
MODIFIED = datetime(2024, 2, 3, 4, 5, 6, tzinfo=timezone.utc)


def user_type(username, sub, email=None, given=None, family=None, enabled=True, verified="true"):
    """A ListUsers / ListUsersInGroup style UserType record."""
    attributes = [{"Name": "sub", "Value": sub}]
    if email:
        attributes.append({"Name": "email", "Value": email})
    if given:
        attributes.append({"Name": "given_name", "Value": given})
    if family:
        attributes.append({"Name": "family_name", "Value": family})
    attributes.append({"Name": "email_verified", "Value": verified})
    return {
        "Username": username,
        "Attributes": attributes,
        "Enabled": enabled,
        "UserStatus": "CONFIRMED",
        "UserCreateDate": CREATED,
        "UserLastModifiedDate": MODIFIED,
    }


@pytest.fixture
def cognito_client():
    return boto3.client(
        "cognito-idp",
        region_name="ap-southeast-2",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


@pytest.fixture
def stubber(cognito_client):
    with Stubber(cognito_client) as stub:
        yield stub
        stub.assert_no_pending_responses()


@pytest.fixture
def directory(cognito_client, stubber):
    return CognitoUserDirectory(POOL_ID, "ap-southeast-2", client=cognito_client)


@pytest.fixture
def mock_audit():
    with patch("atrium.modules.users.services.user_service.audit_manager") as audit:
        audit.log_event = AsyncMock()
        yield audit


@pytest.fixture
def admin_principal():
    return Principal(
        user_id="admin-sub",
        username="admin@example.com",
        email="admin@example.com",
        groups=["SuperAdmins"],
        claims={"sub": "admin-sub", "cognito:groups": ["SuperAdmins"]},
    )


@pytest.fixture
def customer_principal():
    return Principal(
        user_id="customer-sub",
        username="customer@example.com",
        email="customer@example.com",
        groups=["Customers"],
        claims={
            "sub": "customer-sub",
            "email": "customer@example.com",
            "given_name": "Cara",
            "family_name": "Jones",
            "email_verified": "true",
            "iat": 1704164645,
            "cognito:groups": ["Customers"],
        },
    )


@pytest.fixture
def mock_service():
    """UserService double with every coroutine method mocked."""
    service = MagicMock()
    for name in (
        "get_user_profile",
        "list_users",
        "search_users_by_email",
        "search_users",
        "get_employee_users",
        "create_admin_user",
        "sync_user_roles",
        "update_user_status",
        "add_address",
        "get_addresses",
        "update_address",
        "delete_address",
    ):
        setattr(service, name, AsyncMock())
    return service


@pytest.fixture
def make_client(mock_service):
    """Build a TestClient authenticated as the given principal (or anonymous)."""
    def _make(principal=None):
        app = create_app(use_lifespan=False)
        app.dependency_overrides[get_user_service] = lambda: mock_service
        if principal is not None:
            app.dependency_overrides[get_current_principal] = lambda: principal
        return TestClient(app, raise_server_exceptions=False)
    return _make
