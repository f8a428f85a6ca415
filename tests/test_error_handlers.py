"""
Tests for the central exception-to-envelope mapping, reached through admin
routes that let service errors propagate.
"""
import pytest

from atrium.modules.users.domain.errors import (
    IdentityProviderError,
    ProtectedUserError,
    UserAlreadyExistsError,
    UserNotFoundError,
    UserServiceError,
    ValidationError,
)


@pytest.fixture
def client(make_client, admin_principal):
    return make_client(admin_principal)


def test_unexpected_error_is_500_with_support_message(client, mock_service):
    mock_service.get_employee_users.side_effect = KeyError("Username")

    response = client.get("/api/v1/admin/users/employees")

    assert response.status_code == 500
    assert response.json() == {
        "status": "ERROR",
        "message": "An unexpected server error occurred. Please contact support.",
        "data": None,
    }


def test_service_error_mentioning_not_found_is_404(client, mock_service):
    mock_service.search_users.side_effect = IdentityProviderError("Group not found")

    response = client.get("/api/v1/admin/users/filter", params={"role": "Ghosts"})

    assert response.status_code == 404
    assert response.json()["message"] == "Group not found"


def test_generic_service_error_is_500(client, mock_service):
    mock_service.search_users.side_effect = UserServiceError("quota exceeded")

    response = client.get("/api/v1/admin/users/filter")

    assert response.status_code == 500
    assert response.json()["message"] == "An internal error occurred: quota exceeded"


def test_user_not_found_is_404(client, mock_service):
    mock_service.search_users_by_email.side_effect = UserNotFoundError("User not found: ada")

    response = client.get("/api/v1/admin/users/search", params={"email": "ada"})

    assert response.status_code == 404
    assert response.json() == {"status": "ERROR", "message": "User not found: ada", "data": None}


def test_protected_user_is_403(client, mock_service):
    mock_service.get_employee_users.side_effect = ProtectedUserError("Security Violation")

    response = client.get("/api/v1/admin/users/employees")

    assert response.status_code == 403
    assert response.json()["message"] == "Security Violation"


@pytest.mark.parametrize("error", [ValidationError("Email must not be blank"), UserAlreadyExistsError("exists")])
def test_bad_request_errors_are_400(client, mock_service, error):
    mock_service.list_users.side_effect = error

    response = client.get("/api/v1/admin/users")

    assert response.status_code == 400
    assert response.json()["message"] == str(error)
