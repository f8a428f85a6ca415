from unittest.mock import AsyncMock, patch


def test_root(make_client):
    response = make_client().get("/")

    assert response.status_code == 200
    assert response.json()["status"] == "online"


def test_health_reports_database(make_client):
    with patch("atrium.modules.system_endpoints.ping", AsyncMock(return_value=True)):
        response = make_client().get("/api/system/health")

    assert response.json() == {"status": "online", "database": True}


def test_health_when_disconnected(make_client):
    with patch("atrium.modules.system_endpoints.ping", AsyncMock(return_value=False)):
        response = make_client().get("/api/system/health")

    assert response.status_code == 200
    assert response.json()["database"] is False


def test_migrate_requires_super_admin(make_client, customer_principal):
    response = make_client(customer_principal).post("/api/system/migrate")

    assert response.status_code == 403


def test_migrate(make_client, admin_principal):
    with patch("atrium.modules.system_endpoints.run_migrations", AsyncMock(return_value=["001_create_addresses.sql"])):
        response = make_client(admin_principal).post("/api/system/migrate")

    assert response.status_code == 200
    assert response.json()["applied"] == ["001_create_addresses.sql"]


def test_migrate_failure(make_client, admin_principal):
    with patch("atrium.modules.system_endpoints.run_migrations", AsyncMock(side_effect=RuntimeError("syntax error"))):
        response = make_client(admin_principal).post("/api/system/migrate")

    assert response.status_code == 500
    assert response.json()["message"] == "syntax error"
