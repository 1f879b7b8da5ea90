from unittest.mock import AsyncMock, MagicMock

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError


def test_health_check(client: TestClient, mock_db: AsyncMock) -> None:
    """Test the health check endpoint."""
    result = MagicMock()
    result.scalar.return_value = 1
    mock_db.execute.return_value = result

    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["database"] == "connected"
    assert "version" in data


def test_health_check_degraded_without_database(
    client: TestClient, mock_db: AsyncMock
) -> None:
    """Test that a database failure degrades the health check instead of failing it."""
    mock_db.execute.side_effect = OperationalError("SELECT 1", {}, Exception("down"))

    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "degraded"
    assert data["database"] == "disconnected"


def test_requests_without_identity_are_rejected(client: TestClient) -> None:
    """Test that every API route requires the identity header."""
    for method, path in [
        ("get", "/api/conversations"),
        ("get", "/api/matching/candidate"),
        ("get", "/api/friends"),
    ]:
        response = getattr(client, method)(path)
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "AUTHENTICATION_REQUIRED"
