"""
Test health and root endpoints.
"""
from offshoot import __version__


def test_health_check(test_client):
    """Test health check reports service identity."""
    response = test_client.get("/healthz")

    assert response.status_code == 200
    data = response.json()

    assert data["ok"] is True
    assert data["version"] == __version__
    assert data["service"] == "offshoot-core"


def test_root(test_client):
    response = test_client.get("/")

    assert response.status_code == 200
    assert response.json()["docs"] == "/docs"
