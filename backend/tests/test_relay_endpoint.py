"""
Tests for the page relay endpoint.

Upstream sites are faked by swapping the relay's httpx.AsyncClient for one
backed by httpx.MockTransport.
"""
import asyncio

import httpx
import pytest

from offshoot.api import relay as relay_module
from offshoot.services.reliability import timeout_manager

TARGET = "https://shop.example/products/tee"


@pytest.fixture
def upstream(monkeypatch):
    """Install a handler that answers every request the relay makes."""
    real_client = httpx.AsyncClient

    def install(handler):
        def client_factory(**kwargs):
            return real_client(transport=httpx.MockTransport(handler), **kwargs)

        monkeypatch.setattr(relay_module.httpx, "AsyncClient", client_factory)

    return install


class TestRelayValidation:
    """Test rejection of missing, malformed and internal targets"""

    def test_missing_url(self, test_client):
        response = test_client.get("/relay")

        assert response.status_code == 400
        assert response.json()["error"] == "Missing url parameter"

    def test_non_http_scheme(self, test_client):
        response = test_client.get("/relay", params={"url": "file:///etc/passwd"})

        assert response.status_code == 400
        assert response.json()["error"] == "Only HTTP/HTTPS URLs allowed"

    def test_malformed_url(self, test_client):
        response = test_client.get("/relay", params={"url": "http://[::1"})

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid URL format"

    @pytest.mark.parametrize("target", [
        "http://localhost:8000/admin",
        "http://127.0.0.1/",
        "http://10.0.0.5/",
        "http://192.168.1.1/router",
        "http://169.254.169.254/latest/meta-data/",
        "http://[::1]/",
        "http://api.localhost/",
    ])
    def test_internal_targets_forbidden(self, test_client, upstream, target):
        requested = []
        upstream(lambda request: requested.append(request.url) or httpx.Response(200))

        response = test_client.get("/relay", params={"url": target})

        assert response.status_code == 403
        assert response.json()["error"] == "Internal URLs not allowed"
        assert requested == []


class TestRelayFetch:
    """Test how upstream responses are passed back"""

    def test_text_is_wrapped(self, test_client, upstream):
        upstream(lambda request: httpx.Response(
            200, content=b"<html>tee</html>", headers={"content-type": "text/html; charset=utf-8"}
        ))

        response = test_client.get("/relay", params={"url": TARGET})

        assert response.status_code == 200
        assert response.json() == {
            "contents": "<html>tee</html>",
            "status": {
                "url": TARGET,
                "content_type": "text/html; charset=utf-8",
                "http_code": 200,
            },
        }

    def test_upstream_status_reported(self, test_client, upstream):
        upstream(lambda request: httpx.Response(
            404, content=b"not found", headers={"content-type": "text/plain"}
        ))

        response = test_client.get("/relay", params={"url": TARGET})

        assert response.status_code == 200
        assert response.json()["status"]["http_code"] == 404

    def test_binary_passed_through(self, test_client, upstream, red_png):
        upstream(lambda request: httpx.Response(200, content=red_png, headers={"content-type": "image/png"}))

        response = test_client.get("/relay", params={"url": "https://cdn.example/tee.png"})

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        assert response.content == red_png

    def test_timeout(self, test_client, upstream, monkeypatch):
        async def slow(request):
            await asyncio.sleep(1)
            return httpx.Response(200, content=b"late")

        upstream(slow)
        monkeypatch.setitem(timeout_manager.timeouts, "relay_endpoint", 0.05)

        response = test_client.get("/relay", params={"url": TARGET})

        assert response.status_code == 504
        assert response.json()["error"] == "Request timeout"

    def test_fetch_failure(self, test_client, upstream):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        upstream(refuse)

        response = test_client.get("/relay", params={"url": TARGET})

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to fetch URL"
        assert "connection refused" in response.json()["message"]
