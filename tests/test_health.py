# tests/test_health.py
from fastapi.testclient import TestClient


def test_health_status(client: TestClient) -> None:
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json() == {"status": "ok"}


def test_health_content_type(client: TestClient) -> None:
    res = client.get("/health")
    assert res.headers["content-type"].startswith("application/json")


def test_root_reports_service(client: TestClient) -> None:
    res = client.get("/")
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "ok"
    assert body["service"]


def test_security_headers_present(client: TestClient) -> None:
    res = client.get("/health")
    assert res.headers.get("X-Content-Type-Options") == "nosniff"
    assert res.headers.get("X-Frame-Options") == "DENY"
    assert res.headers.get("Referrer-Policy") == "no-referrer"
    assert res.headers.get("X-Request-ID")
    # Only API responses are marked uncacheable
    assert "Cache-Control" not in res.headers
