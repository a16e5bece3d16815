import redis

API = "/api/v1"


def test_root(client):
    r = client.get("/")
    assert r.status_code == 200
    assert r.json()["docs"] == "/docs"


def test_health_reports_dependencies(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "healthy", "checks": {"database": "ok", "cache": "ok"}}


def test_health_degraded_without_cache(client, fake_cache, monkeypatch):
    def broken_ping():
        raise redis.ConnectionError("connection refused")

    monkeypatch.setattr(fake_cache, "ping", broken_ping)
    r = client.get("/health")
    assert r.json()["status"] == "degraded"
    assert r.json()["checks"]["cache"] == "unavailable"


def test_unknown_route_uses_error_envelope(client):
    r = client.get(f"{API}/nowhere")
    assert r.status_code == 404
    assert r.json() == {"error": {"code": 404, "message": "Not Found"}}


def test_malformed_body_is_bad_request(client):
    r = client.post(
        f"{API}/auth/login",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert r.status_code == 400
    assert "error" in r.json()
