from fastapi.testclient import TestClient

from quizkey.main import create_app


def test_health_ok():
    app = create_app()
    client = TestClient(app)

    r = client.get("/health")
    assert r.status_code == 200
    assert r.json().get("status") == "ok"


def test_health_live():
    app = create_app()
    client = TestClient(app)

    r = client.get("/health/live")
    assert r.status_code == 200
    assert r.json().get("status") == "live"


def test_health_ready_pings_redis():
    app = create_app()
    client = TestClient(app)

    r = client.get("/health/ready")
    assert r.status_code == 200
    assert r.json().get("status") == "ready"


def test_health_ready_redis_down(monkeypatch):
    import quizkey.routers.health as health_mod

    class _DownRedis:
        def ping(self):
            raise ConnectionError("refused")

    monkeypatch.setattr(health_mod, "get_redis", lambda: _DownRedis())

    client = TestClient(create_app())
    r = client.get("/health/ready")
    assert r.status_code == 503
    assert r.json()["ok"] is False
