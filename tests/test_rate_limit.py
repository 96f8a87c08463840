# tests/test_rate_limit.py
# Ventana deslizante por IP en las rutas de credenciales.

import threading

from mariage import rate_limit


def test_is_allowed_counts_within_window(monkeypatch):
    clock = {"t": 1000.0}
    monkeypatch.setattr(rate_limit, "_now", lambda: clock["t"])

    assert all(rate_limit.is_allowed("k", 3, 60) for _ in range(3))
    assert rate_limit.is_allowed("k", 3, 60) is False
    assert rate_limit.is_allowed("otra", 3, 60) is True

    clock["t"] += 61
    assert rate_limit.is_allowed("k", 3, 60) is True


def test_zero_disables_limit():
    assert all(rate_limit.is_allowed("libre", 0, 60) for _ in range(50))


def test_limits_from_env_fall_back_on_garbage(monkeypatch):
    monkeypatch.setenv("X_RL_MAX", "muchos")
    assert rate_limit.get_limits_from_env("X_RL", 5, 30) == (5, 30)
    monkeypatch.setenv("X_RL_MAX", "7")
    monkeypatch.setenv("X_RL_WINDOW", "90")
    assert rate_limit.get_limits_from_env("X_RL", 5, 30) == (7, 90)


def test_login_is_throttled_per_ip(client):
    body = {"email": "nadie@example.com", "password": "Incorrecta#1"}
    for _ in range(rate_limit.AUTH_MAX):
        assert client.post("/api/auth/login", json=body).status_code == 401

    blocked = client.post("/api/auth/login", json=body)
    assert blocked.status_code == 429
    assert blocked.headers["retry-after"] == str(rate_limit.AUTH_WINDOW)

    other_ip = client.post("/api/auth/login", json=body, headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1"})
    assert other_ip.status_code == 401


def test_scopes_are_independent(client):
    body = {"email": "nadie@example.com", "password": "Incorrecta#1"}
    for _ in range(rate_limit.AUTH_MAX + 1):
        client.post("/api/auth/login", json=body)

    r = client.post("/api/auth/request-password-reset", json={"email": "nadie@example.com"})
    assert r.status_code == 200


def test_concurrent_attempts_never_exceed_the_limit():
    limit = 25
    results = []
    start = threading.Barrier(8)

    def _worker():
        start.wait()
        for _ in range(20):
            results.append(rate_limit.is_allowed("carrera", limit, 60))

    threads = [threading.Thread(target=_worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(results) == 160
    assert results.count(True) == limit
