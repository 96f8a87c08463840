# tests/test_meta.py
# Sonda de vida, vocabularios del frontend y forma de los errores.


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_meta_options(client):
    body = client.get("/api/meta/options").json()
    assert body["permission_levels"] == ["view", "edit"]
    assert body["rsvp_statuses"] == ["pending", "confirmed", "declined"]
    assert body["decision_statuses"] == ["Analisando", "Contratado", "Recusado"]
    assert body["payment_statuses"] == ["Pago", "Pago Parcialmente", "Pendente", "N/A"]


def test_validation_errors_are_400_with_detail(client):
    r = client.post("/api/auth/login", json={"email": "no-es-un-email"})
    assert r.status_code == 400
    assert "detail" in r.json()
