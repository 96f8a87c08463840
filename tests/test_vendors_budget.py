# tests/test_vendors_budget.py
# Proveedores, ítems del presupuesto, estado de pago derivado y totales.

import pytest

from mariage import models
from mariage.crud.budget_crud import compute_payment_status


@pytest.mark.parametrize(
    "decision, final, paid, expected",
    [
        ("Contratado", 1000, 1000, "Pago"),
        ("Contratado", 1000, 1200, "Pago"),
        ("Contratado", 1000, 200, "Pago Parcialmente"),
        ("Contratado", 1000, 0, "Pendente"),
        ("Contratado", 0, 0, "Pendente"),
        ("Analisando", 1000, 1000, "N/A"),
        ("Recusado", 1000, 0, "N/A"),
        (models.DecisionStatusEnum.Contratado, 50.5, None, "Pendente"),
    ],
)
def test_compute_payment_status(decision, final, paid, expected):
    assert compute_payment_status(decision, final, paid) == expected


def _vendor(client, user, wedding_id, name="Buffet Sabor", **extra):
    r = client.post(f"/api/vendors/wedding/{wedding_id}", json={"vendor_name": name, **extra}, headers=user["headers"])
    assert r.status_code == 201, r.text
    return r.json()


def _item(client, user, wedding_id, **fields):
    body = {"category": "Buffet", "final_value": 1000, **fields}
    return client.post(f"/api/budget/wedding/{wedding_id}", json=body, headers=user["headers"])


def test_new_vendor_reports_zero_totals(client, make_user, make_wedding):
    owner = make_user()
    wedding = make_wedding(owner)
    vendor = _vendor(client, owner, wedding["id"], category="Comida")
    assert (vendor["total_contracted"], vendor["total_paid"], vendor["total_quoted"]) == (0.0, 0.0, 0.0)

    listed = client.get(f"/api/vendors/wedding/{wedding['id']}", headers=owner["headers"]).json()
    assert [v["vendor_name"] for v in listed] == ["Buffet Sabor"]
    assert listed[0]["total_contracted"] == 0.0


def test_vendor_totals_group_by_decision_status(client, make_user, make_wedding):
    owner = make_user()
    wedding = make_wedding(owner)
    wid = wedding["id"]
    vendor = _vendor(client, owner, wid)
    _item(client, owner, wid, vendor_id=vendor["id"], final_value=1000, paid_value=400, decision_status="Contratado")
    _item(client, owner, wid, vendor_id=vendor["id"], final_value=300, decision_status="Analisando")
    _item(client, owner, wid, vendor_id=vendor["id"], final_value=999, decision_status="Recusado")

    listed = client.get(f"/api/vendors/wedding/{wid}", headers=owner["headers"]).json()
    assert listed[0]["total_contracted"] == 1000.0
    assert listed[0]["total_paid"] == 400.0
    assert listed[0]["total_quoted"] == 300.0


def test_item_payment_status_in_responses(client, make_user, make_wedding):
    owner = make_user()
    wedding = make_wedding(owner)
    r = _item(client, owner, wedding["id"], final_value=1000, paid_value=200, decision_status="Contratado")
    assert r.status_code == 201
    assert r.json()["payment_status"] == "Pago Parcialmente"

    items = client.get(f"/api/budget/wedding/{wedding['id']}", headers=owner["headers"]).json()
    assert items[0]["payment_status"] == "Pago Parcialmente"
    assert items[0]["decision_status"] == "Contratado"


def test_item_rejects_vendor_from_other_wedding(client, db, make_user, make_wedding):
    owner = make_user()
    first = make_wedding(owner)
    second = make_wedding(owner, bride="Bia", groom="Caio")
    foreign = _vendor(client, owner, second["id"])

    r = _item(client, owner, first["id"], vendor_id=foreign["id"])
    assert r.status_code == 400
    assert db.query(models.BudgetItem).count() == 0


def test_item_rejects_negative_values(client, make_user, make_wedding):
    owner = make_user()
    wedding = make_wedding(owner)
    assert _item(client, owner, wedding["id"], final_value=-1).status_code == 400
    assert _item(client, owner, wedding["id"], paid_value=-5).status_code == 400


def test_status_patch_changes_payment_status(client, make_user, make_wedding):
    owner = make_user()
    wedding = make_wedding(owner)
    item = _item(client, owner, wedding["id"], final_value=500, paid_value=500).json()
    assert item["payment_status"] == "N/A"

    r = client.patch(f"/api/budget/{item['id']}/status", json={"decision_status": "Contratado"}, headers=owner["headers"])
    assert r.status_code == 200
    assert r.json()["decision_status"] == "Contratado"
    assert r.json()["payment_status"] == "Pago"

    bad = client.patch(f"/api/budget/{item['id']}/status", json={"decision_status": "Talvez"}, headers=owner["headers"])
    assert bad.status_code == 400
    missing = client.patch("/api/budget/999999/status", json={"decision_status": "Contratado"}, headers=owner["headers"])
    assert missing.status_code == 404


def test_viewer_reads_but_cannot_write_budget(client, make_user, make_wedding, add_member):
    owner = make_user()
    viewer = make_user()
    wedding = make_wedding(owner)
    add_member(owner, viewer, wedding["id"], "view")
    item = _item(client, owner, wedding["id"]).json()

    assert client.get(f"/api/budget/wedding/{wedding['id']}", headers=viewer["headers"]).status_code == 200
    assert _item(client, viewer, wedding["id"]).status_code == 403
    assert client.patch(
        f"/api/budget/{item['id']}/status", json={"decision_status": "Contratado"}, headers=viewer["headers"],
    ).status_code == 403
    assert client.delete(f"/api/budget/{item['id']}", headers=viewer["headers"]).status_code == 403


def test_update_and_delete_item(client, db, make_user, make_wedding):
    owner = make_user()
    wedding = make_wedding(owner)
    item = _item(client, owner, wedding["id"]).json()

    r = client.put(
        f"/api/budget/{item['id']}",
        json={"category": "Flores", "final_value": 250, "paid_value": 0, "decision_status": "Contratado"},
        headers=owner["headers"],
    )
    assert r.status_code == 200
    assert r.json()["category"] == "Flores"
    assert r.json()["payment_status"] == "Pendente"

    assert client.delete(f"/api/budget/{item['id']}", headers=owner["headers"]).status_code == 204
    assert db.query(models.BudgetItem).count() == 0


def test_summary_remaining_against_estimate(client, make_user, make_wedding):
    owner = make_user()
    wedding = make_wedding(owner, estimated_budget=50000)
    wid = wedding["id"]
    _item(client, owner, wid, final_value=12000, paid_value=3000, decision_status="Contratado")
    _item(client, owner, wid, final_value=8000, decision_status="Analisando")

    r = client.get(f"/api/budget/summary/wedding/{wid}", headers=owner["headers"])
    assert r.status_code == 200
    assert r.json() == {
        "wedding_id": wid,
        "estimated_budget": 50000.0,
        "total_contracted": 12000.0,
        "total_paid": 3000.0,
        "total_quoted": 8000.0,
        "remaining": 38000.0,
    }


def test_summary_without_estimate_has_no_remaining(client, make_user, make_wedding):
    owner = make_user()
    wedding = make_wedding(owner)
    r = client.get(f"/api/budget/summary/wedding/{wedding['id']}", headers=owner["headers"])
    assert r.json()["remaining"] is None
    assert r.json()["total_contracted"] == 0.0


def test_vendor_delete_detaches_items(client, db, make_user, make_wedding):
    owner = make_user()
    wedding = make_wedding(owner)
    vendor = _vendor(client, owner, wedding["id"])
    item = _item(client, owner, wedding["id"], vendor_id=vendor["id"]).json()

    by_vendor = client.get(f"/api/budget/vendor/{vendor['id']}", headers=owner["headers"]).json()
    assert [i["id"] for i in by_vendor] == [item["id"]]

    assert client.delete(f"/api/vendors/{vendor['id']}", headers=owner["headers"]).status_code == 204
    stored = db.get(models.BudgetItem, item["id"])
    assert stored is not None
    assert stored.vendor_id is None
    assert client.get(f"/api/budget/vendor/{vendor['id']}", headers=owner["headers"]).status_code == 404


def test_update_vendor_requires_edit(client, make_user, make_wedding, add_member):
    owner = make_user()
    viewer = make_user()
    wedding = make_wedding(owner)
    add_member(owner, viewer, wedding["id"], "view")
    vendor = _vendor(client, owner, wedding["id"])

    body = {"vendor_name": "Buffet Sabor & Cia", "phone": "+55 11 99999-0000"}
    assert client.put(f"/api/vendors/{vendor['id']}", json=body, headers=viewer["headers"]).status_code == 403
    r = client.put(f"/api/vendors/{vendor['id']}", json=body, headers=owner["headers"])
    assert r.status_code == 200
    assert r.json()["phone"] == "+55 11 99999-0000"


def test_new_item_requires_a_final_value(client, db, make_user, make_wedding):
    owner = make_user()
    wedding = make_wedding(owner)
    assert _item(client, owner, wedding["id"], category="Flores", final_value=0).status_code == 400
    r = client.post(f"/api/budget/wedding/{wedding['id']}", json={"category": "Flores"}, headers=owner["headers"])
    assert r.status_code == 400
    assert db.query(models.BudgetItem).count() == 0

    # La edición completa sí admite dejarlo en cero.
    item = _item(client, owner, wedding["id"], category="Flores", final_value=300).json()
    r = client.put(
        f"/api/budget/{item['id']}",
        json={"category": "Flores", "final_value": 0, "decision_status": "Contratado"},
        headers=owner["headers"],
    )
    assert r.status_code == 200
    assert r.json()["final_value"] == 0.0
    assert r.json()["payment_status"] == "Pendente"
