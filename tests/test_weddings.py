# tests/test_weddings.py
# Creación de bodas, slugs únicos, actualización, borrado y micrositio.

from sqlalchemy.exc import IntegrityError

import pytest

from mariage import models, schemas
from mariage.core.errors import ConflictError
from mariage.crud import weddings_crud


def test_slugify_folds_accents_and_symbols():
    assert weddings_crud.slugify("Ana Júlia & João!") == "ana-julia-joao"
    assert weddings_crud.base_slug("Ana", "João") == "ana-e-joao"
    assert weddings_crud.base_slug("Ana", "") == "ana-e"
    assert weddings_crud.base_slug("你好", "!!") == "casamento"


def test_create_wedding_grants_owner_edit(client, db, make_user, make_wedding):
    owner = make_user()
    wedding = make_wedding(owner, wedding_date="2026-05-20", color_palette=["#fff", "#b5838d"])
    assert wedding["website_slug"] == "ana-e-joao"
    assert wedding["owner_id"] == owner["id"]
    assert wedding["color_palette"] == ["#fff", "#b5838d"]

    member = db.query(models.WeddingMember).filter(models.WeddingMember.wedding_id == wedding["id"]).one()
    assert member.user_id == owner["id"]
    assert member.permission_level == models.PermissionLevelEnum.edit
    assert member.relationship == "Noivo/Noiva"


def test_create_wedding_requires_both_names(client, make_user):
    owner = make_user()
    r = client.post("/api/weddings", json={"bride_name": "Ana", "groom_name": "  "}, headers=owner["headers"])
    assert r.status_code == 400
    r = client.post("/api/weddings", json={"bride_name": "Ana"}, headers=owner["headers"])
    assert r.status_code == 400


def test_colliding_slugs_get_increasing_suffixes(make_user, make_wedding):
    owner = make_user()
    slugs = [make_wedding(owner)["website_slug"] for _ in range(3)]
    assert slugs == ["ana-e-joao", "ana-e-joao-1", "ana-e-joao-2"]


def test_commit_time_slug_collision_is_conflict(db, make_user, make_wedding, monkeypatch):
    owner = make_user()
    make_wedding(owner)
    # Simula dos altas concurrentes que vieron el mismo candidato libre.
    monkeypatch.setattr(weddings_crud, "allocate_slug", lambda _db, base: base)
    user = db.get(models.User, owner["id"])
    with pytest.raises(ConflictError) as exc:
        weddings_crud.create_wedding(db, user, schemas.WeddingCreate(bride_name="Ana", groom_name="João"))
    assert exc.value.detail == weddings_crud.SLUG_TAKEN
    assert db.query(models.Wedding).count() == 1
    assert db.query(models.WeddingMember).count() == 1


def test_integrity_errors_other_than_slug_propagate(db, make_user, monkeypatch):
    owner = make_user()
    user = db.get(models.User, owner["id"])

    def _broken_flush(*args, **kwargs):
        raise IntegrityError("INSERT", {}, Exception("NOT NULL constraint failed: weddings.groom_name"))

    monkeypatch.setattr(db, "flush", _broken_flush)
    with pytest.raises(IntegrityError):
        weddings_crud.create_wedding(db, user, schemas.WeddingCreate(bride_name="Ana", groom_name="João"))


def test_list_returns_memberships_with_permission(client, make_user, make_wedding, add_member):
    owner = make_user()
    friend = make_user()
    first = make_wedding(owner, bride="Bia", groom="Caio")
    second = make_wedding(friend, bride="Lia", groom="Rui")
    add_member(friend, owner, second["id"], "view")

    r = client.get("/api/weddings", headers=owner["headers"])
    assert r.status_code == 200
    by_id = {w["id"]: w["permission_level"] for w in r.json()}
    assert by_id == {first["id"]: "edit", second["id"]: "view"}
    assert r.json()[0]["id"] == second["id"]


def test_update_wedding_partial_and_duplicate_slug(client, make_user, make_wedding):
    owner = make_user()
    first = make_wedding(owner)
    second = make_wedding(owner, bride="Bia", groom="Caio")

    r = client.put(
        f"/api/weddings/{second['id']}",
        json={"wedding_style": "Boho", "website_slug": "Bia & Caio 2026"},
        headers=owner["headers"],
    )
    assert r.status_code == 200
    assert r.json()["wedding_style"] == "Boho"
    assert r.json()["website_slug"] == "bia-caio-2026"
    assert r.json()["bride_name"] == "Bia"

    r = client.put(
        f"/api/weddings/{second['id']}", json={"website_slug": first["website_slug"]}, headers=owner["headers"],
    )
    assert r.status_code == 409
    assert r.json()["detail"] == "slug already taken"

    r = client.put(
        f"/api/weddings/{first['id']}", json={"website_slug": first["website_slug"]}, headers=owner["headers"],
    )
    assert r.status_code == 200


def test_delete_wedding_cascades(client, db, make_user, make_wedding):
    owner = make_user()
    wedding = make_wedding(owner)
    wid = wedding["id"]
    client.post(f"/api/guests/wedding/{wid}", json={"full_name": "Tio Zé"}, headers=owner["headers"])
    vendor = client.post(f"/api/vendors/wedding/{wid}", json={"vendor_name": "Buffet"}, headers=owner["headers"]).json()
    client.post(
        f"/api/budget/wedding/{wid}",
        json={"category": "Buffet", "final_value": 100, "vendor_id": vendor["id"]},
        headers=owner["headers"],
    )
    client.put(f"/api/weddings/{wid}/site", json={"our_story": "Nos conocimos..."}, headers=owner["headers"])

    assert client.delete(f"/api/weddings/{wid}", headers=owner["headers"]).status_code == 204
    for model in (models.WeddingMember, models.Guest, models.Vendor, models.BudgetItem, models.SiteDetails):
        assert db.query(model).filter(model.wedding_id == wid).count() == 0


def test_site_details_upsert_and_public_site(client, make_user, make_wedding):
    owner = make_user()
    wedding = make_wedding(owner, ceremony_location="Igreja Matriz")
    wid = wedding["id"]

    assert client.get(f"/api/weddings/{wid}/site", headers=owner["headers"]).json() == {}
    client.put(f"/api/weddings/{wid}/site", json={"our_story": "v1"}, headers=owner["headers"])
    r = client.put(f"/api/weddings/{wid}/site", json={"our_story": "v2"}, headers=owner["headers"])
    assert r.status_code == 200
    assert client.get(f"/api/weddings/{wid}/site", headers=owner["headers"]).json()["our_story"] == "v2"

    public = client.get(f"/api/public/site/{wedding['website_slug']}")
    assert public.status_code == 200
    assert public.json()["our_story"] == "v2"
    assert public.json()["ceremony_location"] == "Igreja Matriz"
    assert "owner_id" not in public.json()
    assert client.get("/api/public/site/no-existe").status_code == 404
