# tests/test_auth.py
# Registro, verificación, login, refresh/logout y recuperación de contraseña.

from mariage import auth, models

PASSWORD = "Segura#2024"


def _register(client, email="ana@example.com", name="Ana", password=PASSWORD, consent=True):
    return client.post(
        "/api/auth/register",
        json={"name": name, "email": email, "password": password, "consent": consent},
    )


# ---------------------------------------------------------------------------------
# Registro y verificación
# ---------------------------------------------------------------------------------

def test_register_creates_unverified_user_and_sends_code(client, db, outbox):
    r = _register(client, email="Ana@Example.com")
    assert r.status_code == 201
    assert r.json() == {"email": "ana@example.com"}

    user = db.query(models.User).filter(models.User.email == "ana@example.com").one()
    assert user.is_verified is False
    assert len(user.verification_token) == 6
    assert user.password_hash != PASSWORD
    assert outbox[-1]["to"] == "ana@example.com"
    assert user.verification_token in outbox[-1]["text"]


def test_register_rejects_weak_password_and_missing_consent(client):
    assert _register(client, password="debil").status_code == 400
    assert _register(client, consent=False).status_code == 400


def test_register_twice_unverified_replaces_row(client, db):
    assert _register(client, name="Primero").status_code == 201
    assert _register(client, name="Segundo").status_code == 201
    rows = db.query(models.User.name).filter(models.User.email == "ana@example.com").all()
    assert [name for (name,) in rows] == ["Segundo"]


def test_register_verified_email_conflicts(client, make_user):
    make_user(email="ana@example.com")
    r = _register(client)
    assert r.status_code == 409


def test_verify_email_errors(client, code_for):
    assert client.post("/api/auth/verify-email", json={"email": "nadie@example.com", "code": "123456"}).status_code == 404

    _register(client)
    # Los códigos van de 100000 a 999999: "000000" nunca es válido.
    bad = client.post("/api/auth/verify-email", json={"email": "ana@example.com", "code": "000000"})
    assert bad.status_code == 400

    ok = client.post("/api/auth/verify-email", json={"email": "ana@example.com", "code": code_for("ana@example.com")})
    assert ok.status_code == 200
    again = client.post("/api/auth/verify-email", json={"email": "ana@example.com", "code": "123456"})
    assert again.status_code == 400


def test_verify_email_rejects_expired_code(client, db, code_for):
    _register(client)
    code = code_for("ana@example.com")
    db.query(models.User).filter(models.User.email == "ana@example.com").update(
        {models.User.verification_token_expires_at: auth.utcnow().replace(year=2000)}
    )
    db.commit()
    r = client.post("/api/auth/verify-email", json={"email": "ana@example.com", "code": code})
    assert r.status_code == 400


def test_verify_email_issues_tokens_and_cookie(client, code_for):
    _register(client)
    r = client.post("/api/auth/verify-email", json={"email": "ana@example.com", "code": code_for("ana@example.com")})
    body = r.json()
    assert body["token_type"] == "bearer"
    assert body["user_name"] == "Ana"
    assert body["pending_invitations"] == []
    assert "refreshToken" in r.cookies
    set_cookie = r.headers["set-cookie"].lower()
    assert "httponly" in set_cookie
    assert "samesite=strict" in set_cookie

# ---------------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------------

def test_login_wrong_password_is_401(client, make_user):
    user = make_user()
    r = client.post("/api/auth/login", json={"email": user["email"], "password": "Otra#2024x"})
    assert r.status_code == 401


def test_login_unverified_is_403(client):
    _register(client)
    r = client.post("/api/auth/login", json={"email": "ana@example.com", "password": PASSWORD})
    assert r.status_code == 403


def test_login_keeps_single_refresh_token(client, db, make_user):
    user = make_user()
    for _ in range(2):
        r = client.post("/api/auth/login", json={"email": user["email"], "password": PASSWORD})
        assert r.status_code == 200
    count = db.query(models.RefreshToken).filter(models.RefreshToken.user_id == user["id"]).count()
    assert count == 1


def test_login_lists_pending_invitations(client, make_user, make_wedding):
    owner = make_user()
    guest = make_user(email="madrinha@example.com")
    wedding = make_wedding(owner, bride="Maria", groom="Pedro")
    client.post(
        "/api/team/invite",
        json={"wedding_id": wedding["id"], "email": guest["email"], "permission_level": "edit"},
        headers=owner["headers"],
    )

    r = client.post("/api/auth/login", json={"email": guest["email"], "password": PASSWORD})
    pending = r.json()["pending_invitations"]
    assert len(pending) == 1
    assert pending[0]["wedding_id"] == wedding["id"]
    assert pending[0]["permission_level"] == "edit"
    assert (pending[0]["bride_name"], pending[0]["groom_name"]) == ("Maria", "Pedro")

# ---------------------------------------------------------------------------------
# Refresh y logout
# ---------------------------------------------------------------------------------

def test_refresh_token_flow(client, make_user):
    user = make_user()
    r = client.post("/api/auth/refresh-token")
    assert r.status_code == 200
    new_access = r.json()["access_token"]
    me = client.get("/api/weddings", headers={"Authorization": f"Bearer {new_access}"})
    assert me.status_code == 200

    client.post("/api/auth/logout")
    client.cookies.clear()
    assert client.post("/api/auth/refresh-token").status_code == 401


def test_refresh_with_revoked_token_is_403(client, make_user):
    make_user()
    old = client.cookies.get("refreshToken")
    client.post("/api/auth/logout")
    client.cookies.set("refreshToken", old)
    assert client.post("/api/auth/refresh-token").status_code == 403


def test_access_token_required(client):
    r = client.get("/api/weddings")
    assert r.status_code == 401
    assert r.headers.get("www-authenticate") == "Bearer"
    assert client.get("/api/weddings", headers={"Authorization": "Bearer basura"}).status_code == 401

# ---------------------------------------------------------------------------------
# Recuperación de contraseña
# ---------------------------------------------------------------------------------

def test_password_reset_request_is_neutral(client, make_user, outbox):
    user = make_user()
    sent_before = len(outbox)
    known = client.post("/api/auth/request-password-reset", json={"email": user["email"]})
    unknown = client.post("/api/auth/request-password-reset", json={"email": "nadie@example.com"})
    assert known.status_code == unknown.status_code == 200
    assert known.json() == unknown.json()
    assert len(outbox) == sent_before + 1


def test_password_reset_changes_password_and_revokes_sessions(client, db, make_user):
    user = make_user()
    client.post("/api/auth/request-password-reset", json={"email": user["email"]})
    code = db.query(models.PasswordResetToken.token).filter(models.PasswordResetToken.user_id == user["id"]).scalar()

    r = client.post(
        "/api/auth/reset-password",
        json={"email": user["email"], "code": code, "password": "Nueva#2025"},
    )
    assert r.status_code == 200
    assert db.query(models.RefreshToken).filter(models.RefreshToken.user_id == user["id"]).count() == 0
    assert db.query(models.PasswordResetToken).filter(models.PasswordResetToken.user_id == user["id"]).count() == 0

    assert client.post("/api/auth/login", json={"email": user["email"], "password": PASSWORD}).status_code == 401
    assert client.post("/api/auth/login", json={"email": user["email"], "password": "Nueva#2025"}).status_code == 200


def test_password_reset_with_wrong_code_is_400(client, make_user):
    user = make_user()
    client.post("/api/auth/request-password-reset", json={"email": user["email"]})
    r = client.post(
        "/api/auth/reset-password",
        json={"email": user["email"], "code": "abcdef", "password": "Nueva#2025"},
    )
    assert r.status_code == 400


def test_passwords_beyond_bcrypt_limit_are_400(client, make_user):
    # bcrypt solo firma 72 bytes: una contraseña fuerte más larga no debe llegar al hash.
    too_long = "Aa1#" + "x" * 80
    assert _register(client, email="largo@example.com", password=too_long).status_code == 400
    assert _register(client, email="acentos@example.com", password="Aa1#" + "ç" * 35).status_code == 400
    assert _register(client, email="justo@example.com", password="Aa1#" + "x" * 68).status_code == 201

    user = make_user()
    client.post("/api/auth/request-password-reset", json={"email": user["email"]})
    r = client.post(
        "/api/auth/reset-password",
        json={"email": user["email"], "code": "123456", "password": too_long},
    )
    assert r.status_code == 400
    assert "72" in str(r.json()["detail"])
