# conftest.py
# -------------------------------------------------------------------------------------
# Archivo: conftest.py (raíz del proyecto)
# Propósito: Preparar pytest para probar la API completa en memoria.
#            - Fija variables de entorno ANTES de importar la app (BD, secretos, DRY_RUN).
#            - BD SQLite en memoria (StaticPool): tablas nuevas en cada test.
#            - Cubos del rate-limit vacíos en cada test.
#            - Correos capturados en una lista ('outbox') en lugar de enviarse.
#            - Fábrica de usuarios verificados con su cabecera Authorization.
# -------------------------------------------------------------------------------------

from __future__ import annotations  # Anotaciones adelantadas.
import os                           # Entorno de pruebas.
import time                         # Cronómetro de la suite.
from typing import Callable, Dict, List

import pytest                       # Framework de testing.

# =========================
# Entorno de pruebas
# =========================
os.environ["DATABASE_URL"] = "sqlite://"                        # BD en memoria compartida (StaticPool).
os.environ["FORCE_DB"] = "sqlite"                               # Permite el fallback a SQLite.
os.environ["DRY_RUN"] = "1"                                     # Nunca enviar correos reales.
os.environ["SECRET_KEY"] = "test-access-secret"                 # Secretos distintos entre sí.
os.environ["REFRESH_SECRET_KEY"] = "test-refresh-secret"
os.environ["ENVIRONMENT"] = "test"                              # Cookie sin flag 'secure'.
os.environ.pop("MAINTENANCE_MODE", None)                        # La app real, nunca la de mantenimiento.

from fastapi.testclient import TestClient                       # noqa: E402  Cliente HTTP (httpx).

from mariage import mailer, models, rate_limit                 # noqa: E402
from mariage.db import Base, SessionLocal, engine               # noqa: E402
from mariage.main import app                                    # noqa: E402

STRONG_PASSWORD = "Segura#2024"                                 # Cumple la política de contraseñas.

_session_start_monotonic: float = 0.0


def _fmt_hhmmss(elapsed: float) -> str:
    """Segundos → HH:MM:SS."""
    total = int(elapsed)
    return f"{total // 3600:02d}:{(total % 3600) // 60:02d}:{total % 60:02d}"

# ===========================
# Hooks de ciclo de ejecución
# ===========================
def pytest_sessionstart(session):
    """Marca el inicio de la suite."""
    global _session_start_monotonic
    _session_start_monotonic = time.monotonic()
    tr = session.config.pluginmanager.get_plugin("terminalreporter")
    if tr:
        tr.write_line("🚀 Pytest iniciado (BD en memoria, DRY_RUN=1)…")


def pytest_sessionfinish(session, exitstatus):
    """Muestra el tiempo total al terminar."""
    tr = session.config.pluginmanager.get_plugin("terminalreporter")
    line = f"🟢 Suite finalizada. Tiempo total: {_fmt_hhmmss(time.monotonic() - _session_start_monotonic)}"
    if tr:
        tr.write_line(line)

# ===============================
# Fixtures de infraestructura
# ===============================
@pytest.fixture(autouse=True)
def _fresh_database():
    """Esquema limpio por test: create_all antes, drop_all después."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def _fresh_rate_limit():
    rate_limit.reset()
    yield
    rate_limit.reset()


@pytest.fixture(autouse=True)
def outbox(monkeypatch) -> List[Dict[str, str]]:
    """Captura cada correo que la app intenta enviar."""
    sent: List[Dict[str, str]] = []

    def _capture(to_email, subject, html_body, text_fallback=""):
        sent.append({"to": to_email, "subject": subject, "html": html_body, "text": text_fallback})
        return True

    monkeypatch.setattr(mailer, "send_email_html", _capture)
    return sent


@pytest.fixture
def client() -> TestClient:
    # Sin context manager: el evento 'shutdown' liberaría el pool y con él la BD en memoria.
    return TestClient(app)


@pytest.fixture
def db():
    """Sesión directa para inspeccionar o preparar datos."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()

# ===============================
# Fábricas de datos
# ===============================
def verification_code(email: str) -> str:
    """Lee el código de verificación guardado (el correo solo va al outbox)."""
    session = SessionLocal()
    try:
        return session.query(models.User.verification_token).filter(models.User.email == email).scalar()
    finally:
        session.close()


@pytest.fixture
def make_user(client) -> Callable[..., Dict]:
    """
    Registra y verifica un usuario vía API.
    Devuelve {'id', 'email', 'name', 'token', 'headers', 'login'}.
    """
    counter = {"n": 0}

    def _make(name: str = None, email: str = None) -> Dict:
        counter["n"] += 1
        name = name or f"Usuario {counter['n']}"
        email = email or f"user{counter['n']}@example.com"
        r = client.post(
            "/api/auth/register",
            json={"name": name, "email": email, "password": STRONG_PASSWORD, "consent": True},
        )
        assert r.status_code == 201, r.text
        r = client.post("/api/auth/verify-email", json={"email": email, "code": verification_code(email)})
        assert r.status_code == 200, r.text
        body = r.json()
        session = SessionLocal()
        try:
            user_id = session.query(models.User.id).filter(models.User.email == email).scalar()
        finally:
            session.close()
        return {
            "id": user_id,
            "email": email,
            "name": name,
            "token": body["access_token"],
            "headers": {"Authorization": f"Bearer {body['access_token']}"},
            "login": body,
        }

    return _make


@pytest.fixture
def make_wedding(client) -> Callable[..., Dict]:
    """Crea una boda como el usuario dado y devuelve el JSON de respuesta."""

    def _make(user: Dict, bride: str = "Ana", groom: str = "João", **extra) -> Dict:
        r = client.post(
            "/api/weddings",
            json={"bride_name": bride, "groom_name": groom, **extra},
            headers=user["headers"],
        )
        assert r.status_code == 201, r.text
        return r.json()

    return _make


@pytest.fixture
def add_member(client, outbox) -> Callable[..., None]:
    """Invita y acepta: deja a 'member' en la boda con el nivel pedido."""

    def _add(owner: Dict, member: Dict, wedding_id: int, level: str = "view") -> None:
        r = client.post(
            "/api/team/invite",
            json={"wedding_id": wedding_id, "email": member["email"], "permission_level": level},
            headers=owner["headers"],
        )
        assert r.status_code == 200, r.text
        token = invitation_token_from(outbox[-1])
        r = client.post("/api/team/accept-invitation", json={"token": token}, headers=member["headers"])
        assert r.status_code == 200, r.text

    return _add


def invitation_token_from(mail: Dict[str, str]) -> str:
    """Extrae el token del enlace de aceptación del texto plano del correo."""
    return mail["text"].rsplit("token=", 1)[1].strip()


@pytest.fixture
def code_for() -> Callable[[str], str]:
    return verification_code


@pytest.fixture
def token_from() -> Callable[[Dict[str, str]], str]:
    return invitation_token_from
