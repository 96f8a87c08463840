# mariage/db.py
# =================================================================================
# 🗄️ CONFIGURACIÓN Y CONEXIÓN A LA BASE DE DATOS
# ---------------------------------------------------------------------------------
# Este módulo centraliza la conexión con SQLAlchemy:
# - PostgreSQL en producción, SQLite como fallback local y en tests.
# - `get_db()` es el cliente de almacenamiento inyectado (una sesión por petición).
# - `transaction()` envuelve las escrituras de varias sentencias (todo o nada).
# =================================================================================

# --- Importaciones de Módulos ---
import os
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base, Session
from sqlalchemy.pool import StaticPool
from loguru import logger

# --- Lógica de URL de la Base de Datos ---
DATABASE_URL = os.getenv("DATABASE_URL", "").strip()

# Política de arranque: por defecto se exige PostgreSQL para no caer en SQLite en producción.
FORCE_DB = os.getenv("FORCE_DB", "postgres").strip().lower()

# Placeholder de la plataforma de despliegue sin resolver.
if DATABASE_URL.startswith("${{") and DATABASE_URL.endswith("}}"):
    logger.warning("DATABASE_URL parece un placeholder sin resolver: {}", DATABASE_URL)
    DATABASE_URL = ""

if not DATABASE_URL:
    if FORCE_DB == "postgres":
        raise RuntimeError(
            "FATAL: DATABASE_URL no está disponible y FORCE_DB=postgres. "
            "Se aborta para evitar un fallback accidental a SQLite en producción."
        )
    logger.warning("DATABASE_URL está vacía. Usando fallback a SQLite local.")
    project_root = os.path.abspath(os.path.join(os.path.dirname(os.path.abspath(__file__)), ".."))
    DATABASE_URL = f"sqlite:///{os.path.join(project_root, 'mariage.db')}"

# Algunos proveedores aún entregan el esquema antiguo 'postgres://'.
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)


def _build_engine(url: str):
    """Crea el engine según el motor (SQLite necesita opciones propias)."""
    if url.startswith("sqlite"):
        logger.info("DB in use → SQLite")
        kwargs = {"connect_args": {"check_same_thread": False}, "pool_pre_ping": True}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # Una sola conexión compartida: la BD en memoria vive mientras viva el engine.
            kwargs["poolclass"] = StaticPool
        sqlite_engine = create_engine(url, **kwargs)

        @event.listens_for(sqlite_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, _record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return sqlite_engine

    logger.info("DB in use → PostgreSQL (o no-SQLite)")
    return create_engine(url, pool_pre_ping=True)


# --- Engine, fábrica de sesiones y base declarativa ---
engine = _build_engine(DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db() -> Iterator[Session]:
    """Dependencia de FastAPI para inyectar una sesión de BD por petición."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def insert_for(db: Session, model):
    """INSERT propio del dialecto, con soporte de ON CONFLICT (upserts nativos)."""
    dialect_name = db.get_bind().dialect.name
    if dialect_name == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect_name == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        raise RuntimeError(f"Upsert no soportado para el dialecto '{dialect_name}'")
    return insert(model)


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """Confirma al salir sin errores; ante cualquier excepción hace rollback y la relanza."""
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


# =================================================================================
# 🔎 CICLO DE VIDA: trazas al arrancar y liberación del pool al apagar
# =================================================================================
def log_db_path_on_startup() -> None:
    """Escribe en los logs qué motor de base de datos se está utilizando al arrancar."""
    try:
        url = engine.url
        logger.info("DB driver in use → {}", url.drivername)
        if url.drivername == "sqlite":
            db_file = getattr(url, "database", None)
            abs_path = os.path.abspath(db_file) if db_file else "<memory>"
            logger.info("DB path → {} (abs={})", db_file, abs_path)
    except Exception as e:
        logger.warning("No se pudo resolver la información de la BD: {}", e)


def dispose_engine() -> None:
    """Cierra las conexiones del pool (evento de apagado)."""
    engine.dispose()
    logger.info("DB pool liberado")
