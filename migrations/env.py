# migrations/env.py
# =================================================================================
# 🧬 Entorno de Alembic para Mariage
# - La conexión sale de mariage.db (DATABASE_URL / FORCE_DB), nunca de alembic.ini.
# - `alembic -x url=...` permite migrar otra BD puntual sin tocar el entorno.
# - SQLite necesita modo batch: no soporta la mayoría de ALTER TABLE.
# =================================================================================
from logging.config import fileConfig
import os
import sys

from alembic import context
from loguru import logger
from sqlalchemy import create_engine

# El paquete 'mariage' vive junto a 'migrations/' en la raíz del repo.
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from mariage import models  # noqa: E402,F401  Registra las tablas en Base.metadata.
from mariage.db import Base, engine as app_engine  # noqa: E402

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _target_engine():
    override = context.get_x_argument(as_dictionary=True).get("url")
    if override:
        logger.info("MIGRATIONS: usando URL de -x url ({})", override.split("://", 1)[0])
        return create_engine(override)
    return app_engine


def _configure(is_sqlite: bool, **kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        compare_server_default=True,
        render_as_batch=is_sqlite,
        **kwargs,
    )


def run_migrations_offline() -> None:
    """Emite el SQL por stdout sin abrir conexión."""
    url = _target_engine().url
    _configure(
        url.drivername.startswith("sqlite"),
        url=str(url),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    target = _target_engine()
    logger.info("MIGRATIONS: aplicando sobre {}", target.url.drivername)
    with target.connect() as connection:
        _configure(connection.dialect.name == "sqlite", connection=connection)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
