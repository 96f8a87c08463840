# create_db.py

# =================================================================================
# 🏗️ SCRIPT DE CREACIÓN DE LA BASE DE DATOS (desarrollo local)
# ---------------------------------------------------------------------------------
# Crea todas las tablas de los modelos sin pasar por Alembic. En producción el
# esquema lo gestiona `alembic upgrade head`.
# Uso típico: FORCE_DB=sqlite python create_db.py
# =================================================================================

from dotenv import load_dotenv
from loguru import logger

load_dotenv()

from mariage.db import engine, Base  # noqa: E402

# Importar los modelos los registra en Base.metadata; sin esto no se crea ninguna tabla.
from mariage import models  # noqa: E402,F401


def create_database_tables():
    """Crea en la BD todas las tablas asociadas a `Base`."""
    logger.info("Creando tablas en {} ...", engine.url.drivername)
    Base.metadata.create_all(bind=engine)
    logger.info("✔️ Tablas creadas: {}", ", ".join(sorted(Base.metadata.tables)))


if __name__ == "__main__":
    create_database_tables()
