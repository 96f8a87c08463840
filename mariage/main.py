# mariage/main.py                                                                              # Archivo principal de la API.

# ================================================================
# 🧱 MODO MANTENIMIENTO (Control temporal desde variable de entorno)
# ================================================================

import os

# Si la variable MAINTENANCE_MODE=1 está activa, se crea una app mínima
if os.getenv("MAINTENANCE_MODE") == "1":
    from fastapi import FastAPI
    from fastapi.responses import JSONResponse
    from loguru import logger

    app = FastAPI(title="Mariage API en mantenimiento")

    @app.api_route("/{path:path}", methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"])
    async def maintenance_page(path: str):
        """Responde a cualquier ruta y método con mensaje neutro de mantenimiento."""
        return JSONResponse(
            status_code=503,
            content={
                "status": "offline",
                "message": "🌙 El sistema está en mantenimiento. Vuelve más tarde."
            }
        )

    logger.warning("🚧 API arrancada en MODO MANTENIMIENTO. Todos los endpoints reales están desactivados.")
else:
    # =================================================================================
    # 🧠 NÚCLEO DE LA APLICACIÓN API (FastAPI)
    # ---------------------------------------------------------------------------------
    # - Carga .env ANTES de importar módulos que leen configuración.
    # - Configura CORS y los handlers de error del dominio.
    # - Registra los routers (auth, bodas, equipo, invitados, público, proveedores,
    #   presupuesto, usuarios, meta).
    # =================================================================================

    from pathlib import Path

    from dotenv import load_dotenv
    from fastapi import FastAPI, Request
    from fastapi.exceptions import RequestValidationError
    from fastapi.encoders import jsonable_encoder
    from fastapi.middleware.cors import CORSMiddleware
    from fastapi.responses import JSONResponse
    from loguru import logger

    env_path = Path('.') / '.env'
    load_dotenv(dotenv_path=env_path)

    logger.info(
        "[BOOT] DRY_RUN={} | EMAIL_FROM={} | PROVIDER={} | SG_KEY_SET={}",
        os.getenv("DRY_RUN"),
        os.getenv("EMAIL_FROM"),
        os.getenv("EMAIL_PROVIDER", "sendgrid"),
        "yes" if os.getenv("SENDGRID_API_KEY") else "no",
    )

    from mariage import meta
    from mariage.core.errors import MariageError
    from mariage.db import dispose_engine, log_db_path_on_startup
    from mariage.routers import (
        auth_routes,
        budget,
        guests,
        public,
        team,
        users,
        vendors,
        weddings,
    )

    app = FastAPI(
        title="Mariage API",
        description="Backend para planificar bodas en equipo: micrositio, invitados, RSVP y presupuesto",
        version="1.0.0",
    )

    # Orígenes separados por comas; el frontend local por defecto en desarrollo.
    cors_origins = [
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
        if origin.strip()
    ]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,                     # La cookie del refresh token viaja con credenciales.
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -----------------------------------------------------------------------------
    # ⚠️ Handlers de error
    # -----------------------------------------------------------------------------
    @app.exception_handler(MariageError)
    async def _domain_error(request: Request, exc: MariageError):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})

    @app.exception_handler(Exception)
    async def _unexpected_error(request: Request, exc: Exception):
        logger.exception("Error no controlado en {} {}", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"detail": "Error interno del servidor."})

    # -----------------------------------------------------------------------------
    # 🔁 Ciclo de vida del almacenamiento
    # -----------------------------------------------------------------------------
    @app.on_event("startup")
    def _startup_db_trace() -> None:
        log_db_path_on_startup()

    @app.on_event("shutdown")
    def _shutdown_db_pool() -> None:
        dispose_engine()

    app.include_router(auth_routes.router)
    app.include_router(weddings.router)
    app.include_router(team.router)
    app.include_router(guests.router)
    app.include_router(public.router)
    app.include_router(vendors.router)
    app.include_router(budget.router)
    app.include_router(users.router)
    app.include_router(meta.router)
