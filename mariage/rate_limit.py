# mariage/rate_limit.py                                                     # Ruta del archivo.

# =================================================================================
# 🚦 Rate limit ligero en memoria (ventana deslizante)
# ---------------------------------------------------------------------------------
# - Un deque de timestamps por clave (ámbito + IP del cliente).
# - Protege login, verificación de email y recuperación de contraseña.
# - Estado por proceso: con varias instancias usar un proxy o Redis delante.
# =================================================================================

import os                                              # Límites desde .env.
import threading                                       # Las rutas sync corren en un threadpool.
import time                                            # Timestamps monotónicos.
from collections import deque                          # Cola eficiente por clave.
from typing import Dict, Tuple                         # Tipado.

from fastapi import HTTPException, Request, status     # 429 y lectura de cabeceras.
from loguru import logger                              # Trazas.

_BUCKETS: Dict[str, deque] = {}                        # clave → timestamps dentro de la ventana.
_LOCK = threading.Lock()                                # Purga, comprobación y alta van juntas.


def _now() -> float:
    return time.monotonic()


def get_limits_from_env(prefix: str, default_max: int, default_window: int) -> Tuple[int, int]:
    """Lee {prefix}_MAX y {prefix}_WINDOW (segundos); valores inválidos caen a los defaults."""
    try:
        max_req = int(os.getenv(f"{prefix}_MAX", str(default_max)))
        window = int(os.getenv(f"{prefix}_WINDOW", str(default_window)))
    except ValueError:
        max_req, window = default_max, default_window
    return max_req, window


# 10 intentos cada 15 minutos por IP, compartidos por las rutas de credenciales.
AUTH_MAX, AUTH_WINDOW = get_limits_from_env("AUTH_RL", default_max=10, default_window=15 * 60)


def client_ip(request: Request) -> str:
    """IP real del cliente: primer salto de X-Forwarded-For si viene de un proxy."""
    xff = request.headers.get("x-forwarded-for")
    if xff:
        return xff.split(",")[0].strip()
    return (request.client.host if request.client else None) or "unknown"


def is_allowed(key: str, max_req: int, window_s: int) -> bool:
    """True si 'key' aún tiene cupo en la ventana; registra el intento si lo tiene."""
    if max_req <= 0:                                    # 0 o negativo desactiva el límite.
        return True

    with _LOCK:
        bucket = _BUCKETS.setdefault(key, deque())
        now = _now()
        cutoff = now - window_s
        while bucket and bucket[0] <= cutoff:           # Purga lo que salió de la ventana.
            bucket.popleft()

        used = len(bucket)
        if used < max_req:
            bucket.append(now)
            return True

    logger.warning("Rate limit hit | key='{}' | {}/{} en {}s", key, used, max_req, window_s)
    return False


def enforce(request: Request, scope: str, max_req: int = None, window_s: int = None) -> None:
    """Lanza 429 con Retry-After si la IP agotó su cupo para este ámbito."""
    max_req = AUTH_MAX if max_req is None else max_req
    window_s = AUTH_WINDOW if window_s is None else window_s
    ip = client_ip(request)
    if not is_allowed(f"{scope}:{ip}", max_req, window_s):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Demasiados intentos. Inténtalo de nuevo más tarde.",
            headers={"Retry-After": str(window_s)},
        )


def reset() -> None:
    """Vacía todos los cubos (tests y recargas en caliente)."""
    with _LOCK:
        _BUCKETS.clear()
