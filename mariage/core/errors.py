# mariage/core/errors.py
# =================================================================================
# 🚨 TAXONOMÍA DE ERRORES DEL DOMINIO
# ---------------------------------------------------------------------------------
# Cada error sabe su código HTTP; main.py registra el handler que los serializa
# como {"detail": ...}. Los fallos inesperados se convierten en un 500 genérico.
# =================================================================================

from typing import Any, Dict, Optional


class MariageError(Exception):
    """Error de dominio con código HTTP asociado."""

    status_code: int = 500
    default_detail: str = "Error en el servidor."

    def __init__(self, detail: Optional[Any] = None, headers: Optional[Dict[str, str]] = None):
        self.detail = detail if detail is not None else self.default_detail
        self.headers = headers
        super().__init__(str(self.detail))


class ValidationError(MariageError):
    status_code = 400
    default_detail = "Datos de entrada inválidos."


class AuthenticationError(MariageError):
    status_code = 401
    default_detail = "No se pudieron validar las credenciales."

    def __init__(self, detail: Optional[Any] = None):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class AuthorizationError(MariageError):
    status_code = 403
    default_detail = "No tienes permiso para realizar esta acción."


class NotFoundError(MariageError):
    status_code = 404
    default_detail = "Recurso no encontrado."


class ConflictError(MariageError):
    status_code = 409
    default_detail = "El recurso ya existe."


class ServerError(MariageError):
    status_code = 500


class DeliveryError(ServerError):
    """El correo no pudo salir; lo ya persistido no se revierte."""

    status_code = 502
    default_detail = "No se pudo enviar el correo."
