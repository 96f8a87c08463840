# mariage/routers/auth_routes.py                                                   # Ruta y nombre del archivo del router de autenticación.

# =================================================================================
# 🔑 ROUTER DE AUTENTICACIÓN Y RECUPERACIÓN DE CONTRASEÑA
# ---------------------------------------------------------------------------------
# - Registro con código de verificación por email.
# - Login / verify-email → access token en el body + refresh token en cookie HttpOnly.
# - refresh-token / logout leen la cookie 'refreshToken'.
# - Recuperación de contraseña con respuesta neutra (no revela si el email existe).
# - Rate-limit por IP en login, verify-email y las dos rutas de recuperación.
# =================================================================================

import os                                                                          # ENVIRONMENT para la cookie 'secure'.

from fastapi import APIRouter, Depends, Request, Response, status                  # Router, dependencias y cookies.
from jose import JWTError                                                          # Errores de firma/expiración del refresh.
from loguru import logger                                                          # Trazas.
from sqlalchemy.orm import Session                                                 # Sesión de BD.

from mariage import auth, mailer, models, rate_limit, schemas                      # Módulos internos.
from mariage.core.errors import (                                                  # Taxonomía de errores del dominio.
    AuthenticationError,
    AuthorizationError,
    DeliveryError,
)
from mariage.core.security import verify_password                                  # bcrypt.
from mariage.crud import team_crud, users_crud                                     # Acceso a datos.
from mariage.db import get_db                                                      # Sesión por request.

router = APIRouter(prefix="/api/auth", tags=["auth"])

REFRESH_COOKIE = "refreshToken"                                                    # Nombre de la cookie del refresh.
COOKIE_MAX_AGE = auth.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60                     # 7 días en segundos.
GENERIC_RESET_MSG = "Si existe una cuenta con este email, recibirás un código de recuperación."


def _secure_cookies() -> bool:
    return os.getenv("ENVIRONMENT", "development").strip().lower() == "production"


def set_refresh_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=REFRESH_COOKIE,
        value=token,
        httponly=True,
        secure=_secure_cookies(),
        samesite="strict",
        max_age=COOKIE_MAX_AGE,
        path="/",
    )


def clear_refresh_cookie(response: Response) -> None:
    response.delete_cookie(
        key=REFRESH_COOKIE,
        httponly=True,
        secure=_secure_cookies(),
        samesite="strict",
        path="/",
    )


def _session_payload(db: Session, user: models.User, response: Response) -> dict:
    """Abre sesión, fija la cookie y arma la respuesta común de login/verify."""
    access_token, refresh_token = users_crud.open_session(db, user)
    set_refresh_cookie(response, refresh_token)
    return {
        "access_token": access_token,
        "token_type": "bearer",
        "user_name": user.name,
        "pending_invitations": team_crud.pending_invitations_for_email(db, user.email),
    }

# =================================================================================
# 📝 REGISTRO
# =================================================================================
@router.post("/register", response_model=schemas.RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(payload: schemas.RegisterRequest, db: Session = Depends(get_db)):
    """Crea el usuario sin verificar y envía el código de 6 dígitos."""
    user, code = users_crud.register(db, payload.name, payload.email, payload.password)
    if not mailer.send_verification_email(user.email, code):
        raise DeliveryError("No se pudo enviar el email de verificación.")
    return {"email": user.email}

# =================================================================================
# 🚪 LOGIN
# =================================================================================
@router.post("/login", response_model=schemas.AuthResponse)
def login(
    payload: schemas.LoginRequest,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
):
    rate_limit.enforce(request, "login")

    user = users_crud.get_by_email(db, payload.email)
    if user is None or not verify_password(payload.password, user.password_hash):
        logger.info("AUTH: login fallido | ip={}", rate_limit.client_ip(request))
        raise AuthenticationError("Credenciales inválidas.")
    if not user.is_verified:
        raise AuthorizationError("Debes verificar tu email antes de iniciar sesión.")

    logger.info("AUTH: login correcto | user_id={}", user.id)
    return _session_payload(db, user, response)

# =================================================================================
# 🔁 REFRESH / LOGOUT
# =================================================================================
@router.post("/refresh-token", response_model=schemas.AccessTokenResponse)
def refresh_token(request: Request, db: Session = Depends(get_db)):
    """Nuevo access token a partir de la cookie; el refresh debe seguir guardado en BD."""
    token = request.cookies.get(REFRESH_COOKIE)
    if not token:
        raise AuthenticationError("Refresh token no encontrado.")

    try:
        data = auth.decode_refresh_token(token)
    except (JWTError, ValueError):
        raise AuthorizationError("Refresh token inválido o expirado.")

    stored = users_crud.get_refresh_token(db, token)
    if stored is None or stored.expires_at < auth.utcnow():
        raise AuthorizationError("Refresh token inválido o expirado.")

    user = db.get(models.User, stored.user_id)
    if user is None or str(user.id) != data.get("sub"):
        raise AuthorizationError("Refresh token inválido o expirado.")

    return {"access_token": auth.create_access_token(user.id, user.name), "token_type": "bearer"}


@router.post("/logout", response_model=schemas.MessageResponse)
def logout(request: Request, response: Response, db: Session = Depends(get_db)):
    token = request.cookies.get(REFRESH_COOKIE)
    if token:
        users_crud.close_session(db, token)
    clear_refresh_cookie(response)
    return {"message": "Sesión cerrada correctamente."}

# =================================================================================
# ✅ VERIFICACIÓN DE EMAIL
# =================================================================================
@router.post("/verify-email", response_model=schemas.AuthResponse)
def verify_email(
    payload: schemas.VerifyEmailRequest,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
):
    rate_limit.enforce(request, "verify")
    user = users_crud.verify_email(db, payload.email, payload.code)
    return _session_payload(db, user, response)

# =================================================================================
# 📩 RECUPERACIÓN DE CONTRASEÑA (respuesta neutra)
# =================================================================================
@router.post("/request-password-reset", response_model=schemas.MessageResponse)
def request_password_reset(
    payload: schemas.PasswordResetRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Siempre responde lo mismo. Solo usuarios verificados reciben código;
    un fallo de envío se registra pero no se expone.
    """
    rate_limit.enforce(request, "reset-request")

    user = users_crud.get_by_email(db, payload.email)
    if user is not None and user.is_verified:
        code = users_crud.create_reset_code(db, user)
        if not mailer.send_password_reset_email(user.email, code):
            logger.error("AUTH: no se pudo enviar el código de recuperación | user_id={}", user.id)
    else:
        logger.info("AUTH: recuperación sin cuenta verificada | email={}", mailer.mask_email(payload.email))

    return {"message": GENERIC_RESET_MSG}


@router.post("/reset-password", response_model=schemas.MessageResponse)
def reset_password(
    payload: schemas.ResetPasswordRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    rate_limit.enforce(request, "reset")
    users_crud.reset_password(db, payload.email, payload.code, payload.password)
    return {"message": "Contraseña restablecida correctamente."}
