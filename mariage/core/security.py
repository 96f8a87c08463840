# mariage/core/security.py
# Contraseñas (bcrypt) e identidad del llamante (Bearer JWT).
import re
from typing import Optional

import bcrypt
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from mariage import auth, models
from mariage.core.errors import AuthenticationError
from mariage.db import get_db

# Mínimo 8 caracteres con minúscula, mayúscula, dígito y símbolo.
_STRONG_PASSWORD = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[^A-Za-z0-9]).{8,}$")
# bcrypt solo admite 72 bytes; más largo se rechaza en la validación.
MAX_PASSWORD_BYTES = 72

# auto_error=False: la ausencia de token se reporta con nuestro AuthenticationError.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def is_strong_password(password: str) -> bool:
    return bool(_STRONG_PASSWORD.match(password or ""))


def fits_bcrypt(password: str) -> bool:
    return len((password or "").encode("utf-8")) <= MAX_PASSWORD_BYTES


def hash_password(plain_password: str) -> str:
    """Hash bcrypt guardado como texto."""
    return bcrypt.hashpw(plain_password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Hash corrupto o con formato desconocido.
        return False


def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> models.User:
    """Dependencia: resuelve el usuario autenticado o lanza 401."""
    if not token:
        raise AuthenticationError("Acceso denegado. Ningún token proporcionado.")

    payload = auth.verify_access_token(token)
    if payload is None:
        raise AuthenticationError("Token inválido o expirado.")

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise AuthenticationError("Token inválido o expirado.")

    user = db.get(models.User, user_id)
    if user is None:
        raise AuthenticationError("Token inválido o expirado.")
    return user
