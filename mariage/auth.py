# mariage/auth.py  # Módulo de credenciales: JWT de acceso/refresco y códigos de un solo uso.

# =================================================================================
# 🔐 MÓDULO DE AUTENTICACIÓN (JWT)                                               # Propósito del módulo.
# ---------------------------------------------------------------------------------
# - Access token corto (type='access') firmado con SECRET_KEY.                    # Sesión de API.
# - Refresh token largo (type='refresh') firmado con REFRESH_SECRET_KEY.          # Se persiste en BD.
# - Códigos numéricos de 6 dígitos para verificación y recuperación.              # Email.
# - Usa python-jose (jose.jwt) para firmar/decodificar JWT.                        # Librería usada.
# =================================================================================

# 🐍 Importaciones
import os                                                     # Variables de entorno (.env).
import secrets                                                # Aleatoriedad criptográfica.
from datetime import datetime, timedelta, timezone            # Emisión/expiración.
from typing import Dict, Any, Optional                        # Tipado.
from jose import jwt, JWTError                                # JWT (python-jose).

# ⚙️ Configuración de seguridad (desde .env con defaults de desarrollo)
SECRET_KEY = os.getenv("SECRET_KEY", "dev_secret")                            # Firma de access tokens.
REFRESH_SECRET_KEY = os.getenv("REFRESH_SECRET_KEY", "dev_refresh_secret")    # Firma de refresh tokens (distinta).
ALGORITHM = os.getenv("ALGORITHM", "HS256")                                   # Algoritmo de firmado.
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "15"))  # Vida del access (min).
REFRESH_TOKEN_EXPIRE_DAYS = int(os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", "7"))       # Vida del refresh (días).
CODE_EXPIRE_MINUTES = int(os.getenv("CODE_EXPIRE_MINUTES", "15"))                  # Vida de códigos por email.

# 🔒 Validación mínima de config crítica
if not SECRET_KEY or not REFRESH_SECRET_KEY:
    raise ValueError("SECRET_KEY y REFRESH_SECRET_KEY deben estar configurados.")
if SECRET_KEY == REFRESH_SECRET_KEY:
    raise ValueError("SECRET_KEY y REFRESH_SECRET_KEY deben ser distintos.")
if not ALGORITHM:
    raise ValueError("ALGORITHM no está configurado.")

# 🕒 Helpers internos de tiempo
def utcnow() -> datetime:
    """Hora UTC naive (mismo formato que las columnas DateTime)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)

def refresh_expires_at() -> datetime:
    return utcnow() + timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS)

def code_expires_at() -> datetime:
    return utcnow() + timedelta(minutes=CODE_EXPIRE_MINUTES)

# =================================================================================
# ✨ CREACIÓN DE TOKENS
# =================================================================================

def create_access_token(user_id: int, name: str) -> str:
    """Access token con el id del usuario en 'sub' y su nombre para la UI."""
    now = utcnow()                                                          # Hora de emisión.
    payload: Dict[str, Any] = {
        "sub": str(user_id),                                                # JWT exige 'sub' como string.
        "name": name,
        "type": "access",
        "iat": int(now.replace(tzinfo=timezone.utc).timestamp()),
        "exp": int((now + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)).replace(tzinfo=timezone.utc).timestamp()),
    }
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)

def create_refresh_token(user_id: int) -> str:
    """Refresh token; 'jti' aleatorio para que dos emisiones nunca coincidan."""
    now = utcnow()
    payload: Dict[str, Any] = {
        "sub": str(user_id),
        "type": "refresh",
        "jti": secrets.token_hex(8),
        "iat": int(now.replace(tzinfo=timezone.utc).timestamp()),
        "exp": int(refresh_expires_at().replace(tzinfo=timezone.utc).timestamp()),
    }
    return jwt.encode(payload, REFRESH_SECRET_KEY, algorithm=ALGORITHM)

def generate_code() -> str:
    """Código numérico de 6 dígitos (100000–999999)."""
    return str(100000 + secrets.randbelow(900000))

def codes_match(stored: Optional[str], given: Optional[str]) -> bool:
    """Compara códigos en tiempo constante."""
    if not stored or not given:
        return False
    return secrets.compare_digest(stored.strip(), given.strip())

# =================================================================================
# 🔎 DECODIFICACIÓN/VERIFICACIÓN
# =================================================================================

def _decode(token: str, key: str, expected_type: str) -> Dict[str, Any]:
    data = jwt.decode(token, key, algorithms=[ALGORITHM])                  # Valida firma y expiración.
    if data.get("type") != expected_type:                                  # Un refresh no sirve como access.
        raise ValueError(f"Invalid token type, expected '{expected_type}'")
    return data

def decode_access_token(token: str) -> Dict[str, Any]:
    """Decodifica un access token. Lanza JWTError/ValueError si no es válido."""
    return _decode(token, SECRET_KEY, "access")

def decode_refresh_token(token: str) -> Dict[str, Any]:
    """Decodifica un refresh token. Lanza JWTError/ValueError si no es válido."""
    return _decode(token, REFRESH_SECRET_KEY, "refresh")

def verify_access_token(token: str) -> dict | None:
    """Devuelve el payload si el access token es válido, o None si la validación falla."""
    try:
        return decode_access_token(token)
    except (JWTError, ValueError):
        return None
