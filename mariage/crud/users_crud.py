# mariage/crud/users_crud.py

# =================================================================================
# 👤 CRUD de Usuarios, sesiones y borrado de cuenta
# - register(): usuario no verificado + código de 6 dígitos.
# - open_session(): emite access + refresh; borra los refresh previos (una sesión
#   activa por usuario).
# - erase_account(): borra invitaciones, sesiones, códigos, membresías y el
#   usuario en UNA transacción; cualquier fallo deja todo como estaba.
# =================================================================================

from typing import Optional, Tuple

from loguru import logger
from sqlalchemy.orm import Session

from mariage import auth, models
from mariage.core.errors import ConflictError, NotFoundError, ValidationError
from mariage.core.security import hash_password
from mariage.db import transaction
from mariage.mailer import mask_email

# ---------------------------------------------------------------------------------
# 🔎 Búsquedas
# ---------------------------------------------------------------------------------

def get_by_email(db: Session, email: str) -> Optional[models.User]:
    if not email:
        return None
    return db.query(models.User).filter(models.User.email == email.strip().lower()).first()

def get_refresh_token(db: Session, token: str) -> Optional[models.RefreshToken]:
    return db.query(models.RefreshToken).filter(models.RefreshToken.token == token).first()

# ---------------------------------------------------------------------------------
# 📝 Registro y verificación
# ---------------------------------------------------------------------------------

def register(db: Session, name: str, email: str, password: str) -> Tuple[models.User, str]:
    """
    Crea el usuario sin verificar y devuelve (usuario, código).
    Un email ya verificado → ConflictError; uno sin verificar se reemplaza.
    """
    code = auth.generate_code()
    with transaction(db):
        existing = get_by_email(db, email)
        if existing is not None:
            if existing.is_verified:
                raise ConflictError("Este email ya está en uso.")
            logger.info("AUTH: reemplazando registro sin verificar | email={}", mask_email(email))
            db.delete(existing)
            db.flush()
        user = models.User(
            name=name,
            email=email,
            password_hash=hash_password(password),
            is_verified=False,
            verification_token=code,
            verification_token_expires_at=auth.code_expires_at(),
        )
        db.add(user)
    db.refresh(user)
    logger.info("AUTH: usuario registrado | user_id={} | email={}", user.id, mask_email(email))
    return user, code


def verify_email(db: Session, email: str, code: str) -> models.User:
    """Marca el email como verificado si el código es válido y no expiró."""
    user = get_by_email(db, email)
    if user is None:
        raise NotFoundError("Usuario no encontrado.")
    if user.is_verified:
        raise ValidationError("Este email ya fue verificado.")
    expired = (
        user.verification_token_expires_at is None
        or user.verification_token_expires_at < auth.utcnow()
    )
    if expired or not auth.codes_match(user.verification_token, code):
        raise ValidationError("Código inválido o expirado.")

    with transaction(db):
        user.is_verified = True
        user.verification_token = None
        user.verification_token_expires_at = None
    db.refresh(user)
    logger.info("AUTH: email verificado | user_id={}", user.id)
    return user

# ---------------------------------------------------------------------------------
# 🔑 Sesiones (refresh tokens persistidos)
# ---------------------------------------------------------------------------------

def open_session(db: Session, user: models.User) -> Tuple[str, str]:
    """Emite (access, refresh) y deja solo el refresh nuevo en BD."""
    access_token = auth.create_access_token(user.id, user.name)
    refresh_token = auth.create_refresh_token(user.id)
    with transaction(db):
        db.query(models.RefreshToken).filter(models.RefreshToken.user_id == user.id).delete()
        db.add(models.RefreshToken(
            user_id=user.id,
            token=refresh_token,
            expires_at=auth.refresh_expires_at(),
        ))
    return access_token, refresh_token


def close_session(db: Session, refresh_token: str) -> None:
    with transaction(db):
        db.query(models.RefreshToken).filter(models.RefreshToken.token == refresh_token).delete()

# ---------------------------------------------------------------------------------
# 🔁 Recuperación de contraseña
# ---------------------------------------------------------------------------------

def create_reset_code(db: Session, user: models.User) -> str:
    """Nuevo código de recuperación; los anteriores dejan de valer."""
    code = auth.generate_code()
    with transaction(db):
        db.query(models.PasswordResetToken).filter(models.PasswordResetToken.user_id == user.id).delete()
        db.add(models.PasswordResetToken(user_id=user.id, token=code, expires_at=auth.code_expires_at()))
    return code


def reset_password(db: Session, email: str, code: str, new_password: str) -> None:
    """Cambia la contraseña y cierra todas las sesiones del usuario."""
    user = get_by_email(db, email)
    reset = None
    if user is not None:
        reset = (
            db.query(models.PasswordResetToken)
            .filter(models.PasswordResetToken.user_id == user.id)
            .order_by(models.PasswordResetToken.created_at.desc(), models.PasswordResetToken.id.desc())
            .first()
        )
    if reset is None or not auth.codes_match(reset.token, code):
        raise ValidationError("Código inválido.")
    if reset.expires_at < auth.utcnow():
        raise ValidationError("Código expirado.")

    with transaction(db):
        user.password_hash = hash_password(new_password)
        db.query(models.PasswordResetToken).filter(models.PasswordResetToken.user_id == user.id).delete()
        db.query(models.RefreshToken).filter(models.RefreshToken.user_id == user.id).delete()
    logger.info("AUTH: contraseña restablecida | user_id={}", user.id)

# ---------------------------------------------------------------------------------
# 🗑️ Borrado de cuenta
# ---------------------------------------------------------------------------------

def _delete_invitations_for(db: Session, email: Optional[str]) -> int:
    if not email:
        return 0
    return (
        db.query(models.Invitation)
        .filter(models.Invitation.email == email, models.Invitation.status == models.InvitationStatusEnum.pending)
        .delete(synchronize_session=False)
    )

def _delete_refresh_tokens(db: Session, user_id: int) -> int:
    return db.query(models.RefreshToken).filter(models.RefreshToken.user_id == user_id).delete(synchronize_session=False)

def _delete_reset_codes(db: Session, user_id: int) -> int:
    return (
        db.query(models.PasswordResetToken)
        .filter(models.PasswordResetToken.user_id == user_id)
        .delete(synchronize_session=False)
    )

def _delete_memberships(db: Session, user_id: int) -> int:
    return db.query(models.WeddingMember).filter(models.WeddingMember.user_id == user_id).delete(synchronize_session=False)

def _delete_user(db: Session, user_id: int) -> int:
    return db.query(models.User).filter(models.User.id == user_id).delete(synchronize_session=False)


def erase_account(db: Session, user_id: int) -> None:
    """
    Borra la cuenta en orden de dependencias dentro de una sola transacción.
    Si el usuario no existe al final, NotFoundError y rollback completo.
    Las bodas no se borran: su owner_id queda en NULL.
    """
    with transaction(db):
        email = db.query(models.User.email).filter(models.User.id == user_id).scalar()
        invitations = _delete_invitations_for(db, email)
        tokens = _delete_refresh_tokens(db, user_id)
        _delete_reset_codes(db, user_id)
        memberships = _delete_memberships(db, user_id)
        if _delete_user(db, user_id) == 0:
            raise NotFoundError("Usuario no encontrado.")
    db.expire_all()
    logger.info(
        "ACCOUNT: cuenta eliminada | user_id={} | invitaciones={} | sesiones={} | membresías={}",
        user_id, invitations, tokens, memberships,
    )
