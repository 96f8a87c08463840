# mariage/crud/guests_crud.py                                                  # Ruta del archivo dentro del proyecto.

# =================================================================================
# 🧩 CRUD de Invitados (Guest) y RSVP público.
# - create() genera un rsvp_token único e imposible de adivinar.
# - El token es la única credencial del lado público: nunca se rota ni expira,
#   y el invitado puede reenviar su respuesta (la última gana).
# - stats() cuenta total / confirmados / rechazados / pendientes (incluye null).
# =================================================================================

import secrets                                                   # Tokens aleatorios seguros.
from typing import Callable, Dict, List, Optional                # Tipado.

from loguru import logger                                        # Trazas del CRUD.
from sqlalchemy import case, func                                # Agregados condicionales.
from sqlalchemy.orm import Session                               # Sesión de BD.

from mariage import schemas                                      # Payloads validados.
from mariage.core.errors import NotFoundError                    # 404 del dominio.
from mariage.db import transaction                               # Escrituras atómicas.
from mariage.models import Guest, RsvpStatusEnum                 # Modelo ORM (tabla 'guests').

_TOKEN_BYTES = 24                                                # ~192 bits → 32 caracteres urlsafe.
_MAX_TOKEN_ATTEMPTS = 5                                          # Colisiones son teóricas; tope de seguridad.


def _new_rsvp_token() -> str:
    return secrets.token_urlsafe(_TOKEN_BYTES)

# ---------------------------------------------------------------------------------
# 🔎 Búsquedas
# ---------------------------------------------------------------------------------

def get_by_id(db: Session, guest_id: int) -> Optional[Guest]:
    return db.get(Guest, guest_id)

def get_by_rsvp_token(db: Session, token: str) -> Optional[Guest]:
    """Invitado por su token exacto, o None."""
    if not token:
        return None
    return db.query(Guest).filter(Guest.rsvp_token == token.strip()).first()

def list_for_wedding(db: Session, wedding_id: int) -> List[Guest]:
    return db.query(Guest).filter(Guest.wedding_id == wedding_id).order_by(Guest.full_name, Guest.id).all()

def stats(db: Session, wedding_id: int) -> Dict[str, int]:
    """Conteos de RSVP de la boda; 'pending' incluye filas sin estado."""
    total, confirmed, declined, pending = (
        db.query(
            func.count(Guest.id),
            func.count(case((Guest.rsvp_status == RsvpStatusEnum.confirmed, 1))),
            func.count(case((Guest.rsvp_status == RsvpStatusEnum.declined, 1))),
            func.count(case(
                (Guest.rsvp_status == RsvpStatusEnum.pending, 1),
                (Guest.rsvp_status.is_(None), 1),
            )),
        )
        .filter(Guest.wedding_id == wedding_id)
        .one()
    )
    return {
        "total_guests": total or 0,
        "confirmed": confirmed or 0,
        "declined": declined or 0,
        "pending": pending or 0,
    }

# ---------------------------------------------------------------------------------
# ✍️ Escrituras
# ---------------------------------------------------------------------------------

def _unique_token(db: Session, token_factory: Callable[[], str]) -> str:
    for _ in range(_MAX_TOKEN_ATTEMPTS):
        token = token_factory()
        if get_by_rsvp_token(db, token) is None:
            return token
    raise RuntimeError("No se pudo generar un rsvp_token único.")

def create(
    db: Session,
    wedding_id: int,
    data: schemas.GuestCreate,
    created_by: Optional[int],
    token_factory: Callable[[], str] = _new_rsvp_token,
) -> Guest:
    """Crea el invitado con estado 'pending' y token RSVP propio."""
    with transaction(db):
        guest = Guest(
            wedding_id=wedding_id,
            full_name=data.full_name,
            contact_info=data.contact_info,
            guest_group=data.guest_group,
            created_by=created_by,
            rsvp_token=_unique_token(db, token_factory),
            rsvp_status=RsvpStatusEnum.pending,
        )
        db.add(guest)
    db.refresh(guest)
    logger.info("GUEST: creado | guest_id={} | wedding_id={}", guest.id, wedding_id)
    return guest

def update(db: Session, guest: Guest, data: schemas.GuestUpdate) -> Guest:
    with transaction(db):
        guest.full_name = data.full_name
        guest.contact_info = data.contact_info
        guest.guest_group = data.guest_group
        if data.rsvp_status is not None:
            guest.rsvp_status = RsvpStatusEnum(data.rsvp_status)
    db.refresh(guest)
    return guest

def delete(db: Session, guest: Guest) -> None:
    guest_id = guest.id
    with transaction(db):
        db.delete(guest)
    logger.info("GUEST: eliminado | guest_id={}", guest_id)

def submit_rsvp(db: Session, token: str, status: str, message: Optional[str]) -> int:
    """Actualiza estado y mensaje por token. NotFoundError si no hay fila; no toca nada más."""
    with transaction(db):
        updated = (
            db.query(Guest)
            .filter(Guest.rsvp_token == token)
            .update(
                {Guest.rsvp_status: RsvpStatusEnum(status), Guest.guest_message: message},
                synchronize_session=False,
            )
        )
        if updated == 0:
            raise NotFoundError("Invitación no encontrada.")
    logger.info("RSVP: respuesta registrada | status={}", status)
    return updated
