# mariage/core/guard.py
# =================================================================================
# 🛡️ GUARDIA DE AUTORIZACIÓN
# ---------------------------------------------------------------------------------
# Único punto que decide qué puede hacer un usuario sobre una boda:
#   check_access(user, boda) → none | view | edit
# Se deriva SOLO de la fila actual de wedding_users, sin caché: cada petición
# vuelve a leer la membresía.
# - RequireWedding(level): dependencia FastAPI para rutas con {wedding_id} en el path.
# - authorize(): para rutas donde la boda llega en el body.
# - wedding_id_of(): rutas por ítem (invitado, proveedor, ítem, invitación); la
#   boda sale de la fila guardada, nunca del cliente.
# =================================================================================

import enum
from typing import Type

from fastapi import Depends
from loguru import logger
from sqlalchemy.orm import Session

from mariage import models
from mariage.core.errors import AuthorizationError, NotFoundError
from mariage.core.security import get_current_user
from mariage.db import get_db


class AccessLevel(str, enum.Enum):
    none = "none"
    view = "view"
    edit = "edit"

    @property
    def rank(self) -> int:
        return {"none": 0, "view": 1, "edit": 2}[self.value]


def check_access(db: Session, user_id: int, wedding_id: int) -> AccessLevel:
    """Nivel de acceso actual del usuario sobre la boda."""
    level = (
        db.query(models.WeddingMember.permission_level)
        .filter(
            models.WeddingMember.user_id == user_id,
            models.WeddingMember.wedding_id == wedding_id,
        )
        .scalar()
    )
    if level is None:
        return AccessLevel.none
    if level == models.PermissionLevelEnum.edit:
        return AccessLevel.edit
    return AccessLevel.view


def authorize(db: Session, user_id: int, wedding_id: int, required: AccessLevel) -> AccessLevel:
    """Lanza AuthorizationError si el nivel actual no alcanza el requerido."""
    current = check_access(db, user_id, wedding_id)
    if current.rank < required.rank or current is AccessLevel.none:
        logger.info(
            "GUARD: acceso denegado | user_id={} | wedding_id={} | tiene={} | requiere={}",
            user_id, wedding_id, current.value, required.value,
        )
        if required is AccessLevel.edit:
            raise AuthorizationError("No tienes permiso para editar los datos de esta boda.")
        raise AuthorizationError("No tienes permiso para acceder a los datos de esta boda.")
    return current


def require_access(db: Session, user_id: int, wedding_id: int) -> AccessLevel:
    return authorize(db, user_id, wedding_id, AccessLevel.view)


def require_edit(db: Session, user_id: int, wedding_id: int) -> AccessLevel:
    return authorize(db, user_id, wedding_id, AccessLevel.edit)


def wedding_id_of(db: Session, model: Type[models.Base], item_id: int, label: str = "Recurso") -> int:
    """Boda dueña de una fila hija; NotFoundError si la fila no existe."""
    wedding_id = db.query(model.wedding_id).filter(model.id == item_id).scalar()
    if wedding_id is None:
        raise NotFoundError(f"{label} no encontrado.")
    return wedding_id


class RequireWedding:
    """Dependencia parametrizada por nivel para rutas `/{wedding_id}`; devuelve el usuario."""

    def __init__(self, level: AccessLevel):
        self.level = level

    def __call__(
        self,
        wedding_id: int,
        current_user: models.User = Depends(get_current_user),
        db: Session = Depends(get_db),
    ) -> models.User:
        authorize(db, current_user.id, wedding_id, self.level)
        return current_user


can_view_wedding = RequireWedding(AccessLevel.view)
can_edit_wedding = RequireWedding(AccessLevel.edit)
