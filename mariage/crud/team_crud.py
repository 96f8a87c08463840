# mariage/crud/team_crud.py

# =================================================================================
# 👥 CRUD del Equipo de planificación
# - Invitaciones: una fila por (boda, email); reinvitar reemplaza token, nivel,
#   relación y estado en lugar de duplicar (upsert nativo).
# - Aceptación: consumo de un solo uso + alta de membresía en la MISMA transacción.
# - Membresías: listado, cambio de nivel y baja (nunca la del último 'edit').
# =================================================================================

import secrets
from typing import List, Optional

from loguru import logger
from sqlalchemy.orm import Session

from mariage import models
from mariage.core.errors import ConflictError, NotFoundError
from mariage.db import insert_for, transaction

PermissionLevel = models.PermissionLevelEnum
InvitationStatus = models.InvitationStatusEnum


def new_invitation_token() -> str:
    """256 bits de entropía en hexadecimal."""
    return secrets.token_hex(32)

# ---------------------------------------------------------------------------------
# 🔎 Consultas
# ---------------------------------------------------------------------------------

def is_member_email(db: Session, wedding_id: int, email: str) -> bool:
    """True si el email ya pertenece a un miembro de la boda."""
    return (
        db.query(models.WeddingMember.id)
        .join(models.User, models.User.id == models.WeddingMember.user_id)
        .filter(models.WeddingMember.wedding_id == wedding_id, models.User.email == email.lower())
        .first()
        is not None
    )


def list_members(db: Session, wedding_id: int) -> List[dict]:
    rows = (
        db.query(models.User, models.WeddingMember)
        .join(models.WeddingMember, models.WeddingMember.user_id == models.User.id)
        .filter(models.WeddingMember.wedding_id == wedding_id)
        .order_by(models.User.name)
        .all()
    )
    return [
        {
            "user_id": user.id,
            "name": user.name,
            "email": user.email,
            "permission_level": member.permission_level.value,
            "relationship": member.relationship,
        }
        for user, member in rows
    ]


def list_pending_invitations(db: Session, wedding_id: int) -> List[models.Invitation]:
    return (
        db.query(models.Invitation)
        .filter(models.Invitation.wedding_id == wedding_id, models.Invitation.status == InvitationStatus.pending)
        .order_by(models.Invitation.created_at.desc(), models.Invitation.id.desc())
        .all()
    )


def pending_invitations_for_email(db: Session, email: str) -> List[dict]:
    """Invitaciones pendientes para quien inicia sesión, con los nombres de la pareja."""
    rows = (
        db.query(models.Invitation, models.Wedding.groom_name, models.Wedding.bride_name)
        .join(models.Wedding, models.Wedding.id == models.Invitation.wedding_id)
        .filter(models.Invitation.email == email.lower(), models.Invitation.status == InvitationStatus.pending)
        .order_by(models.Invitation.created_at.desc())
        .all()
    )
    return [
        {
            "id": inv.id,
            "wedding_id": inv.wedding_id,
            "invitation_token": inv.invitation_token,
            "permission_level": inv.permission_level.value,
            "relationship": inv.relationship,
            "groom_name": groom,
            "bride_name": bride,
        }
        for inv, groom, bride in rows
    ]

# ---------------------------------------------------------------------------------
# ✉️ Invitaciones
# ---------------------------------------------------------------------------------

def issue_invitation(
    db: Session,
    wedding_id: int,
    email: str,
    permission_level: str,
    relationship: Optional[str],
) -> str:
    """
    Crea o reemplaza la invitación de (boda, email) y devuelve el token nuevo.
    ConflictError si el email ya es miembro de la boda.
    """
    email = email.strip().lower()
    if is_member_email(db, wedding_id, email):
        raise ConflictError("Este usuario ya forma parte del equipo de planificación.")

    token = new_invitation_token()
    level = PermissionLevel(permission_level)
    stmt = insert_for(db, models.Invitation).values(
        wedding_id=wedding_id,
        email=email,
        invitation_token=token,
        status=InvitationStatus.pending,
        permission_level=level,
        relationship=relationship,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[models.Invitation.wedding_id, models.Invitation.email],
        set_={
            "invitation_token": stmt.excluded.invitation_token,
            "status": stmt.excluded.status,
            "permission_level": stmt.excluded.permission_level,
            "relationship": stmt.excluded.relationship,
        },
    )
    with transaction(db):
        db.execute(stmt)
    logger.info("TEAM: invitación emitida | wedding_id={} | email={} | nivel={}", wedding_id, email, level.value)
    return token


def accept_invitation(db: Session, token: str, user: models.User) -> int:
    """
    Consume la invitación y da de alta la membresía, todo o nada.
    NotFoundError si el token no existe o ya fue usado. Devuelve el wedding_id.
    """
    with transaction(db):
        invitation = (
            db.query(models.Invitation)
            .filter(
                models.Invitation.invitation_token == token,
                models.Invitation.status == InvitationStatus.pending,
            )
            .first()
        )
        if invitation is None:
            raise NotFoundError("Invitación inválida, expirada o ya utilizada.")

        # Cambio condicional de estado: solo una aceptación concurrente puede ganar.
        consumed = (
            db.query(models.Invitation)
            .filter(models.Invitation.id == invitation.id, models.Invitation.status == InvitationStatus.pending)
            .update({models.Invitation.status: InvitationStatus.accepted}, synchronize_session=False)
        )
        if consumed != 1:
            raise NotFoundError("Invitación inválida, expirada o ya utilizada.")

        membership = insert_for(db, models.WeddingMember).values(
            user_id=user.id,
            wedding_id=invitation.wedding_id,
            permission_level=invitation.permission_level,
            relationship=invitation.relationship,
        ).on_conflict_do_nothing(
            index_elements=[models.WeddingMember.user_id, models.WeddingMember.wedding_id],
        )
        db.execute(membership)
        wedding_id = invitation.wedding_id

    logger.info("TEAM: invitación aceptada | wedding_id={} | user_id={}", wedding_id, user.id)
    return wedding_id


def revoke_invitation(db: Session, invitation_id: int) -> None:
    with transaction(db):
        deleted = db.query(models.Invitation).filter(models.Invitation.id == invitation_id).delete()
    if not deleted:
        raise NotFoundError("Invitación no encontrada.")
    logger.info("TEAM: invitación cancelada | invitation_id={}", invitation_id)

# ---------------------------------------------------------------------------------
# 🔑 Membresías
# ---------------------------------------------------------------------------------

def _get_member(db: Session, wedding_id: int, user_id: int) -> models.WeddingMember:
    member = (
        db.query(models.WeddingMember)
        .filter(models.WeddingMember.wedding_id == wedding_id, models.WeddingMember.user_id == user_id)
        .first()
    )
    if member is None:
        raise NotFoundError("Miembro no encontrado en esta boda.")
    return member


def _editors_count(db: Session, wedding_id: int) -> int:
    return (
        db.query(models.WeddingMember)
        .filter(
            models.WeddingMember.wedding_id == wedding_id,
            models.WeddingMember.permission_level == PermissionLevel.edit,
        )
        .count()
    )


def update_member_permission(db: Session, wedding_id: int, member_user_id: int, permission_level: str) -> None:
    level = PermissionLevel(permission_level)
    with transaction(db):
        member = _get_member(db, wedding_id, member_user_id)
        if (
            member.permission_level == PermissionLevel.edit
            and level == PermissionLevel.view
            and _editors_count(db, wedding_id) <= 1
        ):
            raise ConflictError("La boda debe conservar al menos un miembro con permiso de edición.")
        member.permission_level = level
    logger.info("TEAM: permiso actualizado | wedding_id={} | user_id={} | nivel={}", wedding_id, member_user_id, level.value)


def remove_member(db: Session, wedding_id: int, member_user_id: int) -> None:
    with transaction(db):
        member = _get_member(db, wedding_id, member_user_id)
        if member.permission_level == PermissionLevel.edit and _editors_count(db, wedding_id) <= 1:
            raise ConflictError("La boda debe conservar al menos un miembro con permiso de edición.")
        db.delete(member)
    logger.info("TEAM: miembro retirado | wedding_id={} | user_id={}", wedding_id, member_user_id)
