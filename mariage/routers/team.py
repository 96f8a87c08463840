# mariage/routers/team.py

# =================================================================================
# 👥 ROUTER DEL EQUIPO DE PLANIFICACIÓN
# ---------------------------------------------------------------------------------
# - invite: requiere 'edit' sobre la boda del body; la invitación se guarda ANTES
#   del envío del email (si el envío falla → 502, pero la fila queda).
# - accept-invitation: cualquier usuario autenticado con el token.
# - Listados (view), cambio de permiso y bajas (edit).
# - Revocar: la boda se deriva de la invitación guardada, nunca del cliente.
# =================================================================================

from typing import List

from fastapi import APIRouter, Depends, Response, status
from loguru import logger
from sqlalchemy.orm import Session

from mariage import mailer, models, schemas
from mariage.core.errors import DeliveryError
from mariage.core.guard import can_edit_wedding, can_view_wedding, require_edit, wedding_id_of
from mariage.core.security import get_current_user
from mariage.crud import team_crud
from mariage.db import get_db

router = APIRouter(prefix="/api/team", tags=["team"])


@router.post("/invite", response_model=schemas.MessageResponse)
def invite(
    payload: schemas.InviteRequest,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    # Sin membresía no hay acceso: una boda inexistente también es 403.
    require_edit(db, current_user.id, payload.wedding_id)
    wedding = db.get(models.Wedding, payload.wedding_id)

    token = team_crud.issue_invitation(
        db, payload.wedding_id, payload.email, payload.permission_level, payload.relationship,
    )
    sent = mailer.send_team_invitation_email(
        payload.email,
        inviter_name=current_user.name,
        wedding_name=f"{wedding.groom_name} & {wedding.bride_name}",
        accept_url=mailer.build_accept_url(token),
    )
    if not sent:
        logger.error("TEAM: invitación guardada pero el email falló | wedding_id={}", payload.wedding_id)
        raise DeliveryError("Invitación creada, pero no se pudo enviar el email.")
    return {"message": f"Invitación enviada a {payload.email}."}


@router.post("/accept-invitation", response_model=schemas.AcceptInvitationResponse)
def accept_invitation(
    payload: schemas.AcceptInvitationRequest,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    wedding_id = team_crud.accept_invitation(db, payload.token.strip(), current_user)
    return {"message": "¡Invitación aceptada! Ya formas parte del equipo.", "wedding_id": wedding_id}


@router.get("/wedding/{wedding_id}", response_model=List[schemas.MemberOut])
def list_members(wedding_id: int, _user=Depends(can_view_wedding), db: Session = Depends(get_db)):
    return team_crud.list_members(db, wedding_id)


@router.get("/invitations/{wedding_id}", response_model=List[schemas.TeamInvitationOut])
def list_invitations(wedding_id: int, _user=Depends(can_view_wedding), db: Session = Depends(get_db)):
    return team_crud.list_pending_invitations(db, wedding_id)


@router.patch("/member", response_model=schemas.MessageResponse)
def update_member(
    payload: schemas.UpdateMemberRequest,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    require_edit(db, current_user.id, payload.wedding_id)
    team_crud.update_member_permission(db, payload.wedding_id, payload.member_user_id, payload.permission_level)
    return {"message": "Permiso actualizado."}


@router.delete("/wedding/{wedding_id}/member/{member_user_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_member(
    wedding_id: int,
    member_user_id: int,
    _user=Depends(can_edit_wedding),
    db: Session = Depends(get_db),
):
    team_crud.remove_member(db, wedding_id, member_user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/invitation/{invitation_id}", status_code=status.HTTP_204_NO_CONTENT)
def revoke_invitation(
    invitation_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    wedding_id = wedding_id_of(db, models.Invitation, invitation_id, "Invitación")
    require_edit(db, current_user.id, wedding_id)
    team_crud.revoke_invitation(db, invitation_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
