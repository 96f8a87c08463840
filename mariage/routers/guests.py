# mariage/routers/guests.py

# =================================================================================
# 🤵👰 ROUTER DE INVITADOS (lado autenticado)
# ---------------------------------------------------------------------------------
# - Listado y estadísticas: 'view' sobre la boda.
# - Alta: 'edit' sobre la boda del path.
# - Edición/borrado por id: la boda sale del invitado guardado.
# =================================================================================

from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from mariage import models, schemas
from mariage.core.guard import can_edit_wedding, can_view_wedding, require_edit, wedding_id_of
from mariage.core.security import get_current_user
from mariage.crud import guests_crud
from mariage.db import get_db

router = APIRouter(prefix="/api/guests", tags=["guests"])


def _editable_guest(db: Session, user: models.User, guest_id: int) -> models.Guest:
    """Invitado existente sobre cuya boda el usuario tiene 'edit' (404 / 403 si no)."""
    wedding_id = wedding_id_of(db, models.Guest, guest_id, "Invitado")
    require_edit(db, user.id, wedding_id)
    return guests_crud.get_by_id(db, guest_id)


@router.get("/wedding/{wedding_id}", response_model=List[schemas.GuestResponse])
def list_guests(wedding_id: int, _user=Depends(can_view_wedding), db: Session = Depends(get_db)):
    return guests_crud.list_for_wedding(db, wedding_id)


@router.post("/wedding/{wedding_id}", response_model=schemas.GuestResponse, status_code=status.HTTP_201_CREATED)
def create_guest(
    wedding_id: int,
    payload: schemas.GuestCreate,
    current_user: models.User = Depends(can_edit_wedding),
    db: Session = Depends(get_db),
):
    return guests_crud.create(db, wedding_id, payload, created_by=current_user.id)


@router.get("/stats/wedding/{wedding_id}", response_model=schemas.RsvpStats)
def rsvp_stats(wedding_id: int, _user=Depends(can_view_wedding), db: Session = Depends(get_db)):
    return guests_crud.stats(db, wedding_id)


@router.put("/{guest_id}", response_model=schemas.GuestResponse)
def update_guest(
    guest_id: int,
    payload: schemas.GuestUpdate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    guest = _editable_guest(db, current_user, guest_id)
    return guests_crud.update(db, guest, payload)


@router.delete("/{guest_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_guest(
    guest_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    guests_crud.delete(db, _editable_guest(db, current_user, guest_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
