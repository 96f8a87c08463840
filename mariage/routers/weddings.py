# mariage/routers/weddings.py

# =================================================================================
# 💍 ROUTER DE BODAS
# ---------------------------------------------------------------------------------
# - Crear (el creador queda como miembro 'edit'), listar, leer, actualizar, borrar.
# - Detalles del micrositio (upsert de 'our_story').
# =================================================================================

from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from mariage import models, schemas
from mariage.core.errors import NotFoundError
from mariage.core.guard import can_edit_wedding, can_view_wedding
from mariage.core.security import get_current_user
from mariage.crud import weddings_crud
from mariage.db import get_db

router = APIRouter(prefix="/api/weddings", tags=["weddings"])


def _load(db: Session, wedding_id: int) -> models.Wedding:
    wedding = db.get(models.Wedding, wedding_id)
    if wedding is None:
        raise NotFoundError("Boda no encontrada.")
    return wedding


@router.post("", response_model=schemas.WeddingResponse, status_code=status.HTTP_201_CREATED)
def create_wedding(
    payload: schemas.WeddingCreate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return weddings_crud.create_wedding(db, current_user, payload)


@router.get("", response_model=List[schemas.WeddingWithPermission])
def list_my_weddings(
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Todas las bodas de las que el usuario es miembro, con su nivel de permiso."""
    out = []
    for wedding, level in weddings_crud.list_for_user(db, current_user.id):
        item = schemas.WeddingResponse.model_validate(wedding).model_dump()
        item["permission_level"] = level.value
        out.append(item)
    return out


@router.get("/{wedding_id}", response_model=schemas.WeddingResponse)
def get_wedding(wedding_id: int, _user=Depends(can_view_wedding), db: Session = Depends(get_db)):
    return _load(db, wedding_id)


@router.put("/{wedding_id}", response_model=schemas.WeddingResponse)
def update_wedding(
    wedding_id: int,
    payload: schemas.WeddingUpdate,
    _user=Depends(can_edit_wedding),
    db: Session = Depends(get_db),
):
    return weddings_crud.update_wedding(db, _load(db, wedding_id), payload)


@router.delete("/{wedding_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_wedding(wedding_id: int, _user=Depends(can_edit_wedding), db: Session = Depends(get_db)):
    weddings_crud.delete_wedding(db, _load(db, wedding_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)

# ---------------------------------------------------------------------------------
# 🌐 Micrositio
# ---------------------------------------------------------------------------------

@router.put("/{wedding_id}/site", response_model=schemas.SiteDetailsResponse)
def upsert_site(
    wedding_id: int,
    payload: schemas.SiteDetailsIn,
    _user=Depends(can_edit_wedding),
    db: Session = Depends(get_db),
):
    return weddings_crud.upsert_site_details(db, wedding_id, payload.our_story)


@router.get("/{wedding_id}/site")
def get_site(wedding_id: int, _user=Depends(can_view_wedding), db: Session = Depends(get_db)):
    """Detalles del micrositio, o {} si todavía no se guardaron."""
    details = weddings_crud.get_site_details(db, wedding_id)
    if details is None:
        return {}
    return schemas.SiteDetailsResponse.model_validate(details).model_dump(mode="json")
