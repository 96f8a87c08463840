# mariage/routers/public.py

# =================================================================================
# 🌐 ROUTER PÚBLICO (sin login)
# ---------------------------------------------------------------------------------
# - Micrositio por slug.
# - RSVP por token: el token del invitado es la única credencial.
# =================================================================================

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from mariage import schemas
from mariage.core.errors import NotFoundError
from mariage.crud import guests_crud, weddings_crud
from mariage.db import get_db

router = APIRouter(prefix="/api/public", tags=["public"])


@router.get("/site/{slug}", response_model=schemas.PublicSiteResponse)
def public_site(slug: str, db: Session = Depends(get_db)):
    found = weddings_crud.get_public_site(db, slug.strip().lower())
    if found is None:
        raise NotFoundError("Página no encontrada.")
    wedding, our_story = found
    data = schemas.PublicSiteResponse.model_validate(wedding).model_dump()
    data["our_story"] = our_story
    return data


@router.get("/rsvp/{token}", response_model=schemas.PublicGuestResponse)
def get_rsvp_guest(token: str, db: Session = Depends(get_db)):
    guest = guests_crud.get_by_rsvp_token(db, token)
    if guest is None:
        raise NotFoundError("Invitación no encontrada.")
    return {"full_name": guest.full_name}


@router.post("/rsvp/{token}", response_model=schemas.MessageResponse)
def submit_rsvp(token: str, payload: schemas.RsvpSubmit, db: Session = Depends(get_db)):
    guests_crud.submit_rsvp(db, token.strip(), payload.status, payload.message)
    return {"message": "¡Obrigado! Tu respuesta fue registrada."}
