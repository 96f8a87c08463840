# mariage/meta.py  # Router de metadatos para el frontend.

from fastapi import APIRouter  # Enrutador de FastAPI para rutas simples.
from typing import Dict, List  # Tipado de la respuesta.

from mariage.models import (
    DecisionStatusEnum,
    PaymentStatusEnum,
    PermissionLevelEnum,
    RsvpStatusEnum,
)

router = APIRouter(tags=["meta"])


@router.get("/health")
def health() -> Dict[str, str]:
    """Sonda de vida para el balanceador (no toca la BD)."""
    return {"status": "ok"}


@router.get("/api/meta/options")
def get_meta_options() -> Dict[str, List[str]]:
    """
    Vocabularios cerrados que el frontend necesita para sus selectores.
    Son CÓDIGOS: el frontend los traduce si hace falta.
    """
    return {
        "permission_levels": [e.value for e in PermissionLevelEnum],
        "rsvp_statuses": [e.value for e in RsvpStatusEnum],
        "decision_statuses": [e.value for e in DecisionStatusEnum],
        "payment_statuses": [e.value for e in PaymentStatusEnum],
    }
