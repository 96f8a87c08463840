# mariage/crud/weddings_crud.py                                                 # Ruta del archivo.

# =================================================================================
# 💍 CRUD de Bodas y asignación de slugs
# - slugify(): minúsculas, sin acentos, separado por guiones.
# - allocate_slug(): prueba base, base-1, base-2... hasta encontrar uno libre.
# - create_wedding(): boda + membresía 'edit' del creador en una sola transacción.
# - La unicidad final la garantiza la restricción UNIQUE: una colisión al confirmar
#   se reporta como ConflictError("slug already taken"), nunca como 500.
# =================================================================================

import re
import unicodedata
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from mariage import models, schemas
from mariage.auth import utcnow
from mariage.core.errors import ConflictError, ValidationError
from mariage.db import insert_for, transaction

OWNER_RELATIONSHIP = "Noivo/Noiva"                  # Etiqueta de la membresía del creador.
SLUG_TAKEN = "slug already taken"                   # Detalle estable para que el cliente reintente.
_FALLBACK_SLUG = "casamento"                        # Si los nombres no dejan nada ASCII.

# Campos que no admiten null aunque el cliente los envíe explícitamente así.
_NON_NULLABLE = {"groom_name", "bride_name", "website_slug", "color_palette", "alternative_dates", "has_civil_ceremony"}

# ---------------------------------------------------------------------------------
# 🔤 Slugs
# ---------------------------------------------------------------------------------

def slugify(text: str) -> str:
    """'Ana Júlia-e-João' → 'ana-julia-e-joao'."""
    txt = unicodedata.normalize("NFKD", text or "")                      # Separa diacríticos.
    txt = "".join(ch for ch in txt if not unicodedata.combining(ch))     # Quita acentos.
    txt = txt.encode("ascii", "ignore").decode("ascii").lower()          # Solo ASCII.
    txt = re.sub(r"[^a-z0-9]+", "-", txt)                                # Todo lo demás → guion.
    return txt.strip("-")

def base_slug(bride_name: str, groom_name: str) -> str:
    if not slugify(bride_name) and not slugify(groom_name):
        return _FALLBACK_SLUG
    return slugify(f"{bride_name}-e-{groom_name}")

def _slug_taken(db: Session, slug: str, exclude_id: Optional[int] = None) -> bool:
    q = db.query(models.Wedding.id).filter(models.Wedding.website_slug == slug)
    if exclude_id is not None:
        q = q.filter(models.Wedding.id != exclude_id)
    return q.first() is not None

def allocate_slug(db: Session, base: str) -> str:
    """Primer candidato libre entre base, base-1, base-2, ..."""
    slug = base
    suffix = 1
    while _slug_taken(db, slug):
        slug = f"{base}-{suffix}"
        suffix += 1
    return slug

def _is_slug_violation(exc: IntegrityError) -> bool:
    return "website_slug" in str(getattr(exc, "orig", exc))

# ---------------------------------------------------------------------------------
# 🧰 Normalización de atributos
# ---------------------------------------------------------------------------------

def _column_values(data: Dict[str, Any]) -> Dict[str, Any]:
    """Convierte listas de fechas a ISO (la columna es JSON)."""
    out = dict(data)
    if out.get("alternative_dates") is not None:
        out["alternative_dates"] = [
            d.isoformat() if isinstance(d, date) else d for d in out["alternative_dates"]
        ]
    return out

# ---------------------------------------------------------------------------------
# ✨ Operaciones
# ---------------------------------------------------------------------------------

def create_wedding(db: Session, owner: models.User, data: schemas.WeddingCreate) -> models.Wedding:
    """Crea la boda y la membresía del creador; ambas filas o ninguna."""
    attrs = _column_values(data.model_dump())
    slug = allocate_slug(db, base_slug(data.bride_name, data.groom_name))
    try:
        with transaction(db):
            wedding = models.Wedding(owner_id=owner.id, website_slug=slug, **attrs)
            db.add(wedding)
            db.flush()                                                   # Necesitamos wedding.id.
            db.add(models.WeddingMember(
                user_id=owner.id,
                wedding_id=wedding.id,
                permission_level=models.PermissionLevelEnum.edit,
                relationship=OWNER_RELATIONSHIP,
            ))
    except IntegrityError as e:
        if _is_slug_violation(e):
            logger.warning("WEDDING: colisión de slug al confirmar | slug={}", slug)
            raise ConflictError(SLUG_TAKEN)
        raise
    db.refresh(wedding)
    logger.info("WEDDING: creada | wedding_id={} | owner_id={} | slug={}", wedding.id, owner.id, slug)
    return wedding


def update_wedding(db: Session, wedding: models.Wedding, data: schemas.WeddingUpdate) -> models.Wedding:
    """Aplica solo los campos enviados; un slug ajeno → ConflictError."""
    changes = {
        k: v for k, v in data.model_dump(exclude_unset=True).items()
        if not (v is None and k in _NON_NULLABLE)
    }
    if "website_slug" in changes:
        wanted = slugify(changes["website_slug"])
        if not wanted:
            raise ValidationError("El slug debe contener letras o números.")
        if _slug_taken(db, wanted, exclude_id=wedding.id):
            raise ConflictError(SLUG_TAKEN)
        changes["website_slug"] = wanted

    try:
        with transaction(db):
            for field, value in _column_values(changes).items():
                setattr(wedding, field, value)
            db.flush()
    except IntegrityError as e:
        if _is_slug_violation(e):
            raise ConflictError(SLUG_TAKEN)
        raise
    db.refresh(wedding)
    logger.info("WEDDING: actualizada | wedding_id={} | campos={}", wedding.id, sorted(changes))
    return wedding


def delete_wedding(db: Session, wedding: models.Wedding) -> None:
    """Borra la boda; miembros, invitaciones, invitados, proveedores e ítems caen en cascada."""
    wedding_id = wedding.id
    with transaction(db):
        db.delete(wedding)
    logger.info("WEDDING: eliminada | wedding_id={}", wedding_id)


def list_for_user(db: Session, user_id: int) -> List[Tuple[models.Wedding, models.PermissionLevelEnum]]:
    """Bodas de las que el usuario es miembro, las más recientes primero."""
    return (
        db.query(models.Wedding, models.WeddingMember.permission_level)
        .join(models.WeddingMember, models.WeddingMember.wedding_id == models.Wedding.id)
        .filter(models.WeddingMember.user_id == user_id)
        .order_by(models.Wedding.created_at.desc(), models.Wedding.id.desc())
        .all()
    )

# ---------------------------------------------------------------------------------
# 🌐 Micrositio
# ---------------------------------------------------------------------------------

def upsert_site_details(db: Session, wedding_id: int, our_story: Optional[str]) -> models.SiteDetails:
    """Una fila por boda: inserta o actualiza la historia (ON CONFLICT nativo)."""
    stmt = insert_for(db, models.SiteDetails).values(
        wedding_id=wedding_id, our_story=our_story, updated_at=utcnow(),
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[models.SiteDetails.wedding_id],
        set_={"our_story": stmt.excluded.our_story, "updated_at": stmt.excluded.updated_at},
    )
    with transaction(db):
        db.execute(stmt)
    return get_site_details(db, wedding_id)


def get_site_details(db: Session, wedding_id: int) -> Optional[models.SiteDetails]:
    return db.query(models.SiteDetails).filter(models.SiteDetails.wedding_id == wedding_id).first()


def get_public_site(db: Session, slug: str) -> Optional[Tuple[models.Wedding, Optional[str]]]:
    row = (
        db.query(models.Wedding, models.SiteDetails.our_story)
        .outerjoin(models.SiteDetails, models.SiteDetails.wedding_id == models.Wedding.id)
        .filter(models.Wedding.website_slug == slug)
        .first()
    )
    return tuple(row) if row else None
