# mariage/routers/budget.py

# =================================================================================
# 💶 ROUTER DEL PRESUPUESTO
# ---------------------------------------------------------------------------------
# - Toda respuesta de ítem pasa por BudgetItemResponse, que añade payment_status.
# - Listado por boda o por proveedor ('view'); escrituras con 'edit'.
# - Rutas por ítem: la boda sale del ítem guardado.
# =================================================================================

from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from mariage import models, schemas
from mariage.core.errors import NotFoundError
from mariage.core.guard import (
    can_edit_wedding,
    can_view_wedding,
    require_access,
    require_edit,
    wedding_id_of,
)
from mariage.core.security import get_current_user
from mariage.crud import budget_crud
from mariage.db import get_db

router = APIRouter(prefix="/api/budget", tags=["budget"])


def _editable_item(db: Session, user: models.User, item_id: int) -> models.BudgetItem:
    wedding_id = wedding_id_of(db, models.BudgetItem, item_id, "Ítem")
    require_edit(db, user.id, wedding_id)
    return db.get(models.BudgetItem, item_id)


@router.get("/wedding/{wedding_id}", response_model=List[schemas.BudgetItemResponse])
def list_wedding_items(wedding_id: int, _user=Depends(can_view_wedding), db: Session = Depends(get_db)):
    return budget_crud.list_items_for_wedding(db, wedding_id)


@router.get("/vendor/{vendor_id}", response_model=List[schemas.BudgetItemResponse])
def list_vendor_items(
    vendor_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    require_access(db, current_user.id, wedding_id_of(db, models.Vendor, vendor_id, "Proveedor"))
    return budget_crud.list_items_for_vendor(db, vendor_id)


@router.get("/summary/wedding/{wedding_id}", response_model=schemas.BudgetSummary)
def budget_summary(wedding_id: int, _user=Depends(can_view_wedding), db: Session = Depends(get_db)):
    wedding = db.get(models.Wedding, wedding_id)
    if wedding is None:
        raise NotFoundError("Boda no encontrada.")
    return budget_crud.wedding_summary(db, wedding)


@router.post("/wedding/{wedding_id}", response_model=schemas.BudgetItemResponse, status_code=status.HTTP_201_CREATED)
def create_item(
    wedding_id: int,
    payload: schemas.BudgetItemCreate,
    _user=Depends(can_edit_wedding),
    db: Session = Depends(get_db),
):
    return budget_crud.create_item(db, wedding_id, payload)


@router.patch("/{item_id}/status", response_model=schemas.BudgetItemResponse)
def update_item_status(
    item_id: int,
    payload: schemas.BudgetStatusUpdate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    item = _editable_item(db, current_user, item_id)
    return budget_crud.set_item_status(db, item, payload.decision_status)


@router.put("/{item_id}", response_model=schemas.BudgetItemResponse)
def update_item(
    item_id: int,
    payload: schemas.BudgetItemIn,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    item = _editable_item(db, current_user, item_id)
    return budget_crud.update_item(db, item, payload)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_item(
    item_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    budget_crud.delete_item(db, _editable_item(db, current_user, item_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
