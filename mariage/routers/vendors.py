# mariage/routers/vendors.py

# =================================================================================
# 🏪 ROUTER DE PROVEEDORES
# - Listado con totales contratados / pagados / presupuestados por proveedor.
# - Edición y borrado por id: la boda se deriva del proveedor guardado.
# =================================================================================

from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from mariage import models, schemas
from mariage.core.guard import can_edit_wedding, can_view_wedding, require_edit, wedding_id_of
from mariage.core.security import get_current_user
from mariage.crud import budget_crud
from mariage.db import get_db

router = APIRouter(prefix="/api/vendors", tags=["vendors"])


def _with_totals(vendor: models.Vendor, totals: dict) -> dict:
    data = schemas.VendorResponse.model_validate(vendor).model_dump()
    data.update(totals)
    return data


def _editable_vendor(db: Session, user: models.User, vendor_id: int) -> models.Vendor:
    wedding_id = wedding_id_of(db, models.Vendor, vendor_id, "Proveedor")
    require_edit(db, user.id, wedding_id)
    return db.get(models.Vendor, vendor_id)


@router.get("/wedding/{wedding_id}", response_model=List[schemas.VendorWithTotals])
def list_vendors(wedding_id: int, _user=Depends(can_view_wedding), db: Session = Depends(get_db)):
    return [_with_totals(vendor, totals) for vendor, totals in budget_crud.list_vendors(db, wedding_id)]


@router.post("/wedding/{wedding_id}", response_model=schemas.VendorWithTotals, status_code=status.HTTP_201_CREATED)
def create_vendor(
    wedding_id: int,
    payload: schemas.VendorIn,
    _user=Depends(can_edit_wedding),
    db: Session = Depends(get_db),
):
    vendor = budget_crud.create_vendor(db, wedding_id, payload)
    return _with_totals(vendor, {"total_contracted": 0.0, "total_paid": 0.0, "total_quoted": 0.0})


@router.put("/{vendor_id}", response_model=schemas.VendorResponse)
def update_vendor(
    vendor_id: int,
    payload: schemas.VendorIn,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    vendor = _editable_vendor(db, current_user, vendor_id)
    return budget_crud.update_vendor(db, vendor, payload)


@router.delete("/{vendor_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_vendor(
    vendor_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    budget_crud.delete_vendor(db, _editable_vendor(db, current_user, vendor_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
