# mariage/crud/budget_crud.py

# =================================================================================
# 🧾 CRUD de Proveedores y Presupuesto
# - Proveedores e ítems; un ítem solo puede apuntar a un proveedor de su boda.
# - compute_payment_status(): función pura; se aplica al serializar, no se guarda.
# - Totales por proveedor y resumen por boda (agregados por decision_status).
# =================================================================================

from typing import Dict, Optional, Union

from loguru import logger
from sqlalchemy import case, func
from sqlalchemy.orm import Session

from mariage.core.errors import ValidationError
from mariage.db import transaction
from mariage.models import BudgetItem, DecisionStatusEnum, PaymentStatusEnum, Vendor, Wedding

Number = Union[int, float, None]

_ZERO_TOTALS = {"total_contracted": 0.0, "total_paid": 0.0, "total_quoted": 0.0}


def compute_payment_status(
    decision_status: Union[DecisionStatusEnum, str, None],
    final_value: Number,
    paid_value: Number,
) -> str:
    """
    Estado de pago derivado:
    - no contratado → 'N/A'
    - contratado y pagado ≥ final (final > 0) → 'Pago'
    - contratado con algo pagado → 'Pago Parcialmente'
    - contratado sin pagos → 'Pendente'
    """
    status_value = getattr(decision_status, "value", decision_status)
    if status_value != DecisionStatusEnum.Contratado.value:
        return PaymentStatusEnum.na.value

    final_amount = float(final_value or 0)
    paid_amount = float(paid_value or 0)
    if final_amount > 0 and paid_amount >= final_amount:
        return PaymentStatusEnum.pago.value
    if paid_amount > 0:
        return PaymentStatusEnum.pago_parcialmente.value
    return PaymentStatusEnum.pendente.value


def _sum_when(column, status: DecisionStatusEnum):
    return func.coalesce(func.sum(case((BudgetItem.decision_status == status, column), else_=0)), 0)


# ---------------------------------------------------------------------------------
# 🔎 Agregados
# ---------------------------------------------------------------------------------

def vendor_totals(db: Session, wedding_id: int) -> Dict[int, Dict[str, float]]:
    """vendor_id → {total_contracted, total_paid, total_quoted} de los ítems con proveedor."""
    rows = (
        db.query(
            BudgetItem.vendor_id,
            _sum_when(BudgetItem.final_value, DecisionStatusEnum.Contratado),
            _sum_when(BudgetItem.paid_value, DecisionStatusEnum.Contratado),
            _sum_when(BudgetItem.final_value, DecisionStatusEnum.Analisando),
        )
        .filter(BudgetItem.wedding_id == wedding_id, BudgetItem.vendor_id.isnot(None))
        .group_by(BudgetItem.vendor_id)
        .all()
    )
    return {
        vendor_id: {
            "total_contracted": float(contracted or 0),
            "total_paid": float(paid or 0),
            "total_quoted": float(quoted or 0),
        }
        for vendor_id, contracted, paid, quoted in rows
    }


def wedding_summary(db: Session, wedding: Wedding) -> Dict[str, Optional[float]]:
    contracted, paid, quoted = (
        db.query(
            _sum_when(BudgetItem.final_value, DecisionStatusEnum.Contratado),
            _sum_when(BudgetItem.paid_value, DecisionStatusEnum.Contratado),
            _sum_when(BudgetItem.final_value, DecisionStatusEnum.Analisando),
        )
        .filter(BudgetItem.wedding_id == wedding.id)
        .one()
    )
    estimated = float(wedding.estimated_budget) if wedding.estimated_budget is not None else None
    contracted = float(contracted or 0)
    return {
        "wedding_id": wedding.id,
        "estimated_budget": estimated,
        "total_contracted": contracted,
        "total_paid": float(paid or 0),
        "total_quoted": float(quoted or 0),
        "remaining": (estimated - contracted) if estimated is not None else None,
    }


# ---------------------------------------------------------------------------------
# 🧰 Helpers de escritura
# ---------------------------------------------------------------------------------

def ensure_vendor_in_wedding(db: Session, vendor_id: Optional[int], wedding_id: int) -> None:
    """Un ítem solo puede apuntar a un proveedor de su misma boda."""
    if vendor_id is None:
        return
    owner = db.query(Vendor.wedding_id).filter(Vendor.id == vendor_id).scalar()
    if owner != wedding_id:
        raise ValidationError("El proveedor no pertenece a esta boda.")


def list_items_for_wedding(db: Session, wedding_id: int):
    return (
        db.query(BudgetItem)
        .filter(BudgetItem.wedding_id == wedding_id)
        .order_by(BudgetItem.created_at.desc(), BudgetItem.id.desc())
        .all()
    )


def list_items_for_vendor(db: Session, vendor_id: int):
    return (
        db.query(BudgetItem)
        .filter(BudgetItem.vendor_id == vendor_id)
        .order_by(BudgetItem.created_at.desc(), BudgetItem.id.desc())
        .all()
    )


# ---------------------------------------------------------------------------------
# 🏪 Proveedores
# ---------------------------------------------------------------------------------

def list_vendors(db: Session, wedding_id: int):
    """Proveedores de la boda (categoría, nombre) con sus totales; cero si no tienen ítems."""
    vendors = (
        db.query(Vendor)
        .filter(Vendor.wedding_id == wedding_id)
        .order_by(Vendor.category, Vendor.vendor_name, Vendor.id)
        .all()
    )
    totals = vendor_totals(db, wedding_id)
    return [(vendor, totals.get(vendor.id, dict(_ZERO_TOTALS))) for vendor in vendors]


def create_vendor(db: Session, wedding_id: int, data) -> Vendor:
    with transaction(db):
        vendor = Vendor(wedding_id=wedding_id, **data.model_dump())
        db.add(vendor)
    db.refresh(vendor)
    logger.info("VENDOR: creado | vendor_id={} | wedding_id={}", vendor.id, wedding_id)
    return vendor


def update_vendor(db: Session, vendor: Vendor, data) -> Vendor:
    with transaction(db):
        for field, value in data.model_dump().items():
            setattr(vendor, field, value)
    db.refresh(vendor)
    return vendor


def delete_vendor(db: Session, vendor: Vendor) -> None:
    """Sus ítems quedan en el presupuesto con vendor_id NULL."""
    vendor_id = vendor.id
    with transaction(db):
        db.delete(vendor)
    logger.info("VENDOR: eliminado | vendor_id={}", vendor_id)

# ---------------------------------------------------------------------------------
# 💶 Ítems del presupuesto
# ---------------------------------------------------------------------------------

def create_item(db: Session, wedding_id: int, data) -> BudgetItem:
    ensure_vendor_in_wedding(db, data.vendor_id, wedding_id)
    with transaction(db):
        item = BudgetItem(wedding_id=wedding_id, **data.model_dump())
        db.add(item)
    db.refresh(item)
    logger.info("BUDGET: ítem creado | item_id={} | wedding_id={}", item.id, wedding_id)
    return item


def update_item(db: Session, item: BudgetItem, data) -> BudgetItem:
    ensure_vendor_in_wedding(db, data.vendor_id, item.wedding_id)
    with transaction(db):
        for field, value in data.model_dump().items():
            setattr(item, field, value)
    db.refresh(item)
    return item


def set_item_status(db: Session, item: BudgetItem, decision_status: DecisionStatusEnum) -> BudgetItem:
    with transaction(db):
        item.decision_status = DecisionStatusEnum(decision_status)
    db.refresh(item)
    logger.info("BUDGET: estado actualizado | item_id={} | status={}", item.id, item.decision_status.value)
    return item


def delete_item(db: Session, item: BudgetItem) -> None:
    item_id = item.id
    with transaction(db):
        db.delete(item)
    logger.info("BUDGET: ítem eliminado | item_id={}", item_id)
