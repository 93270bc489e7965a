import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from app.models import Supplier, SupplierInvoice, SupplierInvoiceStatus
from app.schemas.suppliers import (
    SupplierCreate, SupplierUpdate, SupplierInvoiceCreate, SupplierInvoiceUpdate
)
from app.crud.base import commit, get_or_404, reject_nulls
from app.crud.configuration import effective_vat_rate
from app.utils.totals import to_money

logger = logging.getLogger(__name__)


# -----------------------------
# Proveedores
# -----------------------------
def get_supplier(db: Session, supplier_id: int) -> Supplier:
    return get_or_404(db, Supplier, supplier_id, "Proveedor")

def get_suppliers(db: Session, include_inactive: bool = False, category=None) -> List[Supplier]:
    query = db.query(Supplier)
    if not include_inactive:
        query = query.filter(Supplier.is_active == True)
    if category:
        query = query.filter(Supplier.category == category)
    return query.order_by(Supplier.name).all()

def create_supplier(db: Session, supplier_in: SupplierCreate) -> Supplier:
    supplier = Supplier(**supplier_in.model_dump(), is_active=True)
    db.add(supplier)
    commit(db, "crear proveedor")
    db.refresh(supplier)
    logger.info("Proveedor %s creado (%s)", supplier.id, supplier.name)
    return supplier

def update_supplier(db: Session, supplier_id: int, supplier_in: SupplierUpdate) -> Supplier:
    supplier = get_supplier(db, supplier_id)
    data = supplier_in.model_dump(exclude_unset=True)
    reject_nulls(data, ("name", "category", "is_active"))

    for field, value in data.items():
        setattr(supplier, field, value)
    commit(db, "actualizar proveedor")
    db.refresh(supplier)
    return supplier

def delete_supplier(db: Session, supplier_id: int) -> Supplier:
    # Soft delete: sus facturas siguen referenciándolo
    supplier = get_supplier(db, supplier_id)
    supplier.is_active = False
    commit(db, "eliminar proveedor")
    db.refresh(supplier)
    logger.info("Proveedor %s dado de baja", supplier_id)
    return supplier


# -----------------------------
# Facturas de proveedores
# -----------------------------
def _apply_amounts(db: Session, invoice: SupplierInvoice, subtotal) -> None:
    invoice.subtotal = to_money(subtotal)
    invoice.tax_amount = to_money(invoice.subtotal * effective_vat_rate(db))
    invoice.total_amount = invoice.subtotal + invoice.tax_amount

def get_supplier_invoice(db: Session, invoice_id: int) -> SupplierInvoice:
    return get_or_404(db, SupplierInvoice, invoice_id, "Factura de proveedor")

def get_supplier_invoices(
    db: Session,
    supplier_id: Optional[int] = None,
    status: Optional[SupplierInvoiceStatus] = None,
) -> List[SupplierInvoice]:
    query = db.query(SupplierInvoice)
    if supplier_id:
        query = query.filter(SupplierInvoice.supplier_id == supplier_id)
    if status:
        query = query.filter(SupplierInvoice.status == status)
    return query.order_by(SupplierInvoice.issue_date.desc()).all()

def create_supplier_invoice(db: Session, invoice_in: SupplierInvoiceCreate) -> SupplierInvoice:
    get_supplier(db, invoice_in.supplier_id)

    data = invoice_in.model_dump(exclude={"subtotal"})
    invoice = SupplierInvoice(**data, status=SupplierInvoiceStatus.PENDING)
    _apply_amounts(db, invoice, invoice_in.subtotal)

    db.add(invoice)
    commit(db, "crear factura de proveedor")
    db.refresh(invoice)
    logger.info("Factura de proveedor %s creada (%s)", invoice.id, invoice.number)
    return invoice

def update_supplier_invoice(db: Session, invoice_id: int, invoice_in: SupplierInvoiceUpdate) -> SupplierInvoice:
    invoice = get_supplier_invoice(db, invoice_id)
    data = invoice_in.model_dump(exclude_unset=True)
    reject_nulls(data, ("number", "issue_date", "concept", "subtotal"))

    subtotal = data.pop("subtotal", None)
    for field, value in data.items():
        setattr(invoice, field, value)
    if subtotal is not None:
        _apply_amounts(db, invoice, subtotal)

    commit(db, "actualizar factura de proveedor")
    db.refresh(invoice)
    return invoice

def change_supplier_invoice_status(
    db: Session, invoice_id: int, status: SupplierInvoiceStatus
) -> SupplierInvoice:
    invoice = get_supplier_invoice(db, invoice_id)
    previous = invoice.status
    invoice.status = status
    commit(db, "cambiar estado de factura de proveedor")
    db.refresh(invoice)
    logger.info("Factura de proveedor %s: %s -> %s", invoice_id, previous.value, status.value)
    return invoice

def delete_supplier_invoice(db: Session, invoice_id: int) -> None:
    invoice = get_supplier_invoice(db, invoice_id)
    db.delete(invoice)
    commit(db, "eliminar factura de proveedor")
    logger.info("Factura de proveedor %s eliminada", invoice_id)
