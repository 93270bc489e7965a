# app/routers/suppliers.py
from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session
from typing import List, Optional

from app.database import get_db
from app.crud import suppliers as crud
from app.models import SupplierCategory, SupplierInvoiceStatus
from app.schemas.suppliers import (
    SupplierCreate, SupplierRead, SupplierUpdate,
    SupplierInvoiceCreate, SupplierInvoiceRead, SupplierInvoiceUpdate,
    SupplierInvoiceStatusChange,
)

router = APIRouter()

# -----------------------------
# Facturas de proveedores
# (antes que /{supplier_id} para que 'invoices' no se tome como id)
# -----------------------------
@router.get("/invoices", response_model=List[SupplierInvoiceRead])
def get_supplier_invoices(
    supplier_id: Optional[int] = None,
    status: Optional[SupplierInvoiceStatus] = None,
    db: Session = Depends(get_db),
):
    return crud.get_supplier_invoices(db, supplier_id=supplier_id, status=status)

@router.get("/invoices/{invoice_id}", response_model=SupplierInvoiceRead)
def get_supplier_invoice(invoice_id: int, db: Session = Depends(get_db)):
    return crud.get_supplier_invoice(db, invoice_id)

@router.post("/invoices", response_model=SupplierInvoiceRead, status_code=201)
def create_supplier_invoice(invoice_in: SupplierInvoiceCreate, db: Session = Depends(get_db)):
    return crud.create_supplier_invoice(db, invoice_in)

@router.put("/invoices/{invoice_id}", response_model=SupplierInvoiceRead)
def update_supplier_invoice(invoice_id: int, invoice_in: SupplierInvoiceUpdate, db: Session = Depends(get_db)):
    return crud.update_supplier_invoice(db, invoice_id, invoice_in)

@router.patch("/invoices/{invoice_id}/status", response_model=SupplierInvoiceRead)
def change_supplier_invoice_status(
    invoice_id: int, change: SupplierInvoiceStatusChange, db: Session = Depends(get_db)
):
    return crud.change_supplier_invoice_status(db, invoice_id, change.status)

@router.delete("/invoices/{invoice_id}", status_code=204)
def delete_supplier_invoice(invoice_id: int, db: Session = Depends(get_db)):
    crud.delete_supplier_invoice(db, invoice_id)
    return Response(status_code=204)

# -----------------------------
# Proveedores
# -----------------------------
@router.get("/", response_model=List[SupplierRead])
def get_suppliers(
    category: Optional[SupplierCategory] = None,
    include_inactive: bool = False,
    db: Session = Depends(get_db),
):
    return crud.get_suppliers(db, include_inactive=include_inactive, category=category)

@router.get("/{supplier_id}", response_model=SupplierRead)
def get_supplier(supplier_id: int, db: Session = Depends(get_db)):
    return crud.get_supplier(db, supplier_id)

@router.post("/", response_model=SupplierRead, status_code=201)
def create_supplier(supplier_in: SupplierCreate, db: Session = Depends(get_db)):
    return crud.create_supplier(db, supplier_in)

@router.put("/{supplier_id}", response_model=SupplierRead)
def update_supplier(supplier_id: int, supplier_in: SupplierUpdate, db: Session = Depends(get_db)):
    return crud.update_supplier(db, supplier_id, supplier_in)

@router.delete("/{supplier_id}", response_model=SupplierRead)
def delete_supplier(supplier_id: int, db: Session = Depends(get_db)):
    return crud.delete_supplier(db, supplier_id)
