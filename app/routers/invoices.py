# app/routers/invoices.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date

from app.config import settings
from app.database import get_db
from app.dependencies import get_actor
from app.crud import invoices as crud
from app.models import InvoiceStatus, InvoiceType
from app.schemas.invoices import (
    InvoiceCreate, InvoiceUpdate, InvoiceRead, InvoiceStatusChange, HistoryRead
)

router = APIRouter()


@router.get("/", response_model=List[InvoiceRead])
def get_invoices(
    status: Optional[InvoiceStatus] = None,
    invoice_type: Optional[InvoiceType] = None,
    client_id: Optional[int] = None,
    process_id: Optional[int] = None,
    search: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
):
    return crud.get_invoices(
        db, status=status, invoice_type=invoice_type, client_id=client_id,
        process_id=process_id, search=search, skip=skip, limit=limit,
    )

@router.post("/refresh-overdue", response_model=List[InvoiceRead])
def refresh_overdue(
    today: Optional[date] = None,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    """Marca como vencidas las facturas enviadas con vencimiento pasado."""
    return crud.refresh_overdue(db, today=today, actor=actor)

@router.post("/purge")
def purge_deleted(db: Session = Depends(get_db)):
    return {"purged": crud.purge_deleted_invoices(db)}

@router.get("/{invoice_id}", response_model=InvoiceRead)
def get_invoice(invoice_id: int, db: Session = Depends(get_db)):
    return crud.get_invoice(db, invoice_id)

@router.get("/{invoice_id}/history", response_model=List[HistoryRead])
def get_history(invoice_id: int, db: Session = Depends(get_db)):
    return crud.get_history(db, invoice_id)

@router.post("/", response_model=InvoiceRead, status_code=201)
def create_invoice(
    invoice_in: InvoiceCreate,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    return crud.create_invoice(db, invoice_in, actor)

@router.put("/{invoice_id}", response_model=InvoiceRead)
def update_invoice(
    invoice_id: int,
    invoice_in: InvoiceUpdate,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    return crud.update_invoice(db, invoice_id, invoice_in, actor)

@router.patch("/{invoice_id}/status", response_model=InvoiceRead)
def change_status(
    invoice_id: int,
    change: InvoiceStatusChange,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    return crud.change_status(db, invoice_id, change.status, actor, change.version)

@router.delete("/{invoice_id}")
def delete_invoice(invoice_id: int, db: Session = Depends(get_db), actor: str = Depends(get_actor)):
    invoice = crud.delete_invoice(db, invoice_id, actor)
    return {
        "status": "success",
        "invoice_id": invoice.id,
        "number": invoice.number,
        "deleted_at": invoice.deleted_at,
        "undo_seconds": settings.UNDO_WINDOW_SECONDS,
    }

@router.post("/{invoice_id}/restore", response_model=InvoiceRead)
def restore_invoice(invoice_id: int, db: Session = Depends(get_db), actor: str = Depends(get_actor)):
    return crud.restore_invoice(db, invoice_id, actor)
