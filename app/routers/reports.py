# app/routers/reports.py
from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session
from datetime import date
from typing import Optional

from app.database import get_db
from app.crud.processes import get_processes
from app.crud.invoices import get_invoices
from app.models import ProcessState, InvoiceType
from app.schemas.reports import ProcessSummary, InvoiceSummary
from app.utils.reports import process_summary, invoice_summary, processes_to_csv

router = APIRouter()


@router.get("/processes/summary", response_model=ProcessSummary)
def get_process_summary(
    state: Optional[ProcessState] = None,
    agency_id: Optional[int] = None,
    start_from: Optional[date] = None,
    start_to: Optional[date] = None,
    top: int = 5,
    db: Session = Depends(get_db),
):
    """Indicadores de procesos: activos, aprobados, por estado/organismo/mes, tiempos y costos."""
    processes = get_processes(
        db, state=state, agency_id=agency_id, start_from=start_from, start_to=start_to, limit=100000
    )
    return process_summary(processes, top_agencies=top)

@router.get("/invoices/summary", response_model=InvoiceSummary)
def get_invoice_summary(invoice_type: Optional[InvoiceType] = None, db: Session = Depends(get_db)):
    """Totales por estado, facturado, cobrado y pendiente de cobro."""
    return invoice_summary(get_invoices(db, invoice_type=invoice_type, limit=100000))

@router.get("/processes/export")
def export_processes(
    state: Optional[ProcessState] = None,
    agency_id: Optional[int] = None,
    client_id: Optional[int] = None,
    start_from: Optional[date] = None,
    start_to: Optional[date] = None,
    db: Session = Depends(get_db),
):
    """Exporta los procesos filtrados a CSV (una fila por proceso + encabezado)."""
    processes = get_processes(
        db, state=state, agency_id=agency_id, client_id=client_id,
        start_from=start_from, start_to=start_to, limit=100000
    )
    return Response(
        content=processes_to_csv(processes),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename=reporte-procesos-{date.today().isoformat()}.csv"}
    )
