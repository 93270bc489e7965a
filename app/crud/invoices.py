# app/crud/invoices.py
"""
Facturación.

Toda mutación de una factura agrega una entrada al historial con el
estado anterior y posterior (auditoría). La baja es lógica y puede
deshacerse dentro de UNDO_WINDOW_SECONDS.
"""
import logging
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.config import settings
from app.models import (
    Invoice, InvoiceItem, InvoiceHistory, InvoiceStatus, InvoiceType,
    HistoryAction, Budget, BudgetStatus, Process,
)
from app.schemas.invoices import (
    InvoiceCreate, InvoiceUpdate, ItemCreate, KnownClientRef,
)
from app.exceptions import ConflictError, NotFoundError, ValidationError
from app.crud.base import actor_name, commit, check_version, get_or_404, serialize_model
from app.crud.clients import get_client
from app.crud.configuration import effective_vat_rate, get_int
from app.crud.processes import get_process
from app.utils.folios import get_next_folio, format_folio
from app.utils.totals import compute_totals, line_total, to_money

logger = logging.getLogger(__name__)

STATUS_LABELS = {
    InvoiceStatus.DRAFT: "Borrador",
    InvoiceStatus.SENT: "Enviada",
    InvoiceStatus.PAID: "Pagada",
    InvoiceStatus.OVERDUE: "Vencida",
    InvoiceStatus.CANCELLED: "Anulada",
}


# -----------------------------
# Helpers compartidos con presupuestos
# -----------------------------
def resolve_client(db: Session, ref) -> Tuple[Optional[int], str]:
    """
    KnownClientRef -> (id, nombre actual del cliente); el cliente debe existir.
    DenormalizedClientRef -> (None, nombre).
    """
    if isinstance(ref, KnownClientRef):
        client = get_client(db, ref.id)
        return client.id, client.name
    return None, ref.name.strip()


def build_lines(model, items: List[ItemCreate]) -> list:
    return [
        model(
            description=item.description,
            quantity=item.quantity,
            unit_price=to_money(item.unit_price),
            total_line=line_total(item.quantity, item.unit_price),
        )
        for item in items
    ]


def apply_totals(db: Session, document, items) -> None:
    document.subtotal, document.tax_amount, document.total_amount = compute_totals(
        items, effective_vat_rate(db)
    )


def snapshot(invoice: Invoice) -> Dict[str, Any]:
    data = serialize_model(invoice)
    data["items"] = [
        {
            "description": item.description,
            "quantity": str(item.quantity),
            "unit_price": str(item.unit_price),
            "total_line": str(item.total_line),
        }
        for item in invoice.items
    ]
    return data


def _record(
    invoice: Invoice,
    action: HistoryAction,
    description: str,
    actor: Optional[str],
    before: Optional[Dict[str, Any]] = None,
    after: Optional[Dict[str, Any]] = None,
) -> InvoiceHistory:
    entry = InvoiceHistory(
        action=action,
        actor=actor_name(actor),
        description=description,
        before_data=before,
        after_data=after,
        created_at=datetime.now(),
    )
    invoice.history.append(entry)
    return entry


def _link_process(db: Session, invoice: Invoice, process_id: Optional[int]) -> None:
    previous_id = invoice.process_id
    invoice.process_id = process_id
    if process_id:
        get_process(db, process_id).invoiced = True

    if previous_id and previous_id != process_id:
        # El proceso anterior queda facturado solo si otra factura vigente lo referencia
        others = db.query(Invoice).filter(
            Invoice.process_id == previous_id,
            Invoice.id != invoice.id,
            Invoice.deleted_at.is_(None)
        ).count()
        previous = db.get(Process, previous_id)
        if previous is not None and not others:
            previous.invoiced = False


# -----------------------------
# Lectura
# -----------------------------
def get_invoice(db: Session, invoice_id: int, include_deleted: bool = False) -> Invoice:
    invoice = db.get(Invoice, invoice_id)
    if invoice is None or (invoice.deleted_at is not None and not include_deleted):
        raise NotFoundError("Factura no encontrada")
    return invoice


def get_invoices(
    db: Session,
    status: Optional[InvoiceStatus] = None,
    invoice_type: Optional[InvoiceType] = None,
    client_id: Optional[int] = None,
    process_id: Optional[int] = None,
    search: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
) -> List[Invoice]:
    query = db.query(Invoice).filter(Invoice.deleted_at.is_(None))
    if status:
        query = query.filter(Invoice.status == status)
    if invoice_type:
        query = query.filter(Invoice.invoice_type == invoice_type)
    if client_id:
        query = query.filter(Invoice.client_id == client_id)
    if process_id:
        query = query.filter(Invoice.process_id == process_id)
    if search:
        query = query.filter(or_(
            Invoice.number.ilike(f"%{search}%"),
            Invoice.client_name.ilike(f"%{search}%"),
            Invoice.supplier_name.ilike(f"%{search}%"),
            Invoice.agency_name.ilike(f"%{search}%")
        ))
    return query.order_by(Invoice.year.desc(), Invoice.sequence.desc()).offset(skip).limit(limit).all()


def get_history(db: Session, invoice_id: int) -> List[InvoiceHistory]:
    return list(get_invoice(db, invoice_id, include_deleted=True).history)


# -----------------------------
# Alta
# -----------------------------
def create_invoice(
    db: Session,
    invoice_in: InvoiceCreate,
    actor: Optional[str] = None,
    budget: Optional[Budget] = None,
) -> Invoice:
    client_id, client_name = resolve_client(db, invoice_in.client)

    issue = invoice_in.issue_date or date.today()
    due = invoice_in.due_date or issue + timedelta(days=get_int(db, "invoice_due_days"))
    if due < issue:
        raise ValidationError("La fecha de vencimiento no puede ser anterior a la de emisión")

    budget_id = budget.id if budget else invoice_in.budget_id
    if budget_id and budget is None:
        get_or_404(db, Budget, budget_id, "Presupuesto")

    # 1. Numeración FAC-<año en curso>-<secuencia>, independiente de la fecha de emisión
    year = date.today().year
    sequence = get_next_folio(db, "FAC", year)
    number = format_folio("FAC", year, sequence)

    invoice = Invoice(
        number=number,
        year=year,
        sequence=sequence,
        invoice_type=invoice_in.invoice_type,
        payer=invoice_in.payer,
        client_id=client_id,
        client_name=client_name,
        supplier_name=invoice_in.supplier_name,
        agency_name=invoice_in.agency_name,
        issue_date=issue,
        due_date=due,
        status=invoice_in.status,
        notes=invoice_in.notes,
        budget_id=budget_id,
        version=1,
    )
    _link_process(db, invoice, invoice_in.process_id)

    # 2. Líneas y totales
    invoice.items = build_lines(InvoiceItem, invoice_in.items)
    apply_totals(db, invoice, invoice_in.items)

    db.add(invoice)
    db.flush()
    if budget is not None:
        budget.invoice_id = invoice.id
        budget.status = BudgetStatus.APPROVED
    _record(invoice, HistoryAction.CREATE, f"Factura {number} creada", actor, after=snapshot(invoice))

    commit(db, "crear factura")
    db.refresh(invoice)
    logger.info("Factura %s creada: total %s", invoice.number, invoice.total_amount)
    return invoice


# -----------------------------
# Modificación
# -----------------------------
def update_invoice(db: Session, invoice_id: int, invoice_in: InvoiceUpdate, actor: Optional[str] = None) -> Invoice:
    invoice = get_invoice(db, invoice_id)
    check_version(invoice, invoice_in.version)

    data = invoice_in.model_dump(exclude_unset=True, exclude={"version", "client", "items"})
    if not invoice_in.model_fields_set - {"version"}:
        return invoice

    before = snapshot(invoice)

    if "client" in invoice_in.model_fields_set and invoice_in.client is not None:
        invoice.client_id, invoice.client_name = resolve_client(db, invoice_in.client)

    if "items" in invoice_in.model_fields_set and invoice_in.items:
        invoice.items = build_lines(InvoiceItem, invoice_in.items)
        apply_totals(db, invoice, invoice_in.items)

    if "process_id" in data:
        _link_process(db, invoice, data.pop("process_id"))

    for field, value in data.items():
        if value is None and field in ("invoice_type", "issue_date", "due_date"):
            continue
        setattr(invoice, field, value)

    if invoice.due_date < invoice.issue_date:
        raise ValidationError("La fecha de vencimiento no puede ser anterior a la de emisión")

    invoice.version += 1
    db.flush()
    changed = sorted(invoice_in.model_fields_set - {"version"})
    _record(
        invoice, HistoryAction.EDIT,
        f"Factura editada: {', '.join(changed)}", actor,
        before=before, after=snapshot(invoice)
    )

    commit(db, "editar factura")
    db.refresh(invoice)
    logger.info("Factura %s editada (%s)", invoice.number, ", ".join(changed))
    return invoice


def change_status(
    db: Session,
    invoice_id: int,
    new_status: InvoiceStatus,
    actor: Optional[str] = None,
    version: Optional[int] = None,
) -> Invoice:
    invoice = get_invoice(db, invoice_id)
    check_version(invoice, version)

    previous = InvoiceStatus(invoice.status)
    new_status = InvoiceStatus(new_status)
    if previous == new_status:
        return invoice

    invoice.status = new_status
    invoice.version += 1
    _record(
        invoice, HistoryAction.STATUS_CHANGE,
        f"Estado cambiado de {STATUS_LABELS[previous]} a {STATUS_LABELS[new_status]}", actor,
        before={"status": previous.value}, after={"status": new_status.value}
    )

    commit(db, "cambiar estado de factura")
    db.refresh(invoice)
    logger.info("Factura %s: %s -> %s", invoice.number, previous.value, new_status.value)
    return invoice


def refresh_overdue(db: Session, today: Optional[date] = None, actor: Optional[str] = None) -> List[Invoice]:
    """Las facturas enviadas con vencimiento pasado pasan a 'vencida'."""
    today = today or date.today()
    invoices = db.query(Invoice).filter(
        Invoice.deleted_at.is_(None),
        Invoice.status == InvoiceStatus.SENT,
        Invoice.due_date < today
    ).all()

    for invoice in invoices:
        invoice.status = InvoiceStatus.OVERDUE
        invoice.version += 1
        _record(
            invoice, HistoryAction.STATUS_CHANGE,
            f"Vencida automáticamente (vencimiento {invoice.due_date.strftime('%d/%m/%Y')})", actor,
            before={"status": InvoiceStatus.SENT.value}, after={"status": InvoiceStatus.OVERDUE.value}
        )

    if invoices:
        commit(db, "actualizar facturas vencidas")
        logger.info("%d factura(s) marcadas como vencidas", len(invoices))
    return invoices


# -----------------------------
# Baja con ventana para deshacer
# -----------------------------
def delete_invoice(db: Session, invoice_id: int, actor: Optional[str] = None) -> Invoice:
    purge_deleted_invoices(db)

    invoice = get_invoice(db, invoice_id)
    before = snapshot(invoice)
    invoice.deleted_at = datetime.now()
    invoice.version += 1
    _record(invoice, HistoryAction.DELETE, f"Factura {invoice.number} eliminada", actor, before=before)

    commit(db, "eliminar factura")
    db.refresh(invoice)
    logger.info("Factura %s eliminada", invoice.number)
    return invoice


def restore_invoice(db: Session, invoice_id: int, actor: Optional[str] = None) -> Invoice:
    invoice = get_invoice(db, invoice_id, include_deleted=True)
    if invoice.deleted_at is None:
        raise ConflictError("La factura no está eliminada")
    if datetime.now() - invoice.deleted_at > timedelta(seconds=settings.UNDO_WINDOW_SECONDS):
        raise ConflictError("El plazo para deshacer la eliminación expiró")

    invoice.deleted_at = None
    invoice.version += 1
    _record(invoice, HistoryAction.RESTORE, f"Factura {invoice.number} restaurada", actor, after=snapshot(invoice))

    commit(db, "restaurar factura")
    db.refresh(invoice)
    logger.info("Factura %s restaurada", invoice.number)
    return invoice


def purge_deleted_invoices(db: Session, now: Optional[datetime] = None) -> int:
    now = now or datetime.now()
    limit = now - timedelta(seconds=settings.UNDO_WINDOW_SECONDS)

    expired = db.query(Invoice).filter(
        Invoice.deleted_at.isnot(None),
        Invoice.deleted_at < limit
    ).all()
    if not expired:
        return 0

    ids = [i.id for i in expired]
    db.query(Budget).filter(Budget.invoice_id.in_(ids)).update(
        {Budget.invoice_id: None}, synchronize_session=False
    )
    for invoice in expired:
        db.delete(invoice)

    commit(db, "depurar facturas eliminadas")
    logger.info("Depuradas %d factura(s) eliminadas", len(ids))
    return len(ids)
