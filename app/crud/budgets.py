# app/crud/budgets.py
import logging
from datetime import date, timedelta
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.models import (
    Budget, BudgetItem, BudgetStatus, Invoice, Process,
    NotificationKind, NotificationPriority,
)
from app.schemas.budgets import BudgetCreate, BudgetUpdate
from app.schemas.invoices import (
    InvoiceCreate, ItemCreate, KnownClientRef, DenormalizedClientRef,
)
from app.exceptions import ConflictError, ValidationError
from app.crud.base import commit, get_or_404
from app.crud.configuration import get_int
from app.crud.invoices import resolve_client, build_lines, apply_totals, create_invoice
from app.crud.notifications import notify
from app.crud.processes import get_process
from app.crud.templates import get_template
from app.utils.folios import get_next_folio, format_folio

logger = logging.getLogger(__name__)

# Estados desde los que no se puede facturar
CLOSED_STATUSES = {BudgetStatus.REJECTED, BudgetStatus.EXPIRED}


def get_budget(db: Session, budget_id: int) -> Budget:
    return get_or_404(db, Budget, budget_id, "Presupuesto")


def get_budgets(
    db: Session,
    status: Optional[BudgetStatus] = None,
    client_id: Optional[int] = None,
    search: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
) -> List[Budget]:
    query = db.query(Budget)
    if status:
        query = query.filter(Budget.status == status)
    if client_id:
        query = query.filter(Budget.client_id == client_id)
    if search:
        query = query.filter(or_(
            Budget.number.ilike(f"%{search}%"),
            Budget.client_name.ilike(f"%{search}%"),
            Budget.operation_type.ilike(f"%{search}%")
        ))
    return query.order_by(Budget.year.desc(), Budget.sequence.desc()).offset(skip).limit(limit).all()


def create_budget(db: Session, budget_in: BudgetCreate) -> Budget:
    """Encabezado y líneas se guardan en una única transacción."""
    client_id, client_name = resolve_client(db, budget_in.client)

    issue = budget_in.issue_date or date.today()
    expiry = budget_in.expiry_date or issue + timedelta(days=get_int(db, "budget_validity_days"))
    if expiry < issue:
        raise ValidationError("La fecha de validez no puede ser anterior a la de emisión")

    for template_id in budget_in.template_ids:
        get_template(db, template_id)

    year = date.today().year
    sequence = get_next_folio(db, "PRE", year)
    budget = Budget(
        number=format_folio("PRE", year, sequence),
        year=year,
        sequence=sequence,
        client_id=client_id,
        client_name=client_name,
        operation_type=budget_in.operation_type,
        description=budget_in.description,
        status=BudgetStatus.DRAFT,
        issue_date=issue,
        expiry_date=expiry,
        notes=budget_in.notes,
        process_ids=[],
        template_ids=list(budget_in.template_ids),
    )
    budget.items = build_lines(BudgetItem, budget_in.items)
    apply_totals(db, budget, budget_in.items)

    db.add(budget)
    db.flush()

    notify(
        db, NotificationKind.NEW_BUDGET, "presupuestos",
        title="Nuevo presupuesto",
        message=f"{budget.number} para {client_name}: ${budget.total_amount}",
        priority=NotificationPriority.MEDIUM,
        client_id=client_id,
        budget_id=budget.id,
    )

    commit(db, "crear presupuesto")
    db.refresh(budget)
    logger.info("Presupuesto %s creado: total %s", budget.number, budget.total_amount)
    return budget


def update_budget(db: Session, budget_id: int, budget_in: BudgetUpdate) -> Budget:
    budget = get_budget(db, budget_id)
    if budget.invoice_id:
        raise ConflictError("El presupuesto ya fue facturado")

    data = budget_in.model_dump(exclude_unset=True, exclude={"items"})

    if budget_in.items:
        budget.items = build_lines(BudgetItem, budget_in.items)
        apply_totals(db, budget, budget_in.items)

    if data.get("template_ids") is not None:
        for template_id in data["template_ids"]:
            get_template(db, template_id)
        data["template_ids"] = list(data["template_ids"])

    for field, value in data.items():
        if value is None and field in ("operation_type", "expiry_date", "template_ids"):
            continue
        setattr(budget, field, value)

    if budget.expiry_date < budget.issue_date:
        raise ValidationError("La fecha de validez no puede ser anterior a la de emisión")

    commit(db, "actualizar presupuesto")
    db.refresh(budget)
    return budget


def change_budget_status(db: Session, budget_id: int, status: BudgetStatus) -> Budget:
    budget = get_budget(db, budget_id)
    if budget.invoice_id and status != BudgetStatus.APPROVED:
        raise ConflictError("El presupuesto ya fue facturado")

    budget.status = status
    commit(db, "cambiar estado de presupuesto")
    db.refresh(budget)
    logger.info("Presupuesto %s -> %s", budget.number, BudgetStatus(status).value)
    return budget


def delete_budget(db: Session, budget_id: int) -> None:
    budget = get_budget(db, budget_id)
    if budget.invoice_id:
        raise ConflictError("No se puede eliminar un presupuesto facturado")

    db.query(Process).filter(Process.budget_id == budget.id).update(
        {Process.budget_id: None}, synchronize_session=False
    )
    db.query(Invoice).filter(Invoice.budget_id == budget.id).update(
        {Invoice.budget_id: None}, synchronize_session=False
    )
    number = budget.number
    db.delete(budget)
    commit(db, "eliminar presupuesto")
    logger.info("Presupuesto %s eliminado", number)


def link_processes(db: Session, budget_id: int, process_ids: List[int]) -> Budget:
    budget = get_budget(db, budget_id)

    for process_id in process_ids:
        get_process(db, process_id).budget_id = budget.id

    # Reasignar la lista para que SQLAlchemy detecte el cambio en la columna JSON
    budget.process_ids = sorted(set(budget.process_ids or []) | set(process_ids))

    commit(db, "vincular procesos al presupuesto")
    db.refresh(budget)
    return budget


def convert_to_invoice(db: Session, budget_id: int, actor: Optional[str] = None) -> Invoice:
    """Genera la factura con las mismas líneas y marca el presupuesto como aprobado."""
    budget = get_budget(db, budget_id)
    if budget.invoice_id:
        raise ConflictError("El presupuesto ya fue convertido en factura")
    if BudgetStatus(budget.status) in CLOSED_STATUSES:
        raise ValidationError("No se puede facturar un presupuesto rechazado o vencido")

    if budget.client_id:
        client = KnownClientRef(id=budget.client_id)
    else:
        client = DenormalizedClientRef(name=budget.client_name)

    # Solo procesos vigentes: los eliminados pueden seguir en la lista
    process_ids = [
        pid for (pid,) in db.query(Process.id).filter(
            Process.id.in_(budget.process_ids or []),
            Process.deleted_at.is_(None)
        ).order_by(Process.id)
    ]
    invoice_in = InvoiceCreate(
        client=client,
        items=[
            ItemCreate(description=i.description, quantity=i.quantity, unit_price=i.unit_price)
            for i in budget.items
        ],
        notes=f"Generada desde el presupuesto {budget.number}",
        process_id=process_ids[0] if len(process_ids) == 1 else None,
    )
    invoice = create_invoice(db, invoice_in, actor=actor, budget=budget)
    logger.info("Presupuesto %s convertido en factura %s", budget.number, invoice.number)
    return invoice


def expire_budgets(db: Session, today: Optional[date] = None) -> List[Budget]:
    today = today or date.today()
    budgets = db.query(Budget).filter(
        Budget.status.in_([BudgetStatus.DRAFT, BudgetStatus.SENT]),
        Budget.expiry_date < today
    ).all()

    for budget in budgets:
        budget.status = BudgetStatus.EXPIRED

    if budgets:
        commit(db, "vencer presupuestos")
        logger.info("%d presupuesto(s) vencidos", len(budgets))
    return budgets
