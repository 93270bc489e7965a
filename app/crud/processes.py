# app/crud/processes.py
"""
Ciclo de vida de los procesos.

Las transiciones de estado no tienen restricciones: cualquier estado puede
pasar a cualquier otro (arrastre en el tablero o selector). Cada mutación
deja una entrada en la bitácora de comentarios del proceso.
"""
import logging
from collections import OrderedDict
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from app.config import settings
from app.models import (
    Process, ProcessDocument, ProcessComment, ProcessState, ProcessPriority,
    CommentKind, DocumentKind, DocumentStatus, Budget, Invoice, SupplierInvoice,
    NotificationKind, NotificationPriority, BOARD_ORDER, TERMINAL_STATES,
)
from app.schemas.processes import ProcessCreate, ProcessUpdate, DocumentCreate
from app.exceptions import ConflictError, NotFoundError, ValidationError
from app.crud.base import actor_name, commit, check_version, get_or_404, reject_nulls
from app.crud.clients import get_client
from app.crud.agencies import get_agency, get_agency_by_name
from app.crud.templates import get_template
from app.crud.pricing import find_price_for_template
from app.crud.configuration import get_flag
from app.crud.notifications import notify
from app.utils.checklist import completion_percentage
from app.utils.totals import to_money

logger = logging.getLogger(__name__)

STATE_LABELS = {
    ProcessState.PENDING: "Pendiente",
    ProcessState.DOCUMENT_COLLECTION: "Recopilación",
    ProcessState.SUBMITTED: "Enviado",
    ProcessState.UNDER_REVIEW: "En Revisión",
    ProcessState.APPROVED: "Aprobado",
    ProcessState.REJECTED: "Rechazado",
    ProcessState.ARCHIVED: "Archivado",
}

# Nombres de campo para la bitácora
FIELD_LABELS = {
    "title": "titulo",
    "process_type": "tipo",
    "description": "descripcion",
    "client_id": "cliente",
    "agency_id": "organismo",
    "priority": "prioridad",
    "progress": "progreso",
    "cost": "costos",
    "tags": "etiquetas",
    "notes": "notas",
    "responsible": "responsable",
    "needs_sample": "necesitaMuestra",
    "start_date": "fechaInicio",
    "due_date": "fechaVencimiento",
    "invoiced": "facturado",
}

PROCESS_REQUIRED_FIELDS = (
    "title", "client_id", "agency_id", "priority", "progress", "cost",
    "tags", "needs_sample", "start_date", "invoiced",
)


# -----------------------------
# Helpers
# -----------------------------
def log_comment(
    process: Process,
    content: str,
    kind: CommentKind,
    author: Optional[str] = None,
    previous_value: Optional[str] = None,
    new_value: Optional[str] = None,
) -> ProcessComment:
    comment = ProcessComment(
        author=actor_name(author),
        content=content,
        kind=kind,
        previous_value=previous_value,
        new_value=new_value,
        created_at=datetime.now(),
    )
    process.comments.append(comment)
    return comment


def validate_progress(progress: int) -> int:
    if progress is None or progress < 0 or progress > 100:
        raise ValidationError("El progreso debe estar entre 0 y 100")
    return int(progress)


def new_document(doc_in: DocumentCreate) -> ProcessDocument:
    kind = doc_in.kind or (DocumentKind.REQUIRED if doc_in.required else DocumentKind.OPTIONAL)
    return ProcessDocument(
        name=doc_in.name,
        required=doc_in.required,
        kind=kind,
        status=DocumentStatus.PENDING,
        validated=False,
        notes=doc_in.notes,
    )


def sync_progress(process: Process) -> None:
    """Con AUTO_PROGRESS_FROM_DOCUMENTS el progreso sigue al checklist."""
    if settings.AUTO_PROGRESS_FROM_DOCUMENTS:
        process.progress = document_completion(process)


def document_completion(process: Process) -> int:
    docs = list(process.documents)
    return completion_percentage(sum(1 for d in docs if d.validated), len(docs))


def _check_dates(start: date, due: Optional[date]) -> None:
    if due is not None and start is not None and due < start:
        raise ValidationError("La fecha de vencimiento no puede ser anterior a la de inicio")


# -----------------------------
# Lectura
# -----------------------------
def get_process(db: Session, process_id: int, include_deleted: bool = False) -> Process:
    process = db.get(Process, process_id)
    if process is None or (process.deleted_at is not None and not include_deleted):
        raise NotFoundError("Proceso no encontrado")
    return process


def get_processes(
    db: Session,
    search: Optional[str] = None,
    state: Optional[ProcessState] = None,
    client_id: Optional[int] = None,
    agency_id: Optional[int] = None,
    priority: Optional[ProcessPriority] = None,
    responsible: Optional[str] = None,
    tag: Optional[str] = None,
    start_from: Optional[date] = None,
    start_to: Optional[date] = None,
    skip: int = 0,
    limit: int = 500,
) -> List[Process]:
    query = db.query(Process).filter(Process.deleted_at.is_(None))

    if state:
        query = query.filter(Process.state == state)
    if client_id:
        query = query.filter(Process.client_id == client_id)
    if agency_id:
        query = query.filter(Process.agency_id == agency_id)
    if priority:
        query = query.filter(Process.priority == priority)
    if responsible:
        query = query.filter(Process.responsible.ilike(f"%{responsible}%"))
    if start_from:
        query = query.filter(Process.start_date >= start_from)
    if start_to:
        query = query.filter(Process.start_date <= start_to)

    processes = query.order_by(Process.id).all()

    # Etiquetas y búsqueda libre sobre la lista JSON se filtran en memoria
    if tag:
        processes = [p for p in processes if tag in (p.tags or [])]
    if search:
        term = search.lower()
        processes = [
            p for p in processes
            if term in (p.title or "").lower()
            or term in (p.description or "").lower()
            or any(term in t.lower() for t in (p.tags or []))
        ]

    return processes[skip:skip + limit]


# -----------------------------
# Alta
# -----------------------------
def create_process(db: Session, process_in: ProcessCreate, actor: Optional[str] = None) -> Process:
    client = get_client(db, process_in.client_id)

    template = get_template(db, process_in.template_id) if process_in.template_id else None

    # 1. Organismo: explícito o el de la plantilla
    if process_in.agency_id:
        agency = get_agency(db, process_in.agency_id)
    elif template:
        agency = get_agency_by_name(db, template.agency_name)
        if agency is None:
            raise ValidationError(f"El organismo '{template.agency_name}' de la plantilla no está registrado")
    else:
        raise ValidationError("Debe indicar el organismo o una plantilla")

    title = process_in.title or (template.name if template else None)
    if not title:
        raise ValidationError("El título es obligatorio")

    if process_in.budget_id:
        get_or_404(db, Budget, process_in.budget_id, "Presupuesto")

    # 2. Fechas y costo (la plantilla completa lo que falte)
    start = process_in.start_date or date.today()
    due = process_in.due_date
    if due is None and template:
        due = start + timedelta(days=template.estimated_days)
    _check_dates(start, due)

    cost = process_in.cost
    if cost is None:
        cost = template.cost if template and template.cost is not None else Decimal("0")

    process = Process(
        title=title,
        process_type=process_in.process_type,
        description=process_in.description or (template.description if template else None),
        client_id=client.id,
        agency_id=agency.id,
        template_id=template.id if template else None,
        budget_id=process_in.budget_id,
        state=ProcessState.PENDING,
        priority=process_in.priority,
        progress=validate_progress(process_in.progress),
        cost=to_money(cost),
        tags=list(process_in.tags),
        notes=process_in.notes,
        responsible=process_in.responsible,
        needs_sample=process_in.needs_sample,
        start_date=start,
        due_date=due,
        invoiced=False,
        version=1,
    )

    # 3. Checklist: requeridos de la plantilla + adicionales
    if template:
        for doc_name in template.required_documents or []:
            process.documents.append(new_document(DocumentCreate(name=doc_name, required=True)))
    for doc_in in process_in.documents:
        process.documents.append(new_document(doc_in))

    log_comment(process, "Proceso creado", CommentKind.COMMENT, actor)
    sync_progress(process)

    db.add(process)
    db.flush()

    if get_flag(db, "notify_new_processes"):
        notify(
            db, NotificationKind.NEW_PROCESS, "procesos",
            title="Nuevo proceso",
            message=f"{process.title} para {client.name} ante {agency.name}",
            priority=NotificationPriority.MEDIUM,
            process_id=process.id,
            client_id=client.id,
        )
    if template and find_price_for_template(db, template.id) is None:
        notify(
            db, NotificationKind.MISSING_PRICE, "procesos",
            title="Precio faltante",
            message=f"No hay un precio de servicio activo para la plantilla '{template.name}'",
            priority=NotificationPriority.HIGH,
            process_id=process.id,
        )

    commit(db, "crear proceso")
    db.refresh(process)
    logger.info("Proceso %s creado (%s) con %d documento(s)", process.id, process.title, len(process.documents))
    return process


# -----------------------------
# Modificación
# -----------------------------
def update_process(db: Session, process_id: int, process_in: ProcessUpdate, actor: Optional[str] = None) -> Process:
    process = get_process(db, process_id)
    check_version(process, process_in.version)

    data = process_in.model_dump(exclude_unset=True, exclude={"version"})
    if not data:
        return process

    reject_nulls(data, PROCESS_REQUIRED_FIELDS)

    if "client_id" in data:
        get_client(db, data["client_id"])
    if "agency_id" in data:
        get_agency(db, data["agency_id"])
    if "progress" in data:
        data["progress"] = validate_progress(data["progress"])
    if "cost" in data:
        data["cost"] = to_money(data["cost"])

    for field, value in data.items():
        setattr(process, field, value)
    _check_dates(process.start_date, process.due_date)

    changed = ", ".join(FIELD_LABELS.get(f, f) for f in data)
    log_comment(process, f"Proceso actualizado: {changed}", CommentKind.STATE_CHANGE, actor)
    process.version += 1

    commit(db, "actualizar proceso")
    db.refresh(process)
    logger.info("Proceso %s actualizado: %s", process_id, changed)
    return process


def change_state(
    db: Session,
    process_id: int,
    new_state: ProcessState,
    actor: Optional[str] = None,
    version: Optional[int] = None,
) -> Process:
    process = get_process(db, process_id)
    check_version(process, version)

    previous = ProcessState(process.state)
    new_state = ProcessState(new_state)
    if previous == new_state:
        return process

    process.state = new_state
    log_comment(
        process,
        f"Estado cambiado de {STATE_LABELS[previous]} a {STATE_LABELS[new_state]}",
        CommentKind.STATE_CHANGE,
        actor,
        previous_value=previous.value,
        new_value=new_state.value,
    )
    process.version += 1

    notify(
        db, NotificationKind.PROCESS_MODIFIED, "procesos",
        title="Proceso modificado",
        message=f"{process.title}: {STATE_LABELS[previous]} → {STATE_LABELS[new_state]}",
        priority=NotificationPriority.LOW,
        process_id=process.id,
        client_id=process.client_id,
    )

    commit(db, "cambiar estado del proceso")
    db.refresh(process)
    logger.info("Proceso %s: %s -> %s", process_id, previous.value, new_state.value)
    return process


def move_process(db: Session, process_id: int, step: int, actor: Optional[str] = None) -> Process:
    """Avanza (+1) o retrocede (-1) una columna en el orden del tablero."""
    process = get_process(db, process_id)
    index = BOARD_ORDER.index(ProcessState(process.state)) + step
    if index < 0 or index >= len(BOARD_ORDER):
        raise ValidationError("El proceso no puede moverse más en esa dirección")
    return change_state(db, process_id, BOARD_ORDER[index], actor)


def set_progress(db: Session, process_id: int, progress: int, actor: Optional[str] = None) -> Process:
    process = get_process(db, process_id)
    process.progress = validate_progress(progress)
    log_comment(process, f"Proceso actualizado: progreso ({progress}%)", CommentKind.STATE_CHANGE, actor)
    process.version += 1
    commit(db, "actualizar progreso")
    db.refresh(process)
    return process


def recalculate_progress(db: Session, process_id: int, actor: Optional[str] = None) -> Process:
    """Iguala el progreso al porcentaje de documentos validados."""
    process = get_process(db, process_id)
    return set_progress(db, process_id, document_completion(process), actor)


def add_comment(db: Session, process_id: int, content: str, author: Optional[str] = None) -> ProcessComment:
    process = get_process(db, process_id)
    comment = log_comment(process, content, CommentKind.COMMENT, author)
    commit(db, "agregar comentario")
    db.refresh(comment)
    return comment


# -----------------------------
# Baja con ventana para deshacer
# -----------------------------
def delete_process(db: Session, process_id: int, actor: Optional[str] = None) -> Process:
    purge_deleted_processes(db)

    process = get_process(db, process_id)
    process.deleted_at = datetime.now()
    process.version += 1
    commit(db, "eliminar proceso")
    db.refresh(process)
    logger.info("Proceso %s eliminado por %s (restaurable %ss)", process_id, actor_name(actor), settings.UNDO_WINDOW_SECONDS)
    return process


def restore_process(db: Session, process_id: int, actor: Optional[str] = None) -> Process:
    process = get_process(db, process_id, include_deleted=True)
    if process.deleted_at is None:
        raise ConflictError("El proceso no está eliminado")

    if datetime.now() - process.deleted_at > timedelta(seconds=settings.UNDO_WINDOW_SECONDS):
        raise ConflictError("El plazo para deshacer la eliminación expiró")

    process.deleted_at = None
    log_comment(process, "Eliminación deshecha", CommentKind.COMMENT, actor)
    process.version += 1
    commit(db, "restaurar proceso")
    db.refresh(process)
    logger.info("Proceso %s restaurado", process_id)
    return process


def purge_deleted_processes(db: Session, now: Optional[datetime] = None) -> int:
    """Borra definitivamente (con documentos y comentarios) las bajas vencidas."""
    now = now or datetime.now()
    limit = now - timedelta(seconds=settings.UNDO_WINDOW_SECONDS)

    expired = db.query(Process).filter(
        Process.deleted_at.isnot(None),
        Process.deleted_at < limit
    ).all()
    if not expired:
        return 0

    ids = [p.id for p in expired]
    db.query(Invoice).filter(Invoice.process_id.in_(ids)).update(
        {Invoice.process_id: None}, synchronize_session=False
    )
    db.query(SupplierInvoice).filter(SupplierInvoice.process_id.in_(ids)).update(
        {SupplierInvoice.process_id: None}, synchronize_session=False
    )
    budget_ids = {p.budget_id for p in expired if p.budget_id}
    for budget in db.query(Budget).filter(Budget.id.in_(budget_ids)).all():
        budget.process_ids = [pid for pid in (budget.process_ids or []) if pid not in ids]
    for process in expired:
        db.delete(process)

    commit(db, "depurar procesos eliminados")
    logger.info("Depurados %d proceso(s) eliminados: %s", len(ids), ids)
    return len(ids)


# -----------------------------
# Proyecciones (tablero, cliente, vencimientos, calendario)
# -----------------------------
def board(db: Session, **filters) -> "OrderedDict[ProcessState, List[Process]]":
    columns: "OrderedDict[ProcessState, List[Process]]" = OrderedDict((s, []) for s in BOARD_ORDER)
    for process in get_processes(db, **filters):
        columns[ProcessState(process.state)].append(process)
    return columns


def group_by_client(db: Session) -> List[Tuple[int, str, List[Process]]]:
    groups: Dict[int, Tuple[str, List[Process]]] = {}
    for process in get_processes(db):
        name = process.client.name if process.client else ""
        groups.setdefault(process.client_id, (name, []))[1].append(process)
    return sorted(
        ((cid, name, procs) for cid, (name, procs) in groups.items()),
        key=lambda g: g[1].lower(),
    )


def due_processes(db: Session, days: int = 7, today: Optional[date] = None) -> List[Tuple[Process, int]]:
    """Procesos abiertos que vencen en los próximos 'days' días (o ya vencidos)."""
    today = today or date.today()
    horizon = today + timedelta(days=days)

    result = []
    for process in get_processes(db):
        if process.due_date is None or ProcessState(process.state) in TERMINAL_STATES:
            continue
        if process.due_date <= horizon:
            result.append((process, (process.due_date - today).days))
    return sorted(result, key=lambda item: item[1])


def calendar(db: Session, year: int, month: int) -> "OrderedDict[date, List[Process]]":
    if month < 1 or month > 12:
        raise ValidationError("Mes inválido")

    first = date(year, month, 1)
    last = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)

    days: "OrderedDict[date, List[Process]]" = OrderedDict()
    processes = db.query(Process).filter(
        Process.deleted_at.is_(None),
        Process.due_date >= first,
        Process.due_date < last
    ).order_by(Process.due_date, Process.id).all()
    for process in processes:
        days.setdefault(process.due_date, []).append(process)
    return days
