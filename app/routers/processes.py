# app/routers/processes.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date

from app.config import settings
from app.database import get_db
from app.dependencies import get_actor
from app.crud import processes as crud
from app.models import Process, ProcessState, ProcessPriority
from app.schemas.processes import (
    ProcessCreate, ProcessUpdate, ProcessRead, StateChange, ProgressUpdate,
    CommentCreate, CommentRead, ChecklistStats, BoardColumn, ClientGroup, DueProcess,
)
from app.schemas.reports import CalendarDay, CalendarEntry
from app.utils.checklist import checklist_stats

router = APIRouter()


# -----------------------------
# Helpers
# -----------------------------
def to_process_read(p: Process) -> ProcessRead:
    """
    Convierte ORM Process -> ProcessRead y agrega:
    - client_name / agency_name
    - checklist (estadísticas de documentos)
    """
    p_read = ProcessRead.model_validate(p)
    p_read.client_name = p.client.name if p.client else None
    p_read.agency_name = p.agency.name if p.agency else None
    p_read.checklist = ChecklistStats(**checklist_stats(p.documents))
    return p_read


# -----------------------------
# Proyecciones (antes que /{process_id})
# -----------------------------
@router.get("/board", response_model=List[BoardColumn])
def get_board(
    search: Optional[str] = None,
    client_id: Optional[int] = None,
    agency_id: Optional[int] = None,
    priority: Optional[ProcessPriority] = None,
    db: Session = Depends(get_db),
):
    """Tablero: siempre las 7 columnas, aunque estén vacías."""
    columns = crud.board(db, search=search, client_id=client_id, agency_id=agency_id, priority=priority)
    return [
        BoardColumn(state=state, count=len(items), processes=[to_process_read(p) for p in items])
        for state, items in columns.items()
    ]

@router.get("/by-client", response_model=List[ClientGroup])
def get_by_client(db: Session = Depends(get_db)):
    return [
        ClientGroup(
            client_id=client_id,
            client_name=name,
            count=len(items),
            processes=[to_process_read(p) for p in items],
        )
        for client_id, name, items in crud.group_by_client(db)
    ]

@router.get("/due", response_model=List[DueProcess])
def get_due(days: int = 7, db: Session = Depends(get_db)):
    """Procesos abiertos que vencen en los próximos 'days' días o ya vencidos."""
    return [
        DueProcess(process=to_process_read(p), days_until_due=left, overdue=left < 0)
        for p, left in crud.due_processes(db, days=days)
    ]

@router.get("/calendar", response_model=List[CalendarDay])
def get_calendar(year: int, month: int, db: Session = Depends(get_db)):
    return [
        CalendarDay(
            date=day,
            processes=[
                CalendarEntry(
                    id=p.id,
                    title=p.title,
                    client_name=p.client.name if p.client else "",
                    state=p.state,
                    priority=p.priority,
                )
                for p in items
            ],
        )
        for day, items in crud.calendar(db, year, month).items()
    ]

@router.post("/purge")
def purge_deleted(db: Session = Depends(get_db)):
    """Elimina definitivamente las bajas cuyo plazo para deshacer expiró."""
    return {"purged": crud.purge_deleted_processes(db)}


# -----------------------------
# CRUD
# -----------------------------
@router.get("/", response_model=List[ProcessRead])
def get_processes(
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
    db: Session = Depends(get_db),
):
    processes = crud.get_processes(
        db, search=search, state=state, client_id=client_id, agency_id=agency_id,
        priority=priority, responsible=responsible, tag=tag,
        start_from=start_from, start_to=start_to, skip=skip, limit=limit,
    )
    return [to_process_read(p) for p in processes]

@router.get("/{process_id}", response_model=ProcessRead)
def get_process(process_id: int, db: Session = Depends(get_db)):
    return to_process_read(crud.get_process(db, process_id))

@router.post("/", response_model=ProcessRead, status_code=201)
def create_process(
    process_in: ProcessCreate,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    return to_process_read(crud.create_process(db, process_in, actor))

@router.put("/{process_id}", response_model=ProcessRead)
def update_process(
    process_id: int,
    process_in: ProcessUpdate,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    return to_process_read(crud.update_process(db, process_id, process_in, actor))

@router.delete("/{process_id}")
def delete_process(process_id: int, db: Session = Depends(get_db), actor: str = Depends(get_actor)):
    process = crud.delete_process(db, process_id, actor)
    return {
        "status": "success",
        "process_id": process.id,
        "deleted_at": process.deleted_at,
        "undo_seconds": settings.UNDO_WINDOW_SECONDS,
    }

@router.post("/{process_id}/restore", response_model=ProcessRead)
def restore_process(process_id: int, db: Session = Depends(get_db), actor: str = Depends(get_actor)):
    return to_process_read(crud.restore_process(db, process_id, actor))


# -----------------------------
# Estado y progreso
# -----------------------------
@router.patch("/{process_id}/state", response_model=ProcessRead)
def change_state(
    process_id: int,
    change: StateChange,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    return to_process_read(crud.change_state(db, process_id, change.state, actor, change.version))

@router.post("/{process_id}/advance", response_model=ProcessRead)
def advance(process_id: int, db: Session = Depends(get_db), actor: str = Depends(get_actor)):
    return to_process_read(crud.move_process(db, process_id, 1, actor))

@router.post("/{process_id}/retreat", response_model=ProcessRead)
def retreat(process_id: int, db: Session = Depends(get_db), actor: str = Depends(get_actor)):
    return to_process_read(crud.move_process(db, process_id, -1, actor))

@router.patch("/{process_id}/progress", response_model=ProcessRead)
def set_progress(
    process_id: int,
    update: ProgressUpdate,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    return to_process_read(crud.set_progress(db, process_id, update.progress, actor))

@router.post("/{process_id}/progress/recalculate", response_model=ProcessRead)
def recalculate_progress(process_id: int, db: Session = Depends(get_db), actor: str = Depends(get_actor)):
    return to_process_read(crud.recalculate_progress(db, process_id, actor))


# -----------------------------
# Comentarios
# -----------------------------
@router.get("/{process_id}/comments", response_model=List[CommentRead])
def get_comments(process_id: int, db: Session = Depends(get_db)):
    return crud.get_process(db, process_id).comments

@router.post("/{process_id}/comments", response_model=CommentRead, status_code=201)
def add_comment(
    process_id: int,
    comment_in: CommentCreate,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    return crud.add_comment(db, process_id, comment_in.content, comment_in.author or actor)
