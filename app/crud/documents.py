# app/crud/documents.py
"""
Checklist de documentos de un proceso.
"""
import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Dict, List, Optional, Set, Tuple

from sqlalchemy.orm import Session

from app.config import settings
from app.models import (
    Process, ProcessDocument, DocumentStatus, CommentKind,
    NotificationKind, NotificationPriority,
)
from app.schemas.processes import DocumentCreate, DocumentUpdate
from app.exceptions import ConflictError, NotFoundError, ValidationError
from app.crud.base import commit
from app.crud.configuration import get_flag
from app.crud.notifications import notify
from app.crud.processes import get_process, log_comment, new_document, sync_progress
from app.services.storage import StorageBackend, validate_upload
from app.utils.checklist import checklist_stats

logger = logging.getLogger(__name__)

# Documentos con una carga en curso (por id)
_uploads_in_progress: Set[int] = set()

DOCUMENT_FILTERS = ("all", "required", "validated", "pending")


@contextmanager
def upload_slot(document_id: int):
    if document_id in _uploads_in_progress:
        raise ConflictError("Ya hay una carga en curso para este documento")
    _uploads_in_progress.add(document_id)
    try:
        yield
    finally:
        _uploads_in_progress.discard(document_id)


def get_document(db: Session, process_id: int, document_id: int) -> Tuple[Process, ProcessDocument]:
    process = get_process(db, process_id)
    document = db.get(ProcessDocument, document_id)
    if document is None or document.process_id != process.id:
        raise NotFoundError("Documento no encontrado")
    return process, document


def get_documents(db: Session, process_id: int, filter_by: str = "all") -> List[ProcessDocument]:
    process = get_process(db, process_id)
    documents = list(process.documents)

    if filter_by == "required":
        return [d for d in documents if d.required]
    if filter_by == "validated":
        return [d for d in documents if d.validated]
    if filter_by == "pending":
        return [d for d in documents if not d.validated]
    if filter_by != "all":
        raise ValidationError(f"Filtro inválido. Use: {', '.join(DOCUMENT_FILTERS)}")
    return documents


def get_stats(db: Session, process_id: int) -> Dict[str, int]:
    return checklist_stats(get_process(db, process_id).documents)


def add_document(db: Session, process_id: int, doc_in: DocumentCreate, actor: Optional[str] = None) -> ProcessDocument:
    process = get_process(db, process_id)

    document = new_document(doc_in)
    process.documents.append(document)
    log_comment(process, f"Documento agregado: {document.name}", CommentKind.DOCUMENT_ADDED, actor)
    sync_progress(process)
    process.version += 1

    commit(db, "agregar documento")
    db.refresh(document)
    logger.info("Documento '%s' agregado al proceso %s", document.name, process_id)
    return document


async def upload_file(
    db: Session,
    process_id: int,
    document_id: int,
    filename: str,
    content: bytes,
    storage: StorageBackend,
    content_type: Optional[str] = None,
    actor: Optional[str] = None,
) -> ProcessDocument:
    process, document = get_document(db, process_id, document_id)
    validate_upload(filename, len(content))

    with upload_slot(document.id):
        url = await storage.save(filename, content, content_type)

    size_kb = len(content) / 1024
    summary = f"Archivo cargado: {filename} ({size_kb:.1f} KB)"

    document.file_url = url
    document.uploaded_at = datetime.now()
    if DocumentStatus(document.status) == DocumentStatus.PENDING:
        document.status = DocumentStatus.UPLOADED
    document.notes = f"{document.notes}\n{summary}" if document.notes else summary

    log_comment(process, f"{summary} en '{document.name}'", CommentKind.DOCUMENT_ADDED, actor)
    process.version += 1

    if get_flag(db, "notify_documents"):
        notify(
            db, NotificationKind.DOCUMENT_UPLOADED, "documentos",
            title="Documento subido",
            message=f"{document.name} ({process.title})",
            priority=NotificationPriority.LOW,
            process_id=process.id,
            client_id=process.client_id,
        )

    commit(db, "cargar archivo")
    db.refresh(document)
    logger.info("Archivo %s cargado en documento %s", filename, document.id)
    return document


def toggle_validated(db: Session, process_id: int, document_id: int, actor: Optional[str] = None) -> ProcessDocument:
    process, document = get_document(db, process_id, document_id)

    validated = not document.validated
    if validated and settings.REQUIRE_FILE_FOR_VALIDATION and not document.file_url:
        raise ValidationError("No se puede validar un documento sin archivo cargado")

    document.validated = validated
    label = "validado" if validated else "no validado"
    log_comment(process, f"Documento '{document.name}' marcado como {label}", CommentKind.STATE_CHANGE, actor)
    sync_progress(process)
    process.version += 1

    commit(db, "validar documento")
    db.refresh(document)
    return document


def update_document(
    db: Session, process_id: int, document_id: int, doc_in: DocumentUpdate, actor: Optional[str] = None
) -> ProcessDocument:
    process, document = get_document(db, process_id, document_id)

    data = doc_in.model_dump(exclude_unset=True)
    if not data:
        return document

    if "status" in data and data["status"] is not None:
        previous = DocumentStatus(document.status)
        document.status = data["status"]
        log_comment(
            process,
            f"Documento '{document.name}': estado {previous.value} → {data['status'].value}",
            CommentKind.STATE_CHANGE,
            actor,
            previous_value=previous.value,
            new_value=data["status"].value,
        )
    if "notes" in data:
        document.notes = data["notes"]

    process.version += 1
    commit(db, "actualizar documento")
    db.refresh(document)
    return document


def remove_document(
    db: Session, process_id: int, document_id: int, confirm: bool = False, actor: Optional[str] = None
) -> Process:
    process, document = get_document(db, process_id, document_id)

    if document.required:
        raise ValidationError("Los documentos requeridos no se pueden eliminar")
    if not confirm:
        raise ValidationError("Confirme la eliminación del documento (confirm=true)")

    name = document.name
    process.documents.remove(document)
    log_comment(process, f"Documento eliminado: {name}", CommentKind.COMMENT, actor)
    sync_progress(process)
    process.version += 1

    commit(db, "eliminar documento")
    db.refresh(process)
    logger.info("Documento '%s' eliminado del proceso %s", name, process_id)
    return process
