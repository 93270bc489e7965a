# app/crud/ai_validation.py
"""
Envío de documentos al proveedor de validación IA.

Cada envío (o reintento) crea una fila nueva en validaciones_ia que pasa
por pendiente -> procesando -> completado | error. El resultado es
informativo: nunca modifica el campo 'validated' del documento.
"""
import asyncio
import logging
import time
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from app.config import settings
from app.models import (
    AIValidation, ValidationStatus, ProcessDocument,
    NotificationKind, NotificationPriority,
)
from app.exceptions import NotFoundError
from app.crud.base import commit, get_or_404
from app.crud.notifications import notify
from app.services.ai_validation import ValidationProvider

logger = logging.getLogger(__name__)


def _get_document(db: Session, document_id: int) -> ProcessDocument:
    document = db.get(ProcessDocument, document_id)
    if document is None or document.process.deleted_at is not None:
        raise NotFoundError("Documento no encontrado")
    return document


def _clamp(confidence) -> float:
    return max(0.0, min(100.0, float(confidence or 0)))


async def submit_validation(db: Session, document_id: int, provider: ValidationProvider) -> AIValidation:
    document = _get_document(db, document_id)

    result = AIValidation(
        document_id=document.id,
        status=ValidationStatus.PENDING,
        confidence=0.0,
        submitted_at=datetime.now(),
    )
    db.add(result)
    commit(db, "registrar validación IA")

    result.status = ValidationStatus.PROCESSING
    commit(db, "iniciar validación IA")

    started = time.perf_counter()
    try:
        data = await asyncio.wait_for(
            provider.analyze(document),
            timeout=settings.AI_VALIDATION_TIMEOUT_SECONDS
        )
    except asyncio.TimeoutError:
        logger.warning("Validación IA del documento %s: tiempo agotado", document.id)
        result.status = ValidationStatus.ERROR
        result.error_message = "El servicio de validación no respondió a tiempo"
    except Exception as e:
        logger.exception("Validación IA del documento %s falló", document.id)
        result.status = ValidationStatus.ERROR
        result.error_message = str(e) or e.__class__.__name__
    else:
        result.status = ValidationStatus.COMPLETED
        result.confidence = _clamp(data.get("confidence"))
        result.extracted_text = data.get("extracted_text")
        result.extracted_fields = dict(data.get("extracted_fields") or {})
        result.detected_errors = list(data.get("detected_errors") or [])
        result.suggestions = list(data.get("suggestions") or [])

    result.processing_ms = int((time.perf_counter() - started) * 1000)
    result.processed_at = datetime.now()

    if result.status == ValidationStatus.COMPLETED:
        message = f"{document.name}: confianza {result.confidence:.0f}%"
        priority = NotificationPriority.MEDIUM if result.detected_errors else NotificationPriority.LOW
    else:
        message = f"{document.name}: {result.error_message}"
        priority = NotificationPriority.HIGH

    notify(
        db, NotificationKind.AI_VALIDATION, "validacion-ia",
        title="Validación IA finalizada",
        message=message,
        priority=priority,
        process_id=document.process_id,
    )

    commit(db, "guardar resultado de validación IA")
    db.refresh(result)
    logger.info("Validación IA %s del documento %s: %s", result.id, document.id, result.status.value)
    return result


def get_validation(db: Session, validation_id: int) -> AIValidation:
    return get_or_404(db, AIValidation, validation_id, "Validación")


def get_validations(
    db: Session,
    document_id: Optional[int] = None,
    status: Optional[ValidationStatus] = None,
    skip: int = 0,
    limit: int = 100,
) -> List[AIValidation]:
    query = db.query(AIValidation)
    if document_id:
        query = query.filter(AIValidation.document_id == document_id)
    if status:
        query = query.filter(AIValidation.status == status)
    return query.order_by(AIValidation.id.desc()).offset(skip).limit(limit).all()


def latest_validation(db: Session, document_id: int) -> AIValidation:
    _get_document(db, document_id)
    result = db.query(AIValidation).filter(
        AIValidation.document_id == document_id
    ).order_by(AIValidation.id.desc()).first()
    if result is None:
        raise NotFoundError("El documento no tiene validaciones")
    return result
