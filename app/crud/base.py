# app/crud/base.py
"""
Helpers compartidos por las funciones de acceso a datos.

Las funciones de app.crud agregan objetos a la sesión y confirman con
commit(); ante un error de SQLAlchemy se hace rollback de toda la
transacción (encabezado + líneas) y se levanta PersistenceError.
"""
import logging
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Type

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import ConflictError, NotFoundError, PersistenceError, ValidationError

logger = logging.getLogger(__name__)


def commit(db: Session, action: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Error de persistencia (%s): %s", action, e)
        raise PersistenceError(f"No se pudo guardar: {action}") from e


def get_or_404(db: Session, model: Type, obj_id: Any, label: str):
    obj = db.get(model, obj_id)
    if obj is None:
        raise NotFoundError(f"{label} no encontrado")
    return obj


def check_version(obj: Any, expected: Optional[int]) -> None:
    """Concurrencia optimista: el cliente envía la versión que leyó."""
    if expected is not None and expected != obj.version:
        raise ConflictError(
            f"El registro fue modificado por otro usuario (versión {obj.version}, recibida {expected})"
        )


def reject_nulls(data: Dict[str, Any], required: Iterable[str]) -> None:
    """Una actualización parcial no puede vaciar campos obligatorios."""
    missing = [field for field in required if field in data and data[field] is None]
    if missing:
        raise ValidationError(f"Campos obligatorios sin valor: {', '.join(missing)}")


def _json_safe(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    return value


def serialize_model(instance: Any) -> Dict[str, Any]:
    """
    Snapshot de las columnas escalares de un modelo (sin relaciones),
    apto para guardarse como JSON en el historial.
    """
    return {
        column.name: _json_safe(getattr(instance, column.name))
        for column in instance.__table__.columns
    }


def actor_name(actor: Optional[str]) -> str:
    """Sin autenticación, las acciones se atribuyen al actor configurado."""
    return actor or settings.DEFAULT_ACTOR
