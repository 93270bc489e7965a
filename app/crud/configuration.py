# app/crud/configuration.py
"""Repositorio de la configuración editable por el operador."""
import logging
from decimal import Decimal
from typing import Any, Dict

from sqlalchemy.orm import Session

from app.config import settings
from app.models import AppSetting
from app.crud.base import commit

logger = logging.getLogger(__name__)

DEFAULTS: Dict[str, Any] = {
    "company_name": "Estudio de Comercio Exterior",
    "company_tax_id": None,
    "company_email": None,
    "currency": "ARS",
    "vat_percentage": "21",
    "invoice_due_days": 30,
    "budget_validity_days": 15,
    "notify_new_processes": True,
    "notify_documents": True,
}


def _to_json(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    return value


def get_values(db: Session) -> Dict[str, Any]:
    values = dict(DEFAULTS)
    for row in db.query(AppSetting).all():
        values[row.key] = row.value
    values["vat_percentage"] = Decimal(str(values["vat_percentage"]))
    return values


def update_values(db: Session, changes: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in changes.items():
        if key not in DEFAULTS:
            continue
        row = db.get(AppSetting, key)
        if row is None:
            db.add(AppSetting(key=key, value=_to_json(value)))
        else:
            row.value = _to_json(value)
    commit(db, "actualizar configuración")
    logger.info("Configuración actualizada: %s", ", ".join(sorted(changes)))
    return get_values(db)


def effective_vat_rate(db: Session) -> Decimal:
    """
    Alícuota usada en facturas y presupuestos.
    VAT_SOURCE=fixed -> VAT_RATE del entorno (el porcentaje de la pantalla
    de configuración solo se muestra); VAT_SOURCE=settings -> porcentaje guardado.
    """
    if settings.VAT_SOURCE == "settings":
        return get_values(db)["vat_percentage"] / Decimal("100")
    return Decimal(str(settings.VAT_RATE))


def get_int(db: Session, key: str) -> int:
    return int(get_values(db)[key])


def get_flag(db: Session, key: str) -> bool:
    return bool(get_values(db)[key])
