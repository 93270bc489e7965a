import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from app.models import ProcedureTemplate
from app.schemas.templates import TemplateCreate, TemplateUpdate
from app.exceptions import ConflictError
from app.crud.base import commit, get_or_404, reject_nulls

logger = logging.getLogger(__name__)


def get_template(db: Session, template_id: str) -> ProcedureTemplate:
    return get_or_404(db, ProcedureTemplate, template_id, "Plantilla")

def get_templates(db: Session, agency_name: Optional[str] = None) -> List[ProcedureTemplate]:
    query = db.query(ProcedureTemplate)
    if agency_name:
        query = query.filter(ProcedureTemplate.agency_name == agency_name)
    return query.order_by(ProcedureTemplate.agency_name, ProcedureTemplate.name).all()

def create_template(db: Session, template_in: TemplateCreate) -> ProcedureTemplate:
    if db.get(ProcedureTemplate, template_in.id):
        raise ConflictError(f"La plantilla '{template_in.id}' ya existe.")

    template = ProcedureTemplate(**template_in.model_dump(), editable=True)
    db.add(template)
    commit(db, "crear plantilla")
    db.refresh(template)
    logger.info("Plantilla %s creada", template.id)
    return template

def update_template(db: Session, template_id: str, template_in: TemplateUpdate) -> ProcedureTemplate:
    template = get_template(db, template_id)
    if not template.editable:
        raise ConflictError("La plantilla no es editable.")

    data = template_in.model_dump(exclude_unset=True)
    reject_nulls(data, ("name", "agency_name", "estimated_days", "required_documents"))

    for field, value in data.items():
        setattr(template, field, value)
    commit(db, "actualizar plantilla")
    db.refresh(template)
    return template

def delete_template(db: Session, template_id: str) -> None:
    template = get_template(db, template_id)
    if not template.editable:
        raise ConflictError("La plantilla no es editable.")
    db.delete(template)
    commit(db, "eliminar plantilla")
    logger.info("Plantilla %s eliminada", template_id)
