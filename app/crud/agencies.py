import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from app.models import Agency, Process
from app.schemas.agencies import AgencyCreate, AgencyUpdate
from app.exceptions import ConflictError
from app.crud.base import commit, get_or_404, reject_nulls

logger = logging.getLogger(__name__)


def get_agency(db: Session, agency_id: int) -> Agency:
    return get_or_404(db, Agency, agency_id, "Organismo")

def get_agency_by_name(db: Session, name: str) -> Optional[Agency]:
    return db.query(Agency).filter(Agency.name == name).first()

def get_agencies(db: Session, include_inactive: bool = False, search: Optional[str] = None) -> List[Agency]:
    query = db.query(Agency)
    if not include_inactive:
        query = query.filter(Agency.is_active == True)
    if search:
        query = query.filter(Agency.name.ilike(f"%{search}%"))
    return query.order_by(Agency.name).all()

def create_agency(db: Session, agency_in: AgencyCreate) -> Agency:
    if get_agency_by_name(db, agency_in.name):
        raise ConflictError(f"El organismo '{agency_in.name}' ya existe.")

    agency = Agency(**agency_in.model_dump(), is_active=True)
    db.add(agency)
    commit(db, "crear organismo")
    db.refresh(agency)
    logger.info("Organismo %s creado (%s)", agency.id, agency.name)
    return agency

def update_agency(db: Session, agency_id: int, agency_in: AgencyUpdate) -> Agency:
    agency = get_agency(db, agency_id)
    data = agency_in.model_dump(exclude_unset=True)
    reject_nulls(data, ("name", "agency_type", "is_active"))

    for field, value in data.items():
        setattr(agency, field, value)
    commit(db, "actualizar organismo")
    db.refresh(agency)
    return agency

def delete_agency(db: Session, agency_id: int) -> None:
    agency = get_agency(db, agency_id)

    # Los procesos referencian al organismo: no se borra en cascada
    in_use = db.query(Process).filter(Process.agency_id == agency_id).count()
    if in_use:
        raise ConflictError(
            f"No se puede eliminar. El organismo tiene {in_use} proceso(s) asociado(s)."
        )

    db.delete(agency)
    commit(db, "eliminar organismo")
    logger.info("Organismo %s eliminado", agency_id)
