import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from app.models import Client, Process, Invoice, NotificationKind, NotificationPriority
from app.schemas.clients import ClientCreate, ClientUpdate
from app.exceptions import ConflictError
from app.crud.base import commit, get_or_404, reject_nulls
from app.crud.notifications import notify

logger = logging.getLogger(__name__)


def get_client(db: Session, client_id: int) -> Client:
    return get_or_404(db, Client, client_id, "Cliente")

def get_client_by_tax_id(db: Session, tax_id: str) -> Optional[Client]:
    return db.query(Client).filter(Client.tax_id == tax_id).first()

def get_clients(
    db: Session,
    search: Optional[str] = None,
    include_inactive: bool = False,
    skip: int = 0,
    limit: int = 100,
) -> List[Client]:
    query = db.query(Client)
    if not include_inactive:
        query = query.filter(Client.is_active == True)

    if search:
        # Búsqueda insensible a mayúsculas
        search_fmt = f"%{search}%"
        query = query.filter(
            (Client.name.ilike(search_fmt)) |
            (Client.email.ilike(search_fmt)) |
            (Client.tax_id.ilike(search_fmt))
        )

    return query.order_by(Client.name).offset(skip).limit(limit).all()

def create_client(db: Session, client: ClientCreate) -> Client:
    # Validar CUIT único (si se proporciona uno)
    if client.tax_id and get_client_by_tax_id(db, client.tax_id):
        raise ConflictError(f"El CUIT {client.tax_id} ya está registrado.")

    db_client = Client(**client.model_dump(), is_active=True)
    db.add(db_client)
    db.flush()

    notify(
        db, NotificationKind.NEW_CLIENT, "clientes",
        title="Nuevo cliente",
        message=f"Se registró el cliente {db_client.name}",
        priority=NotificationPriority.LOW,
        client_id=db_client.id,
    )
    commit(db, "crear cliente")
    db.refresh(db_client)
    logger.info("Cliente %s creado (%s)", db_client.id, db_client.name)
    return db_client

def update_client(db: Session, client_id: int, client_in: ClientUpdate) -> Client:
    db_client = get_client(db, client_id)
    update_data = client_in.model_dump(exclude_unset=True)
    reject_nulls(update_data, ("name", "tax_category", "is_active"))

    new_tax_id = update_data.get("tax_id")
    if new_tax_id and new_tax_id != db_client.tax_id:
        existing = get_client_by_tax_id(db, new_tax_id)
        if existing and existing.id != db_client.id:
            raise ConflictError(f"El CUIT {new_tax_id} ya está registrado.")

    # Actualizamos campos dinámicamente
    for field, value in update_data.items():
        setattr(db_client, field, value)

    commit(db, "actualizar cliente")
    db.refresh(db_client)
    logger.info("Cliente %s actualizado: %s", client_id, ", ".join(update_data))
    return db_client

def delete_client(db: Session, client_id: int) -> Client:
    """Baja lógica: los procesos y facturas conservan la referencia."""
    db_client = get_client(db, client_id)
    db_client.is_active = False
    commit(db, "eliminar cliente")
    db.refresh(db_client)
    logger.info("Cliente %s dado de baja", client_id)
    return db_client

def get_client_processes(db: Session, client_id: int) -> List[Process]:
    get_client(db, client_id)
    return db.query(Process).filter(
        Process.client_id == client_id,
        Process.deleted_at.is_(None)
    ).order_by(Process.start_date.desc()).all()

def get_client_invoices(db: Session, client_id: int) -> List[Invoice]:
    get_client(db, client_id)
    return db.query(Invoice).filter(
        Invoice.client_id == client_id,
        Invoice.deleted_at.is_(None)
    ).order_by(Invoice.issue_date.desc()).all()
