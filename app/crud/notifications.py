# app/crud/notifications.py
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from app.models import Notification, NotificationKind, NotificationPriority
from app.crud.base import commit, get_or_404

logger = logging.getLogger(__name__)


def notify(
    db: Session,
    kind: NotificationKind,
    module: str,
    title: str,
    message: str,
    priority: NotificationPriority = NotificationPriority.MEDIUM,
    process_id: Optional[int] = None,
    client_id: Optional[int] = None,
    budget_id: Optional[int] = None,
) -> Notification:
    """
    Agrega una notificación a la sesión actual.
    La función que la origina controla el commit, así la notificación
    se guarda en la misma transacción que la acción.
    """
    notification = Notification(
        kind=kind,
        module=module,
        title=title,
        message=message,
        priority=priority,
        process_id=process_id,
        client_id=client_id,
        budget_id=budget_id,
        is_read=False,
    )
    db.add(notification)
    logger.debug("Notificación %s: %s", kind.value, title)
    return notification


def list_notifications(
    db: Session,
    unread_only: bool = False,
    kind: Optional[NotificationKind] = None,
    module: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
) -> List[Notification]:
    query = db.query(Notification)
    if unread_only:
        query = query.filter(Notification.is_read == False)
    if kind:
        query = query.filter(Notification.kind == kind)
    if module:
        query = query.filter(Notification.module == module)
    return query.order_by(Notification.created_at.desc(), Notification.id.desc()).offset(skip).limit(limit).all()


def unread_count(db: Session) -> int:
    return db.query(Notification).filter(Notification.is_read == False).count()


def mark_read(db: Session, notification_id: int) -> Notification:
    notification = get_or_404(db, Notification, notification_id, "Notificación")
    notification.is_read = True
    commit(db, "marcar notificación como leída")
    db.refresh(notification)
    return notification


def mark_all_read(db: Session) -> int:
    updated = db.query(Notification).filter(Notification.is_read == False).update(
        {Notification.is_read: True}, synchronize_session=False
    )
    commit(db, "marcar todas las notificaciones como leídas")
    return updated


def delete_notification(db: Session, notification_id: int) -> None:
    notification = get_or_404(db, Notification, notification_id, "Notificación")
    db.delete(notification)
    commit(db, "eliminar notificación")
    logger.info("Notificación %s eliminada", notification_id)
