# app/routers/notifications.py
from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session
from typing import List, Optional

from app.database import get_db
from app.crud import notifications as crud
from app.models import NotificationKind
from app.schemas.notifications import NotificationRead, UnreadCount

router = APIRouter()


@router.get("/", response_model=List[NotificationRead])
def get_notifications(
    unread_only: bool = False,
    kind: Optional[NotificationKind] = None,
    module: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
):
    return crud.list_notifications(db, unread_only=unread_only, kind=kind, module=module, skip=skip, limit=limit)

@router.get("/unread-count", response_model=UnreadCount)
def get_unread_count(db: Session = Depends(get_db)):
    return UnreadCount(unread=crud.unread_count(db))

@router.post("/read-all")
def mark_all_read(db: Session = Depends(get_db)):
    return {"updated": crud.mark_all_read(db)}

@router.post("/{notification_id}/read", response_model=NotificationRead)
def mark_read(notification_id: int, db: Session = Depends(get_db)):
    return crud.mark_read(db, notification_id)

@router.delete("/{notification_id}", status_code=204)
def delete_notification(notification_id: int, db: Session = Depends(get_db)):
    crud.delete_notification(db, notification_id)
    return Response(status_code=204)
