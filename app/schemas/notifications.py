from pydantic import BaseModel
from typing import Optional
from datetime import datetime

from app.models import NotificationKind, NotificationPriority


class NotificationRead(BaseModel):
    id: int
    kind: NotificationKind
    module: str
    title: str
    message: str
    is_read: bool
    priority: NotificationPriority
    process_id: Optional[int] = None
    client_id: Optional[int] = None
    budget_id: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True

class UnreadCount(BaseModel):
    unread: int
