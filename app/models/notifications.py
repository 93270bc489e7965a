# app/models/notifications.py
import enum
from datetime import datetime
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum
from app.database import Base


class NotificationKind(str, enum.Enum):
    NEW_PROCESS = "nuevo_proceso"
    NEW_CLIENT = "nuevo_cliente"
    NEW_BUDGET = "nuevo_presupuesto"
    MISSING_PRICE = "precio_faltante"
    PROCESS_MODIFIED = "proceso_modificado"
    DOCUMENT_UPLOADED = "documento_subido"
    AI_VALIDATION = "validacion_ia"
    INFO = "info"


class NotificationPriority(str, enum.Enum):
    LOW = "baja"
    MEDIUM = "media"
    HIGH = "alta"


class Notification(Base):
    __tablename__ = "notificaciones"
    __table_args__ = {'extend_existing': True}

    id = Column(Integer, primary_key=True, index=True)
    kind = Column(Enum(NotificationKind), nullable=False)
    module = Column(String, nullable=False)  # procesos, clientes, presupuestos, ...
    title = Column(String, nullable=False)
    message = Column(String, nullable=False)

    is_read = Column(Boolean, default=False)
    priority = Column(Enum(NotificationPriority), default=NotificationPriority.MEDIUM, nullable=False)

    # Referencias opcionales (sin FK: la notificación sobrevive a la entidad)
    process_id = Column(Integer, nullable=True)
    client_id = Column(Integer, nullable=True)
    budget_id = Column(Integer, nullable=True)

    created_at = Column(DateTime, default=datetime.now)
