# app/models/processes.py
import enum
from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Date, Enum, Numeric, ForeignKey, Text, JSON
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base

# --- Enums ---
class ProcessState(str, enum.Enum):
    PENDING = "pendiente"
    DOCUMENT_COLLECTION = "recopilacion-docs"
    SUBMITTED = "enviado"
    UNDER_REVIEW = "revision"
    APPROVED = "aprobado"
    REJECTED = "rechazado"
    ARCHIVED = "archivado"

class ProcessPriority(str, enum.Enum):
    LOW = "baja"
    MEDIUM = "media"
    HIGH = "alta"
    URGENT = "urgente"

class CommentKind(str, enum.Enum):
    COMMENT = "comentario"
    STATE_CHANGE = "cambio_estado"
    DOCUMENT_ADDED = "documento_agregado"

class DocumentKind(str, enum.Enum):
    REQUIRED = "requerido"
    OPTIONAL = "opcional"
    GENERATED = "generado"

class DocumentStatus(str, enum.Enum):
    PENDING = "pendiente"
    UPLOADED = "cargado"
    APPROVED = "aprobado"
    REJECTED = "rechazado"

# Orden de columnas del tablero
BOARD_ORDER = list(ProcessState)

# Estados finales (archivado se alcanza desde cualquier estado)
TERMINAL_STATES = {ProcessState.APPROVED, ProcessState.REJECTED, ProcessState.ARCHIVED}


# --- Modelo 1: Proceso (agregado) ---
class Process(Base):
    __tablename__ = "procesos"
    __table_args__ = {'extend_existing': True}

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    process_type = Column(String, nullable=True)  # Ej: Importación, Exportación
    description = Column(Text, nullable=True)

    client_id = Column(Integer, ForeignKey("clientes.id"), nullable=False)
    agency_id = Column(Integer, ForeignKey("organismos.id"), nullable=False)
    template_id = Column(String, ForeignKey("plantillas.id"), nullable=True)
    budget_id = Column(Integer, ForeignKey("presupuestos.id"), nullable=True)

    state = Column(Enum(ProcessState), default=ProcessState.PENDING, nullable=False)
    priority = Column(Enum(ProcessPriority), default=ProcessPriority.MEDIUM, nullable=False)
    progress = Column(Integer, default=0, nullable=False)  # 0-100
    cost = Column(Numeric(12, 2), default=0.00)

    tags = Column(JSON, default=list)
    notes = Column(Text, nullable=True)
    responsible = Column(String, nullable=True)
    needs_sample = Column(Boolean, default=False)

    start_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=True)
    invoiced = Column(Boolean, default=False)

    # Control de concurrencia optimista
    version = Column(Integer, default=1, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    deleted_at = Column(DateTime, nullable=True)  # Baja lógica con ventana para deshacer

    client = relationship("Client", back_populates="processes")
    agency = relationship("Agency", back_populates="processes")

    # Composición: los documentos y comentarios no existen fuera del proceso
    documents = relationship(
        "ProcessDocument", back_populates="process",
        cascade="all, delete-orphan", order_by="ProcessDocument.id"
    )
    comments = relationship(
        "ProcessComment", back_populates="process",
        cascade="all, delete-orphan", order_by="ProcessComment.id"
    )


# --- Modelo 2: Documento del checklist ---
class ProcessDocument(Base):
    __tablename__ = "documentos"
    __table_args__ = {'extend_existing': True}

    id = Column(Integer, primary_key=True, index=True)
    process_id = Column(Integer, ForeignKey("procesos.id"), nullable=False)

    name = Column(String, nullable=False)
    required = Column(Boolean, default=False, nullable=False)
    kind = Column(Enum(DocumentKind), default=DocumentKind.OPTIONAL, nullable=False)
    status = Column(Enum(DocumentStatus), default=DocumentStatus.PENDING, nullable=False)
    validated = Column(Boolean, default=False, nullable=False)

    file_url = Column(String, nullable=True)
    uploaded_at = Column(DateTime, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.now)

    process = relationship("Process", back_populates="documents")
    validations = relationship(
        "AIValidation", back_populates="document",
        cascade="all, delete-orphan", order_by="AIValidation.id"
    )


# --- Modelo 3: Comentarios (bitácora del proceso) ---
class ProcessComment(Base):
    __tablename__ = "comentarios_proceso"
    __table_args__ = {'extend_existing': True}

    id = Column(Integer, primary_key=True, index=True)
    process_id = Column(Integer, ForeignKey("procesos.id"), nullable=False)

    author = Column(String, nullable=False)
    content = Column(Text, nullable=False)
    kind = Column(Enum(CommentKind), default=CommentKind.COMMENT, nullable=False)

    # Solo para cambios de estado
    previous_value = Column(String, nullable=True)
    new_value = Column(String, nullable=True)

    created_at = Column(DateTime, default=datetime.now)

    process = relationship("Process", back_populates="comments")
