from pydantic import BaseModel, Field
from typing import List, Optional
from decimal import Decimal
from datetime import date, datetime

from app.models import (
    ProcessState, ProcessPriority, CommentKind, DocumentKind, DocumentStatus
)

# --- Documentos ---

class DocumentCreate(BaseModel):
    name: str = Field(..., min_length=1)
    required: bool = False
    kind: Optional[DocumentKind] = None  # Por defecto según 'required'
    notes: Optional[str] = None

class DocumentUpdate(BaseModel):
    status: Optional[DocumentStatus] = None
    notes: Optional[str] = None

class DocumentRead(BaseModel):
    id: int
    process_id: int
    name: str
    required: bool
    kind: DocumentKind
    status: DocumentStatus
    validated: bool
    file_url: Optional[str] = None
    uploaded_at: Optional[datetime] = None
    notes: Optional[str] = None

    class Config:
        from_attributes = True

class ChecklistStats(BaseModel):
    total: int
    required: int
    validated: int
    pending: int
    uploaded: int
    completion: int  # Porcentaje 0-100

# --- Comentarios ---

class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1)
    author: Optional[str] = None

class CommentRead(BaseModel):
    id: int
    author: str
    content: str
    kind: CommentKind
    previous_value: Optional[str] = None
    new_value: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True

# --- Procesos ---

class ProcessCreate(BaseModel):
    # Con plantilla, título/organismo/documentos/costo salen de ella
    template_id: Optional[str] = None

    title: Optional[str] = Field(None, min_length=1)
    process_type: Optional[str] = None
    description: Optional[str] = None
    client_id: int
    agency_id: Optional[int] = None
    budget_id: Optional[int] = None

    priority: ProcessPriority = ProcessPriority.MEDIUM
    progress: int = Field(0, ge=0, le=100)
    cost: Optional[Decimal] = Field(None, ge=0)
    tags: List[str] = []
    notes: Optional[str] = None
    responsible: Optional[str] = None
    needs_sample: bool = False

    start_date: Optional[date] = None
    due_date: Optional[date] = None

    documents: List[DocumentCreate] = []  # Documentos adicionales

class ProcessUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    process_type: Optional[str] = None
    description: Optional[str] = None
    client_id: Optional[int] = None
    agency_id: Optional[int] = None
    priority: Optional[ProcessPriority] = None
    progress: Optional[int] = Field(None, ge=0, le=100)
    cost: Optional[Decimal] = Field(None, ge=0)
    tags: Optional[List[str]] = None
    notes: Optional[str] = None
    responsible: Optional[str] = None
    needs_sample: Optional[bool] = None
    start_date: Optional[date] = None
    due_date: Optional[date] = None
    invoiced: Optional[bool] = None

    # Versión leída por el cliente; si no coincide -> 409
    version: Optional[int] = None

class StateChange(BaseModel):
    state: ProcessState
    version: Optional[int] = None

class ProgressUpdate(BaseModel):
    progress: int = Field(..., ge=0, le=100)

class ProcessRead(BaseModel):
    id: int
    title: str
    process_type: Optional[str] = None
    description: Optional[str] = None

    client_id: int
    client_name: Optional[str] = None
    agency_id: int
    agency_name: Optional[str] = None
    template_id: Optional[str] = None
    budget_id: Optional[int] = None

    state: ProcessState
    priority: ProcessPriority
    progress: int
    cost: Decimal
    tags: List[str] = []
    notes: Optional[str] = None
    responsible: Optional[str] = None
    needs_sample: bool = False

    start_date: date
    due_date: Optional[date] = None
    invoiced: bool
    version: int

    documents: List[DocumentRead] = []
    comments: List[CommentRead] = []

    # Campo calculado a partir de los documentos
    checklist: Optional[ChecklistStats] = None

    class Config:
        from_attributes = True

# --- Proyecciones del tablero ---

class BoardColumn(BaseModel):
    state: ProcessState
    count: int
    processes: List[ProcessRead] = []

class ClientGroup(BaseModel):
    client_id: int
    client_name: str
    count: int
    processes: List[ProcessRead] = []

class DueProcess(BaseModel):
    process: ProcessRead
    days_until_due: int
    overdue: bool
