from pydantic import BaseModel, Field, computed_field
from typing import Annotated, List, Optional, Union, Literal, Any, Dict
from decimal import Decimal
from datetime import date, datetime

from app.models import InvoiceType, InvoiceStatus, InvoicePayer, HistoryAction

# --- Referencia al cliente (unión etiquetada) ---

class KnownClientRef(BaseModel):
    kind: Literal["known"] = "known"
    id: int
    name: Optional[str] = None

class DenormalizedClientRef(BaseModel):
    kind: Literal["denormalized"] = "denormalized"
    name: str = Field(..., min_length=1)

ClientRef = Annotated[Union[KnownClientRef, DenormalizedClientRef], Field(discriminator="kind")]

# --- Líneas ---

class ItemCreate(BaseModel):
    description: str = Field(..., min_length=1)
    quantity: Decimal = Field(..., gt=0)
    unit_price: Decimal = Field(..., ge=0)

class ItemRead(BaseModel):
    id: int
    description: str
    quantity: Decimal
    unit_price: Decimal
    total_line: Decimal

    class Config:
        from_attributes = True

# --- Facturas ---

class InvoiceCreate(BaseModel):
    client: ClientRef
    invoice_type: InvoiceType = InvoiceType.CLIENT
    payer: Optional[InvoicePayer] = None
    supplier_name: Optional[str] = None
    agency_name: Optional[str] = None
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    items: List[ItemCreate] = Field(..., min_length=1)
    status: InvoiceStatus = InvoiceStatus.DRAFT
    notes: Optional[str] = None
    process_id: Optional[int] = None
    budget_id: Optional[int] = None

class InvoiceUpdate(BaseModel):
    client: Optional[ClientRef] = None
    invoice_type: Optional[InvoiceType] = None
    payer: Optional[InvoicePayer] = None
    supplier_name: Optional[str] = None
    agency_name: Optional[str] = None
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    items: Optional[List[ItemCreate]] = Field(None, min_length=1)
    notes: Optional[str] = None
    process_id: Optional[int] = None
    version: Optional[int] = None

class InvoiceStatusChange(BaseModel):
    status: InvoiceStatus
    version: Optional[int] = None

class HistoryRead(BaseModel):
    id: int
    action: HistoryAction
    actor: str
    description: str
    before_data: Optional[Dict[str, Any]] = None
    after_data: Optional[Dict[str, Any]] = None
    created_at: datetime

    class Config:
        from_attributes = True

class InvoiceRead(BaseModel):
    id: int
    number: str
    invoice_type: InvoiceType
    payer: Optional[InvoicePayer] = None

    client_id: Optional[int] = None
    client_name: str
    supplier_name: Optional[str] = None
    agency_name: Optional[str] = None

    issue_date: date
    due_date: date
    items: List[ItemRead] = []
    subtotal: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    status: InvoiceStatus
    notes: Optional[str] = None
    process_id: Optional[int] = None
    budget_id: Optional[int] = None
    version: int
    history: List[HistoryRead] = []

    @computed_field
    @property
    def client(self) -> Union[KnownClientRef, DenormalizedClientRef]:
        if self.client_id is not None:
            return KnownClientRef(id=self.client_id, name=self.client_name)
        return DenormalizedClientRef(name=self.client_name)

    class Config:
        from_attributes = True
