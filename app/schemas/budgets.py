from pydantic import BaseModel, Field
from typing import List, Optional
from decimal import Decimal
from datetime import date

from app.models import BudgetStatus
from app.schemas.invoices import ClientRef, ItemCreate, ItemRead


class BudgetCreate(BaseModel):
    client: ClientRef
    operation_type: str = Field(..., min_length=1)
    description: Optional[str] = None
    items: List[ItemCreate] = Field(..., min_length=1)
    issue_date: Optional[date] = None
    expiry_date: Optional[date] = None
    notes: Optional[str] = None
    template_ids: List[str] = []

class BudgetUpdate(BaseModel):
    operation_type: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    items: Optional[List[ItemCreate]] = Field(None, min_length=1)
    expiry_date: Optional[date] = None
    notes: Optional[str] = None
    template_ids: Optional[List[str]] = None

class BudgetStatusChange(BaseModel):
    status: BudgetStatus

class BudgetProcessLink(BaseModel):
    process_ids: List[int] = Field(..., min_length=1)

class BudgetRead(BaseModel):
    id: int
    number: str
    client_id: Optional[int] = None
    client_name: str
    operation_type: str
    description: Optional[str] = None
    items: List[ItemRead] = []
    subtotal: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    status: BudgetStatus
    issue_date: date
    expiry_date: date
    notes: Optional[str] = None
    process_ids: List[int] = []
    template_ids: List[str] = []
    invoice_id: Optional[int] = None

    class Config:
        from_attributes = True
