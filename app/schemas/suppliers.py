from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from decimal import Decimal
from datetime import date, datetime

from app.models import SupplierCategory, SupplierInvoiceStatus

# --- Proveedores ---

class SupplierBase(BaseModel):
    name: str = Field(..., min_length=1)
    category: SupplierCategory = SupplierCategory.OTHER
    tax_id: Optional[str] = None
    contact: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    address: Optional[str] = None

class SupplierCreate(SupplierBase):
    pass

class SupplierUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    category: Optional[SupplierCategory] = None
    tax_id: Optional[str] = None
    contact: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    is_active: Optional[bool] = None

class SupplierRead(SupplierBase):
    id: int
    is_active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

# --- Facturas de proveedores ---

class SupplierInvoiceCreate(BaseModel):
    supplier_id: int
    number: str = Field(..., min_length=1)
    issue_date: date
    due_date: Optional[date] = None
    concept: str = Field(..., min_length=1)
    category: Optional[str] = None
    subtotal: Decimal = Field(..., ge=0)   # IVA y total se calculan
    process_id: Optional[int] = None
    client_id: Optional[int] = None
    notes: Optional[str] = None

class SupplierInvoiceUpdate(BaseModel):
    number: Optional[str] = Field(None, min_length=1)
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    concept: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = None
    subtotal: Optional[Decimal] = Field(None, ge=0)
    process_id: Optional[int] = None
    client_id: Optional[int] = None
    notes: Optional[str] = None

class SupplierInvoiceStatusChange(BaseModel):
    status: SupplierInvoiceStatus

class SupplierInvoiceRead(BaseModel):
    id: int
    supplier_id: int
    number: str
    issue_date: date
    due_date: Optional[date] = None
    concept: str
    category: Optional[str] = None
    subtotal: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    status: SupplierInvoiceStatus
    process_id: Optional[int] = None
    client_id: Optional[int] = None
    notes: Optional[str] = None

    class Config:
        from_attributes = True
