from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime

from app.models import TaxCategory

# --- CLASES BASE ---

class ClientBase(BaseModel):
    name: str = Field(..., min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    tax_id: Optional[str] = None            # CUIT
    tax_category: TaxCategory = TaxCategory.FINAL_CONSUMER
    notes: Optional[str] = None

# --- CREACIÓN ---
class ClientCreate(ClientBase):
    pass

# --- ACTUALIZACIÓN ---
class ClientUpdate(BaseModel):
    # Permitimos editar todo de forma opcional
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    tax_id: Optional[str] = None
    tax_category: Optional[TaxCategory] = None
    notes: Optional[str] = None
    is_active: Optional[bool] = None

# --- LECTURA (RESPONSE) ---
class ClientRead(ClientBase):
    id: int
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
