from typing import Optional, List
from pydantic import BaseModel, Field
from decimal import Decimal
from datetime import datetime

# --- Historial de precios ---
class PriceHistoryRead(BaseModel):
    id: int
    price: Decimal
    reason: str
    created_at: datetime

    class Config:
        from_attributes = True

# --- Servicios ---
class ServicePriceBase(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    price: Decimal = Field(..., ge=0)
    category: str = Field(..., min_length=1)
    agency_name: Optional[str] = None
    template_id: Optional[str] = None

class ServicePriceCreate(ServicePriceBase):
    pass

class ServicePriceUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    category: Optional[str] = Field(None, min_length=1)
    agency_name: Optional[str] = None
    template_id: Optional[str] = None
    is_active: Optional[bool] = None
    reason: Optional[str] = None  # Motivo del cambio de precio

class ServicePriceRead(ServicePriceBase):
    id: int
    is_active: bool
    updated_at: Optional[datetime] = None
    history: List[PriceHistoryRead] = []

    class Config:
        from_attributes = True

# --- Aumento masivo ---
class PriceIncrease(BaseModel):
    percentage: Decimal = Field(..., gt=-100)
    category: Optional[str] = None
    reason: Optional[str] = None
