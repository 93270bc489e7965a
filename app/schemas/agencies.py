from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from decimal import Decimal
from datetime import datetime

from app.models import AgencyType


class AgencyBase(BaseModel):
    name: str = Field(..., min_length=1)
    agency_type: AgencyType = AgencyType.PUBLIC
    contact: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    website: Optional[str] = None
    avg_response_days: Optional[int] = Field(None, ge=0)
    avg_cost: Optional[Decimal] = Field(None, ge=0)

class AgencyCreate(AgencyBase):
    pass

class AgencyUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    agency_type: Optional[AgencyType] = None
    contact: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    website: Optional[str] = None
    avg_response_days: Optional[int] = Field(None, ge=0)
    avg_cost: Optional[Decimal] = Field(None, ge=0)
    is_active: Optional[bool] = None

class AgencyRead(AgencyBase):
    id: int
    is_active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
