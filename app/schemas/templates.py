from typing import Optional, List
from pydantic import BaseModel, Field
from decimal import Decimal


class TemplateBase(BaseModel):
    name: str = Field(..., min_length=1)
    agency_name: str = Field(..., min_length=1)
    required_documents: List[str] = []
    estimated_days: int = Field(..., ge=0)
    cost: Optional[Decimal] = Field(None, ge=0)
    description: Optional[str] = None

class TemplateCreate(TemplateBase):
    id: str = Field(..., min_length=1, pattern=r"^[a-z0-9-]+$")  # Ej: anmat-rne

class TemplateUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    agency_name: Optional[str] = Field(None, min_length=1)
    required_documents: Optional[List[str]] = None
    estimated_days: Optional[int] = Field(None, ge=0)
    cost: Optional[Decimal] = Field(None, ge=0)
    description: Optional[str] = None

class TemplateRead(TemplateBase):
    id: str
    editable: bool

    class Config:
        from_attributes = True
