from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from decimal import Decimal


class SettingsBase(BaseModel):
    company_name: str
    company_tax_id: Optional[str] = None
    company_email: Optional[EmailStr] = None
    currency: str = "ARS"
    # Porcentaje visible en la pantalla de configuración
    vat_percentage: Decimal = Field(Decimal("21"), ge=0, le=100)
    invoice_due_days: int = Field(30, ge=0)
    budget_validity_days: int = Field(15, ge=0)
    notify_new_processes: bool = True
    notify_documents: bool = True

class SettingsRead(SettingsBase):
    # Alícuota realmente usada en los cálculos (depende de VAT_SOURCE)
    effective_vat_rate: Decimal
    vat_source: str

class SettingsUpdate(BaseModel):
    company_name: Optional[str] = None
    company_tax_id: Optional[str] = None
    company_email: Optional[EmailStr] = None
    currency: Optional[str] = None
    vat_percentage: Optional[Decimal] = Field(None, ge=0, le=100)
    invoice_due_days: Optional[int] = Field(None, ge=0)
    budget_validity_days: Optional[int] = Field(None, ge=0)
    notify_new_processes: Optional[bool] = None
    notify_documents: Optional[bool] = None
