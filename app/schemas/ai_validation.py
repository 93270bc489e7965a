from pydantic import BaseModel
from typing import Any, Dict, List, Optional
from datetime import datetime

from app.models import ValidationStatus


class AIValidationRead(BaseModel):
    id: int
    document_id: int
    status: ValidationStatus
    confidence: float
    extracted_text: Optional[str] = None
    extracted_fields: Dict[str, Any] = {}
    detected_errors: List[str] = []
    suggestions: List[str] = []
    error_message: Optional[str] = None
    processing_ms: Optional[int] = None
    submitted_at: datetime
    processed_at: Optional[datetime] = None

    class Config:
        from_attributes = True
