# app/models/ai_validation.py
import enum
from datetime import datetime
from sqlalchemy import Column, Integer, String, Float, DateTime, Enum, ForeignKey, Text, JSON
from sqlalchemy.orm import relationship
from app.database import Base


class ValidationStatus(str, enum.Enum):
    PENDING = "pendiente"
    PROCESSING = "procesando"
    COMPLETED = "completado"
    ERROR = "error"


class AIValidation(Base):
    """Resultado de enviar un documento al servicio externo de validación."""
    __tablename__ = "validaciones_ia"
    __table_args__ = {'extend_existing': True}

    id = Column(Integer, primary_key=True, index=True)
    document_id = Column(Integer, ForeignKey("documentos.id"), nullable=False)

    status = Column(Enum(ValidationStatus), default=ValidationStatus.PENDING, nullable=False)
    confidence = Column(Float, default=0.0)  # 0-100

    extracted_text = Column(Text, nullable=True)
    extracted_fields = Column(JSON, default=dict)
    detected_errors = Column(JSON, default=list)
    suggestions = Column(JSON, default=list)
    error_message = Column(String, nullable=True)

    processing_ms = Column(Integer, nullable=True)
    submitted_at = Column(DateTime, default=datetime.now)
    processed_at = Column(DateTime, nullable=True)

    document = relationship("ProcessDocument", back_populates="validations")
