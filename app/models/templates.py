# app/models/templates.py
from sqlalchemy import Column, Integer, String, Boolean, Numeric, JSON
from app.database import Base


class ProcedureTemplate(Base):
    """Plantilla de procedimiento: organismo + documentos requeridos + tiempo/costo estimado."""
    __tablename__ = "plantillas"
    __table_args__ = {'extend_existing': True}

    id = Column(String, primary_key=True, index=True)  # Ej: "anmat-rne"
    name = Column(String, nullable=False)
    agency_name = Column(String, index=True, nullable=False)
    required_documents = Column(JSON, default=list)
    estimated_days = Column(Integer, nullable=False)
    cost = Column(Numeric(12, 2), nullable=True)
    description = Column(String, nullable=True)
    editable = Column(Boolean, default=True)
