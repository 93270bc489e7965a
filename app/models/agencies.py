# app/models/agencies.py
import enum
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum, Numeric
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base


class AgencyType(str, enum.Enum):
    PUBLIC = "publico"
    PRIVATE = "privado"


class Agency(Base):
    """Organismo ante el que se tramita un proceso (ANMAT, SENASA, ...)."""
    __tablename__ = "organismos"
    __table_args__ = {'extend_existing': True}

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, index=True, nullable=False)
    agency_type = Column(Enum(AgencyType), default=AgencyType.PUBLIC, nullable=False)

    contact = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    email = Column(String, nullable=True)
    address = Column(String, nullable=True)
    website = Column(String, nullable=True)

    avg_response_days = Column(Integer, nullable=True)   # Tiempo de respuesta promedio
    avg_cost = Column(Numeric(12, 2), nullable=True)

    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    processes = relationship("Process", back_populates="agency")
