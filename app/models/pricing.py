# app/models/pricing.py
from datetime import datetime
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base


# --- Lista de precios de servicios ---
class ServicePrice(Base):
    __tablename__ = "servicios"
    __table_args__ = {'extend_existing': True}

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, index=True, nullable=False)
    description = Column(String, nullable=True)
    price = Column(Numeric(12, 2), nullable=False)
    category = Column(String, index=True, nullable=False)  # Ej: Registros, Autorizaciones

    agency_name = Column(String, nullable=True)
    template_id = Column(String, ForeignKey("plantillas.id"), nullable=True)

    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    history = relationship("PriceHistory", back_populates="service", cascade="all, delete-orphan",
                           order_by="PriceHistory.id")


class PriceHistory(Base):
    __tablename__ = "historial_precios"
    __table_args__ = {'extend_existing': True}

    id = Column(Integer, primary_key=True, index=True)
    service_id = Column(Integer, ForeignKey("servicios.id"), nullable=False)

    price = Column(Numeric(12, 2), nullable=False)
    reason = Column(String, nullable=False)  # Ej: "Alta inicial", "Aumento 10%"
    created_at = Column(DateTime, default=datetime.now)

    service = relationship("ServicePrice", back_populates="history")
