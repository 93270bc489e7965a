# app/models/clients.py
import enum
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base


class TaxCategory(str, enum.Enum):
    REGISTERED = "responsable_inscripto"
    SIMPLIFIED = "monotributo"
    EXEMPT = "exento"
    FINAL_CONSUMER = "consumidor_final"


class Client(Base):
    __tablename__ = "clientes"
    __table_args__ = {'extend_existing': True}

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, index=True, nullable=False)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    address = Column(String, nullable=True)

    # Datos Fiscales
    tax_id = Column(String, index=True, nullable=True)  # CUIT
    tax_category = Column(Enum(TaxCategory), default=TaxCategory.FINAL_CONSUMER, nullable=False)

    notes = Column(String, nullable=True)
    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    processes = relationship("Process", back_populates="client")
