# app/models/budgets.py
import enum
from sqlalchemy import Column, Integer, String, DateTime, Date, Enum, Numeric, ForeignKey, Text, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base


class BudgetStatus(str, enum.Enum):
    DRAFT = "borrador"
    SENT = "enviado"
    APPROVED = "aprobado"
    REJECTED = "rechazado"
    EXPIRED = "vencido"


class Budget(Base):
    """Presupuesto: propuesta cotizada, convertible en procesos y factura."""
    __tablename__ = "presupuestos"
    __table_args__ = {'extend_existing': True}

    id = Column(Integer, primary_key=True, index=True)
    number = Column(String, unique=True, index=True, nullable=False)  # PRE-2024-001
    year = Column(Integer, nullable=False)
    sequence = Column(Integer, nullable=False)

    client_id = Column(Integer, ForeignKey("clientes.id"), nullable=True)
    client_name = Column(String, nullable=False)

    operation_type = Column(String, nullable=False)  # Ej: Importación, Exportación
    description = Column(Text, nullable=True)

    subtotal = Column(Numeric(12, 2), default=0.00)
    tax_amount = Column(Numeric(12, 2), default=0.00)
    total_amount = Column(Numeric(12, 2), default=0.00)

    status = Column(Enum(BudgetStatus), default=BudgetStatus.DRAFT, nullable=False)
    issue_date = Column(Date, nullable=False)
    expiry_date = Column(Date, nullable=False)
    notes = Column(Text, nullable=True)

    process_ids = Column(JSON, default=list)
    template_ids = Column(JSON, default=list)
    invoice_id = Column(Integer, nullable=True)  # Factura generada (sin FK: facturas ya referencia presupuestos)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    client = relationship("Client")
    items = relationship("BudgetItem", back_populates="budget", cascade="all, delete-orphan",
                         order_by="BudgetItem.id")


class BudgetItem(Base):
    __tablename__ = "items_presupuesto"
    __table_args__ = {'extend_existing': True}

    id = Column(Integer, primary_key=True, index=True)
    budget_id = Column(Integer, ForeignKey("presupuestos.id"), nullable=False)

    description = Column(String, nullable=False)
    quantity = Column(Numeric(10, 2), nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    total_line = Column(Numeric(12, 2), nullable=False)

    budget = relationship("Budget", back_populates="items")
