# app/models/billing.py
import enum
from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, DateTime, Date, Enum, Numeric, ForeignKey, Text, JSON
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base

# --- Enums ---
class InvoiceType(str, enum.Enum):
    CLIENT = "cliente"
    SUPPLIER = "proveedor"
    AGENCY = "organismo"

class InvoiceStatus(str, enum.Enum):
    DRAFT = "borrador"
    SENT = "enviada"
    PAID = "pagada"
    OVERDUE = "vencida"
    CANCELLED = "anulada"

class InvoicePayer(str, enum.Enum):
    US = "nosotros"
    CLIENT = "cliente"

class HistoryAction(str, enum.Enum):
    CREATE = "creacion"
    EDIT = "edicion"
    DELETE = "eliminacion"
    STATUS_CHANGE = "cambio_estado"
    RESTORE = "restauracion"


# --- Modelo 1: Encabezado de Factura ---
class Invoice(Base):
    __tablename__ = "facturas"
    __table_args__ = {'extend_existing': True}

    id = Column(Integer, primary_key=True, index=True)

    number = Column(String, unique=True, index=True, nullable=False)  # FAC-2024-001
    year = Column(Integer, nullable=False)
    sequence = Column(Integer, nullable=False)

    invoice_type = Column(Enum(InvoiceType), default=InvoiceType.CLIENT, nullable=False)
    payer = Column(Enum(InvoicePayer), nullable=True)

    # Referencia al cliente: id conocido o solo nombre desnormalizado
    client_id = Column(Integer, ForeignKey("clientes.id"), nullable=True)
    client_name = Column(String, nullable=False)
    supplier_name = Column(String, nullable=True)
    agency_name = Column(String, nullable=True)

    issue_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False)

    subtotal = Column(Numeric(12, 2), default=0.00)
    tax_amount = Column(Numeric(12, 2), default=0.00)
    total_amount = Column(Numeric(12, 2), default=0.00)

    status = Column(Enum(InvoiceStatus), default=InvoiceStatus.DRAFT, nullable=False)
    notes = Column(Text, nullable=True)

    process_id = Column(Integer, ForeignKey("procesos.id"), nullable=True)
    budget_id = Column(Integer, ForeignKey("presupuestos.id"), nullable=True)

    version = Column(Integer, default=1, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    deleted_at = Column(DateTime, nullable=True)

    client = relationship("Client")
    items = relationship("InvoiceItem", back_populates="invoice", cascade="all, delete-orphan",
                         order_by="InvoiceItem.id")
    history = relationship("InvoiceHistory", back_populates="invoice", cascade="all, delete-orphan",
                           order_by="InvoiceHistory.id")


# --- Modelo 2: Líneas de Factura ---
class InvoiceItem(Base):
    __tablename__ = "items_factura"
    __table_args__ = {'extend_existing': True}

    id = Column(Integer, primary_key=True, index=True)
    invoice_id = Column(Integer, ForeignKey("facturas.id"), nullable=False)

    description = Column(String, nullable=False)
    quantity = Column(Numeric(10, 2), nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    total_line = Column(Numeric(12, 2), nullable=False)

    invoice = relationship("Invoice", back_populates="items")


# --- Modelo 3: Historial (auditoría) ---
class InvoiceHistory(Base):
    __tablename__ = "historial_facturas"
    __table_args__ = {'extend_existing': True}

    id = Column(Integer, primary_key=True, index=True)
    invoice_id = Column(Integer, ForeignKey("facturas.id"), nullable=False)

    action = Column(Enum(HistoryAction), nullable=False)
    actor = Column(String, nullable=False)
    description = Column(String, nullable=False)
    before_data = Column(JSON, nullable=True)
    after_data = Column(JSON, nullable=True)

    created_at = Column(DateTime, default=datetime.now)

    invoice = relationship("Invoice", back_populates="history")
