# app/models/suppliers.py
import enum
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Date, Enum, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base


class SupplierCategory(str, enum.Enum):
    LOGISTICS = "logistica"
    LEGAL = "legal"
    GOVERNMENT = "gobierno"
    OTHER = "otro"


class SupplierInvoiceStatus(str, enum.Enum):
    PENDING = "pendiente"
    PAID = "pagada"
    OVERDUE = "vencida"


class Supplier(Base):
    __tablename__ = "proveedores"
    __table_args__ = {'extend_existing': True}

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, index=True, nullable=False)
    category = Column(Enum(SupplierCategory), default=SupplierCategory.OTHER, nullable=False)
    tax_id = Column(String, nullable=True)  # CUIT

    contact = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    email = Column(String, nullable=True)
    address = Column(String, nullable=True)

    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    invoices = relationship("SupplierInvoice", back_populates="supplier")


class SupplierInvoice(Base):
    """Factura recibida de un proveedor: concepto en lugar de líneas."""
    __tablename__ = "facturas_proveedor"
    __table_args__ = {'extend_existing': True}

    id = Column(Integer, primary_key=True, index=True)
    supplier_id = Column(Integer, ForeignKey("proveedores.id"), nullable=False)

    number = Column(String, nullable=False)
    issue_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=True)
    concept = Column(String, nullable=False)
    category = Column(String, nullable=True)

    subtotal = Column(Numeric(12, 2), default=0.00)
    tax_amount = Column(Numeric(12, 2), default=0.00)
    total_amount = Column(Numeric(12, 2), default=0.00)

    status = Column(Enum(SupplierInvoiceStatus), default=SupplierInvoiceStatus.PENDING, nullable=False)

    process_id = Column(Integer, ForeignKey("procesos.id"), nullable=True)
    client_id = Column(Integer, ForeignKey("clientes.id"), nullable=True)
    notes = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    supplier = relationship("Supplier", back_populates="invoices")
