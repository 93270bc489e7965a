# app/models/__init__.py

# 1. Base de datos (Origen de la clase declarativa)
from app.database import Base

# 2. Clientes, organismos y proveedores
from .clients import Client, TaxCategory
from .agencies import Agency, AgencyType
from .suppliers import Supplier, SupplierCategory, SupplierInvoice, SupplierInvoiceStatus

# 3. Plantillas y precios
from .templates import ProcedureTemplate
from .pricing import ServicePrice, PriceHistory

# 4. Procesos y documentos
from .processes import (
    Process,
    ProcessDocument,
    ProcessComment,
    ProcessState,
    ProcessPriority,
    CommentKind,
    DocumentKind,
    DocumentStatus,
    BOARD_ORDER,
    TERMINAL_STATES,
)
from .ai_validation import AIValidation, ValidationStatus

# 5. Facturación y presupuestos
from .billing import (
    Invoice,
    InvoiceItem,
    InvoiceHistory,
    InvoiceType,
    InvoiceStatus,
    InvoicePayer,
    HistoryAction,
)
from .budgets import Budget, BudgetItem, BudgetStatus

# 6. Notificaciones y configuración
from .notifications import Notification, NotificationKind, NotificationPriority
from .settings import AppSetting, SequenceCounter
