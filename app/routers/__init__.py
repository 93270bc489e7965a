# app/routers/__init__.py

# Esto expone los módulos para que "from app.routers import clients" funcione
from . import clients
from . import agencies
from . import suppliers
from . import pricing
from . import templates
from . import processes
from . import documents
from . import ai_validation
from . import invoices
from . import budgets
from . import notifications
from . import reports
from . import settings
