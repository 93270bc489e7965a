import logging

from fastapi import FastAPI, Request
from fastapi.staticfiles import StaticFiles
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.database import engine
from app.exceptions import AppError
from app.models import Base
from app.routers import (
    clients, agencies, suppliers, pricing, templates,
    processes, documents, ai_validation, invoices, budgets,
    notifications, reports, settings as settings_router
)

# 0. LOGGING
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# 1. CREACIÓN AUTOMÁTICA DE TABLAS
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Aduana Back-office",
    description="Gestión de trámites de comercio exterior: procesos, documentos, presupuestos y facturación",
    version="1.0.0"
)

# 2. CONFIGURACIÓN DE CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 3. ARCHIVOS SUBIDOS
app.mount(settings.UPLOAD_BASE_URL, StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False), name="uploads")

# 4. REGISTRO DE ROUTERS (BACKEND API)
app.include_router(clients.router, prefix="/api/clients", tags=["👥 Clientes"])
app.include_router(agencies.router, prefix="/api/agencies", tags=["🏛️ Organismos"])
app.include_router(suppliers.router, prefix="/api/suppliers", tags=["🚚 Proveedores"])
app.include_router(pricing.router, prefix="/api/services", tags=["💲 Precios de Servicios"])
app.include_router(templates.router, prefix="/api/templates", tags=["📋 Plantillas de Trámites"])
app.include_router(processes.router, prefix="/api/processes", tags=["🗂️ Procesos"])
app.include_router(documents.router, prefix="/api/processes/{process_id}/documents", tags=["📄 Documentos"])
app.include_router(ai_validation.router, prefix="/api/ai-validations", tags=["🤖 Validación IA"])
app.include_router(invoices.router, prefix="/api/invoices", tags=["🧾 Facturación"])
app.include_router(budgets.router, prefix="/api/budgets", tags=["📝 Presupuestos"])
app.include_router(notifications.router, prefix="/api/notifications", tags=["🔔 Notificaciones"])
app.include_router(reports.router, prefix="/api/reports", tags=["📊 Reportes"])
app.include_router(settings_router.router, prefix="/api/settings", tags=["⚙️ Configuración"])


@app.get("/api/health")
def health():
    return {"status": "ok"}

# --- 5. MANEJO DE ERRORES ---
@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s -> %s", request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

@app.exception_handler(404)
async def not_found_exception_handler(request: Request, exc):
    # Rutas inexistentes o HTTPException(404): siempre JSON
    detail = getattr(exc, "detail", None) or "Recurso no encontrado"
    return JSONResponse(status_code=404, content={"detail": detail})
