"""
Poblado inicial: organismos, plantillas de trámites, proveedores y precios.

Idempotente: solo crea lo que falta. Uso: python -m app.init_db
"""
import logging
from decimal import Decimal

from sqlalchemy.orm import Session

from app.database import SessionLocal, engine, Base
from app.models import (
    Agency, AgencyType, ProcedureTemplate, Supplier, SupplierCategory,
    ServicePrice, PriceHistory,
)

logger = logging.getLogger(__name__)

AGENCIES = [
    "ANMAT",
    "ANMaC",
    "Dirección Nacional de Reglamentos Técnicos",
    "ENACOM",
    "ENARGAS",
    "RENPRE",
    "Secretaría de Ambiente (Fauna/Flora CITES)",
    "SENASA",
]

TEMPLATES = [
    {
        "id": "anmat-rne",
        "name": "Registro Nacional de Establecimiento (RNE)",
        "agency_name": "ANMAT",
        "required_documents": [
            "Formulario de solicitud",
            "Plano del establecimiento",
            "Certificado de habilitación municipal",
            "Responsable técnico",
        ],
        "estimated_days": 30,
        "cost": Decimal("15000"),
    },
    {
        "id": "anmat-rnpa",
        "name": "Registro Nacional de Producto Alimenticio (RNPA)",
        "agency_name": "ANMAT",
        "required_documents": [
            "Formulario de solicitud",
            "Análisis bromatológico",
            "Etiqueta del producto",
            "Certificado de libre venta",
        ],
        "estimated_days": 45,
        "cost": Decimal("18000"),
    },
    {
        "id": "senasa-afidi",
        "name": "Autorización Fitosanitaria de Importación (AFIDI)",
        "agency_name": "SENASA",
        "required_documents": [
            "Solicitud AFIDI",
            "Factura proforma",
            "Análisis de riesgo de plagas",
            "Certificado fitosanitario",
        ],
        "estimated_days": 20,
        "cost": Decimal("8500"),
    },
    {
        "id": "senasa-cert",
        "name": "Certificación sanitaria/fitosanitaria",
        "agency_name": "SENASA",
        "required_documents": [
            "Solicitud de certificación",
            "Análisis de laboratorio",
            "Certificado de origen",
            "Inspección sanitaria",
        ],
        "estimated_days": 15,
        "cost": Decimal("12000"),
    },
    {
        "id": "enacom-hom",
        "name": "Registro/homologación equipos telecomunicaciones",
        "agency_name": "ENACOM",
        "required_documents": [
            "Solicitud de homologación",
            "Ensayos de compatibilidad",
            "Manual técnico",
            "Certificado de origen",
        ],
        "estimated_days": 45,
        "cost": Decimal("25000"),
    },
]

SUPPLIERS = [
    {
        "name": "Estudio Jurídico Asociados",
        "category": SupplierCategory.LEGAL,
        "tax_id": "30-12345678-9",
        "contact": "Dr. Juan Pérez",
        "phone": "+54 11 4567-8900",
        "email": "contacto@estudiojuridico.com",
        "address": "Av. Corrientes 1234, CABA",
    },
    {
        "name": "Laboratorio de Análisis SA",
        "category": SupplierCategory.LOGISTICS,
        "tax_id": "30-98765432-1",
        "contact": "Dra. María González",
        "phone": "+54 11 9876-5432",
        "email": "info@laboratorio.com",
        "address": "San Martín 567, Buenos Aires",
    },
]

SERVICES = [
    {
        "name": "Registro Nacional de Establecimiento (RNE)",
        "description": "Trámite completo para registro en ANMAT",
        "price": Decimal("15000.00"),
        "category": "Registros",
        "agency_name": "ANMAT",
        "template_id": "anmat-rne",
    },
    {
        "name": "Autorización Fitosanitaria de Importación (AFIDI)",
        "description": "Autorización SENASA para importación",
        "price": Decimal("8500.00"),
        "category": "Autorizaciones",
        "agency_name": "SENASA",
        "template_id": "senasa-afidi",
    },
]


def seed(db: Session) -> None:
    # 1. Organismos
    for name in AGENCIES:
        if not db.query(Agency).filter(Agency.name == name).first():
            db.add(Agency(name=name, agency_type=AgencyType.PUBLIC, is_active=True))
            logger.info("Organismo creado: %s", name)

    # 2. Plantillas (las predefinidas no son editables)
    for data in TEMPLATES:
        if db.get(ProcedureTemplate, data["id"]) is None:
            db.add(ProcedureTemplate(**data, editable=False))
            logger.info("Plantilla creada: %s", data["id"])

    # 3. Proveedores
    for data in SUPPLIERS:
        if not db.query(Supplier).filter(Supplier.name == data["name"]).first():
            db.add(Supplier(**data, is_active=True))
            logger.info("Proveedor creado: %s", data["name"])

    # 4. Precios de servicios
    for data in SERVICES:
        if not db.query(ServicePrice).filter(ServicePrice.name == data["name"]).first():
            service = ServicePrice(**data, is_active=True)
            service.history.append(PriceHistory(price=data["price"], reason="Alta inicial"))
            db.add(service)
            logger.info("Servicio creado: %s", data["name"])

    db.commit()


def init_db():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed(db)
    finally:
        db.close()
    logger.info("Seed finalizado")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    init_db()
