from datetime import date
from decimal import Decimal

import pytest

from app.crud import clients as crud_clients
from app.crud import agencies as crud_agencies
from app.crud import suppliers as crud_suppliers
from app.crud import pricing as crud_pricing
from app.crud import templates as crud_templates
from app.crud import notifications as crud_notifications
from app.crud.configuration import update_values
from app.crud.processes import create_process
from app.exceptions import ConflictError, ValidationError
from app.models import SupplierInvoiceStatus, NotificationKind
from app.schemas.agencies import AgencyCreate, AgencyUpdate
from app.schemas.clients import ClientCreate, ClientUpdate
from app.schemas.pricing import ServicePriceCreate, ServicePriceUpdate
from app.schemas.processes import ProcessCreate
from app.schemas.suppliers import SupplierInvoiceCreate
from app.schemas.templates import TemplateCreate, TemplateUpdate


# -----------------------------
# Clientes
# -----------------------------
def test_duplicate_tax_id_conflicts(seeded, alimentos):
    with pytest.raises(ConflictError):
        crud_clients.create_client(seeded, ClientCreate(name="Otro", tax_id=alimentos.tax_id))


def test_client_soft_delete_hides_from_default_list(seeded, alimentos):
    crud_clients.delete_client(seeded, alimentos.id)

    assert crud_clients.get_clients(seeded) == []
    assert [c.id for c in crud_clients.get_clients(seeded, include_inactive=True)] == [alimentos.id]


def test_client_search(seeded, alimentos):
    crud_clients.create_client(seeded, ClientCreate(name="Textil Norte"))

    assert [c.name for c in crud_clients.get_clients(seeded, search="aliment")] == ["Alimentos SA"]
    assert [c.name for c in crud_clients.get_clients(seeded, search="30-1111")] == ["Alimentos SA"]


# -----------------------------
# Organismos
# -----------------------------
def test_agency_in_use_cannot_be_deleted(seeded, alimentos, anmat):
    create_process(seeded, ProcessCreate(client_id=alimentos.id, template_id="anmat-rne"))

    with pytest.raises(ConflictError):
        crud_agencies.delete_agency(seeded, anmat.id)


def test_duplicate_agency_name(seeded):
    with pytest.raises(ConflictError):
        crud_agencies.create_agency(seeded, AgencyCreate(name="SENASA"))


# -----------------------------
# Proveedores
# -----------------------------
def test_supplier_invoice_amounts(seeded):
    supplier = crud_suppliers.get_suppliers(seeded)[0]

    invoice = crud_suppliers.create_supplier_invoice(seeded, SupplierInvoiceCreate(
        supplier_id=supplier.id,
        number="A-0001-00001234",
        issue_date=date(2024, 3, 1),
        concept="Análisis de laboratorio",
        subtotal=Decimal("1000"),
    ))

    assert invoice.status == SupplierInvoiceStatus.PENDING
    assert invoice.tax_amount == Decimal("210.00")
    assert invoice.total_amount == Decimal("1210.00")

    invoice = crud_suppliers.change_supplier_invoice_status(seeded, invoice.id, SupplierInvoiceStatus.PAID)
    assert [i.id for i in crud_suppliers.get_supplier_invoices(seeded, status=SupplierInvoiceStatus.PAID)] == [invoice.id]


# -----------------------------
# Precios
# -----------------------------
def test_price_change_records_history(seeded):
    service = crud_pricing.create_service(seeded, ServicePriceCreate(
        name="Certificado de Libre Venta", price=Decimal("9000"), category="Certificados"
    ))

    service = crud_pricing.update_service(seeded, service.id, ServicePriceUpdate(price=Decimal("9500"), reason="Ajuste"))
    service = crud_pricing.update_service(seeded, service.id, ServicePriceUpdate(description="Sin cambio de precio"))

    assert [(h.price, h.reason) for h in service.history] == [
        (Decimal("9000.00"), "Alta inicial"),
        (Decimal("9500.00"), "Ajuste"),
    ]


def test_bulk_increase_rounds_to_whole_units(seeded):
    crud_pricing.create_service(seeded, ServicePriceCreate(
        name="Consulta", price=Decimal("1234"), category="Registros"
    ))

    services = crud_pricing.apply_increase(seeded, Decimal("10"), category="Registros")

    prices = {s.name: s.price for s in services}
    assert prices["Consulta"] == Decimal("1357")  # 1357.4
    assert prices["Registro Nacional de Establecimiento (RNE)"] == Decimal("16500")
    afidi = crud_pricing.find_price_for_template(seeded, "senasa-afidi")
    assert afidi.price == Decimal("8500")  # otra categoría
    assert all(s.history[-1].reason == "Aumento 10%" for s in services)


def test_inactive_services_are_not_increased(seeded):
    service = crud_pricing.find_price_for_template(seeded, "anmat-rne")
    crud_pricing.update_service(seeded, service.id, ServicePriceUpdate(is_active=False))

    services = crud_pricing.apply_increase(seeded, Decimal("50"))

    assert service.id not in [s.id for s in services]
    assert crud_pricing.find_price_for_template(seeded, "anmat-rne") is None


# -----------------------------
# Plantillas
# -----------------------------
def test_builtin_templates_are_read_only(seeded):
    with pytest.raises(ConflictError):
        crud_templates.update_template(seeded, "anmat-rne", TemplateUpdate(estimated_days=10))
    with pytest.raises(ConflictError):
        crud_templates.delete_template(seeded, "anmat-rne")


def test_custom_template_lifecycle(seeded):
    template = crud_templates.create_template(seeded, TemplateCreate(
        id="inal-rnpa", name="RNPA INAL", agency_name="ANMAT",
        required_documents=["Formulario"], estimated_days=10,
    ))
    assert template.editable is True

    template = crud_templates.update_template(seeded, template.id, TemplateUpdate(estimated_days=12))
    assert template.estimated_days == 12

    crud_templates.delete_template(seeded, template.id)
    assert "inal-rnpa" not in [t.id for t in crud_templates.get_templates(seeded)]


# -----------------------------
# Notificaciones
# -----------------------------
def test_notifications_read_flow(seeded, alimentos):
    create_process(seeded, ProcessCreate(client_id=alimentos.id, template_id="enacom-hom"))

    assert crud_notifications.unread_count(seeded) == 3  # cliente, proceso, precio faltante

    missing = crud_notifications.list_notifications(seeded, kind=NotificationKind.MISSING_PRICE)[0]
    crud_notifications.mark_read(seeded, missing.id)
    assert crud_notifications.unread_count(seeded) == 2

    assert crud_notifications.mark_all_read(seeded) == 2
    assert crud_notifications.list_notifications(seeded, unread_only=True) == []

    crud_notifications.delete_notification(seeded, missing.id)
    assert len(crud_notifications.list_notifications(seeded)) == 2


def test_new_process_notification_can_be_disabled(seeded, alimentos):
    update_values(seeded, {"notify_new_processes": False})

    create_process(seeded, ProcessCreate(client_id=alimentos.id, template_id="anmat-rne"))

    assert crud_notifications.list_notifications(seeded, kind=NotificationKind.NEW_PROCESS) == []


def test_catalog_updates_cannot_clear_required_fields(seeded, alimentos, anmat):
    with pytest.raises(ValidationError):
        crud_clients.update_client(seeded, alimentos.id, ClientUpdate(name=None))
    with pytest.raises(ValidationError):
        crud_agencies.update_agency(seeded, anmat.id, AgencyUpdate(is_active=None))

    service = crud_pricing.find_price_for_template(seeded, "anmat-rne")
    with pytest.raises(ValidationError):
        crud_pricing.update_service(seeded, service.id, ServicePriceUpdate(price=None))
    assert crud_pricing.get_service(seeded, service.id).price == Decimal("15000")
