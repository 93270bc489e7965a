from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from app.config import settings
from app.crud import invoices as crud
from app.crud.configuration import update_values
from app.crud.processes import create_process
from app.exceptions import ConflictError, NotFoundError
from app.models import InvoiceStatus, HistoryAction
from app.schemas.invoices import (
    InvoiceCreate, InvoiceUpdate, ItemCreate, KnownClientRef, DenormalizedClientRef,
)
from app.schemas.processes import ProcessCreate

ITEMS = [
    ItemCreate(description="Honorarios", quantity=2, unit_price=Decimal("1000")),
    ItemCreate(description="Gastos", quantity=1, unit_price=Decimal("500")),
]


def _invoice(db, client_ref, **kwargs):
    data = {"client": client_ref, "items": ITEMS, "issue_date": date(2024, 4, 1)}
    data.update(kwargs)
    return crud.create_invoice(db, InvoiceCreate(**data))


def test_create_computes_totals_and_number(seeded, alimentos):
    invoice = _invoice(seeded, KnownClientRef(id=alimentos.id))

    assert invoice.number == f"FAC-{date.today().year}-001"
    assert invoice.subtotal == Decimal("2500.00")
    assert invoice.tax_amount == Decimal("525.00")
    assert invoice.total_amount == Decimal("3025.00")
    assert invoice.client_name == "Alimentos SA"
    assert invoice.due_date == date(2024, 5, 1)
    assert [h.action for h in invoice.history] == [HistoryAction.CREATE]


def test_numbers_strictly_increase(seeded):
    numbers = [
        _invoice(seeded, DenormalizedClientRef(name=f"Cliente {i}")).number for i in range(3)
    ]
    year = date.today().year
    assert numbers == [f"FAC-{year}-001", f"FAC-{year}-002", f"FAC-{year}-003"]


def test_denormalized_client_has_no_id(seeded):
    invoice = _invoice(seeded, DenormalizedClientRef(name="Consumidor ocasional"))

    assert invoice.client_id is None
    assert invoice.client_name == "Consumidor ocasional"


def test_unknown_client_id_is_rejected(seeded):
    with pytest.raises(NotFoundError):
        _invoice(seeded, KnownClientRef(id=404))


def test_vat_rate_from_settings_when_configured(seeded, alimentos, monkeypatch):
    update_values(seeded, {"vat_percentage": Decimal("10.5")})

    fixed = _invoice(seeded, KnownClientRef(id=alimentos.id))
    assert fixed.tax_amount == Decimal("525.00")

    monkeypatch.setattr(settings, "VAT_SOURCE", "settings")
    configured = _invoice(seeded, KnownClientRef(id=alimentos.id))
    assert configured.tax_amount == Decimal("262.50")


def test_linking_process_marks_it_invoiced(seeded, alimentos):
    process = create_process(seeded, ProcessCreate(client_id=alimentos.id, template_id="anmat-rne"))

    _invoice(seeded, KnownClientRef(id=alimentos.id), process_id=process.id)

    seeded.refresh(process)
    assert process.invoiced is True


def test_status_change_adds_one_history_entry(seeded, alimentos):
    invoice = _invoice(seeded, KnownClientRef(id=alimentos.id), status=InvoiceStatus.SENT)
    before = len(invoice.history)

    invoice = crud.change_status(seeded, invoice.id, InvoiceStatus.PAID, actor="Tesorería")

    assert len(invoice.history) == before + 1
    entry = invoice.history[-1]
    assert entry.action == HistoryAction.STATUS_CHANGE
    assert entry.before_data == {"status": "enviada"}
    assert entry.after_data == {"status": "pagada"}
    assert entry.actor == "Tesorería"


def test_edit_keeps_before_and_after_snapshots(seeded, alimentos):
    invoice = _invoice(seeded, KnownClientRef(id=alimentos.id))

    invoice = crud.update_invoice(seeded, invoice.id, InvoiceUpdate(
        items=[ItemCreate(description="Honorarios", quantity=1, unit_price=Decimal("100"))],
        notes="Ajuste",
        version=1,
    ))

    assert invoice.total_amount == Decimal("121.00")
    entry = invoice.history[-1]
    assert entry.action == HistoryAction.EDIT
    assert entry.before_data["total_amount"] == "3025.00"
    assert entry.after_data["total_amount"] == "121.00"
    assert len(entry.after_data["items"]) == 1


def test_edit_with_stale_version_conflicts(seeded, alimentos):
    invoice = _invoice(seeded, KnownClientRef(id=alimentos.id))
    crud.update_invoice(seeded, invoice.id, InvoiceUpdate(notes="primera", version=1))

    with pytest.raises(ConflictError):
        crud.update_invoice(seeded, invoice.id, InvoiceUpdate(notes="segunda", version=1))


def test_delete_and_restore(seeded, alimentos):
    invoice = _invoice(seeded, KnownClientRef(id=alimentos.id))

    crud.delete_invoice(seeded, invoice.id)
    assert crud.get_invoices(seeded) == []

    invoice = crud.restore_invoice(seeded, invoice.id)
    actions = [h.action for h in crud.get_history(seeded, invoice.id)]
    assert actions == [HistoryAction.CREATE, HistoryAction.DELETE, HistoryAction.RESTORE]


def test_restore_after_window_expired(seeded, alimentos):
    invoice = _invoice(seeded, KnownClientRef(id=alimentos.id))
    crud.delete_invoice(seeded, invoice.id)
    invoice.deleted_at = datetime.now() - timedelta(minutes=10)
    seeded.commit()

    with pytest.raises(ConflictError):
        crud.restore_invoice(seeded, invoice.id)


def test_refresh_overdue(seeded, alimentos):
    sent = _invoice(seeded, KnownClientRef(id=alimentos.id), status=InvoiceStatus.SENT,
                    due_date=date(2024, 4, 10))
    draft = _invoice(seeded, KnownClientRef(id=alimentos.id), due_date=date(2024, 4, 10))

    updated = crud.refresh_overdue(seeded, today=date(2024, 5, 1))

    assert [i.id for i in updated] == [sent.id]
    seeded.refresh(draft)
    assert draft.status == InvoiceStatus.DRAFT
    assert crud.get_invoice(seeded, sent.id).status == InvoiceStatus.OVERDUE


def test_back_dated_invoice_uses_current_year_series(seeded):
    invoice = _invoice(seeded, DenormalizedClientRef(name="Importadora Sur"), issue_date=date(2019, 12, 30))

    assert invoice.number == f"FAC-{date.today().year}-001"
    assert invoice.issue_date == date(2019, 12, 30)


def test_moving_invoice_releases_previous_process(seeded, alimentos):
    first = create_process(seeded, ProcessCreate(client_id=alimentos.id, template_id="anmat-rne"))
    second = create_process(seeded, ProcessCreate(client_id=alimentos.id, template_id="senasa-afidi"))
    invoice = _invoice(seeded, KnownClientRef(id=alimentos.id), process_id=first.id)

    crud.update_invoice(seeded, invoice.id, InvoiceUpdate(process_id=second.id))

    seeded.refresh(first)
    seeded.refresh(second)
    assert first.invoiced is False
    assert second.invoiced is True


def test_process_stays_invoiced_while_another_invoice_references_it(seeded, alimentos):
    process = create_process(seeded, ProcessCreate(client_id=alimentos.id, template_id="anmat-rne"))
    invoice = _invoice(seeded, KnownClientRef(id=alimentos.id), process_id=process.id)
    _invoice(seeded, KnownClientRef(id=alimentos.id), process_id=process.id)

    crud.update_invoice(seeded, invoice.id, InvoiceUpdate(process_id=None))

    seeded.refresh(process)
    assert process.invoiced is True
