from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from app.crud import budgets as crud
from app.crud.processes import create_process, delete_process, purge_deleted_processes
from app.exceptions import ConflictError, NotFoundError, ValidationError
from app.models import BudgetStatus, Invoice, Notification, NotificationKind
from app.schemas.budgets import BudgetCreate, BudgetUpdate
from app.schemas.invoices import ItemCreate, KnownClientRef, DenormalizedClientRef
from app.schemas.processes import ProcessCreate


def _budget(db, client_ref, **kwargs):
    data = {
        "client": client_ref,
        "operation_type": "Importación",
        "items": [ItemCreate(description="Gestión RNPA", quantity=1, unit_price=Decimal("18000"))],
        "issue_date": date(2024, 7, 1),
    }
    data.update(kwargs)
    return crud.create_budget(db, BudgetCreate(**data))


def test_create_budget(seeded, alimentos):
    budget = _budget(seeded, KnownClientRef(id=alimentos.id), template_ids=["anmat-rnpa"])

    assert budget.number == f"PRE-{date.today().year}-001"
    assert budget.status == BudgetStatus.DRAFT
    assert budget.total_amount == Decimal("21780.00")
    assert budget.expiry_date == date(2024, 7, 16)
    assert len(budget.items) == 1

    kinds = [n.kind for n in seeded.query(Notification).all()]
    assert NotificationKind.NEW_BUDGET in kinds


def test_unknown_template_is_rejected(seeded, alimentos):
    with pytest.raises(NotFoundError):
        _budget(seeded, KnownClientRef(id=alimentos.id), template_ids=["no-existe"])


def test_update_recomputes_totals(seeded):
    budget = _budget(seeded, DenormalizedClientRef(name="Prospecto"))

    budget = crud.update_budget(seeded, budget.id, BudgetUpdate(
        items=[ItemCreate(description="Consulta", quantity=2, unit_price=Decimal("50"))]
    ))

    assert budget.subtotal == Decimal("100.00")
    assert budget.total_amount == Decimal("121.00")


def test_link_processes(seeded, alimentos):
    budget = _budget(seeded, KnownClientRef(id=alimentos.id))
    process = create_process(seeded, ProcessCreate(client_id=alimentos.id, template_id="anmat-rnpa"))

    budget = crud.link_processes(seeded, budget.id, [process.id])
    budget = crud.link_processes(seeded, budget.id, [process.id])

    assert budget.process_ids == [process.id]
    seeded.refresh(process)
    assert process.budget_id == budget.id


def test_convert_to_invoice_once(seeded, alimentos):
    budget = _budget(seeded, KnownClientRef(id=alimentos.id))

    invoice = crud.convert_to_invoice(seeded, budget.id)

    assert invoice.number.startswith("FAC-")
    assert invoice.total_amount == budget.total_amount
    assert invoice.budget_id == budget.id
    seeded.refresh(budget)
    assert budget.invoice_id == invoice.id
    assert budget.status == BudgetStatus.APPROVED

    with pytest.raises(ConflictError):
        crud.convert_to_invoice(seeded, budget.id)
    assert seeded.query(Invoice).count() == 1


def test_rejected_budget_cannot_be_invoiced(seeded, alimentos):
    budget = _budget(seeded, KnownClientRef(id=alimentos.id))
    crud.change_budget_status(seeded, budget.id, BudgetStatus.REJECTED)

    with pytest.raises(ValidationError):
        crud.convert_to_invoice(seeded, budget.id)


def test_expire_budgets(seeded, alimentos):
    old = _budget(seeded, KnownClientRef(id=alimentos.id), expiry_date=date(2024, 7, 5))
    _budget(seeded, KnownClientRef(id=alimentos.id), expiry_date=date(2024, 9, 1))

    expired = crud.expire_budgets(seeded, today=date(2024, 8, 1))

    assert [b.id for b in expired] == [old.id]


def test_invoiced_budget_cannot_be_deleted(seeded, alimentos):
    budget = _budget(seeded, KnownClientRef(id=alimentos.id))
    crud.convert_to_invoice(seeded, budget.id)

    with pytest.raises(ConflictError):
        crud.delete_budget(seeded, budget.id)


def test_convert_ignores_deleted_processes(seeded, alimentos):
    budget = _budget(seeded, KnownClientRef(id=alimentos.id))
    process = create_process(seeded, ProcessCreate(client_id=alimentos.id, template_id="anmat-rnpa"))
    crud.link_processes(seeded, budget.id, [process.id])
    delete_process(seeded, process.id)

    invoice = crud.convert_to_invoice(seeded, budget.id)

    assert invoice.process_id is None
    assert invoice.budget_id == budget.id


def test_purge_unlinks_processes_from_budget(seeded, alimentos):
    budget = _budget(seeded, KnownClientRef(id=alimentos.id))
    kept = create_process(seeded, ProcessCreate(client_id=alimentos.id, template_id="anmat-rnpa"))
    removed = create_process(seeded, ProcessCreate(client_id=alimentos.id, template_id="anmat-rne"))
    crud.link_processes(seeded, budget.id, [kept.id, removed.id])

    delete_process(seeded, removed.id)
    removed.deleted_at = datetime.now() - timedelta(hours=1)
    seeded.commit()
    assert purge_deleted_processes(seeded) == 1

    seeded.refresh(budget)
    assert budget.process_ids == [kept.id]
    invoice = crud.convert_to_invoice(seeded, budget.id)
    assert invoice.process_id == kept.id
