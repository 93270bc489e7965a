from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from app.config import settings
from app.crud import processes as crud
from app.exceptions import ConflictError, NotFoundError, ValidationError
from app.models import (
    Process, ProcessComment, ProcessState, CommentKind, Notification, NotificationKind, BOARD_ORDER,
)
from app.schemas.processes import ProcessCreate, ProcessUpdate, DocumentCreate


def _create(db, client, agency=None, **kwargs):
    data = {"client_id": client.id, "title": "Importación de galletitas"}
    if agency is not None:
        data["agency_id"] = agency.id
    data.update(kwargs)
    return crud.create_process(db, ProcessCreate(**data))


def _state_comments(process):
    return [c for c in process.comments if c.kind == CommentKind.STATE_CHANGE]


def test_create_plain_process(seeded, alimentos, anmat):
    process = _create(
        seeded, alimentos, anmat,
        documents=[DocumentCreate(name="Factura comercial", required=True)],
        start_date=date(2024, 5, 1),
    )

    assert process.state == ProcessState.PENDING
    assert process.progress == 0
    assert process.version == 1
    assert [d.name for d in process.documents] == ["Factura comercial"]
    assert process.documents[0].validated is False

    kinds = [n.kind for n in seeded.query(Notification).all()]
    assert NotificationKind.NEW_PROCESS in kinds


def test_create_from_template_seeds_agency_documents_and_due_date(seeded, alimentos, anmat):
    process = crud.create_process(seeded, ProcessCreate(
        client_id=alimentos.id,
        template_id="anmat-rne",
        start_date=date(2024, 1, 10),
    ))

    assert process.title == "Registro Nacional de Establecimiento (RNE)"
    assert process.agency_id == anmat.id
    assert len(process.documents) == 4
    assert all(d.required for d in process.documents)
    assert process.due_date == date(2024, 2, 9)
    assert process.cost == Decimal("15000")


def test_template_without_price_notifies_missing_price(seeded, alimentos):
    crud.create_process(seeded, ProcessCreate(client_id=alimentos.id, template_id="enacom-hom"))

    kinds = [n.kind for n in seeded.query(Notification).all()]
    assert NotificationKind.MISSING_PRICE in kinds


def test_template_with_price_does_not_notify_missing_price(seeded, alimentos):
    crud.create_process(seeded, ProcessCreate(client_id=alimentos.id, template_id="senasa-afidi"))

    kinds = [n.kind for n in seeded.query(Notification).all()]
    assert NotificationKind.MISSING_PRICE not in kinds


def test_create_requires_agency_or_template(seeded, alimentos):
    with pytest.raises(ValidationError):
        _create(seeded, alimentos)


def test_create_with_unknown_client(seeded, anmat):
    with pytest.raises(NotFoundError):
        crud.create_process(seeded, ProcessCreate(client_id=999, agency_id=anmat.id, title="X"))


def test_due_date_before_start_is_rejected(seeded, alimentos, anmat):
    with pytest.raises(ValidationError):
        _create(seeded, alimentos, anmat, start_date=date(2024, 5, 10), due_date=date(2024, 5, 1))


def test_state_change_appends_exactly_one_comment(seeded, alimentos, anmat):
    process = _create(seeded, alimentos, anmat)
    before = len(process.comments)

    process = crud.change_state(seeded, process.id, ProcessState.SUBMITTED, actor="Ana")

    assert process.state == ProcessState.SUBMITTED
    assert len(process.comments) == before + 1
    comments = _state_comments(process)
    assert len(comments) == 1
    assert comments[0].previous_value == "pendiente"
    assert comments[0].new_value == "enviado"
    assert comments[0].content == "Estado cambiado de Pendiente a Enviado"
    assert comments[0].author == "Ana"


def test_any_state_can_reach_any_other(seeded, alimentos, anmat):
    process = _create(seeded, alimentos, anmat)
    process = crud.change_state(seeded, process.id, ProcessState.ARCHIVED)
    process = crud.change_state(seeded, process.id, ProcessState.DOCUMENT_COLLECTION)

    assert process.state == ProcessState.DOCUMENT_COLLECTION
    assert len(_state_comments(process)) == 2


def test_state_change_with_stale_version_conflicts(seeded, alimentos, anmat):
    process = _create(seeded, alimentos, anmat)
    crud.change_state(seeded, process.id, ProcessState.SUBMITTED, version=1)

    with pytest.raises(ConflictError):
        crud.change_state(seeded, process.id, ProcessState.UNDER_REVIEW, version=1)


def test_advance_and_retreat_follow_board_order(seeded, alimentos, anmat):
    process = _create(seeded, alimentos, anmat)

    process = crud.move_process(seeded, process.id, 1)
    assert process.state == BOARD_ORDER[1]

    process = crud.move_process(seeded, process.id, -1)
    assert process.state == BOARD_ORDER[0]

    with pytest.raises(ValidationError):
        crud.move_process(seeded, process.id, -1)


@pytest.mark.parametrize("value", [-1, 101])
def test_progress_out_of_bounds_is_rejected(seeded, alimentos, anmat, value):
    process = _create(seeded, alimentos, anmat)

    with pytest.raises(ValidationError):
        crud.set_progress(seeded, process.id, value)

    seeded.refresh(process)
    assert process.progress == 0


def test_update_records_changed_fields(seeded, alimentos, anmat):
    process = _create(seeded, alimentos, anmat)

    process = crud.update_process(seeded, process.id, ProcessUpdate(progress=50, notes="Llamar al cliente"))

    assert process.progress == 50
    assert process.version == 2
    assert process.comments[-1].content == "Proceso actualizado: progreso, notas"


def test_recalculate_progress_from_documents(seeded, alimentos):
    process = crud.create_process(seeded, ProcessCreate(client_id=alimentos.id, template_id="anmat-rne"))
    process.documents[0].validated = True
    seeded.commit()

    process = crud.recalculate_progress(seeded, process.id)

    assert process.progress == 25


def test_soft_delete_and_restore(seeded, alimentos, anmat):
    process = _create(seeded, alimentos, anmat)

    crud.delete_process(seeded, process.id)
    with pytest.raises(NotFoundError):
        crud.get_process(seeded, process.id)
    assert crud.get_processes(seeded) == []

    restored = crud.restore_process(seeded, process.id)
    assert restored.deleted_at is None
    assert crud.get_process(seeded, process.id).id == process.id


def test_restore_after_undo_window_expires(seeded, alimentos, anmat):
    process = _create(seeded, alimentos, anmat)
    crud.delete_process(seeded, process.id)
    process.deleted_at = datetime.now() - timedelta(seconds=settings.UNDO_WINDOW_SECONDS + 5)
    seeded.commit()

    with pytest.raises(ConflictError):
        crud.restore_process(seeded, process.id)


def test_purge_removes_documents_and_comments(seeded, alimentos):
    process = crud.create_process(seeded, ProcessCreate(client_id=alimentos.id, template_id="anmat-rne"))
    crud.delete_process(seeded, process.id)
    process.deleted_at = datetime.now() - timedelta(hours=1)
    seeded.commit()

    assert crud.purge_deleted_processes(seeded) == 1
    assert seeded.query(Process).count() == 0
    assert seeded.query(ProcessComment).count() == 0


def test_board_always_has_seven_columns(seeded, alimentos, anmat):
    process = _create(seeded, alimentos, anmat)
    crud.change_state(seeded, process.id, ProcessState.APPROVED)

    columns = crud.board(seeded)

    assert list(columns) == BOARD_ORDER
    assert [p.id for p in columns[ProcessState.APPROVED]] == [process.id]
    assert columns[ProcessState.PENDING] == []


def test_filters(seeded, alimentos, anmat):
    _create(seeded, alimentos, anmat, title="Alta RNPA", tags=["urgente-cliente"])
    _create(seeded, alimentos, anmat, title="Habilitación", responsible="Carla")

    assert [p.title for p in crud.get_processes(seeded, search="rnpa")] == ["Alta RNPA"]
    assert [p.title for p in crud.get_processes(seeded, tag="urgente-cliente")] == ["Alta RNPA"]
    assert [p.title for p in crud.get_processes(seeded, responsible="carla")] == ["Habilitación"]


def test_due_processes_skip_closed_ones(seeded, alimentos, anmat):
    today = date(2024, 6, 1)
    soon = _create(seeded, alimentos, anmat, start_date=date(2024, 5, 1), due_date=date(2024, 6, 3))
    late = _create(seeded, alimentos, anmat, start_date=date(2024, 5, 1), due_date=date(2024, 5, 20))
    done = _create(seeded, alimentos, anmat, start_date=date(2024, 5, 1), due_date=date(2024, 6, 2))
    crud.change_state(seeded, done.id, ProcessState.APPROVED)
    _create(seeded, alimentos, anmat, start_date=date(2024, 5, 1), due_date=date(2024, 8, 1))

    due = crud.due_processes(seeded, days=7, today=today)

    assert [(p.id, days) for p, days in due] == [(late.id, -12), (soon.id, 2)]


def test_calendar_groups_by_due_date(seeded, alimentos, anmat):
    _create(seeded, alimentos, anmat, start_date=date(2024, 2, 1), due_date=date(2024, 2, 15))
    _create(seeded, alimentos, anmat, start_date=date(2024, 2, 1), due_date=date(2024, 2, 15))
    _create(seeded, alimentos, anmat, start_date=date(2024, 2, 1), due_date=date(2024, 3, 1))

    days = crud.calendar(seeded, 2024, 2)

    assert list(days) == [date(2024, 2, 15)]
    assert len(days[date(2024, 2, 15)]) == 2


@pytest.mark.parametrize("field", ["title", "priority", "needs_sample", "invoiced", "start_date"])
def test_update_cannot_clear_required_fields(seeded, alimentos, anmat, field):
    process = _create(seeded, alimentos, anmat)

    with pytest.raises(ValidationError):
        crud.update_process(seeded, process.id, ProcessUpdate(**{field: None}))
