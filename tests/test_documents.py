import asyncio

import pytest

from app.config import settings
from app.crud import documents as crud
from app.crud.processes import create_process
from app.exceptions import ConflictError, ValidationError
from app.models import DocumentStatus, CommentKind, Notification, NotificationKind
from app.schemas.processes import ProcessCreate, DocumentCreate, DocumentUpdate


@pytest.fixture
def process(seeded, alimentos):
    return create_process(seeded, ProcessCreate(client_id=alimentos.id, template_id="anmat-rnpa"))


def _upload(db, process, document, storage, filename="analisis.pdf", content=b"%PDF-1.4 contenido"):
    return asyncio.run(crud.upload_file(db, process.id, document.id, filename, content, storage))


def test_add_optional_document(seeded, process):
    document = crud.add_document(seeded, process.id, DocumentCreate(name="Poder notarial"))

    assert document.status == DocumentStatus.PENDING
    assert document.validated is False
    assert document.file_url is None
    assert process.comments[-1].kind == CommentKind.DOCUMENT_ADDED
    assert crud.get_stats(seeded, process.id)["total"] == 5


def test_upload_sets_file_and_status_but_not_validated(seeded, process, storage, tmp_path):
    document = process.documents[0]

    document = _upload(seeded, process, document, storage)

    assert document.file_url.startswith("/uploads/")
    assert document.uploaded_at is not None
    assert document.status == DocumentStatus.UPLOADED
    assert document.validated is False
    assert document.notes.startswith("Archivo cargado: analisis.pdf (")
    assert len(list(tmp_path.iterdir())) == 1

    kinds = [n.kind for n in seeded.query(Notification).all()]
    assert NotificationKind.DOCUMENT_UPLOADED in kinds


def test_upload_keeps_approved_status(seeded, process, storage):
    document = crud.update_document(
        seeded, process.id, process.documents[0].id, DocumentUpdate(status=DocumentStatus.APPROVED)
    )

    document = _upload(seeded, process, document, storage)

    assert document.status == DocumentStatus.APPROVED


def test_upload_rejects_bad_extension_and_size(seeded, process, storage, monkeypatch):
    document = process.documents[0]

    with pytest.raises(ValidationError):
        _upload(seeded, process, document, storage, filename="virus.exe")

    monkeypatch.setattr(settings, "MAX_UPLOAD_BYTES", 4)
    with pytest.raises(ValidationError):
        _upload(seeded, process, document, storage, content=b"12345")

    seeded.refresh(document)
    assert document.file_url is None


def test_concurrent_upload_for_same_document_is_rejected(seeded, process, storage):
    document = process.documents[0]

    with crud.upload_slot(document.id):
        with pytest.raises(ConflictError):
            _upload(seeded, process, document, storage)

    # Liberado el slot, la carga funciona
    assert _upload(seeded, process, document, storage).file_url is not None


def test_toggle_validated(seeded, process):
    document = process.documents[0]

    document = crud.toggle_validated(seeded, process.id, document.id)
    assert document.validated is True
    assert crud.get_stats(seeded, process.id)["completion"] == 25

    document = crud.toggle_validated(seeded, process.id, document.id)
    assert document.validated is False


def test_toggle_requires_file_when_configured(seeded, process, monkeypatch):
    monkeypatch.setattr(settings, "REQUIRE_FILE_FOR_VALIDATION", True)

    with pytest.raises(ValidationError):
        crud.toggle_validated(seeded, process.id, process.documents[0].id)


def test_auto_progress_follows_checklist(seeded, process, monkeypatch):
    monkeypatch.setattr(settings, "AUTO_PROGRESS_FROM_DOCUMENTS", True)

    for document in list(process.documents)[:2]:
        crud.toggle_validated(seeded, process.id, document.id)

    seeded.refresh(process)
    assert process.progress == 50


def test_remove_optional_document_shrinks_checklist(seeded, process):
    extra = crud.add_document(seeded, process.id, DocumentCreate(name="Fotos del producto"))
    before = crud.get_stats(seeded, process.id)["total"]

    with pytest.raises(ValidationError):
        crud.remove_document(seeded, process.id, extra.id)  # sin confirmar

    process = crud.remove_document(seeded, process.id, extra.id, confirm=True)

    assert crud.get_stats(seeded, process.id)["total"] == before - 1
    assert "Fotos del producto" not in [d.name for d in process.documents]


def test_remove_required_document_is_rejected_without_changes(seeded, process):
    required = process.documents[0]
    before = [d.id for d in process.documents]
    version = process.version

    with pytest.raises(ValidationError):
        crud.remove_document(seeded, process.id, required.id, confirm=True)

    seeded.refresh(process)
    assert [d.id for d in process.documents] == before
    assert process.version == version


def test_filters(seeded, process):
    crud.add_document(seeded, process.id, DocumentCreate(name="Opcional"))
    crud.toggle_validated(seeded, process.id, process.documents[0].id)

    assert len(crud.get_documents(seeded, process.id, "required")) == 4
    assert len(crud.get_documents(seeded, process.id, "validated")) == 1
    assert len(crud.get_documents(seeded, process.id, "pending")) == 4
    with pytest.raises(ValidationError):
        crud.get_documents(seeded, process.id, "otro")
