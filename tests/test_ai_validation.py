import asyncio

import pytest

from app.config import settings
from app.crud import ai_validation as crud
from app.crud.processes import create_process
from app.exceptions import NotFoundError
from app.models import ValidationStatus, Notification, NotificationKind
from app.schemas.processes import ProcessCreate
from app.services.ai_validation import ValidationProvider, SimulatedValidationProvider
from app.services.storage import StorageBackend


class SlowProvider(ValidationProvider):
    async def analyze(self, document):
        await asyncio.sleep(1)
        return {"confidence": 90}


class BrokenProvider(ValidationProvider):
    async def analyze(self, document):
        raise RuntimeError("servicio caído")


@pytest.fixture
def document(seeded, alimentos):
    process = create_process(seeded, ProcessCreate(client_id=alimentos.id, template_id="senasa-cert"))
    return process.documents[0]


def _submit(db, document, provider):
    return asyncio.run(crud.submit_validation(db, document.id, provider))


def test_submit_completes_and_never_validates_document(seeded, document, provider):
    result = _submit(seeded, document, provider)

    assert result.status == ValidationStatus.COMPLETED
    assert 0 <= result.confidence <= 100
    assert result.extracted_fields["documento"] == document.name
    assert result.processed_at is not None
    seeded.refresh(document)
    assert document.validated is False

    kinds = [n.kind for n in seeded.query(Notification).all()]
    assert NotificationKind.AI_VALIDATION in kinds


def test_seeded_provider_is_deterministic(seeded, document):
    first = _submit(seeded, document, SimulatedValidationProvider(delay=0, seed=3))
    second = _submit(seeded, document, SimulatedValidationProvider(delay=0, seed=3))

    assert first.confidence == second.confidence
    assert first.detected_errors == second.detected_errors


def test_timeout_stores_error(seeded, document, monkeypatch):
    monkeypatch.setattr(settings, "AI_VALIDATION_TIMEOUT_SECONDS", 0.01)

    result = _submit(seeded, document, SlowProvider())

    assert result.status == ValidationStatus.ERROR
    assert result.error_message


def test_provider_failure_stores_error(seeded, document):
    result = _submit(seeded, document, BrokenProvider())

    assert result.status == ValidationStatus.ERROR
    assert result.error_message == "servicio caído"


def test_retry_creates_new_result(seeded, document, provider):
    _submit(seeded, document, BrokenProvider())
    retry = _submit(seeded, document, provider)

    results = crud.get_validations(seeded, document_id=document.id)
    assert len(results) == 2
    assert crud.latest_validation(seeded, document.id).id == retry.id
    assert retry.status == ValidationStatus.COMPLETED


def test_latest_without_results(seeded, document):
    with pytest.raises(NotFoundError):
        crud.latest_validation(seeded, document.id)


def test_backends_must_implement_their_interface():
    class NoAnalyze(ValidationProvider):
        pass

    class NoSave(StorageBackend):
        pass

    with pytest.raises(TypeError):
        NoAnalyze()
    with pytest.raises(TypeError):
        NoSave()
