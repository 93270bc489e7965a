# app/routers/ai_validation.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional

from app.database import get_db
from app.crud import ai_validation as crud
from app.models import ValidationStatus
from app.schemas.ai_validation import AIValidationRead
from app.services.ai_validation import ValidationProvider, get_validation_provider

router = APIRouter()


@router.get("/", response_model=List[AIValidationRead])
def get_validations(
    document_id: Optional[int] = None,
    status: Optional[ValidationStatus] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
):
    return crud.get_validations(db, document_id=document_id, status=status, skip=skip, limit=limit)

@router.get("/documents/{document_id}/latest", response_model=AIValidationRead)
def get_latest(document_id: int, db: Session = Depends(get_db)):
    return crud.latest_validation(db, document_id)

@router.post("/documents/{document_id}", response_model=AIValidationRead, status_code=201)
async def submit_validation(
    document_id: int,
    db: Session = Depends(get_db),
    provider: ValidationProvider = Depends(get_validation_provider),
):
    """Envía (o reenvía) el documento al validador. Cada envío crea un resultado nuevo."""
    return await crud.submit_validation(db, document_id, provider)

@router.get("/{validation_id}", response_model=AIValidationRead)
def get_validation(validation_id: int, db: Session = Depends(get_db)):
    return crud.get_validation(db, validation_id)
