# app/routers/documents.py
from fastapi import APIRouter, Depends, UploadFile, File
from sqlalchemy.orm import Session
from typing import List

from app.database import get_db
from app.dependencies import get_actor
from app.crud import documents as crud
from app.schemas.processes import DocumentCreate, DocumentRead, DocumentUpdate, ChecklistStats, ProcessRead
from app.services.storage import StorageBackend, get_storage
from app.routers.processes import to_process_read

router = APIRouter()


@router.get("/", response_model=List[DocumentRead])
def get_documents(process_id: int, filter_by: str = "all", db: Session = Depends(get_db)):
    """filter_by: all | required | validated | pending"""
    return crud.get_documents(db, process_id, filter_by)

@router.get("/stats", response_model=ChecklistStats)
def get_stats(process_id: int, db: Session = Depends(get_db)):
    return crud.get_stats(db, process_id)

@router.post("/", response_model=DocumentRead, status_code=201)
def add_document(
    process_id: int,
    doc_in: DocumentCreate,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    return crud.add_document(db, process_id, doc_in, actor)

@router.post("/{document_id}/upload", response_model=DocumentRead)
async def upload_file(
    process_id: int,
    document_id: int,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    storage: StorageBackend = Depends(get_storage),
    actor: str = Depends(get_actor),
):
    contents = await file.read()
    return await crud.upload_file(
        db, process_id, document_id,
        filename=file.filename or "",
        content=contents,
        storage=storage,
        content_type=file.content_type,
        actor=actor,
    )

@router.post("/{document_id}/toggle", response_model=DocumentRead)
def toggle_validated(
    process_id: int,
    document_id: int,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    return crud.toggle_validated(db, process_id, document_id, actor)

@router.patch("/{document_id}", response_model=DocumentRead)
def update_document(
    process_id: int,
    document_id: int,
    doc_in: DocumentUpdate,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    return crud.update_document(db, process_id, document_id, doc_in, actor)

@router.delete("/{document_id}", response_model=ProcessRead)
def remove_document(
    process_id: int,
    document_id: int,
    confirm: bool = False,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor),
):
    """Solo documentos opcionales y con confirm=true."""
    return to_process_read(crud.remove_document(db, process_id, document_id, confirm, actor))
