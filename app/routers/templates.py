# app/routers/templates.py
from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session
from typing import List, Optional

from app.database import get_db
from app.crud import templates as crud
from app.schemas.templates import TemplateCreate, TemplateRead, TemplateUpdate
from app.utils.reports import templates_to_csv

router = APIRouter()


@router.get("/", response_model=List[TemplateRead])
def get_templates(agency_name: Optional[str] = None, db: Session = Depends(get_db)):
    return crud.get_templates(db, agency_name=agency_name)

@router.get("/export")
def export_templates(agency_name: Optional[str] = None, db: Session = Depends(get_db)):
    """Exporta las plantillas a CSV."""
    content = templates_to_csv(crud.get_templates(db, agency_name=agency_name))
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=plantillas.csv"}
    )

@router.get("/{template_id}", response_model=TemplateRead)
def get_template(template_id: str, db: Session = Depends(get_db)):
    return crud.get_template(db, template_id)

@router.post("/", response_model=TemplateRead, status_code=201)
def create_template(template_in: TemplateCreate, db: Session = Depends(get_db)):
    return crud.create_template(db, template_in)

@router.put("/{template_id}", response_model=TemplateRead)
def update_template(template_id: str, template_in: TemplateUpdate, db: Session = Depends(get_db)):
    return crud.update_template(db, template_id, template_in)

@router.delete("/{template_id}", status_code=204)
def delete_template(template_id: str, db: Session = Depends(get_db)):
    crud.delete_template(db, template_id)
    return Response(status_code=204)
