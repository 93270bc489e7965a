# app/routers/agencies.py
from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session
from typing import List, Optional

from app.database import get_db
from app.crud import agencies as crud
from app.schemas.agencies import AgencyCreate, AgencyRead, AgencyUpdate

router = APIRouter()


@router.get("/", response_model=List[AgencyRead])
def get_agencies(
    search: Optional[str] = None,
    include_inactive: bool = False,
    db: Session = Depends(get_db),
):
    return crud.get_agencies(db, include_inactive=include_inactive, search=search)

@router.get("/{agency_id}", response_model=AgencyRead)
def get_agency(agency_id: int, db: Session = Depends(get_db)):
    return crud.get_agency(db, agency_id)

@router.post("/", response_model=AgencyRead, status_code=201)
def create_agency(agency_in: AgencyCreate, db: Session = Depends(get_db)):
    return crud.create_agency(db, agency_in)

@router.put("/{agency_id}", response_model=AgencyRead)
def update_agency(agency_id: int, agency_in: AgencyUpdate, db: Session = Depends(get_db)):
    return crud.update_agency(db, agency_id, agency_in)

@router.delete("/{agency_id}", status_code=204)
def delete_agency(agency_id: int, db: Session = Depends(get_db)):
    """Se rechaza (409) mientras haya procesos que lo referencien."""
    crud.delete_agency(db, agency_id)
    return Response(status_code=204)
