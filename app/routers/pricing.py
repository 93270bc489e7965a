# app/routers/pricing.py
from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session
from typing import List, Optional

from app.database import get_db
from app.crud import pricing as crud
from app.schemas.pricing import (
    ServicePriceCreate, ServicePriceRead, ServicePriceUpdate, PriceIncrease, PriceHistoryRead
)

router = APIRouter()


@router.get("/", response_model=List[ServicePriceRead])
def get_services(
    category: Optional[str] = None,
    search: Optional[str] = None,
    include_inactive: bool = False,
    db: Session = Depends(get_db),
):
    return crud.get_services(db, category=category, include_inactive=include_inactive, search=search)

@router.post("/increase", response_model=List[ServicePriceRead])
def apply_increase(increase: PriceIncrease, db: Session = Depends(get_db)):
    """Aumento masivo (por categoría o a todos los servicios activos)."""
    return crud.apply_increase(
        db, increase.percentage, category=increase.category, reason=increase.reason
    )

@router.get("/{service_id}", response_model=ServicePriceRead)
def get_service(service_id: int, db: Session = Depends(get_db)):
    return crud.get_service(db, service_id)

@router.get("/{service_id}/history", response_model=List[PriceHistoryRead])
def get_price_history(service_id: int, db: Session = Depends(get_db)):
    return crud.get_service(db, service_id).history

@router.post("/", response_model=ServicePriceRead, status_code=201)
def create_service(service_in: ServicePriceCreate, db: Session = Depends(get_db)):
    return crud.create_service(db, service_in)

@router.put("/{service_id}", response_model=ServicePriceRead)
def update_service(service_id: int, service_in: ServicePriceUpdate, db: Session = Depends(get_db)):
    return crud.update_service(db, service_id, service_in)

@router.delete("/{service_id}", status_code=204)
def delete_service(service_id: int, db: Session = Depends(get_db)):
    crud.delete_service(db, service_id)
    return Response(status_code=204)
