# app/routers/budgets.py
from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date

from app.database import get_db
from app.dependencies import get_actor
from app.crud import budgets as crud
from app.models import BudgetStatus
from app.schemas.budgets import (
    BudgetCreate, BudgetUpdate, BudgetRead, BudgetStatusChange, BudgetProcessLink
)
from app.schemas.invoices import InvoiceRead

router = APIRouter()


@router.get("/", response_model=List[BudgetRead])
def get_budgets(
    status: Optional[BudgetStatus] = None,
    client_id: Optional[int] = None,
    search: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
):
    return crud.get_budgets(db, status=status, client_id=client_id, search=search, skip=skip, limit=limit)

@router.post("/expire", response_model=List[BudgetRead])
def expire_budgets(today: Optional[date] = None, db: Session = Depends(get_db)):
    return crud.expire_budgets(db, today=today)

@router.get("/{budget_id}", response_model=BudgetRead)
def get_budget(budget_id: int, db: Session = Depends(get_db)):
    return crud.get_budget(db, budget_id)

@router.post("/", response_model=BudgetRead, status_code=201)
def create_budget(budget_in: BudgetCreate, db: Session = Depends(get_db)):
    """Crea el presupuesto (encabezado + líneas en una sola transacción)."""
    return crud.create_budget(db, budget_in)

@router.put("/{budget_id}", response_model=BudgetRead)
def update_budget(budget_id: int, budget_in: BudgetUpdate, db: Session = Depends(get_db)):
    return crud.update_budget(db, budget_id, budget_in)

@router.patch("/{budget_id}/status", response_model=BudgetRead)
def change_status(budget_id: int, change: BudgetStatusChange, db: Session = Depends(get_db)):
    return crud.change_budget_status(db, budget_id, change.status)

@router.post("/{budget_id}/processes", response_model=BudgetRead)
def link_processes(budget_id: int, link: BudgetProcessLink, db: Session = Depends(get_db)):
    return crud.link_processes(db, budget_id, link.process_ids)

@router.post("/{budget_id}/convert-to-invoice", response_model=InvoiceRead, status_code=201)
def convert_to_invoice(budget_id: int, db: Session = Depends(get_db), actor: str = Depends(get_actor)):
    """Genera la factura del presupuesto. Un segundo intento devuelve 409."""
    return crud.convert_to_invoice(db, budget_id, actor)

@router.delete("/{budget_id}", status_code=204)
def delete_budget(budget_id: int, db: Session = Depends(get_db)):
    crud.delete_budget(db, budget_id)
    return Response(status_code=204)
