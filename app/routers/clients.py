# app/routers/clients.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional

from app.database import get_db
from app.crud import clients as crud
from app.schemas.clients import ClientCreate, ClientRead, ClientUpdate
from app.schemas.invoices import InvoiceRead
from app.schemas.processes import ProcessRead
from app.routers.processes import to_process_read

router = APIRouter()

# --------------------------------------------------------------------------
# 1. LISTAR CLIENTES
# --------------------------------------------------------------------------
@router.get("/", response_model=List[ClientRead])
def get_clients(
    skip: int = 0,
    limit: int = 100,
    search: Optional[str] = None,  # Nombre, email o CUIT
    include_inactive: bool = False,
    db: Session = Depends(get_db),
):
    return crud.get_clients(db, search=search, include_inactive=include_inactive, skip=skip, limit=limit)

# --------------------------------------------------------------------------
# 2. OBTENER DETALLE
# --------------------------------------------------------------------------
@router.get("/{client_id}", response_model=ClientRead)
def get_client(client_id: int, db: Session = Depends(get_db)):
    return crud.get_client(db, client_id)

# --------------------------------------------------------------------------
# 3. CREAR CLIENTE
# --------------------------------------------------------------------------
@router.post("/", response_model=ClientRead, status_code=201)
def create_client(client_in: ClientCreate, db: Session = Depends(get_db)):
    return crud.create_client(db, client_in)

# --------------------------------------------------------------------------
# 4. ACTUALIZAR CLIENTE
# --------------------------------------------------------------------------
@router.put("/{client_id}", response_model=ClientRead)
def update_client(client_id: int, client_in: ClientUpdate, db: Session = Depends(get_db)):
    return crud.update_client(db, client_id, client_in)

# --------------------------------------------------------------------------
# 5. ELIMINAR (SOFT DELETE)
# --------------------------------------------------------------------------
@router.delete("/{client_id}", response_model=ClientRead)
def delete_client(client_id: int, db: Session = Depends(get_db)):
    return crud.delete_client(db, client_id)

# --------------------------------------------------------------------------
# 6. PROCESOS Y FACTURAS DEL CLIENTE
# --------------------------------------------------------------------------
@router.get("/{client_id}/processes", response_model=List[ProcessRead])
def get_client_processes(client_id: int, db: Session = Depends(get_db)):
    return [to_process_read(p) for p in crud.get_client_processes(db, client_id)]

@router.get("/{client_id}/invoices", response_model=List[InvoiceRead])
def get_client_invoices(client_id: int, db: Session = Depends(get_db)):
    return crud.get_client_invoices(db, client_id)
