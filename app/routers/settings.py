# app/routers/settings.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.crud import configuration as crud
from app.schemas.settings import SettingsRead, SettingsUpdate

router = APIRouter()


def _read(db: Session) -> SettingsRead:
    return SettingsRead(
        **crud.get_values(db),
        effective_vat_rate=crud.effective_vat_rate(db),
        vat_source=settings.VAT_SOURCE,
    )

@router.get("/", response_model=SettingsRead)
def get_settings(db: Session = Depends(get_db)):
    return _read(db)

@router.put("/", response_model=SettingsRead)
def update_settings(settings_in: SettingsUpdate, db: Session = Depends(get_db)):
    crud.update_values(db, settings_in.model_dump(exclude_unset=True))
    return _read(db)
