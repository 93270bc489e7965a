from datetime import date
from typing import Optional

from sqlalchemy.orm import Session
from sqlalchemy import func

from app.config import settings
from app.models import SequenceCounter, Invoice, Budget

# Serie -> modelo cuyo MAX(sequence) siembra el contador la primera vez
SERIES_MODELS = {
    "FAC": Invoice,
    "PRE": Budget,
}


def get_next_folio(db: Session, series: str = "FAC", year: Optional[int] = None) -> int:
    """
    Obtiene el siguiente folio para una serie y año.
    El contador vive en la tabla 'contadores'; si aún no existe se siembra con
    el MAX(sequence) de los documentos ya cargados para ese año.
    """
    year = year or date.today().year

    counter = db.query(SequenceCounter).filter(
        SequenceCounter.series == series,
        SequenceCounter.year == year
    ).with_for_update().first()

    if counter is None:
        seed = 0
        model = SERIES_MODELS.get(series)
        if model is not None:
            seed = db.query(func.max(model.sequence)).filter(model.year == year).scalar() or 0
        counter = SequenceCounter(series=series, year=year, last_value=seed)
        db.add(counter)

    counter.last_value += 1
    db.flush()
    return counter.last_value


def format_folio(series: str, year: int, sequence: int, padding: Optional[int] = None) -> str:
    """FAC-2024-001"""
    padding = padding if padding is not None else settings.INVOICE_NUMBER_PADDING
    return f"{series}-{year}-{str(sequence).zfill(padding)}"
