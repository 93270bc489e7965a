# app/models/settings.py
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, JSON, UniqueConstraint
from app.database import Base


class AppSetting(Base):
    """Configuración editable por el operador (clave -> valor JSON)."""
    __tablename__ = "configuracion"
    __table_args__ = {'extend_existing': True}

    key = Column(String, primary_key=True)
    value = Column(JSON, nullable=True)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)


class SequenceCounter(Base):
    """Contador de folios por serie y año (FAC, PRE)."""
    __tablename__ = "contadores"
    __table_args__ = (
        UniqueConstraint("series", "year", name="uq_contadores_series_year"),
        {'extend_existing': True},
    )

    id = Column(Integer, primary_key=True, index=True)
    series = Column(String, nullable=False)
    year = Column(Integer, nullable=False)
    last_value = Column(Integer, default=0, nullable=False)
