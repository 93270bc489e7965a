# app/dependencies.py
from typing import Optional

from fastapi import Header

from app.crud.base import actor_name


def get_actor(x_actor: Optional[str] = Header(None)) -> str:
    """
    Autor de la acción para comentarios e historial.
    No hay autenticación: se toma del encabezado X-Actor o del actor por defecto.
    """
    return actor_name(x_actor.strip() if x_actor else None)
