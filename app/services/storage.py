# app/services/storage.py
"""
Almacenamiento de archivos de documentos.

El backend se inyecta con Depends(get_storage), así los tests pueden
reemplazarlo por uno que escriba en un directorio temporal.
"""
import asyncio
import logging
import os
import uuid
from abc import ABC, abstractmethod
from typing import Optional

from app.config import settings
from app.exceptions import PersistenceError, ValidationError

logger = logging.getLogger(__name__)


def validate_upload(filename: str, size: int) -> str:
    """Devuelve la extensión normalizada o levanta ValidationError."""
    name = (filename or "").strip()
    if not name:
        raise ValidationError("El archivo no tiene nombre")

    extension = os.path.splitext(name)[1].lower().lstrip(".")
    allowed = [e.lower() for e in settings.ALLOWED_UPLOAD_EXTENSIONS]
    if extension not in allowed:
        raise ValidationError(f"Formato inválido. Use: {', '.join(allowed)}")

    if size <= 0:
        raise ValidationError("Archivo vacío.")
    if size > settings.MAX_UPLOAD_BYTES:
        limit_mb = settings.MAX_UPLOAD_BYTES / (1024 * 1024)
        raise ValidationError(f"El archivo supera el máximo de {limit_mb:.0f}MB")

    return extension


class StorageBackend(ABC):
    @abstractmethod
    async def save(self, filename: str, content: bytes, content_type: Optional[str] = None) -> str:
        """Guarda el archivo y devuelve la URL pública."""


class LocalStorage(StorageBackend):
    def __init__(self, directory: str, base_url: str, delay: float = 0.0):
        self.directory = directory
        self.base_url = base_url.rstrip("/")
        self.delay = delay

    def _stored_name(self, filename: str) -> str:
        extension = os.path.splitext(filename)[1].lower()
        return f"{uuid.uuid4().hex}{extension}"

    def _write(self, path: str, content: bytes) -> None:
        os.makedirs(self.directory, exist_ok=True)
        with open(path, "wb") as fh:
            fh.write(content)

    async def save(self, filename: str, content: bytes, content_type: Optional[str] = None) -> str:
        if self.delay:
            await asyncio.sleep(self.delay)

        stored = self._stored_name(filename)
        path = os.path.join(self.directory, stored)
        try:
            await asyncio.to_thread(self._write, path, content)
        except OSError as e:
            logger.error("No se pudo escribir %s: %s", path, e)
            raise PersistenceError("No se pudo guardar el archivo") from e

        logger.info("Archivo %s guardado como %s (%d bytes)", filename, stored, len(content))
        return f"{self.base_url}/{stored}"


def get_storage() -> StorageBackend:
    return LocalStorage(settings.UPLOAD_DIR, settings.UPLOAD_BASE_URL, settings.UPLOAD_DELAY_SECONDS)
