"""
Configuración de la aplicación usando pydantic-settings.

Se carga desde variables de entorno y un archivo .env opcional.
"""

from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Parámetros de la aplicación leídos del entorno"""

    # Base de datos
    DATABASE_URL: str = Field(
        default="sqlite:///./aduana.db",
        description="URL de conexión SQLAlchemy",
    )
    DATABASE_ANON_KEY: Optional[str] = Field(
        default=None,
        description="Clave pública anónima del backend hospedado",
    )

    LOG_LEVEL: str = Field(default="INFO", description="Nivel de logging")

    # Almacenamiento de archivos
    UPLOAD_DIR: str = Field(default="./uploads", description="Directorio de archivos subidos")
    UPLOAD_BASE_URL: str = Field(default="/uploads", description="Prefijo público de los archivos")
    MAX_UPLOAD_BYTES: int = Field(default=10 * 1024 * 1024, description="Tamaño máximo (10MB)")
    ALLOWED_UPLOAD_EXTENSIONS: List[str] = Field(
        default=["pdf", "jpg", "jpeg", "png", "doc", "docx", "xls", "xlsx"],
    )
    UPLOAD_DELAY_SECONDS: float = Field(default=0.0, description="Demora artificial de carga")

    # Facturación
    VAT_RATE: float = Field(default=0.21, description="Alícuota de IVA fija")
    VAT_SOURCE: str = Field(
        default="fixed",
        description="'fixed' usa VAT_RATE, 'settings' usa el porcentaje de Configuración",
    )
    INVOICE_NUMBER_PADDING: int = Field(default=3)

    # Flujo de procesos y documentos
    REQUIRE_FILE_FOR_VALIDATION: bool = Field(
        default=False,
        description="Exigir archivo cargado para marcar un documento como validado",
    )
    AUTO_PROGRESS_FROM_DOCUMENTS: bool = Field(
        default=False,
        description="Recalcular el progreso del proceso con cada cambio en documentos",
    )
    UNDO_WINDOW_SECONDS: int = Field(default=30, description="Ventana para deshacer eliminaciones")

    # Validación IA
    AI_VALIDATION_TIMEOUT_SECONDS: float = Field(default=30.0)
    AI_VALIDATION_DELAY_SECONDS: float = Field(default=2.0)

    # Auditoría (no hay modelo de autenticación)
    DEFAULT_ACTOR: str = Field(default="Usuario Actual")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


settings = Settings()


def get_settings() -> Settings:
    return settings
