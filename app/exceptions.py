# app/exceptions.py
"""
Errores tipados del dominio.

Las funciones de app.crud levantan estas excepciones; app.main las
convierte en respuestas JSON {"detail": ...} con el status correspondiente.
"""


class AppError(Exception):
    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(AppError):
    """Datos de entrada inválidos o regla de negocio incumplida."""
    status_code = 400


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    """Versión desactualizada, duplicado o estado incompatible."""
    status_code = 409


class PersistenceError(AppError):
    """Falla de la base de datos; la transacción ya fue revertida."""
    status_code = 500
