# app/services/ai_validation.py
"""
Proveedor de validación de documentos por IA.

No hay integración con un servicio real: SimulatedValidationProvider
espera un tiempo y devuelve un resultado aleatorio (reproducible con seed).
"""
import asyncio
import random
from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Dict, Optional

from app.config import settings

POSSIBLE_ERRORS = [
    "Fecha de vencimiento ilegible",
    "Falta la firma del responsable técnico",
    "El número de CUIT no coincide con el cliente",
    "Sello del organismo incompleto",
]

POSSIBLE_SUGGESTIONS = [
    "Volver a escanear el documento con mayor resolución",
    "Verificar que todas las páginas estén incluidas",
    "Adjuntar la traducción certificada",
]


class ValidationProvider(ABC):
    @abstractmethod
    async def analyze(self, document) -> Dict[str, Any]:
        """
        Devuelve un dict con: confidence (0-100), extracted_text,
        extracted_fields, detected_errors, suggestions.
        """


class SimulatedValidationProvider(ValidationProvider):
    def __init__(self, delay: float = 2.0, seed: Optional[int] = None):
        self.delay = delay
        self.random = random.Random(seed)

    async def analyze(self, document) -> Dict[str, Any]:
        if self.delay:
            await asyncio.sleep(self.delay)

        confidence = round(self.random.uniform(60, 99), 1)
        errors = []
        suggestions = []
        if confidence < 80:
            errors = self.random.sample(POSSIBLE_ERRORS, k=self.random.randint(1, 2))
            suggestions = self.random.sample(POSSIBLE_SUGGESTIONS, k=1)

        return {
            "confidence": confidence,
            "extracted_text": f"Texto extraído de '{document.name}'",
            "extracted_fields": {
                "documento": document.name,
                "fecha_analisis": date.today().isoformat(),
                "archivo": document.file_url,
            },
            "detected_errors": errors,
            "suggestions": suggestions,
        }


def get_validation_provider() -> ValidationProvider:
    return SimulatedValidationProvider(delay=settings.AI_VALIDATION_DELAY_SECONDS)
