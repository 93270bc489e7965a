# app/utils/checklist.py
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Dict, Any


def completion_percentage(validated: int, total: int) -> int:
    """round(validados / total * 100); 0 si el checklist está vacío."""
    if total <= 0:
        return 0
    pct = Decimal(validated) * 100 / Decimal(total)
    return int(pct.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def checklist_stats(documents: Iterable[Any]) -> Dict[str, int]:
    docs = list(documents)
    total = len(docs)
    validated = sum(1 for d in docs if d.validated)

    return {
        "total": total,
        "required": sum(1 for d in docs if d.required),
        "validated": validated,
        "pending": total - validated,
        "uploaded": sum(1 for d in docs if d.file_url),
        "completion": completion_percentage(validated, total),
    }
