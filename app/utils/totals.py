# app/utils/totals.py
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Tuple, Any

TWO_PLACES = Decimal("0.01")


def to_money(value: Any) -> Decimal:
    """Convierte a Decimal con 2 decimales (redondeo comercial)."""
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def line_total(quantity: Any, unit_price: Any) -> Decimal:
    return to_money(Decimal(str(quantity)) * Decimal(str(unit_price)))


def _field(item: Any, name: str):
    if isinstance(item, dict):
        return item[name]
    return getattr(item, name)


def compute_totals(items: Iterable[Any], rate: Any) -> Tuple[Decimal, Decimal, Decimal]:
    """
    subtotal = Σ(cantidad × precio unitario)
    iva = subtotal × alícuota (2 decimales)
    total = subtotal + iva
    """
    subtotal = Decimal("0.00")
    for item in items:
        subtotal += line_total(_field(item, "quantity"), _field(item, "unit_price"))

    subtotal = to_money(subtotal)
    tax = to_money(subtotal * Decimal(str(rate)))
    return subtotal, tax, subtotal + tax
