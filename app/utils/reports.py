# app/utils/reports.py
"""
Agregaciones puras sobre procesos y facturas.

Se recalculan en cada lectura; no hay caché persistida. Reciben objetos
ORM (o cualquier objeto con los mismos atributos).
"""
from collections import Counter
from decimal import Decimal
from typing import Iterable, List, Dict, Any, Optional

import pandas as pd

from app.models import ProcessState, InvoiceStatus, TERMINAL_STATES
from app.utils.totals import to_money

PROCESS_CSV_COLUMNS = [
    "Cliente", "Tipo", "Organismo", "Estado",
    "Fecha Inicio", "Fecha Vencimiento", "Progreso", "Costos",
]

TEMPLATE_CSV_COLUMNS = [
    "id", "nombre", "organismo", "documentos_requeridos", "tiempo_estimado", "costo",
]


def _fmt_date(value) -> str:
    return value.strftime("%d/%m/%Y") if value else ""


def _name(related) -> str:
    return related.name if related is not None else ""


# -----------------------------
# Procesos
# -----------------------------
def count_by_state(processes: Iterable[Any]) -> Dict[str, int]:
    counts = {state.value: 0 for state in ProcessState}
    for p in processes:
        counts[ProcessState(p.state).value] += 1
    return counts


def count_by_agency(processes: Iterable[Any], top: Optional[int] = None) -> List[Dict[str, Any]]:
    counter = Counter(_name(p.agency) for p in processes)
    return [{"agency": name, "count": count} for name, count in counter.most_common(top)]


def count_by_month(processes: Iterable[Any]) -> Dict[str, int]:
    counter = Counter(p.start_date.strftime("%Y-%m") for p in processes if p.start_date)
    return dict(sorted(counter.items()))


def average_processing_days(processes: Iterable[Any]) -> float:
    """Promedio de (vencimiento - inicio) en días, solo procesos aprobados con vencimiento."""
    spans = [
        (p.due_date - p.start_date).days
        for p in processes
        if p.state == ProcessState.APPROVED and p.due_date and p.start_date
    ]
    if not spans:
        return 0.0
    return round(sum(spans) / len(spans), 2)


def success_rate(processes: Iterable[Any]) -> float:
    procs = list(processes)
    if not procs:
        return 0.0
    approved = sum(1 for p in procs if p.state == ProcessState.APPROVED)
    return round(approved / len(procs), 4)


def average_cost(processes: Iterable[Any]) -> Decimal:
    procs = list(processes)
    if not procs:
        return Decimal("0.00")
    total = sum((Decimal(str(p.cost or 0)) for p in procs), Decimal("0"))
    return to_money(total / len(procs))


def process_summary(processes: Iterable[Any], top_agencies: int = 5) -> Dict[str, Any]:
    procs = list(processes)
    total_cost = sum((Decimal(str(p.cost or 0)) for p in procs), Decimal("0"))

    return {
        "total": len(procs),
        "active": sum(1 for p in procs if ProcessState(p.state) not in TERMINAL_STATES),
        "approved": sum(1 for p in procs if p.state == ProcessState.APPROVED),
        "by_state": count_by_state(procs),
        "top_agencies": count_by_agency(procs, top=top_agencies),
        "by_month": count_by_month(procs),
        "average_processing_days": average_processing_days(procs),
        "success_rate": success_rate(procs),
        "average_cost": average_cost(procs),
        "total_cost": to_money(total_cost),
    }


# -----------------------------
# Facturas
# -----------------------------
def invoice_summary(invoices: Iterable[Any]) -> Dict[str, Any]:
    invs = list(invoices)
    by_status = {
        status.value: {"count": 0, "total": Decimal("0.00")} for status in InvoiceStatus
    }
    for inv in invs:
        bucket = by_status[InvoiceStatus(inv.status).value]
        bucket["count"] += 1
        bucket["total"] += to_money(inv.total_amount)

    billed = sum(
        (b["total"] for s, b in by_status.items() if s != InvoiceStatus.CANCELLED.value),
        Decimal("0.00"),
    )
    outstanding = by_status[InvoiceStatus.SENT.value]["total"] + by_status[InvoiceStatus.OVERDUE.value]["total"]

    return {
        "count": len(invs),
        "by_status": by_status,
        "billed_total": billed,
        "collected_total": by_status[InvoiceStatus.PAID.value]["total"],
        "outstanding_total": outstanding,
    }


# -----------------------------
# Exportación CSV
# -----------------------------
def processes_to_csv(processes: Iterable[Any]) -> str:
    rows = [
        [
            _name(p.client),
            p.process_type or "",
            _name(p.agency),
            ProcessState(p.state).value,
            _fmt_date(p.start_date),
            _fmt_date(p.due_date),
            f"{p.progress}%",
            str(to_money(p.cost)),
        ]
        for p in processes
    ]
    df = pd.DataFrame(rows, columns=PROCESS_CSV_COLUMNS)
    return df.to_csv(index=False, lineterminator="\n")


def templates_to_csv(templates: Iterable[Any]) -> str:
    rows = [
        [
            t.id,
            t.name,
            t.agency_name,
            "; ".join(t.required_documents or []),
            t.estimated_days,
            str(to_money(t.cost)) if t.cost is not None else "",
        ]
        for t in templates
    ]
    df = pd.DataFrame(rows, columns=TEMPLATE_CSV_COLUMNS)
    return df.to_csv(index=False, lineterminator="\n")
