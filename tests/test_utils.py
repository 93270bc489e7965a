from datetime import date
from decimal import Decimal
from types import SimpleNamespace

from app.models import ProcessState, InvoiceStatus
from app.utils.totals import compute_totals, line_total, to_money
from app.utils.checklist import completion_percentage, checklist_stats
from app.utils.folios import get_next_folio, format_folio
from app.utils.reports import (
    count_by_state, process_summary, invoice_summary, processes_to_csv, templates_to_csv,
    PROCESS_CSV_COLUMNS,
)


def _doc(validated=False, required=False, file_url=None):
    return SimpleNamespace(validated=validated, required=required, file_url=file_url)


def _process(state, cost="100", agency="ANMAT", client="Alimentos SA",
             start=date(2024, 3, 1), due=date(2024, 3, 31), progress=0):
    return SimpleNamespace(
        state=state,
        cost=Decimal(cost),
        agency=SimpleNamespace(name=agency),
        client=SimpleNamespace(name=client),
        process_type="Importación",
        start_date=start,
        due_date=due,
        progress=progress,
    )


# -----------------------------
# Totales
# -----------------------------
def test_totals_for_two_lines():
    items = [
        {"quantity": 2, "unit_price": Decimal("1000")},
        {"quantity": 1, "unit_price": Decimal("500")},
    ]
    subtotal, tax, total = compute_totals(items, Decimal("0.21"))

    assert subtotal == Decimal("2500.00")
    assert tax == Decimal("525.00")
    assert total == Decimal("3025.00")


def test_tax_is_rounded_half_up_to_cents():
    subtotal, tax, total = compute_totals([{"quantity": 1, "unit_price": "0.05"}], "0.21")

    assert tax == Decimal("0.01")  # 0.0105 -> 0.01
    assert total == subtotal + tax


def test_line_total_and_money():
    assert line_total("1.5", "10.01") == Decimal("15.02")
    assert to_money(None) == Decimal("0.00")


# -----------------------------
# Checklist
# -----------------------------
def test_completion_percentage():
    assert completion_percentage(0, 0) == 0
    assert completion_percentage(2, 2) == 100
    assert completion_percentage(1, 3) == 33
    assert completion_percentage(2, 3) == 67
    assert completion_percentage(1, 8) == 13  # 12.5 -> 13


def test_checklist_stats():
    docs = [
        _doc(validated=True, required=True, file_url="/uploads/a.pdf"),
        _doc(required=True),
        _doc(),
    ]
    stats = checklist_stats(docs)

    assert stats == {
        "total": 3,
        "required": 2,
        "validated": 1,
        "pending": 2,
        "uploaded": 1,
        "completion": 33,
    }


# -----------------------------
# Numeración
# -----------------------------
def test_folios_are_strictly_increasing_per_year(db):
    first = get_next_folio(db, "FAC", 2024)
    second = get_next_folio(db, "FAC", 2024)
    other_year = get_next_folio(db, "FAC", 2025)
    budget = get_next_folio(db, "PRE", 2024)

    assert (first, second) == (1, 2)
    assert other_year == 1
    assert budget == 1
    assert format_folio("FAC", 2024, second) == "FAC-2024-002"
    assert format_folio("PRE", 2024, 1234) == "PRE-2024-1234"


# -----------------------------
# Reportes
# -----------------------------
def test_count_by_state_includes_empty_states():
    counts = count_by_state([_process(ProcessState.PENDING), _process(ProcessState.PENDING)])

    assert len(counts) == 7
    assert counts["pendiente"] == 2
    assert counts["archivado"] == 0


def test_process_summary():
    processes = [
        _process(ProcessState.APPROVED, cost="300", start=date(2024, 1, 1), due=date(2024, 1, 11)),
        _process(ProcessState.REJECTED, cost="100"),
        _process(ProcessState.UNDER_REVIEW, cost="200", agency="SENASA"),
    ]
    summary = process_summary(processes)

    assert summary["total"] == 3
    assert summary["active"] == 1
    assert summary["approved"] == 1
    assert summary["top_agencies"][0] == {"agency": "ANMAT", "count": 2}
    assert summary["average_processing_days"] == 10
    assert summary["total_cost"] == Decimal("600.00")
    assert summary["average_cost"] == Decimal("200.00")


def test_invoice_summary():
    invoices = [
        SimpleNamespace(status=InvoiceStatus.PAID, total_amount=Decimal("100")),
        SimpleNamespace(status=InvoiceStatus.SENT, total_amount=Decimal("50")),
        SimpleNamespace(status=InvoiceStatus.OVERDUE, total_amount=Decimal("25")),
        SimpleNamespace(status=InvoiceStatus.CANCELLED, total_amount=Decimal("999")),
    ]
    summary = invoice_summary(invoices)

    assert summary["count"] == 4
    assert summary["collected_total"] == Decimal("100.00")
    assert summary["outstanding_total"] == Decimal("75.00")
    assert summary["billed_total"] == Decimal("175.00")
    assert summary["by_status"]["borrador"]["count"] == 0


def test_processes_csv_has_header_plus_one_row_per_process():
    processes = [
        _process(ProcessState.PENDING, progress=40),
        _process(ProcessState.APPROVED, client='Importadora "El Sol", SRL'),
    ]
    lines = processes_to_csv(processes).strip("\n").split("\n")

    assert len(lines) == len(processes) + 1
    assert lines[0] == ",".join(PROCESS_CSV_COLUMNS)
    assert "01/03/2024" in lines[1]
    assert "40%" in lines[1]
    assert lines[2].startswith('"Importadora ""El Sol"", SRL"')


def test_empty_csv_has_only_header():
    assert processes_to_csv([]).strip("\n").split("\n") == [",".join(PROCESS_CSV_COLUMNS)]


def test_templates_csv_joins_documents():
    template = SimpleNamespace(
        id="anmat-rne", name="RNE", agency_name="ANMAT",
        required_documents=["Formulario", "Plano"], estimated_days=30, cost=Decimal("15000"),
    )
    lines = templates_to_csv([template]).strip("\n").split("\n")

    assert len(lines) == 2
    assert "Formulario; Plano" in lines[1]
