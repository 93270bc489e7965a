from pydantic import BaseModel
from typing import List, Dict
from datetime import date
from decimal import Decimal

from app.models import ProcessState, ProcessPriority


class AgencyCount(BaseModel):
    agency: str
    count: int

class ProcessSummary(BaseModel):
    total: int
    active: int
    approved: int
    by_state: Dict[str, int]
    top_agencies: List[AgencyCount]
    by_month: Dict[str, int]          # "2024-01" -> cantidad
    average_processing_days: float
    success_rate: float               # aprobados / total
    average_cost: Decimal
    total_cost: Decimal

class StatusBucket(BaseModel):
    count: int
    total: Decimal

class InvoiceSummary(BaseModel):
    count: int
    by_status: Dict[str, StatusBucket]
    billed_total: Decimal
    collected_total: Decimal
    outstanding_total: Decimal        # enviadas + vencidas

# --- Calendario de vencimientos ---
class CalendarEntry(BaseModel):
    id: int
    title: str
    client_name: str
    state: ProcessState
    priority: ProcessPriority

class CalendarDay(BaseModel):
    date: date
    processes: List[CalendarEntry]
