"""Voice-ready domain objects produced by the aggregator.

All of them are frozen: the aggregator builds fresh instances per call
and nothing mutates them afterwards.  Being pydantic models, FastAPI can
return them directly.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class ClientSearchResult(_Frozen):
    client_id: int
    name: str
    email: str | None = None
    phone: str | None = None
    display_text: str


class AppointmentInfo(_Frozen):
    id: str
    client_name: str
    start_time: datetime
    end_time: datetime
    status: str
    service_name: str
    practitioner_name: str
    location_name: str
    duration_minutes: int
    price: Decimal


class InvoiceItemInfo(_Frozen):
    description: str
    price: Decimal
    units: Decimal
    total_amount: Decimal


class InvoiceInfo(_Frozen):
    id: str
    number: int
    status: str
    client_name: str
    client_email: str | None = None
    total_amount: Decimal
    amount_due: Decimal
    amount_paid: Decimal
    due_date: date
    issued_date: date
    currency: str = "USD"
    items: tuple[InvoiceItemInfo, ...] = ()


class CreateAppointmentRequest(_Frozen):
    """Caller-facing booking request; ``start_datetime`` is practice wall-clock."""

    client_id: int
    service_id: str
    location_id: str
    practitioner_id: str
    start_datetime: datetime
    status: str | None = None
    client_note: str | None = None
    practitioner_note: str | None = None
    send_client_email_notification: bool = True
    reminder_type: str | None = None


class ClientSummary(_Frozen):
    """Profile, upcoming appointments and outstanding invoices of one client."""

    client_id: int
    name: str
    age: int | None = None
    phone: str | None = None
    upcoming_appointments: tuple[AppointmentInfo, ...] = ()
    outstanding_invoices: tuple[InvoiceInfo, ...] = ()
