"""Composes IntakeQ calls into voice-ready domain objects.

Every public method returns a :class:`~intakeq_voice.results.Result`.  Any
exception raised while talking to IntakeQ or translating its records is
wrapped into a single :class:`~intakeq_voice.results.OrchestrationError`
with the original exception as its cause.  Empty upstream data is not an
error: a client with no appointments or invoices still gets a summary.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime, timedelta, tzinfo
from typing import TypeVar
from zoneinfo import ZoneInfo

from intakeq_voice.domain import (
    AppointmentInfo,
    ClientSearchResult,
    ClientSummary,
    CreateAppointmentRequest,
    InvoiceInfo,
    InvoiceItemInfo,
)
from intakeq_voice.results import (
    OrchestrationError,
    Result,
    ValidationFailure,
    require_text,
)
from intakeq_voice.services import summarizer
from intakeq_voice.services.intakeq_client import UpstreamApi
from intakeq_voice.services.intakeq_schemas import (
    CreateAppointmentDto,
    IntakeQAppointment,
    IntakeQClientProfile,
    IntakeQClientRecord,
    IntakeQInvoice,
)
from intakeq_voice.timeutils import epoch_to_date, to_epoch_seconds, to_local

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_STATUS = "confirmed"
DEFAULT_REMINDER_TYPE = "email"
CALLER_NOT_FOUND_MESSAGE = (
    "I couldn't find a client with that phone number. "
    "Please check the number and try again."
)


# ── Record translation ───────────────────────────────────────────────


def _search_result(record: IntakeQClientRecord, display_text: str) -> ClientSearchResult:
    return ClientSearchResult(
        client_id=record.client_number,
        name=record.name,
        email=record.email,
        phone=record.phone,
        display_text=display_text,
    )


def _appointment_info(record: IntakeQAppointment, tz: tzinfo) -> AppointmentInfo:
    return AppointmentInfo(
        id=record.id,
        client_name=record.client_name,
        start_time=to_local(record.start_date, tz),
        end_time=to_local(record.end_date, tz),
        status=record.status,
        service_name=record.service_name,
        practitioner_name=record.practitioner_name,
        location_name=record.location_name,
        duration_minutes=record.duration,
        price=record.price,
    )


def _invoice_info(record: IntakeQInvoice) -> InvoiceInfo:
    return InvoiceInfo(
        id=record.id,
        number=record.number,
        status=record.status,
        client_name=record.client_name,
        client_email=record.client_email,
        total_amount=record.total_amount,
        amount_due=record.amount_due,
        amount_paid=record.amount_paid,
        due_date=epoch_to_date(record.due_date),
        issued_date=epoch_to_date(record.issued_date),
        currency=record.currency,
        items=tuple(
            InvoiceItemInfo(
                description=item.description,
                price=item.price,
                units=item.units,
                total_amount=item.total_amount,
            )
            for item in record.items or ()
        ),
    )


def appointment_dto(request: CreateAppointmentRequest, tz: tzinfo) -> CreateAppointmentDto:
    """Translate a booking request into IntakeQ's wire shape.

    ``start_datetime`` is practice wall-clock time unless it carries its
    own offset; IntakeQ wants absolute UTC epoch seconds.
    """
    return CreateAppointmentDto(
        client_id=request.client_id,
        service_id=request.service_id,
        location_id=request.location_id,
        practitioner_id=request.practitioner_id,
        utc_date_time=to_epoch_seconds(request.start_datetime, tz),
        status=request.status or DEFAULT_STATUS,
        client_note=request.client_note,
        practitioner_note=request.practitioner_note,
        send_client_email_notification=request.send_client_email_notification,
        reminder_type=request.reminder_type or DEFAULT_REMINDER_TYPE,
    )


def outstanding(invoices: Iterable[InvoiceInfo]) -> list[InvoiceInfo]:
    """Invoices with something left to pay.  Pure; never calls upstream."""
    return [invoice for invoice in invoices if invoice.amount_due > 0]


# ── Aggregator ───────────────────────────────────────────────────────


class VoiceAggregator:
    """Client lookup, scheduling and billing views over an :class:`UpstreamApi`."""

    def __init__(
        self,
        upstream: UpstreamApi,
        *,
        timezone: str | tzinfo = "America/New_York",
        lookahead_days: int = 30,
        clock: Callable[[], datetime] | None = None,
    ):
        self._upstream = upstream
        self._tz = ZoneInfo(timezone) if isinstance(timezone, str) else timezone
        self._lookahead_days = lookahead_days
        self._clock = clock or (lambda: datetime.now(self._tz))

    @property
    def timezone(self) -> tzinfo:
        return self._tz

    def _attempt(self, prefix: str, operation: Callable[[], T]) -> Result[T]:
        try:
            return Result.success(operation())
        except Exception as exc:
            logger.warning("%s: %s", prefix, exc)
            return Result.failure(OrchestrationError.wrap(prefix, exc))

    def _window(self, days_ahead: int | None) -> Result[tuple[date, date]]:
        days = self._lookahead_days if days_ahead is None else days_ahead
        if days <= 0:
            return Result.failure(ValidationFailure("daysAhead must be greater than 0"))
        now = self._clock()
        return Result.success((now.date(), (now + timedelta(days=days)).date()))

    def _appointments_for(
        self, client_name: str, start: date | None, end: date | None,
    ) -> list[AppointmentInfo]:
        records = self._upstream.list_appointments(
            client_search=client_name, start_date=start, end_date=end,
        )
        return [_appointment_info(r, self._tz) for r in records]

    def _invoices_for(self, client_id: int) -> list[InvoiceInfo]:
        return [_invoice_info(r) for r in self._upstream.list_invoices(client_id)]

    # ── Clients ──────────────────────────────────────────────────────

    def search_clients(self, search_term: str) -> Result[list[ClientSearchResult]]:
        """Search by name, email or phone; an empty list means nobody matched."""
        checked = require_text(search_term, "Search term is required")
        if not checked.ok:
            return Result.failure(checked.error)

        def run() -> list[ClientSearchResult]:
            return [
                _search_result(r, f"{r.name} - {r.email} - {r.phone}")
                for r in self._upstream.search_clients(search_term)
            ]

        return self._attempt("Error searching for clients", run)

    def get_client_profile(self, client_id: int) -> Result[IntakeQClientProfile]:
        return self._attempt(
            "Error retrieving client profile",
            lambda: self._upstream.get_client_profile(client_id),
        )

    def find_client_by_phone(self, phone_number: str) -> Result[ClientSearchResult | None]:
        """First upstream match for *phone_number*, or ``None``.

        The phone string goes to the same search endpoint as names and
        emails.  When several clients match, the first in upstream order
        wins.
        """
        checked = require_text(phone_number, "Phone number is required")
        if not checked.ok:
            return Result.failure(checked.error)

        def run() -> ClientSearchResult | None:
            records = self._upstream.search_clients(phone_number)
            if not records:
                return None
            first = records[0]
            return _search_result(first, f"{first.name} - {first.email}")

        return self._attempt("Error finding client by phone", run)

    def get_client_summary(
        self, client_id: int, days_ahead: int | None = None,
    ) -> Result[ClientSummary]:
        """Profile + upcoming appointments + outstanding invoices.

        The profile is fetched first and its failure fails the whole
        summary before anything else is requested.  Appointments (looked up
        by the profile's name) and invoices are then fetched concurrently.
        """
        window = self._window(days_ahead)
        if not window.ok:
            return Result.failure(window.error)
        start, end = window.value

        def run() -> ClientSummary:
            profile = self._upstream.get_client_profile(client_id)
            with ThreadPoolExecutor(max_workers=2, thread_name_prefix="summary") as pool:
                appointments = pool.submit(self._appointments_for, profile.name, start, end)
                invoices = pool.submit(self._invoices_for, client_id)
                upcoming = appointments.result()
                owed = outstanding(invoices.result())

            age = None
            if profile.date_of_birth is not None:
                # Calendar-year difference, not exact age.
                age = self._clock().year - profile.date_of_birth.year

            return ClientSummary(
                client_id=client_id,
                name=profile.name,
                age=age,
                phone=profile.phone or None,
                upcoming_appointments=tuple(upcoming),
                outstanding_invoices=tuple(owed),
            )

        return self._attempt("Error generating client summary", run)

    def get_client_summary_text(self, client_id: int) -> Result[str]:
        return self.get_client_summary(client_id).map(summarizer.client_summary_text)

    def get_caller_briefing(self, phone_number: str) -> Result[str]:
        """Everything a receptionist would say about the caller, by phone number."""
        found = self.find_client_by_phone(phone_number)
        if not found.ok:
            return Result.failure(found.error)
        if found.value is None:
            return Result.success(CALLER_NOT_FOUND_MESSAGE)
        summary = self.get_client_summary(found.value.client_id)
        return summary.map(summarizer.caller_briefing_text)

    # ── Appointments ─────────────────────────────────────────────────

    def get_client_appointments(
        self,
        client_id: int,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> Result[list[AppointmentInfo]]:
        """Appointments of one client, optionally limited to a date range."""

        def run() -> list[AppointmentInfo]:
            profile = self._upstream.get_client_profile(client_id)
            return self._appointments_for(profile.name, start_date, end_date)

        return self._attempt("Error retrieving client appointments", run)

    def get_upcoming_appointments(
        self, client_id: int, days_ahead: int | None = None,
    ) -> Result[list[AppointmentInfo]]:
        window = self._window(days_ahead)
        if not window.ok:
            return Result.failure(window.error)
        start, end = window.value
        return self.get_client_appointments(client_id, start, end)

    def get_appointment_summary(
        self, client_id: int, days_ahead: int | None = None,
    ) -> Result[str]:
        upcoming = self.get_upcoming_appointments(client_id, days_ahead)
        return upcoming.map(summarizer.appointment_summary_text)

    def create_appointment(self, request: CreateAppointmentRequest) -> Result[AppointmentInfo]:
        def run() -> AppointmentInfo:
            dto = appointment_dto(request, self._tz)
            logger.info(
                "Booking appointment for client %s at %s", request.client_id, dto.utc_date_time,
            )
            return _appointment_info(self._upstream.create_appointment(dto), self._tz)

        return self._attempt("Error creating appointment", run)

    # ── Invoices ─────────────────────────────────────────────────────

    def get_client_invoices(self, client_id: int) -> Result[list[InvoiceInfo]]:
        return self._attempt(
            "Error retrieving client invoices", lambda: self._invoices_for(client_id),
        )

    def get_outstanding_invoices(self, client_id: int) -> Result[list[InvoiceInfo]]:
        return self.get_client_invoices(client_id).map(outstanding)

    def get_invoice_summary(self, client_id: int) -> Result[str]:
        owed = self.get_outstanding_invoices(client_id)
        return owed.map(summarizer.invoice_summary_text)
