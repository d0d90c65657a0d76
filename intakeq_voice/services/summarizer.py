"""Natural-language renderings of domain objects for voice playback.

Everything here is a pure function of its arguments: no I/O, no clock.
Appointments are spoken in ascending start order and invoices in ascending
due-date order regardless of the order they were passed in.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal

from intakeq_voice.domain import AppointmentInfo, ClientSummary, InvoiceInfo
from intakeq_voice.timeutils import format_voice_date, format_voice_datetime

_CURRENCY_SYMBOLS = {"USD": "$", "CAD": "$", "AUD": "$", "EUR": "€", "GBP": "£"}
_CENT = Decimal("0.01")


def format_currency(amount: Decimal, currency: str = "USD") -> str:
    """'$1,234.50', '-$5.00', '€12.00'; unknown codes render as '12.00 XYZ'."""
    code = (currency or "USD").upper()
    sign = "-" if amount < 0 else ""
    body = f"{abs(amount).quantize(_CENT, rounding=ROUND_HALF_UP):,.2f}"
    symbol = _CURRENCY_SYMBOLS.get(code)
    if symbol is None:
        return f"{sign}{body} {code}"
    return f"{sign}{symbol}{body}"


def _counted(count: int, noun: str) -> str:
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"


def total_amount_due(invoices: Sequence[InvoiceInfo]) -> Decimal:
    return sum((invoice.amount_due for invoice in invoices), Decimal("0"))


def _sum_currency(invoices: Sequence[InvoiceInfo]) -> str:
    return invoices[0].currency if invoices else "USD"


def client_summary_text(summary: ClientSummary) -> str:
    text = f"Client: {summary.name}"
    if summary.age is not None:
        text += f", Age: {summary.age}"
    if summary.phone:
        text += f", Phone: {summary.phone}"

    if summary.upcoming_appointments:
        nxt = min(summary.upcoming_appointments, key=lambda a: a.start_time)
        text += (
            f". Next appointment: {format_voice_datetime(nxt.start_time)}"
            f" with {nxt.practitioner_name}"
        )

    if summary.outstanding_invoices:
        owed = total_amount_due(summary.outstanding_invoices)
        text += (
            ". Outstanding balance: "
            f"{format_currency(owed, _sum_currency(summary.outstanding_invoices))}"
        )
    return text


def appointment_summary_text(appointments: Sequence[AppointmentInfo]) -> str:
    if not appointments:
        return "No appointments found."

    text = f"Found {_counted(len(appointments), 'appointment')}: "
    for appt in sorted(appointments, key=lambda a: a.start_time):
        text += (
            f"{format_voice_datetime(appt.start_time)} with {appt.practitioner_name}"
            f" for {appt.service_name}. "
        )
    return text.strip()


def invoice_summary_text(invoices: Sequence[InvoiceInfo]) -> str:
    """Header total covers every invoice passed in, not only the spoken ones."""
    if not invoices:
        return "No invoices found."

    currency = _sum_currency(invoices)
    text = (
        f"Found {_counted(len(invoices), 'invoice')} with a total outstanding balance of "
        f"{format_currency(total_amount_due(invoices), currency)}. "
    )
    for invoice in sorted(invoices, key=lambda i: i.due_date):
        text += (
            f"Invoice {invoice.number} due {format_voice_date(invoice.due_date)}"
            f" for {format_currency(invoice.amount_due, invoice.currency)}. "
        )
    return text.strip()


def caller_briefing_text(summary: ClientSummary) -> str:
    """Client, appointment and invoice summaries spoken as one passage."""
    parts = (
        client_summary_text(summary),
        appointment_summary_text(summary.upcoming_appointments),
        invoice_summary_text(summary.outstanding_invoices),
    )
    return ". ".join(part.rstrip(".") for part in parts) + "."


def limit_words(text: str, max_words: int | None) -> str:
    """Keep the first *max_words* words; ``None`` or ``0`` leaves *text* alone."""
    if not max_words:
        return text
    words = text.split()
    if len(words) <= max_words:
        return text
    return " ".join(words[:max_words]) + "…"
