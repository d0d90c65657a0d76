"""Typed IntakeQ wire records.

IntakeQ serialises fields in PascalCase; each model declares the aliases it
reads so nothing downstream ever looks keys up dynamically.  Unknown
fields are ignored.  ``populate_by_name`` lets tests build records with
the snake_case names.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class _Wire(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class IntakeQClientRecord(_Wire):
    """One row of ``GET /clients``."""

    client_number: int = Field(alias="ClientNumber")
    name: str = Field(default="", alias="Name")
    email: str | None = Field(default=None, alias="Email")
    phone: str | None = Field(default=None, alias="Phone")


class IntakeQClientProfile(_Wire):
    """``GET /clients/profile/{id}``."""

    client_id: int = Field(alias="ClientId")
    name: str = Field(default="", alias="Name")
    first_name: str | None = Field(default=None, alias="FirstName")
    last_name: str | None = Field(default=None, alias="LastName")
    email: str | None = Field(default=None, alias="Email")
    phone: str | None = Field(default=None, alias="Phone")
    mobile_phone: str | None = Field(default=None, alias="MobilePhone")
    # Accepts ISO strings or epoch seconds/milliseconds.
    date_of_birth: datetime | None = Field(default=None, alias="DateOfBirth")
    address: str | None = Field(default=None, alias="Address")


class IntakeQAppointment(_Wire):
    """``GET /appointments`` row and ``POST /appointments`` response."""

    id: str = Field(alias="Id")
    client_name: str = Field(default="", alias="ClientName")
    start_date: datetime = Field(alias="StartDateIso")
    end_date: datetime = Field(alias="EndDateIso")
    status: str = Field(default="", alias="Status")
    service_name: str = Field(default="", alias="ServiceName")
    practitioner_name: str = Field(default="", alias="PractitionerName")
    location_name: str = Field(default="", alias="LocationName")
    duration: int = Field(default=0, alias="Duration")
    price: Decimal = Field(default=Decimal("0"), alias="Price")


class IntakeQInvoiceItem(_Wire):
    description: str = Field(default="", alias="Description")
    price: Decimal = Field(default=Decimal("0"), alias="Price")
    units: Decimal = Field(default=Decimal("0"), alias="Units")
    total_amount: Decimal = Field(default=Decimal("0"), alias="TotalAmount")


class IntakeQInvoice(_Wire):
    """``GET /invoices?clientId=`` row; dates are epoch seconds."""

    id: str = Field(alias="Id")
    number: int = Field(default=0, alias="Number")
    status: str = Field(default="", alias="Status")
    client_name: str = Field(default="", alias="ClientName")
    client_email: str | None = Field(default=None, alias="ClientEmail")
    total_amount: Decimal = Field(default=Decimal("0"), alias="TotalAmount")
    amount_due: Decimal = Field(default=Decimal("0"), alias="AmountDue")
    amount_paid: Decimal = Field(default=Decimal("0"), alias="AmountPaid")
    due_date: int = Field(alias="DueDate")
    issued_date: int = Field(alias="IssuedDate")
    currency: str = Field(default="USD", alias="Currency")
    items: list[IntakeQInvoiceItem] | None = Field(default=None, alias="Items")


class CreateAppointmentDto(_Wire):
    """Body of ``POST /appointments``; ``utc_date_time`` is epoch seconds."""

    client_id: int = Field(alias="ClientId")
    service_id: str = Field(alias="ServiceId")
    location_id: str = Field(alias="LocationId")
    practitioner_id: str = Field(alias="PractitionerId")
    utc_date_time: int = Field(alias="UtcDateTime")
    status: str = Field(alias="Status")
    client_note: str | None = Field(default=None, alias="ClientNote")
    practitioner_note: str | None = Field(default=None, alias="PractitionerNote")
    send_client_email_notification: bool = Field(alias="SendClientEmailNotification")
    reminder_type: str = Field(alias="ReminderType")
