"""Shared test fixtures for the IntakeQ voice assistant test suite."""

from __future__ import annotations

import os
from datetime import datetime
from decimal import Decimal
from unittest.mock import MagicMock
from zoneinfo import ZoneInfo

import pytest

NEW_YORK = ZoneInfo("America/New_York")


def pytest_configure(config):
    """Set test environment variables BEFORE collection starts.

    This runs before any imports, so config.py won't fail on module load.
    """
    os.environ.setdefault("INTAKEQ_API_KEY", "test-intakeq-key-123")
    os.environ.setdefault("METRICS_ENABLED", "false")


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 3, 1, 9, 0, tzinfo=NEW_YORK)


@pytest.fixture
def upstream() -> MagicMock:
    """Stand-in for IntakeQClient; configure return values per test."""
    return MagicMock(name="upstream")


@pytest.fixture
def aggregator(upstream, fixed_now):
    from intakeq_voice.services.aggregator import VoiceAggregator

    return VoiceAggregator(
        upstream,
        timezone="America/New_York",
        lookahead_days=30,
        clock=lambda: fixed_now,
    )


@pytest.fixture
def make_client_record():
    from intakeq_voice.services.intakeq_schemas import IntakeQClientRecord

    def _make(number: int = 1, name: str = "Jane Doe", **overrides):
        fields = {
            "client_number": number,
            "name": name,
            "email": f"{name.split()[0].lower()}@example.com" if name else None,
            "phone": "555-123-4567",
        }
        fields.update(overrides)
        return IntakeQClientRecord(**fields)

    return _make


@pytest.fixture
def make_profile():
    from intakeq_voice.services.intakeq_schemas import IntakeQClientProfile

    def _make(**overrides):
        fields = {
            "client_id": 42,
            "name": "Jane Doe",
            "email": "jane@example.com",
            "phone": "555-123-4567",
            "date_of_birth": "1990-06-15T00:00:00Z",
        }
        fields.update(overrides)
        return IntakeQClientProfile(**fields)

    return _make


@pytest.fixture
def make_appointment_record():
    from intakeq_voice.services.intakeq_schemas import IntakeQAppointment

    def _make(appt_id: str = "appt-1", start: str = "2026-03-05T19:30:00Z", **overrides):
        fields = {
            "id": appt_id,
            "client_name": "Jane Doe",
            "start_date": start,
            "end_date": start.replace("19:30", "20:30"),
            "status": "Confirmed",
            "service_name": "Therapy Session",
            "practitioner_name": "Dr. Smith",
            "location_name": "Main Office",
            "duration": 60,
            "price": Decimal("120.00"),
        }
        fields.update(overrides)
        return IntakeQAppointment(**fields)

    return _make


@pytest.fixture
def make_invoice_record():
    from intakeq_voice.services.intakeq_schemas import IntakeQInvoice

    def _make(invoice_id: str = "inv-1", amount_due: str = "50.00", **overrides):
        fields = {
            "id": invoice_id,
            "number": 1001,
            "status": "Unpaid",
            "client_name": "Jane Doe",
            "client_email": "jane@example.com",
            "total_amount": Decimal("100.00"),
            "amount_due": Decimal(amount_due),
            "amount_paid": Decimal("100.00") - Decimal(amount_due),
            "due_date": 1772323200,  # 2026-03-01T00:00:00Z
            "issued_date": 1771718400,  # 2026-02-22T00:00:00Z
            "currency": "USD",
            "items": None,
        }
        fields.update(overrides)
        return IntakeQInvoice(**fields)

    return _make
