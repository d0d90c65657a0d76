"""Tests for the FastAPI endpoints."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from intakeq_voice.domain import AppointmentInfo, ClientSearchResult, InvoiceInfo
from intakeq_voice.intents import APOLOGY_MESSAGE, IntentRouter
from intakeq_voice.results import OrchestrationError, Result, ValidationFailure
from intakeq_voice.server import app
from intakeq_voice.services.intakeq_schemas import IntakeQClientProfile

JANE = ClientSearchResult(
    client_id=42,
    name="Jane Doe",
    email="jane@example.com",
    phone="555-123-4567",
    display_text="Jane Doe - jane@example.com",
)


@pytest.fixture
def mock_aggregator():
    """Attach a mock aggregator and a real router to app state (mirrors the lifespan)."""
    aggregator = MagicMock(name="aggregator")
    app.state.aggregator = aggregator
    app.state.intent_router = IntentRouter(aggregator, max_search_results=3)
    app.state.max_summary_words = 0
    yield aggregator
    # Clean up
    app.state.aggregator = None
    app.state.intent_router = None
    app.state.max_summary_words = 0


@pytest.fixture
def client(mock_aggregator):
    return TestClient(app)


class TestHealthEndpoint:
    def test_health_returns_ok(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "service": "intakeq-voice"}

    def test_request_id_is_echoed(self, client):
        response = client.get("/api/health", headers={"X-Request-ID": "abc-123"})
        assert response.headers["X-Request-ID"] == "abc-123"

    def test_request_id_is_generated(self, client):
        response = client.get("/api/health")
        assert response.headers["X-Request-ID"]


class TestNotReady:
    def test_returns_503_before_startup(self):
        app.state.aggregator = None
        app.state.intent_router = None
        client = TestClient(app)
        assert client.get("/api/vapi/clients/42/summary").status_code == 503
        assert client.post("/api/vapi/webhook", json={"message": "hi"}).status_code == 503


class TestClientEndpoints:
    def test_search(self, client, mock_aggregator):
        mock_aggregator.search_clients.return_value = Result.success([JANE])

        response = client.get("/api/vapi/clients/search", params={"searchTerm": "Jane"})

        assert response.status_code == 200
        assert response.json()[0]["client_id"] == 42
        mock_aggregator.search_clients.assert_called_once_with("Jane")

    def test_search_requires_term(self, client, mock_aggregator):
        response = client.get("/api/vapi/clients/search", params={"searchTerm": "  "})
        assert response.status_code == 400
        assert response.json()["detail"] == "Search term is required"
        mock_aggregator.search_clients.assert_not_called()

    def test_by_phone(self, client, mock_aggregator):
        mock_aggregator.find_client_by_phone.return_value = Result.success(JANE)
        response = client.get("/api/vapi/clients/by-phone", params={"phoneNumber": "555-123-4567"})
        assert response.status_code == 200
        assert response.json()["display_text"] == "Jane Doe - jane@example.com"

    def test_by_phone_not_found(self, client, mock_aggregator):
        mock_aggregator.find_client_by_phone.return_value = Result.success(None)
        response = client.get("/api/vapi/clients/by-phone", params={"phoneNumber": "555"})
        assert response.status_code == 404

    def test_by_phone_requires_number(self, client):
        assert client.get("/api/vapi/clients/by-phone").status_code == 400

    def test_profile_is_returned_in_upstream_shape(self, client, mock_aggregator):
        mock_aggregator.get_client_profile.return_value = Result.success(
            IntakeQClientProfile(client_id=42, name="Jane Doe"),
        )
        response = client.get("/api/vapi/clients/42/profile")
        assert response.status_code == 200
        assert response.json()["ClientId"] == 42

    def test_summary(self, client, mock_aggregator):
        mock_aggregator.get_client_summary_text.return_value = Result.success("Client: Jane Doe")
        response = client.get("/api/vapi/clients/42/summary")
        assert response.status_code == 200
        assert response.json() == {"summary": "Client: Jane Doe"}
        mock_aggregator.get_client_summary_text.assert_called_once_with(42)

    def test_summary_word_limit(self, client, mock_aggregator):
        app.state.max_summary_words = 2
        mock_aggregator.get_client_summary_text.return_value = Result.success(
            "Client: Jane Doe, Age: 36",
        )
        response = client.get("/api/vapi/clients/42/summary")
        assert response.json()["summary"] == "Client: Jane…"

    def test_orchestration_failure_is_500(self, client, mock_aggregator):
        mock_aggregator.get_client_summary_text.return_value = Result.failure(
            OrchestrationError("Error generating client summary: Not Found"),
        )
        response = client.get("/api/vapi/clients/42/summary")
        assert response.status_code == 500
        assert "Error generating client summary" in response.json()["detail"]

    def test_caller_briefing(self, client, mock_aggregator):
        mock_aggregator.get_caller_briefing.return_value = Result.success("Client: Jane Doe.")
        response = client.get("/api/vapi/callers/briefing", params={"phoneNumber": "555"})
        assert response.json() == {"summary": "Client: Jane Doe."}


class TestAppointmentEndpoints:
    APPOINTMENT = AppointmentInfo(
        id="appt-1",
        client_name="Jane Doe",
        start_time=datetime(2026, 3, 5, 14, 30),
        end_time=datetime(2026, 3, 5, 15, 30),
        status="Confirmed",
        service_name="Therapy",
        practitioner_name="Dr. Smith",
        location_name="Main Office",
        duration_minutes=60,
        price=Decimal("120"),
    )

    def test_list_with_date_range(self, client, mock_aggregator):
        mock_aggregator.get_client_appointments.return_value = Result.success([self.APPOINTMENT])

        response = client.get(
            "/api/vapi/clients/42/appointments",
            params={"startDate": "2026-03-01", "endDate": "2026-03-31"},
        )

        assert response.status_code == 200
        assert response.json()[0]["id"] == "appt-1"
        mock_aggregator.get_client_appointments.assert_called_once_with(
            42, date(2026, 3, 1), date(2026, 3, 31),
        )

    def test_upcoming_validation_failure_is_400(self, client, mock_aggregator):
        mock_aggregator.get_upcoming_appointments.return_value = Result.failure(
            ValidationFailure("daysAhead must be greater than 0"),
        )
        response = client.get(
            "/api/vapi/clients/42/appointments/upcoming", params={"daysAhead": 0},
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "daysAhead must be greater than 0"

    def test_appointment_summary(self, client, mock_aggregator):
        mock_aggregator.get_appointment_summary.return_value = Result.success(
            "No appointments found.",
        )
        response = client.get(
            "/api/vapi/clients/42/appointments/summary", params={"daysAhead": 7},
        )
        assert response.json() == {"summary": "No appointments found."}
        mock_aggregator.get_appointment_summary.assert_called_once_with(42, 7)

    def test_create(self, client, mock_aggregator):
        mock_aggregator.create_appointment.return_value = Result.success(self.APPOINTMENT)

        response = client.post(
            "/api/vapi/appointments",
            json={
                "client_id": 42,
                "service_id": "svc-1",
                "location_id": "loc-1",
                "practitioner_id": "prac-1",
                "start_datetime": "2026-03-05T14:30:00",
            },
        )

        assert response.status_code == 201
        sent = mock_aggregator.create_appointment.call_args[0][0]
        assert sent.start_datetime == datetime(2026, 3, 5, 14, 30)
        assert sent.send_client_email_notification is True

    def test_create_rejects_incomplete_body(self, client):
        response = client.post("/api/vapi/appointments", json={"client_id": 42})
        assert response.status_code == 422


class TestInvoiceEndpoints:
    def test_outstanding(self, client, mock_aggregator):
        invoice = InvoiceInfo(
            id="inv-1",
            number=1001,
            status="Unpaid",
            client_name="Jane Doe",
            total_amount=Decimal("100"),
            amount_due=Decimal("50"),
            amount_paid=Decimal("50"),
            due_date=date(2026, 3, 1),
            issued_date=date(2026, 2, 22),
        )
        mock_aggregator.get_outstanding_invoices.return_value = Result.success([invoice])

        response = client.get("/api/vapi/clients/42/invoices/outstanding")

        assert response.status_code == 200
        assert response.json()[0]["due_date"] == "2026-03-01"

    def test_invoice_summary(self, client, mock_aggregator):
        mock_aggregator.get_invoice_summary.return_value = Result.success("No invoices found.")
        response = client.get("/api/vapi/clients/42/invoices/summary")
        assert response.json() == {"summary": "No invoices found."}

    def test_invoices_failure(self, client, mock_aggregator):
        mock_aggregator.get_client_invoices.return_value = Result.failure(
            OrchestrationError("Error retrieving client invoices: boom"),
        )
        assert client.get("/api/vapi/clients/42/invoices").status_code == 500


class TestWebhook:
    def test_search_reply(self, client, mock_aggregator):
        mock_aggregator.search_clients.return_value = Result.success([JANE])

        response = client.post(
            "/api/vapi/webhook",
            json={"message": "Search for Jane Doe", "callId": "call-1", "context": {"turn": 1}},
        )

        assert response.status_code == 200
        assert response.json() == {"message": "Found 1 client: Jane Doe", "context": {"turn": 1}}

    def test_empty_message_is_400(self, client):
        response = client.post("/api/vapi/webhook", json={"message": ""})
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid webhook request"

    def test_failure_speaks_apology_without_details(self, client, mock_aggregator):
        mock_aggregator.search_clients.return_value = Result.failure(
            OrchestrationError("Error searching for clients: secret upstream detail"),
        )

        response = client.post(
            "/api/vapi/webhook", json={"message": "find Jane", "context": {"turn": 3}},
        )

        assert response.status_code == 500
        assert response.json() == {"message": APOLOGY_MESSAGE, "context": {"turn": 3}}
        assert "secret" not in response.text

    def test_unexpected_exception_speaks_apology(self, client, mock_aggregator):
        mock_aggregator.search_clients.side_effect = RuntimeError("kaboom")
        response = client.post("/api/vapi/webhook", json={"message": "find Jane"})
        assert response.status_code == 500
        assert response.json()["message"] == APOLOGY_MESSAGE

    def test_null_body_is_400(self, client, mock_aggregator):
        response = client.post(
            "/api/vapi/webhook",
            content="null",
            headers={"content-type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid webhook request"
        assert mock_aggregator.mock_calls == []

    def test_missing_body_is_400(self, client):
        response = client.post("/api/vapi/webhook")
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid webhook request"

    def test_null_context_is_echoed_as_empty(self, client):
        response = client.post("/api/vapi/webhook", json={"message": "hello", "context": None})
        assert response.status_code == 200
        assert response.json()["context"] == {}
