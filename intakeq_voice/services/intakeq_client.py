"""HTTP client for the IntakeQ REST API (v1).

IntakeQ API docs: https://support.intakeq.com/article/251-intakeq-api
Every request carries the practice API key in the ``X-Auth-Key`` header.

Only the handful of endpoints the voice assistant needs are wrapped.  Each
method returns typed records from :mod:`intakeq_voice.services.intakeq_schemas`
or raises :class:`IntakeQAPIError`.  Calls are never retried.
"""

from __future__ import annotations

import logging
import time
from datetime import date
from typing import Any, Protocol

import httpx

from intakeq_voice.services.intakeq_schemas import (
    CreateAppointmentDto,
    IntakeQAppointment,
    IntakeQClientProfile,
    IntakeQClientRecord,
    IntakeQInvoice,
)
from intakeq_voice.services.metrics import MetricsClient, metrics

logger = logging.getLogger(__name__)

SERVICE_NAME = "intakeq"
DEFAULT_TIMEOUT_SECONDS = 15.0


class IntakeQAPIError(Exception):
    """Raised when an IntakeQ call fails; the message is the upstream body."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class UpstreamApi(Protocol):
    """The upstream operations the aggregator depends on."""

    def search_clients(
        self,
        search: str,
        *,
        page: int | None = None,
        date_created_start: date | None = None,
        date_created_end: date | None = None,
    ) -> list[IntakeQClientRecord]: ...

    def get_client_profile(self, client_id: int) -> IntakeQClientProfile: ...

    def list_appointments(
        self,
        *,
        client_search: str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        status: str | None = None,
        practitioner_email: str | None = None,
        page: int | None = None,
    ) -> list[IntakeQAppointment]: ...

    def create_appointment(self, dto: CreateAppointmentDto) -> IntakeQAppointment: ...

    def list_invoices(self, client_id: int) -> list[IntakeQInvoice]: ...


def _query(**params: Any) -> dict[str, str]:
    """Drop unset params and render dates the way IntakeQ expects (yyyy-MM-dd)."""
    query: dict[str, str] = {}
    for key, value in params.items():
        if value is None or value == "":
            continue
        query[key] = value.isoformat() if isinstance(value, date) else str(value)
    return query


class IntakeQClient:
    """Thin synchronous wrapper around the IntakeQ REST API.

    The process's composition root owns the instance (see ``server.py``)
    and closes it on shutdown; nothing in this module keeps a global one.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://intakeq.com/api/v1/",
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        metrics_client: MetricsClient | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self._client = httpx.Client(
            base_url=base_url,
            headers={
                "X-Auth-Key": api_key,
                "Accept": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )
        self._metrics = metrics_client or metrics

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> IntakeQClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ── Internal helpers ─────────────────────────────────────────────

    def _request(
        self,
        method: str,
        path: str,
        operation: str,
        *,
        params: dict[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> Any:
        """Execute one HTTP request and return the decoded JSON body."""
        started = time.perf_counter()
        try:
            response = self._client.request(method, path, params=params, json=json_body)
        except httpx.HTTPError as exc:
            self._metrics.record_failure(
                SERVICE_NAME, operation, error_type=type(exc).__name__,
            )
            logger.warning("IntakeQ %s failed before a response: %s", operation, exc)
            raise IntakeQAPIError(f"Request to {path} failed: {exc}") from exc

        latency_ms = (time.perf_counter() - started) * 1000
        if response.status_code >= 400:
            error_type = "5xx" if response.status_code >= 500 else "4xx"
            self._metrics.record_failure(
                SERVICE_NAME, operation, error_type=error_type, latency_ms=latency_ms,
            )
            logger.warning("IntakeQ %s returned HTTP %d", operation, response.status_code)
            raise IntakeQAPIError(response.text, status_code=response.status_code)

        self._metrics.record_success(SERVICE_NAME, operation, latency_ms=latency_ms)
        return response.json()

    # ── Clients ──────────────────────────────────────────────────────

    def search_clients(
        self,
        search: str,
        *,
        page: int | None = None,
        date_created_start: date | None = None,
        date_created_end: date | None = None,
    ) -> list[IntakeQClientRecord]:
        """Search clients by name, email or phone (IntakeQ matches any of them)."""
        data = self._request(
            "GET",
            "clients",
            "GET /clients",
            params=_query(
                search=search,
                page=page,
                dateCreatedStart=date_created_start,
                dateCreatedEnd=date_created_end,
            ),
        )
        return [IntakeQClientRecord.model_validate(row) for row in data or []]

    def get_client_profile(self, client_id: int) -> IntakeQClientProfile:
        data = self._request(
            "GET", f"clients/profile/{client_id}", "GET /clients/profile",
        )
        return IntakeQClientProfile.model_validate(data)

    # ── Appointments ─────────────────────────────────────────────────

    def list_appointments(
        self,
        *,
        client_search: str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        status: str | None = None,
        practitioner_email: str | None = None,
        page: int | None = None,
    ) -> list[IntakeQAppointment]:
        """List appointments, optionally filtered by client name and date range.

        ``start_date``/``end_date`` are inclusive calendar dates.
        """
        data = self._request(
            "GET",
            "appointments",
            "GET /appointments",
            params=_query(
                client=client_search,
                status=status,
                practitionerEmail=practitioner_email,
                startDate=start_date,
                endDate=end_date,
                page=page,
            ),
        )
        return [IntakeQAppointment.model_validate(row) for row in data or []]

    def create_appointment(self, dto: CreateAppointmentDto) -> IntakeQAppointment:
        data = self._request(
            "POST",
            "appointments",
            "POST /appointments",
            json_body=dto.model_dump(by_alias=True, mode="json"),
        )
        return IntakeQAppointment.model_validate(data)

    # ── Invoices ─────────────────────────────────────────────────────

    def list_invoices(self, client_id: int) -> list[IntakeQInvoice]:
        data = self._request(
            "GET",
            "invoices",
            "GET /invoices",
            params=_query(clientId=client_id),
        )
        return [IntakeQInvoice.model_validate(row) for row in data or []]
