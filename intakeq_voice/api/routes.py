"""FastAPI route definitions for the IntakeQ voice assistant API."""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import TypeVar

from fastapi import APIRouter, Body, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from intakeq_voice.api.schemas import (
    HealthResponse,
    SummaryResponse,
    VapiWebhookRequest,
    VapiWebhookResponse,
)
from intakeq_voice.domain import (
    AppointmentInfo,
    ClientSearchResult,
    CreateAppointmentRequest,
    InvoiceInfo,
)
from intakeq_voice.intents import APOLOGY_MESSAGE, IntentRouter
from intakeq_voice.results import Result, ValidationFailure, require_text
from intakeq_voice.services.aggregator import VoiceAggregator
from intakeq_voice.services.summarizer import limit_words

logger = logging.getLogger(__name__)

router = APIRouter()

T = TypeVar("T")


def _state(request: Request, name: str):
    """Fetch a component built by the lifespan (see ``server.py``)."""
    component = getattr(request.app.state, name, None)
    if component is None:
        raise HTTPException(
            status_code=503,
            detail="The service is still starting up. Please try again in a moment.",
        )
    return component


def _aggregator(request: Request) -> VoiceAggregator:
    return _state(request, "aggregator")


def _require(value: str | None, message: str) -> str:
    checked = require_text(value, message)
    if not checked.ok:
        raise HTTPException(status_code=400, detail=message)
    return checked.value


def _unwrap(result: Result[T], request: Request) -> T:
    """Return the value or translate the error into an HTTP response."""
    if result.ok:
        return result.value  # type: ignore[return-value]
    if isinstance(result.error, ValidationFailure):
        raise HTTPException(status_code=400, detail=result.error.message)
    request_id = getattr(request.state, "request_id", "?")
    logger.error("[%s] %s", request_id, result.error)
    raise HTTPException(status_code=500, detail=str(result.error))


def _summary(result: Result[str], request: Request) -> SummaryResponse:
    text = _unwrap(result, request)
    max_words = getattr(request.app.state, "max_summary_words", 0)
    return SummaryResponse(summary=limit_words(text, max_words))


# ── Health ───────────────────────────────────────────────────────────


@router.get("/health", response_model=HealthResponse)
async def health_check():
    return HealthResponse()


# ── Clients ──────────────────────────────────────────────────────────


@router.get("/vapi/clients/search", response_model=list[ClientSearchResult])
async def search_clients(
    request: Request,
    search_term: str | None = Query(default=None, alias="searchTerm"),
):
    """Search for clients by name, email, or phone."""
    term = _require(search_term, "Search term is required")
    result = await asyncio.to_thread(_aggregator(request).search_clients, term)
    return _unwrap(result, request)


@router.get("/vapi/clients/by-phone", response_model=ClientSearchResult)
async def find_client_by_phone(
    request: Request,
    phone_number: str | None = Query(default=None, alias="phoneNumber"),
):
    """First client matching a phone number, or 404."""
    phone = _require(phone_number, "Phone number is required")
    result = await asyncio.to_thread(_aggregator(request).find_client_by_phone, phone)
    client = _unwrap(result, request)
    if client is None:
        raise HTTPException(status_code=404, detail="Client not found")
    return client


@router.get("/vapi/clients/{client_id}/profile")
async def get_client_profile(client_id: int, request: Request):
    result = await asyncio.to_thread(_aggregator(request).get_client_profile, client_id)
    return _unwrap(result, request)


@router.get("/vapi/clients/{client_id}/summary", response_model=SummaryResponse)
async def get_client_summary(client_id: int, request: Request):
    """Client summary for voice response."""
    result = await asyncio.to_thread(_aggregator(request).get_client_summary_text, client_id)
    return _summary(result, request)


@router.get("/vapi/callers/briefing", response_model=SummaryResponse)
async def get_caller_briefing(
    request: Request,
    phone_number: str | None = Query(default=None, alias="phoneNumber"),
):
    """Client, appointment and invoice summary for an incoming caller's number."""
    phone = _require(phone_number, "Phone number is required")
    result = await asyncio.to_thread(_aggregator(request).get_caller_briefing, phone)
    return _summary(result, request)


# ── Appointments ─────────────────────────────────────────────────────


@router.get("/vapi/clients/{client_id}/appointments", response_model=list[AppointmentInfo])
async def get_client_appointments(
    client_id: int,
    request: Request,
    start_date: date | None = Query(default=None, alias="startDate"),
    end_date: date | None = Query(default=None, alias="endDate"),
):
    result = await asyncio.to_thread(
        _aggregator(request).get_client_appointments, client_id, start_date, end_date,
    )
    return _unwrap(result, request)


@router.get(
    "/vapi/clients/{client_id}/appointments/upcoming",
    response_model=list[AppointmentInfo],
)
async def get_upcoming_appointments(
    client_id: int,
    request: Request,
    days_ahead: int | None = Query(default=None, alias="daysAhead"),
):
    result = await asyncio.to_thread(
        _aggregator(request).get_upcoming_appointments, client_id, days_ahead,
    )
    return _unwrap(result, request)


@router.get(
    "/vapi/clients/{client_id}/appointments/summary",
    response_model=SummaryResponse,
)
async def get_appointment_summary(
    client_id: int,
    request: Request,
    days_ahead: int | None = Query(default=None, alias="daysAhead"),
):
    result = await asyncio.to_thread(
        _aggregator(request).get_appointment_summary, client_id, days_ahead,
    )
    return _summary(result, request)


@router.post("/vapi/appointments", response_model=AppointmentInfo, status_code=201)
async def create_appointment(body: CreateAppointmentRequest, request: Request):
    """Book an appointment; ``start_datetime`` is practice wall-clock time."""
    result = await asyncio.to_thread(_aggregator(request).create_appointment, body)
    return _unwrap(result, request)


# ── Invoices ─────────────────────────────────────────────────────────


@router.get("/vapi/clients/{client_id}/invoices", response_model=list[InvoiceInfo])
async def get_client_invoices(client_id: int, request: Request):
    result = await asyncio.to_thread(_aggregator(request).get_client_invoices, client_id)
    return _unwrap(result, request)


@router.get(
    "/vapi/clients/{client_id}/invoices/outstanding",
    response_model=list[InvoiceInfo],
)
async def get_outstanding_invoices(client_id: int, request: Request):
    result = await asyncio.to_thread(_aggregator(request).get_outstanding_invoices, client_id)
    return _unwrap(result, request)


@router.get("/vapi/clients/{client_id}/invoices/summary", response_model=SummaryResponse)
async def get_invoice_summary(client_id: int, request: Request):
    """Summary of the client's outstanding invoices."""
    result = await asyncio.to_thread(_aggregator(request).get_invoice_summary, client_id)
    return _summary(result, request)


# ── Vapi webhook ─────────────────────────────────────────────────────


@router.post("/vapi/webhook", response_model=VapiWebhookResponse)
async def vapi_webhook(
    http_request: Request,
    payload: VapiWebhookRequest | None = Body(default=None),
):
    """Route a caller utterance to an intent and answer in speakable text.

    Failures are logged in full server-side; the caller only ever hears a
    fixed apology.
    """
    intent_router: IntentRouter = _state(http_request, "intent_router")
    request_id = getattr(http_request.state, "request_id", "?")

    try:
        result = await asyncio.to_thread(intent_router.route, payload)
    except Exception:
        logger.exception("[%s] Unexpected error routing webhook", request_id)
        result = None

    if result is not None and result.ok:
        return result.value
    if result is not None and isinstance(result.error, ValidationFailure):
        raise HTTPException(status_code=400, detail=result.error.message)

    if result is not None:
        logger.error("[%s] Webhook request failed: %s", request_id, result.error)
    apology = VapiWebhookResponse(
        message=APOLOGY_MESSAGE, context=payload.context if payload else {},
    )
    return JSONResponse(status_code=500, content=apology.model_dump(mode="json"))
