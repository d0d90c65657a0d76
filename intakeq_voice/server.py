"""FastAPI server for the IntakeQ voice assistant.

Run with:
    uvicorn intakeq_voice.server:app --reload --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from intakeq_voice import config
from intakeq_voice.api.routes import router
from intakeq_voice.intents import IntentRouter
from intakeq_voice.services.aggregator import VoiceAggregator
from intakeq_voice.services.intakeq_client import IntakeQClient

# ── Logging ──────────────────────────────────────────────────────────
logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan: composition root ───────────────────────────────────────
@asynccontextmanager
async def lifespan(application: FastAPI):
    """Build the IntakeQ client, aggregator and router once per process.

    They live in app state for the lifetime of the server; the HTTP
    connection pool is closed on shutdown.
    """
    problems = config.validate_settings()
    if problems:
        raise RuntimeError("Invalid configuration: " + "; ".join(problems))

    client = IntakeQClient(
        config.INTAKEQ_API_KEY,
        config.INTAKEQ_BASE_URL,
        timeout=config.REQUEST_TIMEOUT_SECONDS,
    )
    aggregator = VoiceAggregator(
        client,
        timezone=config.PRACTICE_TIMEZONE,
        lookahead_days=config.APPOINTMENT_LOOKAHEAD_DAYS,
    )
    application.state.aggregator = aggregator
    application.state.intent_router = IntentRouter(
        aggregator, max_search_results=config.MAX_VOICE_SEARCH_RESULTS,
    )
    application.state.max_summary_words = config.VOICE_MAX_SUMMARY_WORDS
    logger.info("IntakeQ voice assistant ready (timezone=%s)", config.PRACTICE_TIMEZONE)
    try:
        yield
    finally:
        client.close()
        logger.info("IntakeQ client closed.")


# ── FastAPI application ──────────────────────────────────────────────
app = FastAPI(
    title="IntakeQ Voice Assistant",
    description=(
        "Voice-friendly client lookup, appointment scheduling and "
        "invoice summaries over the IntakeQ API."
    ),
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Request-ID middleware ────────────────────────────────────────────
@app.middleware("http")
async def add_request_id(request: Request, call_next) -> Response:
    """Attach a request ID for log correlation and echo it back as ``X-Request-ID``."""
    request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
    request.state.request_id = request_id
    logger.info("[%s] %s %s", request_id, request.method, request.url.path)
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


app.include_router(router, prefix="/api")


@app.get("/")
async def root():
    return {
        "service": "IntakeQ Voice Assistant",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/health",
        "webhook": "/api/vapi/webhook",
    }


if __name__ == "__main__":
    logger.info("Starting IntakeQ voice API on %s:%d", config.SERVER_HOST, config.SERVER_PORT)
    uvicorn.run(
        "intakeq_voice.server:app",
        host=config.SERVER_HOST,
        port=config.SERVER_PORT,
        reload=True,
    )
