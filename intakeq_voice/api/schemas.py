"""Pydantic schemas for the FastAPI endpoints."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class VapiWebhookRequest(BaseModel):
    """Payload Vapi posts for each caller utterance."""

    model_config = ConfigDict(populate_by_name=True)

    # Optional here so an empty or missing message (or body) is a 400 from
    # the route, not a schema error.
    message: str | None = Field(default=None, description="Transcribed caller message")
    call_id: str | None = Field(default=None, alias="callId")
    phone_number: str | None = Field(default=None, alias="phoneNumber")
    context: dict[str, Any] = Field(
        default_factory=dict,
        description="Opaque conversation state, returned unchanged",
    )

    @field_validator("context", mode="before")
    @classmethod
    def _null_context_is_empty(cls, value: Any) -> Any:
        return {} if value is None else value


class VapiWebhookResponse(BaseModel):
    """Text for Vapi to speak back, plus the pass-through context."""

    message: str
    context: dict[str, Any] = Field(default_factory=dict)


class SummaryResponse(BaseModel):
    summary: str = Field(..., description="Natural-language text for voice playback")


class HealthResponse(BaseModel):
    status: str = "ok"
    service: str = "intakeq-voice"
