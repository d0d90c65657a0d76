"""IntakeQ voice assistant — a voice-friendly layer over the IntakeQ practice API.

Architecture Overview
=====================

A Vapi voice agent (or any programmatic caller) reaches IntakeQ through
three cooperating pieces:

1. **VoiceAggregator** — composes one or more IntakeQ calls into a single
   domain view (client summary, appointment list, invoice list).  A client
   summary fetches the profile first, then appointments and invoices
   concurrently.

2. **summarizer** — pure functions that turn those views into short,
   deterministic sentences for text-to-speech.

3. **IntentRouter** — classifies a transcript with ordered keyword rules
   (search → appointment → invoice → help), extracts a search term and
   dispatches.

Routing: webhook → IntentRouter → VoiceAggregator → IntakeQClient → summarizer → reply

Key Design Decisions
--------------------
- **Results, not exceptions, at component seams**: aggregator and router
  return ``Result`` values; upstream failures are wrapped once into
  ``OrchestrationError``.
- **No caching, no retries**: every view is a fresh projection of IntakeQ
  data at call time.
- **Composition root**: the FastAPI lifespan owns the HTTP client; nothing
  holds a module-level singleton.
- **Wall-clock in, epoch out**: bookings are spoken in the practice's
  timezone and sent to IntakeQ as UTC epoch seconds.

Package Structure
-----------------
- ``intakeq_voice/config.py`` — configuration from env / ``.env`` / SSM
- ``intakeq_voice/domain.py`` — immutable domain objects
- ``intakeq_voice/results.py`` — ``Result`` type and error taxonomy
- ``intakeq_voice/timeutils.py`` — epoch and wall-clock conversions
- ``intakeq_voice/intents.py`` — keyword intent router
- ``intakeq_voice/services/`` — IntakeQ client, aggregator, summarizer, metrics
- ``intakeq_voice/api/`` — FastAPI routes and Pydantic schemas
- ``intakeq_voice/server.py`` — FastAPI application
- ``intakeq_voice/main.py`` — CLI for trying the router
"""
