"""Keyword intent routing for free-text voice transcripts.

Classification is a single ordered pass over the lower-cased message; the
first rule with a matching substring wins, so "please search my invoice"
is a client search.  Argument extraction is equally literal: the search
term is everything after the first standalone "for"/"with" token that is not
the final token, or the last three tokens when there is no such marker.

Only the search intent reaches the aggregator.  Appointment and invoice
intents answer with a request for the client's identifier.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from enum import Enum

from intakeq_voice.api.schemas import VapiWebhookRequest, VapiWebhookResponse
from intakeq_voice.domain import ClientSearchResult
from intakeq_voice.results import Result, require_text
from intakeq_voice.services.aggregator import VoiceAggregator

logger = logging.getLogger(__name__)


class Intent(str, Enum):
    CLIENT_SEARCH = "client_search"
    APPOINTMENT = "appointment"
    INVOICE = "invoice"
    HELP = "help"


# Priority order matters.
INTENT_RULES: tuple[tuple[Intent, tuple[str, ...]], ...] = (
    (Intent.CLIENT_SEARCH, ("search", "find", "look up")),
    (Intent.APPOINTMENT, ("appointment", "schedule")),
    (Intent.INVOICE, ("invoice", "bill", "payment")),
)

SEARCH_MARKERS = ("for", "with")
FALLBACK_TERM_WORDS = 3

HELP_MESSAGE = (
    "I can help you search for clients, manage appointments, or check invoices. "
    "What would you like to do?"
)
MISSING_TERM_MESSAGE = "Please provide a name, email, or phone number to search for."
NO_CLIENTS_MESSAGE = "No clients found matching your search."
APPOINTMENT_MESSAGE = (
    "I can help you view or schedule appointments. "
    "Please provide the client ID or phone number."
)
INVOICE_MESSAGE = (
    "I can help you check invoice information. "
    "Please provide the client ID or phone number."
)
APOLOGY_MESSAGE = (
    "I'm sorry, I ran into a problem looking that up. Please try again in a moment."
)


def classify_intent(message: str) -> Intent:
    lowered = message.lower()
    for intent, keywords in INTENT_RULES:
        if any(keyword in lowered for keyword in keywords):
            return intent
    return Intent.HELP


def extract_search_term(message: str) -> str:
    """'find client with phone 555 1234' -> 'phone 555 1234'; 'please look up Jones' -> 'look up Jones'.

    A marker in final position has nothing after it and is treated as an
    ordinary word: 'please find client for' -> 'find client for'.
    """
    words = message.split()
    for index, word in enumerate(words[:-1]):
        if word.lower() in SEARCH_MARKERS:
            return " ".join(words[index + 1 :])
    return " ".join(words[-FALLBACK_TERM_WORDS:])


def render_search_reply(clients: Sequence[ClientSearchResult], max_names: int = 3) -> str:
    """The count covers every match; only the first *max_names* are read out."""
    if not clients:
        return NO_CLIENTS_MESSAGE

    reply = f"Found {len(clients)} client{'' if len(clients) == 1 else 's'}: "
    for client in clients[:max_names]:
        if client.name:
            reply += f"{client.name}, "
    return reply.rstrip(" ,")


class IntentRouter:
    """Stateless webhook handler: classify, extract, dispatch, render."""

    def __init__(self, aggregator: VoiceAggregator, *, max_search_results: int = 3):
        self._aggregator = aggregator
        self._max_search_results = max_search_results

    def route(self, request: VapiWebhookRequest | None) -> Result[VapiWebhookResponse]:
        checked = require_text(request.message if request else None, "Invalid webhook request")
        if not checked.ok:
            return Result.failure(checked.error)

        intent = classify_intent(request.message)
        logger.info("Call %s routed to %s", request.call_id or "-", intent.value)

        if intent is Intent.CLIENT_SEARCH:
            reply = self._search(request.message)
        elif intent is Intent.APPOINTMENT:
            reply = Result.success(APPOINTMENT_MESSAGE)
        elif intent is Intent.INVOICE:
            reply = Result.success(INVOICE_MESSAGE)
        else:
            reply = Result.success(HELP_MESSAGE)

        # context is opaque: echoed back untouched.
        return reply.map(
            lambda text: VapiWebhookResponse(message=text, context=request.context)
        )

    def _search(self, message: str) -> Result[str]:
        term = extract_search_term(message)
        if not term.strip():
            return Result.success(MISSING_TERM_MESSAGE)
        found = self._aggregator.search_clients(term)
        return found.map(lambda clients: render_search_reply(clients, self._max_search_results))
