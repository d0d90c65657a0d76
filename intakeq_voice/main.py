"""CLI entry point for trying the voice intent router from a terminal.

Each line typed is handled exactly like a Vapi webhook message, against the
real IntakeQ API configured in ``.env``.  For production, run the FastAPI
server (intakeq_voice/server.py).

Usage:
    python -m intakeq_voice.main            # normal mode (quiet)
    python -m intakeq_voice.main --debug    # debug mode (shows API calls)
    python -m intakeq_voice.main --caller 555-123-4567   # start with a caller briefing
"""

from __future__ import annotations

import argparse
import logging
import uuid

from dotenv import load_dotenv

from intakeq_voice.api.schemas import VapiWebhookRequest
from intakeq_voice.intents import APOLOGY_MESSAGE, IntentRouter

logger = logging.getLogger(__name__)


def _configure_logging(debug: bool = False) -> None:
    """WARNING by default, DEBUG when --debug is passed."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
    )
    if not debug:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("intakeq_voice").setLevel(logging.DEBUG if debug else logging.INFO)


def main():
    parser = argparse.ArgumentParser(description="IntakeQ voice assistant CLI")
    parser.add_argument(
        "--debug", action="store_true",
        help="Show all log messages including HTTP requests",
    )
    parser.add_argument(
        "--caller", metavar="PHONE",
        help="Read the caller briefing for this phone number before chatting",
    )
    args = parser.parse_args()

    load_dotenv()
    _configure_logging(debug=args.debug)

    # Imported late so a missing API key surfaces after logging is set up.
    from intakeq_voice import config
    from intakeq_voice.services.aggregator import VoiceAggregator
    from intakeq_voice.services.intakeq_client import IntakeQClient

    print("\n" + "=" * 60)
    print("  IntakeQ Voice Assistant - CLI")
    print("=" * 60)
    print("  Type what a caller would say and press Enter.")
    print("  Commands: 'quit' to exit.")
    print("=" * 60 + "\n")

    with IntakeQClient(
        config.INTAKEQ_API_KEY,
        config.INTAKEQ_BASE_URL,
        timeout=config.REQUEST_TIMEOUT_SECONDS,
    ) as client:
        aggregator = VoiceAggregator(
            client,
            timezone=config.PRACTICE_TIMEZONE,
            lookahead_days=config.APPOINTMENT_LOOKAHEAD_DAYS,
        )
        intent_router = IntentRouter(
            aggregator, max_search_results=config.MAX_VOICE_SEARCH_RESULTS,
        )
        call_id = str(uuid.uuid4())
        logger.info("Started call %s", call_id)

        if args.caller:
            briefing = aggregator.get_caller_briefing(args.caller)
            print(f"Assistant: {briefing.value if briefing.ok else briefing.error}\n")

        while True:
            try:
                user_input = input("Caller: ").strip()
            except (KeyboardInterrupt, EOFError):
                print("\n\nGoodbye!")
                break

            if not user_input:
                continue
            if user_input.lower() in ("exit", "quit", "q"):
                print("\nGoodbye!")
                break

            result = intent_router.route(
                VapiWebhookRequest(message=user_input, call_id=call_id, phone_number=args.caller),
            )
            if result.ok:
                print(f"\nAssistant: {result.value.message}\n")
            else:
                logger.error("Request failed: %s", result.error)
                print(f"\nAssistant: {APOLOGY_MESSAGE}\n")


if __name__ == "__main__":
    main()
