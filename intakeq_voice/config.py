"""Centralized configuration for the IntakeQ voice assistant.

Secret resolution order (per variable):
  1. Environment variable / ``.env`` file  (local dev)
  2. AWS SSM Parameter Store SecureString  (when ``AWS_EXECUTION_ENV`` is set)

The SSM paths follow the convention ``/intakeq-voice/<VARIABLE_NAME>``.
"""

from __future__ import annotations

import logging
import os
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

# ── Feature flag: running on AWS? ────────────────────────────────────
_ON_AWS = bool(os.getenv("AWS_EXECUTION_ENV"))


# ── Secret resolution ────────────────────────────────────────────────

def _get_ssm_parameter(name: str) -> str | None:
    """Fetch a SecureString from SSM Parameter Store.

    Returns ``None`` if the parameter does not exist or boto3 cannot reach
    AWS.  Errors are logged but never raised so the env-var path keeps
    working locally.
    """
    try:
        import boto3  # noqa: PLC0415 (only needed on AWS)

        ssm = boto3.client("ssm")
        resp = ssm.get_parameter(Name=f"/intakeq-voice/{name}", WithDecryption=True)
        return resp["Parameter"]["Value"]
    except Exception:
        logger.debug("SSM lookup for %s failed (expected locally)", name)
        return None


def _require_env(name: str) -> str:
    """Return a config value from env-var or SSM, or raise a clear error."""
    value = os.getenv(name)
    if value and not value.startswith("your_"):
        return value

    if _ON_AWS:
        ssm_value = _get_ssm_parameter(name)
        if ssm_value:
            return ssm_value

    raise OSError(
        f"Missing required configuration: {name}. "
        f"Set it in .env (local) or SSM Parameter Store /intakeq-voice/{name} (AWS)."
    )


# ── IntakeQ ─────────────────────────────────────────────────────────
INTAKEQ_API_KEY: str = _require_env("INTAKEQ_API_KEY")
INTAKEQ_BASE_URL: str = os.getenv("INTAKEQ_BASE_URL", "https://intakeq.com/api/v1/")
REQUEST_TIMEOUT_SECONDS: float = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "15"))

# ── Practice / voice behaviour ──────────────────────────────────────
# Wall-clock times spoken to callers and accepted for bookings are in this zone.
PRACTICE_TIMEZONE: str = os.getenv("PRACTICE_TIMEZONE", "America/New_York")
APPOINTMENT_LOOKAHEAD_DAYS: int = int(os.getenv("APPOINTMENT_LOOKAHEAD_DAYS", "30"))
MAX_VOICE_SEARCH_RESULTS: int = int(os.getenv("MAX_VOICE_SEARCH_RESULTS", "3"))
# 0 disables the bound.
VOICE_MAX_SUMMARY_WORDS: int = int(os.getenv("VOICE_MAX_SUMMARY_WORDS", "0"))

# ── Server ──────────────────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
SERVER_HOST: str = os.getenv("SERVER_HOST", "0.0.0.0")
SERVER_PORT: int = int(os.getenv("SERVER_PORT", "8000"))
CORS_ORIGINS: list[str] = os.getenv(
    "CORS_ORIGINS",
    "http://localhost:3000,http://localhost:5173",
).split(",")


def validate_settings(
    *,
    lookahead_days: int | None = None,
    max_search_results: int | None = None,
    timezone: str | None = None,
) -> list[str]:
    """Return a list of configuration problems (empty when the config is usable).

    Keyword arguments override the module values, which keeps the check
    testable without reloading the module.
    """
    lookahead_days = APPOINTMENT_LOOKAHEAD_DAYS if lookahead_days is None else lookahead_days
    max_search_results = MAX_VOICE_SEARCH_RESULTS if max_search_results is None else max_search_results
    timezone = timezone or PRACTICE_TIMEZONE

    errors: list[str] = []
    if lookahead_days <= 0:
        errors.append("APPOINTMENT_LOOKAHEAD_DAYS must be greater than 0")
    if max_search_results <= 0:
        errors.append("MAX_VOICE_SEARCH_RESULTS must be greater than 0")
    try:
        ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError):
        errors.append(f"PRACTICE_TIMEZONE '{timezone}' is not a known IANA timezone")
    return errors
