"""Time conversions between IntakeQ wire values and practice wall-clock time.

IntakeQ exchanges instants as Unix epoch *seconds* (appointment creation,
invoice dates) or ISO 8601 strings (appointment listings).  Callers speak
in wall-clock time of the practice's timezone.
"""

from __future__ import annotations

from datetime import UTC, date, datetime, tzinfo


def to_epoch_seconds(moment: datetime, tz: tzinfo) -> int:
    """Convert a wall-clock or aware datetime to whole UTC epoch seconds.

    Naive values are interpreted in *tz*; aware values keep their own
    offset.  Sub-second precision is dropped.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=tz)
    return int(moment.astimezone(UTC).timestamp())


def from_epoch_seconds(seconds: int, tz: tzinfo) -> datetime:
    """Inverse of :func:`to_epoch_seconds`: an aware datetime in *tz*."""
    return datetime.fromtimestamp(seconds, tz=tz)


def epoch_to_date(seconds: int) -> date:
    """Calendar date (UTC) of an epoch-seconds timestamp."""
    return datetime.fromtimestamp(seconds, tz=UTC).date()


def to_local(moment: datetime, tz: tzinfo) -> datetime:
    """Express *moment* in *tz*; naive values are taken to be UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(tz)


def format_voice_date(day: date) -> str:
    """'March 05, 2026'"""
    return f"{day:%B %d, %Y}"


def format_voice_datetime(moment: datetime) -> str:
    """'March 05, 2026 at 2:30 PM' — 12-hour clock, no leading zero on the hour."""
    hour = moment.hour % 12 or 12
    meridiem = "AM" if moment.hour < 12 else "PM"
    return f"{format_voice_date(moment)} at {hour}:{moment:%M} {meridiem}"
