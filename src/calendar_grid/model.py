"""Event record type, color palette and field validation."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Mapping

from dateutil.parser import ParserError
from dateutil.parser import parse as parse_dt

BLUE = "#4285F4"
GREEN = "#0B8043"
PURPLE = "#8E24AA"
RED = "#DB4437"
YELLOW = "#F4B400"

DEFAULT_COLOR = BLUE

PALETTE: dict[str, str] = {
    BLUE: "Blue",
    GREEN: "Green",
    PURPLE: "Purple",
    RED: "Red",
    YELLOW: "Yellow",
}

# Sidebar calendars; the color doubles as the filter key.
CALENDARS: dict[str, str] = {
    "My Calendar": BLUE,
    "Work": GREEN,
    "Personal": PURPLE,
    "Family": RED,
    "Other": YELLOW,
}

RECURRENCE_PATTERNS = ("", "daily", "weekly", "monthly", "yearly")


class ValidationError(ValueError):
    """Bad user input, raised before anything reaches the store."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


@dataclass
class Event:
    """A titled time interval with display color and metadata.

    Timestamps are naive local wall-clock values. ``recurring`` and
    ``recurrence_pattern`` are stored and round-tripped but never expanded.
    """

    id: str
    title: str
    start: datetime
    end: datetime
    description: str = ""
    color: str = DEFAULT_COLOR
    all_day: bool = False
    recurring: bool = False
    recurrence_pattern: str = ""
    created_at: datetime | None = None


def parse_timestamp(value: Any, field: str = "timestamp") -> datetime:
    """Coerce a string, date or datetime into a naive local datetime."""
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif isinstance(value, str) and value.strip():
        try:
            dt = parse_dt(value)
        except (ParserError, ValueError, OverflowError) as e:
            raise ValidationError(field, f"Invalid {field}: {value!r}") from e
    else:
        raise ValidationError(field, f"Invalid {field}: {value!r}")

    # Offset-aware wire values are shown in local wall-clock time
    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt


def to_iso(value: Any, field: str = "timestamp") -> str:
    """Serialize a timestamp (string or datetime) as an ISO-8601 UTC string."""
    dt = value if isinstance(value, datetime) else parse_timestamp(value, field)
    return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def validate_record(raw: Mapping[str, Any]) -> tuple[str, datetime, datetime]:
    """Check a raw record and return its parsed (title, start, end).

    Colors are not checked against the palette; unknown colors render as-is.
    """
    title = raw.get("title")
    if not isinstance(title, str) or not title.strip():
        raise ValidationError("title", "Title is required")

    start = parse_timestamp(raw.get("start"), "start")
    end = parse_timestamp(raw.get("end"), "end")

    color = raw.get("color", DEFAULT_COLOR)
    if not isinstance(color, str):
        raise ValidationError("color", f"Invalid color: {color!r}")

    return title, start, end


def duration_minutes(event: Event) -> float:
    """Length of the event in minutes; negative for inverted ranges."""
    return (event.end - event.start).total_seconds() / 60
