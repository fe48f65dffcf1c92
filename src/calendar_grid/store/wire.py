"""Translation between the service's JSON event shape and :class:`Event`."""

from __future__ import annotations

from dataclasses import asdict, replace
from typing import Any, Mapping

from ..model import DEFAULT_COLOR, Event, parse_timestamp, to_iso

WIRE_NAMES = {
    "all_day": "allDay",
    "recurrence_pattern": "recurrencePattern",
    "created_at": "createdAt",
}

TIMESTAMP_FIELDS = {"start", "end", "createdAt"}


def canonical_id(raw: Mapping[str, Any]) -> str:
    """Pick one id: the store-native ``_id`` wins over a generic ``id``."""
    value = raw.get("_id") or raw.get("id") or ""
    return str(value)


def normalize_event(raw: Event | Mapping[str, Any]) -> Event:
    """Convert a wire record (or an existing Event) into the in-memory shape."""
    if isinstance(raw, Event):
        return replace(
            raw,
            id=str(raw.id or ""),
            start=parse_timestamp(raw.start, "start"),
            end=parse_timestamp(raw.end, "end"),
            description=raw.description or "",
            color=raw.color or DEFAULT_COLOR,
            all_day=bool(raw.all_day),
            recurring=bool(raw.recurring),
            recurrence_pattern=raw.recurrence_pattern or "",
        )

    created = raw.get("createdAt")
    return Event(
        id=canonical_id(raw),
        title=raw.get("title") or "",
        start=parse_timestamp(raw.get("start"), "start"),
        end=parse_timestamp(raw.get("end"), "end"),
        description=raw.get("description") or "",
        color=raw.get("color") or DEFAULT_COLOR,
        all_day=bool(raw.get("allDay", False)),
        recurring=bool(raw.get("recurring", False)),
        recurrence_pattern=raw.get("recurrencePattern") or "",
        created_at=parse_timestamp(created, "createdAt") if created else None,
    )


def fields_to_wire(fields: Event | Mapping[str, Any]) -> dict[str, Any]:
    """Build an outgoing request body. Ids are never sent in the body."""
    if isinstance(fields, Event):
        fields = asdict(fields)

    body: dict[str, Any] = {}
    for key, value in fields.items():
        if key in ("id", "_id"):
            continue
        name = WIRE_NAMES.get(key, key)
        if name in TIMESTAMP_FIELDS:
            if value is None:
                continue
            value = to_iso(value, name)
        body[name] = value
    return body


def event_to_wire(event: Event) -> dict[str, Any]:
    """Full wire representation including the store-native id."""
    body = fields_to_wire(event)
    body["_id"] = event.id
    return body
