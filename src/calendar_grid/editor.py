"""Create/edit form state for a single event."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from datetime import datetime, timedelta

from .model import DEFAULT_COLOR, Event, parse_timestamp, validate_record

# Minute precision, local wall-clock (what a datetime-local input holds)
EDIT_FORMAT = "%Y-%m-%dT%H:%M"

DEFAULT_DURATION = timedelta(hours=1)


@dataclass
class Draft:
    """Transient, unsaved copy of an event while the editor is open."""

    title: str = ""
    description: str = ""
    start: str = ""
    end: str = ""
    all_day: bool = False
    color: str = DEFAULT_COLOR
    recurring: bool = False
    recurrence_pattern: str = ""


DRAFT_FIELDS = frozenset(f.name for f in fields(Draft))


def _parse_edit_value(value: str, field: str) -> datetime:
    try:
        return datetime.strptime(value, EDIT_FORMAT)
    except (TypeError, ValueError):
        # Pasted values may carry seconds or an offset
        return parse_timestamp(value, field)


class EventEditor:
    """Holds at most one draft. Save and delete are driven by the shell."""

    def __init__(self):
        self.draft: Draft | None = None
        self.target: Event | None = None

    @property
    def is_open(self) -> bool:
        return self.draft is not None

    @property
    def is_new(self) -> bool:
        return self.target is None or not self.target.id

    @property
    def can_delete(self) -> bool:
        return self.is_open and not self.is_new

    def open_create(self, now: datetime | None = None) -> Draft:
        now = now or datetime.now()
        self.target = None
        self.draft = Draft(
            start=now.strftime(EDIT_FORMAT),
            end=(now + DEFAULT_DURATION).strftime(EDIT_FORMAT),
        )
        return self.draft

    def open_edit(self, event: Event) -> Draft:
        self.target = event
        self.draft = Draft(
            title=event.title,
            description=event.description,
            start=event.start.strftime(EDIT_FORMAT),
            end=event.end.strftime(EDIT_FORMAT),
            all_day=event.all_day,
            color=event.color or DEFAULT_COLOR,
            recurring=event.recurring,
            recurrence_pattern=event.recurrence_pattern,
        )
        return self.draft

    def update(self, **changes: object) -> Draft:
        """Replace draft fields. No cross-field checks happen here."""
        if self.draft is None:
            raise ValueError("Editor is not open")
        unknown = set(changes) - DRAFT_FIELDS
        if unknown:
            raise ValueError(f"Unknown draft fields: {sorted(unknown)}")
        self.draft = replace(self.draft, **changes)
        return self.draft

    def build_record(self) -> Event:
        """Turn the draft back into an Event, or raise ValidationError."""
        if self.draft is None:
            raise ValueError("Editor is not open")
        draft = self.draft

        title, _, _ = validate_record({
            "title": draft.title,
            "start": draft.start or None,
            "end": draft.end or None,
            "color": draft.color,
        })
        start = _parse_edit_value(draft.start, "start")
        end = _parse_edit_value(draft.end, "end")

        base = self.target
        return Event(
            id=base.id if base else "",
            title=title,
            start=start,
            end=end,
            description=draft.description or "",
            color=draft.color or DEFAULT_COLOR,
            all_day=bool(draft.all_day),
            recurring=bool(draft.recurring),
            recurrence_pattern=draft.recurrence_pattern or "",
            created_at=base.created_at if base else None,
        )

    def delete_target(self) -> Event:
        """The record a delete applies to. New drafts cannot be deleted."""
        if not self.can_delete:
            raise ValueError("Only a saved event can be deleted")
        return self.target

    def close(self) -> None:
        self.draft = None
        self.target = None
