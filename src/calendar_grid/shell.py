"""Application state: current date, view, event collection and user actions."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Awaitable, Callable

from .config import AppConfig, default_api_url
from .editor import Draft, EventEditor
from .layout import MonthGrid, TimeGrid, ViewMode, filter_by_color, layout, shift, visible_range
from .model import Event, ValidationError
from .store.base import EventStore, StoreError

logger = logging.getLogger("calendar-grid")

LOAD_ERROR = "Failed to load events. Please check if the backend server is running."
SAVE_ERROR = "Failed to save event. Please try again."
DELETE_ERROR = "Failed to delete event. Please try again."


class CalendarShell:
    """Owns the in-memory event collection and wires actions to the store.

    The collection is only changed after a store call has completed. A failed
    write leaves it untouched; a failed read clears it.
    """

    def __init__(self, store: EventStore, config: AppConfig | None = None, today: date | None = None):
        self.store = store
        self.config = config or AppConfig(api_url=default_api_url())
        self.current_date: date = today or date.today()
        self.view: ViewMode = self.config.default_view
        self.events: list[Event] = []
        self.loading = False
        self.error: str | None = None
        self.active_colors: list[str] = list(self.config.active_colors)
        self.drawer_open = self.config.drawer_open
        self.editor = EventEditor()
        self.loaded = False
        self._load_seq = 0

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def _load(self, fetch: Callable[[], Awaitable[list[Event]]]) -> bool:
        # Only the most recently issued load may touch state
        self._load_seq += 1
        seq = self._load_seq
        self.loading = True
        self.error = None
        try:
            events = await fetch()
        except StoreError as e:
            if seq != self._load_seq:
                logger.debug("Dropping failure of superseded load #%d: %s", seq, e)
                return False
            logger.warning("Failed to load events: %s", e)
            self.error = LOAD_ERROR
            self.events = []
            return False
        finally:
            if seq == self._load_seq:
                self.loading = False

        if seq != self._load_seq:
            logger.debug("Dropping response of superseded load #%d", seq)
            return False
        self.events = list(events)
        self.loaded = True
        logger.info("Loaded %d event(s)", len(self.events))
        return True

    async def load_events(self) -> bool:
        return await self._load(self.store.list_events)

    async def load_events_in_range(self) -> bool:
        """Load only what the current view shows."""
        start, end = visible_range(self.current_date, self.view, self.config.week_starts_on)
        return await self._load(lambda: self.store.list_events_in_range(start, end))

    # ------------------------------------------------------------------
    # View state
    # ------------------------------------------------------------------

    def set_view(self, mode: ViewMode | str) -> None:
        self.view = ViewMode(mode)

    def set_date(self, value: date | datetime) -> None:
        self.current_date = value.date() if isinstance(value, datetime) else value

    def go_previous(self) -> None:
        self.current_date = shift(self.current_date, self.view, -1)

    def go_next(self) -> None:
        self.current_date = shift(self.current_date, self.view, 1)

    def go_today(self, today: date | None = None) -> None:
        self.current_date = today or date.today()

    def toggle_color(self, color: str) -> bool:
        """Flip a calendar filter. Returns whether the color is now active."""
        if color in self.active_colors:
            self.active_colors = [c for c in self.active_colors if c != color]
            return False
        self.active_colors = [*self.active_colors, color]
        return True

    def toggle_drawer(self) -> bool:
        self.drawer_open = not self.drawer_open
        return self.drawer_open

    def dismiss_error(self) -> None:
        self.error = None

    def visible_events(self) -> list[Event]:
        return filter_by_color(self.events, self.active_colors)

    def render(self, today: date | None = None) -> MonthGrid | TimeGrid:
        return layout(
            self.current_date,
            self.view,
            self.visible_events(),
            week_starts_on=self.config.week_starts_on,
            today=today or date.today(),
        )

    def header_title(self) -> str:
        d = self.current_date
        if self.view is ViewMode.MONTH:
            return d.strftime("%B %Y")
        if self.view is ViewMode.WEEK:
            return f"Week of {d:%b} {d.day}, {d.year}"
        return f"{d:%A}, {d:%B} {d.day}, {d.year}"

    def find(self, event_id: str) -> Event | None:
        for event in self.events:
            if event.id == event_id:
                return event
        return None

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def open_create(self, now: datetime | None = None) -> Draft:
        return self.editor.open_create(now)

    def open_edit(self, event_id: str) -> Draft:
        event = self.find(event_id)
        if event is None:
            raise KeyError(f"Unknown event: {event_id}")
        return self.editor.open_edit(event)

    def close_editor(self) -> None:
        self.editor.close()

    async def save(self) -> Event | None:
        """Persist the open draft. The editor stays open until the store confirms."""
        try:
            record = self.editor.build_record()
        except ValidationError as e:
            self.error = str(e)
            return None

        self.error = None
        editing = not self.editor.is_new
        event_id = self.editor.target.id if editing else ""
        try:
            if editing:
                saved = await self.store.update_event(event_id, record)
            else:
                saved = await self.store.create_event(record)
        except StoreError as e:
            logger.warning("Failed to save event: %s", e)
            self.error = SAVE_ERROR
            return None

        if editing:
            if not saved.id:
                saved = replace(saved, id=event_id)
            self.events = [saved if e.id == event_id else e for e in self.events]
        else:
            self.events = [*self.events, saved]
        self.editor.close()
        return saved

    async def delete(self) -> bool:
        target = self.editor.delete_target()
        self.error = None
        try:
            await self.store.delete_event(target.id)
        except StoreError as e:
            logger.warning("Failed to delete event %s: %s", target.id, e)
            self.error = DELETE_ERROR
            return False

        self.events = [e for e in self.events if e.id != target.id]
        self.editor.close()
        return True
