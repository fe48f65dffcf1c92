"""Error types and protocol for event stores."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Protocol, runtime_checkable

from ..model import Event


class StoreError(Exception):
    """A store operation failed (non-2xx response or transport failure)."""

    def __init__(self, operation: str, message: str, status: int | None = None):
        super().__init__(f"{operation}: {message}")
        self.operation = operation
        self.status = status


class NotFoundError(StoreError):
    """The event id no longer exists on the server (HTTP 404)."""


@runtime_checkable
class EventStore(Protocol):
    """Protocol that every event store must satisfy."""

    async def list_events(self) -> list[Event]: ...

    async def list_events_in_range(self, start: datetime, end: datetime) -> list[Event]: ...

    async def create_event(self, draft: Event | Mapping[str, Any]) -> Event: ...

    async def update_event(self, event_id: str, partial: Event | Mapping[str, Any]) -> Event: ...

    async def delete_event(self, event_id: str) -> None: ...
