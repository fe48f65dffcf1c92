"""Event store backed by the calendar REST service (JSON over HTTP)."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Mapping

import httpx

from ..model import Event, ValidationError, to_iso
from .base import NotFoundError, StoreError
from .wire import fields_to_wire, normalize_event

logger = logging.getLogger("calendar-grid")


class HttpEventStore:
    """Store client for ``/api/events``. Never retries; every failure raises."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(timeout=timeout)

    async def aclose(self) -> None:
        if self._owns_http_client:
            await self._http_client.aclose()

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> httpx.Response:
        url = f"{self._base_url}{path}"
        logger.debug("%s %s (%s)", method, url, operation)
        try:
            response = await self._http_client.request(method, url, params=params, json=json_body)
        except httpx.HTTPError as exc:
            raise StoreError(operation, f"request failed: {exc}") from exc

        if response.status_code == 404:
            raise NotFoundError(operation, "event not found", status=404)
        if response.status_code < 200 or response.status_code >= 300:
            raise StoreError(operation, f"HTTP {response.status_code}", status=response.status_code)
        return response

    @staticmethod
    def _json(operation: str, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise StoreError(operation, "response is not valid JSON", status=response.status_code) from exc

    def _event_list(self, operation: str, response: httpx.Response) -> list[Event]:
        data = self._json(operation, response)
        if not isinstance(data, list):
            raise StoreError(operation, "expected a list of events", status=response.status_code)
        if not all(isinstance(item, dict) for item in data):
            raise StoreError(operation, "expected event objects", status=response.status_code)
        try:
            return [normalize_event(item) for item in data]
        except ValidationError as exc:
            raise StoreError(operation, f"malformed event: {exc}", status=response.status_code) from exc

    def _single_event(self, operation: str, response: httpx.Response) -> Event:
        data = self._json(operation, response)
        if not isinstance(data, dict):
            raise StoreError(operation, "expected an event object", status=response.status_code)
        try:
            return normalize_event(data)
        except ValidationError as exc:
            raise StoreError(operation, f"malformed event: {exc}", status=response.status_code) from exc

    async def list_events(self) -> list[Event]:
        response = await self._request("list_events", "GET", "/events")
        return self._event_list("list_events", response)

    async def list_events_in_range(self, start: datetime, end: datetime) -> list[Event]:
        params = {"start": to_iso(start, "start"), "end": to_iso(end, "end")}
        response = await self._request("list_events_in_range", "GET", "/events/range", params=params)
        return self._event_list("list_events_in_range", response)

    async def create_event(self, draft: Event | Mapping[str, Any]) -> Event:
        response = await self._request("create_event", "POST", "/events", json_body=fields_to_wire(draft))
        event = self._single_event("create_event", response)
        logger.info("Event created: %s (%s)", event.title, event.id)
        return event

    async def update_event(self, event_id: str, partial: Event | Mapping[str, Any]) -> Event:
        response = await self._request(
            "update_event", "PUT", f"/events/{event_id}", json_body=fields_to_wire(partial)
        )
        event = self._single_event("update_event", response)
        logger.info("Event updated: %s (%s)", event.title, event.id)
        return event

    async def delete_event(self, event_id: str) -> None:
        await self._request("delete_event", "DELETE", f"/events/{event_id}")
        logger.info("Event deleted: %s", event_id)
