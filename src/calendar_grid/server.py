#!/usr/bin/env python3
"""
calendar-grid — Month/week/day calendar views as an MCP server.

Events live in the calendar REST service (/api/events); this server keeps the
session state (current date, view, color filters, loaded events) and exposes
the user actions as tools.

Environment variables:
    CALENDAR_API_URL — Event service base URL (default: http://localhost:$PORT/api)
    PORT — Event service port used for the default URL (default: 5000)
    CALENDAR_GRID_CONFIG — Path to calendar_grid.yaml (default: /config/calendar_grid.yaml)
"""

import logging
import sys
from typing import Any

from mcp.server.fastmcp import FastMCP

from .config import AppConfig, load_config
from .editor import DEFAULT_DURATION, EDIT_FORMAT
from .layout import ViewMode
from .model import CALENDARS, PALETTE, ValidationError, parse_timestamp
from .render import event_to_dict, grid_to_dict
from .shell import CalendarShell
from .store.base import StoreError
from .store.http import HttpEventStore

# MCP stdio servers must NEVER write to stdout — log to stderr only.
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger("calendar-grid")


# ---------------------------------------------------------------------------
# Module-level state
# ---------------------------------------------------------------------------

_config: AppConfig | None = None
_shell: CalendarShell | None = None

NOT_INITIALIZED = {"error": "Calendar not initialized. Start the server with main()."}


async def _ready_shell() -> CalendarShell | None:
    """Return the session shell, loading events on first use."""
    if _shell is None:
        return None
    if not _shell.loaded and not _shell.loading:
        await _shell.load_events()
    return _shell


def _resolve_color(value: str) -> str | None:
    """Accept a palette color or a sidebar calendar name."""
    if value in PALETTE:
        return value
    for name, color in CALENDARS.items():
        if name.lower() == value.strip().lower():
            return color
    return None


def _default_end(start: str) -> str | None:
    """One hour after ``start`` in edit format, or None if start is unparseable.

    An unparseable start is left for the editor to reject on save.
    """
    try:
        dt_start = parse_timestamp(start, "start")
    except ValidationError:
        return None
    return (dt_start + DEFAULT_DURATION).strftime(EDIT_FORMAT)


def _view_result(shell: CalendarShell) -> dict[str, Any]:
    result: dict[str, Any] = {
        "title": shell.header_title(),
        "view": shell.view.value,
        "date": shell.current_date.isoformat(),
        "active_colors": list(shell.active_colors),
        "drawer_open": shell.drawer_open,
        "grid": grid_to_dict(shell.render(), shell.config.theme),
    }
    if shell.error:
        result["error"] = shell.error
    return result


# ---------------------------------------------------------------------------
# MCP Server + Tools
# ---------------------------------------------------------------------------

mcp = FastMCP("calendar-grid")


@mcp.tool()
async def list_calendars() -> dict:
    """List the color calendars and whether each is currently shown."""
    shell = _shell
    active = set(shell.active_colors) if shell else set()
    return {
        "calendars": [
            {"name": name, "color": color, "active": color in active}
            for name, color in CALENDARS.items()
        ]
    }


@mcp.tool()
async def show_calendar(view: str = "", date: str = "") -> dict:
    """Render the calendar grid.

    Args:
        view: "month", "week" or "day". Empty = keep the current view.
        date: Reference date (ISO 8601, e.g. "2026-02-13"). Empty = keep the current date.
    """
    shell = await _ready_shell()
    if shell is None:
        return NOT_INITIALIZED

    if view:
        try:
            shell.set_view(view.strip().lower())
        except ValueError:
            return {"error": f"Invalid view '{view}'. Must be one of: {[m.value for m in ViewMode]}"}
    if date:
        try:
            shell.set_date(parse_timestamp(date, "date"))
        except ValidationError:
            return {"error": f"Invalid date: {date}"}

    return _view_result(shell)


@mcp.tool()
async def navigate(direction: str) -> dict:
    """Move the calendar by one month, week or day depending on the view.

    Args:
        direction: "previous", "next" or "today"
    """
    shell = await _ready_shell()
    if shell is None:
        return NOT_INITIALIZED

    direction = direction.strip().lower()
    if direction in ("previous", "prev"):
        shell.go_previous()
    elif direction == "next":
        shell.go_next()
    elif direction == "today":
        shell.go_today()
    else:
        return {"error": f"Invalid direction '{direction}'. Use previous, next or today."}
    return _view_result(shell)


@mcp.tool()
async def refresh_events() -> dict:
    """Reload all events from the event service."""
    if _shell is None:
        return NOT_INITIALIZED
    await _shell.load_events()
    return _view_result(_shell)


@mcp.tool()
async def dismiss_error() -> dict:
    """Clear the error banner shown with calendar views."""
    if _shell is None:
        return NOT_INITIALIZED
    _shell.dismiss_error()
    return _view_result(_shell)


@mcp.tool()
async def toggle_calendar(calendar: str) -> dict:
    """Show or hide a calendar's events.

    Args:
        calendar: Calendar name (e.g. "Work") or its color (e.g. "#0B8043")
    """
    if _shell is None:
        return NOT_INITIALIZED
    color = _resolve_color(calendar)
    if color is None:
        return {"error": f"Unknown calendar '{calendar}'. Available: {list(CALENDARS)}"}
    active = _shell.toggle_color(color)
    return {"color": color, "active": active, "active_colors": list(_shell.active_colors)}


@mcp.tool()
async def list_events_in_range(start: str, end: str) -> dict:
    """Fetch events overlapping a time range straight from the event service.

    Args:
        start: Start date/time (ISO 8601)
        end: End date/time (ISO 8601)
    """
    if _shell is None:
        return NOT_INITIALIZED
    try:
        dt_start = parse_timestamp(start, "start")
        dt_end = parse_timestamp(end, "end")
    except ValidationError as e:
        return {"error": str(e)}

    try:
        events = await _shell.store.list_events_in_range(dt_start, dt_end)
    except StoreError as e:
        logger.warning("Range query failed: %s", e)
        return {"error": f"Failed to fetch events: {e}"}
    return {
        "start": dt_start.isoformat(),
        "end": dt_end.isoformat(),
        "count": len(events),
        "events": [event_to_dict(e) for e in events],
    }


@mcp.tool()
async def get_event(event_id: str) -> dict:
    """Get a single loaded event with full details.

    Args:
        event_id: Event ID (from show_calendar)
    """
    shell = await _ready_shell()
    if shell is None:
        return NOT_INITIALIZED
    event = shell.find(event_id)
    if event is None:
        return {"error": f"Event not found: {event_id}"}
    return {"event": event_to_dict(event)}


@mcp.tool()
async def create_event(
    title: str,
    start: str = "",
    end: str = "",
    description: str = "",
    color: str = "",
    all_day: bool = False,
) -> dict:
    """Create a new calendar event.

    Args:
        title: Event title
        start: Start date/time (e.g. "2026-02-14T14:00"). Empty = now.
        end: End date/time. Empty = one hour after now.
        description: Event description (optional)
        color: Calendar color or name (optional, default blue)
        all_day: All-day flag
    """
    shell = await _ready_shell()
    if shell is None:
        return NOT_INITIALIZED

    shell.open_create()
    try:
        changes: dict[str, Any] = {"title": title, "description": description, "all_day": all_day}
        if start:
            changes["start"] = start
        if end:
            changes["end"] = end
        elif start:
            default_end = _default_end(start)
            if default_end:
                changes["end"] = default_end
        if color:
            changes["color"] = _resolve_color(color) or color
        shell.editor.update(**changes)

        event = await shell.save()
        if event is None:
            return {"error": shell.error}
        return {"success": True, "event": event_to_dict(event)}
    finally:
        shell.close_editor()


@mcp.tool()
async def update_event(
    event_id: str,
    title: str = "",
    start: str = "",
    end: str = "",
    description: str = "",
    color: str = "",
    all_day: bool | None = None,
) -> dict:
    """Update an existing calendar event. Only provided fields are changed.

    Args:
        event_id: Event ID (from show_calendar)
        title: New title (optional)
        start: New start date/time (optional)
        end: New end date/time (optional)
        description: New description (optional)
        color: New calendar color or name (optional)
        all_day: New all-day flag (optional)
    """
    shell = await _ready_shell()
    if shell is None:
        return NOT_INITIALIZED

    changes: dict[str, Any] = {}
    if title:
        changes["title"] = title
    if start:
        changes["start"] = start
    if end:
        changes["end"] = end
    if description:
        changes["description"] = description
    if color:
        changes["color"] = _resolve_color(color) or color
    if all_day is not None:
        changes["all_day"] = all_day

    if not changes:
        return {"error": "No fields to update"}

    try:
        shell.open_edit(event_id)
    except KeyError:
        return {"error": f"Event not found: {event_id}"}

    try:
        shell.editor.update(**changes)
        event = await shell.save()
        if event is None:
            return {"error": shell.error}
        return {"success": True, "event": event_to_dict(event)}
    finally:
        shell.close_editor()


@mcp.tool()
async def delete_event(event_id: str) -> dict:
    """Delete a calendar event.

    Args:
        event_id: Event ID (from show_calendar)
    """
    shell = await _ready_shell()
    if shell is None:
        return NOT_INITIALIZED

    try:
        shell.open_edit(event_id)
    except KeyError:
        return {"error": f"Event not found: {event_id}"}

    try:
        if await shell.delete():
            return {"success": True, "message": f"Event {event_id} deleted"}
        return {"error": shell.error}
    except ValueError as e:
        return {"error": str(e)}
    finally:
        shell.close_editor()


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main():
    """Entry point for the console script and python -m calendar_grid.server."""
    global _config, _shell

    _config = load_config()
    store = HttpEventStore(_config.api_url, timeout=_config.timeout)
    _shell = CalendarShell(store, _config)
    logger.info("Using event service at %s (view=%s)", _config.api_url, _config.default_view.value)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
