"""Turn layout grids into JSON-friendly dicts for the tool surface."""

from __future__ import annotations

from typing import Any

from .config import Theme
from .layout import HOUR_HEIGHT, MonthCell, MonthGrid, PlacedEvent, TimeGrid, hour_label
from .model import Event

DAY_NAMES = ("MON", "TUE", "WED", "THU", "FRI", "SAT", "SUN")


def event_to_dict(event: Event) -> dict[str, Any]:
    return {
        "id": event.id,
        "title": event.title,
        "start": event.start.isoformat(),
        "end": event.end.isoformat(),
        "description": event.description,
        "color": event.color,
        "all_day": event.all_day,
        "recurring": event.recurring,
        "recurrence_pattern": event.recurrence_pattern,
    }


def _cell_to_dict(cell: MonthCell, theme: Theme) -> dict[str, Any]:
    if cell.is_today:
        background = theme.today_highlight
    elif not cell.in_month:
        background = theme.dimmed_background
    else:
        background = theme.background
    return {
        "date": cell.day.isoformat(),
        "label": str(cell.day.day),
        "in_month": cell.in_month,
        "today": cell.is_today,
        "background": background,
        "events": [{"id": e.id, "title": e.title, "color": e.color} for e in cell.events],
    }


def _placed_to_dict(placed: PlacedEvent) -> dict[str, Any]:
    return {
        "id": placed.event.id,
        "title": placed.event.title,
        "color": placed.event.color,
        "hour": placed.hour,
        "offset": placed.offset,
        "top": placed.top,
        "height": placed.height,
    }


def month_to_dict(grid: MonthGrid, theme: Theme) -> dict[str, Any]:
    first_weekday = grid.first_day.weekday()
    return {
        "view": "month",
        "first_day": grid.first_day.isoformat(),
        "last_day": grid.last_day.isoformat(),
        "day_names": [DAY_NAMES[(first_weekday + i) % 7] for i in range(7)],
        "weeks": [[_cell_to_dict(cell, theme) for cell in week] for week in grid.weeks],
    }


def time_grid_to_dict(grid: TimeGrid, theme: Theme) -> dict[str, Any]:
    return {
        "view": grid.mode.value,
        "hour_height": HOUR_HEIGHT,
        "hours": [hour_label(h) for h in range(24)],
        "columns": [
            {
                "date": column.day.isoformat(),
                "day_name": column.day.strftime("%a"),
                "today": column.is_today,
                "background": theme.today_highlight if column.is_today else theme.background,
                "events": [_placed_to_dict(p) for p in column.events],
            }
            for column in grid.columns
        ],
    }


def grid_to_dict(grid: MonthGrid | TimeGrid, theme: Theme) -> dict[str, Any]:
    if isinstance(grid, MonthGrid):
        return month_to_dict(grid, theme)
    return time_grid_to_dict(grid, theme)
