"""View layout engine: month/week/day grids and event placement.

Everything here is a pure function of its arguments. ``today`` is passed in
by the caller so that the same inputs always produce the same grid.

Week and day views place an event once, in the hour row of its start time.
Its ``top`` is the minute of the start inside that row and its ``height`` is
the duration in minutes, so one hour row is ``HOUR_HEIGHT`` layout units tall
and long events overflow into the rows below. Overlapping events are not
moved side by side; they share the row and stack on screen.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Iterable, Sequence

from dateutil.relativedelta import relativedelta

from .model import Event, duration_minutes

MONDAY = 0
SUNDAY = 6

HOUR_HEIGHT = 60
HOURS_PER_DAY = 24
DAYS_PER_WEEK = 7


class ViewMode(str, Enum):
    MONTH = "month"
    WEEK = "week"
    DAY = "day"


@dataclass(frozen=True)
class MonthCell:
    day: date
    in_month: bool
    is_today: bool
    events: tuple[Event, ...] = ()


@dataclass(frozen=True)
class MonthGrid:
    reference: date
    first_day: date
    last_day: date
    weeks: list[list[MonthCell]] = field(default_factory=list)

    @property
    def days(self) -> list[MonthCell]:
        return [cell for week in self.weeks for cell in week]


@dataclass(frozen=True)
class PlacedEvent:
    """An event positioned inside an hour row."""

    event: Event
    day: date
    hour: int
    offset: float  # fraction of the row height
    top: float  # layout units from the top of the row
    height: float  # layout units, one per minute


@dataclass(frozen=True)
class HourRow:
    hour: int
    events: tuple[PlacedEvent, ...] = ()


@dataclass(frozen=True)
class DayColumn:
    day: date
    is_today: bool
    rows: list[HourRow] = field(default_factory=list)

    @property
    def events(self) -> list[PlacedEvent]:
        return [placed for row in self.rows for placed in row.events]


@dataclass(frozen=True)
class TimeGrid:
    mode: ViewMode
    reference: date
    columns: list[DayColumn] = field(default_factory=list)


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def start_of_week(day: date | datetime, week_starts_on: int = SUNDAY) -> date:
    day = _as_date(day)
    return day - timedelta(days=(day.weekday() - week_starts_on) % DAYS_PER_WEEK)


def end_of_week(day: date | datetime, week_starts_on: int = SUNDAY) -> date:
    return start_of_week(day, week_starts_on) + timedelta(days=DAYS_PER_WEEK - 1)


def is_same_month(a: date | datetime, b: date | datetime) -> bool:
    return (a.year, a.month) == (b.year, b.month)


def filter_by_color(events: Iterable[Event], active_colors: Iterable[str]) -> list[Event]:
    """Keep only events whose color is active, preserving order."""
    active = set(active_colors)
    return [e for e in events if e.color in active]


def month_grid(
    reference: date | datetime,
    events: Sequence[Event],
    week_starts_on: int = SUNDAY,
    today: date | None = None,
) -> MonthGrid:
    """Whole weeks covering the reference month.

    An event lands in the cell of its start date only, even when it spans
    several days. Cell order follows the input order.
    """
    reference = _as_date(reference)
    month_start = reference.replace(day=1)
    month_end = month_start + relativedelta(months=1) - timedelta(days=1)
    first_day = start_of_week(month_start, week_starts_on)
    last_day = end_of_week(month_end, week_starts_on)

    by_day: dict[date, list[Event]] = defaultdict(list)
    for event in events:
        by_day[event.start.date()].append(event)

    weeks: list[list[MonthCell]] = []
    day = first_day
    while day <= last_day:
        week = []
        for _ in range(DAYS_PER_WEEK):
            week.append(MonthCell(
                day=day,
                in_month=is_same_month(day, reference),
                is_today=day == today,
                events=tuple(by_day.get(day, ())),
            ))
            day += timedelta(days=1)
        weeks.append(week)

    return MonthGrid(reference=reference, first_day=first_day, last_day=last_day, weeks=weeks)


def place_event(event: Event) -> PlacedEvent:
    """Position an event in the hour row of its start time."""
    minute = event.start.minute
    return PlacedEvent(
        event=event,
        day=event.start.date(),
        hour=event.start.hour,
        offset=minute / HOUR_HEIGHT,
        top=float(minute),
        # Inverted ranges collapse instead of drawing upwards
        height=max(duration_minutes(event), 0.0),
    )


def _day_column(day: date, events: Sequence[Event], today: date | None) -> DayColumn:
    by_hour: dict[int, list[PlacedEvent]] = defaultdict(list)
    for event in events:
        if event.start.date() == day:
            by_hour[event.start.hour].append(place_event(event))
    rows = [HourRow(hour=h, events=tuple(by_hour.get(h, ()))) for h in range(HOURS_PER_DAY)]
    return DayColumn(day=day, is_today=day == today, rows=rows)


def week_grid(
    reference: date | datetime,
    events: Sequence[Event],
    week_starts_on: int = SUNDAY,
    today: date | None = None,
) -> TimeGrid:
    reference = _as_date(reference)
    week_start = start_of_week(reference, week_starts_on)
    columns = [
        _day_column(week_start + timedelta(days=i), events, today)
        for i in range(DAYS_PER_WEEK)
    ]
    return TimeGrid(mode=ViewMode.WEEK, reference=reference, columns=columns)


def day_grid(
    reference: date | datetime,
    events: Sequence[Event],
    today: date | None = None,
) -> TimeGrid:
    reference = _as_date(reference)
    return TimeGrid(mode=ViewMode.DAY, reference=reference, columns=[_day_column(reference, events, today)])


def layout(
    reference: date | datetime,
    mode: ViewMode | str,
    events: Sequence[Event],
    week_starts_on: int = SUNDAY,
    today: date | None = None,
) -> MonthGrid | TimeGrid:
    mode = ViewMode(mode)
    if mode is ViewMode.MONTH:
        return month_grid(reference, events, week_starts_on, today)
    if mode is ViewMode.WEEK:
        return week_grid(reference, events, week_starts_on, today)
    return day_grid(reference, events, today)


def shift(reference: date | datetime, mode: ViewMode | str, step: int) -> date:
    """Move the reference date by ``step`` months, weeks or days."""
    reference = _as_date(reference)
    mode = ViewMode(mode)
    if mode is ViewMode.MONTH:
        return reference + relativedelta(months=step)
    if mode is ViewMode.WEEK:
        return reference + relativedelta(weeks=step)
    return reference + relativedelta(days=step)


def visible_range(
    reference: date | datetime,
    mode: ViewMode | str,
    week_starts_on: int = SUNDAY,
) -> tuple[datetime, datetime]:
    """First and last instant shown by the grid for ``mode``."""
    reference = _as_date(reference)
    mode = ViewMode(mode)
    if mode is ViewMode.MONTH:
        month_start = reference.replace(day=1)
        month_end = month_start + relativedelta(months=1) - timedelta(days=1)
        first, last = start_of_week(month_start, week_starts_on), end_of_week(month_end, week_starts_on)
    elif mode is ViewMode.WEEK:
        first, last = start_of_week(reference, week_starts_on), end_of_week(reference, week_starts_on)
    else:
        first = last = reference
    return datetime.combine(first, time.min), datetime.combine(last, time.max)


def hour_label(hour: int) -> str:
    if hour == 0:
        return "12 AM"
    if hour < 12:
        return f"{hour} AM"
    if hour == 12:
        return "12 PM"
    return f"{hour - 12} PM"
