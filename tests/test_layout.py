"""Tests for the month/week/day layout engine."""

from datetime import date, datetime, time

import pytest

from calendar_grid.layout import (
    HOUR_HEIGHT,
    MONDAY,
    SUNDAY,
    MonthGrid,
    TimeGrid,
    ViewMode,
    day_grid,
    filter_by_color,
    hour_label,
    layout,
    month_grid,
    place_event,
    shift,
    start_of_week,
    visible_range,
    week_grid,
)
from calendar_grid.model import BLUE, GREEN, RED, Event


def _make_event(
    id: str,
    start: datetime,
    end: datetime | None = None,
    color: str = BLUE,
    title: str = "",
) -> Event:
    return Event(
        id=id,
        title=title or id,
        start=start,
        end=end or start.replace(hour=min(start.hour + 1, 23)),
        color=color,
    )


def _standup() -> Event:
    return _make_event("standup", datetime(2024, 6, 10, 9, 0), datetime(2024, 6, 10, 9, 15), GREEN, "Standup")


# ---------------------------------------------------------------------------
# Month view
# ---------------------------------------------------------------------------

class TestMonthGrid:
    def test_whole_weeks_covering_month(self):
        grid = month_grid(date(2024, 6, 15), [])
        assert grid.first_day == date(2024, 5, 26)
        assert grid.last_day == date(2024, 7, 6)
        assert len(grid.weeks) == 6
        assert all(len(week) == 7 for week in grid.weeks)
        assert grid.days[0].day == grid.first_day
        assert grid.days[-1].day == grid.last_day

    def test_month_that_fills_exactly_four_weeks(self):
        # February 2015 starts on a Sunday and ends on a Saturday
        grid = month_grid(date(2015, 2, 10), [])
        assert len(grid.weeks) == 4
        assert all(cell.in_month for cell in grid.days)

    def test_monday_start(self):
        grid = month_grid(date(2024, 6, 15), [], week_starts_on=MONDAY)
        assert grid.first_day == date(2024, 5, 27)
        # June 30 2024 is a Sunday, the last day of a Monday-first week
        assert grid.last_day == date(2024, 6, 30)
        assert len(grid.weeks) == 5
        assert grid.first_day.weekday() == MONDAY

    @pytest.mark.parametrize("year,month", [(2024, 2), (2023, 12), (2025, 3), (2026, 8)])
    def test_grid_always_covers_month(self, year, month):
        grid = month_grid(date(year, month, 1), [])
        assert len(grid.days) % 7 == 0
        assert grid.first_day.weekday() == SUNDAY
        assert grid.first_day <= date(year, month, 1)
        in_month = [c.day for c in grid.days if c.in_month]
        assert in_month[0] == date(year, month, 1)
        assert all(d.month == month for d in in_month)

    def test_dimming_independent_of_events(self):
        outside = _make_event("outside", datetime(2024, 5, 27, 10))
        grid = month_grid(date(2024, 6, 1), [outside])
        cell = next(c for c in grid.days if c.day == date(2024, 5, 27))
        assert cell.in_month is False
        assert cell.events == (outside,)

    def test_event_only_on_start_day(self):
        multi = _make_event("multi", datetime(2024, 6, 10, 22), datetime(2024, 6, 12, 8))
        grid = month_grid(date(2024, 6, 1), [multi])
        by_day = {c.day: c.events for c in grid.days}
        assert by_day[date(2024, 6, 10)] == (multi,)
        assert by_day[date(2024, 6, 11)] == ()
        assert by_day[date(2024, 6, 12)] == ()

    def test_cell_keeps_input_order(self):
        late = _make_event("late", datetime(2024, 6, 10, 18))
        early = _make_event("early", datetime(2024, 6, 10, 8))
        grid = month_grid(date(2024, 6, 1), [late, early])
        cell = next(c for c in grid.days if c.day == date(2024, 6, 10))
        assert [e.id for e in cell.events] == ["late", "early"]

    def test_today_flag(self):
        grid = month_grid(date(2024, 6, 1), [], today=date(2024, 6, 10))
        today_cells = [c.day for c in grid.days if c.is_today]
        assert today_cells == [date(2024, 6, 10)]

    def test_no_today_without_today(self):
        grid = month_grid(date(2024, 6, 1), [])
        assert not any(c.is_today for c in grid.days)


# ---------------------------------------------------------------------------
# Week / day views
# ---------------------------------------------------------------------------

class TestPlacement:
    def test_offset_and_height(self):
        event = _make_event("e", datetime(2024, 6, 15, 10, 30), datetime(2024, 6, 15, 11, 15))
        placed = place_event(event)
        assert placed.hour == 10
        assert placed.offset == 0.5
        assert placed.top == 30
        assert placed.height == 45

    def test_long_event_is_not_sliced(self):
        event = _make_event("e", datetime(2024, 6, 15, 10, 0), datetime(2024, 6, 15, 13, 0))
        assert place_event(event).height == 3 * HOUR_HEIGHT

    def test_inverted_range_collapses(self):
        event = _make_event("e", datetime(2024, 6, 15, 10, 0), datetime(2024, 6, 15, 9, 0))
        assert place_event(event).height == 0


class TestWeekGrid:
    def test_shape(self):
        grid = week_grid(date(2024, 6, 12), [])
        assert grid.mode is ViewMode.WEEK
        assert [c.day for c in grid.columns][0] == date(2024, 6, 9)
        assert len(grid.columns) == 7
        assert all(len(c.rows) == 24 for c in grid.columns)

    def test_standup_scenario(self):
        grid = week_grid(date(2024, 6, 10), [_standup()])
        column = next(c for c in grid.columns if c.day == date(2024, 6, 10))
        row = column.rows[9]
        assert len(row.events) == 1
        placed = row.events[0]
        assert placed.offset == 0
        assert placed.height == 15
        assert sum(len(r.events) for c in grid.columns for r in c.rows) == 1

    def test_event_outside_week_excluded(self):
        grid = week_grid(date(2024, 6, 10), [_make_event("next", datetime(2024, 6, 16, 9))])
        assert all(not c.events for c in grid.columns)

    def test_overlapping_events_share_row(self):
        a = _make_event("a", datetime(2024, 6, 10, 9, 0), datetime(2024, 6, 10, 10, 0))
        b = _make_event("b", datetime(2024, 6, 10, 9, 30), datetime(2024, 6, 10, 10, 30))
        grid = week_grid(date(2024, 6, 10), [a, b])
        column = next(c for c in grid.columns if c.day == date(2024, 6, 10))
        assert [p.event.id for p in column.rows[9].events] == ["a", "b"]
        assert column.rows[10].events == ()


class TestDayGrid:
    def test_only_reference_day(self):
        today = _make_event("today", datetime(2024, 6, 15, 10, 30), datetime(2024, 6, 15, 11, 30))
        other = _make_event("other", datetime(2024, 6, 16, 10, 30))
        grid = day_grid(date(2024, 6, 15), [today, other])
        assert len(grid.columns) == 1
        placed = grid.columns[0].rows[10].events
        assert [p.event.id for p in placed] == ["today"]
        assert placed[0].offset == 0.5
        assert placed[0].height == 60

    def test_accepts_datetime_reference(self):
        grid = day_grid(datetime(2024, 6, 15, 18, 45), [])
        assert grid.columns[0].day == date(2024, 6, 15)


class TestLayoutDispatch:
    def test_modes(self):
        assert isinstance(layout(date(2024, 6, 10), "month", []), MonthGrid)
        week = layout(date(2024, 6, 10), ViewMode.WEEK, [])
        assert isinstance(week, TimeGrid) and len(week.columns) == 7
        day = layout(date(2024, 6, 10), "day", [])
        assert isinstance(day, TimeGrid) and len(day.columns) == 1

    def test_unknown_mode(self):
        with pytest.raises(ValueError):
            layout(date(2024, 6, 10), "year", [])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class TestHelpers:
    def test_filter_by_color(self):
        events = [
            _make_event("blue", datetime(2024, 6, 10, 9), color=BLUE),
            _make_event("red", datetime(2024, 6, 10, 10), color=RED),
            _make_event("green", datetime(2024, 6, 10, 11), color=GREEN),
        ]
        assert [e.id for e in filter_by_color(events, {BLUE, GREEN})] == ["blue", "green"]

    def test_start_of_week(self):
        assert start_of_week(date(2024, 6, 12)) == date(2024, 6, 9)
        assert start_of_week(date(2024, 6, 9)) == date(2024, 6, 9)
        assert start_of_week(date(2024, 6, 12), MONDAY) == date(2024, 6, 10)

    def test_shift(self):
        assert shift(date(2024, 1, 31), ViewMode.MONTH, 1) == date(2024, 2, 29)
        assert shift(date(2024, 6, 10), ViewMode.WEEK, -1) == date(2024, 6, 3)
        assert shift(date(2024, 12, 31), ViewMode.DAY, 1) == date(2025, 1, 1)

    def test_visible_range(self):
        start, end = visible_range(date(2024, 6, 15), ViewMode.MONTH)
        assert start == datetime(2024, 5, 26)
        assert end == datetime.combine(date(2024, 7, 6), time.max)
        start, end = visible_range(date(2024, 6, 15), ViewMode.DAY)
        assert start.date() == end.date() == date(2024, 6, 15)

    @pytest.mark.parametrize("hour,label", [(0, "12 AM"), (9, "9 AM"), (12, "12 PM"), (23, "11 PM")])
    def test_hour_label(self, hour, label):
        assert hour_label(hour) == label
