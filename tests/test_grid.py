import datetime as dt
from zoneinfo import ZoneInfo

import pytest

from production_timeline.calendar import month_window
from production_timeline.grid import TimelineGrid
from production_timeline.models import GridWindow, MonthHeader


def _march_april_grid(cell_width=50):
    return TimelineGrid(month_window(dt.date(2024, 3, 1)), cell_width=cell_width)


def test_columns_cover_window_inclusively():
    grid = _march_april_grid()

    assert len(grid.columns) == 61
    assert grid.width == 61 * 50
    assert grid.column_index(dt.date(2024, 3, 1)) == 0
    assert grid.column_index(dt.datetime(2024, 4, 30, 22, 0)) == 60
    assert grid.column_index(dt.date(2024, 5, 1)) is None


def test_x_of_is_column_times_cell_width():
    grid = _march_april_grid()

    assert grid.x_of(dt.date(2024, 3, 10)) == 450
    assert grid.x_of(dt.date(2024, 4, 1)) == 31 * 50


def test_single_day_width_is_one_cell():
    grid = _march_april_grid()
    day = dt.date(2024, 3, 15)

    assert grid.width_of(day, day) == 50


def test_width_is_end_inclusive():
    grid = _march_april_grid()

    assert grid.width_of(dt.date(2024, 3, 1), dt.date(2024, 3, 10)) == 500


def test_dates_outside_window_use_proportional_estimate():
    grid = _march_april_grid()

    assert grid.x_of(dt.date(2024, 2, 29)) == pytest.approx(-50)
    assert grid.x_of(dt.date(2024, 6, 1)) == pytest.approx(92 * 50)
    assert grid.width_of(dt.date(2024, 2, 20), dt.date(2024, 3, 5)) == pytest.approx(15 * 50)


def test_fallback_width_never_drops_below_floor():
    grid = TimelineGrid(GridWindow(dt.date(2024, 3, 1), dt.date(2024, 3, 31)), cell_width=40)

    assert grid.width_of(dt.date(2025, 1, 1), dt.date(2025, 1, 1)) >= 40
    assert grid.width_of(dt.date(2024, 3, 10), dt.date(2024, 3, 5)) == 40


def test_month_headers_follow_month_boundaries():
    grid = _march_april_grid()

    assert grid.month_headers() == [
        MonthHeader(label="2024년 3월", start_col=0, span=31),
        MonthHeader(label="2024년 4월", start_col=31, span=30),
    ]


def test_partial_month_header_keeps_minimum_span():
    grid = TimelineGrid(GridWindow(dt.date(2024, 3, 30), dt.date(2024, 4, 10)))

    headers = grid.month_headers()

    assert headers[0] == MonthHeader(label="2024년 3월", start_col=0, span=3)
    assert headers[1] == MonthHeader(label="2024년 4월", start_col=2, span=9)


def test_cell_width_must_be_positive():
    with pytest.raises(ValueError):
        TimelineGrid(month_window(dt.date(2024, 3, 1)), cell_width=0)


def test_column_index_uses_viewing_timezone():
    late_utc = dt.datetime(2024, 3, 31, 20, 0, tzinfo=dt.timezone.utc)

    assert _march_april_grid().column_index(late_utc, dt.timezone.utc) == 30
    assert TimelineGrid(month_window(dt.date(2024, 3, 1)), tz=ZoneInfo("Asia/Seoul")).column_index(late_utc) == 31


def test_window_membership_decides_exact_path():
    window = month_window(dt.date(2024, 3, 1))
    grid = TimelineGrid(window)

    assert dt.date(2024, 4, 30) in window
    assert dt.date(2024, 5, 1) not in window
    assert grid.column_index(dt.date(2024, 5, 1)) is None
    assert grid.width_of(dt.date(2024, 4, 29), dt.date(2024, 4, 30)) == 100
