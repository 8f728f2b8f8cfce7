from __future__ import annotations

import datetime as dt
import logging

from .calendar import days_between, iter_days, normalize
from .models import DateValue, GridWindow, MonthHeader

logger = logging.getLogger(__name__)

DEFAULT_CELL_WIDTH = 50  # px per day column
MIN_HEADER_SPAN = 3  # columns, keeps month labels legible


class TimelineGrid:
    """
    Fixed-width day grid over an inclusive window.

    Dates inside the window map to exact column offsets; dates outside it fall
    back to a proportional estimate so layout never fails.
    """

    def __init__(
        self,
        window: GridWindow,
        cell_width: int = DEFAULT_CELL_WIDTH,
        min_width: float | None = None,
        tz: dt.tzinfo | None = None,
    ):
        if cell_width <= 0:
            raise ValueError(f"cell_width must be positive, got {cell_width}")
        self.window = window
        self.cell_width = cell_width
        self.min_width = cell_width if min_width is None else min_width
        self.tz = tz
        self.columns: list[dt.date] = iter_days(window)
        self._index = {day: idx for idx, day in enumerate(self.columns)}

    @property
    def width(self) -> int:
        return len(self.columns) * self.cell_width

    def column_index(self, value: DateValue, tz: dt.tzinfo | None = None) -> int | None:
        """Column of `value`, or None when the day is outside the window."""
        day = normalize(value, tz or self.tz)
        if day not in self.window:
            return None
        return self._index[day]

    def x_of(self, value: DateValue) -> float:
        day = normalize(value, self.tz)
        idx = self.column_index(day)
        if idx is not None:
            return idx * self.cell_width
        logger.debug("Date %s outside grid %s..%s; estimating x", day, self.window.start, self.window.end)
        return days_between(self.window.start, day) * self.width / self.window.total_days

    def width_of(self, start: DateValue, end: DateValue) -> float:
        """End-inclusive bar width, never below `min_width`."""
        start_day, end_day = normalize(start, self.tz), normalize(end, self.tz)
        if start_day in self.window and end_day in self.window and end_day >= start_day:
            width: float = (self._index[end_day] - self._index[start_day] + 1) * self.cell_width
        else:
            logger.debug("Span %s..%s not fully inside grid; estimating width", start_day, end_day)
            task_days = max(days_between(start_day, end_day), 0) + 1
            width = task_days * self.width / self.window.total_days
        return max(width, self.min_width)

    def month_headers(self) -> list[MonthHeader]:
        """One header per calendar month present in the window, spanning its columns."""

        headers: list[MonthHeader] = []
        total = len(self.columns)
        idx = 0
        while idx < total:
            day = self.columns[idx]
            end = idx + 1
            while end < total and (self.columns[end].year, self.columns[end].month) == (day.year, day.month):
                end += 1
            headers.append(
                MonthHeader(label=f"{day.year}년 {day.month}월", start_col=idx, span=max(end - idx, MIN_HEADER_SPAN))
            )
            idx = end
        return headers
