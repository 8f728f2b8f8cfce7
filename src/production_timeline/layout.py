from __future__ import annotations

import datetime as dt
from typing import Iterable

from .calendar import today as current_day
from .grid import DEFAULT_CELL_WIDTH, TimelineGrid
from .lanes import pack_lanes
from .models import GridWindow, Order, TimelineLayout
from .query import filter_tasks
from .resolution import resolve_orders


def compute_layout(
    orders: Iterable[Order],
    window: GridWindow,
    query: str = "",
    cell_width: int = DEFAULT_CELL_WIDTH,
    today: dt.date | None = None,
    tz: dt.tzinfo | None = None,
) -> TimelineLayout:
    """
    Turn an order snapshot into renderer-ready geometry.

    Pipeline: resolve orders -> filter by query -> grid columns -> lane stacking.
    The same inputs (including `today`) always yield an identical layout.
    """

    day = today if today is not None else current_day(tz)
    tasks = resolve_orders(orders, today=day, tz=tz)
    visible = filter_tasks(tasks, query)

    grid = TimelineGrid(window, cell_width=cell_width, tz=tz)
    return TimelineLayout(
        window=window,
        cell_width=cell_width,
        columns=list(grid.columns),
        month_headers=grid.month_headers(),
        lanes=pack_lanes(visible, grid, today=day),
    )
