"""Production schedule timeline: order snapshots to Gantt-style lane geometry."""

from .calendar import days_between, month_window, normalize, shift_window
from .engine import ScheduleTimeline, TimelineState
from .grid import TimelineGrid
from .lanes import group_by_line, is_overdue, pack_lanes
from .layout import compute_layout
from .models import (
    GridWindow,
    Lane,
    MonthHeader,
    Order,
    Task,
    TaskPlacement,
    TimelineLayout,
)
from .query import filter_tasks, navigate
from .resolution import OrderValidationError, TimelineError, resolve_order, resolve_orders

__all__ = [
    "GridWindow",
    "Lane",
    "MonthHeader",
    "Order",
    "OrderValidationError",
    "ScheduleTimeline",
    "Task",
    "TaskPlacement",
    "TimelineError",
    "TimelineGrid",
    "TimelineLayout",
    "TimelineState",
    "compute_layout",
    "days_between",
    "filter_tasks",
    "group_by_line",
    "is_overdue",
    "month_window",
    "navigate",
    "normalize",
    "pack_lanes",
    "resolve_order",
    "resolve_orders",
    "shift_window",
]
