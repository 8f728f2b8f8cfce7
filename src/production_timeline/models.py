from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Any


STATUS_LABELS: dict[str, str] = {
    "pending_review": "검토 대기",
    "confirmed": "계획 확정",
    "in_progress": "진행 중",
    "completed": "생산 완료",
    "cancelled": "취소",
}

STATUS_COLORS: dict[str, str] = {
    "pending_review": "#facc15",
    "confirmed": "#3b82f6",
    "in_progress": "#22c55e",
    "completed": "#6b7280",
    "cancelled": "#ef4444",
}

PENDING_REVIEW_LINE = "검토 대기"
UNASSIGNED_LINE = "미지정"

DateValue = dt.date | dt.datetime


def status_label(status: str) -> str:
    """Human-readable label for a status; unknown statuses fall back to the raw value."""
    return STATUS_LABELS.get(status, status)


@dataclass
class Order:
    """Production order as read from the record store. Only `id` and `status` are mandatory."""

    id: str
    status: str
    product_name: str = ""
    quantity: int = 0
    requester: str = ""
    created_at: DateValue | None = None
    request_date: DateValue | None = None
    requested_completion_date: DateValue | None = None
    planned_start_date: DateValue | None = None
    planned_completion_date: DateValue | None = None
    actual_start_date: DateValue | None = None
    actual_completion_date: DateValue | None = None
    production_line: str | None = None


@dataclass(frozen=True)
class Task:
    """Renderable projection of one non-cancelled order with a resolved, inclusive date span."""

    id: str
    product_name: str
    quantity: int
    requester: str
    start: dt.date
    end: dt.date
    status: str
    line: str

    @property
    def name(self) -> str:
        return f"{self.product_name} ({self.quantity:,})"

    @property
    def label(self) -> str:
        """Bar caption: product, quantity and requester."""
        return f"{self.product_name} | {self.quantity:,}개 | {self.requester}"

    @property
    def status_label(self) -> str:
        return status_label(self.status)

    @property
    def tooltip(self) -> str:
        return (
            f"{self.name} - {self.requester} - {self.status_label} - "
            f"{self.start.isoformat()} ~ {self.end.isoformat()}"
        )


@dataclass(frozen=True)
class GridWindow:
    """Inclusive range of visible days."""

    start: dt.date
    end: dt.date

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(f"window end {self.end} precedes start {self.start}")

    @property
    def total_days(self) -> int:
        return (self.end - self.start).days + 1

    def __contains__(self, day: object) -> bool:
        return isinstance(day, dt.date) and self.start <= day <= self.end


@dataclass(frozen=True)
class MonthHeader:
    """Month label spanning a run of day columns."""

    label: str
    start_col: int
    span: int


@dataclass(frozen=True)
class TaskPlacement:
    """Pixel geometry for one task bar inside its lane."""

    task: Task
    slot: int
    x: float
    y: int
    width: float
    overdue: bool = False


@dataclass(frozen=True)
class Lane:
    """All bars sharing one production-line label."""

    line: str
    height: int
    tasks: list[TaskPlacement] = field(default_factory=list)


@dataclass(frozen=True)
class TimelineLayout:
    """
    Complete, renderer-ready geometry for one (orders, window, query) triple.

    Only plain values are kept so renderers never need to reason about dates
    beyond reading column labels.
    """

    window: GridWindow
    cell_width: int
    columns: list[dt.date]
    month_headers: list[MonthHeader]
    lanes: list[Lane]

    @property
    def width(self) -> int:
        return len(self.columns) * self.cell_width

    @property
    def height(self) -> int:
        return sum(lane.height for lane in self.lanes)

    @property
    def is_empty(self) -> bool:
        return not self.lanes

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready view with ISO date strings."""
        return {
            "window": {"start": self.window.start.isoformat(), "end": self.window.end.isoformat()},
            "cell_width": self.cell_width,
            "width": self.width,
            "columns": [day.isoformat() for day in self.columns],
            "month_headers": [
                {"label": header.label, "start_col": header.start_col, "span": header.span}
                for header in self.month_headers
            ],
            "lanes": [
                {
                    "line": lane.line,
                    "height": lane.height,
                    "tasks": [_placement_dict(placement) for placement in lane.tasks],
                }
                for lane in self.lanes
            ],
        }


def _placement_dict(placement: TaskPlacement) -> dict[str, Any]:
    task = placement.task
    return {
        "id": task.id,
        "label": task.label,
        "status": task.status,
        "start": task.start.isoformat(),
        "end": task.end.isoformat(),
        "slot": placement.slot,
        "x": placement.x,
        "y": placement.y,
        "width": placement.width,
        "overdue": placement.overdue,
    }
