from __future__ import annotations

from typing import Iterable

from .calendar import Direction, shift_window
from .models import GridWindow, Task


def filter_tasks(tasks: Iterable[Task], query: str | None) -> list[Task]:
    """
    Case-insensitive substring search over product name, requester and status label.

    A blank query returns every task in input order.
    """

    needle = (query or "").strip().lower()
    if not needle:
        return list(tasks)
    return [task for task in tasks if _matches(task, needle)]


def _matches(task: Task, needle: str) -> bool:
    haystacks = (task.product_name, task.requester, task.status_label)
    return any(needle in (value or "").lower() for value in haystacks)


def navigate(window: GridWindow, direction: Direction) -> GridWindow:
    return shift_window(window, direction)
