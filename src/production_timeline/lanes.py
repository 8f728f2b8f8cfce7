from __future__ import annotations

import datetime as dt
from typing import Iterable

from .grid import TimelineGrid
from .models import Lane, Task, TaskPlacement

SLOT_HEIGHT = 50
SLOT_TOP_PADDING = 8
LANE_BOTTOM_PADDING = 16
MIN_LANE_HEIGHT = 60


def group_by_line(tasks: Iterable[Task]) -> dict[str, list[Task]]:
    """
    Group tasks by line label.

    Keys come back sorted lexicographically; tasks keep their input order within a line.
    """

    grouped: dict[str, list[Task]] = {}
    for task in tasks:
        grouped.setdefault(task.line, []).append(task)
    return {line: grouped[line] for line in sorted(grouped)}


def lane_height(task_count: int) -> int:
    return max(MIN_LANE_HEIGHT, task_count * SLOT_HEIGHT + LANE_BOTTOM_PADDING)


def slot_offset(slot: int) -> int:
    return slot * SLOT_HEIGHT + SLOT_TOP_PADDING


def is_overdue(task: Task, today: dt.date) -> bool:
    """Finished strictly before today without reaching `completed`."""
    return task.end < today and task.status != "completed"


def pack_lanes(tasks: Iterable[Task], grid: TimelineGrid, today: dt.date) -> list[Lane]:
    """
    Stack each line's tasks one slot per task, in input order.

    Slots are a plain enumeration: overlapping bars never share a slot only
    because no two bars ever share one. There is no compaction.
    """

    lanes: list[Lane] = []
    for line, line_tasks in group_by_line(tasks).items():
        placements = [
            TaskPlacement(
                task=task,
                slot=slot,
                x=grid.x_of(task.start),
                y=slot_offset(slot),
                width=grid.width_of(task.start, task.end),
                overdue=is_overdue(task, today),
            )
            for slot, task in enumerate(line_tasks)
        ]
        lanes.append(Lane(line=line, height=lane_height(len(line_tasks)), tasks=placements))
    return lanes
