from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass
from typing import Iterable, Literal

from .calendar import normalize
from .models import PENDING_REVIEW_LINE, UNASSIGNED_LINE, Order, Task

logger = logging.getLogger(__name__)

Anchor = Literal["today", "origin", "start", "end"]
"""What a date rule falls back to once every listed field is empty."""

FALLBACK_SPAN_DAYS = 30
LEAD_IN_DAYS = 7


class TimelineError(Exception):
    """Base class for problems with timeline inputs."""


class OrderValidationError(TimelineError):
    """Raised when an order snapshot file is structurally invalid (not for missing dates)."""


@dataclass(frozen=True)
class DateRule:
    """Ordered order fields to try, then `anchor + offset_days`."""

    fields: tuple[str, ...]
    anchor: Anchor
    offset_days: int = 0


@dataclass(frozen=True)
class LineRule:
    """Line label source: a fixed label, or an order field with a default."""

    fixed: str | None = None
    field: str = "production_line"
    default: str = UNASSIGNED_LINE


@dataclass(frozen=True)
class ResolutionPolicy:
    start: DateRule
    end: DateRule
    line: LineRule


_REQUESTED_START = DateRule(fields=("request_date", "created_at"), anchor="today")

RESOLUTION_POLICY: dict[str, ResolutionPolicy] = {
    "pending_review": ResolutionPolicy(
        start=_REQUESTED_START,
        end=DateRule(fields=("requested_completion_date",), anchor="start", offset_days=FALLBACK_SPAN_DAYS),
        line=LineRule(fixed=PENDING_REVIEW_LINE),
    ),
    "confirmed": ResolutionPolicy(
        start=_REQUESTED_START,
        end=DateRule(
            fields=("planned_completion_date", "requested_completion_date"),
            anchor="start",
            offset_days=FALLBACK_SPAN_DAYS,
        ),
        line=LineRule(),
    ),
    "completed": ResolutionPolicy(
        start=_REQUESTED_START,
        end=DateRule(
            fields=("actual_completion_date", "planned_completion_date", "requested_completion_date"),
            anchor="start",
            offset_days=FALLBACK_SPAN_DAYS,
        ),
        line=LineRule(),
    ),
}
RESOLUTION_POLICY["in_progress"] = RESOLUTION_POLICY["confirmed"]

DEFAULT_POLICY = ResolutionPolicy(
    start=DateRule(fields=("planned_start_date",), anchor="end", offset_days=-LEAD_IN_DAYS),
    end=DateRule(
        fields=("planned_completion_date", "requested_completion_date"),
        anchor="origin",
        offset_days=FALLBACK_SPAN_DAYS,
    ),
    line=LineRule(),
)
"""Applied to any status without an explicit entry; the end is resolved first."""

EXCLUDED_STATUSES = frozenset({"cancelled"})


def policy_for(status: str) -> ResolutionPolicy:
    return RESOLUTION_POLICY.get(status, DEFAULT_POLICY)


def resolve_order(order: Order, today: dt.date, tz: dt.tzinfo | None = None) -> Task | None:
    """
    Project one order onto a Task, or return None for excluded statuses.

    - Dates come from the status policy: first populated field wins, then the anchor fallback.
    - Every resolved date is normalized; an end before the start is clamped to the start.
    """

    if order.status in EXCLUDED_STATUSES:
        return None

    policy = policy_for(order.status)
    resolved: dict[str, dt.date] = {"today": today, "origin": _origin(order, today, tz)}

    # A rule anchored on the other bound must be resolved second.
    order_of_rules = ("end", "start") if policy.start.anchor == "end" else ("start", "end")
    for bound in order_of_rules:
        rule: DateRule = getattr(policy, bound)
        resolved[bound] = _apply_rule(order, rule, resolved, tz)

    start, end = resolved["start"], resolved["end"]
    if end < start:
        logger.warning("Order %s resolves end %s before start %s; clamping", order.id, end, start)
        end = start

    return Task(
        id=order.id,
        product_name=order.product_name,
        quantity=order.quantity,
        requester=order.requester,
        start=start,
        end=end,
        status=order.status,
        line=_resolve_line(order, policy.line),
    )


def resolve_orders(orders: Iterable[Order], today: dt.date, tz: dt.tzinfo | None = None) -> list[Task]:
    """Resolve a snapshot in order, dropping excluded orders."""
    tasks: list[Task] = []
    for order in orders:
        task = resolve_order(order, today, tz)
        if task is not None:
            tasks.append(task)
    return tasks


def _apply_rule(order: Order, rule: DateRule, resolved: dict[str, dt.date], tz: dt.tzinfo | None) -> dt.date:
    value = _first_present(order, rule.fields)
    if value is not None:
        return normalize(value, tz)
    return resolved[rule.anchor] + dt.timedelta(days=rule.offset_days)


def _origin(order: Order, today: dt.date, tz: dt.tzinfo | None) -> dt.date:
    value = _first_present(order, ("request_date", "created_at"))
    return normalize(value, tz) if value is not None else today


def _first_present(order: Order, fields: tuple[str, ...]) -> dt.date | None:
    """First field holding a date; anything else counts as missing."""
    for name in fields:
        value = getattr(order, name, None)
        if value is None:
            continue
        if isinstance(value, (dt.date, dt.datetime)):
            return value
        logger.warning("Order %s: unreadable %s %r; treating as missing", order.id, name, value)
    return None


def _resolve_line(order: Order, rule: LineRule) -> str:
    if rule.fixed is not None:
        return rule.fixed
    value = getattr(order, rule.field, None)
    if isinstance(value, str) and value.strip():
        return value
    return rule.default
