import datetime as dt

from production_timeline.models import Order
from production_timeline.resolution import (
    DEFAULT_POLICY,
    RESOLUTION_POLICY,
    policy_for,
    resolve_order,
    resolve_orders,
)

TODAY = dt.date(2024, 3, 20)


def _order(status, **fields):
    fields.setdefault("product_name", "Widget")
    fields.setdefault("quantity", 100)
    fields.setdefault("requester", "Kim")
    return Order(id=fields.pop("id", "o1"), status=status, **fields)


def test_pending_review_with_only_created_at_spans_thirty_days():
    order = _order("pending_review", created_at=dt.datetime(2024, 3, 5, 14, 30))

    task = resolve_order(order, TODAY)

    assert task.start == dt.date(2024, 3, 5)
    assert task.end == dt.date(2024, 4, 4)
    assert task.line == "검토 대기"


def test_pending_review_ignores_assigned_line():
    order = _order(
        "pending_review",
        request_date=dt.date(2024, 3, 1),
        requested_completion_date=dt.date(2024, 3, 15),
        production_line="Line1",
    )

    task = resolve_order(order, TODAY)

    assert (task.start, task.end) == (dt.date(2024, 3, 1), dt.date(2024, 3, 15))
    assert task.line == "검토 대기"


def test_request_date_wins_over_created_at():
    order = _order("confirmed", request_date=dt.date(2024, 3, 2), created_at=dt.date(2024, 2, 1))

    assert resolve_order(order, TODAY).start == dt.date(2024, 3, 2)


def test_missing_start_sources_fall_back_to_today():
    task = resolve_order(_order("confirmed"), TODAY)

    assert task.start == TODAY
    assert task.end == TODAY + dt.timedelta(days=30)


def test_confirmed_end_prefers_planned_then_requested():
    planned = _order(
        "confirmed",
        request_date=dt.date(2024, 3, 1),
        planned_completion_date=dt.date(2024, 3, 10),
        requested_completion_date=dt.date(2024, 3, 20),
    )
    requested = _order("in_progress", request_date=dt.date(2024, 3, 1), requested_completion_date=dt.date(2024, 3, 20))

    assert resolve_order(planned, TODAY).end == dt.date(2024, 3, 10)
    assert resolve_order(requested, TODAY).end == dt.date(2024, 3, 20)


def test_completed_end_prefers_actual_completion():
    order = _order(
        "completed",
        request_date=dt.date(2024, 3, 1),
        actual_completion_date=dt.datetime(2024, 3, 12, 18, 45),
        planned_completion_date=dt.date(2024, 3, 10),
        requested_completion_date=dt.date(2024, 3, 20),
    )

    assert resolve_order(order, TODAY).end == dt.date(2024, 3, 12)


def test_assigned_line_defaults_to_unassigned():
    assert resolve_order(_order("confirmed", production_line="Line2"), TODAY).line == "Line2"
    assert resolve_order(_order("completed", production_line=""), TODAY).line == "미지정"
    assert resolve_order(_order("in_progress"), TODAY).line == "미지정"


def test_unknown_status_derives_start_from_end():
    order = _order("on_hold", planned_completion_date=dt.date(2024, 5, 20), production_line="Line3")

    task = resolve_order(order, TODAY)

    assert task.end == dt.date(2024, 5, 20)
    assert task.start == dt.date(2024, 5, 13)
    assert task.line == "Line3"


def test_unknown_status_prefers_planned_start():
    order = _order("on_hold", planned_start_date=dt.date(2024, 5, 1), planned_completion_date=dt.date(2024, 5, 20))

    assert resolve_order(order, TODAY).start == dt.date(2024, 5, 1)


def test_unknown_status_without_completion_uses_creation_plus_thirty():
    order = _order("on_hold", created_at=dt.date(2024, 3, 1))

    task = resolve_order(order, TODAY)

    assert task.end == dt.date(2024, 3, 31)
    assert task.start == dt.date(2024, 3, 24)


def test_end_before_start_is_clamped():
    order = _order("confirmed", request_date=dt.date(2024, 3, 10), planned_completion_date=dt.date(2024, 3, 1))

    task = resolve_order(order, TODAY)

    assert task.start == task.end == dt.date(2024, 3, 10)


def test_cancelled_orders_are_dropped():
    orders = [
        _order("cancelled", id="c", request_date=dt.date(2024, 3, 1)),
        _order("confirmed", id="a", request_date=dt.date(2024, 3, 1)),
        _order("pending_review", id="b", created_at=dt.date(2024, 3, 2)),
    ]

    assert resolve_order(orders[0], TODAY) is None
    assert [task.id for task in resolve_orders(orders, TODAY)] == ["a", "b"]


def test_policy_table_is_data():
    assert RESOLUTION_POLICY["in_progress"] == RESOLUTION_POLICY["confirmed"]
    assert policy_for("anything_else") is DEFAULT_POLICY
    assert RESOLUTION_POLICY["completed"].end.fields[0] == "actual_completion_date"


def test_task_labels():
    task = resolve_order(_order("in_progress", quantity=12000, request_date=dt.date(2024, 3, 1)), TODAY)

    assert task.name == "Widget (12,000)"
    assert task.label == "Widget | 12,000개 | Kim"
    assert task.status_label == "진행 중"
    assert task.tooltip.endswith("2024-03-01 ~ 2024-03-31")


def test_non_date_values_fall_through_to_next_source():
    for bad in ("", "2024-03-01", 20240301):
        order = _order("confirmed", request_date=bad, created_at=dt.date(2024, 3, 2))

        task = resolve_order(order, TODAY)

        assert task.start == dt.date(2024, 3, 2)
        assert task.end == dt.date(2024, 4, 1)


def test_non_date_end_uses_derived_fallback():
    order = _order("completed", request_date=dt.date(2024, 3, 1), actual_completion_date="soon")

    assert resolve_order(order, TODAY).end == dt.date(2024, 3, 31)
