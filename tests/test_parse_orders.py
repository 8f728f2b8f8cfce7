import datetime as dt

import pytest

from production_timeline.parse_orders import load_orders, parse_orders
from production_timeline.resolution import OrderValidationError

ORDERS_YAML = """\
orders:
  - id: PR-1
    status: confirmed
    product_name: Steel Pipe
    quantity: 500
    requester: Park
    request_date: 2024-03-01
    planned_completion_date: "2024-03-10"
    production_line: Line1
  - id: 2
    status: pending_review
    product_name: Copper Wire
    quantity: twenty
    requester: Choi
    created_at: 2024-03-05 09:30:00
    requested_completion_date: not-a-date
"""


def test_load_orders_reads_yaml(tmp_path):
    path = tmp_path / "orders.yaml"
    path.write_text(ORDERS_YAML, encoding="utf-8")

    first, second = load_orders(str(path))

    assert first.id == "PR-1"
    assert first.request_date == dt.date(2024, 3, 1)
    assert first.planned_completion_date == dt.date(2024, 3, 10)
    assert first.production_line == "Line1"
    assert second.id == "2"
    assert second.created_at == dt.datetime(2024, 3, 5, 9, 30)


def test_malformed_values_are_tolerated(tmp_path):
    path = tmp_path / "orders.yaml"
    path.write_text(ORDERS_YAML, encoding="utf-8")

    second = load_orders(str(path))[1]

    assert second.requested_completion_date is None
    assert second.quantity == 0
    assert second.production_line is None


def test_missing_orders_list_is_rejected():
    with pytest.raises(OrderValidationError, match="orders"):
        parse_orders({"items": []})


def test_top_level_must_be_mapping():
    with pytest.raises(OrderValidationError):
        parse_orders([{"id": "a", "status": "confirmed"}])


def test_unexpected_fields_are_rejected():
    with pytest.raises(OrderValidationError, match=r"orders\[0\]: unexpected fields \['colour'\]"):
        parse_orders({"orders": [{"id": "a", "status": "confirmed", "colour": "red"}]})


def test_duplicate_ids_are_rejected():
    data = {"orders": [{"id": "a", "status": "confirmed"}, {"id": "a", "status": "completed"}]}

    with pytest.raises(OrderValidationError, match="duplicate id"):
        parse_orders(data)


def test_status_is_required():
    with pytest.raises(OrderValidationError, match="status"):
        parse_orders({"orders": [{"id": "a"}]})


def test_empty_orders_list_is_valid():
    assert parse_orders({"orders": []}) == []
