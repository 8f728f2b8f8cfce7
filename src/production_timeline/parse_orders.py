from __future__ import annotations

import datetime as _dt
import logging
from dataclasses import dataclass
from typing import Any

import yaml

from .models import Order
from .resolution import OrderValidationError

logger = logging.getLogger(__name__)

DATE_FIELDS = (
    "created_at",
    "request_date",
    "requested_completion_date",
    "planned_start_date",
    "planned_completion_date",
    "actual_start_date",
    "actual_completion_date",
)
TEXT_FIELDS = ("product_name", "requester")
ALLOWED_KEYS = {"id", "status", "quantity", "production_line", *TEXT_FIELDS, *DATE_FIELDS}


@dataclass(frozen=True)
class _Path:
    """Helper to produce readable YAML path strings like orders[0].status."""

    parts: tuple[str, ...] = ()

    def child(self, segment: str) -> "_Path":
        return _Path(self.parts + (segment,))

    def __str__(self) -> str:  # pragma: no cover - trivial
        return ".".join(self.parts) if self.parts else "root"


def load_orders(path: str) -> list[Order]:
    """Load an order snapshot from a YAML file at the given path."""

    with open(path, "r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)

    return parse_orders(raw)


def parse_orders(data: Any) -> list[Order]:
    path = _Path()
    if not isinstance(data, dict):
        raise OrderValidationError(f"{path}: expected mapping at top level")

    orders_raw = data.get("orders")
    if orders_raw is None:
        raise OrderValidationError(f"{path}: missing required field 'orders'")
    if not isinstance(orders_raw, list):
        raise OrderValidationError(f"{path}.orders: expected list")

    ids: set[str] = set()
    return [_parse_order(item, _Path(("orders[%d]" % idx,)), ids) for idx, item in enumerate(orders_raw)]


def _parse_order(data: Any, path: _Path, ids: set[str]) -> Order:
    if not isinstance(data, dict):
        raise OrderValidationError(f"{path}: expected mapping for order")

    _assert_allowed_keys(data, ALLOWED_KEYS, path)
    order_id = _require_id(data, path, ids)
    status = _require_str(data, "status", path)

    values: dict[str, Any] = {}
    for key in TEXT_FIELDS:
        values[key] = _optional_str(data.get(key), path.child(key)) or ""
    for key in DATE_FIELDS:
        values[key] = _parse_date(data.get(key), path.child(key))

    return Order(
        id=order_id,
        status=status,
        quantity=_parse_quantity(data.get("quantity"), path.child("quantity")),
        production_line=_optional_str(data.get("production_line"), path.child("production_line")),
        **values,
    )


def _assert_allowed_keys(data: dict[str, Any], allowed: set[str], path: _Path) -> None:
    extras = sorted(str(key) for key in set(data.keys()) - allowed)
    if extras:
        raise OrderValidationError(f"{path}: unexpected fields {extras}")


def _require_str(data: dict[str, Any], key: str, path: _Path) -> str:
    if key not in data:
        raise OrderValidationError(f"{path}: missing required field '{key}'")
    value = data[key]
    if not isinstance(value, str) or not value.strip():
        raise OrderValidationError(f"{path.child(key)}: expected non-empty string")
    return value


def _require_id(data: dict[str, Any], path: _Path, ids: set[str]) -> str:
    if isinstance(data.get("id"), int) and not isinstance(data.get("id"), bool):
        data = {**data, "id": str(data["id"])}
    order_id = _require_str(data, "id", path)
    if order_id in ids:
        raise OrderValidationError(f"{path.child('id')}: duplicate id '{order_id}'")
    ids.add(order_id)
    return order_id


def _optional_str(value: Any, path: _Path) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise OrderValidationError(f"{path}: expected string")
    return value


def _parse_quantity(value: Any, path: _Path) -> int:
    if value is None:
        return 0
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    logger.warning("%s: expected integer, got %r; using 0", path, value)
    return 0


def _parse_date(value: Any, path: _Path) -> _dt.date | None:
    """Dates are lenient: anything unreadable is treated as missing."""
    if value is None or isinstance(value, (_dt.date, _dt.datetime)):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            if "T" in text or " " in text or ":" in text:
                return _dt.datetime.fromisoformat(text)
            return _dt.date.fromisoformat(text)
        except ValueError:
            pass
    logger.warning("%s: unreadable date %r; treating as missing", path, value)
    return None
