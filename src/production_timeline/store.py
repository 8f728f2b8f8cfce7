"""In-memory record store with push-based snapshot subscriptions."""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, List, MutableMapping, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

SnapshotCallback = Callable[[List[Any]], None]
ErrorCallback = Callable[[Exception], None]
Unsubscribe = Callable[[], None]


class StoreError(RuntimeError):
    """Base exception for record store errors."""


class RecordNotFoundError(StoreError):
    """Raised when a requested record is missing."""


@dataclass
class _Subscription:
    collection: str
    order_by: str
    descending: bool
    on_snapshot: SnapshotCallback
    on_error: ErrorCallback | None


class InMemoryRecordStore(Generic[T]):
    """
    Collections of records keyed by `id`.

    Every write pushes a full, ordered snapshot of the touched collection to
    its subscribers; subscribers never receive deltas.
    """

    def __init__(self) -> None:
        self._collections: MutableMapping[str, Dict[str, T]] = {}
        self._subscriptions: List[_Subscription] = []

    def put(self, collection: str, record: T) -> None:
        self._collections.setdefault(collection, {})[getattr(record, "id")] = record
        self._publish(collection)

    def remove(self, collection: str, record_id: str) -> None:
        items = self._collections.get(collection, {})
        if record_id not in items:
            raise RecordNotFoundError(f"Record with id {record_id!r} not found in {collection!r}")
        del items[record_id]
        self._publish(collection)

    def records(self, collection: str, order_by: str | None = None, descending: bool = True) -> List[T]:
        items = list(self._collections.get(collection, {}).values())
        if order_by is None:
            return items
        return _ordered(items, order_by, descending)

    def subscribe(
        self,
        collection: str,
        order_by: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback | None = None,
        descending: bool = True,
    ) -> Unsubscribe:
        """Register for snapshots; the current snapshot is delivered immediately."""

        subscription = _Subscription(collection, order_by, descending, on_snapshot, on_error)
        self._subscriptions.append(subscription)
        self._deliver(subscription)

        def unsubscribe() -> None:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

        return unsubscribe

    def fail(self, collection: str, error: Exception) -> None:
        """Push a read failure to the collection's subscribers."""
        for subscription in list(self._subscriptions):
            if subscription.collection != collection:
                continue
            if subscription.on_error is None:
                logger.warning("Unhandled snapshot error for %s: %s", collection, error)
                continue
            subscription.on_error(error)

    def _publish(self, collection: str) -> None:
        for subscription in list(self._subscriptions):
            if subscription.collection == collection:
                self._deliver(subscription)

    def _deliver(self, subscription: _Subscription) -> None:
        snapshot = self.records(subscription.collection, subscription.order_by, subscription.descending)
        subscription.on_snapshot(snapshot)


def _ordered(items: List[T], order_by: str, descending: bool) -> List[T]:
    present = [item for item in items if getattr(item, order_by, None) is not None]
    missing = [item for item in items if getattr(item, order_by, None) is None]
    present.sort(key=lambda item: _sort_key(getattr(item, order_by)), reverse=descending)
    return present + missing


def _sort_key(value: Any) -> Any:
    # Mixed date/datetime values compare as UTC-naive datetimes.
    if isinstance(value, dt.datetime):
        if value.tzinfo is not None:
            return value.astimezone(dt.timezone.utc).replace(tzinfo=None)
        return value
    if isinstance(value, dt.date):
        return dt.datetime.combine(value, dt.time.min)
    return value


__all__ = [
    "InMemoryRecordStore",
    "StoreError",
    "RecordNotFoundError",
    "Unsubscribe",
]
