from __future__ import annotations

import datetime as dt
import enum
import logging
from typing import Callable, Iterable

from .calendar import Direction, month_window, today as current_day
from .grid import DEFAULT_CELL_WIDTH
from .layout import compute_layout
from .models import GridWindow, Order, Task, TimelineLayout
from .query import filter_tasks, navigate
from .resolution import resolve_orders
from .store import InMemoryRecordStore, Unsubscribe

logger = logging.getLogger(__name__)

DEFAULT_COLLECTION = "productionRequests"
DEFAULT_ORDER_BY = "created_at"


class TimelineState(enum.Enum):
    IDLE = "idle"
    LOADED = "loaded"
    FILTERED = "filtered"
    LAID_OUT = "laid_out"


class ScheduleTimeline:
    """
    Reactive shell around `compute_layout`.

    Owns only the parameters a viewer changes (window, query) plus the latest
    order snapshot; every layout is recomputed from scratch.
    """

    def __init__(
        self,
        window: GridWindow | None = None,
        query: str = "",
        cell_width: int = DEFAULT_CELL_WIDTH,
        tz: dt.tzinfo | None = None,
        clock: Callable[[], dt.date] | None = None,
    ) -> None:
        self.tz = tz
        self._clock = clock or (lambda: current_day(tz))
        self.window = window or month_window(self._clock())
        self.query = query
        self.cell_width = cell_width
        self.state = TimelineState.IDLE
        self.last_layout: TimelineLayout | None = None
        self._orders: list[Order] = []
        self._unsubscribe: Unsubscribe | None = None

    @property
    def orders(self) -> list[Order]:
        return list(self._orders)

    def load(self, orders: Iterable[Order]) -> None:
        """Replace the snapshot wholesale."""
        self._orders = list(orders)
        self.state = TimelineState.LOADED
        logger.debug("Loaded snapshot with %d orders", len(self._orders))

    def tasks(self) -> list[Task]:
        return resolve_orders(self._orders, today=self._clock(), tz=self.tz)

    def search(self, query: str) -> list[Task]:
        """Set the search text and return the tasks it leaves visible."""
        self.query = query
        if self.state is not TimelineState.IDLE:
            self.state = TimelineState.FILTERED
        return filter_tasks(self.tasks(), query)

    def clear_search(self) -> list[Task]:
        return self.search("")

    def navigate(self, direction: Direction) -> GridWindow:
        self.window = navigate(self.window, direction)
        return self.window

    def layout(self) -> TimelineLayout:
        layout = compute_layout(
            self._orders,
            self.window,
            query=self.query,
            cell_width=self.cell_width,
            today=self._clock(),
            tz=self.tz,
        )
        self.last_layout = layout
        self.state = TimelineState.LAID_OUT
        return layout

    def attach(
        self,
        store: InMemoryRecordStore,
        collection: str = DEFAULT_COLLECTION,
        order_by: str = DEFAULT_ORDER_BY,
    ) -> None:
        """Follow a store collection; each snapshot triggers a full re-layout."""
        self.detach()
        self._unsubscribe = store.subscribe(collection, order_by, self._on_snapshot, self._on_error)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def close(self) -> None:
        """Tear down: drop the subscription and the snapshot."""
        self.detach()
        self._orders = []
        self.last_layout = None
        self.state = TimelineState.IDLE

    def _on_snapshot(self, orders: list[Order]) -> None:
        self.load(orders)
        self.layout()

    def _on_error(self, error: Exception) -> None:
        # Keep serving the previous layout.
        logger.warning("Order snapshot failed, keeping last layout: %s", error)
