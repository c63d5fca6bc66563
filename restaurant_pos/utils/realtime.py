# restaurant_pos/utils/realtime.py
"""In-process change feed, one channel per table.

Route handlers publish after a successful commit; websocket subscribers
receive ``{"table", "event", "record"}`` messages. Handlers run in the
worker thread pool, so events are handed to each subscriber's own event
loop with ``call_soon_threadsafe``.
"""
import asyncio
import logging
import threading
from typing import Any, Dict, List, Optional, Set, Tuple

logger = logging.getLogger(__name__)

TABLES = (
    "products",
    "categories",
    "orders",
    "order_items",
    "expenses",
    "app_settings",
    "profiles",
)

EVENTS = ("INSERT", "UPDATE", "DELETE")

_Subscriber = Tuple[asyncio.AbstractEventLoop, "asyncio.Queue[Dict[str, Any]]"]


class ChangeHub:
    def __init__(self):
        self._lock = threading.Lock()
        self._subscribers: Dict[str, Set[_Subscriber]] = {t: set() for t in TABLES}

    def subscribe(self, table: str) -> _Subscriber:
        """Register the running loop as a subscriber of ``table``.

        Must be called from inside a coroutine.
        """
        if table not in self._subscribers:
            raise KeyError(table)
        sub = (asyncio.get_running_loop(), asyncio.Queue())
        with self._lock:
            self._subscribers[table].add(sub)
        logger.debug("Subscribed to %s changes (%d listeners)", table, len(self._subscribers[table]))
        return sub

    def unsubscribe(self, table: str, sub: _Subscriber) -> None:
        with self._lock:
            self._subscribers.get(table, set()).discard(sub)

    def subscriber_count(self, table: str) -> int:
        with self._lock:
            return len(self._subscribers.get(table, ()))

    def publish(self, table: str, event: str, record: Optional[Dict[str, Any]] = None) -> int:
        if event not in EVENTS:
            raise ValueError(f"Unknown change event: {event}")
        message = {"table": table, "event": event, "record": record or {}}

        with self._lock:
            subs: List[_Subscriber] = list(self._subscribers.get(table, ()))

        delivered = 0
        for loop, queue in subs:
            try:
                loop.call_soon_threadsafe(queue.put_nowait, message)
                delivered += 1
            except RuntimeError:
                # Subscriber's loop already closed
                self.unsubscribe(table, (loop, queue))
        return delivered


hub = ChangeHub()
