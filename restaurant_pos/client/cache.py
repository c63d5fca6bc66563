# restaurant_pos/client/cache.py
import copy
import threading
from contextlib import contextmanager
from typing import Any, Callable, Dict, Hashable, Iterator, List, Tuple

QueryKey = Tuple[Hashable, ...]

_MISSING = object()


class _Entry:
    __slots__ = ("value", "stale")

    def __init__(self, value: Any):
        self.value = value
        self.stale = False


class QueryCache:
    """Query results keyed by tuples such as ``("orders",)`` or
    ``("dashboardStats", "2026-10-19")``.

    Invalidation marks entries stale instead of dropping them, so readers
    keep the last known-good value until the next fetch replaces it.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._entries: Dict[QueryKey, _Entry] = {}

    def get(self, key: QueryKey, default: Any = None) -> Any:
        with self._lock:
            entry = self._entries.get(key)
            return default if entry is None else entry.value

    def set(self, key: QueryKey, value: Any) -> None:
        with self._lock:
            self._entries[key] = _Entry(value)

    def update(self, key: QueryKey, updater: Callable[[Any], Any]) -> Any:
        with self._lock:
            entry = self._entries.get(key)
            new_value = updater(None if entry is None else entry.value)
            self.set(key, new_value)
            return new_value

    def remove(self, key: QueryKey) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def is_stale(self, key: QueryKey) -> bool:
        with self._lock:
            entry = self._entries.get(key)
            return entry is None or entry.stale

    def invalidate(self, prefix: QueryKey) -> List[QueryKey]:
        """Mark every key starting with ``prefix`` as stale."""
        n = len(prefix)
        marked = []
        with self._lock:
            for key, entry in self._entries.items():
                if key[:n] == prefix:
                    entry.stale = True
                    marked.append(key)
        return marked

    def fetch(self, key: QueryKey, fetcher: Callable[[], Any]) -> Any:
        """Return the cached value, calling ``fetcher`` when missing or stale."""
        if not self.is_stale(key):
            return self.get(key)
        value = fetcher()
        self.set(key, value)
        return value

    @contextmanager
    def optimistic(self, key: QueryKey, updater: Callable[[Any], Any]) -> Iterator[Any]:
        """Apply ``updater`` to the cached value now; restore it if the block raises."""
        with self._lock:
            entry = self._entries.get(key)
            snapshot = _MISSING if entry is None else copy.deepcopy(entry.value)
            self.update(key, updater)
        try:
            yield snapshot
        except BaseException:
            with self._lock:
                if snapshot is _MISSING:
                    self._entries.pop(key, None)
                else:
                    self._entries[key] = _Entry(snapshot)
            raise
