"""In-memory caches for the catalog.

The broker keeps two independent caches: the listing cache (which templates
need a refresh) and the catalog cache (parsed service definitions). Both
only need ``set`` and ``get``; a missing key is reported with
``NotFoundError`` rather than a ``None`` value.
"""

from __future__ import annotations

import threading
from typing import Any, Protocol

from awsbroker.core.errors import NotFoundError

LISTINGS_KEY = "__LISTINGS__"


class Cache(Protocol):
    """Interface for the caches used by the catalog synchronizer."""

    def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``."""
        ...

    def get(self, key: str) -> Any:
        """Return the value stored under ``key`` or raise NotFoundError."""
        ...


class MemoryCache:
    """Thread-safe, process-local key/value cache without expiry."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._items: dict[str, Any] = {}

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._items[str(key)] = value

    def get(self, key: str) -> Any:
        with self._lock:
            try:
                return self._items[str(key)]
            except KeyError:
                raise NotFoundError("not found") from None

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
