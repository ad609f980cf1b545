from __future__ import annotations

import threading
import time
from typing import Callable

from .models import ToolProfile
from .store import CatalogStore

_DEFAULT_TTL = 300  # 5 minutes


class CachedCatalogStore:
    """Wrap a catalog store and reuse its snapshot until the TTL expires.

    Failed loads are never cached, so the next request retries the inner store.
    """

    def __init__(
        self,
        inner: CatalogStore,
        ttl: float = _DEFAULT_TTL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.inner = inner
        self.ttl = ttl
        self._clock = clock
        self._tools: list[ToolProfile] | None = None
        self._loaded_at = 0.0
        self._hits = 0
        self._misses = 0
        self._lock = threading.Lock()

    def load_tools(self) -> list[ToolProfile]:
        with self._lock:
            if self._tools is not None and self._clock() - self._loaded_at < self.ttl:
                self._hits += 1
                return list(self._tools)

            self._misses += 1
            tools = self.inner.load_tools()
            self._tools = list(tools)
            self._loaded_at = self._clock()
            return list(tools)

    def stats(self) -> dict:
        with self._lock:
            total = self._hits + self._misses
            return {
                "cached": self._tools is not None,
                "size": len(self._tools or []),
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": round(self._hits / total * 100, 1) if total > 0 else 0.0,
            }

    def clear(self) -> None:
        with self._lock:
            self._tools = None
            self._loaded_at = 0.0
            self._hits = 0
            self._misses = 0
