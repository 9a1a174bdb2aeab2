"""Local memoization with an explicit owner, optional expiry and invalidation.

A ``LocalCache`` belongs to whichever object creates it (typically one
``AccessControl`` per request or worker), so its lifetime is that owner's
lifetime. ``ttl_seconds`` additionally bounds how long an entry may be
served, and ``invalidate()`` / ``invalidate_where()`` drop entries when the
host reports an edit.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Generic, Hashable, Optional, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

MISSING: Any = object()


class LocalCache(Generic[K, V]):
    """Dict-backed cache that can store ``None`` as a real value.

    Lookups return :data:`MISSING` (or the supplied default) on a miss, so a
    cached "unrestricted" (``None``) is distinguishable from "not cached".
    """

    __slots__ = ("_entries", "_ttl", "_clock")

    def __init__(
        self,
        ttl_seconds: Optional[float] = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._entries: dict[K, tuple[V, Optional[float]]] = {}
        self._ttl = ttl_seconds
        self._clock = clock

    def get(self, key: K, default: Any = MISSING) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return default
        value, expires_at = entry
        if expires_at is not None and self._clock() >= expires_at:
            del self._entries[key]
            return default
        return value

    def set(self, key: K, value: V) -> None:
        expires_at = self._clock() + self._ttl if self._ttl is not None else None
        self._entries[key] = (value, expires_at)

    def __contains__(self, key: object) -> bool:
        return self.get(key) is not MISSING  # type: ignore[arg-type]

    def __len__(self) -> int:
        return len(self._entries)

    def invalidate(self, key: K) -> bool:
        """Drop one entry. Returns True if it was present."""
        return self._entries.pop(key, None) is not None

    def invalidate_where(self, predicate: Callable[[K, V], bool]) -> int:
        """Drop every entry matching ``predicate(key, value)``; returns the count."""
        stale = [key for key, (value, _) in self._entries.items() if predicate(key, value)]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()

    def __repr__(self) -> str:
        return f"LocalCache(entries={len(self._entries)}, ttl_seconds={self._ttl!r})"


__all__ = ["MISSING", "LocalCache"]
