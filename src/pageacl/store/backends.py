"""Persistent restriction records.

The record table has one row per page: ``page_id`` (key) and
``tag_content`` (JSON array of specifiers, or null for unrestricted).

Backends:
- ``InMemoryRestrictionBackend``: process-local, for tests and single-process setups.
- ``RedisRestrictionBackend``: one Redis hash, reads from a replica, writes to the primary.

``build_backend()`` picks Redis when ``redis_url`` is configured and degrades
to memory otherwise.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import redis

from ..config import AccessControlConfig
from ..exceptions import StoreReadError, StoreWriteError
from ..models import RestrictionRecord

logger = logging.getLogger(__name__)

# Hash values cannot be null; an empty string stands for a null column.
_NULL_CONTENT = ""


class RestrictionBackend(ABC):
    """Read/write contract for restriction records."""

    @abstractmethod
    def fetch(self, page_id: int) -> Optional[RestrictionRecord]:
        """Return the record for ``page_id`` or None when no row exists.

        Raises:
            StoreReadError: the store could not be read.
        """
        raise NotImplementedError

    @abstractmethod
    def upsert(self, record: RestrictionRecord) -> None:
        """Insert or replace the row for ``record.page_id``.

        Raises:
            StoreWriteError: the store could not be written.
        """
        raise NotImplementedError


class InMemoryRestrictionBackend(RestrictionBackend):
    """Dict-backed records. ``writes`` counts upserts."""

    def __init__(self) -> None:
        self._rows: dict[int, Optional[str]] = {}
        self.writes = 0

    def fetch(self, page_id: int) -> Optional[RestrictionRecord]:
        if page_id not in self._rows:
            return None
        return RestrictionRecord(page_id=page_id, tag_content=self._rows[page_id])

    def upsert(self, record: RestrictionRecord) -> None:
        self._rows[record.page_id] = record.tag_content
        self.writes += 1

    def __len__(self) -> int:
        return len(self._rows)


class RedisRestrictionBackend(RestrictionBackend):
    """Records stored as fields of one Redis hash.

    Args:
        primary: Client used for writes.
        replica: Client used for reads (defaults to ``primary``). Reads may
            lag behind writes.
        key: Hash name.

    Example::

        backend = RedisRestrictionBackend.from_url(
            "redis://primary:6379/0",
            replica_url="redis://replica:6379/0",
        )
        backend.upsert(RestrictionRecord(page_id=42, tag_content='["Staff"]'))
    """

    def __init__(
        self,
        primary: Any,
        replica: Any = None,
        *,
        key: str = "pageacl:access_control",
    ) -> None:
        self._primary = primary
        self._replica = replica if replica is not None else primary
        self.key = key

    @classmethod
    def from_url(
        cls,
        url: str,
        replica_url: Optional[str] = None,
        *,
        key: str = "pageacl:access_control",
    ) -> "RedisRestrictionBackend":
        primary = redis.from_url(url, decode_responses=True)
        replica = redis.from_url(replica_url, decode_responses=True) if replica_url else None
        return cls(primary, replica, key=key)

    def fetch(self, page_id: int) -> Optional[RestrictionRecord]:
        try:
            raw = self._replica.hget(self.key, str(page_id))
        except redis.RedisError as e:
            raise StoreReadError(f"Reading restriction for page {page_id} failed: {e}", page_id=page_id) from e
        if raw is None:
            return None
        return RestrictionRecord(page_id=page_id, tag_content=raw or None)

    def upsert(self, record: RestrictionRecord) -> None:
        value = record.tag_content if record.tag_content is not None else _NULL_CONTENT
        try:
            self._primary.hset(self.key, str(record.page_id), value)
        except redis.RedisError as e:
            raise StoreWriteError(
                f"Writing restriction for page {record.page_id} failed: {e}",
                page_id=record.page_id,
            ) from e

    def close(self) -> None:
        self._primary.close()
        if self._replica is not self._primary:
            self._replica.close()


def build_backend(config: AccessControlConfig) -> RestrictionBackend:
    """Create the backend described by ``config``.

    Without ``redis_url`` records are kept in memory only, so every new
    process starts from the render fallback.
    """
    if not config.redis_url:
        logger.warning("REDIS_URL not configured; restriction records are kept in process memory only")
        return InMemoryRestrictionBackend()
    return RedisRestrictionBackend.from_url(
        config.redis_url,
        replica_url=config.redis_replica_url,
        key=config.redis_key,
    )


__all__ = [
    "InMemoryRestrictionBackend",
    "RedisRestrictionBackend",
    "RestrictionBackend",
    "build_backend",
]
