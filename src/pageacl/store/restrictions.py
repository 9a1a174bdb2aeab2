"""Two-level storage of page restrictions.

``RestrictionStore`` keeps each page's specifier list in a local cache in
front of a persistent backend. Reads never fail: an unreadable or missing
record falls back to re-rendering the page. Writes happen only when a page
is reprocessed, and a failed write is logged and retried on the next
reprocessing.
"""

from __future__ import annotations

import json
from typing import Optional, Sequence

from ..cache import MISSING, LocalCache
from ..exceptions import StoreReadError, StoreWriteError
from ..interfaces import RenderPipeline
from ..logging import get_access_logger, safe_preview
from ..models import PageUser, RestrictionRecord
from .backends import RestrictionBackend

Restriction = Optional[list[str]]


def encode_restriction(specifiers: Restriction) -> Optional[str]:
    if specifiers is None:
        return None
    return json.dumps(list(specifiers), ensure_ascii=False)


def decode_restriction(tag_content: Optional[str]) -> Restriction:
    """Decode stored content; empty content or an empty list means unrestricted.

    Raises:
        ValueError: content is not a JSON list of strings.
    """
    if not tag_content:
        return None
    value = json.loads(tag_content)
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"expected a JSON array of strings, got {type(value).__name__}")
    return value or None


class RestrictionStore:
    """Cached, persisted specifier lists keyed by page id.

    Args:
        backend: Persistent record store.
        renderer: Re-renders a page when no record exists yet.
        cache: Local cache; owned by this store when not supplied.
    """

    def __init__(
        self,
        backend: RestrictionBackend,
        renderer: RenderPipeline,
        cache: Optional[LocalCache[int, Restriction]] = None,
    ) -> None:
        self._backend = backend
        self._renderer = renderer
        self._cache: LocalCache[int, Restriction] = cache if cache is not None else LocalCache()

    def get(self, page_id: int, user: Optional[PageUser] = None) -> Restriction:
        """Specifiers restricting ``page_id``, or None when unrestricted."""
        if not page_id:
            return None

        cached = self._cache.get(page_id)
        if cached is not MISSING:
            return cached

        log = get_access_logger(__name__, page_id=page_id)
        restriction = MISSING
        try:
            record = self._backend.fetch(page_id)
        except StoreReadError as e:
            log.warning("Restriction read failed, re-rendering page: %s", e)
            record = None

        if record is not None:
            try:
                restriction = decode_restriction(record.tag_content)
            except ValueError as e:
                log.warning("Undecodable restriction record, re-rendering page: %s", e)

        if restriction is MISSING:
            # No usable record yet: derive the current restriction from a fresh render.
            rendered = self._renderer.render_declarations(page_id, user)
            restriction = list(rendered) if rendered is not None else None
            log.info("Restriction derived by rendering: %s", safe_preview(restriction))

        self._cache.set(page_id, restriction)
        return restriction

    def put(self, page_id: int, specifiers: Optional[Sequence[str]]) -> bool:
        """Record the specifiers a fresh render of ``page_id`` produced.

        Returns True if a write was attempted, False if nothing changed.
        """
        if not page_id:
            return False

        restriction: Restriction = list(specifiers) if specifiers else None
        if self._cache.get(page_id) == restriction:
            return False
        self._cache.set(page_id, restriction)

        log = get_access_logger(__name__, page_id=page_id)
        try:
            self._backend.upsert(
                RestrictionRecord(page_id=page_id, tag_content=encode_restriction(restriction))
            )
        except StoreWriteError as e:
            log.warning("Restriction write failed, kept until next reprocessing: %s", e)
        else:
            log.debug("Restriction stored: %s", safe_preview(restriction))
        return True

    def invalidate(self, page_id: int) -> None:
        """Drop the cached restriction so the next read goes to the backend."""
        self._cache.invalidate(page_id)


__all__ = [
    "RestrictionStore",
    "decode_restriction",
    "encode_restriction",
]
