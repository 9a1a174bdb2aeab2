"""Group-page resolution and tier classification.

Provides:
- ``GroupClassification``: disjoint write/read/search user sets for one specifier.
- ``classify()``: apply a specifier's scope modifier to a group page's tiers.
- ``GroupResolver``: load, parse and cache classifications per raw specifier.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, Optional, Union

from ..cache import MISSING, LocalCache
from ..exceptions import GroupPageNotFoundError, GroupResolutionError, MalformedTitleError
from ..interfaces import PageSource
from ..models import ANONYMOUS_NAME
from .constants import Modifier, Tier
from .specifier import Specifier, parse_group_page, parse_specifier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GroupClassification:
    """Users granted each tier through one specifier.

    A user appears in at most one of the three sets.
    """

    write_users: frozenset[str] = frozenset()
    read_users: frozenset[str] = frozenset()
    search_users: frozenset[str] = frozenset()

    @classmethod
    def empty(cls) -> "GroupClassification":
        """Classification that grants nobody anything."""
        return cls()

    def tier_for(self, user_name: str) -> Tier:
        """Highest tier ``user_name`` holds here.

        Anonymous users (``*``) only match a literal ``*`` entry; named
        users match their own entry or ``*``.
        """
        best = Tier.NONE
        for tier, users in (
            (Tier.WRITE, self.write_users),
            (Tier.READ, self.read_users),
            (Tier.SEARCH, self.search_users),
        ):
            if _matches(user_name, users):
                best = max(best, tier)
        return best


def _matches(user_name: str, users: frozenset[str]) -> bool:
    if user_name in users:
        return True
    return user_name != ANONYMOUS_NAME and ANONYMOUS_NAME in users


def classify(tiers: Mapping[str, Tier], modifier: Modifier = Modifier.NONE) -> GroupClassification:
    """Distribute users into tier sets, capped by the specifier's modifier.

    ``(ro)`` turns write entries into read entries; ``(search)`` turns every
    entry into a search entry. A modifier never raises a tier.
    """
    cap = modifier.tier
    buckets: dict[Tier, set[str]] = {Tier.WRITE: set(), Tier.READ: set(), Tier.SEARCH: set()}
    for user, tier in tiers.items():
        effective = min(tier, cap)
        if effective > Tier.NONE:
            buckets[Tier(effective)].add(user)
    return GroupClassification(
        write_users=frozenset(buckets[Tier.WRITE]),
        read_users=frozenset(buckets[Tier.READ]),
        search_users=frozenset(buckets[Tier.SEARCH]),
    )


_Cached = Union[GroupClassification, GroupResolutionError]


class GroupResolver:
    """Resolves specifiers to classifications through the host's page source.

    Results, including failures, are cached per raw specifier string in a
    cache owned by this resolver. ``invalidate()`` drops every entry that
    references a group page when the host reports an edit to it.

    Example::

        resolver = GroupResolver(pages)
        groups = resolver.resolve("(ro)Project:Staff")
        groups.tier_for("Alice")  # Tier.READ
    """

    def __init__(self, pages: PageSource, cache: Optional[LocalCache[str, tuple[str, _Cached]]] = None) -> None:
        self._pages = pages
        self._cache: LocalCache[str, tuple[str, _Cached]] = cache if cache is not None else LocalCache()

    def resolve(self, specifier: Union[str, Specifier]) -> GroupClassification:
        """Classify the users of the group page ``specifier`` names.

        Raises:
            MalformedTitleError: the referenced title cannot be parsed.
            GroupPageNotFoundError: the referenced page does not exist.
        """
        if isinstance(specifier, str):
            specifier = parse_specifier(specifier)

        cached = self._cache.get(specifier.raw)
        if cached is not MISSING:
            _, result = cached
            if isinstance(result, GroupResolutionError):
                # Each hit starts from an empty traceback.
                raise result.with_traceback(None)
            return result

        try:
            title = self._pages.normalize_title(specifier.title)
        except MalformedTitleError as e:
            logger.info("Invalid group title in specifier %r: %s", specifier.raw, e)
            self._cache.set(specifier.raw, (specifier.title, e))
            raise

        try:
            result = self._load(title, specifier.modifier)
        except GroupPageNotFoundError as e:
            logger.info("Group page %r for specifier %r does not exist", title, specifier.raw)
            self._cache.set(specifier.raw, (title, e))
            raise

        self._cache.set(specifier.raw, (title, result))
        return result

    def _load(self, title: str, modifier: Modifier) -> GroupClassification:
        text = self._pages.get_text(title)
        if text is None:
            raise GroupPageNotFoundError(title)
        result = classify(parse_group_page(text), modifier)
        logger.debug(
            "Classified group page %r (%s): %d write, %d read, %d search",
            title,
            modifier.value or "full",
            len(result.write_users),
            len(result.read_users),
            len(result.search_users),
        )
        return result

    def invalidate(self, title: str) -> int:
        """Forget every cached specifier that references group page ``title``."""
        dropped = self._cache.invalidate_where(lambda _raw, entry: entry[0] == title)
        if dropped:
            logger.debug("Invalidated %d cached classification(s) for %r", dropped, title)
        return dropped

    def clear(self) -> None:
        self._cache.clear()


__all__ = [
    "GroupClassification",
    "GroupResolver",
    "classify",
]
