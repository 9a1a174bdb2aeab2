"""Permission evaluation for access-controlled pages.

Provides:
- ``AccessDecision``: allowed flag plus warnings/errors for display.
- ``PermissionEvaluator``: combines a page's specifiers, a user and an
  action into an ``AccessDecision``.

Several specifiers on one page all have to agree: the user keeps a tier only
if every specifier grants at least that tier, so the most restrictive
specifier governs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from ..config import AccessControlConfig
from ..exceptions import GroupResolutionError
from ..logging import safe_preview
from ..models import PageUser
from .constants import DECLARATION_SEPARATOR, NOSEARCH_FLAG, Actions, Messages, Tier
from .groups import GroupClassification, GroupResolver

logger = logging.getLogger(__name__)


@dataclass
class AccessDecision:
    """Result of one evaluation. Never persisted."""

    allowed: bool = True
    warnings: set[str] = field(default_factory=set)
    errors: set[str] = field(default_factory=set)
    messages: list[str] = field(default_factory=list)

    @property
    def denied(self) -> bool:
        return not self.allowed

    @property
    def is_good(self) -> bool:
        """True when nothing needs to be shown besides the outcome."""
        return not self.warnings and not self.errors

    def has_message(self, code: str) -> bool:
        return code in self.warnings or code in self.errors

    def add_warning(self, code: str) -> None:
        self.warnings.add(code)

    def add_error(self, error: GroupResolutionError) -> None:
        self.errors.add(error.code)
        if error.message not in self.messages:
            self.messages.append(error.message)


@dataclass
class _TierAccumulator:
    """Running full/read/search flags across specifiers."""

    full: bool = True
    read: bool = True
    search: bool = True

    def add(self, tier: Tier) -> None:
        self.full = self.full and tier >= Tier.WRITE
        self.read = self.full or (self.read and tier >= Tier.READ)
        self.search = self.read or (self.search and tier >= Tier.SEARCH)

    @property
    def tier(self) -> Tier:
        if self.full:
            return Tier.WRITE
        if self.read:
            return Tier.READ
        if self.search:
            return Tier.SEARCH
        return Tier.NONE


def normalize_specifiers(specifiers: Optional[Sequence[str]]) -> tuple[list[str], bool]:
    """Expand the legacy single-string form and strip every ``(nosearch)``.

    Returns the remaining specifiers and whether ``(nosearch)`` was present.
    """
    if not specifiers:
        return [], False
    items = list(specifiers)
    if len(items) == 1:
        # Older records hold the whole declaration as one comma-separated string.
        items = [item.strip() for item in items[0].split(DECLARATION_SEPARATOR)]
    no_search = NOSEARCH_FLAG in items
    return [item for item in items if item != NOSEARCH_FLAG], no_search


class PermissionEvaluator:
    """Decides whether a user may perform an action on a restricted page.

    Args:
        resolver: Resolves specifiers to group classifications.
        config: Supplies the privileged-group bypass switch.

    Example::

        evaluator = PermissionEvaluator(resolver, config)
        decision = evaluator.evaluate(user, ["Project:Staff", "(ro)Project:Readers"], "view")
        if decision.denied:
            ...
    """

    def __init__(self, resolver: GroupResolver, config: Optional[AccessControlConfig] = None) -> None:
        self._resolver = resolver
        self._config = config or AccessControlConfig()

    def evaluate(self, user: PageUser, specifiers: Optional[Sequence[str]], action: str) -> AccessDecision:
        decision = AccessDecision()
        items, no_search = normalize_specifiers(specifiers)
        if not items:
            return decision
        if self._bypasses(user):
            return decision

        access = self._accumulate(user, items, decision)

        if access.full:
            return decision

        if action == Actions.SEARCH:
            decision.allowed = access.search
            if not access.search and no_search:
                # Tells the caller not to apply the search-snippet exception.
                decision.add_warning(Messages.NOSEARCH)
        elif action in Actions.READ_CLASS:
            decision.allowed = access.read
        else:
            decision.allowed = False

        if decision.denied:
            logger.debug("Denied %r to %r on %s", action, user.match_name, safe_preview(items))
        return decision

    def effective_tier(self, user: PageUser, specifiers: Optional[Sequence[str]]) -> Tier:
        """Tier the user holds on a page carrying ``specifiers``."""
        items, _ = normalize_specifiers(specifiers)
        if not items or self._bypasses(user):
            return Tier.WRITE
        return self._accumulate(user, items, AccessDecision()).tier

    def _bypasses(self, user: PageUser) -> bool:
        return self._config.admin_can_read_all and user.in_group(self._config.privileged_group)

    def _accumulate(self, user: PageUser, items: list[str], decision: AccessDecision) -> _TierAccumulator:
        user_name = user.match_name
        access = _TierAccumulator()
        for item in items:
            try:
                groups = self._resolver.resolve(item)
            except GroupResolutionError as e:
                decision.add_error(e)
                groups = GroupClassification.empty()
            access.add(groups.tier_for(user_name))
        return access


__all__ = [
    "AccessDecision",
    "PermissionEvaluator",
    "normalize_specifiers",
]
