"""Host integration points.

``AccessControl`` wires the resolver, evaluator and restriction store
together and exposes the calls a wiki makes while rendering, checking
permissions, showing search results and saving pages. Build one per
request (or per worker, with cache TTLs configured); it holds all the
caches, so nothing is shared through module state.

Usage::

    acl = AccessControl(config, pages=host_pages, renderer=host_renderer)

    # while rendering <accesscontrol>Staff, (ro)Readers</accesscontrol>
    html = acl.register_declaration(render_bag, "Staff, (ro)Readers")

    # permission check
    result = acl.user_can(page, user, "edit")
    if not result.allowed:
        show_error(*result.message)

    # after the page is saved and re-rendered
    acl.on_content_reprocessed(page, render_bag)
"""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass
from typing import Any, MutableMapping, Optional

from .cache import LocalCache
from .config import AccessControlConfig
from .interfaces import PageSource, RenderPipeline
from .models import PageRef, PageUser
from .permissions.access import AccessDecision, PermissionEvaluator
from .permissions.constants import TAG_CONTENT_KEY, Actions, Messages
from .permissions.groups import GroupResolver
from .permissions.specifier import split_declaration
from .store.backends import RestrictionBackend, build_backend
from .store.restrictions import RestrictionStore

logger = logging.getLogger(__name__)

RESTRICTED_SEARCH_RESULT_CLASS = "mw-ac-restricted-search-result"


@dataclass(frozen=True)
class PermissionResult:
    """Answer for a permission-check call site.

    ``message`` is a ``(key, *args)`` tuple on denial, else None.
    """

    allowed: bool
    message: Optional[tuple[str, ...]] = None
    decision: Optional[AccessDecision] = None


class AccessControl:
    """Per-request access-control context.

    Args:
        config: Policy switches and cache lifetimes.
        pages: Host title/content lookup for group pages.
        renderer: Host re-render used when a page has no stored restriction.
        backend: Restriction records; built from ``config`` when omitted.
    """

    def __init__(
        self,
        config: Optional[AccessControlConfig] = None,
        *,
        pages: PageSource,
        renderer: RenderPipeline,
        backend: Optional[RestrictionBackend] = None,
    ) -> None:
        self.config = config or AccessControlConfig()
        self.resolver = GroupResolver(pages, LocalCache(self.config.group_cache_ttl_seconds))
        self.evaluator = PermissionEvaluator(self.resolver, self.config)
        self.store = RestrictionStore(
            backend if backend is not None else build_backend(self.config),
            renderer,
            LocalCache(self.config.restriction_cache_ttl_seconds),
        )
        self._restricted_search_results: set[str] = set()

    # ── Rendering ────────────────────────────────────────────────

    def register_declaration(self, bag: MutableMapping[str, Any], text: str) -> str:
        """Collect one declaration into a render pass's bag.

        Returns the placeholder HTML shown where the declaration sits.
        """
        collected = list(bag.get(TAG_CONTENT_KEY) or [])
        for specifier in split_declaration(text):
            if specifier not in collected:
                collected.append(specifier)
        bag[TAG_CONTENT_KEY] = collected
        return (
            '<p id="accesscontrol" style="text-align:center; color:#BA0000; font-size:8pt;">'
            f"{html.escape(self.config.placeholder_text)}</p>"
        )

    def check_rendered(self, user: PageUser, bag: MutableMapping[str, Any], action: str) -> AccessDecision:
        """Evaluate the declarations a render pass just collected."""
        return self.evaluator.evaluate(user, bag.get(TAG_CONTENT_KEY), action)

    # ── Permission checks ────────────────────────────────────────

    def user_can(
        self,
        page: PageRef,
        user: PageUser,
        action: str,
        *,
        search_request: bool = False,
    ) -> PermissionResult:
        """Decide ``action`` on ``page`` for ``user`` from stored restrictions.

        During a search request ``read`` is checked as ``search``. With
        ``allow_search_snippet_for_all`` a page denied for search still
        shows up in results, unless it opted out with ``(nosearch)``.
        """
        if search_request and action == Actions.READ:
            action = Actions.SEARCH

        specifiers = self.store.get(page.page_id, user)
        decision = self.evaluator.evaluate(user, specifiers, action)

        if (
            decision.denied
            and action == Actions.SEARCH
            and self.config.allow_search_snippet_for_all
            and not decision.has_message(Messages.NOSEARCH)
        ):
            self._restricted_search_results.add(page.title)
            return PermissionResult(allowed=True, decision=decision)

        if decision.denied:
            return PermissionResult(
                allowed=False,
                message=(Messages.INFO_BOX, page.root_title),
                decision=decision,
            )
        return PermissionResult(allowed=True, decision=decision)

    def disabled_actions(self, page: PageRef, user: PageUser) -> frozenset[str]:
        """Actions to switch off for the current request on ``page``."""
        specifiers = self.store.get(page.page_id, user)
        if self.evaluator.evaluate(user, specifiers, Actions.FULL_ACCESS).allowed:
            return frozenset()
        if self.evaluator.evaluate(user, specifiers, Actions.READ).allowed:
            return Actions.WRITE_CLASS
        return Actions.WRITE_CLASS | {Actions.VIEW}

    # ── Search results ───────────────────────────────────────────

    def is_restricted_search_result(self, title: str) -> bool:
        return title in self._restricted_search_results

    def decorate_search_hit(self, title: str, link_html: str) -> str:
        """Mark a search hit the user may see but not read."""
        if not self.is_restricted_search_result(title):
            return link_html
        return f'<span class="{RESTRICTED_SEARCH_RESULT_CLASS}">{link_html}</span>'

    # ── Page lifecycle ───────────────────────────────────────────

    def on_content_reprocessed(self, page: PageRef, bag: MutableMapping[str, Any]) -> None:
        """Persist the restriction a fresh render of ``page`` produced."""
        self.store.put(page.page_id, bag.get(TAG_CONTENT_KEY))

    def on_page_edited(self, page: PageRef) -> None:
        """Drop cached state that an edit of ``page`` makes stale.

        Covers both roles a page can play: a group page referenced by
        specifiers, and a restricted page.
        """
        dropped = self.resolver.invalidate(page.title)
        self.store.invalidate(page.page_id)
        logger.debug("Page %r edited: %d group classification(s) dropped", page.title, dropped)


__all__ = [
    "AccessControl",
    "PermissionResult",
    "RESTRICTED_SEARCH_RESULT_CLASS",
]
