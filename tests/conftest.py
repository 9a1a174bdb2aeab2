"""Shared fixtures: in-memory stand-ins for the host wiki."""

from __future__ import annotations

from typing import Optional

import pytest

from pageacl import (
    AccessControlConfig,
    GroupResolver,
    InMemoryRestrictionBackend,
    MalformedTitleError,
    PageSource,
    PageUser,
    PermissionEvaluator,
    RenderPipeline,
)

_ILLEGAL_TITLE_CHARS = set("[]{}|#<>")


class DictPageSource(PageSource):
    """Pages held in a dict; titles normalize like a wiki's (first letter upper, _ → space)."""

    def __init__(self, pages: Optional[dict[str, str]] = None) -> None:
        self.pages: dict[str, str] = dict(pages or {})
        self.reads: list[str] = []

    def normalize_title(self, text: str) -> str:
        title = text.replace("_", " ").strip()
        if not title or _ILLEGAL_TITLE_CHARS & set(title):
            raise MalformedTitleError(text)
        return title[0].upper() + title[1:]

    def get_text(self, title: str) -> Optional[str]:
        self.reads.append(title)
        return self.pages.get(title)


class RecordingRenderer(RenderPipeline):
    """Returns preset declaration bags and records each render."""

    def __init__(self, bags: Optional[dict[int, Optional[list[str]]]] = None) -> None:
        self.bags = dict(bags or {})
        self.calls: list[tuple[int, Optional[PageUser]]] = []

    def render_declarations(self, page_id: int, user: Optional[PageUser] = None) -> Optional[list[str]]:
        self.calls.append((page_id, user))
        return self.bags.get(page_id)


@pytest.fixture
def pages() -> DictPageSource:
    return DictPageSource(
        {
            "Staff": "Members:\n* Alice\n* Bob (ro)\n* Carol (search)\n",
            "Readers": "* Alice (ro)\n* Dave (ro)\n",
            "Public": "* * (search)\n",
            "Everyone": "* *\n",
            "Writers": "* Alice\n* Dave\n",
        }
    )


@pytest.fixture
def renderer() -> RecordingRenderer:
    return RecordingRenderer()


@pytest.fixture
def backend() -> InMemoryRestrictionBackend:
    return InMemoryRestrictionBackend()


@pytest.fixture
def config() -> AccessControlConfig:
    return AccessControlConfig()


@pytest.fixture
def resolver(pages: DictPageSource) -> GroupResolver:
    return GroupResolver(pages)


@pytest.fixture
def evaluator(resolver: GroupResolver, config: AccessControlConfig) -> PermissionEvaluator:
    return PermissionEvaluator(resolver, config)


@pytest.fixture
def anonymous() -> PageUser:
    return PageUser.anonymous()


@pytest.fixture
def alice() -> PageUser:
    return PageUser(name="Alice")


@pytest.fixture
def admin() -> PageUser:
    return PageUser(name="Root", groups=("user", "sysop"))
