"""Core data models for page access control.

These are Pydantic models exchanged with the host wiki.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

ANONYMOUS_NAME = "*"


class PageUser(BaseModel):
    """The user an access check runs for.

    ``name=None`` is an anonymous visitor. ``groups`` is only consulted for
    the privileged-group bypass.
    """

    name: Optional[str] = None
    groups: tuple[str, ...] = ()

    model_config = {"frozen": True}

    @classmethod
    def anonymous(cls) -> "PageUser":
        return cls()

    @property
    def is_anonymous(self) -> bool:
        return not self.name

    @property
    def match_name(self) -> str:
        """Name used against group lists; anonymous users match as ``*``."""
        return ANONYMOUS_NAME if self.is_anonymous else self.name

    def in_group(self, group: str) -> bool:
        return group in self.groups


class PageRef(BaseModel):
    """A page known to the host.

    ``page_id`` is 0 for pages that do not exist yet.
    """

    page_id: int = 0
    title: str

    model_config = {"frozen": True}

    @property
    def root_title(self) -> str:
        """Title without any subpage part."""
        return self.title.split("/", 1)[0]


class RestrictionRecord(BaseModel):
    """One persisted row: page id plus JSON-encoded specifiers (None = unrestricted)."""

    page_id: int = Field(gt=0)
    tag_content: Optional[str] = None


__all__ = [
    "ANONYMOUS_NAME",
    "PageRef",
    "PageUser",
    "RestrictionRecord",
]
