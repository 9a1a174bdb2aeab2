"""Contracts for the host collaborators the engine depends on."""

from abc import ABC, abstractmethod
from typing import Optional

from .models import PageUser


class PageSource(ABC):
    """Title and content lookup for group pages."""

    @abstractmethod
    def normalize_title(self, text: str) -> str:
        """Return the canonical title for ``text``.

        Raises:
            MalformedTitleError: if ``text`` is not a valid title.
        """
        raise NotImplementedError

    @abstractmethod
    def get_text(self, title: str) -> Optional[str]:
        """Return the raw page text, or None when the page does not exist."""
        raise NotImplementedError


class RenderPipeline(ABC):
    """Full re-render of a page, used when no restriction record exists yet."""

    @abstractmethod
    def render_declarations(self, page_id: int, user: Optional[PageUser] = None) -> Optional[list[str]]:
        """Render ``page_id`` and return the declaration bag it produced."""
        raise NotImplementedError


__all__ = ["PageSource", "RenderPipeline"]
