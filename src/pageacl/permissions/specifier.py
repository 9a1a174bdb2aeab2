"""Parsing of access declarations and group pages.

A declaration such as ``<accesscontrol>Staff, (ro)Readers</accesscontrol>``
yields raw specifier strings. Each specifier names a group page and may
carry one scope token, ``(ro)`` or ``(search)``, at its start or end::

    parse_specifier("(ro)Readers")
    # Specifier(raw='(ro)Readers', title='Readers', modifier=Modifier.READ_ONLY)

A group page lists one user per ``*`` line, with an optional tier token::

    * Alice
    * Bob (ro)
    * * (search)

``parse_group_page`` turns that into ``{"Alice": WRITE, "Bob": READ, "*": SEARCH}``.
"""

from __future__ import annotations

from dataclasses import dataclass

from .constants import (
    DECLARATION_SEPARATOR,
    GROUP_ENTRY_MARKER,
    MODIFIER_TOKENS,
    Modifier,
    Tier,
)


@dataclass(frozen=True)
class Specifier:
    """One declaration entry: a group-page title plus its scope modifier.

    ``raw`` is kept verbatim because classifications are cached per raw
    string.
    """

    raw: str
    title: str
    modifier: Modifier = Modifier.NONE

    @property
    def max_tier(self) -> Tier:
        return self.modifier.tier


def split_modifier(text: str) -> tuple[str, Modifier]:
    """Split a leading or trailing scope token off ``text``.

    Only a whole token at either end counts, so a title that merely
    contains ``(ro)`` in the middle is left alone.
    """
    text = text.strip()
    for modifier in MODIFIER_TOKENS:
        token = modifier.value
        if text.startswith(token):
            return text[len(token):].strip(), modifier
        if text.endswith(token):
            return text[: -len(token)].strip(), modifier
    return text, Modifier.NONE


def parse_specifier(raw: str) -> Specifier:
    """Parse one raw specifier string."""
    title, modifier = split_modifier(raw)
    return Specifier(raw=raw, title=title, modifier=modifier)


def split_declaration(text: str) -> list[str]:
    """Split a comma-separated declaration into trimmed, non-empty specifiers."""
    items = (item.strip() for item in text.split(DECLARATION_SEPARATOR))
    return [item for item in items if item]


def parse_group_page(text: str) -> dict[str, Tier]:
    """Map each user listed on a group page to the tier it is granted.

    Lines not starting with ``*`` are ignored, as are entries with no name.
    A user listed twice keeps the last tier.
    """
    users: dict[str, Tier] = {}
    for line in text.splitlines():
        entry = line.strip()
        if not entry.startswith(GROUP_ENTRY_MARKER):
            continue
        name, modifier = split_modifier(entry[len(GROUP_ENTRY_MARKER):])
        if not name:
            continue
        users[name] = modifier.tier
    return users


__all__ = [
    "Specifier",
    "parse_group_page",
    "parse_specifier",
    "split_declaration",
    "split_modifier",
]
