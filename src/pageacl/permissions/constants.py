"""Tiers, scope modifiers, actions and message keys.

Provides:
- ``Tier``: access level granted to a user (none < search < read < write).
- ``Modifier``: scope annotation on a specifier or a group-page entry.
- ``Actions``: action names the evaluator distinguishes.
- ``Messages``: warning/error/denial message keys shown by the host.
"""

from __future__ import annotations

from enum import Enum, IntEnum


class Tier(IntEnum):
    """Access tier. Higher tiers imply every capability of lower ones."""

    NONE = 0
    SEARCH = 1  # Page may appear in search results with a snippet
    READ = 2  # Page may be viewed
    WRITE = 3  # Full access: edit, history, delete, ...


class Modifier(str, Enum):
    """Scope annotation, written as a token around a specifier or group entry."""

    NONE = ""
    READ_ONLY = "(ro)"
    SEARCH_ONLY = "(search)"

    @property
    def tier(self) -> Tier:
        """Highest tier an entry carrying this modifier can grant."""
        return _MODIFIER_TIERS[self]


_MODIFIER_TIERS = {
    Modifier.NONE: Tier.WRITE,
    Modifier.READ_ONLY: Tier.READ,
    Modifier.SEARCH_ONLY: Tier.SEARCH,
}

# Checked in this order: "(search)" wins when both tokens are present.
MODIFIER_TOKENS: tuple[Modifier, ...] = (Modifier.SEARCH_ONLY, Modifier.READ_ONLY)

NOSEARCH_FLAG = "(nosearch)"
GROUP_ENTRY_MARKER = "*"
DECLARATION_SEPARATOR = ","

# Key under which a render pass collects declaration specifiers.
TAG_CONTENT_KEY = "AccessControlTagContentArray"


class Actions:
    """Action names understood by the evaluator.

    ``view``/``read`` need read tier, ``search`` needs search tier; every
    other action is write-class and needs full access.
    """

    VIEW = "view"
    READ = "read"
    SEARCH = "search"
    EDIT = "edit"
    FULL_ACCESS = "fullAccess"

    READ_CLASS = frozenset({VIEW, READ})

    # Disabled for the whole request when the user lacks full access.
    WRITE_CLASS = frozenset(
        {
            "edit",
            "history",
            "submit",
            "info",
            "raw",
            "delete",
            "revert",
            "revisiondelete",
            "rollback",
            "markpatrolled",
        }
    )


class Messages:
    """Message keys surfaced on decisions and denials."""

    NOSEARCH = "accesscontrol-nosearch"
    INFO_BOX = "accesscontrol-info-box"
    WRONG_GROUP_TITLE = "accesscontrol-wrong-group-title"
    GROUP_DOES_NOT_EXIST = "accesscontrol-group-does-not-exist"


__all__ = [
    "Actions",
    "DECLARATION_SEPARATOR",
    "GROUP_ENTRY_MARKER",
    "MODIFIER_TOKENS",
    "Messages",
    "Modifier",
    "NOSEARCH_FLAG",
    "TAG_CONTENT_KEY",
    "Tier",
]
