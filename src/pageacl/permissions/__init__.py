"""Permission resolution for access-controlled pages.

Defines:
- Tier / Modifier: access levels and the scope tokens that cap them
- SpecifierParser functions: parse_specifier(), parse_group_page(), split_declaration()
- GroupResolver: group page → write/read/search user sets, cached per specifier
- PermissionEvaluator: specifiers + user + action → AccessDecision
"""

from .access import AccessDecision, PermissionEvaluator, normalize_specifiers
from .constants import (
    NOSEARCH_FLAG,
    TAG_CONTENT_KEY,
    Actions,
    Messages,
    Modifier,
    Tier,
)
from .groups import GroupClassification, GroupResolver, classify
from .specifier import (
    Specifier,
    parse_group_page,
    parse_specifier,
    split_declaration,
    split_modifier,
)

__all__ = [
    "NOSEARCH_FLAG",
    "TAG_CONTENT_KEY",
    "AccessDecision",
    "Actions",
    "GroupClassification",
    "GroupResolver",
    "Messages",
    "Modifier",
    "PermissionEvaluator",
    "Specifier",
    "Tier",
    "classify",
    "normalize_specifiers",
    "parse_group_page",
    "parse_specifier",
    "split_declaration",
    "split_modifier",
]
