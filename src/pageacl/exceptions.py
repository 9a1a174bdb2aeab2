"""Exception hierarchy for page access control.

All errors inherit from AccessControlError and carry a stable ``code``.
Group-resolution codes double as the message keys hosts show to users.

Usage:
    from pageacl.exceptions import (
        AccessControlError,
        GroupResolutionError,
        StoreReadError,
    )
"""

from __future__ import annotations

from typing import Any

__all__ = [
    "AccessControlError",
    "ConfigurationError",
    "GroupResolutionError",
    "MalformedTitleError",
    "GroupPageNotFoundError",
    "StoreError",
    "StoreReadError",
    "StoreWriteError",
]


# ---- Exception Hierarchy ----------------------------------------------------


class AccessControlError(Exception):
    """Base exception for the access-control engine.

    Attributes:
        code: Stable error code string (e.g. "accesscontrol-group-does-not-exist").
        message: Human-readable error description.
        details: Additional context as keyword arguments.
    """

    code: str = "accesscontrol-internal-error"
    message: str = "An internal access-control error occurred"

    def __init__(self, message: str | None = None, code: str | None = None, **kwargs: Any) -> None:
        self.message = message or self.message
        self.code = code or self.code
        self.details = kwargs
        super().__init__(self.message)


class ConfigurationError(AccessControlError):
    """Invalid or missing configuration."""

    code: str = "accesscontrol-configuration-error"


# ---- Group resolution -------------------------------------------------------


class GroupResolutionError(AccessControlError):
    """A specifier's group page could not be turned into a user list.

    Non-fatal: the evaluator records it on the decision and treats the
    specifier as granting nobody.
    """

    code: str = "accesscontrol-group-error"

    def __init__(self, title: str, message: str | None = None, **kwargs: Any) -> None:
        self.title = title
        super().__init__(message or f"{self.message}: {title!r}", title=title, **kwargs)


class MalformedTitleError(GroupResolutionError):
    """The referenced group title cannot be parsed."""

    code: str = "accesscontrol-wrong-group-title"
    message: str = "Invalid group page title"


class GroupPageNotFoundError(GroupResolutionError):
    """The referenced group page does not exist."""

    code: str = "accesscontrol-group-does-not-exist"
    message: str = "Group page does not exist"


# ---- Persistence ------------------------------------------------------------


class StoreError(AccessControlError):
    """Backing-store failure."""

    code: str = "accesscontrol-store-error"


class StoreReadError(StoreError):
    """Reading a restriction record failed; callers recompute instead."""

    code: str = "accesscontrol-store-read-error"


class StoreWriteError(StoreError):
    """Writing a restriction record failed; the change waits for the next reprocessing."""

    code: str = "accesscontrol-store-write-error"
