"""Configuration contract for the page access-control engine.

This module provides the Pydantic-validated configuration model shared by
the evaluator, the restriction store and the host integration layer.

All components MUST receive an ``AccessControlConfig`` instance. Direct
os.environ/os.getenv usage is FORBIDDEN outside ``load_config_from_env()``.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import ConfigurationError

_TRUTHY = ("true", "1", "yes", "on")

# Field name -> environment variable read by load_config_from_env().
_ENV_VARIABLES = {
    "admin_can_read_all": "ACCESSCONTROL_ADMIN_CAN_READ_ALL",
    "allow_search_snippet_for_all": "ACCESSCONTROL_ALLOW_SEARCH_SNIPPET_FOR_ALL",
    "privileged_group": "ACCESSCONTROL_PRIVILEGED_GROUP",
    "placeholder_text": "ACCESSCONTROL_PLACEHOLDER_TEXT",
    "redis_key": "ACCESSCONTROL_REDIS_KEY",
    "group_cache_ttl_seconds": "ACCESSCONTROL_GROUP_CACHE_TTL",
    "restriction_cache_ttl_seconds": "ACCESSCONTROL_RESTRICTION_CACHE_TTL",
    "log_level": "LOG_LEVEL",
    "log_json": "LOG_JSON",
    "redis_url": "REDIS_URL",
    "redis_replica_url": "REDIS_REPLICA_URL",
}


class LogLevel(str, Enum):
    """Standard log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class AccessControlConfig(BaseModel):
    """Settings for permission evaluation and restriction persistence.

    Policy switches:
        admin_can_read_all:           members of ``privileged_group`` bypass every restriction
        allow_search_snippet_for_all: restricted pages still show up in search results

    Storage:
        redis_url, redis_replica_url: primary and read replica for restriction records.
        Without ``redis_url`` records live in process memory only.
    """

    # Policy
    admin_can_read_all: bool = Field(
        default=True,
        description="Members of the privileged group can read and edit every page",
    )
    allow_search_snippet_for_all: bool = Field(
        default=False,
        description="Show restricted pages in search results unless they opt out with (nosearch)",
    )
    privileged_group: str = Field(
        default="sysop",
        description="User group that receives the admin bypass",
    )
    placeholder_text: str = Field(
        default="This page is access controlled.",
        description="Text rendered in place of an access declaration",
    )

    # Logging
    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level",
    )
    log_json: bool = Field(
        default=False,
        description="Use JSON log format (default: plain text)",
    )

    # Persistence
    redis_url: Optional[str] = Field(
        default=None,
        description="Primary Redis URL for restriction writes (e.g., redis://localhost:6379/0)",
    )
    redis_replica_url: Optional[str] = Field(
        default=None,
        description="Read replica URL for restriction lookups; defaults to the primary",
    )
    redis_key: str = Field(
        default="pageacl:access_control",
        description="Hash holding one field per page id",
    )

    # Local caches
    group_cache_ttl_seconds: Optional[float] = Field(
        default=None,
        description="Lifetime of cached group classifications; None keeps them for the owner's lifetime",
    )
    restriction_cache_ttl_seconds: Optional[float] = Field(
        default=None,
        description="Lifetime of cached page restrictions; None keeps them for the owner's lifetime",
    )

    @field_validator("redis_url", "redis_replica_url")
    @classmethod
    def validate_redis_url(cls, v: Optional[str]) -> Optional[str]:
        """Validate Redis URL format."""
        if v is None:
            return v
        if not v.startswith(("redis://", "rediss://", "unix://")):
            raise ValueError("Redis URL must start with redis://, rediss://, or unix://")
        return v

    @field_validator("group_cache_ttl_seconds", "restriction_cache_ttl_seconds")
    @classmethod
    def validate_ttl(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v <= 0:
            raise ValueError("Cache TTL must be positive")
        return v

    @field_validator("privileged_group")
    @classmethod
    def validate_privileged_group(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("privileged_group must not be empty")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Convert string to LogLevel enum."""
        if isinstance(v, LogLevel):
            return v
        if isinstance(v, str):
            try:
                return LogLevel[v.upper()]
            except KeyError:
                raise ValueError(f"Invalid log level: {v}. Must be one of {[e.value for e in LogLevel]}")
        raise ValueError(f"Log level must be string or LogLevel enum, got {type(v)}")

    model_config = {
        "use_enum_values": True,
        "extra": "forbid",
    }


def load_config_from_env() -> AccessControlConfig:
    """Load access-control configuration from environment variables.

    This is the ONLY place where os.getenv is allowed.

    Environment variables:
    - ACCESSCONTROL_ADMIN_CAN_READ_ALL: Admin bypass (true/false, default: true)
    - ACCESSCONTROL_ALLOW_SEARCH_SNIPPET_FOR_ALL: Search exception (default: false)
    - ACCESSCONTROL_PRIVILEGED_GROUP: Bypass group (default: sysop)
    - ACCESSCONTROL_PLACEHOLDER_TEXT: Text shown where a declaration sits
    - ACCESSCONTROL_REDIS_KEY: Hash name for restriction records
    - ACCESSCONTROL_GROUP_CACHE_TTL: Seconds to keep group classifications
    - ACCESSCONTROL_RESTRICTION_CACHE_TTL: Seconds to keep page restrictions
    - LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - LOG_JSON: Use JSON log format (true/false, default: false)
    - REDIS_URL: Primary Redis connection URL
    - REDIS_REPLICA_URL: Read replica Redis connection URL

    Returns:
        AccessControlConfig instance with values from environment or defaults.

    Raises:
        ConfigurationError: a variable holds a value the config rejects.
    """
    import os

    def flag(name: str, default: str) -> bool:
        return os.getenv(name, default).lower() in _TRUTHY

    def ttl(name: str) -> Optional[float]:
        raw = os.getenv(name)
        if not raw:
            return None
        try:
            return float(raw)
        except ValueError as e:
            raise ConfigurationError(
                f"{name} must be a number of seconds, got {raw!r}", variable=name
            ) from e

    defaults = AccessControlConfig()
    try:
        return AccessControlConfig(
            admin_can_read_all=flag("ACCESSCONTROL_ADMIN_CAN_READ_ALL", "true"),
            allow_search_snippet_for_all=flag("ACCESSCONTROL_ALLOW_SEARCH_SNIPPET_FOR_ALL", "false"),
            privileged_group=os.getenv("ACCESSCONTROL_PRIVILEGED_GROUP", defaults.privileged_group),
            placeholder_text=os.getenv("ACCESSCONTROL_PLACEHOLDER_TEXT", defaults.placeholder_text),
            redis_key=os.getenv("ACCESSCONTROL_REDIS_KEY", defaults.redis_key),
            group_cache_ttl_seconds=ttl("ACCESSCONTROL_GROUP_CACHE_TTL"),
            restriction_cache_ttl_seconds=ttl("ACCESSCONTROL_RESTRICTION_CACHE_TTL"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_json=flag("LOG_JSON", "false"),
            redis_url=os.getenv("REDIS_URL"),
            redis_replica_url=os.getenv("REDIS_REPLICA_URL"),
        )
    except ValidationError as e:
        error = e.errors()[0]
        field = str(error["loc"][0]) if error["loc"] else ""
        variable = _ENV_VARIABLES.get(field)
        raise ConfigurationError(
            f"Invalid value for {variable or field}: {error['msg']}", variable=variable
        ) from e


__all__ = [
    "AccessControlConfig",
    "LogLevel",
    "load_config_from_env",
]
