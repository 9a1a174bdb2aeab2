from .cache import LocalCache
from .config import AccessControlConfig, LogLevel, load_config_from_env
from .exceptions import (
    AccessControlError,
    ConfigurationError,
    GroupPageNotFoundError,
    GroupResolutionError,
    MalformedTitleError,
    StoreError,
    StoreReadError,
    StoreWriteError,
)
from .hooks import AccessControl, PermissionResult
from .interfaces import PageSource, RenderPipeline
from .logging import (
    AccessLogFormatter,
    AccessLoggerAdapter,
    get_access_logger,
    safe_preview,
    setup_logging,
)
from .models import PageRef, PageUser, RestrictionRecord
from .permissions import (
    TAG_CONTENT_KEY,
    AccessDecision,
    Actions,
    GroupClassification,
    GroupResolver,
    Messages,
    Modifier,
    PermissionEvaluator,
    Specifier,
    Tier,
    parse_group_page,
    parse_specifier,
    split_declaration,
)
from .store import (
    InMemoryRestrictionBackend,
    RedisRestrictionBackend,
    RestrictionBackend,
    RestrictionStore,
    build_backend,
)

__version__ = "0.1.0"

__all__ = [
    'AccessControl',
    'PermissionResult',
    'AccessControlConfig',
    'LogLevel',
    'load_config_from_env',
    'LocalCache',
    'AccessControlError',
    'ConfigurationError',
    'GroupResolutionError',
    'MalformedTitleError',
    'GroupPageNotFoundError',
    'StoreError',
    'StoreReadError',
    'StoreWriteError',
    'PageSource',
    'RenderPipeline',
    'AccessLogFormatter',
    'AccessLoggerAdapter',
    'get_access_logger',
    'safe_preview',
    'setup_logging',
    'PageRef',
    'PageUser',
    'RestrictionRecord',
    'TAG_CONTENT_KEY',
    'AccessDecision',
    'Actions',
    'GroupClassification',
    'GroupResolver',
    'Messages',
    'Modifier',
    'PermissionEvaluator',
    'Specifier',
    'Tier',
    'parse_group_page',
    'parse_specifier',
    'split_declaration',
    'InMemoryRestrictionBackend',
    'RedisRestrictionBackend',
    'RestrictionBackend',
    'RestrictionStore',
    'build_backend',
    '__version__',
]
