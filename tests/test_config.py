"""Tests for AccessControlConfig."""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from pageacl import AccessControlConfig, ConfigurationError, LogLevel, load_config_from_env


class TestAccessControlConfig:
    """Tests for AccessControlConfig model."""

    def test_create_default_config(self) -> None:
        """Test creating a config with defaults."""
        config = AccessControlConfig()
        assert config.admin_can_read_all is True
        assert config.allow_search_snippet_for_all is False
        assert config.privileged_group == "sysop"
        assert config.log_level == LogLevel.INFO
        assert config.redis_url is None
        assert config.redis_key == "pageacl:access_control"
        assert config.group_cache_ttl_seconds is None

    def test_log_level_from_string(self) -> None:
        config = AccessControlConfig(log_level="debug")
        assert config.log_level == LogLevel.DEBUG

    def test_log_level_invalid(self) -> None:
        with pytest.raises(ValueError, match="Invalid log level"):
            AccessControlConfig(log_level="LOUD")

    def test_redis_url_validation(self) -> None:
        """Test valid and invalid Redis URL formats."""
        for url in ("redis://localhost:6379/0", "rediss://localhost:6379/0", "unix:///tmp/redis.sock"):
            assert AccessControlConfig(redis_url=url).redis_url == url
        for url in ("http://localhost:6379", "localhost:6379"):
            with pytest.raises(ValueError, match="Redis URL must start with"):
                AccessControlConfig(redis_replica_url=url)

    @pytest.mark.parametrize("ttl", [0, -5])
    def test_ttl_must_be_positive(self, ttl: float) -> None:
        with pytest.raises(ValueError, match="positive"):
            AccessControlConfig(restriction_cache_ttl_seconds=ttl)

    def test_privileged_group_is_stripped(self) -> None:
        assert AccessControlConfig(privileged_group=" bureaucrat ").privileged_group == "bureaucrat"
        with pytest.raises(ValueError, match="must not be empty"):
            AccessControlConfig(privileged_group="  ")

    def test_extra_fields_forbidden(self) -> None:
        with pytest.raises(ValidationError):
            AccessControlConfig(unknown_switch=True)  # type: ignore[call-arg]


class TestLoadConfigFromEnv:
    """Tests for load_config_from_env function."""

    @patch.dict(os.environ, {}, clear=True)
    def test_load_defaults(self) -> None:
        assert load_config_from_env() == AccessControlConfig()

    @patch.dict(
        os.environ,
        {
            "ACCESSCONTROL_ADMIN_CAN_READ_ALL": "false",
            "ACCESSCONTROL_ALLOW_SEARCH_SNIPPET_FOR_ALL": "yes",
            "ACCESSCONTROL_PRIVILEGED_GROUP": "bureaucrat",
            "ACCESSCONTROL_PLACEHOLDER_TEXT": "Restricted",
            "ACCESSCONTROL_REDIS_KEY": "wiki:acl",
            "ACCESSCONTROL_GROUP_CACHE_TTL": "60",
            "ACCESSCONTROL_RESTRICTION_CACHE_TTL": "2.5",
            "LOG_LEVEL": "DEBUG",
            "LOG_JSON": "1",
            "REDIS_URL": "redis://primary:6379/0",
            "REDIS_REPLICA_URL": "redis://replica:6379/0",
        },
        clear=True,
    )
    def test_load_from_env(self) -> None:
        config = load_config_from_env()
        assert config.admin_can_read_all is False
        assert config.allow_search_snippet_for_all is True
        assert config.privileged_group == "bureaucrat"
        assert config.placeholder_text == "Restricted"
        assert config.redis_key == "wiki:acl"
        assert config.group_cache_ttl_seconds == 60.0
        assert config.restriction_cache_ttl_seconds == 2.5
        assert config.log_level == LogLevel.DEBUG
        assert config.log_json is True
        assert config.redis_url == "redis://primary:6379/0"
        assert config.redis_replica_url == "redis://replica:6379/0"

    def test_flag_variants(self) -> None:
        """Test boolean variables accept various true values."""
        for value in ("true", "1", "yes", "on", "TRUE"):
            with patch.dict(os.environ, {"ACCESSCONTROL_ALLOW_SEARCH_SNIPPET_FOR_ALL": value}, clear=True):
                assert load_config_from_env().allow_search_snippet_for_all is True
        with patch.dict(os.environ, {"ACCESSCONTROL_ALLOW_SEARCH_SNIPPET_FOR_ALL": "off"}, clear=True):
            assert load_config_from_env().allow_search_snippet_for_all is False

    @patch.dict(os.environ, {"REDIS_URL": "localhost:6379"}, clear=True)
    def test_invalid_env_value(self) -> None:
        with pytest.raises(ConfigurationError, match="REDIS_URL") as exc_info:
            load_config_from_env()
        assert exc_info.value.details == {"variable": "REDIS_URL"}
        assert isinstance(exc_info.value.__cause__, ValidationError)

    @pytest.mark.parametrize("variable", ["ACCESSCONTROL_GROUP_CACHE_TTL", "ACCESSCONTROL_RESTRICTION_CACHE_TTL"])
    @pytest.mark.parametrize("value", ["abc", "-5", "0"])
    def test_invalid_ttl(self, variable: str, value: str) -> None:
        """Unparsable and non-positive TTLs are reported against their variable."""
        with patch.dict(os.environ, {variable: value}, clear=True):
            with pytest.raises(ConfigurationError) as exc_info:
                load_config_from_env()
        assert exc_info.value.code == "accesscontrol-configuration-error"
        assert exc_info.value.details == {"variable": variable}
        assert variable in str(exc_info.value)
