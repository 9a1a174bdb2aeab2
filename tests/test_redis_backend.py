"""Tests for the Redis restriction backend and build_backend."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
import redis

from pageacl import (
    AccessControlConfig,
    InMemoryRestrictionBackend,
    RedisRestrictionBackend,
    RestrictionRecord,
    RestrictionStore,
    StoreReadError,
    StoreWriteError,
    build_backend,
)


class FakeHashClient:
    """Just enough of a redis client: one namespace of hashes."""

    def __init__(self) -> None:
        self.hashes: dict[str, dict[str, str]] = {}

    def hget(self, key: str, field: str):
        return self.hashes.get(key, {}).get(field)

    def hset(self, key: str, field: str, value: str) -> int:
        self.hashes.setdefault(key, {})[field] = value
        return 1

    def close(self) -> None:
        pass


class TestRedisRestrictionBackend:
    """Tests for RedisRestrictionBackend."""

    def test_fetch_missing_row(self) -> None:
        backend = RedisRestrictionBackend(FakeHashClient())
        assert backend.fetch(42) is None

    def test_upsert_and_fetch(self) -> None:
        client = FakeHashClient()
        backend = RedisRestrictionBackend(client, key="acl")
        backend.upsert(RestrictionRecord(page_id=42, tag_content='["Staff"]'))
        assert client.hashes == {"acl": {"42": '["Staff"]'}}
        assert backend.fetch(42) == RestrictionRecord(page_id=42, tag_content='["Staff"]')

    def test_null_content_round_trip(self) -> None:
        """A null column is stored as an empty string and read back as None."""
        client = FakeHashClient()
        backend = RedisRestrictionBackend(client, key="acl")
        backend.upsert(RestrictionRecord(page_id=42, tag_content=None))
        assert client.hashes["acl"]["42"] == ""
        record = backend.fetch(42)
        assert record is not None
        assert record.tag_content is None

    def test_reads_use_replica_and_writes_use_primary(self) -> None:
        primary = MagicMock()
        replica = MagicMock()
        replica.hget.return_value = '["Staff"]'
        backend = RedisRestrictionBackend(primary, replica, key="acl")

        backend.fetch(1)
        backend.upsert(RestrictionRecord(page_id=1, tag_content="[]"))

        replica.hget.assert_called_once_with("acl", "1")
        primary.hget.assert_not_called()
        primary.hset.assert_called_once_with("acl", "1", "[]")
        replica.hset.assert_not_called()

    def test_replica_defaults_to_primary(self) -> None:
        primary = MagicMock()
        primary.hget.return_value = None
        RedisRestrictionBackend(primary).fetch(1)
        primary.hget.assert_called_once()

    def test_read_error_is_wrapped(self) -> None:
        client = MagicMock()
        client.hget.side_effect = redis.ConnectionError("refused")
        with pytest.raises(StoreReadError) as exc_info:
            RedisRestrictionBackend(client).fetch(3)
        assert exc_info.value.details == {"page_id": 3}
        assert isinstance(exc_info.value.__cause__, redis.ConnectionError)

    def test_write_error_is_wrapped(self) -> None:
        client = MagicMock()
        client.hset.side_effect = redis.TimeoutError("slow")
        with pytest.raises(StoreWriteError):
            RedisRestrictionBackend(client).upsert(RestrictionRecord(page_id=3))

    def test_close_closes_both_clients(self) -> None:
        primary, replica = MagicMock(), MagicMock()
        RedisRestrictionBackend(primary, replica).close()
        primary.close.assert_called_once()
        replica.close.assert_called_once()

    def test_from_url(self) -> None:
        with patch("pageacl.store.backends.redis.from_url") as from_url:
            backend = RedisRestrictionBackend.from_url(
                "redis://primary:6379/0",
                replica_url="redis://replica:6379/0",
                key="acl",
            )
        assert from_url.call_count == 2
        from_url.assert_any_call("redis://primary:6379/0", decode_responses=True)
        from_url.assert_any_call("redis://replica:6379/0", decode_responses=True)
        assert backend.key == "acl"

    def test_store_over_redis_survives_restart(self, renderer) -> None:
        client = FakeHashClient()
        RestrictionStore(RedisRestrictionBackend(client), renderer).put(5, ["GroupA"])
        RestrictionStore(RedisRestrictionBackend(client), renderer).put(6, None)

        fresh = RestrictionStore(RedisRestrictionBackend(client), renderer)
        assert fresh.get(5) == ["GroupA"]
        assert fresh.get(6) is None
        assert renderer.calls == []

    def test_store_survives_redis_outage(self, renderer) -> None:
        client = MagicMock()
        client.hget.side_effect = redis.ConnectionError("down")
        client.hset.side_effect = redis.ConnectionError("down")
        renderer.bags[5] = ["Staff"]
        store = RestrictionStore(RedisRestrictionBackend(client), renderer)
        assert store.get(5) == ["Staff"]
        store.put(5, ["Other"])
        assert store.get(5) == ["Other"]


class TestBuildBackend:
    """Tests for build_backend."""

    def test_without_redis_url(self) -> None:
        backend = build_backend(AccessControlConfig())
        assert isinstance(backend, InMemoryRestrictionBackend)

    def test_with_redis_url(self) -> None:
        config = AccessControlConfig(
            redis_url="redis://primary:6379/0",
            redis_replica_url="redis://replica:6379/1",
            redis_key="wiki:acl",
        )
        with patch.object(RedisRestrictionBackend, "from_url") as from_url:
            build_backend(config)
        from_url.assert_called_once_with(
            "redis://primary:6379/0",
            replica_url="redis://replica:6379/1",
            key="wiki:acl",
        )
