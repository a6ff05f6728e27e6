"""
Unit tests for the Redis profile cache.
"""

import json
from unittest.mock import MagicMock

import pytest
import redis

from domains.profile_hub.core import ProfileCache, profile_cache_key


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def cache(client):
    return ProfileCache(redis_url="redis://unused", ttl=60, client=client)


class TestProfileCache:
    """Test cache-aside primitives."""

    def test_key_format(self):
        assert profile_cache_key("r1") == "profile:r1"

    def test_set_uses_ttl(self, cache, client):
        assert cache.set("r1", {"name": "A"}) is True

        client.set.assert_called_once_with("profile:r1", json.dumps({"name": "A"}), ex=60)

    def test_zero_ttl_disables_writes(self, client):
        cache = ProfileCache(redis_url="redis://unused", ttl=0, client=client)

        assert cache.ttl == 0
        assert cache.set("r1", {"name": "A"}) is False
        client.set.assert_not_called()

    def test_get_hit(self, cache, client):
        client.get.return_value = '{"name": "A"}'

        assert cache.get("r1") == {"name": "A"}
        client.get.assert_called_once_with("profile:r1")

    def test_get_miss(self, cache, client):
        client.get.return_value = None

        assert cache.get("r1") is None

    def test_invalidate(self, cache, client):
        assert cache.invalidate("r1") is True

        client.delete.assert_called_once_with("profile:r1")

    def test_invalidate_many_dedupes(self, cache, client):
        assert cache.invalidate_many(["r1", "r2", "r1", ""]) == 2
        assert client.delete.call_count == 2


class TestCacheFailures:
    """Redis failures never escape the cache adapter."""

    def test_read_error_is_miss(self, cache, client):
        client.get.side_effect = redis.ConnectionError("down")

        assert cache.get("r1") is None

    def test_corrupt_value_is_miss(self, cache, client):
        client.get.return_value = "{not json"

        assert cache.get("r1") is None

    def test_write_error(self, cache, client):
        client.set.side_effect = redis.TimeoutError("slow")

        assert cache.set("r1", {"name": "A"}) is False

    def test_delete_error(self, cache, client):
        client.delete.side_effect = redis.ConnectionError("down")

        assert cache.invalidate("r1") is False
        assert cache.invalidate_many(["r1", "r2"]) == 0

    def test_health_check(self, cache, client):
        client.ping.side_effect = redis.ConnectionError("down")

        assert cache.health_check() is False
