"""
Tests for the shared Redis client.

Covers:
- One pool per process, built from the given parameters
- Startup PING retries with exponential backoff
- Health check over the existing pool
- Pool cleanup
"""

from unittest.mock import MagicMock, patch

import pytest
from redis.exceptions import ConnectionError, RedisError, TimeoutError

import taskpilot_bulk.infrastructure.persistence.redis.connection as conn_module
from taskpilot_bulk.infrastructure.persistence.redis.connection import (
    close_connections,
    get_redis_client,
    health_check,
)

MODULE = "taskpilot_bulk.infrastructure.persistence.redis.connection"


@pytest.fixture(autouse=True)
def reset_singleton():
    conn_module._redis_pool = None
    yield
    conn_module._redis_pool = None


@pytest.fixture
def redis_class():
    with patch(f"{MODULE}.ConnectionPool") as pool_class, patch(f"{MODULE}.Redis") as redis_class:
        client = MagicMock()
        client.ping.return_value = True
        redis_class.return_value = client
        redis_class.pool_class = pool_class
        yield redis_class


# ============================================================================
# POOL TESTS
# ============================================================================


def test_pool_created_once(redis_class):
    get_redis_client()
    get_redis_client(host="other-host")

    assert redis_class.pool_class.call_count == 1
    assert redis_class.pool_class.call_args[1]["host"] == "localhost"


def test_pool_parameters(redis_class):
    get_redis_client(host="redis.example.com", port=6380, db=2, max_connections=20, timeout=2.5)

    kwargs = redis_class.pool_class.call_args[1]
    assert kwargs["host"] == "redis.example.com"
    assert kwargs["port"] == 6380
    assert kwargs["db"] == 2
    assert kwargs["max_connections"] == 20
    assert kwargs["socket_timeout"] == 2.5
    assert kwargs["decode_responses"] is True


# ============================================================================
# RETRY TESTS
# ============================================================================


def test_retries_until_ping_succeeds(redis_class):
    redis_class.return_value.ping.side_effect = [ConnectionError("refused"), TimeoutError("slow"), True]

    with patch(f"{MODULE}.time.sleep") as sleep:
        client = get_redis_client(retry_attempts=3)

    assert client is redis_class.return_value
    assert [c.args[0] for c in sleep.call_args_list] == [1, 2]


def test_raises_after_all_attempts(redis_class):
    redis_class.return_value.ping.side_effect = ConnectionError("refused")

    with patch(f"{MODULE}.time.sleep") as sleep:
        with pytest.raises(RedisError, match="after 2 attempts"):
            get_redis_client(retry_attempts=2)

    assert sleep.call_count == 1


# ============================================================================
# HEALTH CHECK / CLEANUP TESTS
# ============================================================================


def test_health_check_without_pool_is_false(redis_class):
    assert health_check() is False


def test_health_check_true(redis_class):
    get_redis_client()

    assert health_check() is True


def test_health_check_false_when_ping_fails(redis_class):
    get_redis_client()
    redis_class.return_value.ping.side_effect = ConnectionError("refused")

    assert health_check() is False


def test_close_connections_disconnects_and_resets(redis_class):
    get_redis_client()
    pool = conn_module._redis_pool

    close_connections()
    close_connections()

    pool.disconnect.assert_called_once()
    assert conn_module._redis_pool is None
