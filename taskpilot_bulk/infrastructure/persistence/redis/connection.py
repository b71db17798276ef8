"""
Redis client for the job repository.

One ConnectionPool per process, shared by every RedisJobRepository the
process builds. Pool parameters come from WorkerSettings (REDIS_HOST,
REDIS_PORT, REDIS_DB, REDIS_MAX_CONNECTIONS, REDIS_TIMEOUT_SECONDS,
REDIS_RETRY_ATTEMPTS) through bootstrap.create_job_repository.

Startup:
    The first PING is retried with exponential backoff (1s, 2s, 4s, ...),
    so a worker started next to a still-booting Redis waits instead of
    failing its first job.

Examples:
    >>> client = get_redis_client(host="redis", db=2)
    >>> health_check()
    True
    >>> close_connections()
"""

import logging
import threading
import time
from typing import Optional

from redis import ConnectionPool, Redis
from redis.exceptions import ConnectionError, RedisError, TimeoutError

logger = logging.getLogger(__name__)

_redis_pool: Optional[ConnectionPool] = None
_pool_lock = threading.Lock()


def _shared_pool(
    host: str, port: int, db: int, max_connections: int, timeout: float
) -> ConnectionPool:
    """Create the process pool on first use; later arguments are ignored."""
    global _redis_pool

    with _pool_lock:
        if _redis_pool is None:
            _redis_pool = ConnectionPool(
                host=host,
                port=port,
                db=db,
                max_connections=max_connections,
                socket_timeout=timeout,
                socket_connect_timeout=timeout,
                socket_keepalive=True,
                decode_responses=True,
            )
            logger.info(
                f"Redis pool for {host}:{port}/{db} "
                f"(max {max_connections} connections, timeout {timeout}s)"
            )
        return _redis_pool


def _wait_until_reachable(client: Redis, retry_attempts: int) -> None:
    attempts = max(retry_attempts, 1)
    for attempt in range(1, attempts + 1):
        try:
            client.ping()
            return
        except (ConnectionError, TimeoutError) as e:
            if attempt == attempts:
                raise RedisError(
                    f"Redis unreachable after {attempts} attempts: {e}"
                ) from e
            delay = 2 ** (attempt - 1)
            logger.warning(f"Redis PING failed ({attempt}/{attempts}): {e}; retry in {delay}s")
            time.sleep(delay)


def get_redis_client(
    host: str = "localhost",
    port: int = 6379,
    db: int = 0,
    max_connections: int = 10,
    timeout: float = 5.0,
    retry_attempts: int = 3,
) -> Redis:
    """
    Redis client on the shared pool, verified with PING.

    Raises:
        RedisError: If Redis does not answer within retry_attempts PINGs
    """
    pool = _shared_pool(host, port, db, max_connections, timeout)
    client = Redis(connection_pool=pool)
    _wait_until_reachable(client, retry_attempts)
    return client


def health_check() -> bool:
    """
    PING over the existing pool. False when no pool exists or Redis fails.
    """
    pool = _redis_pool
    if pool is None:
        return False
    try:
        return bool(Redis(connection_pool=pool).ping())
    except RedisError as e:
        logger.warning(f"Redis health check failed: {e}")
        return False


def close_connections() -> None:
    """Disconnect and forget the pool (worker shutdown). Idempotent."""
    global _redis_pool

    with _pool_lock:
        pool, _redis_pool = _redis_pool, None
    if pool is None:
        return
    try:
        pool.disconnect()
        logger.info("Redis pool closed")
    except RedisError as e:
        logger.error(f"Closing Redis pool failed: {e}")
