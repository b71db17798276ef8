"""
Redis Infrastructure Module

Redis-based job persistence.

Exports:
    - RedisJobRepository: Job records with owner scoping and monotonic status
    - get_redis_client: Get Redis client with connection pooling
    - health_check: Check Redis health with PING test
    - close_connections: Close all Redis connections
"""

from .connection import close_connections, get_redis_client, health_check
from .job_repository import RedisJobRepository

__all__ = [
    "RedisJobRepository",
    "get_redis_client",
    "health_check",
    "close_connections",
]
