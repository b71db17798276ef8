"""
Persistence Infrastructure Module

Job repository implementations.

Exports:
    From redis:
        - RedisJobRepository

    From in_memory:
        - InMemoryJobRepository
"""

from .in_memory import InMemoryJobRepository
from .redis import RedisJobRepository

__all__ = [
    "InMemoryJobRepository",
    "RedisJobRepository",
]
