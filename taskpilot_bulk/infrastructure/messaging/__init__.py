"""
Messaging Infrastructure Module

Exports:
    - CeleryJobPublisher: Publishes job descriptors to the durable queues
"""

from .celery_publisher import CeleryJobPublisher

__all__ = ["CeleryJobPublisher"]
