from .job_repository import InMemoryJobRepository

__all__ = ["InMemoryJobRepository"]
