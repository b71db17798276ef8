"""
Shared Utilities

Responsibility:
    Cross-cutting concerns used across all layers: runtime settings and
    generic helpers that don't belong to any specific layer.

Contains:
    - config: WorkerSettings loaded from the environment
    - utils: timeouts, filenames, process memory

Does NOT contain:
    - Business logic
    - Infrastructure implementations
"""
