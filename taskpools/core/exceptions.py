"""Custom exception hierarchy for taskpools.

All taskpools-specific exceptions inherit from TaskPoolsError, enabling
users to catch all of them with a single except clause.
"""

from __future__ import annotations


class TaskPoolsError(Exception):
    """Base exception for all taskpools errors."""


class ConfigurationError(TaskPoolsError, ValueError):
    """Raised for invalid pool policies or configuration files."""


class PoolNotInitializedError(TaskPoolsError):
    """Raised when a global pool is read before it was created."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"{name} has not been initialized. Call create_default_pools() first.")


class PoolShutdownError(TaskPoolsError, RuntimeError):
    """Raised when work is submitted to a pool that was shut down."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Task pool '{name}' already shut down")
