"""Process-wide task pool singletons.

Each GlobalTaskPool subclass is one pool identity holding at most one
TaskPool for the lifetime of the process. The slot is filled once through
``get_or_init``; later calls return the existing pool and ignore their
arguments.

    from taskpools import ComputeTaskPool

    pool = ComputeTaskPool.get()
    future = pool.submit(work, item)
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import ClassVar

from loguru import logger

from taskpools.core.exceptions import PoolNotInitializedError
from taskpools.pool import TaskPool, TaskPoolBuilder
from taskpools.spec.policy import FailurePolicyLike


class GlobalTaskPool:
    """A lazily created, process-wide TaskPool slot.

    Subclasses get their own slot and lock. The slot is never assigned
    directly; it is filled by the first ``get_or_init`` call and emptied
    only by ``shutdown``.
    """

    _instance: ClassVar[TaskPool | None] = None
    _lock: ClassVar[threading.Lock]

    def __init_subclass__(cls, **kwargs: object) -> None:
        super().__init_subclass__(**kwargs)
        cls._instance = None
        cls._lock = threading.Lock()

    def __new__(cls) -> GlobalTaskPool:
        raise TypeError(f"{cls.__name__} is a singleton slot; use {cls.__name__}.get()")

    @classmethod
    def get_or_init(cls, factory: Callable[[], TaskPool]) -> TaskPool:
        """Return the pool, creating it with ``factory`` if absent.

        Concurrent first callers race on the lock; exactly one factory runs.
        """
        if cls is GlobalTaskPool:
            raise TypeError("GlobalTaskPool has no slot; use IoTaskPool, AsyncComputeTaskPool or ComputeTaskPool")
        if (pool := cls._instance) is not None:
            return pool
        with cls._lock:
            if cls._instance is None:
                cls._instance = factory()
            return cls._instance

    @classmethod
    def get(cls) -> TaskPool:
        if (pool := cls._instance) is None:
            raise PoolNotInitializedError(cls.__name__)
        return pool

    @classmethod
    def try_get(cls) -> TaskPool | None:
        return cls._instance

    @classmethod
    def is_initialized(cls) -> bool:
        return cls._instance is not None

    @classmethod
    def shutdown(cls, wait: bool = True) -> None:
        with cls._lock:
            pool, cls._instance = cls._instance, None
        if pool is not None:
            pool.shutdown(wait=wait)


class IoTaskPool(GlobalTaskPool):
    """Pool for IO-bound work: file and network access."""


class AsyncComputeTaskPool(GlobalTaskPool):
    """Pool for compute that may span several frames or steps."""


class ComputeTaskPool(GlobalTaskPool):
    """Pool for compute that must finish before the current step ends."""


class PoolRegistry:
    """Get-or-create access to the global pool slots.

    The allocator talks to the registry rather than to the slots so tests
    can substitute a recording registry.
    """

    def get_or_create(
        self,
        identity: type[GlobalTaskPool],
        thread_count: int,
        name: str,
        failure_policy: FailurePolicyLike,
    ) -> TaskPool:
        def build() -> TaskPool:
            logger.debug("Creating {name} with {n} threads", name=name, n=thread_count)
            return (
                TaskPoolBuilder()
                .num_threads(thread_count)
                .thread_name(name)
                .failure_policy(failure_policy)
                .build()
            )

        return identity.get_or_init(build)

    def shutdown(self, wait: bool = True) -> None:
        """Shut down and clear every global pool."""
        for identity in DEFAULT_POOLS:
            identity.shutdown(wait=wait)


DEFAULT_POOLS: tuple[type[GlobalTaskPool], ...] = (IoTaskPool, AsyncComputeTaskPool, ComputeTaskPool)

default_registry = PoolRegistry()
