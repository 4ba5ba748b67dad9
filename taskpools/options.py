"""Sizing and creating the default task pools.

TaskPoolOptions splits a thread budget (the logical core count, clamped to
``[min_total_threads, max_total_threads]``) across the IO, AsyncCompute and
Compute pools, in that order, then creates each pool once.

Example:
    from taskpools import TaskPoolOptions

    # Defaults: IO and AsyncCompute get 25% each (1..4), Compute the rest
    TaskPoolOptions().create_default_pools()

    # Force 6 threads regardless of hardware
    TaskPoolOptions.with_num_threads(6).create_default_pools()

For full manual control, create a pool yourself (``IoTaskPool.get_or_init``)
before calling ``create_default_pools``; pools that already exist are left
untouched.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field, replace

from loguru import logger

from taskpools.core.exceptions import ConfigurationError
from taskpools.hardware import logical_core_count
from taskpools.registry import (
    AsyncComputeTaskPool,
    ComputeTaskPool,
    GlobalTaskPool,
    IoTaskPool,
    PoolRegistry,
    default_registry,
)
from taskpools.spec.policy import UNBOUNDED, FailurePolicy, PoolPolicies, ThreadAssignmentPolicy


def _default_io() -> PoolPolicies:
    # Use 25% of cores for IO, at least 1, no more than 4
    return PoolPolicies(
        assignment=ThreadAssignmentPolicy(min_threads=1, max_threads=4, percent=0.25),
        failure=FailurePolicy.CATCH_AND_IGNORE,
    )


def _default_async_compute() -> PoolPolicies:
    # Use 25% of cores for async compute, at least 1, no more than 4
    return PoolPolicies(
        assignment=ThreadAssignmentPolicy(min_threads=1, max_threads=4, percent=0.25),
        failure=FailurePolicy.PROPAGATE,
    )


def _default_compute() -> PoolPolicies:
    # 1.0 means "whatever is left over"
    return PoolPolicies(
        assignment=ThreadAssignmentPolicy(min_threads=1, max_threads=UNBOUNDED, percent=1.0),
        failure=FailurePolicy.PROPAGATE,
    )


@dataclass(frozen=True, slots=True)
class PoolSlot:
    """One entry of the allocation order."""

    key: str
    name: str
    identity: type[GlobalTaskPool]
    policies: PoolPolicies


@dataclass(frozen=True, slots=True)
class Allocation:
    """Threads given to one pool and the budget left after it."""

    slot: PoolSlot
    threads: int
    remaining: int


@dataclass(frozen=True, slots=True)
class TaskPoolOptions:
    """Configuration for the default task pools.

    Attributes:
        min_total_threads: If the machine has fewer logical cores, use this many.
        max_total_threads: If the machine has more logical cores, use this many.
        io: Policies for IoTaskPool.
        async_compute: Policies for AsyncComputeTaskPool.
        compute: Policies for ComputeTaskPool. Sized last so that
            ``percent=1.0`` absorbs whatever the other pools left.
    """

    min_total_threads: int = 1
    max_total_threads: int = UNBOUNDED
    io: PoolPolicies = field(default_factory=_default_io)
    async_compute: PoolPolicies = field(default_factory=_default_async_compute)
    compute: PoolPolicies = field(default_factory=_default_compute)

    def __post_init__(self) -> None:
        if self.min_total_threads < 0:
            raise ConfigurationError(
                f"min_total_threads must be >= 0, got {self.min_total_threads}"
            )
        if self.max_total_threads < self.min_total_threads:
            raise ConfigurationError(
                f"max_total_threads ({self.max_total_threads}) must be >= "
                f"min_total_threads ({self.min_total_threads})"
            )

    @classmethod
    def with_num_threads(cls, thread_count: int) -> TaskPoolOptions:
        """Options that force exactly ``thread_count`` total threads."""
        return cls(min_total_threads=thread_count, max_total_threads=thread_count)

    def with_pool(self, key: str, policies: PoolPolicies) -> TaskPoolOptions:
        """Copy of these options with one pool's policies replaced."""
        if key not in POOL_KEYS:
            raise ConfigurationError(f"Unknown pool '{key}'. Valid: {', '.join(POOL_KEYS)}")
        return replace(self, **{key: policies})

    @property
    def pools(self) -> tuple[PoolSlot, ...]:
        """Pools in allocation order. The order is part of the contract."""
        return (
            PoolSlot("io", "IO Task Pool", IoTaskPool, self.io),
            PoolSlot("async_compute", "Async Compute Task Pool", AsyncComputeTaskPool, self.async_compute),
            PoolSlot("compute", "Compute Task Pool", ComputeTaskPool, self.compute),
        )

    def total_threads_for(self, core_count: int) -> int:
        return max(self.min_total_threads, min(core_count, self.max_total_threads))

    def plan(self, total_threads: int) -> Iterator[Allocation]:
        """Size each pool in order from a shared budget of ``total_threads``.

        Each pool is sized against what the previous ones left. The
        remaining budget never goes below zero, even when a min_threads
        floor hands out more than was left.
        """
        remaining = total_threads
        for slot in self.pools:
            threads = slot.policies.assignment.get_number_of_threads(remaining, total_threads)
            remaining = max(0, remaining - threads)
            yield Allocation(slot, threads, remaining)

    def create_default_pools(
        self,
        *,
        registry: PoolRegistry | None = None,
        core_count: int | None = None,
    ) -> None:
        """Create the IO, AsyncCompute and Compute pools if they don't exist.

        Args:
            registry: Where pools are created. Defaults to the process-wide one.
            core_count: Override for the detected logical core count.
        """
        registry = registry if registry is not None else default_registry
        cores = core_count if core_count is not None else logical_core_count()
        total_threads = self.total_threads_for(cores)
        logger.trace("Assigning {n} cores to default task pools", n=total_threads)

        for step in self.plan(total_threads):
            slot = step.slot
            logger.trace("{name}: {n} threads", name=slot.name, n=step.threads)
            registry.get_or_create(slot.identity, step.threads, slot.name, slot.policies.failure)


POOL_KEYS: tuple[str, ...] = ("io", "async_compute", "compute")


def allocate_and_create(
    options: TaskPoolOptions | None = None,
    *,
    registry: PoolRegistry | None = None,
    core_count: int | None = None,
) -> None:
    """Create the default pools from ``options`` (defaults if omitted)."""
    (options or TaskPoolOptions()).create_default_pools(registry=registry, core_count=core_count)
