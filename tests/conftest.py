from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

import pytest

from taskpools.pool import TaskPool
from taskpools.registry import GlobalTaskPool, PoolRegistry, default_registry
from taskpools.spec.policy import FailurePolicyLike


@dataclass
class RecordingRegistry(PoolRegistry):
    """Registry that records create requests instead of starting threads.

    Like the real registry, only the first request per identity counts.
    """

    calls: list[tuple[type[GlobalTaskPool], int, str, FailurePolicyLike]] = field(default_factory=list)
    created: dict[type[GlobalTaskPool], int] = field(default_factory=dict)

    def get_or_create(  # type: ignore[override]
        self,
        identity: type[GlobalTaskPool],
        thread_count: int,
        name: str,
        failure_policy: FailurePolicyLike,
    ) -> None:
        self.calls.append((identity, thread_count, name, failure_policy))
        self.created.setdefault(identity, thread_count)


@pytest.fixture
def recording_registry() -> RecordingRegistry:
    return RecordingRegistry()


@pytest.fixture
def registry() -> Iterator[PoolRegistry]:
    """The process-wide registry, emptied before and after the test."""
    default_registry.shutdown()
    yield default_registry
    default_registry.shutdown()


@pytest.fixture
def task_pool() -> Iterator[TaskPool]:
    with TaskPool(2, "Test Pool") as pool:
        yield pool
