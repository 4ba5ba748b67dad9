"""TaskPool - a named thread pool with a failure policy.

    from taskpools import TaskPoolBuilder, FailurePolicy

    pool = (
        TaskPoolBuilder()
        .num_threads(4)
        .thread_name("IO Task Pool")
        .failure_policy(FailurePolicy.CATCH_AND_IGNORE)
        .build()
    )

    with pool:
        futures = [pool.submit(fetch, url) for url in urls]
        results = [f.result() for f in futures]
"""

from __future__ import annotations

import contextvars
import functools
import threading
from collections.abc import Callable, Iterable, Iterator
from concurrent.futures import Future, ThreadPoolExecutor
from types import TracebackType
from typing import ParamSpec, Self, TypeVar

from loguru import logger

from taskpools.core.exceptions import PoolShutdownError
from taskpools.hardware import logical_core_count
from taskpools.spec.policy import FailurePolicy, FailurePolicyLike, normalize_failure_policy

P = ParamSpec("P")
R = TypeVar("R")
I = TypeVar("I")
O = TypeVar("O")


class TaskPool:
    """Fixed-size pool of worker threads.

    Tasks are plain callables. Context variables of the submitting thread
    are visible inside the task.

    Under FailurePolicy.PROPAGATE an exception raised by a task is stored on
    its future and re-raised by ``future.result()``. Under
    FailurePolicy.CATCH_AND_IGNORE it is logged and swallowed; the future
    resolves to None and the worker keeps serving tasks.
    """

    def __init__(
        self,
        num_threads: int,
        thread_name: str = "TaskPool",
        failure_policy: FailurePolicyLike = FailurePolicy.PROPAGATE,
    ) -> None:
        self._num_threads = max(1, num_threads)
        self._name = thread_name
        self._failure_policy = normalize_failure_policy(failure_policy)
        self._executor = ThreadPoolExecutor(
            max_workers=self._num_threads,
            thread_name_prefix=thread_name,
        )
        self._shutdown = False
        self._lock = threading.Lock()
        self._log = logger.bind(pool=thread_name)

    @property
    def name(self) -> str:
        return self._name

    @property
    def thread_num(self) -> int:
        """Number of worker threads."""
        return self._num_threads

    @property
    def failure_policy(self) -> FailurePolicy:
        return self._failure_policy

    @property
    def is_shutdown(self) -> bool:
        return self._shutdown

    def _guard(self, fn: Callable[P, R]) -> Callable[P, R | None]:
        @functools.wraps(fn)
        def run(*args: P.args, **kwargs: P.kwargs) -> R | None:
            try:
                return fn(*args, **kwargs)
            except Exception:
                self._log.exception("Task {fn} failed, ignoring", fn=getattr(fn, "__name__", fn))
                return None

        return run

    def submit(
        self, fn: Callable[P, R], /, *args: P.args, **kwargs: P.kwargs
    ) -> Future[R]:
        """Schedule ``fn(*args, **kwargs)`` and return its Future."""
        with self._lock:
            if self._shutdown:
                raise PoolShutdownError(self._name)
            task = fn
            if self._failure_policy is FailurePolicy.CATCH_AND_IGNORE:
                task = self._guard(fn)  # type: ignore[assignment]
            return self._executor.submit(contextvars.copy_context().run, task, *args, **kwargs)

    def map(self, fn: Callable[[I], O], items: Iterable[I]) -> Iterator[O]:
        """Apply ``fn`` to every item concurrently, yielding results in order."""
        futures = [self.submit(fn, item) for item in items]
        return (future.result() for future in futures)

    def shutdown(self, wait: bool = True) -> None:
        with self._lock:
            self._shutdown = True
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.shutdown(wait=True)

    def __repr__(self) -> str:
        return (
            f"TaskPool(name={self._name!r}, threads={self._num_threads}, "
            f"failure_policy={self._failure_policy.value!r})"
        )


class TaskPoolBuilder:
    """Fluent builder for TaskPool.

    Unset values default to one thread per logical core, the name
    "TaskPool" and FailurePolicy.PROPAGATE.
    """

    def __init__(self) -> None:
        self._num_threads: int | None = None
        self._thread_name = "TaskPool"
        self._failure_policy: FailurePolicy = FailurePolicy.PROPAGATE

    def num_threads(self, num_threads: int) -> Self:
        self._num_threads = num_threads
        return self

    def thread_name(self, thread_name: str) -> Self:
        self._thread_name = thread_name
        return self

    def failure_policy(self, policy: FailurePolicyLike) -> Self:
        self._failure_policy = normalize_failure_policy(policy)
        return self

    def build(self) -> TaskPool:
        num_threads = self._num_threads if self._num_threads is not None else logical_core_count()
        return TaskPool(num_threads, self._thread_name, self._failure_policy)


__all__ = ["TaskPool", "TaskPoolBuilder"]

