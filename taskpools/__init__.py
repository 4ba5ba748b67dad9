"""taskpools - size and create the process-wide IO, AsyncCompute and Compute pools.

Example:

    from taskpools import ComputeTaskPool, IoTaskPool, TaskPoolOptions

    TaskPoolOptions().create_default_pools()

    io = IoTaskPool.get()
    data = io.submit(read_file, path).result()

    results = list(ComputeTaskPool.get().map(process, chunks))
"""

from taskpools.config import build_options, load_config, resolve_options
from taskpools.core.exceptions import (
    ConfigurationError,
    PoolNotInitializedError,
    PoolShutdownError,
    TaskPoolsError,
)
from taskpools.hardware import logical_core_count
from taskpools.logging import LogConfig, disable_logging, enable_logging
from taskpools.options import Allocation, PoolSlot, TaskPoolOptions, allocate_and_create
from taskpools.pool import TaskPool, TaskPoolBuilder
from taskpools.registry import (
    AsyncComputeTaskPool,
    ComputeTaskPool,
    GlobalTaskPool,
    IoTaskPool,
    PoolRegistry,
    default_registry,
)
from taskpools.spec import (
    UNBOUNDED,
    FailurePolicy,
    PoolPolicies,
    ThreadAssignmentPolicy,
)

__version__ = "0.1.0"

__all__ = [
    # Policies
    "UNBOUNDED",
    "FailurePolicy",
    "PoolPolicies",
    "ThreadAssignmentPolicy",
    # Allocation
    "Allocation",
    "PoolSlot",
    "TaskPoolOptions",
    "allocate_and_create",
    # Pools
    "TaskPool",
    "TaskPoolBuilder",
    "GlobalTaskPool",
    "IoTaskPool",
    "AsyncComputeTaskPool",
    "ComputeTaskPool",
    "PoolRegistry",
    "default_registry",
    # Hardware
    "logical_core_count",
    # Config
    "build_options",
    "load_config",
    "resolve_options",
    # Logging
    "LogConfig",
    "enable_logging",
    "disable_logging",
    # Exceptions
    "TaskPoolsError",
    "ConfigurationError",
    "PoolNotInitializedError",
    "PoolShutdownError",
]
