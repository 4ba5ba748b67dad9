"""Logical core detection."""

from __future__ import annotations

import psutil


def logical_core_count() -> int:
    """Number of logical cores this process may run on.

    Restricted to the process CPU affinity where the platform exposes it
    (Linux, Windows, FreeBSD), so containers and taskset-pinned processes
    report what they can actually use. Always at least 1.
    """
    process = psutil.Process()
    if hasattr(process, "cpu_affinity"):
        if affinity := process.cpu_affinity():
            return len(affinity)
    return psutil.cpu_count(logical=True) or 1
