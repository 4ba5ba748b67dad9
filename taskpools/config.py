"""TOML-based task pool configuration.

Loads ~/.taskpools/defaults.toml (global) and taskpools.toml (project),
merges them, and resolves the result into TaskPoolOptions.

    [threads]
    min_total = 2
    max_total = 16      # or `num = 6` to force an exact count

    [pools.io]
    max_threads = 8
    failure_policy = "catch-and-ignore"

    [pools.compute]
    percent = 1.0
    max_threads = "unbounded"

Pools and fields that are not mentioned keep their defaults.
"""

from __future__ import annotations

import tomllib
from dataclasses import replace
from pathlib import Path
from typing import Any, TypeAlias

from taskpools.core.exceptions import ConfigurationError
from taskpools.options import POOL_KEYS, TaskPoolOptions
from taskpools.spec.policy import UNBOUNDED, PoolPolicies, normalize_failure_policy

RawConfig: TypeAlias = dict[str, Any]

GLOBAL_CONFIG_PATH = Path.home() / ".taskpools" / "defaults.toml"
PROJECT_CONFIG_NAME = "taskpools.toml"

_THREADS_KEYS = frozenset({"min_total", "max_total", "num"})
_POOL_FIELDS = frozenset({"min_threads", "max_threads", "percent", "failure_policy"})


def _deep_merge(base: RawConfig, override: RawConfig) -> RawConfig:
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _read_toml(path: Path) -> RawConfig:
    if not path.is_file():
        return {}
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML in {path}: {e}") from e


def load_config(
    *,
    project_dir: Path | None = None,
    global_path: Path | None = None,
) -> RawConfig:
    global_cfg = _read_toml(global_path or GLOBAL_CONFIG_PATH)
    project_path = (project_dir or Path.cwd()) / PROJECT_CONFIG_NAME
    project_cfg = _read_toml(project_path)

    merged = _deep_merge(global_cfg, project_cfg)
    merged.setdefault("threads", {})
    merged.setdefault("pools", {})
    return merged


def _thread_count(value: Any, field: str) -> int:
    match value:
        case "unbounded":
            return UNBOUNDED
        case bool():
            raise ConfigurationError(f"{field} must be an integer, got {value!r}")
        case int() as n if n >= 0:
            return n
        case _:
            raise ConfigurationError(
                f"{field} must be a non-negative integer or \"unbounded\", got {value!r}"
            )


def _check_keys(raw: RawConfig, allowed: frozenset[str], section: str) -> None:
    if not isinstance(raw, dict):
        raise ConfigurationError(f"[{section}] must be a table, got {raw!r}")
    if unknown := sorted(set(raw) - allowed):
        raise ConfigurationError(
            f"Unknown keys in [{section}]: {', '.join(unknown)}. Valid: {', '.join(sorted(allowed))}"
        )


def _build_policies(key: str, raw: RawConfig, base: PoolPolicies) -> PoolPolicies:
    _check_keys(raw, _POOL_FIELDS, f"pools.{key}")

    assignment = base.assignment
    changes: dict[str, Any] = {}
    if "min_threads" in raw:
        changes["min_threads"] = _thread_count(raw["min_threads"], f"pools.{key}.min_threads")
    if "max_threads" in raw:
        changes["max_threads"] = _thread_count(raw["max_threads"], f"pools.{key}.max_threads")
    if "percent" in raw:
        percent = raw["percent"]
        if isinstance(percent, bool) or not isinstance(percent, int | float):
            raise ConfigurationError(f"pools.{key}.percent must be a number, got {percent!r}")
        changes["percent"] = float(percent)
    if changes:
        assignment = replace(assignment, **changes)

    failure = base.failure
    if "failure_policy" in raw:
        failure = normalize_failure_policy(raw["failure_policy"])

    return PoolPolicies(assignment=assignment, failure=failure)


def build_options(config: RawConfig) -> TaskPoolOptions:
    """Turn a merged raw config into TaskPoolOptions."""
    threads = config.get("threads", {})
    _check_keys(threads, _THREADS_KEYS, "threads")

    defaults = TaskPoolOptions()
    if "num" in threads:
        if "min_total" in threads or "max_total" in threads:
            raise ConfigurationError("[threads] num cannot be combined with min_total/max_total")
        options = TaskPoolOptions.with_num_threads(_thread_count(threads["num"], "threads.num"))
    else:
        options = TaskPoolOptions(
            min_total_threads=_thread_count(
                threads.get("min_total", defaults.min_total_threads), "threads.min_total"
            ),
            max_total_threads=_thread_count(
                threads.get("max_total", defaults.max_total_threads), "threads.max_total"
            ),
        )

    pools = config.get("pools", {})
    if not isinstance(pools, dict):
        raise ConfigurationError(f"[pools] must be a table, got {pools!r}")
    if unknown := [k for k in pools if k not in POOL_KEYS]:
        raise ConfigurationError(
            f"Unknown pool(s) {', '.join(unknown)}. Valid: {', '.join(POOL_KEYS)}"
        )
    for slot in options.pools:
        if (raw_pool := pools.get(slot.key)) is not None:
            options = options.with_pool(slot.key, _build_policies(slot.key, raw_pool, slot.policies))

    return options


def resolve_options(
    *,
    project_dir: Path | None = None,
    global_path: Path | None = None,
) -> TaskPoolOptions:
    """Load the global and project config files into TaskPoolOptions."""
    return build_options(load_config(project_dir=project_dir, global_path=global_path))
