"""Default Pools Example.

Sizes the IO, AsyncCompute and Compute pools from this machine's cores,
then uses each for the kind of work it is meant for.
"""

from pathlib import Path

import taskpools as tp


def checksum(path: Path) -> int:
    return sum(path.read_bytes()) % 65521


def collatz_steps(n: int) -> int:
    steps = 0
    while n != 1:
        n = n // 2 if n % 2 == 0 else 3 * n + 1
        steps += 1
    return steps


if __name__ == "__main__":
    ids = tp.enable_logging(tp.LogConfig(level="TRACE"))
    tp.TaskPoolOptions().create_default_pools()

    for identity in (tp.IoTaskPool, tp.AsyncComputeTaskPool, tp.ComputeTaskPool):
        print(identity.get())

    files = sorted(Path(__file__).parent.glob("*.py"))
    sums = tp.IoTaskPool.get().map(checksum, files)
    for path, value in zip(files, sums, strict=True):
        print(f"  {path.name}: {value}")

    longest = max(tp.ComputeTaskPool.get().map(collatz_steps, range(1, 50_000)))
    print(f"Longest Collatz chain below 50k: {longest} steps")

    tp.default_registry.shutdown()
    tp.disable_logging(ids)
