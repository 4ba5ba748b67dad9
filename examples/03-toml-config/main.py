"""Pools from TOML configuration.

Reads taskpools.toml from the current directory and creates the pools
it describes.

    cd examples/03-toml-config
    python main.py
"""

import taskpools as tp


def flaky(i: int) -> int:
    if i % 3 == 0:
        raise ValueError(f"bad input {i}")
    return i * 10


if __name__ == "__main__":
    options = tp.resolve_options()
    options.create_default_pools()

    print(tp.IoTaskPool.get())
    # AsyncCompute ignores failures here: bad inputs come back as None
    print(list(tp.AsyncComputeTaskPool.get().map(flaky, range(7))))

    tp.default_registry.shutdown()
