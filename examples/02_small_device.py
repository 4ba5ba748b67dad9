"""Small Device Example.

Shows how the budget is split on machines of different sizes, including
the single-core case where every pool still gets its minimum thread.
"""

import taskpools as tp


if __name__ == "__main__":
    options = tp.TaskPoolOptions()

    for cores in (1, 2, 4, 8, 16, 64):
        total = options.total_threads_for(cores)
        steps = list(options.plan(total))
        split = ", ".join(f"{s.slot.key}={s.threads}" for s in steps)
        print(f"{cores:>3} cores -> {split} (requested {sum(s.threads for s in steps)})")

    # Pin the total regardless of hardware, e.g. for reproducible benchmarks
    pinned = tp.TaskPoolOptions.with_num_threads(6)
    pinned.create_default_pools()
    print(tp.ComputeTaskPool.get())
    tp.default_registry.shutdown()
