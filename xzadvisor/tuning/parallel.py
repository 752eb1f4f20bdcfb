"""Thread-count and block-size sizing for the codec's multithreaded mode.

Pure arithmetic. Nothing here spawns or schedules threads; the numbers are
meant for the codec's own threading options.

Thread count is the smaller of two bounds:
    size bound    1 thread up to 10 MiB, half the hardware threads up to
                  100 MiB, all of them beyond
    memory bound  available_memory / (3 * block_size), in [1, hardware threads]

Block size is file_size / (threads * 4), clamped to [64 KiB, 64 MiB].
"""

from dataclasses import dataclass, replace
from typing import Optional

from ..codec.xz import hardware_threads
from ..config import AdvisorConfig, ParallelConfig
from ..context import AdvisorContext


@dataclass
class ParallelPlan:
    """Recommended codec threading parameters."""
    threads: int
    block_size: int

    def as_dict(self) -> dict:
        return {"threads": self.threads, "block_size": self.block_size}


def optimal_threads(
    file_size: int,
    available_memory: int,
    hardware_thread_count: Optional[int] = None,
    block_size: int = 0,
    config: Optional[AdvisorConfig] = None,
) -> int:
    """Recommended thread count, in [1, hardware threads].

    Args:
        file_size: Input size in bytes.
        available_memory: Memory budget in bytes.
        hardware_thread_count: Override for the detected hardware threads.
        block_size: Configured block size (0 = default 3 MiB).
        config: Optional config for thresholds.
    """
    config = config or AdvisorConfig()
    max_threads = hardware_thread_count if hardware_thread_count is not None else hardware_threads()
    max_threads = max(max_threads, 1)

    if file_size > config.half_threads_limit:
        size_based = max_threads
    elif file_size > config.single_thread_limit:
        size_based = max(max_threads // 2, 1)
    else:
        size_based = 1

    if block_size <= 0:
        block_size = config.default_block_size
    memory_per_thread = config.memory_per_thread_factor * block_size
    memory_based = max(available_memory, 0) // memory_per_thread
    memory_based = min(max(memory_based, 1), max_threads)

    return min(size_based, memory_based)


def optimal_block_size(threads: int, file_size: int, config: Optional[AdvisorConfig] = None) -> int:
    """Recommended block size in bytes, in [64 KiB, 64 MiB]."""
    config = config or AdvisorConfig()
    threads = max(threads, 1)
    size = max(file_size, 0) // (threads * 4)
    return min(max(size, config.min_block_size), config.max_block_size)


class ParallelPlanner:
    """Planner that reads and updates the ParallelConfig on a context."""

    def __init__(self, context: Optional[AdvisorContext] = None,
                 hardware_thread_count: Optional[int] = None):
        self.context = context or AdvisorContext()
        self.hardware_thread_count = hardware_thread_count

    @property
    def parallel_config(self) -> ParallelConfig:
        return self.context.parallel

    def configure(self, config: ParallelConfig):
        """Replace the stored configuration with a copy of ``config``."""
        self.context.parallel = replace(config)

    def enable_adaptive_threading(self, enable: bool = True):
        self.context.parallel.adaptive_threading = enable

    def enable_load_balancing(self, enable: bool = True):
        self.context.parallel.load_balancing = enable

    def optimal_threads(self, file_size: int, available_memory: int) -> int:
        return optimal_threads(
            file_size,
            available_memory,
            hardware_thread_count=self.hardware_thread_count,
            block_size=self.context.parallel.block_size,
            config=self.context.config,
        )

    def optimal_block_size(self, threads: int, file_size: int) -> int:
        return optimal_block_size(threads, file_size, self.context.config)

    def plan(self, file_size: int, available_memory: Optional[int] = None) -> ParallelPlan:
        """Threads and block size for an input.

        Args:
            file_size: Input size in bytes.
            available_memory: Memory budget (default: the configured assumption).
        """
        if available_memory is None:
            available_memory = self.context.config.assumed_available_memory
        threads = self.optimal_threads(file_size, available_memory)
        return ParallelPlan(threads=threads, block_size=self.optimal_block_size(threads, file_size))
