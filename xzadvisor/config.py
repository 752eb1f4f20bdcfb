"""Central configuration for the xz compression advisor."""

from dataclasses import dataclass

KIB = 1024
MIB = 1024 * 1024
GIB = 1024 * 1024 * 1024


@dataclass
class AdvisorConfig:
    """All advisor tunables in one place."""

    # --- Classification / prediction ---
    classifier_window: int = 512  # Bytes inspected by the text heuristic
    prediction_sample_size: int = 1 * MIB  # Leading sample used for entropy + category
    text_threshold_pct: int = 90  # Printable share (strictly above) that means text

    # --- Optimizer ---
    trial_sample_size: int = 1 * MIB  # Cap on the buffer handed to trial encodes
    trial_check: str = "crc32"  # Integrity check used for trial encodes

    # --- Parallel planning ---
    default_block_size: int = 3 * MIB  # Used when no block size is configured
    min_block_size: int = 64 * KIB
    max_block_size: int = 64 * MIB
    single_thread_limit: int = 10 * MIB  # <= this: one thread
    half_threads_limit: int = 100 * MIB  # <= this: half the hardware threads
    assumed_available_memory: int = 1 * GIB  # Memory budget for recommendations

    # --- Recovery ---
    recovery_chunk_size: int = 64 * KIB  # Chunk read + output cap for file recovery
    default_recovery_mode: str = "partial"  # 'none', 'partial', 'aggressive', 'maximum'

    # --- Analytics ---
    analytics_enabled: bool = True

    # --- Benchmark ---
    max_benchmark_presets: int = 10

    @property
    def memory_per_thread_factor(self) -> int:
        """Each codec thread needs roughly this many blocks of memory."""
        return 3


@dataclass
class ParallelConfig:
    """Parameters handed to the codec's own multithreaded mode.

    Zero means "let the codec decide" for threads and block_size.
    """

    threads: int = 0
    block_size: int = 0
    timeout_ms: int = 300
    adaptive_threading: bool = False
    load_balancing: bool = True
    priority_level: int = 0
