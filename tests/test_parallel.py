"""Tests for thread-count and block-size planning."""

import pytest

from xzadvisor.config import GIB, KIB, MIB, AdvisorConfig, ParallelConfig
from xzadvisor.context import AdvisorContext
from xzadvisor.tuning.parallel import (
    ParallelPlan,
    ParallelPlanner,
    optimal_block_size,
    optimal_threads,
)


class TestOptimalThreads:
    def test_large_file_uses_all_threads(self):
        assert optimal_threads(200 * MIB, 1 * GIB, hardware_thread_count=4) == 4

    def test_medium_file_uses_half(self):
        assert optimal_threads(50 * MIB, 1 * GIB, hardware_thread_count=4) == 2

    def test_small_file_single_thread(self):
        assert optimal_threads(5 * MIB, 1 * GIB, hardware_thread_count=16) == 1

    def test_size_boundaries_inclusive(self):
        assert optimal_threads(10 * MIB, 1 * GIB, hardware_thread_count=8) == 1
        assert optimal_threads(10 * MIB + 1, 1 * GIB, hardware_thread_count=8) == 4
        assert optimal_threads(100 * MIB, 1 * GIB, hardware_thread_count=8) == 4
        assert optimal_threads(100 * MIB + 1, 1 * GIB, hardware_thread_count=8) == 8

    def test_memory_bound(self):
        """Each thread needs three default 3 MiB blocks of memory."""
        assert optimal_threads(1 * GIB, 18 * MIB, hardware_thread_count=8) == 2

    def test_tiny_memory_still_one_thread(self):
        assert optimal_threads(1 * GIB, 0, hardware_thread_count=8) == 1

    def test_single_hardware_thread(self):
        assert optimal_threads(50 * MIB, 1 * GIB, hardware_thread_count=1) == 1

    def test_configured_block_size(self):
        # 3 * 64 MiB per thread within 1 GiB -> 5 threads
        assert optimal_threads(1 * GIB, 1 * GIB, hardware_thread_count=8, block_size=64 * MIB) == 5

    @pytest.mark.parametrize("size", [0, 1, 10 * MIB, 77 * MIB, 5 * GIB])
    @pytest.mark.parametrize("memory", [0, 1 * MIB, 1 * GIB])
    @pytest.mark.parametrize("hw", [1, 3, 4, 64])
    def test_bounds(self, size, memory, hw):
        threads = optimal_threads(size, memory, hardware_thread_count=hw)
        assert 1 <= threads <= hw

    def test_detected_hardware(self):
        assert optimal_threads(1 * GIB, 1 * GIB) >= 1


class TestOptimalBlockSize:
    def test_floor(self):
        assert optimal_block_size(4, 1 * MIB) == 64 * KIB

    def test_ceiling(self):
        assert optimal_block_size(1, 10 * GIB) == 64 * MIB

    def test_proportional(self):
        assert optimal_block_size(2, 80 * MIB) == 10 * MIB

    def test_zero_threads_treated_as_one(self):
        assert optimal_block_size(0, 8 * MIB) == 2 * MIB

    @pytest.mark.parametrize("threads", [1, 2, 7, 32])
    @pytest.mark.parametrize("size", [0, 100, 64 * MIB, 3 * GIB])
    def test_bounds(self, threads, size):
        assert 64 * KIB <= optimal_block_size(threads, size) <= 64 * MIB


class TestParallelPlanner:
    def test_plan(self):
        planner = ParallelPlanner(AdvisorContext(), hardware_thread_count=4)
        plan = planner.plan(200 * MIB)
        assert plan == ParallelPlan(threads=4, block_size=optimal_block_size(4, 200 * MIB))
        assert plan.as_dict() == {"threads": 4, "block_size": 200 * MIB // 16}

    def test_plan_with_memory(self):
        planner = ParallelPlanner(hardware_thread_count=8)
        assert planner.plan(1 * GIB, available_memory=9 * MIB).threads == 1

    def test_configure_copies(self):
        ctx = AdvisorContext()
        planner = ParallelPlanner(ctx)
        config = ParallelConfig(threads=2, block_size=64 * MIB)
        planner.configure(config)
        config.block_size = 1
        assert ctx.parallel.block_size == 64 * MIB

    def test_configured_block_size_used(self):
        ctx = AdvisorContext()
        planner = ParallelPlanner(ctx, hardware_thread_count=8)
        planner.configure(ParallelConfig(block_size=64 * MIB))
        assert planner.optimal_threads(1 * GIB, 1 * GIB) == 5

    def test_toggles(self):
        planner = ParallelPlanner()
        planner.enable_adaptive_threading()
        planner.enable_load_balancing(False)
        assert planner.parallel_config.adaptive_threading is True
        assert planner.parallel_config.load_balancing is False

    def test_custom_thresholds(self):
        config = AdvisorConfig(single_thread_limit=1 * KIB, half_threads_limit=2 * KIB)
        planner = ParallelPlanner(AdvisorContext(config=config), hardware_thread_count=4)
        assert planner.optimal_threads(4 * KIB, 1 * GIB) == 4
