# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Repeat strategies for scenario execution."""

from abc import ABC, abstractmethod

from perf_runner.common.config.test_config import TestScenario
from perf_runner.orchestrator.models import TestResult

__all__ = [
    "ExecutionStrategy",
    "RepeatStrategy",
]


class ExecutionStrategy(ABC):
    """Decides how many times a scenario runs and what happens between runs.

    Strategies decide:
    1. Whether to run the scenario again (based on results so far)
    2. How to label each run
    3. How long to pause between runs
    """

    @abstractmethod
    def should_continue(self, results: list[TestResult]) -> bool:
        """Decide whether to run the scenario again.

        Args:
            results: Results from runs executed so far

        Returns:
            True if another run should start, False to stop
        """
        pass

    @abstractmethod
    def get_run_label(self, run_index: int) -> str:
        """Generate label for run at given index.

        Args:
            run_index: Zero-based index of run

        Returns:
            Label for run (e.g., "repeat_0001")
        """
        pass

    @abstractmethod
    def get_cooldown_seconds(self) -> float:
        """Return pause duration between runs."""
        pass


class RepeatStrategy(ExecutionStrategy):
    """Run a scenario a fixed number of times with a delay in between.

    Every repeat runs regardless of how earlier repeats went; repeats replay
    the whole scenario and are not retries.

    Attributes:
        repeat: Number of runs
        delay_seconds: Pause between consecutive runs
    """

    def __init__(self, repeat: int, delay_seconds: float = 0.0) -> None:
        """Initialize RepeatStrategy.

        Args:
            repeat: Number of runs. Values below 1 mean a single run.
            delay_seconds: Pause between runs (must be >= 0)

        Raises:
            ValueError: If delay_seconds < 0
        """
        if delay_seconds < 0:
            raise ValueError(
                f"Invalid repeat delay: {delay_seconds} seconds. "
                f"Delay must be non-negative (0 or greater)."
            )
        self.repeat = max(1, repeat)
        self.delay_seconds = delay_seconds

    @classmethod
    def for_scenario(cls, scenario: TestScenario) -> "RepeatStrategy":
        return cls(repeat=scenario.repeat, delay_seconds=scenario.delay)

    def should_continue(self, results: list[TestResult]) -> bool:
        """Continue until we've run the scenario ``repeat`` times."""
        return len(results) < self.repeat

    def get_run_label(self, run_index: int) -> str:
        """Generate zero-padded label: repeat_0001, repeat_0002, etc."""
        return f"repeat_{run_index + 1:04d}"

    def get_cooldown_seconds(self) -> float:
        return self.delay_seconds
