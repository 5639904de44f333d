# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Configuration for result exporters."""

from dataclasses import dataclass

from perf_runner.orchestrator.models import TestResult


@dataclass(slots=True)
class ResultsExporterConfig:
    """Configuration for result exporters.

    Attributes:
        results: One TestResult per scenario repeat, in run order
        total_duration: Wall-clock seconds for the whole run
        show_output: Include captured role output in human-readable reports
    """

    results: list[TestResult]
    total_duration: float
    show_output: bool = False

    @property
    def passed(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return len(self.results) - self.passed
