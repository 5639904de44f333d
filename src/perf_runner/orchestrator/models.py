# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Data models for scenario execution results."""

from datetime import datetime

from pydantic import BaseModel, Field

from perf_runner.common.enums import CaseInsensitiveStrEnum, TopologyType

__all__ = [
    "MetricValue",
    "Result",
    "RoleName",
    "TestResult",
]

MetricValue = float | int | str


class RoleName(CaseInsensitiveStrEnum):
    """Slot names of the per-role results in a TestResult.

    The intermediate role appears under three slots depending on topology.
    """

    CLIENT = "client"
    SERVER = "server"
    INTERMEDIATE = "intermediate"
    INTERMEDIATE1 = "intermediate1"
    INTERMEDIATE2 = "intermediate2"


class Result(BaseModel):
    """Outcome of one role's command.

    Attributes:
        success: True if the command ran and exited with status 0
        output: Captured combined stdout/stderr
        error: Error description if the command failed
        exit_code: Process exit status (-1 if the command never reported one)
        duration: Wall-clock seconds the command ran
        start_time: When the command was started
        end_time: When the command finished
        metrics: Metrics parsed from the output (e.g., {"bandwidth_mbps": 934.0})
    """

    success: bool
    output: str = ""
    error: str = ""
    exit_code: int = -1
    duration: float = 0.0
    start_time: datetime | None = None
    end_time: datetime | None = None
    metrics: dict[str, MetricValue] = Field(default_factory=dict)


class TestResult(BaseModel):
    """Aggregated outcome of one scenario run (one repeat).

    Attributes:
        scenario_name: Name of the scenario
        label: Repeat label (e.g., "repeat_0001")
        topology: Topology the scenario ran with
        success: True iff every launched role succeeded and ``error`` is empty
        error: Orchestration-level error (timeout, missing connection, validation)
        results: Role results keyed by slot name (see :class:`RoleName`)
        commands: Commands issued, keyed by slot name
    """

    __test__ = False

    scenario_name: str
    label: str = ""
    topology: TopologyType | None = None
    success: bool = False
    error: str = ""
    start_time: datetime | None = None
    end_time: datetime | None = None
    duration: float = 0.0
    results: dict[str, Result] = Field(default_factory=dict)
    commands: dict[str, str] = Field(default_factory=dict)

    @property
    def client_result(self) -> Result | None:
        return self.results.get(RoleName.CLIENT)

    @property
    def server_result(self) -> Result | None:
        return self.results.get(RoleName.SERVER)

    def compute_success(self) -> bool:
        """Apply the aggregate law and store it in ``success``.

        Client and server results are required. Intermediates are only
        counted when they produced a result.
        """
        self.success = (
            not self.error
            and self.client_result is not None
            and self.server_result is not None
            and all(result.success for result in self.results.values())
        )
        return self.success
