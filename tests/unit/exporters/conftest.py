# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
from datetime import datetime

import pytest

from perf_runner.common.enums import TopologyType
from perf_runner.exporters import ResultsExporterConfig
from perf_runner.orchestrator.models import Result, TestResult


@pytest.fixture
def passing_result() -> TestResult:
    return TestResult(
        scenario_name="tcp baseline",
        label="repeat_0001",
        topology=TopologyType.TWO_NODE,
        success=True,
        start_time=datetime(2026, 3, 1, 12, 0, 0),
        end_time=datetime(2026, 3, 1, 12, 0, 11),
        duration=11.0,
        commands={"server": "iperf3 -s -1", "client": "iperf3 -c 10.0.0.2 -t 10"},
        results={
            "server": Result(success=True, exit_code=0, duration=10.5, output="server done"),
            "client": Result(
                success=True,
                exit_code=0,
                duration=10.2,
                output="client line 1\nclient line 2\n",
                metrics={"bandwidth_mbps": 934.0, "retransmits": 12},
            ),
        },
    )


@pytest.fixture
def failing_result() -> TestResult:
    return TestResult(
        scenario_name="relayed",
        label="repeat_0001",
        topology=TopologyType.THREE_NODE,
        success=False,
        error="test timed out: client did not finish before the deadline",
        duration=30.0,
        commands={"server": "iperf3 -s -1"},
        results={
            "server": Result(success=True, exit_code=0, duration=1.0),
            "client": Result(success=False, error="command timed out"),
        },
    )


@pytest.fixture
def exporter_config(passing_result, failing_result) -> ResultsExporterConfig:
    return ResultsExporterConfig(
        results=[passing_result, failing_result], total_duration=42.5
    )
