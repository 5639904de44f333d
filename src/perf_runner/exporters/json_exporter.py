# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""JSON exporter for run results."""

from typing import Any, TextIO

import orjson

from perf_runner.exporters.base_exporter import BaseResultsExporter
from perf_runner.orchestrator.models import Result, RoleName, TestResult


def _role_summary(result: Result) -> dict[str, Any]:
    return {
        "success": result.success,
        "duration": result.duration,
        "exit_code": result.exit_code,
        "output": result.output,
        "error": result.error,
        "metrics": result.metrics,
    }


def _test_summary(test: TestResult) -> dict[str, Any]:
    summary: dict[str, Any] = {
        "scenario_name": test.scenario_name,
        "label": test.label,
        "topology": str(test.topology) if test.topology else None,
        "success": test.success,
        "duration": test.duration,
        "start_time": test.start_time,
        "end_time": test.end_time,
        "error": test.error,
        "commands": {str(slot): command for slot, command in test.commands.items()},
    }
    for slot in RoleName:
        if (role_result := test.results.get(slot)) is not None:
            summary[f"{slot}_result"] = _role_summary(role_result)
    return summary


class JsonResultsExporter(BaseResultsExporter):
    """Exports run results as a single JSON document.

    Output structure:
    {
        "total_duration": 42.1,
        "total_tests": 3,
        "passed": 2,
        "failed": 1,
        "results": [
            {"scenario_name": ..., "client_result": {...}, "server_result": {...}, ...}
        ]
    }
    """

    def generate_content(self) -> str:
        output = {
            "total_duration": self._config.total_duration,
            "total_tests": len(self._config.results),
            "passed": self._config.passed,
            "failed": self._config.failed,
            "results": [_test_summary(test) for test in self._config.results],
        }
        return orjson.dumps(output, option=orjson.OPT_INDENT_2).decode("utf-8")

    def export(self, file: TextIO | None = None) -> None:
        stream = self._stream(file)
        stream.write(self.generate_content())
        stream.write("\n")
        stream.flush()
