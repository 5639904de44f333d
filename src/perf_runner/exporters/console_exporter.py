# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Human-readable report of run results."""

from typing import TextIO

from rich.console import Console
from rich.table import Table
from rich.text import Text

from perf_runner.common.durations import format_duration
from perf_runner.exporters.base_exporter import BaseResultsExporter
from perf_runner.orchestrator.models import Result, RoleName, TestResult


def _format_metric(value: float | int | str) -> str:
    if isinstance(value, float):
        return f"{value:,.2f}"
    if isinstance(value, int) and not isinstance(value, bool):
        return f"{value:,}"
    return str(value)


class ConsoleResultsExporter(BaseResultsExporter):
    """Prints one block per scenario run followed by a summary line."""

    def export(self, file: TextIO | None = None) -> None:
        console = Console(file=self._stream(file), soft_wrap=True)
        console.print()
        console.print("=== Test Results ===", style="bold")
        for test in self._config.results:
            console.print()
            self._print_test(console, test)
        console.print()
        console.print(self._summary())

    def _print_test(self, console: Console, test: TestResult) -> None:
        status = Text("PASS", style="bold green") if test.success else Text("FAIL", style="bold red")
        title = Text.assemble(
            status,
            "  ",
            (test.scenario_name, "bold"),
            f" [{test.label}]" if test.label else "",
            f" ({test.topology or 'unknown topology'}, {format_duration(test.duration)})",
        )
        console.print(title)

        if test.error:
            console.print(Text(f"  Error: {test.error}", style="red"))

        for slot, command in test.commands.items():
            console.print(Text(f"  {slot}: ", style="cyan") + Text(command))

        for slot in RoleName:
            role_result = test.results.get(slot)
            if role_result is not None:
                self._print_role(console, slot, role_result)

    def _print_role(self, console: Console, slot: str, result: Result) -> None:
        status = "ok" if result.success else f"failed (exit {result.exit_code})"
        console.print(
            Text(f"  {slot} result: ", style="cyan")
            + Text(f"{status} in {format_duration(result.duration)}")
        )
        if result.error:
            console.print(Text(f"    {result.error}", style="red"))

        if result.metrics:
            table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
            table.add_column("Metric", style="dim")
            table.add_column("Value", justify="right")
            for key, value in sorted(result.metrics.items()):
                table.add_row(key, _format_metric(value))
            console.print(table)

        if self._config.show_output and result.output:
            for line in result.output.rstrip().splitlines():
                console.print(Text(f"    | {line}", style="dim"))

    def _summary(self) -> Text:
        failed = self._config.failed
        return Text.assemble(
            ("Summary: ", "bold"),
            f"{len(self._config.results)} run(s), ",
            (f"{self._config.passed} passed", "green"),
            ", ",
            (f"{failed} failed", "red" if failed else "green"),
            f" in {format_duration(self._config.total_duration)}",
        )
