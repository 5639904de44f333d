# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Tests for cli_runner.py"""

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock, Mock, patch

import orjson
import pytest

from perf_runner.common.config import RunOptions
from perf_runner.common.enums import Role
from perf_runner.common.exceptions import ConfigurationError
from perf_runner.orchestrator.models import TestResult
from tests.utils.fakes import make_config, make_config_dict, two_node_test


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    """A configuration document on disk. JSON is valid YAML."""
    path = tmp_path / "bench.yaml"
    path.write_bytes(orjson.dumps(make_config_dict([two_node_test()])))
    return path


@pytest.fixture(autouse=True)
def no_logging_setup():
    with patch("perf_runner.cli_runner.setup_rich_logging") as mock_setup:
        yield mock_setup


def _result(success: bool = True, name: str = "tcp baseline") -> TestResult:
    return TestResult(scenario_name=name, label="repeat_0001", success=success)


class TestRunBenchmarks:
    @patch("perf_runner.cli_runner._run_with_signals", new_callable=AsyncMock)
    def test_all_passed_exits_zero(self, mock_run: AsyncMock, config_path, capsys):
        from perf_runner.cli_runner import run_benchmarks

        mock_run.return_value = [_result()]

        exit_code = run_benchmarks(RunOptions(config=config_path, json_output=True))

        assert exit_code == 0
        report = orjson.loads(capsys.readouterr().out)
        assert report["total_tests"] == 1
        assert report["passed"] == 1

    @patch("perf_runner.cli_runner._run_with_signals", new_callable=AsyncMock)
    def test_any_failure_exits_one(self, mock_run: AsyncMock, config_path, capsys):
        from perf_runner.cli_runner import run_benchmarks

        mock_run.return_value = [_result(), _result(success=False, name="second")]

        exit_code = run_benchmarks(RunOptions(config=config_path))

        assert exit_code == 1
        assert "Summary: 2 run(s), 1 passed, 1 failed" in capsys.readouterr().out

    @patch("perf_runner.cli_runner._run_with_signals", new_callable=AsyncMock)
    def test_no_results_exits_one(self, mock_run: AsyncMock, config_path):
        from perf_runner.cli_runner import run_benchmarks

        mock_run.return_value = []

        assert run_benchmarks(RunOptions(config=config_path, json_output=True)) == 1

    @patch("perf_runner.cli_runner.build_coordinator")
    @patch("perf_runner.cli_runner._run_with_signals", new_callable=AsyncMock)
    def test_interrupted_run_reports_finished_scenarios(
        self, mock_run: AsyncMock, mock_build: Mock, config_path, capsys
    ):
        from perf_runner.cli_runner import run_benchmarks

        mock_build.return_value = Mock(results=[_result()])
        mock_run.side_effect = asyncio.CancelledError()

        exit_code = run_benchmarks(RunOptions(config=config_path, json_output=True))

        assert exit_code == 1
        assert orjson.loads(capsys.readouterr().out)["passed"] == 1

    @patch("perf_runner.cli_runner.build_coordinator")
    @patch("perf_runner.cli_runner._run_with_signals", new_callable=AsyncMock)
    def test_timeout_option_is_passed_on(
        self, mock_run: AsyncMock, mock_build: Mock, config_path
    ):
        from perf_runner.cli_runner import run_benchmarks

        mock_run.return_value = [_result()]

        run_benchmarks(RunOptions(config=config_path, timeout="90s", json_output=True))

        assert mock_build.call_args.kwargs["timeout"] == 90.0

    @patch("perf_runner.cli_runner._run_with_signals", new_callable=AsyncMock)
    def test_verbose_enables_debug_logging(
        self, mock_run: AsyncMock, config_path, no_logging_setup: Mock
    ):
        from perf_runner.cli_runner import run_benchmarks

        mock_run.return_value = [_result()]
        log_file = config_path.parent / "run.log"

        run_benchmarks(
            RunOptions(config=config_path, verbose=True, log_file=log_file, json_output=True)
        )

        no_logging_setup.assert_called_once_with("DEBUG", log_file=log_file)

    def test_missing_config_file(self, tmp_path: Path):
        from perf_runner.cli_runner import run_benchmarks

        with pytest.raises(ConfigurationError, match="failed to read config file"):
            run_benchmarks(RunOptions(config=tmp_path / "missing.yaml"))


class TestBuildCoordinator:
    def test_registers_runner_per_role(self):
        from perf_runner.cli_runner import build_coordinator

        coordinator = build_coordinator(make_config([two_node_test()]))

        assert set(coordinator.runners) == {Role.CLIENT, Role.SERVER}
        assert coordinator.runners[Role.CLIENT].name == "iperf3"

    def test_intermediate_runner_only_when_needed(self):
        from perf_runner.cli_runner import build_coordinator

        coordinator = build_coordinator(
            make_config([two_node_test(intermediate="relay")])
        )

        assert Role.INTERMEDIATE in coordinator.runners

    def test_unknown_runner(self):
        from perf_runner.cli_runner import build_coordinator

        config = make_config([two_node_test()], runner="netperf")

        with pytest.raises(ConfigurationError, match="client role"):
            build_coordinator(config)

    def test_mixed_runners(self):
        from perf_runner.cli_runner import build_coordinator

        config = make_config(
            [two_node_test()],
            runner="",
            runners={"client": "ib_send_bw", "server": "iperf3"},
        )

        coordinator = build_coordinator(config)

        assert coordinator.runners[Role.CLIENT].name == "ib_send_bw"
        assert coordinator.runners[Role.SERVER].name == "iperf3"

    def test_binary_paths(self):
        from perf_runner.cli_runner import build_coordinator

        config = make_config(
            [two_node_test()], binary_paths={"iperf3": "/opt/iperf3/bin/iperf3"}
        )

        coordinator = build_coordinator(config)

        assert coordinator.runners[Role.SERVER].executable == "/opt/iperf3/bin/iperf3"

    def test_timeout_override(self):
        from perf_runner.cli_runner import build_coordinator

        coordinator = build_coordinator(make_config([two_node_test()]), timeout=12.0)

        assert coordinator.timeout == 12.0


class TestRunWithSignals:
    @pytest.mark.asyncio
    async def test_connects_runs_and_cleans_up(self):
        from perf_runner.cli_runner import _run_with_signals

        coordinator = Mock(
            connect_all=AsyncMock(),
            run_all=AsyncMock(return_value=[_result()]),
            cleanup=AsyncMock(),
        )

        results = await _run_with_signals(coordinator)

        assert [r.scenario_name for r in results] == ["tcp baseline"]
        coordinator.connect_all.assert_awaited_once()
        coordinator.cleanup.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_cleans_up_when_connecting_fails(self):
        from perf_runner.cli_runner import _run_with_signals

        coordinator = Mock(
            connect_all=AsyncMock(side_effect=ConfigurationError("boom")),
            run_all=AsyncMock(),
            cleanup=AsyncMock(),
        )

        with pytest.raises(ConfigurationError):
            await _run_with_signals(coordinator)

        coordinator.run_all.assert_not_awaited()
        coordinator.cleanup.assert_awaited_once()
