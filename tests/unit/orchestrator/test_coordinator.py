# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Tests for the Coordinator."""

from unittest.mock import AsyncMock, patch

import pytest

from perf_runner.common.enums import Role
from perf_runner.common.exceptions import PerfRunnerMultiError, RemoteConnectionError
from perf_runner.orchestrator.coordinator import Coordinator
from perf_runner.orchestrator.models import TestResult
from perf_runner.orchestrator.strategies import RepeatStrategy
from perf_runner.runners.iperf3 import Iperf3Runner
from tests.utils.fakes import FakeGateway, make_config, two_node_test


class GatewayFactory:
    """Creates FakeGateways and remembers them by host name."""

    def __init__(self, connect_errors: dict[str, Exception] | None = None) -> None:
        self.connect_errors = connect_errors or {}
        self.created: dict[str, FakeGateway] = {}

    def __call__(self, host_id, ssh_config) -> FakeGateway:
        gateway = FakeGateway(host_id, connect_error=self.connect_errors.get(host_id))
        self.created[host_id] = gateway
        return gateway


def _coordinator(config, factory: GatewayFactory) -> Coordinator:
    coordinator = Coordinator(config, gateway_factory=factory)
    runner = Iperf3Runner()
    for role in Role:
        coordinator.register_runner(role, runner)
    return coordinator


class TestCoordinatorConnect:
    @pytest.mark.asyncio
    async def test_connects_only_referenced_hosts(self):
        config = make_config([two_node_test()])
        factory = GatewayFactory()
        coordinator = _coordinator(config, factory)

        await coordinator.connect_all()

        assert set(coordinator.gateways) == {"client", "server"}
        assert set(factory.created) == {"client", "server"}
        assert all(gateway.connected for gateway in factory.created.values())

    @pytest.mark.asyncio
    async def test_unreachable_host_fails_only_its_scenarios(self):
        config = make_config(
            [
                two_node_test("direct"),
                two_node_test("relayed", intermediate="relay"),
            ]
        )
        factory = GatewayFactory({"relay": RemoteConnectionError("no route to host")})
        coordinator = _coordinator(config, factory)

        await coordinator.connect_all()
        results = await coordinator.run_all()

        assert set(coordinator.gateways) == {"client", "server"}
        assert "relay" in coordinator.connection_errors
        assert [r.success for r in results] == [True, False]
        assert results[1].error.startswith("host 'relay' is unreachable")
        assert "no route to host" in results[1].error
        assert factory.created["relay"].commands == []

    @pytest.mark.asyncio
    async def test_no_reachable_host_raises(self):
        config = make_config([two_node_test()])
        factory = GatewayFactory(
            {
                "client": RemoteConnectionError("refused"),
                "server": RemoteConnectionError("timed out"),
            }
        )
        coordinator = _coordinator(config, factory)

        with pytest.raises(PerfRunnerMultiError) as exc_info:
            await coordinator.connect_all()

        assert len(exc_info.value.exceptions) == 2
        assert coordinator.gateways == {}


class TestCoordinatorRun:
    @pytest.mark.asyncio
    async def test_repeats_are_labeled_and_delayed_between_runs(self):
        config = make_config([two_node_test(repeat=3, delay="5s")])
        coordinator = _coordinator(config, GatewayFactory())
        await coordinator.connect_all()

        with patch(
            "perf_runner.orchestrator.coordinator.asyncio.sleep", new_callable=AsyncMock
        ) as mock_sleep:
            results = await coordinator.run_all()

        assert [r.label for r in results] == ["repeat_0001", "repeat_0002", "repeat_0003"]
        assert all(r.success for r in results)
        delays = [call.args[0] for call in mock_sleep.await_args_list if call.args[0] == 5.0]
        assert len(delays) == 2

    @pytest.mark.asyncio
    async def test_failed_repeat_does_not_stop_later_repeats(self):
        config = make_config([two_node_test(repeat=3)])
        coordinator = _coordinator(config, GatewayFactory())
        outcomes = [
            TestResult(scenario_name="tcp baseline", label="repeat_0001", success=False, error="boom"),
            TestResult(scenario_name="tcp baseline", label="repeat_0002", success=True),
            TestResult(scenario_name="tcp baseline", label="repeat_0003", success=True),
        ]

        with patch.object(coordinator, "run_scenario", side_effect=outcomes) as mock_run:
            results = await coordinator.execute(
                config.tests[0], RepeatStrategy(repeat=3)
            )

        assert mock_run.await_count == 3
        assert [r.success for r in results] == [False, True, True]

    @pytest.mark.asyncio
    async def test_no_delay_after_last_run(self):
        config = make_config([two_node_test()])
        coordinator = _coordinator(config, GatewayFactory())
        result = TestResult(scenario_name="tcp baseline", success=True)

        with (
            patch.object(coordinator, "run_scenario", return_value=result),
            patch(
                "perf_runner.orchestrator.coordinator.asyncio.sleep",
                new_callable=AsyncMock,
            ) as mock_sleep,
        ):
            await coordinator.execute(
                config.tests[0], RepeatStrategy(repeat=1, delay_seconds=10.0)
            )

        mock_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unexpected_error_becomes_failed_result(self):
        config = make_config([two_node_test()])
        coordinator = _coordinator(config, GatewayFactory())
        await coordinator.connect_all()

        with patch(
            "perf_runner.orchestrator.coordinator.TopologyExecutor.run",
            side_effect=RuntimeError("kaboom"),
        ):
            result = await coordinator.run_scenario(config.tests[0], "repeat_0001")

        assert result.success is False
        assert result.error == "unexpected error: kaboom"
        assert result.label == "repeat_0001"

    @pytest.mark.asyncio
    async def test_results_kept_on_coordinator(self):
        config = make_config([two_node_test("a"), two_node_test("b")])
        coordinator = _coordinator(config, GatewayFactory())
        await coordinator.connect_all()

        results = await coordinator.run_all()

        assert [r.scenario_name for r in coordinator.results] == ["a", "b"]
        assert results == coordinator.results

    def test_timeout_argument_overrides_document(self):
        config = make_config([two_node_test()])
        assert Coordinator(config, timeout=5.0).timeout == 5.0
        assert Coordinator(config).timeout == 30.0


class TestCoordinatorCleanup:
    @pytest.mark.asyncio
    async def test_cleanup_is_idempotent(self):
        config = make_config([two_node_test()])
        factory = GatewayFactory()
        coordinator = _coordinator(config, factory)
        await coordinator.connect_all()

        await coordinator.cleanup()
        await coordinator.cleanup()

        assert coordinator.gateways == {}
        assert all(gateway.close_count == 1 for gateway in factory.created.values())

    @pytest.mark.asyncio
    async def test_close_errors_are_logged_not_raised(self, caplog):
        config = make_config([two_node_test()])
        factory = GatewayFactory()
        coordinator = _coordinator(config, factory)
        await coordinator.connect_all()
        factory.created["client"].close_error = OSError("socket already closed")

        await coordinator.cleanup()

        assert factory.created["server"].close_count == 1
        assert "Error closing connection to client" in caplog.text

    @pytest.mark.asyncio
    async def test_context_manager(self):
        config = make_config([two_node_test()])
        factory = GatewayFactory()

        async with _coordinator(config, factory) as coordinator:
            assert set(coordinator.gateways) == {"client", "server"}

        assert all(gateway.close_count == 1 for gateway in factory.created.values())
