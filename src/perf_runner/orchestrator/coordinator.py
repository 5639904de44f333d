# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Coordinator: owns host connections and runners, and runs every scenario."""

import asyncio
import logging
from collections.abc import Callable

from perf_runner.common.config.ssh_config import SSHConfig
from perf_runner.common.config.test_config import TestConfig, TestScenario
from perf_runner.common.enums import Role
from perf_runner.common.exceptions import PerfRunnerMultiError
from perf_runner.orchestrator.executor import TopologyExecutor
from perf_runner.orchestrator.models import TestResult
from perf_runner.orchestrator.readiness import SettleStrategy, create_settle_strategy
from perf_runner.orchestrator.strategies import ExecutionStrategy, RepeatStrategy
from perf_runner.remote.protocols import RemoteGateway
from perf_runner.remote.ssh_client import SSHGateway
from perf_runner.runners.base import BaseRunner

logger = logging.getLogger(__name__)

__all__ = [
    "Coordinator",
    "GatewayFactory",
]

GatewayFactory = Callable[[str, SSHConfig], RemoteGateway]


class Coordinator:
    """Runs every scenario of a configuration document.

    Connections and runners are set up once (``connect_all`` and
    ``register_runner``) before any scenario starts and are only read while
    scenarios run. Use as an async context manager to connect on entry and
    always clean up on exit.
    """

    def __init__(
        self,
        config: TestConfig,
        gateway_factory: GatewayFactory = SSHGateway,
        timeout: float | None = None,
        settle: SettleStrategy | None = None,
    ) -> None:
        """Initialize Coordinator.

        Args:
            config: Validated configuration document
            gateway_factory: Builds a gateway from a host name and its SSH settings
            timeout: Per-scenario timeout overriding ``config.timeout``
            settle: Settle strategy overriding ``config.settle``
        """
        self.config = config
        self.gateway_factory = gateway_factory
        self.timeout = timeout or config.timeout
        self.settle = settle or create_settle_strategy(config.settle)
        self.gateways: dict[str, RemoteGateway] = {}
        self.runners: dict[Role, BaseRunner] = {}
        self.connection_errors: dict[str, Exception] = {}
        self.results: list[TestResult] = []

    async def __aenter__(self) -> "Coordinator":
        await self.connect_all()
        return self

    async def __aexit__(self, exc_type, exc_value, traceback) -> None:
        await self.cleanup()

    def register_runner(self, role: Role, runner: BaseRunner) -> None:
        """Use a runner for every scenario role of the given kind."""
        self.runners[Role(role)] = runner
        logger.debug(f"Using {runner.name} runner for {role} role")

    async def connect_all(self) -> None:
        """Connect to every host used by a scenario, in parallel.

        Hosts that cannot be reached are recorded in ``connection_errors``;
        scenarios that need them fail without starting anything.

        Raises:
            PerfRunnerMultiError: If no host could be reached at all
        """
        host_names = self.config.referenced_hosts()
        gateways = {
            name: self.gateway_factory(name, self.config.hosts[name].ssh)
            for name in host_names
        }
        logger.info(f"Connecting to {len(gateways)} hosts: {', '.join(gateways)}")

        outcomes = await asyncio.gather(
            *(gateway.connect() for gateway in gateways.values()),
            return_exceptions=True,
        )

        for (name, gateway), outcome in zip(gateways.items(), outcomes, strict=True):
            if isinstance(outcome, Exception):
                logger.error(f"Failed to connect to {name}: {outcome}")
                self.connection_errors[name] = outcome
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                self.gateways[name] = gateway

        if gateways and not self.gateways:
            raise PerfRunnerMultiError(
                "failed to connect to hosts", list(self.connection_errors.values())
            )

    async def run_all(self) -> list[TestResult]:
        """Run every scenario in order, each as many times as it asks for.

        A failed run never stops later runs or scenarios.
        Finished scenarios are also kept in ``results`` so they can be
        reported if the run is interrupted.
        """
        self.results = []
        for index, scenario in enumerate(self.config.tests):
            logger.info(
                f"=== Scenario {index + 1}/{len(self.config.tests)}: {scenario.name} ==="
            )
            self.results.extend(
                await self.execute(scenario, RepeatStrategy.for_scenario(scenario))
            )

        successful = sum(1 for r in self.results if r.success)
        logger.info(f"All runs complete: {successful}/{len(self.results)} successful")
        return list(self.results)

    async def execute(
        self, scenario: TestScenario, strategy: ExecutionStrategy
    ) -> list[TestResult]:
        """Run one scenario as directed by a strategy.

        Args:
            scenario: Scenario to run
            strategy: Decides how many runs and the pause between them

        Returns:
            List of TestResult, one per run executed
        """
        results: list[TestResult] = []
        run_index = 0

        should_continue = strategy.should_continue(results)
        while should_continue:
            label = strategy.get_run_label(run_index)
            logger.info(f"[{run_index + 1}] Executing {scenario.name} {label}...")

            result = await self.run_scenario(scenario, label)
            results.append(result)

            if result.success:
                logger.info(f"[{run_index + 1}] {label} completed successfully")
            else:
                logger.error(
                    f"[{run_index + 1}] {label} failed"
                    + (f": {result.error}" if result.error else "")
                )

            run_index += 1
            should_continue = strategy.should_continue(results)

            # Pause only if another run is coming
            if should_continue:
                cooldown = strategy.get_cooldown_seconds()
                if cooldown > 0:
                    logger.info(f"Waiting {cooldown}s before the next repeat")
                    await asyncio.sleep(cooldown)

        return results

    async def run_scenario(self, scenario: TestScenario, label: str = "") -> TestResult:
        """Run a scenario once. Unexpected errors become a failed result."""
        unreachable = [
            name for name in scenario.host_names if name in self.connection_errors
        ]
        if unreachable:
            return TestResult(
                scenario_name=scenario.name,
                label=label,
                success=False,
                error="; ".join(
                    f"host '{name}' is unreachable: {self.connection_errors[name]}"
                    for name in unreachable
                ),
            )

        executor = TopologyExecutor(
            scenario,
            self.config,
            gateways=self.gateways,
            runners=self.runners,
            settle=self.settle,
            timeout=self.timeout,
        )
        try:
            return await executor.run(label)
        except Exception as e:
            logger.exception(f"Unexpected error running {scenario.name}: {e}")
            return TestResult(
                scenario_name=scenario.name,
                label=label,
                success=False,
                error=f"unexpected error: {e}",
            )

    async def cleanup(self) -> None:
        """Close every connection. Never raises; close errors are logged."""
        gateways, self.gateways = self.gateways, {}
        for name, gateway in gateways.items():
            await self._close_gateway(name, gateway)

    @staticmethod
    async def _close_gateway(name: str, gateway: RemoteGateway) -> None:
        try:
            await gateway.close()
        except Exception as e:
            logger.warning(f"Error closing connection to {name}: {e}")
