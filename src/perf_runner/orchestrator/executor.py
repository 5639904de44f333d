# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Topology executor: runs one scenario across its hosts and aggregates the outcome."""

import asyncio
import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime

from perf_runner.common.config.resolver import effective_config, merge_role_configs
from perf_runner.common.config.runner_config import EffectiveConfig
from perf_runner.common.config.test_config import TestConfig, TestScenario
from perf_runner.common.enums import ExecutorState, Role
from perf_runner.common.exceptions import (
    ConfigurationError,
    NotFoundError,
    PerfRunnerError,
    RemoteExecutionError,
    RemoteTimeoutError,
    ValidationError,
)
from perf_runner.orchestrator.models import Result, RoleName, TestResult
from perf_runner.orchestrator.readiness import SettleStrategy, create_settle_strategy
from perf_runner.orchestrator.topology import RoleStep, build_topology_plan
from perf_runner.remote.protocols import RemoteGateway
from perf_runner.runners.base import BaseRunner, binary_check_command, version_command

logger = logging.getLogger(__name__)

__all__ = [
    "RolePlan",
    "TIMEOUT_ERROR",
    "TopologyExecutor",
]

TIMEOUT_ERROR = "test timed out"

# Extra time given to a role's own remote deadline before its task is cancelled.
_DEADLINE_SLACK = 1.0

# Timeout for the pre-flight binary checks, which are quick shell builtins.
_VERIFY_TIMEOUT = 30.0


@dataclass(frozen=True, slots=True)
class RolePlan:
    """Everything needed to launch one role."""

    step: RoleStep
    runner: BaseRunner
    gateway: RemoteGateway
    config: EffectiveConfig
    command: str


class TopologyExecutor:
    """Runs a single scenario repeat.

    Roles are launched closest-to-server first, with a settle step after
    each listening role. The client drives the benchmark; once it returns,
    the server is collected (bounded by the shared deadline) and
    intermediates get a short grace period before they are stopped.

    An executor instance runs one scenario once; create a new one per repeat.
    """

    def __init__(
        self,
        scenario: TestScenario,
        config: TestConfig,
        gateways: Mapping[str, RemoteGateway],
        runners: Mapping[Role, BaseRunner],
        settle: SettleStrategy | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            scenario: Scenario to run
            config: Full configuration document (hosts, settle and timeout settings)
            gateways: Open connections keyed by host name
            runners: Runner per role
            settle: Settle strategy; built from ``config.settle`` when omitted
            timeout: Scenario timeout in seconds; defaults to ``config.timeout``
        """
        self.scenario = scenario
        self.config = config
        self.gateways = gateways
        self.runners = runners
        self.settle = settle or create_settle_strategy(config.settle)
        self.timeout = timeout or config.timeout
        self.intermediate_grace = config.settle.intermediate_grace
        self.state = ExecutorState.IDLE
        self._timed_out: list[str] = []

    def _transition(self, state: ExecutorState) -> None:
        logger.debug(f"[{self.scenario.name}] {self.state} -> {state}")
        self.state = state

    async def run(self, label: str = "") -> TestResult:
        """Run the scenario once and return its aggregated result.

        Configuration and pre-flight problems produce a failed result without
        starting any role. Cancellation of the caller stops every role.
        """
        result = TestResult(
            scenario_name=self.scenario.name,
            label=label,
            start_time=datetime.now(),
        )
        started = time.perf_counter()

        try:
            topology, steps = build_topology_plan(self.scenario)
            result.topology = topology
            plans = [self._prepare(step) for step in steps]
            for plan in plans:
                result.commands[plan.step.slot] = plan.command

            loop = asyncio.get_running_loop()
            deadline = loop.time() + self.timeout
            logger.info(
                f"Running {topology} test '{self.scenario.name}'"
                + (f" ({label})" if label else "")
            )

            if self.config.verify_binaries:
                await self._verify_binaries(plans)

            await self._launch_and_collect(plans, result, deadline)
        except (ConfigurationError, ValidationError, NotFoundError) as e:
            logger.error(f"[{self.scenario.name}] {e.raw_str()}")
            result.error = e.raw_str()
        finally:
            result.end_time = datetime.now()
            result.duration = time.perf_counter() - started

        if self._timed_out:
            result.error = (
                f"{TIMEOUT_ERROR}: {', '.join(self._timed_out)} did not finish before the deadline"
            )

        result.compute_success()
        if self._timed_out:
            self._transition(ExecutorState.TIMED_OUT)
        elif result.success:
            self._transition(ExecutorState.COMPLETED)
        else:
            self._transition(ExecutorState.FAILED)
        return result

    def _prepare(self, step: RoleStep) -> RolePlan:
        """Resolve configuration, validate it and build the command for one role.

        Raises:
            NotFoundError: If there is no runner for the role or no connection for the host
            ValidationError: If the runner rejects the resolved configuration
        """
        runner = self.runners.get(step.role)
        if runner is None:
            raise NotFoundError(f"no runner registered for {step.role} role")
        gateway = self.gateways.get(step.host)
        if gateway is None:
            raise NotFoundError(f"no connection for host '{step.host}'")
        host = self.config.hosts.get(step.host)
        if host is None:
            raise ConfigurationError(f"host '{step.host}' is not defined")

        merged = merge_role_configs(host.runner, self.scenario.config)
        if step.downstream is not None:
            downstream = self.config.hosts[step.downstream]
            updates = {"host": downstream.ssh.host if downstream.ssh else ""}
            if not merged.target_host and downstream.data_address:
                updates["target_host"] = downstream.data_address
            merged = merged.model_copy(update=updates)

        config = effective_config(merged, step.role)
        try:
            runner.validate(config)
        except ValidationError as e:
            raise ValidationError(
                f"{step.slot} on '{step.host}': {e.raw_str()}"
            ) from e

        return RolePlan(
            step=step,
            runner=runner,
            gateway=gateway,
            config=config,
            command=runner.build_command(config),
        )

    async def _verify_binaries(self, plans: list[RolePlan]) -> None:
        """Check that every role's executable exists on its host.

        Raises:
            ValidationError: If an executable is missing or the check could not run
        """
        for plan in plans:
            executable = plan.runner.executable_for_role(plan.step.role)
            try:
                check = await plan.gateway.execute_command(
                    binary_check_command(executable), timeout=_VERIFY_TIMEOUT
                )
                if check.exit_code != 0:
                    raise ValidationError(
                        f"binary '{executable}' not found or not executable on '{plan.step.host}'"
                    )
                version = await plan.gateway.execute_command(
                    version_command(executable), timeout=_VERIFY_TIMEOUT
                )
            except RemoteExecutionError as e:
                raise ValidationError(
                    f"could not verify binary '{executable}' on '{plan.step.host}': {e.raw_str()}"
                ) from e
            logger.info(
                f"{plan.step.slot} on {plan.step.host}: {executable} "
                f"({version.output.strip() or 'Version unknown'})"
            )

    async def _launch_and_collect(
        self, plans: list[RolePlan], result: TestResult, deadline: float
    ) -> None:
        tasks: dict[str, asyncio.Task] = {}
        *listeners, client_plan = plans
        try:
            for index, plan in enumerate(listeners):
                self._transition(
                    ExecutorState.SERVER_STARTING
                    if index == 0
                    else ExecutorState.INTERMEDIATE_STARTING
                )
                task = self._start(plan, deadline)
                tasks[plan.step.slot] = task
                await self.settle.settle(
                    plan.gateway,
                    plan.runner.readiness_port(plan.config),
                    task,
                    deadline,
                )

            self._transition(ExecutorState.CLIENT_RUNNING)
            client_task = self._start(client_plan, deadline)
            tasks[client_plan.step.slot] = client_task
            await self._collect_client(client_task, deadline)

            self._transition(ExecutorState.COLLECTING)
            if RoleName.CLIENT not in self._timed_out:
                await self._collect_server(tasks, deadline)
                await self._collect_intermediates(tasks, deadline)
        finally:
            await self._cancel_pending(tasks)
            for slot, task in tasks.items():
                role_result = self._task_result(slot, task)
                if role_result is not None:
                    result.results[slot] = role_result

    def _start(self, plan: RolePlan, deadline: float) -> asyncio.Task:
        logger.info(f"Starting {plan.step.slot} on {plan.step.host}: {plan.command}")
        return asyncio.create_task(
            self._run_role(plan, deadline), name=f"{self.scenario.name}:{plan.step.slot}"
        )

    async def _collect_client(self, client_task: asyncio.Task, deadline: float) -> None:
        remaining = max(0.0, deadline - asyncio.get_running_loop().time())
        done, _ = await asyncio.wait({client_task}, timeout=remaining + _DEADLINE_SLACK)
        if not done and RoleName.CLIENT not in self._timed_out:
            logger.warning(
                f"Client on {self.scenario.client} did not finish before the deadline"
            )
            self._timed_out.append(RoleName.CLIENT)

    async def _collect_server(
        self, tasks: dict[str, asyncio.Task], deadline: float
    ) -> None:
        server_task = tasks[RoleName.SERVER]
        remaining = max(0.0, deadline - asyncio.get_running_loop().time())
        done, _ = await asyncio.wait({server_task}, timeout=remaining + _DEADLINE_SLACK)
        if not done and RoleName.SERVER not in self._timed_out:
            logger.warning(f"Server on {self.scenario.server} did not finish before the deadline")
            self._timed_out.append(RoleName.SERVER)

    async def _collect_intermediates(
        self, tasks: dict[str, asyncio.Task], deadline: float
    ) -> None:
        pending = [
            task
            for slot, task in tasks.items()
            if slot not in (RoleName.CLIENT, RoleName.SERVER)
        ]
        if not pending:
            return
        remaining = max(0.0, deadline - asyncio.get_running_loop().time())
        _, not_done = await asyncio.wait(
            pending, timeout=min(self.intermediate_grace, remaining)
        )
        for task in not_done:
            logger.warning(
                f"intermediate node did not complete within timeout ({task.get_name()}), stopping it"
            )

    @staticmethod
    async def _cancel_pending(tasks: dict[str, asyncio.Task]) -> None:
        pending = [task for task in tasks.values() if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    def _task_result(self, slot: str, task: asyncio.Task) -> Result | None:
        if not task.done() or task.cancelled():
            return None
        if (exc := task.exception()) is not None:
            logger.error(f"{slot} task failed unexpectedly: {exc!r}")
            return Result(success=False, error=str(exc))
        return task.result()

    async def _run_role(self, plan: RolePlan, deadline: float) -> Result:
        """Run one role's command and turn the outcome into a Result."""
        slot = plan.step.slot
        start_time = datetime.now()
        started = time.perf_counter()
        remaining = max(0.0, deadline - asyncio.get_running_loop().time())

        try:
            output = await plan.gateway.execute_command(plan.command, timeout=remaining)
        except RemoteTimeoutError as e:
            self._timed_out.append(slot)
            logger.error(f"{slot} on {plan.step.host} timed out: {e.raw_str()}")
            result = Result(success=False, error=e.raw_str())
        except RemoteExecutionError as e:
            logger.error(f"{slot} execution failed on {plan.step.host}: {e.raw_str()}")
            result = Result(success=False, error=f"{slot} execution failed: {e.raw_str()}")
        else:
            result = Result(
                success=output.exit_code == 0,
                output=output.output,
                exit_code=output.exit_code,
                error=""
                if output.exit_code == 0
                else f"{slot} exited with status {output.exit_code}",
            )

        result.start_time = start_time
        result.end_time = datetime.now()
        result.duration = time.perf_counter() - started

        if result.output:
            self._parse_metrics(plan, result)

        if result.success:
            logger.info(f"{slot} on {plan.step.host} finished in {result.duration:.2f}s")
        return result

    def _parse_metrics(self, plan: RolePlan, result: Result) -> None:
        try:
            plan.runner.parse_metrics(result)
        except PerfRunnerError as e:
            logger.warning(f"Could not parse {plan.step.slot} metrics: {e.raw_str()}")
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Could not parse {plan.step.slot} metrics: {e!r}")
