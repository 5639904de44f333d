# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import asyncio
import contextlib
import logging
import signal
import time
from typing import TYPE_CHECKING

from perf_runner.common.config import RunOptions, TestConfig, load_test_config
from perf_runner.common.enums import OutputFormat
from perf_runner.common.environment import Environment
from perf_runner.common.exceptions import ConfigurationError
from perf_runner.common.logging import setup_rich_logging

if TYPE_CHECKING:
    from perf_runner.orchestrator.coordinator import Coordinator
    from perf_runner.orchestrator.models import TestResult

logger = logging.getLogger(__name__)


def run_benchmarks(options: RunOptions) -> int:
    """Load the configuration document, run every scenario and report the results.

    Returns:
        0 if every scenario run passed, 1 otherwise (or if the run was interrupted)

    Raises:
        ConfigurationError: If the document cannot be loaded or names an unknown runner
        PerfRunnerMultiError: If no host can be reached
    """
    setup_rich_logging(
        "DEBUG" if options.verbose else Environment.LOGGING.LEVEL,
        log_file=options.log_file,
    )

    config = load_test_config(options.config)
    logger.info(
        f"Loaded {config.name or options.config}: "
        f"{len(config.tests)} test(s) across {len(config.hosts)} host(s)"
    )

    coordinator = build_coordinator(config, timeout=options.timeout_seconds)

    started = time.perf_counter()
    interrupted = False
    try:
        results = asyncio.run(_run_with_signals(coordinator))
    except asyncio.CancelledError:
        logger.warning("Run interrupted, reporting finished scenarios only")
        interrupted = True
        results = coordinator.results
    total_duration = time.perf_counter() - started

    export_results(
        results,
        total_duration,
        output_format=options.output_format,
        show_output=options.verbose,
    )
    if interrupted or not results:
        return 1
    return 0 if all(r.success for r in results) else 1


def build_coordinator(config: TestConfig, timeout: float | None = None) -> "Coordinator":
    """Create the coordinator and one runner per role in use.

    Raises:
        ConfigurationError: If a role's runner is not registered
    """
    from perf_runner.common.exceptions import NotFoundError
    from perf_runner.orchestrator.coordinator import Coordinator
    from perf_runner.runners import create_default_registry

    registry = create_default_registry()
    coordinator = Coordinator(config, timeout=timeout)

    for role in sorted(config.roles_in_use()):
        name = config.runner_for_role(role)
        try:
            runner = registry.create(name, executable=config.binary_paths.get(name))
        except NotFoundError as e:
            raise ConfigurationError(f"{role} role: {e.raw_str()}") from e
        coordinator.register_runner(role, runner)

    if config.has_mixed_runners():
        logger.info(
            "Using different runners per role: "
            + ", ".join(f"{role}={runner.name}" for role, runner in coordinator.runners.items())
        )
    return coordinator


async def _run_with_signals(coordinator: "Coordinator") -> list["TestResult"]:
    """Run every scenario, stopping all remote work on SIGINT/SIGTERM."""
    loop = asyncio.get_running_loop()
    main_task = asyncio.current_task()

    def _on_signal(sig: signal.Signals) -> None:
        logger.warning(f"Received {sig.name}, stopping all tests")
        if main_task is not None:
            main_task.cancel()

    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, _on_signal, sig)

    try:
        await coordinator.connect_all()
        return await coordinator.run_all()
    finally:
        await coordinator.cleanup()
        for sig in (signal.SIGINT, signal.SIGTERM):
            with contextlib.suppress(NotImplementedError):
                loop.remove_signal_handler(sig)


def export_results(
    results: list["TestResult"],
    total_duration: float,
    output_format: OutputFormat = OutputFormat.TEXT,
    show_output: bool = False,
) -> None:
    from perf_runner.exporters import (
        ConsoleResultsExporter,
        JsonResultsExporter,
        ResultsExporterConfig,
    )

    config = ResultsExporterConfig(
        results=results, total_duration=total_duration, show_output=show_output
    )
    if output_format == OutputFormat.JSON:
        JsonResultsExporter(config).export()
    else:
        ConsoleResultsExporter(config).export()
