# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Registry of available benchmark runners."""

import logging
from collections.abc import Callable

from perf_runner.common.exceptions import NotFoundError
from perf_runner.runners.base import BaseRunner

logger = logging.getLogger(__name__)

__all__ = [
    "RunnerFactory",
    "RunnerRegistry",
    "create_default_registry",
]

RunnerFactory = Callable[[str | None], BaseRunner]


class RunnerRegistry:
    """Maps runner names to factories.

    Build one at process start (see :func:`create_default_registry`) and pass
    it to whatever needs to create runners.
    """

    def __init__(self) -> None:
        self._factories: dict[str, RunnerFactory] = {}

    def register(self, name: str, factory: RunnerFactory) -> None:
        """Register a runner factory under a name.

        Raises:
            ValueError: If the name is already registered
        """
        if name in self._factories:
            raise ValueError(f"Runner {name!r} is already registered")
        self._factories[name] = factory
        logger.debug(f"Registered runner {name!r}")

    def create(self, name: str, executable: str | None = None) -> BaseRunner:
        """Create a fresh runner instance.

        Args:
            name: Registered runner name
            executable: Optional path overriding the runner's default binary

        Raises:
            NotFoundError: If no runner is registered under the name
        """
        try:
            factory = self._factories[name]
        except KeyError:
            raise NotFoundError(
                f"runner {name!r} not found. Available runners: {', '.join(self.names())}"
            ) from None
        return factory(executable)

    def names(self) -> list[str]:
        return sorted(self._factories)

    def __contains__(self, name: object) -> bool:
        return name in self._factories

    def __len__(self) -> int:
        return len(self._factories)


def create_default_registry() -> RunnerRegistry:
    """Registry with every runner shipped with perf-runner."""
    from perf_runner.runners.ib_send_bw import IbSendBwRunner
    from perf_runner.runners.iperf3 import Iperf3Runner
    from perf_runner.runners.testpmd import TestpmdRunner

    registry = RunnerRegistry()
    for runner_cls in (Iperf3Runner, IbSendBwRunner, TestpmdRunner):
        registry.register(runner_cls.name, runner_cls)
    return registry
