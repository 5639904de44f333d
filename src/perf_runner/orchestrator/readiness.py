# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Strategies for waiting until a listening role can accept connections."""

import asyncio
import logging
from abc import ABC, abstractmethod

from perf_runner.common.config.test_config import SettleConfig
from perf_runner.common.enums import SettleMode
from perf_runner.common.exceptions import RemoteExecutionError
from perf_runner.remote.protocols import RemoteGateway

logger = logging.getLogger(__name__)

__all__ = [
    "FixedDelaySettle",
    "PortProbeSettle",
    "SettleStrategy",
    "create_settle_strategy",
    "port_probe_command",
]


def port_probe_command(port: int) -> str:
    """Command that prints a line iff something listens on the TCP port."""
    return f"ss -Hltn 'sport = :{port}' 2>/dev/null"


def _remaining(deadline: float) -> float:
    return max(0.0, deadline - asyncio.get_running_loop().time())


class SettleStrategy(ABC):
    """Decides when the role after a listener may be started."""

    @abstractmethod
    async def settle(
        self,
        gateway: RemoteGateway,
        port: int | None,
        listener: asyncio.Task,
        deadline: float,
    ) -> bool:
        """Wait until the listener is (probably) ready.

        Args:
            gateway: Connection to the listener's host
            port: TCP port the listener binds, if known
            listener: Task running the listener's command
            deadline: Loop time after which the scenario has timed out

        Returns:
            True if readiness was confirmed, False if the wait just ran out
        """
        pass


class FixedDelaySettle(SettleStrategy):
    """Sleep a fixed delay (never past the deadline)."""

    def __init__(self, delay: float) -> None:
        if delay < 0:
            raise ValueError(f"Settle delay must be non-negative, got {delay}")
        self.delay = delay

    async def settle(
        self,
        gateway: RemoteGateway,
        port: int | None,
        listener: asyncio.Task,
        deadline: float,
    ) -> bool:
        delay = min(self.delay, _remaining(deadline))
        if delay > 0:
            logger.debug(f"Waiting {delay:.2f}s for {gateway.host_id} to settle")
            await asyncio.sleep(delay)
        return False


class PortProbeSettle(SettleStrategy):
    """Poll the listener's host until its port is bound.

    Falls back to a fixed delay when the runner has no TCP port to probe.
    If the port is not seen before ``probe_timeout``, a warning is logged and
    the next role is started anyway.
    """

    def __init__(
        self, probe_timeout: float, probe_interval: float, fallback: FixedDelaySettle
    ) -> None:
        self.probe_timeout = probe_timeout
        self.probe_interval = probe_interval
        self.fallback = fallback

    async def settle(
        self,
        gateway: RemoteGateway,
        port: int | None,
        listener: asyncio.Task,
        deadline: float,
    ) -> bool:
        if port is None:
            return await self.fallback.settle(gateway, port, listener, deadline)

        loop = asyncio.get_running_loop()
        give_up = min(loop.time() + self.probe_timeout, deadline)
        command = port_probe_command(port)
        attempts = 0

        while loop.time() < give_up:
            if listener.done():
                logger.debug(f"Listener on {gateway.host_id} exited before becoming ready")
                return False
            attempts += 1
            try:
                probe = await gateway.execute_command(
                    command, timeout=max(0.1, give_up - loop.time())
                )
            except RemoteExecutionError as e:
                logger.debug(f"Readiness probe on {gateway.host_id} failed: {e}")
            else:
                if probe.exit_code == 0 and probe.output.strip():
                    logger.debug(
                        f"Port {port} on {gateway.host_id} is listening after {attempts} probe(s)"
                    )
                    return True
            await asyncio.sleep(min(self.probe_interval, max(0.0, give_up - loop.time())))

        logger.warning(
            f"Port {port} on {gateway.host_id} not seen listening within "
            f"{self.probe_timeout:.1f}s, starting next role anyway"
        )
        return False


def create_settle_strategy(config: SettleConfig) -> SettleStrategy:
    fixed = FixedDelaySettle(config.delay)
    if config.mode == SettleMode.FIXED:
        return fixed
    return PortProbeSettle(
        probe_timeout=config.probe_timeout,
        probe_interval=config.probe_interval,
        fallback=fixed,
    )
