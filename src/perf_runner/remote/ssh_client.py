# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""SSH implementation of the remote gateway, built on paramiko."""

import asyncio
import logging
import threading
import time

import paramiko

from perf_runner.common.config.ssh_config import SSHConfig
from perf_runner.common.environment import Environment
from perf_runner.common.exceptions import (
    RemoteConnectionError,
    RemoteExecutionError,
    RemoteTimeoutError,
)
from perf_runner.remote.protocols import CommandOutput

logger = logging.getLogger(__name__)

__all__ = ["SSHGateway"]

_RECV_BYTES = 32768


class SSHGateway:
    """Runs commands on one host over a single SSH connection.

    paramiko is blocking, so every call is moved to a worker thread. Several
    commands may run at once; each gets its own channel on the shared
    transport. Commands get a pseudo-terminal so stdout and stderr arrive
    interleaved, and closing the channel hangs up the remote process.
    """

    def __init__(
        self,
        host_id: str,
        config: SSHConfig,
        poll_interval: float | None = None,
    ) -> None:
        self.host_id = host_id
        self.config = config
        self.poll_interval = poll_interval or Environment.SSH.POLL_INTERVAL
        self._client: paramiko.SSHClient | None = None

    @property
    def is_connected(self) -> bool:
        if self._client is None:
            return False
        transport = self._client.get_transport()
        return transport is not None and transport.is_active()

    async def connect(self) -> None:
        """Open the connection.

        Raises:
            RemoteConnectionError: If the host cannot be reached or authentication fails
        """
        if self.is_connected:
            return
        await asyncio.to_thread(self._connect_blocking)
        logger.info(f"Connected to {self.host_id} ({self.config.address})")

    def _connect_blocking(self) -> None:
        client = paramiko.SSHClient()
        client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

        kwargs = {
            "hostname": self.config.host,
            "port": self.config.port,
            "username": self.config.user,
            "timeout": self.config.connect_timeout,
            "banner_timeout": self.config.connect_timeout,
            "auth_timeout": self.config.connect_timeout,
        }
        if self.config.key_path:
            kwargs["key_filename"] = self.config.key_path
        if self.config.password:
            kwargs["password"] = self.config.password
            if not self.config.key_path:
                kwargs["look_for_keys"] = False
                kwargs["allow_agent"] = False

        try:
            client.connect(**kwargs)
        except (paramiko.SSHException, OSError) as e:
            client.close()
            raise RemoteConnectionError(
                f"failed to connect to {self.host_id} ({self.config.address}): {e}"
            ) from e
        self._client = client

    async def execute_command(
        self, command: str, timeout: float | None = None
    ) -> CommandOutput:
        """Run a command and wait for it to exit.

        Args:
            command: Shell command line
            timeout: Seconds allowed; capped by the host's command_timeout

        Raises:
            RemoteTimeoutError: If the command did not exit in time
            RemoteExecutionError: If not connected or the transport failed
        """
        if self._client is None:
            raise RemoteExecutionError(f"not connected to {self.host_id}")

        limit = self.config.command_timeout
        if timeout is not None:
            limit = min(limit, timeout)
        if limit <= 0:
            raise RemoteTimeoutError(f"no time left to run command on {self.host_id}")

        logger.debug(f"[{self.host_id}] exec: {command}")
        cancelled = threading.Event()
        try:
            return await asyncio.to_thread(
                self._execute_blocking, command, limit, cancelled
            )
        except asyncio.CancelledError:
            # The worker thread notices the flag and closes its channel.
            cancelled.set()
            raise

    def _execute_blocking(
        self, command: str, limit: float, cancelled: threading.Event
    ) -> CommandOutput:
        client = self._client
        if client is None:
            raise RemoteExecutionError(f"connection to {self.host_id} was closed")

        deadline = time.monotonic() + limit
        chunks: list[bytes] = []
        try:
            _, stdout, _ = client.exec_command(command, get_pty=True, timeout=limit)
            channel = stdout.channel
            try:
                while True:
                    while channel.recv_ready():
                        chunks.append(channel.recv(_RECV_BYTES))
                    if channel.exit_status_ready() and not channel.recv_ready():
                        break
                    if cancelled.is_set():
                        raise RemoteExecutionError(
                            f"command on {self.host_id} was cancelled"
                        )
                    if time.monotonic() >= deadline:
                        raise RemoteTimeoutError(
                            f"command on {self.host_id} timed out after {limit:.1f}s"
                        )
                    time.sleep(self.poll_interval)
                exit_code = channel.recv_exit_status()
            finally:
                channel.close()
        except (paramiko.SSHException, OSError) as e:
            raise RemoteExecutionError(
                f"failed to run command on {self.host_id}: {e}"
            ) from e

        return CommandOutput(
            output=b"".join(chunks).decode("utf-8", errors="replace"),
            exit_code=exit_code,
        )

    async def close(self) -> None:
        """Close the connection. Safe to call more than once."""
        client, self._client = self._client, None
        if client is None:
            return
        await asyncio.to_thread(client.close)
        logger.debug(f"Closed connection to {self.host_id}")
