# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Interface of a connection that runs commands on a remote host."""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

__all__ = [
    "CommandOutput",
    "RemoteGateway",
]


@dataclass(frozen=True, slots=True)
class CommandOutput:
    """What a finished remote command produced."""

    output: str
    exit_code: int


@runtime_checkable
class RemoteGateway(Protocol):
    """A connection to one host.

    ``execute_command`` raises :class:`RemoteTimeoutError` when the command
    outlives ``timeout`` (the remote process is terminated) and
    :class:`RemoteExecutionError` when the transport fails. A non-zero exit
    status is not an error. ``close`` may be called any number of times.
    """

    host_id: str

    async def connect(self) -> None: ...

    async def execute_command(
        self, command: str, timeout: float | None = None
    ) -> CommandOutput: ...

    async def close(self) -> None: ...
