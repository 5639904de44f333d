# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""SSH connection settings for a single host."""

import os
from typing import Annotated

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator

from perf_runner.common.durations import parse_duration
from perf_runner.common.environment import Environment

__all__ = ["DurationSeconds", "SSHConfig"]

DurationSeconds = Annotated[float, BeforeValidator(parse_duration)]


class SSHConfig(BaseModel):
    """How to reach a host's management interface.

    Attributes:
        host: Hostname or address of the SSH endpoint
        port: SSH port
        user: Login user
        key_path: Private key file (``~`` is expanded)
        password: Password, used when no key is configured
        connect_timeout: Seconds allowed for the connection handshake
        command_timeout: Upper bound in seconds for any single command
    """

    model_config = ConfigDict(extra="ignore")

    host: str = ""
    port: int = Field(
        default_factory=lambda: Environment.SSH.DEFAULT_PORT, ge=1, le=65535
    )
    user: str = ""
    key_path: str | None = None
    password: str | None = Field(default=None, repr=False)
    connect_timeout: DurationSeconds = Field(
        default_factory=lambda: Environment.SSH.CONNECT_TIMEOUT
    )
    command_timeout: DurationSeconds = Field(
        default_factory=lambda: Environment.SSH.COMMAND_TIMEOUT
    )

    @field_validator("key_path", mode="before")
    @classmethod
    def expand_key_path(cls, value: str | None) -> str | None:
        if not value:
            return None
        return os.path.expanduser(str(value))

    @field_validator("port", mode="before")
    @classmethod
    def default_port(cls, value: int | None) -> int:
        """A zero or missing port means the default SSH port."""
        return value or Environment.SSH.DEFAULT_PORT

    @field_validator("connect_timeout", "command_timeout", mode="after")
    @classmethod
    def default_timeouts(cls, value: float, info) -> float:
        if value > 0:
            return value
        if info.field_name == "connect_timeout":
            return Environment.SSH.CONNECT_TIMEOUT
        return Environment.SSH.COMMAND_TIMEOUT

    @property
    def address(self) -> str:
        return f"{self.user}@{self.host}:{self.port}"
