# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""
Environment-driven tunables for perf-runner.

Every setting can be overridden with an environment variable following the
pattern ``PERF_RUNNER_{SUBSYSTEM}_{SETTING_NAME}``, for example:

    PERF_RUNNER_EXECUTOR_SETTLE_MODE=fixed
    PERF_RUNNER_EXECUTOR_SETTLE_DELAY=5
    PERF_RUNNER_SSH_COMMAND_TIMEOUT=900
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from perf_runner.common.enums import SettleMode

__all__ = ["Environment"]


class _ExecutorSettings(BaseSettings):
    """Topology executor timing.

    Controls how the executor waits for a listening role before starting the
    role that connects to it, and how long it waits for intermediates after
    the client has finished.
    """

    model_config = SettingsConfigDict(env_prefix="PERF_RUNNER_EXECUTOR_")

    SETTLE_MODE: SettleMode = Field(
        default=SettleMode.PROBE,
        description="Default settle strategy: 'probe' polls the listening port, 'fixed' sleeps SETTLE_DELAY",
    )
    SETTLE_DELAY: float = Field(
        ge=0.0,
        le=3600.0,
        default=2.0,
        description="Seconds to wait after starting a listening role when using the fixed settle strategy",
    )
    PROBE_TIMEOUT: float = Field(
        ge=0.1,
        le=3600.0,
        default=10.0,
        description="Maximum seconds to poll for a listening port before proceeding anyway",
    )
    PROBE_INTERVAL: float = Field(
        ge=0.01,
        le=60.0,
        default=0.25,
        description="Seconds between readiness probe attempts",
    )
    INTERMEDIATE_GRACE: float = Field(
        ge=0.0,
        le=3600.0,
        default=5.0,
        description="Seconds to wait for intermediate roles after the server has finished",
    )


class _SSHSettings(BaseSettings):
    """SSH transport defaults, used when a host does not set them explicitly."""

    model_config = SettingsConfigDict(env_prefix="PERF_RUNNER_SSH_")

    DEFAULT_PORT: int = Field(
        ge=1,
        le=65535,
        default=22,
        description="SSH port used when a host does not specify one",
    )
    CONNECT_TIMEOUT: float = Field(
        ge=1.0,
        le=3600.0,
        default=30.0,
        description="Timeout in seconds for establishing an SSH connection",
    )
    COMMAND_TIMEOUT: float = Field(
        ge=1.0,
        le=86400.0,
        default=300.0,
        description="Upper bound in seconds for a single remote command",
    )
    POLL_INTERVAL: float = Field(
        ge=0.001,
        le=10.0,
        default=0.05,
        description="Seconds between checks of a running remote command",
    )


class _LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="PERF_RUNNER_LOGGING_")

    LEVEL: str = Field(
        default="INFO",
        description="Log level used when --verbose is not given",
    )


class _Environment(BaseSettings):
    """Root settings object grouping every subsystem."""

    model_config = SettingsConfigDict(
        env_prefix="PERF_RUNNER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow",
    )

    EXECUTOR: _ExecutorSettings = Field(
        default_factory=_ExecutorSettings,
        description="Topology executor timing settings",
    )
    LOGGING: _LoggingSettings = Field(
        default_factory=_LoggingSettings,
        description="Logging system settings",
    )
    SSH: _SSHSettings = Field(
        default_factory=_SSHSettings,
        description="SSH transport settings",
    )


Environment = _Environment()
