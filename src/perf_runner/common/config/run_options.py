# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Command-line options for a benchmark run."""

from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from perf_runner.common.config.cli_parameter import CLIParameter
from perf_runner.common.config.groups import Groups
from perf_runner.common.durations import parse_duration
from perf_runner.common.enums import OutputFormat

__all__ = ["RunOptions"]


class RunOptions(BaseSettings):
    """Options accepted by the ``perf-runner`` command.

    Every option can also be provided through a ``PERF_RUNNER_<NAME>``
    environment variable.
    """

    model_config = SettingsConfigDict(
        env_prefix="PERF_RUNNER_",
        extra="ignore",
    )

    config: Annotated[
        Path,
        Field(description="Path to the YAML configuration document."),
        CLIParameter(name=("--config", "-c"), group=Groups.RUN),
    ] = Path("config.yaml")

    timeout: Annotated[
        str | None,
        Field(
            description="Per-scenario timeout such as 90s or 15m. Overrides the timeout in the configuration document.",
        ),
        CLIParameter(name=("--timeout", "-t"), group=Groups.RUN),
    ] = None

    verbose: Annotated[
        bool,
        Field(description="Enable debug logging."),
        CLIParameter(name=("--verbose", "-v"), group=Groups.OUTPUT),
    ] = False

    json_output: Annotated[
        bool,
        Field(description="Print results as a JSON document instead of a text report."),
        CLIParameter(name=("--json",), group=Groups.OUTPUT),
    ] = False

    log_file: Annotated[
        Path | None,
        Field(description="Also write log records to this file."),
        CLIParameter(name=("--log-file",), group=Groups.OUTPUT),
    ] = None

    @field_validator("timeout", mode="after")
    @classmethod
    def validate_timeout(cls, value: str | None) -> str | None:
        if value is not None and parse_duration(value) <= 0:
            raise ValueError(f"timeout must be positive, got {value!r}")
        return value

    @property
    def timeout_seconds(self) -> float | None:
        """The timeout override in seconds, or None when not given."""
        if self.timeout is None:
            return None
        return parse_duration(self.timeout)

    @property
    def output_format(self) -> OutputFormat:
        return OutputFormat.JSON if self.json_output else OutputFormat.TEXT
