# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Exception hierarchy for perf-runner."""

__all__ = [
    "ConfigurationError",
    "MetricParseError",
    "NotFoundError",
    "PerfRunnerError",
    "PerfRunnerMultiError",
    "RemoteConnectionError",
    "RemoteExecutionError",
    "RemoteTimeoutError",
    "ValidationError",
]


class PerfRunnerError(Exception):
    """Base class for all exceptions raised by perf-runner."""

    def raw_str(self) -> str:
        """Return the message without the class name prefix."""
        return super().__str__()

    def __str__(self) -> str:
        return f"{self.__class__.__name__}: {super().__str__()}"


class PerfRunnerMultiError(PerfRunnerError):
    """Raised when several concurrent operations fail together."""

    def __init__(self, message: str, exceptions: list[Exception]) -> None:
        err_strings = [
            e.raw_str() if isinstance(e, PerfRunnerError) else str(e)
            for e in exceptions
        ]
        super().__init__(f"{message}: {'; '.join(err_strings)}")
        self.exceptions = exceptions


class ConfigurationError(PerfRunnerError):
    """The configuration document is malformed or inconsistent."""


class ValidationError(PerfRunnerError):
    """A resolved role configuration cannot be executed by its runner."""


class NotFoundError(PerfRunnerError):
    """Something that was asked for is not registered or not available."""


class RemoteConnectionError(PerfRunnerError):
    """A remote host could not be reached or authenticated."""


class RemoteExecutionError(PerfRunnerError):
    """The transport failed while running a remote command."""


class RemoteTimeoutError(RemoteExecutionError):
    """A remote command did not finish before its deadline."""


class MetricParseError(PerfRunnerError):
    """Captured tool output could not be parsed into metrics."""
