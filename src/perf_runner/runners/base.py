# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Base class for benchmark tool runners."""

import math
import shlex
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import ClassVar

from perf_runner.common.config.runner_config import EffectiveConfig
from perf_runner.common.enums import Role
from perf_runner.common.exceptions import ValidationError
from perf_runner.orchestrator.models import Result
from perf_runner.runners.flags import FlagSpec, render_flags

__all__ = [
    "BaseRunner",
    "binary_check_command",
    "build_env_prefix",
    "duration_seconds",
    "version_command",
]


def build_env_prefix(env: Mapping[str, str]) -> str:
    """Render environment variables as a command prefix.

    Keys are sorted so the prefix is stable; values are shell-quoted when
    needed. Returns ``"A=1 B='two words' "`` (note the trailing space) or an
    empty string.
    """
    if not env:
        return ""
    return "".join(f"{key}={shlex.quote(env[key])} " for key in sorted(env))


def duration_seconds(duration: float) -> int:
    """Whole seconds for a tool duration flag, rounded up (``0.5`` -> ``1``)."""
    return math.ceil(duration)


def binary_check_command(executable: str) -> str:
    """Shell command that succeeds iff the executable exists and is executable."""
    quoted = shlex.quote(executable)
    return f'command -v {quoted} >/dev/null 2>&1 && test -x "$(command -v {quoted})"'


def version_command(executable: str) -> str:
    return f"{shlex.quote(executable)} --version 2>/dev/null | head -1 || echo 'Version unknown'"


class BaseRunner(ABC):
    """Strategy for one benchmark tool.

    A runner turns an :class:`EffectiveConfig` into a shell command for a role
    and turns the captured output of that command into metrics.

    Subclasses declare:
        name: Registry name of the runner
        default_executable: Binary used when no override is configured
        supported_roles: Roles the tool can play
        flag_table: Parameter-to-flag rows shared by every role
        handled_params: Parameters consumed by the runner outside the table
    """

    name: ClassVar[str]
    default_executable: ClassVar[str]
    supported_roles: ClassVar[frozenset[Role]]
    flag_table: ClassVar[tuple[FlagSpec, ...]] = ()
    handled_params: ClassVar[frozenset[str]] = frozenset()

    def __init__(self, executable: str | None = None) -> None:
        """Initialize the runner.

        Args:
            executable: Path to the tool binary, overriding ``default_executable``
        """
        self.executable = executable or self.default_executable

    def supports_role(self, role: Role) -> bool:
        return role in self.supported_roles

    def executable_for_role(self, role: Role) -> str:
        """Binary a role actually runs, used for the pre-flight existence check."""
        return self.executable

    def readiness_port(self, config: EffectiveConfig) -> int | None:
        """TCP port a listening role binds, or None if the tool does not listen on TCP."""
        return None

    def validate(self, config: EffectiveConfig) -> None:
        """Check that a resolved configuration can be executed.

        Raises:
            ValidationError: If the role is unsupported, a connecting role has
                no destination, or a tool-specific rule is violated.
        """
        if not self.supports_role(config.role):
            raise ValidationError(
                f"runner {self.name} does not support role {config.role}"
            )
        if not 0 <= config.port <= 65535:
            raise ValidationError("port must be between 0 and 65535")
        if config.role in (Role.CLIENT, Role.INTERMEDIATE) and not config.destination:
            raise ValidationError(
                f"target_host or host is required for {config.role} role"
            )
        self.validate_args(config)

    def validate_args(self, config: EffectiveConfig) -> None:  # noqa: B027
        """Tool-specific parameter checks. Override to add rules."""
        pass

    def build_command(self, config: EffectiveConfig) -> str:
        """Build the full command line, environment prefix included.

        The same configuration always yields the same text.
        """
        words = self.command_words(config)
        return build_env_prefix(config.env) + " ".join(shlex.quote(w) for w in words)

    def render_args(self, args: Mapping) -> list[str]:
        return render_flags(self.flag_table, args, handled=self.handled_params)

    @abstractmethod
    def command_words(self, config: EffectiveConfig) -> list[str]:
        """Return the command as a list of words (without the environment prefix)."""
        pass

    @abstractmethod
    def parse_metrics(self, result: Result) -> None:
        """Extract metrics from ``result.output`` into ``result.metrics``.

        Metrics that cannot be found are left out.

        Raises:
            MetricParseError: If a structured output block is present but malformed.
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(executable={self.executable!r})"
