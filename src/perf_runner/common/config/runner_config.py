# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Per-role runner configuration models."""

from typing import Any, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, field_validator

from perf_runner.common.config.ssh_config import DurationSeconds
from perf_runner.common.enums import Role

__all__ = [
    "EffectiveConfig",
    "ParamMap",
    "ParamValue",
    "RoleConfig",
]

# Smart-mode union: YAML booleans stay bool, integers stay int, and so on.
ParamValue: TypeAlias = bool | int | float | str | list[int | str]
ParamMap: TypeAlias = dict[str, ParamValue]


def _clean_param_map(value: Any) -> Any:
    if value is None:
        return {}
    if isinstance(value, dict):
        return {str(k): v for k, v in value.items() if v is not None}
    return value


def _clean_env_map(value: Any) -> Any:
    if value is None:
        return {}
    if isinstance(value, dict):
        cleaned = {}
        for key, val in value.items():
            if val is None:
                continue
            if isinstance(val, bool):
                val = "1" if val else "0"
            cleaned[str(key)] = str(val)
        return cleaned
    return value


class RoleConfig(BaseModel):
    """Runner settings as written at host or test level.

    General maps apply to every role. The ``server_*`` and ``client_*``
    overlays are carried alongside and only applied when an effective
    configuration is resolved for that role.

    Attributes:
        duration: Benchmark duration in seconds (0 = tool default)
        args: General tool parameters
        env: General environment variables
        role: Role hint
        host: Management address the role falls back to when connecting
        target_host: Explicit data-plane address to connect to
        port: Tool port (0 = tool default)
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    duration: DurationSeconds = 0.0
    args: ParamMap = Field(default_factory=dict)
    env: dict[str, str] = Field(default_factory=dict)
    role: Role | None = None
    host: str = ""
    target_host: str = ""
    port: int = 0

    server_args: ParamMap = Field(default_factory=dict)
    client_args: ParamMap = Field(default_factory=dict)
    server_env: dict[str, str] = Field(default_factory=dict)
    client_env: dict[str, str] = Field(default_factory=dict)

    @field_validator("args", "server_args", "client_args", mode="before")
    @classmethod
    def drop_empty_params(cls, value: Any) -> Any:
        return _clean_param_map(value)

    @field_validator("env", "server_env", "client_env", mode="before")
    @classmethod
    def stringify_env(cls, value: Any) -> Any:
        return _clean_env_map(value)

    @field_validator("role", mode="before")
    @classmethod
    def empty_role_is_none(cls, value: Any) -> Any:
        return value or None

    @field_validator("host", "target_host", mode="before")
    @classmethod
    def none_address_is_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("port", mode="before")
    @classmethod
    def none_port_is_zero(cls, value: Any) -> Any:
        return 0 if value is None else value


class EffectiveConfig(BaseModel):
    """Fully resolved settings for one role of one scenario run."""

    model_config = ConfigDict(frozen=True)

    role: Role
    duration: float = 0.0
    port: int = 0
    host: str = ""
    target_host: str = ""
    args: ParamMap = Field(default_factory=dict)
    env: dict[str, str] = Field(default_factory=dict)

    @property
    def destination(self) -> str:
        """Address a connecting role should reach: data-plane target first, then management host."""
        return self.target_host or self.host
