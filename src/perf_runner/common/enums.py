# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Enumerations shared across perf-runner."""

from enum import Enum

__all__ = [
    "CaseInsensitiveStrEnum",
    "ExecutorState",
    "OutputFormat",
    "Role",
    "SettleMode",
    "TopologyType",
]


def _normalize_enum_value(value: str) -> str:
    return value.lower().replace("_", "-")


class CaseInsensitiveStrEnum(str, Enum):
    """String enum that compares case-insensitively and ignores - vs _ differences."""

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}.{self.name}"

    def __eq__(self, other: object) -> bool:
        if other is None:
            return False
        if isinstance(other, str):
            return _normalize_enum_value(self.value) == _normalize_enum_value(other)
        return super().__eq__(other)

    def __hash__(self) -> int:
        return hash(_normalize_enum_value(self.value))

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            normalized = _normalize_enum_value(value)
            for member in cls:
                if _normalize_enum_value(member.value) == normalized:
                    return member
        return None


class Role(CaseInsensitiveStrEnum):
    """Function of a host within a test topology."""

    CLIENT = "client"
    SERVER = "server"
    INTERMEDIATE = "intermediate"


class TopologyType(CaseInsensitiveStrEnum):
    TWO_NODE = "two-node"
    THREE_NODE = "three-node"
    FOUR_NODE = "four-node"


class ExecutorState(CaseInsensitiveStrEnum):
    """States of the topology executor for a single scenario run."""

    IDLE = "idle"
    SERVER_STARTING = "server-starting"
    INTERMEDIATE_STARTING = "intermediate-starting"
    CLIENT_RUNNING = "client-running"
    COLLECTING = "collecting"
    COMPLETED = "completed"
    FAILED = "failed"
    TIMED_OUT = "timed-out"

    @property
    def is_final(self) -> bool:
        return self in (
            ExecutorState.COMPLETED,
            ExecutorState.FAILED,
            ExecutorState.TIMED_OUT,
        )


class SettleMode(CaseInsensitiveStrEnum):
    """How the executor waits for a listening role before starting its dependent."""

    PROBE = "probe"
    FIXED = "fixed"


class OutputFormat(CaseInsensitiveStrEnum):
    TEXT = "text"
    JSON = "json"
