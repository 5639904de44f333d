# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
from perf_runner.runners.base import BaseRunner, build_env_prefix
from perf_runner.runners.registry import (
    RunnerRegistry,
    create_default_registry,
)

__all__ = [
    "BaseRunner",
    "RunnerRegistry",
    "build_env_prefix",
    "create_default_registry",
]
