# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
from perf_runner.common.config.resolver import (
    effective_config,
    merge_role_configs,
    resolve,
    role_overlays,
)
from perf_runner.common.config.run_options import RunOptions
from perf_runner.common.config.runner_config import (
    EffectiveConfig,
    ParamMap,
    ParamValue,
    RoleConfig,
)
from perf_runner.common.config.ssh_config import DurationSeconds, SSHConfig
from perf_runner.common.config.test_config import (
    DEFAULT_TIMEOUT_SECONDS,
    HostConfig,
    RoleRunners,
    SettleConfig,
    TestConfig,
    TestScenario,
    find_config_problems,
    load_test_config,
)

__all__ = [
    "DEFAULT_TIMEOUT_SECONDS",
    "DurationSeconds",
    "EffectiveConfig",
    "HostConfig",
    "ParamMap",
    "ParamValue",
    "RoleConfig",
    "RoleRunners",
    "RunOptions",
    "SSHConfig",
    "SettleConfig",
    "TestConfig",
    "TestScenario",
    "effective_config",
    "find_config_problems",
    "load_test_config",
    "merge_role_configs",
    "resolve",
    "role_overlays",
]
