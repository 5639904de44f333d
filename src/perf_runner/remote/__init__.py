# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
from perf_runner.remote.protocols import CommandOutput, RemoteGateway
from perf_runner.remote.ssh_client import SSHGateway

__all__ = [
    "CommandOutput",
    "RemoteGateway",
    "SSHGateway",
]
