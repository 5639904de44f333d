# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""
Shared fixtures for perf-runner unit tests.

Remote hosts are replaced by FakeGateway, which answers commands from a small
script of rules instead of opening SSH connections.
"""

import pytest

from perf_runner.common.enums import Role
from perf_runner.runners.iperf3 import Iperf3Runner
from tests.utils.fakes import HOST_ADDRESSES, FakeGateway


@pytest.fixture
def events() -> list[tuple[str, str]]:
    """Command log shared by every fake gateway of a test, in start order."""
    return []


@pytest.fixture
def gateways(events) -> dict[str, FakeGateway]:
    return {name: FakeGateway(name, events=events) for name in HOST_ADDRESSES}


@pytest.fixture
def iperf3_runners() -> dict[Role, Iperf3Runner]:
    runner = Iperf3Runner()
    return {Role.CLIENT: runner, Role.SERVER: runner, Role.INTERMEDIATE: runner}
