# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Topology classification and role launch plans."""

from dataclasses import dataclass

from perf_runner.common.config.test_config import TestScenario
from perf_runner.common.enums import Role, TopologyType
from perf_runner.common.exceptions import ConfigurationError
from perf_runner.orchestrator.models import RoleName

__all__ = [
    "RoleStep",
    "build_topology_plan",
    "classify_topology",
]


@dataclass(frozen=True, slots=True)
class RoleStep:
    """One role to launch.

    Attributes:
        slot: Result slot name (client, server, intermediate, intermediate1, intermediate2)
        role: Role the host plays
        host: Host name from the configuration document
        downstream: Host this role connects to, or None for the server
    """

    slot: RoleName
    role: Role
    host: str
    downstream: str | None = None


def classify_topology(scenario: TestScenario) -> TopologyType:
    """Derive the topology from which intermediate fields are set.

    Raises:
        ConfigurationError: If only one of intermediate1/intermediate2 is set,
            or intermediate is combined with them
    """
    has_single = bool(scenario.intermediate)
    has_first = bool(scenario.intermediate1)
    has_second = bool(scenario.intermediate2)

    if has_first != has_second:
        raise ConfigurationError(
            f"scenario '{scenario.name}': intermediate1 and intermediate2 must both be set"
        )
    if has_single and has_first:
        raise ConfigurationError(
            f"scenario '{scenario.name}': intermediate cannot be combined with intermediate1/intermediate2"
        )
    if has_first:
        return TopologyType.FOUR_NODE
    if has_single:
        return TopologyType.THREE_NODE
    return TopologyType.TWO_NODE


def build_topology_plan(scenario: TestScenario) -> tuple[TopologyType, list[RoleStep]]:
    """Return the topology and the launch order, closest to the server first.

    The client is always last.
    """
    topology = classify_topology(scenario)
    server = RoleStep(RoleName.SERVER, Role.SERVER, scenario.server)

    if topology == TopologyType.TWO_NODE:
        middle: list[RoleStep] = []
        client_target = scenario.server
    elif topology == TopologyType.THREE_NODE:
        middle = [
            RoleStep(
                RoleName.INTERMEDIATE,
                Role.INTERMEDIATE,
                scenario.intermediate,
                downstream=scenario.server,
            )
        ]
        client_target = scenario.intermediate
    else:
        middle = [
            RoleStep(
                RoleName.INTERMEDIATE2,
                Role.INTERMEDIATE,
                scenario.intermediate2,
                downstream=scenario.server,
            ),
            RoleStep(
                RoleName.INTERMEDIATE1,
                Role.INTERMEDIATE,
                scenario.intermediate1,
                downstream=scenario.intermediate2,
            ),
        ]
        client_target = scenario.intermediate1

    client = RoleStep(
        RoleName.CLIENT, Role.CLIENT, scenario.client, downstream=client_target
    )
    return topology, [server, *middle, client]
