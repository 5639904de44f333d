# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Resolution of layered host/test/role settings into one config per role."""

from collections.abc import Mapping

from perf_runner.common.config.runner_config import (
    EffectiveConfig,
    ParamMap,
    ParamValue,
    RoleConfig,
)
from perf_runner.common.enums import Role

__all__ = [
    "effective_config",
    "merge_role_configs",
    "resolve",
    "role_overlays",
]


def resolve(
    role: Role,
    general_args: Mapping[str, ParamValue] | None,
    general_env: Mapping[str, str] | None,
    overlay_args: Mapping[str, ParamValue] | None = None,
    overlay_env: Mapping[str, str] | None = None,
) -> tuple[ParamMap, dict[str, str]]:
    """Merge general maps with a role overlay.

    Overlay entries win key by key; keys missing from the overlay keep their
    general value. The intermediate role has no overlay, so its overlays are
    ignored and the general maps come back unchanged. Inputs are never
    modified; fresh dicts are returned.

    Args:
        role: Role being resolved
        general_args: Parameters shared by every role
        general_env: Environment shared by every role
        overlay_args: Role-specific parameters
        overlay_env: Role-specific environment

    Returns:
        Tuple of (effective_args, effective_env)
    """
    args: ParamMap = dict(general_args or {})
    env: dict[str, str] = dict(general_env or {})
    if role != Role.INTERMEDIATE:
        args.update(overlay_args or {})
        env.update(overlay_env or {})
    return args, env


def role_overlays(
    config: RoleConfig, role: Role
) -> tuple[ParamMap, dict[str, str]]:
    """Return the (args, env) overlay maps that apply to a role."""
    if role == Role.SERVER:
        return config.server_args, config.server_env
    if role == Role.CLIENT:
        return config.client_args, config.client_env
    return {}, {}


def effective_config(config: RoleConfig, role: Role) -> EffectiveConfig:
    """Flatten a (merged) RoleConfig into the EffectiveConfig for one role."""
    overlay_args, overlay_env = role_overlays(config, role)
    args, env = resolve(role, config.args, config.env, overlay_args, overlay_env)
    return EffectiveConfig(
        role=role,
        duration=config.duration,
        port=config.port,
        host=config.host,
        target_host=config.target_host,
        args=args,
        env=env,
    )


def _merge(base: Mapping | None, override: Mapping | None) -> dict:
    merged = dict(base or {})
    merged.update(override or {})
    return merged


def merge_role_configs(
    host_level: RoleConfig | None, test_level: RoleConfig | None
) -> RoleConfig:
    """Merge host-level defaults with test-level overrides.

    Scalar fields from the test level win when they are non-zero / non-empty.
    All parameter and environment maps, overlays included, are merged key by
    key with test-level values winning.
    """
    if host_level is None and test_level is None:
        return RoleConfig()
    if host_level is None:
        return test_level.model_copy(deep=True)
    if test_level is None:
        return host_level.model_copy(deep=True)

    return RoleConfig(
        duration=test_level.duration or host_level.duration,
        port=test_level.port or host_level.port,
        host=test_level.host or host_level.host,
        target_host=test_level.target_host or host_level.target_host,
        role=test_level.role or host_level.role,
        args=_merge(host_level.args, test_level.args),
        env=_merge(host_level.env, test_level.env),
        server_args=_merge(host_level.server_args, test_level.server_args),
        client_args=_merge(host_level.client_args, test_level.client_args),
        server_env=_merge(host_level.server_env, test_level.server_env),
        client_env=_merge(host_level.client_env, test_level.client_env),
    )
