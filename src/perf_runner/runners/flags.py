# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Declarative mapping of tool parameters to command-line flags."""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum

from perf_runner.common.config.runner_config import ParamValue

logger = logging.getLogger(__name__)

__all__ = [
    "FlagSpec",
    "FlagStyle",
    "format_flag",
    "render_flags",
]


class FlagStyle(str, Enum):
    SPACE = "space"
    """Flag and value as separate words: ``-P 4``."""

    EQUALS = "equals"
    """Flag and value joined with ``=``: ``--rxq=4``."""

    REPEAT = "repeat"
    """One ``flag value`` pair per list item: ``-a 0000:01:00.0 -a 0000:01:00.1``."""


@dataclass(frozen=True, slots=True)
class FlagSpec:
    """One row of a runner's flag table.

    Attributes:
        param: Parameter name as written in the configuration
        flag: Flag emitted on the command line
        style: How the flag and its value are joined
        value_map: For string values, maps a (lower-cased) value to a bare
            flag. Values not in the map emit nothing.
    """

    param: str
    flag: str
    style: FlagStyle = FlagStyle.SPACE
    value_map: Mapping[str, str] = field(default_factory=dict)


def _format_scalar(value: int | float | str) -> str:
    if isinstance(value, float):
        return f"{value:.2f}"
    return str(value)


def format_flag(spec: FlagSpec, value: ParamValue | None) -> list[str]:
    """Render one parameter into command words.

    Formatting is directed by the value's type: ``True`` gives the bare flag,
    ``False``/``None``/empty strings give nothing, integers and strings give
    ``flag value`` and floats are rendered with two decimals. Lists are joined
    with commas, or repeated per item for :attr:`FlagStyle.REPEAT`.
    """
    if value is None or value is False:
        return []
    if value is True:
        return [spec.flag]

    if spec.value_map:
        if isinstance(value, str) and value.lower() in spec.value_map:
            return [spec.value_map[value.lower()]]
        return []

    if isinstance(value, list):
        if not value:
            return []
        if spec.style == FlagStyle.REPEAT:
            words = []
            for item in value:
                words.extend([spec.flag, _format_scalar(item)])
            return words
        text = ",".join(_format_scalar(item) for item in value)
    else:
        text = _format_scalar(value)
        if text == "":
            return []

    if spec.style == FlagStyle.EQUALS:
        return [f"{spec.flag}={text}"]
    return [spec.flag, text]


def render_flags(
    table: Iterable[FlagSpec],
    args: Mapping[str, ParamValue],
    handled: Iterable[str] = (),
) -> list[str]:
    """Render every known parameter in table order.

    Parameters that have no row in the table are skipped. Names in ``handled``
    are consumed elsewhere by the runner and are not reported as unknown.
    """
    table = list(table)
    known = {spec.param for spec in table} | set(handled)
    unknown = sorted(set(args) - known)
    if unknown:
        logger.debug(f"Ignoring unrecognized parameters: {', '.join(unknown)}")

    words: list[str] = []
    for spec in table:
        if spec.param in args:
            words.extend(format_flag(spec, args[spec.param]))
    return words
