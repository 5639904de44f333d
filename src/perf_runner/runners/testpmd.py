# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""DPDK testpmd packet forwarding runner."""

import logging
import re

from perf_runner.common.config.runner_config import EffectiveConfig
from perf_runner.common.enums import Role
from perf_runner.common.exceptions import ValidationError
from perf_runner.orchestrator.models import Result
from perf_runner.runners.base import BaseRunner, duration_seconds
from perf_runner.runners.flags import FlagSpec, FlagStyle, render_flags
from perf_runner.runners.units import BIT_RATE, PACKET_RATE, find_first

logger = logging.getLogger(__name__)

__all__ = ["FORWARD_MODES", "TestpmdRunner"]

FORWARD_MODES = frozenset(
    {
        "io",
        "mac",
        "macswap",
        "flowgen",
        "rxonly",
        "txonly",
        "csum",
        "icmpecho",
        "ieee1588",
        "tm",
    }
)

_PORTS_RE = re.compile(r"^\d+(?:[,-]\d+)*$")
_COUNTER_RE = re.compile(r"\b([RT]X-[a-z]+):\s*(\d+)")
_THROUGHPUT_RE = re.compile(r"\b([RT]x-(?:pps|bps)):\s*(\d+)")
_PORT_HEADER_RE = re.compile(r"statistics for port\s+(\d+)", re.IGNORECASE)
_ACCUMULATED_MARKER = "Accumulated forward statistics"

EAL_FLAGS = (
    FlagSpec("memory_channels", "-n"),
    FlagSpec("hugepage_dir", "--huge-dir"),
    FlagSpec("file_prefix", "--file-prefix"),
    FlagSpec("allow_pci", "-a", style=FlagStyle.REPEAT),
    FlagSpec("block_pci", "-b", style=FlagStyle.REPEAT),
    FlagSpec("vdev", "--vdev", style=FlagStyle.REPEAT),
)

APP_FLAGS = (
    FlagSpec("ports", "--portlist", style=FlagStyle.EQUALS),
    FlagSpec("rxq", "--rxq", style=FlagStyle.EQUALS),
    FlagSpec("txq", "--txq", style=FlagStyle.EQUALS),
    FlagSpec("rxd", "--rxd", style=FlagStyle.EQUALS),
    FlagSpec("txd", "--txd", style=FlagStyle.EQUALS),
    FlagSpec("burst", "--burst", style=FlagStyle.EQUALS),
    FlagSpec("forward_mode", "--forward-mode", style=FlagStyle.EQUALS),
    FlagSpec("auto_start", "--auto-start"),
    FlagSpec("stats_period", "--stats-period", style=FlagStyle.EQUALS),
    FlagSpec("forward_cores", "--coremask", style=FlagStyle.EQUALS),
    FlagSpec("flow_control", "--flow-control", style=FlagStyle.EQUALS),
    FlagSpec("enable_hw_vlan", "--enable-hw-vlan"),
    FlagSpec("crc_strip", "--crc-strip"),
    FlagSpec("disable_rss", "--disable-rss"),
)


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class TestpmdRunner(BaseRunner):
    """Runs ``dpdk-testpmd`` in any role.

    The command is EAL options, ``--``, then application options. The
    intermediate role runs interactively by default so it keeps forwarding
    until it is stopped. testpmd does not listen on a TCP port, so dependent
    roles are started after the fixed settle delay.
    """

    __test__ = False

    name = "testpmd"
    default_executable = "dpdk-testpmd"
    supported_roles = frozenset({Role.CLIENT, Role.SERVER, Role.INTERMEDIATE})
    flag_table = EAL_FLAGS + APP_FLAGS
    handled_params = frozenset({"cores", "interactive"})

    def validate_args(self, config: EffectiveConfig) -> None:
        args = config.args

        cores = args.get("cores")
        if _is_int(cores) and cores <= 0:
            raise ValidationError("cores must be greater than 0")
        if isinstance(cores, str) and not cores.strip():
            raise ValidationError("cores cannot be empty")

        channels = args.get("memory_channels")
        if _is_int(channels) and not 1 <= channels <= 8:
            raise ValidationError("memory_channels must be between 1 and 8")

        ports = args.get("ports")
        if isinstance(ports, str) and not _PORTS_RE.match(ports):
            raise ValidationError(f"invalid ports format: {ports}")
        if isinstance(ports, list) and not ports:
            raise ValidationError("ports list cannot be empty")

        mode = args.get("forward_mode")
        if config.role == Role.INTERMEDIATE and isinstance(mode, str):
            if mode not in FORWARD_MODES:
                raise ValidationError(
                    f"invalid forward_mode for intermediate: {mode} "
                    f"(expected one of {', '.join(sorted(FORWARD_MODES))})"
                )

    def command_words(self, config: EffectiveConfig) -> list[str]:
        args = config.args
        interactive = args.get("interactive")
        interactive = interactive is True or (
            config.role == Role.INTERMEDIATE and interactive is not False
        )

        words = []
        if config.duration > 0 and not interactive:
            # testpmd prints its statistics and exits on SIGINT.
            words.extend(
                [
                    "timeout",
                    "--preserve-status",
                    "-s",
                    "INT",
                    str(duration_seconds(config.duration)),
                ]
            )
        words.append(self.executable)

        cores = args.get("cores")
        if isinstance(cores, str) and cores:
            words.extend(["-l", cores])
        elif _is_int(cores) and cores > 0:
            words.extend(["-l", ",".join(str(i) for i in range(cores))])

        words.extend(render_flags(EAL_FLAGS, args, handled=self._non_eal_params()))
        words.append("--")

        if interactive:
            words.append("-i")

        words.extend(render_flags(APP_FLAGS, args, handled=self._non_app_params()))
        return words

    def _non_eal_params(self) -> set[str]:
        return {spec.param for spec in APP_FLAGS} | set(self.handled_params)

    def _non_app_params(self) -> set[str]:
        return {spec.param for spec in EAL_FLAGS} | set(self.handled_params)

    def parse_metrics(self, result: Result) -> None:
        output = result.output
        metrics = result.metrics

        has_accumulated = self._parse_accumulated(output, metrics)

        for name, value in _COUNTER_RE.findall(output):
            metrics.setdefault(name.lower().replace("-", "_"), int(value))

        for name, value in _THROUGHPUT_RE.findall(output):
            key = f"throughput_{name.lower().replace('-', '_')}"
            metrics.setdefault(key, int(value))

        ports = sorted({int(p) for p in _PORT_HEADER_RE.findall(output)})
        if ports:
            metrics["ports"] = ",".join(str(p) for p in ports)

        if not has_accumulated:
            self._scan_units(output, metrics)

    @staticmethod
    def _parse_accumulated(output: str, metrics: dict) -> bool:
        """Read the counters of the "Accumulated forward statistics" block.

        Returns:
            True if the block was present
        """
        if _ACCUMULATED_MARKER not in output:
            return False
        block = output.split(_ACCUMULATED_MARKER, 1)[1]
        block_lines = []
        for line in block.splitlines()[1:]:
            if line.strip().startswith("+"):
                break
            block_lines.append(line)
        for name, value in _COUNTER_RE.findall("\n".join(block_lines)):
            metrics[name.lower().replace("-", "_")] = int(value)
        return True

    @staticmethod
    def _scan_units(output: str, metrics: dict) -> None:
        if (rate := find_first(output, PACKET_RATE)) is not None:
            metrics[f"throughput_{rate.key}"] = rate.value
            metrics.setdefault("throughput_pps", rate.base_value)
        if (bandwidth := find_first(output, BIT_RATE)) is not None:
            metrics[f"throughput_{bandwidth.key}"] = bandwidth.value
            metrics.setdefault("throughput_bps", bandwidth.base_value)
