# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""InfiniBand send bandwidth runner (perftest ``ib_send_bw``)."""

import logging
import re

from perf_runner.common.config.runner_config import EffectiveConfig
from perf_runner.common.enums import Role
from perf_runner.common.exceptions import MetricParseError, ValidationError
from perf_runner.orchestrator.models import Result
from perf_runner.runners.base import BaseRunner, duration_seconds
from perf_runner.runners.flags import FlagSpec
from perf_runner.runners.units import (
    BIT_RATE,
    BYTE_RATE,
    PACKET_RATE,
    UnitFamily,
    find_first,
    normalize_bandwidth,
)

logger = logging.getLogger(__name__)

__all__ = ["IbSendBwRunner"]

DEFAULT_PORT = 18515

_HEADER_UNIT_RE = {
    "peak": re.compile(r"BW peak\[([^\]]+)\]"),
    "average": re.compile(r"BW average\[([^\]]+)\]"),
    "rate": re.compile(r"MsgRate\[([^\]]+)\]"),
}

_INFO_PATTERNS = (
    ("connection_type", re.compile(r"Connection type\s*:\s*(\S+)"), str),
    ("mtu", re.compile(r"\bMtu\s*:\s*(\d+)", re.IGNORECASE), int),
    ("num_qps", re.compile(r"Number of qps\s*:\s*(\d+)"), int),
    ("device", re.compile(r"\bDevice\s*:\s*(\S+)"), str),
    ("transport_type", re.compile(r"Transport type\s*:\s*(\S+)"), str),
)


def _family_for(unit: str) -> UnitFamily | None:
    for family in (BYTE_RATE, BIT_RATE, PACKET_RATE):
        if unit in family.units:
            return family
    return None


class IbSendBwRunner(BaseRunner):
    """Runs ``ib_send_bw`` between a server and a client.

    The client connects to the server's data-plane address over the
    out-of-band TCP port (default 18515) and then measures RDMA send
    bandwidth. There is no forwarding mode, so intermediates are not
    supported.
    """

    name = "ib_send_bw"
    default_executable = "ib_send_bw"
    supported_roles = frozenset({Role.CLIENT, Role.SERVER})
    flag_table = (
        FlagSpec("size", "-s"),
        FlagSpec("iterations", "-n"),
        FlagSpec("tx_depth", "-t"),
        FlagSpec("rx_depth", "-r"),
        FlagSpec("mtu", "-m"),
        FlagSpec("qp", "-q"),
        FlagSpec("connection", "-c"),
        FlagSpec("inline", "-I"),
        FlagSpec("use_event", "-e"),
        FlagSpec("bidirectional", "-b"),
        FlagSpec("report_cycles", "-C"),
        FlagSpec("report_histogram", "-H"),
        FlagSpec("cpu_freq", "-F"),
        FlagSpec("ib_dev", "-d"),
        FlagSpec("gid_index", "-x"),
        FlagSpec("sl", "-S"),
        FlagSpec("odp", "-o"),
        FlagSpec("report_gbits", "-R"),
    )

    def readiness_port(self, config: EffectiveConfig) -> int | None:
        return config.port or DEFAULT_PORT

    def validate_args(self, config: EffectiveConfig) -> None:
        for param in ("size", "iterations", "qp"):
            value = config.args.get(param)
            if isinstance(value, int) and not isinstance(value, bool) and value <= 0:
                raise ValidationError(f"{param} must be greater than 0")
        connection = config.args.get("connection")
        if isinstance(connection, str) and connection.upper() not in (
            "RC",
            "UC",
            "UD",
            "XRC",
            "DC",
            "SRD",
        ):
            raise ValidationError(f"unsupported connection type: {connection}")

    def command_words(self, config: EffectiveConfig) -> list[str]:
        words = [self.executable]
        if config.role == Role.CLIENT:
            words.append(config.destination)
        if config.port > 0:
            words.extend(["-p", str(config.port)])
        if config.duration > 0:
            words.extend(["-D", str(duration_seconds(config.duration))])
        words.extend(self.render_args(config.args))
        return words

    def parse_metrics(self, result: Result) -> None:
        output = result.output
        metrics = result.metrics

        for key, pattern, convert in _INFO_PATTERNS:
            if match := pattern.search(output):
                metrics[key] = convert(match.group(1))

        if not self._parse_table(output, metrics):
            self._parse_summary_lines(output, metrics)

    def _parse_table(self, output: str, metrics: dict) -> bool:
        """Parse the ``#bytes ... BW peak ... BW average ... MsgRate`` result table.

        Returns:
            True if a result table was found and parsed
        """
        lines = output.splitlines()
        for index, line in enumerate(lines):
            if "#bytes" not in line or "BW" not in line:
                continue
            units = {
                name: (match.group(1) if (match := pattern.search(line)) else None)
                for name, pattern in _HEADER_UNIT_RE.items()
            }
            row = next(
                (
                    candidate.split()
                    for candidate in lines[index + 1 :]
                    if candidate.strip() and not candidate.lstrip().startswith("-")
                ),
                None,
            )
            if row is None:
                return False
            try:
                values = [float(field) for field in row[:5]]
            except ValueError as e:
                raise MetricParseError(f"malformed ib_send_bw result row: {row}") from e
            if len(values) < 5:
                raise MetricParseError(f"short ib_send_bw result row: {row}")

            size, iterations, peak, average, rate = values
            metrics["bytes"] = int(size)
            metrics["iterations"] = int(iterations)
            self._store_rate(metrics, "bandwidth_peak", peak, units["peak"])
            self._store_rate(metrics, "bandwidth_average", average, units["average"])
            self._store_rate(metrics, "message_rate", rate, units["rate"] or "Mpps")
            if "bandwidth_average_bps" in metrics:
                metrics["bandwidth_bps"] = metrics["bandwidth_average_bps"]
            return True
        return False

    @staticmethod
    def _store_rate(metrics: dict, prefix: str, value: float, unit: str | None) -> None:
        family = _family_for(unit) if unit else None
        if family is None:
            logger.debug(f"Unknown ib_send_bw unit {unit!r} for {prefix}")
            metrics[prefix] = value
            return
        measurement = family.measure(value, unit)
        metrics[f"{prefix}_{measurement.key}"] = measurement.value
        metrics[f"{prefix}_{'pps' if family is PACKET_RATE else 'bps'}"] = (
            measurement.base_value
        )

    @staticmethod
    def _parse_summary_lines(output: str, metrics: dict) -> None:
        bandwidth = find_first(output, BYTE_RATE) or find_first(output, BIT_RATE)
        if bandwidth is not None:
            normalize_bandwidth(metrics, "bandwidth", bandwidth)
        if (rate := find_first(output, PACKET_RATE)) is not None:
            metrics[f"message_rate_{rate.key}"] = rate.value
            metrics["message_rate_pps"] = rate.base_value
