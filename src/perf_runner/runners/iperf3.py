# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""iperf3 TCP/UDP bandwidth runner."""

import logging
import re

import orjson

from perf_runner.common.config.runner_config import EffectiveConfig
from perf_runner.common.enums import Role
from perf_runner.common.exceptions import MetricParseError, ValidationError
from perf_runner.orchestrator.models import Result
from perf_runner.runners.base import BaseRunner, duration_seconds
from perf_runner.runners.flags import FlagSpec
from perf_runner.runners.units import BIT_RATE, find_first, normalize_bandwidth

logger = logging.getLogger(__name__)

__all__ = ["Iperf3Runner"]

DEFAULT_PORT = 5201
RELAY_EXECUTABLE = "socat"

_RETRANSMITS_RE = re.compile(r"\s+(\d+)\b")


class Iperf3Runner(BaseRunner):
    """Runs iperf3 as server or client, and socat as a TCP relay for intermediates.

    Clients always request JSON output (``-J``) so metrics come from the
    structured report; plain text output is handled as a fallback.
    """

    name = "iperf3"
    default_executable = "iperf3"
    supported_roles = frozenset({Role.CLIENT, Role.SERVER, Role.INTERMEDIATE})
    flag_table = (
        FlagSpec("parallel_streams", "-P"),
        FlagSpec("window_size", "-w"),
        FlagSpec("reverse", "-R"),
        FlagSpec("bitrate", "-b"),
        FlagSpec("bandwidth", "-b"),
        FlagSpec("interval", "-i"),
        FlagSpec("protocol", "-u", value_map={"udp": "-u"}),
        FlagSpec("udp", "-u"),
        FlagSpec("ipv6", "-6"),
        FlagSpec("ipv4", "-4"),
        FlagSpec("bind_address", "-B"),
        FlagSpec("omit_seconds", "-O"),
        FlagSpec("buffer_length", "-l"),
        FlagSpec("verbose", "-V"),
    )
    handled_params = frozenset({"one_off"})

    def executable_for_role(self, role: Role) -> str:
        if role == Role.INTERMEDIATE:
            return RELAY_EXECUTABLE
        return self.executable

    def readiness_port(self, config: EffectiveConfig) -> int | None:
        return config.port or DEFAULT_PORT

    def validate_args(self, config: EffectiveConfig) -> None:
        streams = config.args.get("parallel_streams")
        if streams is not None and (
            isinstance(streams, bool) or not isinstance(streams, int) or streams <= 0
        ):
            raise ValidationError("parallel_streams must be greater than 0")
        omit = config.args.get("omit_seconds")
        if isinstance(omit, int) and not isinstance(omit, bool) and omit < 0:
            raise ValidationError("omit_seconds cannot be negative")

    def command_words(self, config: EffectiveConfig) -> list[str]:
        if config.role == Role.INTERMEDIATE:
            port = config.port or DEFAULT_PORT
            return [
                RELAY_EXECUTABLE,
                f"TCP-LISTEN:{port},fork,reuseaddr",
                f"TCP:{config.destination}:{port}",
            ]

        words = [self.executable]
        if config.role == Role.SERVER:
            words.append("-s")
            # A one-off server exits after a single test, so the executor can collect it.
            if config.args.get("one_off", True) is not False:
                words.append("-1")
        else:
            words.extend(["-c", config.destination])

        if config.port > 0:
            words.extend(["-p", str(config.port)])
        if config.role == Role.CLIENT:
            if config.duration > 0:
                words.extend(["-t", str(duration_seconds(config.duration))])
            words.append("-J")

        words.extend(self.render_args(config.args))
        return words

    def parse_metrics(self, result: Result) -> None:
        output = result.output
        if '"start"' in output and '"end"' in output:
            self._parse_json(output, result.metrics)
        else:
            self._parse_text(output, result.metrics)

    def _parse_json(self, output: str, metrics: dict) -> None:
        start, end = output.find("{"), output.rfind("}")
        if start < 0 or end <= start:
            raise MetricParseError("iperf3 JSON report has no object")
        try:
            report = orjson.loads(output[start : end + 1])
        except orjson.JSONDecodeError as e:
            raise MetricParseError(f"invalid iperf3 JSON report: {e}") from e

        if error := report.get("error"):
            logger.warning(f"iperf3 reported an error: {error}")

        summary = report.get("end") or {}
        received = summary.get("sum_received") or summary.get("sum") or {}
        sent = summary.get("sum_sent") or {}

        bits_per_second = received.get("bits_per_second")
        if bits_per_second is not None:
            bps = float(bits_per_second)
            metrics["bandwidth_bps"] = bps
            metrics["bandwidth_mbps"] = bps / 1e6
            metrics["bandwidth_gbps"] = bps / 1e9
        if sent.get("bits_per_second") is not None:
            metrics["sent_bps"] = float(sent["bits_per_second"])
        if "retransmits" in sent:
            metrics["retransmits"] = int(sent["retransmits"])
        if "lost_percent" in received:
            metrics["lost_percent"] = float(received["lost_percent"])
        if "jitter_ms" in received:
            metrics["jitter_ms"] = float(received["jitter_ms"])
        if received.get("seconds") is not None:
            metrics["actual_duration"] = float(received["seconds"])

        test_start = (report.get("start") or {}).get("test_start") or {}
        if "num_streams" in test_start:
            metrics["parallel_streams"] = int(test_start["num_streams"])
        elif streams := summary.get("streams"):
            metrics["parallel_streams"] = len(streams)

        cpu = summary.get("cpu_utilization_percent") or {}
        if "host_total" in cpu:
            metrics["cpu_host_percent"] = float(cpu["host_total"])
        if "remote_total" in cpu:
            metrics["cpu_remote_percent"] = float(cpu["remote_total"])

    def _parse_text(self, output: str, metrics: dict) -> None:
        measurement = find_first(output, BIT_RATE)
        if measurement is None:
            return
        normalize_bandwidth(metrics, "bandwidth", measurement)
        metrics.setdefault("bandwidth_mbps", measurement.base_value / 1e6)
        metrics.setdefault("bandwidth_gbps", measurement.base_value / 1e9)

        rest_of_line = output[measurement.end :].split("\n", 1)[0]
        if match := _RETRANSMITS_RE.match(rest_of_line):
            metrics["retransmits"] = int(match.group(1))
