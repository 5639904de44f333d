# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Tests for the ib_send_bw runner."""

import pytest

from perf_runner.common.config import EffectiveConfig
from perf_runner.common.enums import Role
from perf_runner.common.exceptions import MetricParseError, ValidationError
from perf_runner.orchestrator.models import Result
from perf_runner.runners.ib_send_bw import IbSendBwRunner

IB_SEND_BW_REPORT = """\
---------------------------------------------------------------------------------------
                    Send BW Test
 Dual-port       : OFF          Device         : mlx5_0
 Number of qps   : 1            Transport type : IB
 Connection type : RC           Using SRQ      : OFF
 TX depth        : 128
 CQ Moderation   : 1
 Mtu             : 4096[B]
 Link type       : Ethernet
---------------------------------------------------------------------------------------
 #bytes     #iterations    BW peak[MB/sec]    BW average[MB/sec]   MsgRate[Mpps]
 65536      1000             11530.70            11528.98              0.184464
---------------------------------------------------------------------------------------
"""


@pytest.fixture
def runner() -> IbSendBwRunner:
    return IbSendBwRunner()


class TestIbSendBwCommands:
    def test_server_command(self, runner):
        config = EffectiveConfig(
            role=Role.SERVER,
            duration=10,
            args={"ib_dev": "mlx5_0", "size": 65536, "report_gbits": True},
        )
        assert runner.build_command(config) == "ib_send_bw -D 10 -s 65536 -d mlx5_0 -R"

    def test_sub_second_duration_rounds_up(self, runner):
        config = EffectiveConfig(role=Role.SERVER, duration=0.25)
        assert runner.build_command(config) == "ib_send_bw -D 1"

    def test_client_connects_to_destination(self, runner):
        config = EffectiveConfig(
            role=Role.CLIENT,
            host="10.0.0.2",
            target_host="192.168.100.2",
            port=18516,
            args={"iterations": 500, "qp": 4},
        )
        assert runner.build_command(config) == "ib_send_bw 192.168.100.2 -p 18516 -n 500 -q 4"

    def test_cpu_freq_uses_two_decimals(self, runner):
        config = EffectiveConfig(role=Role.SERVER, args={"cpu_freq": 2.4})
        assert runner.command_words(config)[-2:] == ["-F", "2.40"]

    def test_intermediate_not_supported(self, runner):
        config = EffectiveConfig(role=Role.INTERMEDIATE, host="10.0.0.2")
        with pytest.raises(ValidationError, match="does not support role intermediate"):
            runner.validate(config)

    @pytest.mark.parametrize(
        "args,message",
        [
            ({"size": 0}, "size must be greater than 0"),
            ({"iterations": -5}, "iterations must be greater than 0"),
            ({"qp": 0}, "qp must be greater than 0"),
            ({"connection": "TCP"}, "unsupported connection type"),
        ],
    )
    def test_invalid_args(self, runner, args, message):
        with pytest.raises(ValidationError, match=message):
            runner.validate(EffectiveConfig(role=Role.SERVER, args=args))

    def test_lowercase_connection_accepted(self, runner):
        runner.validate(EffectiveConfig(role=Role.SERVER, args={"connection": "ud"}))


class TestIbSendBwMetrics:
    def test_result_table(self, runner):
        result = Result(success=True, output=IB_SEND_BW_REPORT)
        runner.parse_metrics(result)
        metrics = result.metrics

        assert metrics["bytes"] == 65536
        assert metrics["iterations"] == 1000
        assert metrics["bandwidth_peak_mbytes_per_sec"] == 11530.70
        assert metrics["bandwidth_average_mbytes_per_sec"] == 11528.98
        assert metrics["bandwidth_average_bps"] == pytest.approx(11528.98 * 8e6)
        assert metrics["bandwidth_bps"] == metrics["bandwidth_average_bps"]
        assert metrics["message_rate_mpps"] == 0.184464
        assert metrics["message_rate_pps"] == pytest.approx(184464.0)

    def test_info_lines(self, runner):
        result = Result(success=True, output=IB_SEND_BW_REPORT)
        runner.parse_metrics(result)
        assert result.metrics["connection_type"] == "RC"
        assert result.metrics["mtu"] == 4096
        assert result.metrics["num_qps"] == 1
        assert result.metrics["device"] == "mlx5_0"
        assert result.metrics["transport_type"] == "IB"

    def test_gbits_table(self, runner):
        output = (
            " #bytes     #iterations    BW peak[Gb/sec]    BW average[Gb/sec]   MsgRate[Mpps]\n"
            " 65536      5000             92.10              92.05                0.175567\n"
        )
        result = Result(success=True, output=output)
        runner.parse_metrics(result)
        assert result.metrics["bandwidth_average_gbps"] == 92.05
        assert result.metrics["bandwidth_bps"] == pytest.approx(92.05e9)

    def test_malformed_row(self, runner):
        output = (
            " #bytes     #iterations    BW peak[MB/sec]    BW average[MB/sec]   MsgRate[Mpps]\n"
            " Couldn't connect to 10.0.0.2:18515\n"
        )
        with pytest.raises(MetricParseError):
            runner.parse_metrics(Result(success=False, output=output))

    def test_summary_line_fallback(self, runner):
        result = Result(success=True, output="average bandwidth 1200.5 MB/sec at 2.5 Mpps\n")
        runner.parse_metrics(result)
        assert result.metrics["bandwidth_mbytes_per_sec"] == 1200.5
        assert result.metrics["bandwidth_bps"] == pytest.approx(1200.5 * 8e6)
        assert result.metrics["message_rate_mpps"] == 2.5

    def test_no_metrics(self, runner):
        result = Result(success=True, output="Waiting for client to connect...\n")
        runner.parse_metrics(result)
        assert result.metrics == {}
