# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import pytest

from perf_runner.runners.base import (
    binary_check_command,
    build_env_prefix,
    duration_seconds,
    version_command,
)


class TestEnvPrefix:
    @pytest.mark.parametrize(
        "env,expected",
        [
            ({}, ""),
            ({"A": "1"}, "A=1 "),
            ({"B": "2", "A": "1"}, "A=1 B=2 "),
            ({"MSG": "two words"}, "MSG='two words' "),
            ({"PATH_LIST": "/a:/b"}, "PATH_LIST=/a:/b "),
            ({"Q": "it's"}, "Q='it'\"'\"'s' "),
        ],
    )
    def test_prefix(self, env, expected):
        assert build_env_prefix(env) == expected


class TestDurationSeconds:
    @pytest.mark.parametrize(
        "duration,expected",
        [(0.001, 1), (0.5, 1), (1.0, 1), (1.2, 2), (30, 30), (90.0, 90)],
    )
    def test_rounds_up_to_whole_seconds(self, duration, expected):
        assert duration_seconds(duration) == expected


class TestBinaryCommands:
    def test_binary_check(self):
        assert binary_check_command("iperf3") == (
            'command -v iperf3 >/dev/null 2>&1 && test -x "$(command -v iperf3)"'
        )

    def test_version(self):
        assert version_command("socat") == (
            "socat --version 2>/dev/null | head -1 || echo 'Version unknown'"
        )
