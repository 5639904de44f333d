# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Main CLI entry point for perf-runner."""

################################################################################
# NOTE: Keep the imports here to a minimum. This file is read every time
# the CLI is run, including to generate the help text. Any imports here
# will cause a performance penalty during this process.
################################################################################

import sys

from cyclopts import App

from perf_runner import __version__
from perf_runner.cli_utils import exit_on_error
from perf_runner.common.config.run_options import RunOptions

app = App(
    name="perf-runner",
    help="Run network benchmarks (iperf3, ib_send_bw, testpmd) across hosts over SSH",
    version=__version__,
)


@app.default
def run(options: RunOptions | None = None) -> int:
    """Run every test scenario in a configuration document.

    Args:
        options: Run options
    """
    with exit_on_error(title="Error Running perf-runner"):
        from perf_runner.cli_runner import run_benchmarks

        return run_benchmarks(options or RunOptions())


if __name__ == "__main__":
    sys.exit(app())
