# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Logging setup for the perf-runner CLI."""

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

__all__ = [
    "create_file_handler",
    "setup_rich_logging",
]

_QUIET_LOGGERS = ("paramiko",)


def setup_rich_logging(level: str | int, log_file: Path | None = None) -> None:
    """Install a rich console handler (and optionally a file handler) on the root logger.

    The console handler writes to stderr so that machine-readable output on
    stdout stays clean.
    """
    if isinstance(level, str):
        level = level.upper()
    logging.root.setLevel(level)

    rich_handler = RichHandler(
        rich_tracebacks=True,
        show_path=True,
        console=Console(stderr=True),
        show_time=True,
        show_level=True,
        tracebacks_show_locals=False,
        log_time_format="%H:%M:%S.%f",
        omit_repeated_times=False,
    )
    logging.root.addHandler(rich_handler)

    if log_file is not None:
        logging.root.addHandler(create_file_handler(log_file, level))

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(f"Logging initialized with level: {level}")


def create_file_handler(log_file: Path, level: str | int) -> logging.FileHandler:
    """Configure a file handler for logging."""
    log_file = Path(log_file)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(level)
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    return file_handler
