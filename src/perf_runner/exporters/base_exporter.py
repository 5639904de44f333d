# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Base class for result exporters."""

import sys
from abc import ABC, abstractmethod
from typing import TextIO

from perf_runner.exporters.exporter_config import ResultsExporterConfig


class BaseResultsExporter(ABC):
    """Renders the results of a run to a text stream."""

    def __init__(self, config: ResultsExporterConfig) -> None:
        self._config = config

    @abstractmethod
    def export(self, file: TextIO | None = None) -> None:
        """Write the report to ``file`` (stdout by default)."""
        pass

    @staticmethod
    def _stream(file: TextIO | None) -> TextIO:
        return file if file is not None else sys.stdout
