# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
from perf_runner.exporters.base_exporter import BaseResultsExporter
from perf_runner.exporters.console_exporter import ConsoleResultsExporter
from perf_runner.exporters.exporter_config import ResultsExporterConfig
from perf_runner.exporters.json_exporter import JsonResultsExporter

__all__ = [
    "BaseResultsExporter",
    "ConsoleResultsExporter",
    "JsonResultsExporter",
    "ResultsExporterConfig",
]
