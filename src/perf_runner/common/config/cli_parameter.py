# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
from cyclopts import Parameter


class CLIParameter(Parameter):
    """A cyclopts Parameter carrying the defaults perf-runner uses for every flag.

    Environment variables are not shown in the help text and boolean flags do
    not get an automatic ``--no-`` variant.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, show_env_var=False, negative=False, **kwargs)
