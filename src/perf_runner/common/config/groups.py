# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
from cyclopts import Group


class Groups:
    """Groups for the CLI.

    NOTE: The order of these groups is the order they are displayed in the help text.
    """

    RUN = Group.create_ordered("Run")
    OUTPUT = Group.create_ordered("Output")
