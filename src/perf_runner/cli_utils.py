# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
from contextlib import AbstractContextManager

# NOTE: Do as little imports as possible in this file to ensure the CLI is fast to start up


def raise_startup_error_and_exit(
    message: str,
    title: str = "Error",
    exit_code: int = 1,
) -> None:
    """Print an error panel to stderr and exit the program.

    Args:
        message: The message to display.
        title: The title of the error.
        exit_code: The exit code to use.
    """
    import sys

    from rich.console import Console
    from rich.panel import Panel
    from rich.text import Text

    console = Console(stderr=True)
    console.print(
        Panel(
            renderable=Text(message),
            title=title,
            title_align="left",
            border_style="bold red",
        )
    )

    sys.exit(exit_code)


class exit_on_error(AbstractContextManager):
    """Context manager that exits the program if an error occurs.

    Errors from this package are shown as a panel only. Anything else also
    gets a traceback, since it points at a bug rather than a bad input.

    Args:
        *exceptions: The exceptions to exit on. If no exceptions are provided, all exceptions will be caught.
        title: The title of the error.
        exit_code: The exit code to use.
    """

    def __init__(
        self,
        *exceptions: type[BaseException],
        title: str = "Error",
        exit_code: int = 1,
    ):
        self.title: str = title
        self.exit_code: int = exit_code
        self.exceptions: tuple[type[BaseException], ...] = exceptions

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        if exc_type is None:
            return

        if (
            not self.exceptions
            and not isinstance(exc_value, (SystemExit | KeyboardInterrupt))
        ) or issubclass(exc_type, self.exceptions):
            from rich.console import Console

            from perf_runner.common.exceptions import PerfRunnerError

            if not isinstance(exc_value, PerfRunnerError):
                console = Console(stderr=True)
                console.print_exception(
                    show_locals=False,
                    max_frames=10,
                    word_wrap=True,
                    width=console.width,
                )
                console.file.flush()
            raise_startup_error_and_exit(
                str(exc_value),
                title=self.title,
                exit_code=self.exit_code,
            )
