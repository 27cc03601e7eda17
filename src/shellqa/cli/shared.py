# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared utilities for CLI commands (logging, errors, runtime setup)."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

import typer
from rich.console import Console
from rich.text import Text

from shellqa.config import Config, ConfigError, load_config
from shellqa.core.logging import configure_logging
from shellqa.core.logging import fail as core_fail
from shellqa.core.logging import info as core_info
from shellqa.core.logging import ok as core_ok
from shellqa.core.logging import warn as core_warn

CONFIG_EXIT_CODE = 2


class CLIError(RuntimeError):
    """Error raised when a CLI command fails and should exit with a status code."""

    def __init__(self, message: str, *, exit_code: int = 1) -> None:
        """Initialise the error with a message and exit code.

        Args:
            message: Human-readable error message shown to the user.
            exit_code: Exit status associated with the failure.
        """

        super().__init__(message)
        self.exit_code = exit_code


@dataclass(slots=True)
class CLILogger:
    """Adapter around project logging helpers respecting CLI emoji settings."""

    console: Console
    use_emoji: bool
    debug_enabled: bool = False
    _key_value_re: re.Pattern[str] = re.compile(r"([\w-]+)=(\".*?\"|\S+)")

    def fail(self, message: str) -> None:
        core_fail(message, use_emoji=self.use_emoji)

    def warn(self, message: str) -> None:
        core_warn(message, use_emoji=self.use_emoji)

    def ok(self, message: str) -> None:
        core_ok(message, use_emoji=self.use_emoji)

    def info(self, message: str) -> None:
        core_info(message, use_emoji=self.use_emoji)

    def echo(self, message: str) -> None:
        """Write ``message`` to stdout unchanged."""

        typer.echo(message)

    def debug(self, message: str) -> None:
        """Emit ``message`` with ``key=value`` pairs highlighted when debugging."""

        if not self.debug_enabled:
            return
        text = Text("[debug] ", style="bold cyan")
        cursor = 0
        for match in self._key_value_re.finditer(message):
            start, end = match.span()
            if start > cursor:
                text.append(message[cursor:start], style="dim")
            text.append(match.group(1), style="bold magenta")
            text.append("=", style="dim")
            text.append(match.group(2), style="bold blue" if match.group(1) in {"command", "cmd"} else "bold green")
            cursor = end
        if cursor < len(message):
            text.append(message[cursor:], style="dim")
        self.console.print(text)


def build_cli_logger(*, emoji: bool, debug: bool = False, no_color: bool = False) -> CLILogger:
    """Return a ``CLILogger`` bound to a dedicated stderr console.

    Args:
        emoji: Whether log output may include emoji glyphs.
        debug: Whether debug logging should be enabled.
        no_color: Whether terminal colour output should be disabled.

    Returns:
        CLILogger: Logger instance.
    """

    console = Console(no_color=no_color, highlight=False, stderr=True)
    return CLILogger(console=console, use_emoji=emoji, debug_enabled=debug)


def prepare_runtime(*, config_file: Path | None, verbose: bool, root: Path | None = None) -> Config:
    """Configure logging and load the effective configuration.

    Args:
        config_file: Explicit configuration file from ``--config``.
        verbose: Enable debug logging.
        root: Project root searched for configuration; the working directory
            by default.

    Returns:
        Config: Effective configuration.

    Raises:
        CLIError: If the configuration cannot be loaded.
    """

    configure_logging(verbose=verbose)
    try:
        return load_config(root or Path.cwd(), config_file=config_file)
    except ConfigError as exc:
        raise CLIError(str(exc), exit_code=CONFIG_EXIT_CODE) from exc


__all__ = [
    "CLIError",
    "CLILogger",
    "CONFIG_EXIT_CODE",
    "build_cli_logger",
    "prepare_runtime",
]
