# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared rich consoles for status lines and tables.

Status lines go to stderr while formatted scripts and tables go to stdout, so
each stream is checked for a terminal on its own. Setting ``NO_COLOR``
disables colour everywhere.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from functools import cache
from typing import Final, TextIO

from rich.console import Console

NO_COLOR_ENV: Final[str] = "NO_COLOR"


def detect_tty(stream: TextIO | None = None) -> bool:
    """Return ``True`` when ``stream`` (stdout by default) is a terminal."""

    target = sys.stdout if stream is None else stream
    try:
        return target.isatty()
    except (AttributeError, ValueError):
        return False


def colour_disabled() -> bool:
    return bool(os.environ.get(NO_COLOR_ENV))


@dataclass(frozen=True, slots=True)
class ConsoleKey:
    """Settings a cached console was built for."""

    color: bool
    emoji: bool
    stderr: bool
    tty: bool


class RichConsoleManager:
    """Hand out one rich :class:`Console` per :class:`ConsoleKey`."""

    def __init__(self) -> None:
        self._cache: dict[ConsoleKey, Console] = {}

    def key_for(self, *, color: bool, emoji: bool, stderr: bool = False) -> ConsoleKey:
        tty = detect_tty(sys.stderr if stderr else sys.stdout)
        return ConsoleKey(color=color and tty and not colour_disabled(), emoji=emoji, stderr=stderr, tty=tty)

    def get(self, *, color: bool, emoji: bool, stderr: bool = False) -> Console:
        """Return the console for the requested settings.

        The terminal check runs on every call, so output captured by a test
        runner or piped to a file never receives escape sequences even when
        an earlier call saw a terminal.

        Args:
            color: Whether colour is wanted.
            emoji: Whether rich may render emoji codes.
            stderr: Write to standard error instead of stdout.

        Returns:
            Console: Cached or newly built console.
        """

        key = self.key_for(color=color, emoji=emoji, stderr=stderr)
        console = self._cache.get(key)
        if console is None:
            console = Console(
                color_system="auto" if key.color else None,
                force_terminal=key.tty,
                no_color=not key.color,
                emoji=key.emoji,
                soft_wrap=True,
                stderr=key.stderr,
            )
            self._cache[key] = console
        return console

    def reset(self) -> None:
        self._cache.clear()


@cache
def get_console_manager() -> RichConsoleManager:
    return RichConsoleManager()


__all__ = [
    "ConsoleKey",
    "NO_COLOR_ENV",
    "RichConsoleManager",
    "colour_disabled",
    "detect_tty",
    "get_console_manager",
]
