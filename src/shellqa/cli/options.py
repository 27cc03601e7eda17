# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Typer parameter declarations shared by the commands."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

CONFIG_HELP = "Standalone TOML configuration file (replaces .shellqa.toml)."
VERBOSE_HELP = "Emit debug logging on stderr."
TIMINGS_HELP = "Print a table of tool and plugin timings after the run."

FilesArgument = Annotated[
    list[Path],
    typer.Argument(
        metavar="FILE...",
        exists=True,
        dir_okay=False,
        readable=True,
        help="Shell scripts to process.",
    ),
]
ConfigOption = Annotated[Path | None, typer.Option("--config", "-c", dir_okay=False, help=CONFIG_HELP)]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help=VERBOSE_HELP)]
TimingsOption = Annotated[bool, typer.Option("--timings", help=TIMINGS_HELP)]
EmojiOption = Annotated[bool, typer.Option("--emoji/--no-emoji", help="Decorate status lines with emoji.")]

__all__ = [
    "ConfigOption",
    "EmojiOption",
    "FilesArgument",
    "TimingsOption",
    "VerboseOption",
]
