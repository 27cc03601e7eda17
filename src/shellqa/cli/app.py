# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point wiring commands."""

from __future__ import annotations

from .check import check_command
from .format import format_command
from .plugins import plugins_command
from .typer_ext import create_typer

app = create_typer(help="Shell script diagnostics and formatting with shellcheck and shfmt.", no_args_is_help=True)
app.command("check")(check_command)
app.command("format")(format_command)
app.command("plugins")(plugins_command)

__all__ = ["app"]
