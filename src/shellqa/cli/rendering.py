# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Rendering helpers shared by the CLI commands."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path

from rich import box
from rich.console import Console
from rich.table import Table

from shellqa.core.models import Diagnostic
from shellqa.plugins import PluginStats
from shellqa.runtime.console.manager import get_console_manager


def stdout_console() -> Console:
    return get_console_manager().get(color=True, emoji=False)


def format_diagnostic(path: Path | str, diagnostic: Diagnostic) -> str:
    """Return ``diagnostic`` as a one-based ``path:line:col`` record.

    Args:
        path: File the diagnostic belongs to.
        diagnostic: Diagnostic to render.

    Returns:
        str: Single-line rendering; multi-line messages keep their first line.
    """

    start = diagnostic.range.start
    message = diagnostic.message.splitlines()[0] if diagnostic.message else ""
    code = f" [{diagnostic.source}:{diagnostic.code}]" if diagnostic.code else f" [{diagnostic.source}]"
    return f"{path}:{start.line + 1}:{start.character + 1}: {diagnostic.severity.value}: {message}{code}"


def build_plugins_table(stats: PluginStats, available: Iterable[str]) -> Table:
    """Return a table listing every registered plugin and its state."""

    available_names = set(available)
    table = Table(title="Plugins", box=box.SIMPLE_HEAVY)
    table.add_column("Name", style="bold")
    table.add_column("Display name")
    table.add_column("Version")
    table.add_column("Available")
    table.add_column("Active")
    for info in stats.plugins:
        table.add_row(
            info.name,
            info.display_name,
            info.version,
            "yes" if info.name in available_names else "no",
            "yes" if info.active else "no",
        )
    return table


def build_timings_table(snapshot: Mapping[str, Mapping[str, float | int]]) -> Table:
    table = Table(title="Timings", box=box.SIMPLE_HEAVY)
    table.add_column("Metric", style="bold")
    for column in ("Count", "Avg ms", "Min ms", "Max ms"):
        table.add_column(column, justify="right")
    for name, payload in snapshot.items():
        table.add_row(
            name,
            str(payload["count"]),
            f"{payload['avg_ms']:.1f}",
            f"{payload['min_ms']:.1f}",
            f"{payload['max_ms']:.1f}",
        )
    return table


__all__ = [
    "build_plugins_table",
    "build_timings_table",
    "format_diagnostic",
    "stdout_console",
]
