# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""``shellqa plugins``: list registered plugins and their state."""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer

from shellqa.config import Config
from shellqa.diagnostics import InMemoryDiagnosticSink
from shellqa.orchestration import OrchestrationContext
from shellqa.plugins import PluginStats

from .options import ConfigOption, EmojiOption, VerboseOption
from .rendering import build_plugins_table, stdout_console
from .shared import CLIError, build_cli_logger, prepare_runtime


async def _collect(config: Config) -> tuple[PluginStats, tuple[str, ...]]:
    context = OrchestrationContext(config, InMemoryDiagnosticSink())
    await context.start()
    try:
        available = await context.manager.get_available_plugins()
        return context.manager.stats(), available
    finally:
        await context.shutdown()


def run_plugins(*, config_file: Path | None = None, verbose: bool = False, emoji: bool = True) -> int:
    """Print the plugin table and return ``1`` when nothing is active."""

    logger = build_cli_logger(emoji=emoji, debug=verbose)
    config = prepare_runtime(config_file=config_file, verbose=verbose)
    stats, available = asyncio.run(_collect(config))
    if not stats.total:
        logger.warn("No plugins registered; every backend is disabled")
        return 1
    stdout_console().print(build_plugins_table(stats, available))
    if not stats.active:
        logger.warn("No plugin is active")
        return 1
    logger.info(f"{stats.active} of {stats.total} plugin(s) active")
    return 0


def plugins_command(
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
    emoji: EmojiOption = True,
) -> None:
    """List registered plugins, their availability and activation state."""

    try:
        exit_code = run_plugins(config_file=config_file, verbose=verbose, emoji=emoji)
    except CLIError as exc:
        build_cli_logger(emoji=emoji).fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc
    raise typer.Exit(code=exit_code)


__all__ = ["plugins_command", "run_plugins"]
