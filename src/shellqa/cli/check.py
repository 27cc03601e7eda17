# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""``shellqa check``: diagnose shell scripts and print the findings."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from pathlib import Path

import typer

from shellqa.config import Config
from shellqa.core.metrics import PerformanceMonitor
from shellqa.core.models import CheckResult
from shellqa.core.severity import Severity
from shellqa.diagnostics import InMemoryDiagnosticSink
from shellqa.documents import TextDocument, is_shell_document
from shellqa.orchestration import OrchestrationContext

from .options import ConfigOption, EmojiOption, FilesArgument, TimingsOption, VerboseOption
from .rendering import build_timings_table, format_diagnostic, stdout_console
from .shared import CLIError, CLILogger, build_cli_logger, prepare_runtime


async def _diagnose(
    config: Config,
    documents: Sequence[TextDocument],
    monitor: PerformanceMonitor,
) -> tuple[int, list[tuple[TextDocument, CheckResult]]]:
    context = OrchestrationContext(config, InMemoryDiagnosticSink(), monitor=monitor)
    active = await context.start()
    try:
        results = await asyncio.gather(*(context.open_document(document) for document in documents))
    finally:
        await context.shutdown()
    outcomes = [(document, result) for document, result in zip(documents, results, strict=True) if result is not None]
    return active, outcomes


def _load_documents(paths: Sequence[Path], logger: CLILogger) -> list[TextDocument]:
    documents: list[TextDocument] = []
    for path in paths:
        try:
            document = TextDocument.from_path(path)
        except (OSError, UnicodeDecodeError) as exc:
            raise CLIError(f"Cannot read {path}: {exc}") from exc
        if not is_shell_document(document):
            logger.warn(f"Skipping {path}: not a shell script")
            continue
        documents.append(document)
    return documents


def run_check(
    paths: Sequence[Path],
    *,
    config_file: Path | None = None,
    verbose: bool = False,
    timings: bool = False,
    emoji: bool = True,
) -> int:
    """Diagnose ``paths`` and print every diagnostic.

    Args:
        paths: Files to diagnose.
        config_file: Explicit configuration file.
        verbose: Enable debug logging.
        timings: Print timing statistics afterwards.
        emoji: Allow emoji in status lines.

    Returns:
        int: ``1`` when any error-level diagnostic or inconclusive run was
        reported, ``0`` otherwise.
    """

    logger = build_cli_logger(emoji=emoji, debug=verbose)
    config = prepare_runtime(config_file=config_file, verbose=verbose)
    documents = _load_documents(paths, logger)
    if not documents:
        logger.warn("No shell scripts to check")
        return 0

    monitor = PerformanceMonitor(enabled=timings)
    active, outcomes = asyncio.run(_diagnose(config, documents, monitor))
    if not active:
        logger.warn("No plugin is available; install shellcheck or shfmt")

    exit_code = 0
    total = 0
    for document, result in outcomes:
        if result.inconclusive:
            logger.fail(f"{document.file_name}: diagnosis did not complete ({result.error_message or 'cancelled'})")
            exit_code = 1
            continue
        for diagnostic in result.diagnostics:
            logger.echo(format_diagnostic(document.file_name, diagnostic))
            total += 1
            if diagnostic.severity is Severity.ERROR:
                exit_code = 1
    if total == 0 and exit_code == 0:
        logger.ok(f"Checked {len(outcomes)} file(s): no problems found")
    elif total:
        logger.echo(f"{total} problem(s) in {len(outcomes)} file(s)")
    if timings:
        stdout_console().print(build_timings_table(monitor.snapshot()))
    return exit_code


def check_command(
    files: FilesArgument,
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
    timings: TimingsOption = False,
    emoji: EmojiOption = True,
) -> None:
    """Diagnose shell scripts with every enabled backend."""

    try:
        exit_code = run_check(files, config_file=config_file, verbose=verbose, timings=timings, emoji=emoji)
    except CLIError as exc:
        build_cli_logger(emoji=emoji).fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc
    raise typer.Exit(code=exit_code)


__all__ = ["check_command", "run_check"]
