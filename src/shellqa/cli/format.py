# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""``shellqa format``: format shell scripts with the first available formatter."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer

from shellqa.config import Config
from shellqa.core.metrics import PerformanceMonitor
from shellqa.core.models import FormatResult
from shellqa.diagnostics import InMemoryDiagnosticSink, InMemoryEditSink
from shellqa.diagnostics.messages import FORMAT_REFUSED_MESSAGE
from shellqa.documents import TextDocument, is_shell_document
from shellqa.orchestration import OrchestrationContext
from shellqa.plugins import FormattingPlugin

from .options import ConfigOption, EmojiOption, FilesArgument, TimingsOption, VerboseOption
from .rendering import build_timings_table, format_diagnostic, stdout_console
from .shared import CLIError, CLILogger, build_cli_logger, prepare_runtime


class FormatMode(str, Enum):
    """What to do with formatter output."""

    PRINT = "print"
    WRITE = "write"
    CHECK = "check"


@dataclass(slots=True)
class FormatOutcome:
    """Formatter result for one file."""

    path: Path
    document: TextDocument
    result: FormatResult

    @property
    def changed(self) -> bool:
        return bool(self.result.text_edits)

    @property
    def refused(self) -> bool:
        return not self.changed and bool(self.result.diagnostics)

    def formatted_text(self) -> str:
        """Return the document content after applying the edits."""

        if not self.changed:
            return self.document.text
        buffer = TextDocument(uri=self.document.uri, text=self.document.text, file_name=self.document.file_name)
        if not InMemoryEditSink({buffer.uri: buffer}).apply(buffer.uri, self.result.text_edits):
            raise CLIError(f"Formatter returned edits that cannot be applied to {self.path}")
        return buffer.text


async def _format_all(
    config: Config,
    targets: Sequence[tuple[Path, TextDocument]],
    monitor: PerformanceMonitor,
) -> list[FormatOutcome]:
    context = OrchestrationContext(config, InMemoryDiagnosticSink(), monitor=monitor)
    await context.start()
    try:
        if not any(isinstance(context.manager[name], FormattingPlugin) for name in context.manager.active_names()):
            raise CLIError("No formatter is available; install shfmt or check its configured path")
        results = await asyncio.gather(*(context.format_document(document) for _, document in targets))
    finally:
        await context.shutdown()
    return [
        FormatOutcome(path=path, document=document, result=result)
        for (path, document), result in zip(targets, results, strict=True)
    ]


def _load_targets(paths: Sequence[Path], logger: CLILogger) -> list[tuple[Path, TextDocument]]:
    targets: list[tuple[Path, TextDocument]] = []
    for path in paths:
        try:
            document = TextDocument.from_path(path)
        except (OSError, UnicodeDecodeError) as exc:
            raise CLIError(f"Cannot read {path}: {exc}") from exc
        if not is_shell_document(document):
            logger.warn(f"Skipping {path}: not a shell script")
            continue
        targets.append((path, document))
    return targets


def _report_refusal(outcome: FormatOutcome, logger: CLILogger) -> None:
    logger.fail(f"{outcome.path}: {outcome.result.error_message or FORMAT_REFUSED_MESSAGE}")
    for diagnostic in outcome.result.diagnostics:
        logger.echo(format_diagnostic(outcome.path, diagnostic))


def run_format(
    paths: Sequence[Path],
    *,
    mode: FormatMode = FormatMode.PRINT,
    config_file: Path | None = None,
    verbose: bool = False,
    timings: bool = False,
    emoji: bool = True,
) -> int:
    """Format ``paths`` according to ``mode``.

    ``PRINT`` writes the formatted text to stdout, ``WRITE`` rewrites changed
    files in place and ``CHECK`` lists files that would change.

    Returns:
        int: ``1`` when a file was refused, could not be formatted, or (in
        ``CHECK`` mode) would change; ``0`` otherwise.
    """

    logger = build_cli_logger(emoji=emoji, debug=verbose)
    config = prepare_runtime(config_file=config_file, verbose=verbose)
    if not config.shfmt.enabled:
        raise CLIError("The shfmt formatter is disabled in the configuration")
    targets = _load_targets(paths, logger)
    if not targets:
        logger.warn("No shell scripts to format")
        return 0

    monitor = PerformanceMonitor(enabled=timings)
    outcomes = asyncio.run(_format_all(config, targets, monitor))

    exit_code = 0
    for outcome in outcomes:
        if outcome.result.inconclusive:
            logger.fail(f"{outcome.path}: formatting did not complete ({outcome.result.error_message or 'cancelled'})")
            exit_code = 1
            continue
        if outcome.refused:
            _report_refusal(outcome, logger)
            exit_code = 1
            continue
        if mode is FormatMode.CHECK:
            if outcome.changed:
                logger.echo(f"would reformat {outcome.path}")
                exit_code = 1
        elif mode is FormatMode.WRITE:
            if outcome.changed:
                outcome.path.write_text(outcome.formatted_text(), encoding="utf-8")
                logger.ok(f"Formatted {outcome.path}")
        else:
            typer.echo(outcome.formatted_text(), nl=False)
    if mode is FormatMode.CHECK and exit_code == 0:
        logger.ok(f"{len(outcomes)} file(s) already formatted")
    if timings:
        stdout_console().print(build_timings_table(monitor.snapshot()))
    return exit_code


def format_command(
    files: FilesArgument,
    write: Annotated[bool, typer.Option("--write", "-w", help="Rewrite files in place.")] = False,
    check: Annotated[bool, typer.Option("--check", help="Only report files that would change.")] = False,
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
    timings: TimingsOption = False,
    emoji: EmojiOption = True,
) -> None:
    """Format shell scripts with shfmt."""

    if write and check:
        raise typer.BadParameter("--write and --check are mutually exclusive")
    mode = FormatMode.WRITE if write else FormatMode.CHECK if check else FormatMode.PRINT
    try:
        exit_code = run_format(
            files,
            mode=mode,
            config_file=config_file,
            verbose=verbose,
            timings=timings,
            emoji=emoji,
        )
    except CLIError as exc:
        build_cli_logger(emoji=emoji).fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc
    raise typer.Exit(code=exit_code)


__all__ = ["FormatMode", "FormatOutcome", "format_command", "run_format"]
