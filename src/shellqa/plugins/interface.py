# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Plugin contract and the shared base class for tool-backed plugins."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

from shellqa import __version__
from shellqa.core.models import CheckResult, Diagnostic, FormatResult, ToolResult
from shellqa.core.severity import Severity
from shellqa.diagnostics.factory import DiagnosticFactory, text_edits_for
from shellqa.diagnostics.messages import syntax_error_summary
from shellqa.documents import SHELL_EXTENSIONS, SHELL_LANGUAGE_ID
from shellqa.interfaces import CancellationToken, Document

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CheckOptions:
    """Per-call options for :meth:`Plugin.check`."""

    token: CancellationToken | None = None
    timeout_ms: int | None = None


@dataclass(frozen=True, slots=True)
class FormatOptions(CheckOptions):
    """Per-call options for :meth:`FormattingPlugin.format`."""


@runtime_checkable
class Plugin(Protocol):
    """Uniform adapter exposing one backend to the plugin manager."""

    name: str
    display_name: str
    version: str
    description: str
    supported_extensions: tuple[str, ...]

    async def is_available(self) -> bool:
        """Return ``True`` when the backend can run."""

    async def check(self, document: Document, options: CheckOptions | None = None) -> CheckResult:
        """Diagnose ``document``."""


@runtime_checkable
class FormattingPlugin(Plugin, Protocol):
    """Plugin that can also produce formatting edits."""

    async def format(self, document: Document, options: FormatOptions | None = None) -> FormatResult:
        """Return edits formatting ``document``."""


class BasePlugin:
    """Common behaviour for plugins wrapping one external tool.

    Subclasses set the descriptive class attributes and implement ``check``
    (and ``format`` when they format). Results are built with the helpers
    here so every plugin reports failures the same way.
    """

    name: str = "plugin"
    display_name: str = "Plugin"
    version: str = __version__
    description: str = ""
    supported_extensions: tuple[str, ...] = SHELL_EXTENSIONS

    def __init__(self, *, report_execution_errors: bool = True) -> None:
        self.report_execution_errors = report_execution_errors
        self.diagnostics = DiagnosticFactory(self.name)

    def supports(self, document: Document) -> bool:
        """Return ``True`` when ``document`` is a shell script this plugin handles."""

        if document.language_id == SHELL_LANGUAGE_ID:
            return True
        return Path(document.file_name).suffix.lower() in self.supported_extensions

    def check_result(self, diagnostics: Sequence[Diagnostic], *, error_message: str | None = None) -> CheckResult:
        return CheckResult(
            has_errors=any(item.severity is Severity.ERROR for item in diagnostics),
            diagnostics=tuple(diagnostics),
            error_message=error_message,
        )

    def error_result(self, message: str, text: str) -> CheckResult:
        return self.check_result([self.diagnostics.error(message, text)], error_message=message)

    def result_from_tool(self, result: ToolResult, text: str) -> CheckResult:
        """Convert a tool result from a check run into a :class:`CheckResult`.

        Cancelled and timed-out runs come back inconclusive with no
        diagnostics so callers can leave earlier results in place.
        """

        if result.inconclusive:
            return CheckResult(inconclusive=True, error_message=_error_message(result))
        if result.execution_error is not None and not self.report_execution_errors:
            LOGGER.info("%s: %s", self.name, result.execution_error.message)
            return CheckResult(error_message=result.execution_error.message)
        diagnostics = self.diagnostics.from_tool_result(result, text)
        return self.check_result(diagnostics, error_message=_error_message(result))

    def format_result(self, result: ToolResult, text: str) -> FormatResult:
        """Convert a tool result from a format run into a :class:`FormatResult`.

        Syntax errors and tool failures produce diagnostics and no edits.
        Unchanged output produces neither.
        """

        if result.inconclusive:
            return FormatResult(inconclusive=True, error_message=_error_message(result))
        if result.is_blocking:
            check = self.result_from_tool(result, text)
            message = check.error_message
            if result.syntax_errors:
                message = syntax_error_summary(len(result.syntax_errors))
            return FormatResult(has_errors=check.has_errors, diagnostics=check.diagnostics, error_message=message)
        if result.formatted_content is None:
            message = "No formatted content returned"
            return FormatResult(
                has_errors=True,
                diagnostics=(self.diagnostics.error(message, text),),
                error_message=message,
            )
        return FormatResult(text_edits=text_edits_for(result, text))


def _error_message(result: ToolResult) -> str | None:
    if result.execution_error is not None:
        return result.execution_error.message
    return result.failure


__all__ = [
    "BasePlugin",
    "CheckOptions",
    "FormatOptions",
    "FormattingPlugin",
    "Plugin",
]
