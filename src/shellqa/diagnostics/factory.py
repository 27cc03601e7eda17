# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Translate typed tool results into host-neutral diagnostics and edits."""

from __future__ import annotations

from typing import Final

from shellqa.core.models import (
    Diagnostic,
    ExecutionError,
    FormatIssue,
    LinterIssue,
    Range,
    SyntaxIssue,
    TextEdit,
    ToolResult,
)
from shellqa.core.severity import Severity, to_severity
from shellqa.documents import full_range, line_range

from .messages import FORMAT_ISSUE_MESSAGE, execution_error_message

EXECUTION_ERROR_CODE: Final[str] = "execution-error"
SYNTAX_ERROR_CODE: Final[str] = "syntax-error"
FORMAT_ISSUE_CODE: Final[str] = "format-issue"


class DiagnosticFactory:
    """Build diagnostics attributed to one source (usually a plugin name).

    Categories are emitted in display precedence: an execution error or tool
    failure replaces everything else; otherwise syntax errors come first,
    followed by format issues and linter findings.
    """

    def __init__(self, source: str) -> None:
        self.source = source

    def from_tool_result(self, result: ToolResult, text: str) -> list[Diagnostic]:
        """Return diagnostics for ``result`` against document ``text``.

        Args:
            result: Parsed tool result.
            text: Document content the tool ran against.

        Returns:
            list[Diagnostic]: Diagnostics in precedence order.
        """

        if result.execution_error is not None:
            return [self.execution_error(result.execution_error, text, command=result.command)]
        if result.failure is not None:
            return [self.error(result.failure, text, command=result.command)]
        diagnostics = [self.syntax_error(issue, text) for issue in result.syntax_errors]
        diagnostics.extend(self.format_issue(issue) for issue in result.format_issues)
        diagnostics.extend(self.linter_issue(issue) for issue in result.linter_issues)
        return diagnostics

    def error(self, message: str, text: str, *, command: str | None = None) -> Diagnostic:
        """Return an error pinned to the first line of the document."""

        if command:
            message = f"{message}\n\nCommand: {command}"
        return Diagnostic(
            range=line_range(text, 0),
            message=message,
            severity=Severity.ERROR,
            code=EXECUTION_ERROR_CODE,
            source=self.source,
        )

    def execution_error(self, error: ExecutionError, text: str, *, command: str | None = None) -> Diagnostic:
        return self.error(execution_error_message(self.source, error), text, command=command)

    def syntax_error(self, issue: SyntaxIssue, text: str) -> Diagnostic:
        return Diagnostic(
            range=line_range(text, issue.line),
            message=f"Syntax error: {issue.message}",
            severity=Severity.ERROR,
            code=SYNTAX_ERROR_CODE,
            source=self.source,
        )

    def format_issue(self, issue: FormatIssue) -> Diagnostic:
        return Diagnostic(
            range=Range.of(issue.line, issue.column, issue.line, issue.column + issue.range_length),
            message=FORMAT_ISSUE_MESSAGE,
            severity=Severity.WARNING,
            code=FORMAT_ISSUE_CODE,
            source=self.source,
        )

    def linter_issue(self, issue: LinterIssue) -> Diagnostic:
        return Diagnostic(
            range=Range.of(issue.line, issue.column, issue.line, issue.column + 1),
            message=f"{issue.code}: {issue.message}",
            severity=to_severity(issue.severity),
            code=issue.code,
            source=self.source,
        )


def text_edits_for(result: ToolResult, text: str) -> tuple[TextEdit, ...]:
    """Return the edits turning ``text`` into the formatter output.

    Yields a single full-document replacement, or nothing when the formatter
    produced no content or the content is unchanged.
    """

    if result.is_blocking or result.formatted_content is None:
        return ()
    if result.formatted_content == text:
        return ()
    return (TextEdit(range=full_range(text), new_text=result.formatted_content),)


def is_blocking_diagnostic(diagnostic: Diagnostic) -> bool:
    """Return ``True`` for diagnostics that must stop an automatic format."""

    return diagnostic.code in {EXECUTION_ERROR_CODE, SYNTAX_ERROR_CODE}


__all__ = [
    "DiagnosticFactory",
    "EXECUTION_ERROR_CODE",
    "FORMAT_ISSUE_CODE",
    "SYNTAX_ERROR_CODE",
    "is_blocking_diagnostic",
    "text_edits_for",
]
