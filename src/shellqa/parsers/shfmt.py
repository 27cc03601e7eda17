# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Parser for ``shfmt`` output in format and diff (check) modes."""

from __future__ import annotations

import logging
import re
from typing import Final

from shellqa.core.models import ExecutionResult, FormatIssue, SyntaxIssue, ToolMode, ToolResult

from .base import error_result, iter_pattern_matches, to_zero_based

LOGGER = logging.getLogger(__name__)

SHFMT_SYNTAX_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^(?P<file>.*?):(?P<line>\d+):(?P<column>\d+): (?P<message>.+)$",
)
SHFMT_HUNK_PATTERN: Final[re.Pattern[str]] = re.compile(r"^@@ -(?P<line>\d+)(?:,\d+)? \+\d+(?:,\d+)? @@")
FORMAT_ISSUE_MESSAGE: Final[str] = "File is not formatted according to shfmt"


def parse_shfmt_output(result: ExecutionResult, mode: ToolMode) -> ToolResult:
    """Parse an ``shfmt`` execution into a typed result.

    A reported syntax error always wins over diff output: the tool cannot
    produce a meaningful diff for a script it failed to parse.

    Args:
        result: Execution outcome of ``shfmt``.
        mode: ``FORMAT`` when stdout carries the formatted script, ``CHECK``
            when it carries a unified diff.

    Returns:
        ToolResult: Syntax error, format issue, formatted content, or failure.
    """

    failed = error_result(result)
    if failed is not None:
        return failed

    syntax = _first_syntax_error(result.stderr)
    if syntax is not None and not result.succeeded:
        return ToolResult(issues=(syntax,), command=result.command)

    if mode is ToolMode.CHECK:
        if result.stdout.strip():
            return ToolResult(issues=(_format_issue(result.stdout),), command=result.command)
        if result.succeeded:
            return ToolResult(command=result.command)
    elif result.succeeded:
        if result.stderr.strip():
            LOGGER.debug("shfmt succeeded with stderr output: %s", result.stderr.strip())
        return ToolResult(formatted_content=result.stdout, command=result.command)

    detail = result.stderr.strip() or f"exit status {result.exit_code}"
    return ToolResult(failure=f"shfmt failed: {detail}", command=result.command)


def _first_syntax_error(stderr: str) -> SyntaxIssue | None:
    for match in iter_pattern_matches(stderr.splitlines(), SHFMT_SYNTAX_PATTERN):
        return SyntaxIssue(
            line=to_zero_based(match.group("line")),
            column=to_zero_based(match.group("column")),
            message=match.group("message").strip(),
        )
    return None


def _format_issue(diff: str) -> FormatIssue:
    line = 0
    for match in iter_pattern_matches(diff.splitlines(), SHFMT_HUNK_PATTERN):
        line = to_zero_based(match.group("line"))
        break
    return FormatIssue(message=FORMAT_ISSUE_MESSAGE, diff=diff, line=line)


__all__ = ["FORMAT_ISSUE_MESSAGE", "SHFMT_SYNTAX_PATTERN", "parse_shfmt_output"]
