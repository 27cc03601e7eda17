# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Parser for ``shellcheck`` gcc-style and tty-style output."""

from __future__ import annotations

import re
from collections.abc import Iterator, Sequence
from typing import Final

from shellqa.core.models import ExecutionResult, LinterIssue, ToolMode, ToolResult
from shellqa.core.severity import linter_severity_from_label

from .base import error_result, iter_pattern_matches, to_zero_based

SHELLCHECK_GCC_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^(?P<file>.+?):(?P<line>\d+):(?P<column>\d+): "
    r"(?P<severity>error|warning|note|info|style): (?P<message>.+?) \[(?P<code>SC\d+)\]$",
)
SHELLCHECK_BLOCK_HEADER: Final[re.Pattern[str]] = re.compile(r"^In (?P<file>.+) line (?P<line>\d+):$")
SHELLCHECK_BLOCK_NOTE: Final[re.Pattern[str]] = re.compile(
    r"^(?P<indent>\s*)\^[-^]*\s+(?P<code>SC\d+)(?:\s+\((?P<severity>\w+)\))?:\s+(?P<message>.+)$",
)
# Exit 1 means findings; 2 and above mean shellcheck could not run as asked.
_USAGE_FAILURE_EXIT: Final[int] = 2


def parse_shellcheck_output(result: ExecutionResult, mode: ToolMode = ToolMode.CHECK) -> ToolResult:
    """Parse a ``shellcheck`` execution into linter issues.

    stdout and stderr are scanned together. Lines matching neither the gcc
    format nor the tty block format are skipped.

    Args:
        result: Execution outcome of ``shellcheck``.
        mode: Ignored; the linter only supports checking.

    Returns:
        ToolResult: Linter issues in output order, or a failure.
    """

    del mode
    failed = error_result(result)
    if failed is not None:
        return failed

    lines = result.combined_output.splitlines()
    issues = list(_iter_gcc_issues(lines))
    if not issues:
        issues = list(_iter_block_issues(lines))
    if not issues and (result.exit_code or 0) >= _USAGE_FAILURE_EXIT and result.stderr.strip():
        return ToolResult(failure=f"shellcheck failed: {result.stderr.strip()}", command=result.command)
    return ToolResult(issues=tuple(issues), command=result.command)


def _iter_gcc_issues(lines: Sequence[str]) -> Iterator[LinterIssue]:
    for match in iter_pattern_matches(lines, SHELLCHECK_GCC_PATTERN):
        yield LinterIssue(
            line=to_zero_based(match.group("line")),
            column=to_zero_based(match.group("column")),
            severity=linter_severity_from_label(match.group("severity")),
            code=match.group("code"),
            message=match.group("message").strip(),
        )


def _iter_block_issues(lines: Sequence[str]) -> Iterator[LinterIssue]:
    """Yield issues from the human readable ``In <file> line N:`` blocks.

    The caret under the echoed source line marks the column.
    """

    current_line: int | None = None
    for raw_line in lines:
        header = SHELLCHECK_BLOCK_HEADER.match(raw_line.strip())
        if header:
            current_line = to_zero_based(header.group("line"))
            continue
        if current_line is None:
            continue
        note = SHELLCHECK_BLOCK_NOTE.match(raw_line.rstrip())
        if note is None:
            continue
        yield LinterIssue(
            line=current_line,
            column=len(note.group("indent")),
            severity=linter_severity_from_label(note.group("severity")),
            code=note.group("code"),
            message=note.group("message").strip(),
        )


__all__ = ["SHELLCHECK_GCC_PATTERN", "parse_shellcheck_output"]
