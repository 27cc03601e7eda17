# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared helpers for line oriented tool output parsers."""

from __future__ import annotations

import re
from collections.abc import Iterator, Sequence
from typing import Protocol

from shellqa.core.models import ExecutionResult, ToolMode, ToolResult


class OutputParser(Protocol):
    """Callable converting an execution result into a typed tool result."""

    def __call__(self, result: ExecutionResult, mode: ToolMode) -> ToolResult:
        """Return the parsed result. Implementations never raise on odd output."""


def iter_pattern_matches(
    lines: Sequence[str],
    pattern: re.Pattern[str],
    *,
    skip_prefixes: Sequence[str] = (),
    skip_blank: bool = True,
) -> Iterator[re.Match[str]]:
    """Yield regex matches from ``lines`` while filtering unwanted entries.

    Args:
        lines: Sequence of raw lines emitted by a tool.
        pattern: Compiled regular expression used to match diagnostic lines.
        skip_prefixes: Optional prefixes that, when present, skip the line.
        skip_blank: When ``True`` blank lines are ignored.

    Yields:
        re.Match[str]: Match objects produced by ``pattern``.
    """

    forbidden = tuple(skip_prefixes)
    for raw_line in lines:
        line = raw_line.strip()
        if skip_blank and not line:
            continue
        if forbidden and line.startswith(forbidden):
            continue
        match = pattern.match(line)
        if match:
            yield match


def to_zero_based(value: str | int) -> int:
    """Convert a 1-based tool coordinate to the internal 0-based convention."""

    return max(int(value) - 1, 0)


def error_result(result: ExecutionResult) -> ToolResult | None:
    """Return a tool result carrying ``result.error`` when execution failed."""

    if result.error is None:
        return None
    return ToolResult(execution_error=result.error, command=result.command)


__all__ = ["OutputParser", "error_result", "iter_pattern_matches", "to_zero_based"]
