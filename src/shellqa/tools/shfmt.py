# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Adapter for the ``shfmt`` shell formatter."""

from __future__ import annotations

from dataclasses import dataclass

from shellqa.core.metrics import SHFMT_CHECK, SHFMT_FORMAT, PerformanceMonitor
from shellqa.core.models import ToolMode, ToolResult
from shellqa.core.runtime.process import DEFAULT_TIMEOUT_MS
from shellqa.interfaces import CancellationToken
from shellqa.parsers.shfmt import parse_shfmt_output

from .base import STDIN_MARKER, ExternalTool


@dataclass(frozen=True, slots=True)
class ShfmtSettings:
    """Style flags passed to ``shfmt``.

    ``indent`` of ``None`` leaves the formatter default in place; ``0``
    selects tabs.
    """

    indent: int | None = None
    binary_next_line: bool = True
    case_indent: bool = True
    space_redirects: bool = True

    def style_args(self) -> list[str]:
        args: list[str] = []
        if self.indent is not None:
            args.extend(["-i", str(self.indent)])
        if self.binary_next_line:
            args.append("-bn")
        if self.case_indent:
            args.append("-ci")
        if self.space_redirects:
            args.append("-sr")
        return args


class ShfmtTool(ExternalTool):
    """Run ``shfmt`` over document text supplied on stdin."""

    name = "shfmt"

    def __init__(
        self,
        command_path: str = "shfmt",
        settings: ShfmtSettings | None = None,
        *,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        monitor: PerformanceMonitor | None = None,
    ) -> None:
        super().__init__(command_path, timeout_ms=timeout_ms, monitor=monitor)
        self.settings = settings or ShfmtSettings()

    def build_args(self, mode: ToolMode) -> list[str]:
        """Return the argument vector for ``mode``.

        Check mode asks for a diff (``-d``) instead of the formatted text.
        """

        args = self.settings.style_args()
        if mode is ToolMode.CHECK:
            args.append("-d")
        args.append(STDIN_MARKER)
        return args

    def build_command_string(self, mode: ToolMode) -> str:
        return self.command_string(self.build_args(mode))

    async def format(
        self,
        content: str,
        *,
        token: CancellationToken | None = None,
        timeout_ms: int | None = None,
    ) -> ToolResult:
        """Return the formatted version of ``content``."""

        result = await self.invoke(
            self.build_args(ToolMode.FORMAT),
            stdin=content,
            token=token,
            timeout_ms=timeout_ms,
            metric=SHFMT_FORMAT,
        )
        return parse_shfmt_output(result, ToolMode.FORMAT)

    async def check(
        self,
        content: str,
        *,
        token: CancellationToken | None = None,
        timeout_ms: int | None = None,
    ) -> ToolResult:
        """Report syntax errors and formatting differences in ``content``."""

        result = await self.invoke(
            self.build_args(ToolMode.CHECK),
            stdin=content,
            token=token,
            timeout_ms=timeout_ms,
            metric=SHFMT_CHECK,
        )
        return parse_shfmt_output(result, ToolMode.CHECK)


__all__ = ["ShfmtSettings", "ShfmtTool"]
