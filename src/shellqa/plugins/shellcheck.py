# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Linter plugin backed by ``shellcheck``."""

from __future__ import annotations

from shellqa.core.models import CheckResult
from shellqa.interfaces import Document
from shellqa.tools.shellcheck import ShellcheckTool

from .interface import BasePlugin, CheckOptions


class ShellcheckPlugin(BasePlugin):
    """Report shellcheck findings for the current buffer content."""

    name = "shellcheck"
    display_name = "ShellCheck"
    description = "Static analysis for shell scripts"

    def __init__(self, tool: ShellcheckTool, *, report_execution_errors: bool = True) -> None:
        super().__init__(report_execution_errors=report_execution_errors)
        self.tool = tool

    async def is_available(self) -> bool:
        return await self.tool.is_available()

    async def check(self, document: Document, options: CheckOptions | None = None) -> CheckResult:
        options = options or CheckOptions()
        text = document.get_text()
        result = await self.tool.check(text, token=options.token, timeout_ms=options.timeout_ms)
        return self.result_from_tool(result, text)


__all__ = ["ShellcheckPlugin"]
