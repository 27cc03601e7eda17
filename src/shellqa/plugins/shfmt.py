# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Formatter plugin backed by ``shfmt``."""

from __future__ import annotations

from shellqa.core.models import CheckResult, FormatResult
from shellqa.interfaces import Document
from shellqa.tools.shfmt import ShfmtTool

from .interface import BasePlugin, CheckOptions, FormatOptions


class ShfmtPlugin(BasePlugin):
    """Report syntax errors and formatting drift, and format documents."""

    name = "shfmt"
    display_name = "shfmt"
    description = "Shell script formatter"

    def __init__(self, tool: ShfmtTool, *, report_execution_errors: bool = True) -> None:
        super().__init__(report_execution_errors=report_execution_errors)
        self.tool = tool

    async def is_available(self) -> bool:
        return await self.tool.is_available()

    async def check(self, document: Document, options: CheckOptions | None = None) -> CheckResult:
        options = options or CheckOptions()
        text = document.get_text()
        result = await self.tool.check(text, token=options.token, timeout_ms=options.timeout_ms)
        return self.result_from_tool(result, text)

    async def format(self, document: Document, options: FormatOptions | None = None) -> FormatResult:
        options = options or FormatOptions()
        text = document.get_text()
        result = await self.tool.format(text, token=options.token, timeout_ms=options.timeout_ms)
        return self.format_result(result, text)


__all__ = ["ShfmtPlugin"]
