# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Adapter for the ``shellcheck`` linter."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from shellqa.core.metrics import SHELLCHECK_CHECK, PerformanceMonitor
from shellqa.core.models import ToolMode, ToolResult
from shellqa.core.runtime.process import DEFAULT_TIMEOUT_MS
from shellqa.core.severity import LinterSeverity
from shellqa.interfaces import CancellationToken
from shellqa.parsers.shellcheck import parse_shellcheck_output

from .base import STDIN_MARKER, ExternalTool


@dataclass(frozen=True, slots=True)
class ShellcheckSettings:
    """Optional filters applied to every ``shellcheck`` run."""

    exclude: tuple[str, ...] = ()
    severity: LinterSeverity | None = None
    shell: str | None = None

    def filter_args(self) -> list[str]:
        args: list[str] = []
        if self.exclude:
            args.append(f"--exclude={','.join(self.exclude)}")
        if self.severity is not None:
            args.append(f"--severity={self.severity.value}")
        if self.shell:
            args.append(f"--shell={self.shell}")
        return args


class ShellcheckTool(ExternalTool):
    """Run ``shellcheck`` in gcc output mode."""

    name = "shellcheck"

    def __init__(
        self,
        command_path: str = "shellcheck",
        settings: ShellcheckSettings | None = None,
        *,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        monitor: PerformanceMonitor | None = None,
    ) -> None:
        super().__init__(command_path, timeout_ms=timeout_ms, monitor=monitor)
        self.settings = settings or ShellcheckSettings()

    def build_args(self, file_path: Path | None = None) -> list[str]:
        """Return the argument vector, reading stdin unless ``file_path`` is given."""

        return ["-f", "gcc", *self.settings.filter_args(), str(file_path) if file_path else STDIN_MARKER]

    async def check(
        self,
        content: str | None = None,
        *,
        file_path: Path | None = None,
        token: CancellationToken | None = None,
        timeout_ms: int | None = None,
    ) -> ToolResult:
        """Lint ``content`` (via stdin) or the saved file at ``file_path``.

        Raises:
            ValueError: If neither ``content`` nor ``file_path`` is supplied.
        """

        if content is None and file_path is None:
            raise ValueError("shellcheck needs either content or a file path")
        result = await self.invoke(
            self.build_args(None if content is not None else file_path),
            stdin=content,
            token=token,
            timeout_ms=timeout_ms,
            metric=SHELLCHECK_CHECK,
        )
        return parse_shellcheck_output(result, ToolMode.CHECK)


__all__ = ["ShellcheckSettings", "ShellcheckTool"]
