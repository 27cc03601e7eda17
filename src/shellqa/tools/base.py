# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared plumbing for external tool adapters."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Final

from shellqa.core.metrics import PerformanceMonitor
from shellqa.core.models import ExecutionResult
from shellqa.core.runtime.process import DEFAULT_TIMEOUT_MS, ExecutionOptions, ExecutionRequest, run
from shellqa.interfaces import CancellationToken

LOGGER = logging.getLogger(__name__)

STDIN_MARKER: Final[str] = "-"
VERSION_CHECK_TIMEOUT_MS: Final[int] = 5_000


class ExternalTool:
    """Bind an executable path and timeout to a tool adapter.

    Subclasses translate their settings into argument vectors and pick the
    parser for the output; this class owns the invocation itself.
    """

    name: str = "tool"
    version_args: tuple[str, ...] = ("--version",)

    def __init__(
        self,
        command_path: str,
        *,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        monitor: PerformanceMonitor | None = None,
    ) -> None:
        if not command_path:
            raise ValueError(f"{self.name} command path must not be empty")
        self.command_path = command_path
        self.timeout_ms = timeout_ms
        self.monitor = monitor or PerformanceMonitor(enabled=False)

    def command_string(self, args: Sequence[str]) -> str:
        return ExecutionRequest(command=self.command_path, args=tuple(args)).full_command

    async def invoke(
        self,
        args: Sequence[str],
        *,
        stdin: str | None = None,
        token: CancellationToken | None = None,
        timeout_ms: int | None = None,
        metric: str | None = None,
    ) -> ExecutionResult:
        """Run the tool with ``args``.

        Args:
            args: Arguments following the executable.
            stdin: Text piped to the process.
            token: Cancellation token for the run.
            timeout_ms: Per-call timeout overriding the adapter default.
            metric: Metric name the duration is recorded under.

        Returns:
            ExecutionResult: Raw execution outcome.
        """

        options = ExecutionOptions(
            stdin=stdin,
            token=token,
            timeout_ms=timeout_ms if timeout_ms is not None else self.timeout_ms,
        )
        request = ExecutionRequest(command=self.command_path, args=tuple(args), options=options)
        if metric is None:
            return await run(request)
        with self.monitor.timer(metric):
            return await run(request)

    async def check_version(self, *, token: CancellationToken | None = None) -> ExecutionResult:
        """Run the version command used to test availability."""

        return await self.invoke(self.version_args, token=token, timeout_ms=VERSION_CHECK_TIMEOUT_MS)

    async def is_available(self) -> bool:
        result = await self.check_version()
        if not result.succeeded:
            LOGGER.debug("%s unavailable: %s", self.name, result.error.message if result.error else result.stderr)
        return result.succeeded


__all__ = ["ExternalTool", "VERSION_CHECK_TIMEOUT_MS", "STDIN_MARKER"]
