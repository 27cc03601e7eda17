# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the asynchronous process executor."""

from __future__ import annotations

import asyncio
import os
import sys
import time
from pathlib import Path

import pytest

from shellqa.core.cancellation import CancellationTokenSource
from shellqa.core.models import (
    ExecutionCancelled,
    ExecutionResult,
    ExecutionTimeout,
    SpawnFailure,
    SpawnFailureKind,
)
from shellqa.core.runtime.process import ExecutionOptions, ExecutionRequest, execute, find_executable, run

PYTHON = sys.executable


def test_execute_captures_output_and_exit_code() -> None:
    script = "import sys; print('out'); print('err', file=sys.stderr); sys.exit(3)"
    result = asyncio.run(execute(PYTHON, ["-c", script]))

    assert result.exit_code == 3
    assert result.error is None
    assert result.stdout.strip() == "out"
    assert result.stderr.strip() == "err"
    assert result.command.startswith(PYTHON)


def test_execute_pipes_stdin() -> None:
    script = "import sys; sys.stdout.write(sys.stdin.read().upper())"
    result = asyncio.run(execute(PYTHON, ["-c", script], overrides={"stdin": "echo hi\n"}))

    assert result.succeeded
    assert result.stdout == "ECHO HI\n"


def test_execute_accepts_keyword_options(tmp_path: Path) -> None:
    script = "import os, sys; sys.stdout.write(sys.stdin.read() + os.getcwd() + os.environ['MARK'])"
    base = ExecutionOptions(stdin="ignored", timeout_ms=100)

    result = asyncio.run(
        execute(
            PYTHON,
            ["-c", script],
            stdin="hi ",
            timeout_ms=5000,
            cwd=tmp_path,
            env={**os.environ, "MARK": "!"},
            options=base,
            overrides={"stdin": "also ignored"},
        ),
    )

    assert result.succeeded, result.stderr
    assert result.stdout == f"hi {tmp_path.resolve()}!"


def test_keyword_timeout_applies() -> None:
    result = asyncio.run(execute(PYTHON, ["-c", "import time; time.sleep(30)"], timeout_ms=300))

    assert isinstance(result.error, ExecutionTimeout)
    assert result.error.timeout_ms == 300


def test_execute_without_stdin_reads_eof() -> None:
    script = "import sys; print(repr(sys.stdin.read()))"
    result = asyncio.run(execute(PYTHON, ["-c", script]))
    assert result.stdout.strip() == "''"


def test_timeout_kills_process_and_keeps_partial_output() -> None:
    script = "import time; print('partial', flush=True); time.sleep(30)"
    started = time.monotonic()
    result = asyncio.run(execute(PYTHON, ["-c", script], options=ExecutionOptions(timeout_ms=500)))
    elapsed = time.monotonic() - started

    assert isinstance(result.error, ExecutionTimeout)
    assert result.exit_code is None
    assert result.error.timeout_ms == 500
    assert "timed out after 500ms" in result.error.message
    assert "partial" in result.stdout
    assert elapsed < 10


def test_cancellation_terminates_running_process() -> None:
    async def scenario() -> tuple[ExecutionResult, float]:
        source = CancellationTokenSource()
        loop = asyncio.get_running_loop()
        loop.call_later(0.3, source.cancel)
        started = time.monotonic()
        result = await execute(
            PYTHON,
            ["-c", "import time; time.sleep(30)"],
            options=ExecutionOptions(token=source.token, timeout_ms=None),
        )
        return result, time.monotonic() - started

    result, elapsed = asyncio.run(scenario())

    assert isinstance(result.error, ExecutionCancelled)
    assert result.error.message.endswith("cancelled")
    assert elapsed < 10


def test_already_cancelled_token_skips_spawn() -> None:
    source = CancellationTokenSource()
    source.cancel()
    result = asyncio.run(execute("definitely-not-a-real-binary", options=ExecutionOptions(token=source.token)))

    assert isinstance(result.error, ExecutionCancelled)
    assert "cancelled before start" in result.error.message


def test_cancelling_one_execution_leaves_others_running() -> None:
    async def scenario() -> tuple[ExecutionResult, ExecutionResult]:
        first = CancellationTokenSource()
        second = CancellationTokenSource()
        script = "import time; time.sleep(0.5); print('done')"
        task_a = asyncio.create_task(execute(PYTHON, ["-c", script], options=ExecutionOptions(token=first.token)))
        task_b = asyncio.create_task(execute(PYTHON, ["-c", script], options=ExecutionOptions(token=second.token)))
        await asyncio.sleep(0.1)
        first.cancel()
        return await task_a, await task_b

    cancelled, completed = asyncio.run(scenario())

    assert isinstance(cancelled.error, ExecutionCancelled)
    assert completed.succeeded
    assert completed.stdout.strip() == "done"


def test_missing_executable_reports_not_installed(missing_tool: str) -> None:
    result = asyncio.run(execute(missing_tool, ["--version"]))

    assert isinstance(result.error, SpawnFailure)
    assert result.error.reason is SpawnFailureKind.NOT_FOUND
    assert result.error.code == "ENOENT"
    assert result.exit_code is None


def test_non_executable_file_reports_permission_denied(tmp_path: Path) -> None:
    target = tmp_path / "tool"
    target.write_text("#!/bin/sh\n", encoding="utf-8")
    target.chmod(0o644)

    result = asyncio.run(execute(str(target)))

    assert isinstance(result.error, SpawnFailure)
    assert result.error.reason is SpawnFailureKind.PERMISSION_DENIED


def test_empty_command_is_rejected() -> None:
    with pytest.raises(ValueError, match="requires a command"):
        asyncio.run(run(ExecutionRequest(command="")))


def test_unknown_override_is_rejected() -> None:
    with pytest.raises(TypeError, match="Unknown execution option"):
        ExecutionOptions().with_overrides({"shell": True})  # type: ignore[dict-item]


def test_negative_timeout_is_rejected() -> None:
    with pytest.raises(ValueError, match="non-negative"):
        ExecutionOptions(timeout_ms=-1)


def test_awaiting_task_cancellation_kills_child() -> None:
    async def scenario() -> None:
        task = asyncio.create_task(execute(PYTHON, ["-c", "import time; time.sleep(30)"]))
        await asyncio.sleep(0.3)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    started = time.monotonic()
    asyncio.run(scenario())
    assert time.monotonic() - started < 10


def test_find_executable(tmp_path: Path) -> None:
    assert find_executable(PYTHON) == PYTHON
    assert find_executable(str(tmp_path / "missing")) is None
    assert find_executable("") is None
