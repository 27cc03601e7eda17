# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Asynchronous wrapper around external command execution.

:func:`execute` never raises for anything the external command does. Spawn
failures, timeouts and cancellations are returned as classified errors on the
:class:`~shellqa.core.models.ExecutionResult`, together with whatever output
was captured before the process stopped.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import shutil
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final, Literal

from shellqa.core.models import ExecutionCancelled, ExecutionResult, ExecutionTimeout, SpawnFailure
from shellqa.interfaces import CancellationToken, Disposable

LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS: Final[int] = 30_000

ExecutionOverrideValue = str | Path | Mapping[str, str] | CancellationToken | int | None
ExecutionOptionKey = Literal["stdin", "token", "timeout_ms", "cwd", "env"]
ExecutionOverrideMapping = Mapping[ExecutionOptionKey, ExecutionOverrideValue]

_OPTION_KEYS: Final[frozenset[ExecutionOptionKey]] = frozenset({"stdin", "token", "timeout_ms", "cwd", "env"})
_READ_CHUNK_SIZE: Final[int] = 64 * 1024
_KILL_GRACE_SECONDS: Final[float] = 2.0


@dataclass(slots=True)
class ExecutionOptions:
    """Per-invocation execution options."""

    stdin: str | None = None
    token: CancellationToken | None = None
    timeout_ms: int | None = DEFAULT_TIMEOUT_MS
    cwd: Path | None = None
    env: Mapping[str, str] | None = None

    def __post_init__(self) -> None:
        self.timeout_ms = self._coerce_timeout(self.timeout_ms)

    def with_overrides(self, overrides: ExecutionOverrideMapping) -> ExecutionOptions:
        """Return a new options instance with ``overrides`` applied.

        Args:
            overrides: Mapping of option names to replacement values.

        Returns:
            ExecutionOptions: Updated copy of the options.

        Raises:
            TypeError: If ``overrides`` names an unknown option or supplies a
                value of the wrong type.
            ValueError: When a timeout override is negative.
        """

        unknown = [key for key in overrides if key not in _OPTION_KEYS]
        if unknown:
            raise TypeError(f"Unknown execution option(s): {', '.join(sorted(unknown))}")
        stdin = self.stdin
        if "stdin" in overrides:
            value = overrides["stdin"]
            if value is not None and not isinstance(value, str):
                raise TypeError("stdin override must be a string or None")
            stdin = value
        token = self.token
        if "token" in overrides:
            candidate = overrides["token"]
            if candidate is not None and not isinstance(candidate, CancellationToken):
                raise TypeError("token override must implement CancellationToken")
            token = candidate
        cwd = self.cwd
        if "cwd" in overrides:
            candidate_cwd = overrides["cwd"]
            if candidate_cwd is not None and not isinstance(candidate_cwd, Path):
                raise TypeError("cwd override must be a pathlib.Path or None")
            cwd = candidate_cwd
        env = self.env
        if "env" in overrides:
            env = self._coerce_env(overrides["env"])
        timeout_ms = self.timeout_ms
        if "timeout_ms" in overrides:
            timeout_ms = self._coerce_timeout(overrides["timeout_ms"])
        return ExecutionOptions(stdin=stdin, token=token, timeout_ms=timeout_ms, cwd=cwd, env=env)

    @staticmethod
    def _coerce_timeout(value: ExecutionOverrideValue) -> int | None:
        """Return a validated timeout in milliseconds (``None`` disables it).

        Raises:
            TypeError: If ``value`` is not an integer.
            ValueError: When ``value`` is negative.
        """

        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError("timeout_ms must be an integer or None")
        if value < 0:
            raise ValueError("timeout_ms must be non-negative")
        return value

    @staticmethod
    def _coerce_env(value: ExecutionOverrideValue) -> Mapping[str, str] | None:
        if value is None:
            return None
        if not isinstance(value, Mapping):
            raise TypeError("env override must be a mapping of strings to strings")
        validated: dict[str, str] = {}
        for key, entry in value.items():
            if not isinstance(key, str) or not isinstance(entry, str):
                raise TypeError("env override must map strings to strings")
            validated[key] = entry
        return validated


@dataclass(frozen=True, slots=True)
class ExecutionRequest:
    """Immutable description of one command invocation."""

    command: str
    args: tuple[str, ...] = ()
    options: ExecutionOptions = field(default_factory=ExecutionOptions)

    @property
    def full_command(self) -> str:
        """Return the command line as a single display string."""

        return " ".join((self.command, *self.args))


def find_executable(command: str) -> str | None:
    """Return the resolved path of ``command`` or ``None`` when it is unavailable.

    Args:
        command: Executable name or path.

    Returns:
        str | None: Absolute path to the executable when found.
    """

    if not command:
        return None
    path = Path(command).expanduser()
    if path.is_absolute() or path.parent != Path():
        return str(path) if path.is_file() else None
    return shutil.which(command)


async def execute(
    command: str,
    args: Sequence[str] = (),
    *,
    stdin: str | None = None,
    token: CancellationToken | None = None,
    timeout_ms: int | None = None,
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
    options: ExecutionOptions | None = None,
    overrides: ExecutionOverrideMapping | None = None,
) -> ExecutionResult:
    """Run ``command`` with ``args`` and capture its output.

    Keyword options left as ``None`` keep the value from ``options`` (or the
    defaults, a 30 second timeout among them). Explicit keywords win over
    ``overrides``, which win over ``options``.

    Args:
        command: Executable name or path.
        args: Arguments passed verbatim; no shell expansion takes place.
        stdin: Text written to the child's standard input, then closed.
        token: Cooperative cancellation token.
        timeout_ms: Milliseconds before the child is killed.
        cwd: Working directory for the child.
        env: Environment for the child; inherited when omitted.
        options: Base options.
        overrides: Mapping of option names applied to a copy of ``options``.

    Returns:
        ExecutionResult: Exit status and output, or a classified error.

    Raises:
        ValueError: If ``command`` is empty.
        TypeError: If an unknown override key is supplied.
    """

    keywords: dict[ExecutionOptionKey, ExecutionOverrideValue] = {
        key: value
        for key, value in (("stdin", stdin), ("token", token), ("timeout_ms", timeout_ms), ("cwd", cwd), ("env", env))
        if value is not None
    }
    resolved = (options or ExecutionOptions()).with_overrides({**(overrides or {}), **keywords})
    return await run(ExecutionRequest(command=command, args=tuple(args), options=resolved))


async def run(request: ExecutionRequest) -> ExecutionResult:
    """Execute ``request`` and return its result.

    Args:
        request: Invocation description.

    Returns:
        ExecutionResult: Exactly one of exit status or error is populated.

    Raises:
        ValueError: If ``request.command`` is empty.
        asyncio.CancelledError: When the awaiting task itself is cancelled; the
            child process is killed before the cancellation propagates.
    """

    if not request.command:
        raise ValueError("execution requires a command")
    full_command = request.full_command
    options = request.options
    token = options.token
    if token is not None and token.is_cancellation_requested:
        LOGGER.debug("skipping %s: cancelled before start", full_command)
        return ExecutionResult(
            command=full_command,
            error=ExecutionCancelled(message=f"Execute {full_command} cancelled before start"),
        )

    LOGGER.debug("spawning %s", full_command)
    try:
        # Arguments are passed as a vector; nothing is interpreted by a shell.
        process = await asyncio.create_subprocess_exec(  # nosec B603
            request.command,
            *request.args,
            stdin=asyncio.subprocess.PIPE if options.stdin is not None else asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=str(options.cwd) if options.cwd is not None else None,
            env=dict(options.env) if options.env is not None else None,
        )
    except OSError as exc:
        failure = SpawnFailure.from_os_error(request.command, exc)
        LOGGER.debug("spawn of %s failed: %s", full_command, failure.message)
        return ExecutionResult(command=full_command, error=failure)

    return await _ProcessSupervisor(process, request).wait()


class _ProcessSupervisor:
    """Own a running child until exactly one terminal outcome is reached."""

    def __init__(self, process: asyncio.subprocess.Process, request: ExecutionRequest) -> None:
        self._process = process
        self._request = request
        self._stdout: list[bytes] = []
        self._stderr: list[bytes] = []
        self._io_tasks: list[asyncio.Task[None]] = []

    async def wait(self) -> ExecutionResult:
        options = self._request.options
        loop = asyncio.get_running_loop()
        cancel_event = asyncio.Event()
        registration: Disposable | None = None
        if options.token is not None:
            registration = options.token.on_cancellation_requested(
                lambda: loop.call_soon_threadsafe(cancel_event.set),
            )

        self._io_tasks = [
            asyncio.create_task(_drain(self._process.stdout, self._stdout)),
            asyncio.create_task(_drain(self._process.stderr, self._stderr)),
            asyncio.create_task(_feed(self._process, options.stdin)),
        ]
        completion = asyncio.create_task(self._complete())
        cancelled = asyncio.create_task(cancel_event.wait())
        timeout_s = options.timeout_ms / 1000.0 if options.timeout_ms is not None else None

        try:
            done, _pending = await asyncio.wait(
                {completion, cancelled},
                timeout=timeout_s,
                return_when=asyncio.FIRST_COMPLETED,
            )
        except asyncio.CancelledError:
            await self._terminate()
            await _discard(completion)
            raise
        finally:
            if registration is not None:
                registration.dispose()
            cancelled.cancel()

        full_command = self._request.full_command
        if completion in done:
            exit_code = completion.result()
            LOGGER.debug("%s exited with %s", full_command, exit_code)
            return self._result(exit_code=exit_code)

        await self._terminate()
        await _discard(completion)
        if cancelled in done:
            LOGGER.debug("%s cancelled", full_command)
            return self._result(error=ExecutionCancelled(message=f"Execute {full_command} cancelled"))
        timeout_ms = options.timeout_ms or 0
        LOGGER.warning("%s timed out after %sms", full_command, timeout_ms)
        return self._result(
            error=ExecutionTimeout(
                message=f"Execute {full_command} timed out after {timeout_ms}ms",
                timeout_ms=timeout_ms,
            ),
        )

    async def _complete(self) -> int:
        await asyncio.gather(*self._io_tasks)
        return await self._process.wait()

    async def _terminate(self) -> None:
        """Kill the child and collect whatever output is still buffered."""

        with contextlib.suppress(ProcessLookupError):
            self._process.kill()
        try:
            await asyncio.wait_for(self._process.wait(), timeout=_KILL_GRACE_SECONDS)
        except TimeoutError:
            LOGGER.warning("process %s did not exit after kill", self._process.pid)
        # Grandchildren may keep the pipes open; stop reading after the grace period.
        _done, pending = await asyncio.wait(self._io_tasks, timeout=_KILL_GRACE_SECONDS)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    def _result(
        self,
        *,
        exit_code: int | None = None,
        error: ExecutionCancelled | ExecutionTimeout | None = None,
    ) -> ExecutionResult:
        return ExecutionResult(
            command=self._request.full_command,
            exit_code=exit_code,
            stdout=_decode(self._stdout),
            stderr=_decode(self._stderr),
            error=error,
        )


async def _drain(stream: asyncio.StreamReader | None, sink: list[bytes]) -> None:
    if stream is None:
        return
    while chunk := await stream.read(_READ_CHUNK_SIZE):
        sink.append(chunk)


async def _feed(process: asyncio.subprocess.Process, data: str | None) -> None:
    """Write ``data`` to the child's stdin and close it."""

    if process.stdin is None:
        return
    try:
        if data:
            process.stdin.write(data.encode("utf-8"))
            await process.stdin.drain()
    except (BrokenPipeError, ConnectionResetError):
        LOGGER.debug("process %s closed stdin early", process.pid)
    finally:
        process.stdin.close()


async def _discard(task: asyncio.Task[int]) -> None:
    task.cancel()
    await asyncio.gather(task, return_exceptions=True)


def _decode(chunks: list[bytes]) -> str:
    return b"".join(chunks).decode("utf-8", errors="replace")


__all__ = [
    "DEFAULT_TIMEOUT_MS",
    "ExecutionOptionKey",
    "ExecutionOptions",
    "ExecutionOverrideMapping",
    "ExecutionRequest",
    "execute",
    "find_executable",
    "run",
]
