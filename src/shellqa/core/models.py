# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Core data models shared across the shellqa package."""

from __future__ import annotations

import errno
from enum import Enum
from typing import Annotated, Final, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from shellqa.core.severity import LinterSeverity, Severity


class ToolMode(str, Enum):
    """Operation a tool is invoked for."""

    FORMAT = "format"
    CHECK = "check"


class SpawnFailureKind(str, Enum):
    """Classification of a failed process launch derived from the OS error code."""

    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    OTHER = "other"


_ERRNO_KINDS: Final[dict[int, SpawnFailureKind]] = {
    errno.ENOENT: SpawnFailureKind.NOT_FOUND,
    errno.EACCES: SpawnFailureKind.PERMISSION_DENIED,
    errno.EPERM: SpawnFailureKind.PERMISSION_DENIED,
}


class ExecutionCancelled(BaseModel):
    """The caller cancelled the execution before it completed."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["cancelled"] = "cancelled"
    message: str


class ExecutionTimeout(BaseModel):
    """The process exceeded its time budget and was killed."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["timeout"] = "timeout"
    message: str
    timeout_ms: int


class SpawnFailure(BaseModel):
    """The process could not be launched at all."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["spawn_failure"] = "spawn_failure"
    message: str
    code: str | None = None
    reason: SpawnFailureKind = SpawnFailureKind.OTHER

    @classmethod
    def from_os_error(cls, command: str, exc: OSError) -> SpawnFailure:
        """Build a spawn failure from the ``OSError`` raised while launching ``command``.

        Args:
            command: Executable name or path that failed to start.
            exc: Error raised by the process launcher.

        Returns:
            SpawnFailure: Classified failure with a user-facing message.
        """

        reason = _ERRNO_KINDS.get(exc.errno or 0, SpawnFailureKind.OTHER)
        code = errno.errorcode.get(exc.errno) if exc.errno is not None else None
        if reason is SpawnFailureKind.NOT_FOUND:
            message = f"{command} not installed"
        elif reason is SpawnFailureKind.PERMISSION_DENIED:
            message = f"Permission denied when running {command}"
        else:
            message = f"Failed to run {command}: {exc.strerror or exc}"
        return cls(message=message, code=code, reason=reason)


ExecutionError = Annotated[
    ExecutionCancelled | ExecutionTimeout | SpawnFailure,
    Field(discriminator="kind"),
]


class ExecutionResult(BaseModel):
    """Outcome of a single external command invocation.

    Exactly one of ``exit_code`` and ``error`` is populated: a process that ran
    to completion reports its status, anything else carries a classified error.
    """

    model_config = ConfigDict(frozen=True)

    command: str
    exit_code: int | None = None
    stdout: str = ""
    stderr: str = ""
    error: ExecutionError | None = None

    @model_validator(mode="after")
    def _exactly_one_outcome(self) -> ExecutionResult:
        """Ensure the result reports either an exit status or an error.

        Returns:
            ExecutionResult: The validated instance.

        Raises:
            ValueError: If both or neither outcome fields are set.
        """

        if (self.exit_code is None) == (self.error is None):
            raise ValueError("exit_code must be set if and only if error is absent")
        return self

    @property
    def succeeded(self) -> bool:
        """Return ``True`` when the process exited with status zero."""

        return self.exit_code == 0

    @property
    def inconclusive(self) -> bool:
        """Return ``True`` when the run was cancelled or timed out."""

        return isinstance(self.error, ExecutionCancelled | ExecutionTimeout)

    @property
    def combined_output(self) -> str:
        """Return stdout followed by stderr, newline separated."""

        if self.stdout and self.stderr:
            separator = "" if self.stdout.endswith("\n") else "\n"
            return f"{self.stdout}{separator}{self.stderr}"
        return self.stdout or self.stderr


class SyntaxIssue(BaseModel):
    """Parse failure reported by a tool; blocks formatting."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["syntax"] = "syntax"
    line: int = Field(ge=0)
    column: int = Field(ge=0)
    message: str


class FormatIssue(BaseModel):
    """Cosmetic difference between the document and its formatted form."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["format"] = "format"
    message: str
    diff: str = ""
    line: int = Field(default=0, ge=0)
    column: int = Field(default=0, ge=0)
    range_length: int = Field(default=1, ge=0)


class LinterIssue(BaseModel):
    """Single linter finding with a tool-specific rule code."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["linter"] = "linter"
    line: int = Field(ge=0)
    column: int = Field(ge=0)
    severity: LinterSeverity
    code: str
    message: str


Issue = Annotated[SyntaxIssue | FormatIssue | LinterIssue, Field(discriminator="kind")]


class ToolResult(BaseModel):
    """Typed outcome of one tool invocation after parsing."""

    model_config = ConfigDict(frozen=True)

    issues: tuple[Issue, ...] = ()
    formatted_content: str | None = None
    execution_error: ExecutionError | None = None
    failure: str | None = None
    command: str | None = None

    @property
    def syntax_errors(self) -> tuple[SyntaxIssue, ...]:
        """Return syntax issues in reporting order."""

        return tuple(issue for issue in self.issues if isinstance(issue, SyntaxIssue))

    @property
    def format_issues(self) -> tuple[FormatIssue, ...]:
        """Return format issues in reporting order."""

        return tuple(issue for issue in self.issues if isinstance(issue, FormatIssue))

    @property
    def linter_issues(self) -> tuple[LinterIssue, ...]:
        """Return linter issues in reporting order."""

        return tuple(issue for issue in self.issues if isinstance(issue, LinterIssue))

    @property
    def is_blocking(self) -> bool:
        """Return ``True`` when the tool failed or reported a syntax error."""

        return self.execution_error is not None or self.failure is not None or bool(self.syntax_errors)

    @property
    def inconclusive(self) -> bool:
        """Return ``True`` when the tool was cancelled or timed out."""

        return isinstance(self.execution_error, ExecutionCancelled | ExecutionTimeout)


class Position(BaseModel):
    """Zero-based line/character position within a document."""

    model_config = ConfigDict(frozen=True)

    line: int = Field(ge=0)
    character: int = Field(ge=0)


class Range(BaseModel):
    """Half-open span between two positions."""

    model_config = ConfigDict(frozen=True)

    start: Position
    end: Position

    @classmethod
    def of(cls, start_line: int, start_character: int, end_line: int, end_character: int) -> Range:
        """Return a range from raw coordinates."""

        return cls(
            start=Position(line=start_line, character=start_character),
            end=Position(line=end_line, character=end_character),
        )


class Diagnostic(BaseModel):
    """Host-neutral diagnostic record accepted by a diagnostic sink."""

    model_config = ConfigDict(frozen=True)

    range: Range
    message: str
    severity: Severity
    code: str | None = None
    source: str


class TextEdit(BaseModel):
    """Replacement of ``range`` with ``new_text``."""

    model_config = ConfigDict(frozen=True)

    range: Range
    new_text: str


class CheckResult(BaseModel):
    """Aggregated diagnostics from one or more plugins."""

    model_config = ConfigDict(frozen=True)

    has_errors: bool = False
    diagnostics: tuple[Diagnostic, ...] = ()
    error_message: str | None = None
    inconclusive: bool = False


class FormatResult(CheckResult):
    """Check result extended with the edits a formatter produced."""

    text_edits: tuple[TextEdit, ...] = ()


__all__ = [
    "CheckResult",
    "Diagnostic",
    "ExecutionCancelled",
    "ExecutionError",
    "ExecutionResult",
    "ExecutionTimeout",
    "FormatIssue",
    "FormatResult",
    "Issue",
    "LinterIssue",
    "Position",
    "Range",
    "SpawnFailure",
    "SpawnFailureKind",
    "SyntaxIssue",
    "TextEdit",
    "ToolMode",
    "ToolResult",
]
