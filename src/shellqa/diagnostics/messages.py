# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""User-facing message templates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from shellqa.core.models import ExecutionError, SpawnFailure, SpawnFailureKind


@dataclass(frozen=True, slots=True)
class InstallHint:
    """Where to get a tool and what it enables."""

    display_name: str
    purpose: str
    brew: str
    apt: str
    url: str


INSTALL_HINTS: Final[dict[str, InstallHint]] = {
    "shellcheck": InstallHint(
        display_name="Shellcheck",
        purpose="shell script analysis",
        brew="brew install shellcheck",
        apt="sudo apt-get install shellcheck",
        url="https://github.com/koalaman/shellcheck",
    ),
    "shfmt": InstallHint(
        display_name="shfmt",
        purpose="shell script formatting",
        brew="brew install shfmt",
        apt="sudo apt-get install shfmt",
        url="https://github.com/mvdan/sh",
    ),
}

FORMAT_ISSUE_MESSAGE: Final[str] = "Shell script has formatting issues. Format the document with shfmt to fix."
FORMAT_REFUSED_MESSAGE: Final[str] = "Formatting skipped: fix the reported errors first."


def tool_not_installed_message(tool: str) -> str:
    """Return the not-installed message for ``tool`` including install hints."""

    hint = INSTALL_HINTS.get(tool)
    if hint is None:
        return f"{tool} not installed. Install it and make sure it is on PATH."
    return (
        f"{hint.display_name} not installed. Install it to enable {hint.purpose}.\n\n"
        f"macOS: {hint.brew}\n"
        f"Linux: {hint.apt}\n"
        f"Or visit: {hint.url}"
    )


def permission_denied_message(tool: str) -> str:
    return f"Permission denied when running {tool}. Please check file permissions."


def execution_error_message(tool: str, error: ExecutionError) -> str:
    """Return the message shown for ``error`` raised while running ``tool``."""

    if isinstance(error, SpawnFailure):
        if error.reason is SpawnFailureKind.NOT_FOUND:
            return tool_not_installed_message(tool)
        if error.reason is SpawnFailureKind.PERMISSION_DENIED:
            return permission_denied_message(tool)
    return error.message


def syntax_error_summary(count: int) -> str:
    noun = "error" if count == 1 else "errors"
    return f"Syntax errors prevent formatting: {count} {noun}"


__all__ = [
    "FORMAT_ISSUE_MESSAGE",
    "FORMAT_REFUSED_MESSAGE",
    "INSTALL_HINTS",
    "InstallHint",
    "execution_error_message",
    "permission_denied_message",
    "syntax_error_summary",
    "tool_not_installed_message",
]
