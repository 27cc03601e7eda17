# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""In-memory documents and shell document detection."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

from shellqa.core.models import Range
from shellqa.interfaces import Document

SHELL_LANGUAGE_ID: Final[str] = "shellscript"
SHELL_EXTENSIONS: Final[tuple[str, ...]] = (".sh", ".bash", ".zsh", ".ksh", ".bats", ".command")

SKIP_PATTERNS: Final[tuple[re.Pattern[str], ...]] = (
    re.compile(r"\.git$"),
    re.compile(r"\.swp$"),
    re.compile(r"\.swo$"),
    re.compile(r"~$"),
    re.compile(r"\.tmp$"),
    re.compile(r"\.bak$"),
    re.compile(r"^extension-output-"),
)


@dataclass(slots=True)
class TextDocument:
    """Mutable text buffer implementing :class:`~shellqa.interfaces.Document`."""

    uri: str
    text: str = ""
    language_id: str = SHELL_LANGUAGE_ID
    file_name: str = ""
    version: int = field(default=1)

    def __post_init__(self) -> None:
        if not self.file_name:
            self.file_name = self.uri.removeprefix("file://")

    @classmethod
    def from_path(cls, path: Path, *, language_id: str | None = None) -> TextDocument:
        """Load ``path`` into a document.

        Raises:
            OSError: If the file cannot be read.
        """

        resolved = path.resolve()
        return cls(
            uri=resolved.as_uri(),
            text=resolved.read_text(encoding="utf-8"),
            language_id=language_id or (SHELL_LANGUAGE_ID if is_shell_path(resolved) else "plaintext"),
            file_name=str(resolved),
        )

    def get_text(self) -> str:
        return self.text

    def update(self, text: str) -> None:
        """Replace the content and bump the version."""

        self.text = text
        self.version += 1

    @property
    def line_count(self) -> int:
        return len(document_lines(self.text))


def document_lines(text: str) -> list[str]:
    """Split ``text`` into lines the way editors count them.

    A trailing newline opens an empty final line.
    """

    return text.split("\n")


def line_range(text: str, line: int) -> Range:
    """Return the range covering ``line`` of ``text`` (clamped to the last line)."""

    lines = document_lines(text)
    index = min(max(line, 0), len(lines) - 1)
    return Range.of(index, 0, index, len(lines[index].rstrip("\r")))


def full_range(text: str) -> Range:
    """Return the range spanning the whole of ``text``."""

    lines = document_lines(text)
    return Range.of(0, 0, len(lines) - 1, len(lines[-1]))


def should_skip_file(file_name: str) -> bool:
    """Return ``True`` for editor scratch, backup and VCS files.

    Args:
        file_name: Path or bare name of the document.

    Returns:
        bool: ``True`` when the file must not be diagnosed.
    """

    base = Path(file_name).name
    return any(pattern.search(base) for pattern in SKIP_PATTERNS)


def is_shell_path(path: Path | str) -> bool:
    return Path(path).suffix.lower() in SHELL_EXTENSIONS


def is_shell_document(document: Document, *, extensions: Iterable[str] = SHELL_EXTENSIONS) -> bool:
    """Return ``True`` when ``document`` should be diagnosed.

    A document qualifies when the host tags it as a shell script or its file
    name carries a shell extension, and it is not a scratch/backup file.
    """

    if should_skip_file(document.file_name):
        return False
    if document.language_id == SHELL_LANGUAGE_ID:
        return True
    suffix = Path(document.file_name).suffix.lower()
    return suffix in tuple(extension.lower() for extension in extensions)


__all__ = [
    "SHELL_EXTENSIONS",
    "SHELL_LANGUAGE_ID",
    "SKIP_PATTERNS",
    "TextDocument",
    "document_lines",
    "full_range",
    "is_shell_document",
    "is_shell_path",
    "line_range",
    "should_skip_file",
]
