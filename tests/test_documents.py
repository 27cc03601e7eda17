# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for document helpers and shell detection."""

from __future__ import annotations

from pathlib import Path

import pytest

from shellqa.core.models import Range
from shellqa.documents import (
    TextDocument,
    full_range,
    is_shell_document,
    line_range,
    should_skip_file,
)


@pytest.mark.parametrize(
    "name",
    [".git", "script.sh.swp", "script.sh.swo", "script.sh~", "build.tmp", "run.sh.bak", "extension-output-shell"],
)
def test_scratch_files_are_skipped(name: str) -> None:
    assert should_skip_file(f"/work/{name}")


def test_shell_detection_by_language_and_extension() -> None:
    assert is_shell_document(TextDocument(uri="file:///work/run", language_id="shellscript"))
    assert is_shell_document(TextDocument(uri="file:///work/run.ZSH", language_id="plaintext"))
    assert not is_shell_document(TextDocument(uri="file:///work/run.py", language_id="python"))
    assert not is_shell_document(TextDocument(uri="file:///work/run.sh~", language_id="shellscript"))


def test_ranges() -> None:
    text = "one\r\ntwo\n"
    assert line_range(text, 0) == Range.of(0, 0, 0, 3)
    assert line_range(text, 99) == Range.of(2, 0, 2, 0)
    assert full_range(text) == Range.of(0, 0, 2, 0)
    assert full_range("abc") == Range.of(0, 0, 0, 3)


def test_from_path(tmp_path: Path) -> None:
    script = tmp_path / "deploy.bash"
    script.write_text("echo deploy\n", encoding="utf-8")
    notes = tmp_path / "notes.txt"
    notes.write_text("hello\n", encoding="utf-8")

    document = TextDocument.from_path(script)

    assert document.uri == script.resolve().as_uri()
    assert document.file_name == str(script.resolve())
    assert document.get_text() == "echo deploy\n"
    assert document.language_id == "shellscript"
    assert document.line_count == 2
    assert TextDocument.from_path(notes).language_id == "plaintext"


def test_update_bumps_version() -> None:
    document = TextDocument(uri="file:///a.sh", text="a")
    document.update("b")
    assert (document.text, document.version) == ("b", 2)
    assert document.file_name == "/a.sh"
