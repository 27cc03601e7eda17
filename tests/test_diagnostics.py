# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for diagnostic construction, messages and sinks."""

from __future__ import annotations

from shellqa.core.models import (
    ExecutionTimeout,
    FormatIssue,
    LinterIssue,
    Range,
    SpawnFailure,
    SpawnFailureKind,
    SyntaxIssue,
    TextEdit,
    ToolResult,
)
from shellqa.core.severity import LinterSeverity, Severity
from shellqa.diagnostics import (
    EXECUTION_ERROR_CODE,
    FORMAT_ISSUE_CODE,
    SYNTAX_ERROR_CODE,
    DiagnosticFactory,
    InMemoryDiagnosticSink,
    InMemoryEditSink,
    is_blocking_diagnostic,
    text_edits_for,
)
from shellqa.diagnostics.messages import execution_error_message, syntax_error_summary
from shellqa.documents import TextDocument, full_range

TEXT = "#!/bin/sh\necho $x\nfoo=1\n"


def test_execution_error_replaces_everything_else() -> None:
    result = ToolResult(
        issues=(SyntaxIssue(line=1, column=0, message="bad"),),
        execution_error=SpawnFailure(message="shfmt not installed", reason=SpawnFailureKind.NOT_FOUND),
        command="shfmt -d -",
    )
    (diagnostic,) = DiagnosticFactory("shfmt").from_tool_result(result, TEXT)

    assert diagnostic.code == EXECUTION_ERROR_CODE
    assert diagnostic.severity is Severity.ERROR
    assert diagnostic.range == Range.of(0, 0, 0, len("#!/bin/sh"))
    assert diagnostic.message.startswith("shfmt not installed. Install it to enable shell script formatting.")
    assert "brew install shfmt" in diagnostic.message
    assert diagnostic.message.endswith("\n\nCommand: shfmt -d -")


def test_syntax_then_format_then_linter_order() -> None:
    result = ToolResult(
        issues=(
            LinterIssue(line=2, column=0, severity=LinterSeverity.STYLE, code="SC2034", message="foo unused"),
            FormatIssue(message="drift", line=1),
            SyntaxIssue(line=1, column=5, message="unexpected token"),
        ),
    )
    diagnostics = DiagnosticFactory("tool").from_tool_result(result, TEXT)

    assert [item.code for item in diagnostics] == [SYNTAX_ERROR_CODE, FORMAT_ISSUE_CODE, "SC2034"]
    syntax, drift, lint = diagnostics
    assert syntax.message == "Syntax error: unexpected token"
    assert syntax.range == Range.of(1, 0, 1, len("echo $x"))
    assert drift.severity is Severity.WARNING
    assert drift.range == Range.of(1, 0, 1, 1)
    assert lint.message == "SC2034: foo unused"
    assert lint.severity is Severity.INFO
    assert lint.range == Range.of(2, 0, 2, 1)


def test_failure_message_is_single_error() -> None:
    result = ToolResult(failure="shellcheck failed: boom", command="shellcheck -f gcc -")
    (diagnostic,) = DiagnosticFactory("shellcheck").from_tool_result(result, TEXT)
    assert diagnostic.message == "shellcheck failed: boom\n\nCommand: shellcheck -f gcc -"
    assert is_blocking_diagnostic(diagnostic)


def test_error_line_is_clamped_for_empty_document() -> None:
    diagnostic = DiagnosticFactory("shfmt").error("boom", "")
    assert diagnostic.range == Range.of(0, 0, 0, 0)


def test_messages() -> None:
    assert execution_error_message("shfmt", ExecutionTimeout(message="timed out", timeout_ms=5)) == "timed out"
    denied = SpawnFailure(message="x", reason=SpawnFailureKind.PERMISSION_DENIED)
    assert execution_error_message("shellcheck", denied).startswith("Permission denied when running shellcheck")
    assert syntax_error_summary(1) == "Syntax errors prevent formatting: 1 error"
    assert syntax_error_summary(3) == "Syntax errors prevent formatting: 3 errors"


def test_text_edits_for() -> None:
    formatted = ToolResult(formatted_content="echo hi\n")
    (edit,) = text_edits_for(formatted, "  echo hi\n")
    assert edit.new_text == "echo hi\n"
    assert edit.range == full_range("  echo hi\n")

    assert text_edits_for(formatted, "echo hi\n") == ()
    assert text_edits_for(ToolResult(), "x") == ()
    blocked = ToolResult(formatted_content="x", issues=(SyntaxIssue(line=0, column=0, message="bad"),))
    assert text_edits_for(blocked, "y") == ()


def test_diagnostic_sink_replaces_per_uri() -> None:
    sink = InMemoryDiagnosticSink()
    first = DiagnosticFactory("a").error("one", TEXT)
    sink.set("file:///a.sh", [first])
    sink.set("file:///a.sh", [])
    sink.set("file:///b.sh", [first])
    sink.delete("file:///b.sh")

    assert sink.get("file:///a.sh") == ()
    assert sink.get("file:///b.sh") == ()
    assert sink.publish_count("file:///a.sh") == 2


def test_edit_sink_applies_only_full_replacements() -> None:
    document = TextDocument(uri="file:///a.sh", text="  echo\n")
    sink = InMemoryEditSink({document.uri: document})

    partial = TextEdit(range=Range.of(0, 0, 0, 1), new_text="x")
    assert not sink.apply(document.uri, [partial])
    assert not sink.apply("file:///missing.sh", [])

    assert sink.apply(document.uri, [TextEdit(range=full_range(document.text), new_text="echo\n")])
    assert document.text == "echo\n"
    assert document.version == 2
