# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for debounced diagnosis, supersession and formatting actions."""

from __future__ import annotations

import asyncio
import time

from shellqa.core.cancellation import CancellationTokenSource
from shellqa.core.models import CheckResult, Diagnostic, FormatResult, Range, TextEdit
from shellqa.core.severity import Severity
from shellqa.diagnostics import SYNTAX_ERROR_CODE, InMemoryDiagnosticSink, InMemoryEditSink
from shellqa.documents import TextDocument, full_range
from shellqa.orchestration import DiagnosisPipeline, FixOutcome
from shellqa.plugins import BasePlugin, CheckOptions, FormatOptions, PluginManager, ShellcheckPlugin, ShfmtPlugin
from shellqa.tools import ShellcheckTool, ShfmtTool


class EchoPlugin(BasePlugin):
    """Reports one diagnostic carrying the text it saw.

    A line ``sleep <seconds>`` delays the check; the delay honours the
    cancellation token the same way a killed subprocess would.
    """

    name = "echo"
    display_name = "Echo"

    def __init__(self) -> None:
        super().__init__()
        self.seen: list[str] = []
        self.cancelled: list[str] = []

    async def is_available(self) -> bool:
        return True

    async def check(self, document: TextDocument, options: CheckOptions | None = None) -> CheckResult:
        text = document.get_text()
        self.seen.append(text)
        token = options.token if options else None
        delay = _delay(text)
        waited = 0.0
        while waited < delay:
            if token is not None and token.is_cancellation_requested:
                self.cancelled.append(text)
                return CheckResult(inconclusive=True, error_message="cancelled")
            await asyncio.sleep(0.01)
            waited += 0.01
        diagnostic = Diagnostic(range=Range.of(0, 0, 0, 1), message=text, severity=Severity.WARNING, source=self.name)
        return self.check_result([diagnostic])


class FormatterPlugin(EchoPlugin):
    name = "fmt"
    display_name = "Fmt"

    async def check(self, document: TextDocument, options: CheckOptions | None = None) -> CheckResult:
        if "BROKEN" in document.get_text():
            diagnostic = self.diagnostics.error("Syntax error: unterminated quote", document.get_text())
            return self.check_result([diagnostic.model_copy(update={"code": SYNTAX_ERROR_CODE})])
        return CheckResult()

    async def format(self, document: TextDocument, options: FormatOptions | None = None) -> FormatResult:
        text = document.get_text()
        if "BROKEN" in text:
            check = await self.check(document)
            return FormatResult(has_errors=True, diagnostics=check.diagnostics, error_message="syntax")
        formatted = "".join(line.strip() + "\n" for line in text.splitlines())
        if formatted == text:
            return FormatResult()
        return FormatResult(text_edits=(TextEdit(range=full_range(text), new_text=formatted),))


def _delay(text: str) -> float:
    for line in text.splitlines():
        if line.startswith("sleep "):
            return float(line.split()[1])
    return 0.0


async def _pipeline(*plugins: BasePlugin, debounce_ms: int = 300) -> tuple[DiagnosisPipeline, InMemoryDiagnosticSink]:
    manager = PluginManager()
    for plugin in plugins:
        manager.register(plugin)
    await manager.activate_multiple(list(manager))
    sink = InMemoryDiagnosticSink()
    return DiagnosisPipeline(manager, sink, debounce_ms=debounce_ms), sink


def _messages(sink: InMemoryDiagnosticSink, uri: str) -> list[str]:
    return [item.message for item in sink.get(uri)]


def test_open_diagnoses_immediately() -> None:
    async def scenario() -> tuple[CheckResult | None, InMemoryDiagnosticSink]:
        pipeline, sink = await _pipeline(EchoPlugin())
        result = await pipeline.on_open(TextDocument(uri="file:///a.sh", text="echo a\n"))
        return result, sink

    result, sink = asyncio.run(scenario())

    assert result is not None and not result.has_errors
    assert _messages(sink, "file:///a.sh") == ["echo a\n"]


def test_rapid_edits_collapse_into_one_run_with_final_content() -> None:
    plugin = EchoPlugin()

    async def scenario() -> InMemoryDiagnosticSink:
        pipeline, sink = await _pipeline(plugin, debounce_ms=300)
        document = TextDocument(uri="file:///a.sh", text="v1\n")
        for text in ("v1\n", "v2\n", "v3\n"):
            document.update(text)
            pipeline.on_change(document)
            await asyncio.sleep(0.05)
        await asyncio.sleep(0.5)
        await pipeline.shutdown()
        return sink

    sink = asyncio.run(scenario())

    assert plugin.seen == ["v3\n"]
    assert sink.publish_count("file:///a.sh") == 1
    assert _messages(sink, "file:///a.sh") == ["v3\n"]


def test_edit_waits_for_quiet_period() -> None:
    plugin = EchoPlugin()

    async def scenario() -> tuple[list[str], list[str]]:
        pipeline, _sink = await _pipeline(plugin, debounce_ms=200)
        pipeline.on_change(TextDocument(uri="file:///a.sh", text="x\n"))
        await asyncio.sleep(0.1)
        early = list(plugin.seen)
        await asyncio.sleep(0.25)
        return early, list(plugin.seen)

    early, late = asyncio.run(scenario())

    assert early == []
    assert late == ["x\n"]


def test_save_supersedes_pending_debounce() -> None:
    plugin = EchoPlugin()

    async def scenario() -> InMemoryDiagnosticSink:
        pipeline, sink = await _pipeline(plugin, debounce_ms=200)
        document = TextDocument(uri="file:///a.sh", text="draft\n")
        pipeline.on_change(document)
        document.update("saved\n")
        await pipeline.on_save(document)
        await asyncio.sleep(0.3)
        return sink

    sink = asyncio.run(scenario())

    assert plugin.seen == ["saved\n"]
    assert sink.publish_count("file:///a.sh") == 1


def test_newer_run_wins_over_slower_older_run() -> None:
    plugin = EchoPlugin()

    async def scenario() -> InMemoryDiagnosticSink:
        pipeline, sink = await _pipeline(plugin)
        document = TextDocument(uri="file:///a.sh", text="sleep 0.5\nold\n")
        slow = asyncio.create_task(pipeline.diagnose_now(document))
        await asyncio.sleep(0.05)
        document.update("new\n")
        await pipeline.diagnose_now(document)
        await slow
        return sink

    sink = asyncio.run(scenario())

    assert plugin.cancelled == ["sleep 0.5\nold\n"]
    assert sink.history == [("file:///a.sh", sink.get("file:///a.sh"))]
    assert _messages(sink, "file:///a.sh") == ["new\n"]


def test_stale_result_is_discarded_even_without_cancellation() -> None:
    class DeafPlugin(EchoPlugin):
        async def check(self, document: TextDocument, options: CheckOptions | None = None) -> CheckResult:
            return await super().check(document, None)

    plugin = DeafPlugin()

    async def scenario() -> InMemoryDiagnosticSink:
        pipeline, sink = await _pipeline(plugin)
        document = TextDocument(uri="file:///a.sh", text="sleep 0.3\nold\n")
        slow = asyncio.create_task(pipeline.diagnose_now(document))
        await asyncio.sleep(0.05)
        document.update("new\n")
        await pipeline.diagnose_now(document)
        stale = await slow
        assert stale is not None and stale.diagnostics[0].message == "sleep 0.3\nold\n"
        return sink

    sink = asyncio.run(scenario())

    assert sink.publish_count("file:///a.sh") == 1
    assert _messages(sink, "file:///a.sh") == ["new\n"]


def test_cancelling_one_document_leaves_others_untouched() -> None:
    plugin = EchoPlugin()

    async def scenario() -> InMemoryDiagnosticSink:
        pipeline, sink = await _pipeline(plugin)
        first = TextDocument(uri="file:///a.sh", text="sleep 0.3\na\n")
        second = TextDocument(uri="file:///b.sh", text="sleep 0.3\nb\n")
        run_a = asyncio.create_task(pipeline.diagnose_now(first))
        run_b = asyncio.create_task(pipeline.diagnose_now(second))
        await asyncio.sleep(0.05)
        first.update("a2\n")
        await pipeline.diagnose_now(first)
        await asyncio.gather(run_a, run_b)
        return sink

    sink = asyncio.run(scenario())

    assert plugin.cancelled == ["sleep 0.3\na\n"]
    assert _messages(sink, "file:///a.sh") == ["a2\n"]
    assert _messages(sink, "file:///b.sh") == ["sleep 0.3\nb\n"]


def test_close_cancels_work_and_clears_diagnostics() -> None:
    plugin = EchoPlugin()

    async def scenario() -> tuple[InMemoryDiagnosticSink, DiagnosisPipeline]:
        pipeline, sink = await _pipeline(plugin)
        document = TextDocument(uri="file:///a.sh", text="first\n")
        await pipeline.on_open(document)
        document.update("sleep 0.3\nsecond\n")
        running = asyncio.create_task(pipeline.diagnose_now(document))
        await asyncio.sleep(0.05)
        pipeline.on_close(document)
        await running
        return sink, pipeline

    sink, pipeline = asyncio.run(scenario())

    assert sink.get("file:///a.sh") == ()
    assert "file:///a.sh" not in pipeline.sessions
    assert plugin.cancelled == ["sleep 0.3\nsecond\n"]


def test_non_shell_documents_are_ignored() -> None:
    plugin = EchoPlugin()

    async def scenario() -> CheckResult | None:
        pipeline, _sink = await _pipeline(plugin)
        pipeline.on_change(TextDocument(uri="file:///notes.md", language_id="markdown", text="x"))
        pipeline.on_change(TextDocument(uri="file:///a.sh.swp", language_id="shellscript", text="x"))
        await asyncio.sleep(0.4)
        return await pipeline.on_open(TextDocument(uri="file:///notes.md", language_id="markdown"))

    assert asyncio.run(scenario()) is None
    assert plugin.seen == []


def test_diagnose_on_change_disabled() -> None:
    plugin = EchoPlugin()

    async def scenario() -> None:
        pipeline, _sink = await _pipeline(plugin, debounce_ms=10)
        pipeline.diagnose_on_change = False
        pipeline.on_change(TextDocument(uri="file:///a.sh", text="x\n"))
        await asyncio.sleep(0.1)

    asyncio.run(scenario())
    assert plugin.seen == []


def test_diagnose_all_runs_every_shell_document() -> None:
    plugin = EchoPlugin()

    async def scenario() -> dict[str, CheckResult]:
        pipeline, _sink = await _pipeline(plugin)
        return await pipeline.diagnose_all(
            [
                TextDocument(uri="file:///a.sh", text="a\n"),
                TextDocument(uri="file:///b.sh", text="b\n"),
                TextDocument(uri="file:///c.txt", language_id="plaintext", text="c\n"),
            ],
        )

    results = asyncio.run(scenario())
    assert sorted(results) == ["file:///a.sh", "file:///b.sh"]


def test_format_document_refuses_on_syntax_error_and_publishes() -> None:
    async def scenario() -> tuple[FormatResult, InMemoryDiagnosticSink]:
        pipeline, sink = await _pipeline(FormatterPlugin())
        result = await pipeline.format_document(TextDocument(uri="file:///a.sh", text="echo 'BROKEN\n"))
        return result, sink

    result, sink = asyncio.run(scenario())

    assert result.text_edits == ()
    assert [item.code for item in sink.get("file:///a.sh")] == [SYNTAX_ERROR_CODE]


def test_fix_all_outcomes() -> None:
    async def scenario() -> list[FixOutcome]:
        pipeline, _sink = await _pipeline(FormatterPlugin())
        messy = TextDocument(uri="file:///messy.sh", text="  echo hi\n")
        tidy = TextDocument(uri="file:///tidy.sh", text="echo hi\n")
        broken = TextDocument(uri="file:///broken.sh", text="echo 'BROKEN\n")
        rejected = TextDocument(uri="file:///rejected.sh", text="  echo\n")
        edits = InMemoryEditSink({doc.uri: doc for doc in (messy, tidy, broken)})
        outcomes = [
            await pipeline.fix_all(messy, edits),
            await pipeline.fix_all(tidy, edits),
            await pipeline.fix_all(broken, edits),
            await pipeline.fix_all(rejected, edits),
            await pipeline.fix_all(TextDocument(uri="file:///x.py", language_id="python"), edits),
        ]
        assert messy.text == "echo hi\n"
        return outcomes

    assert asyncio.run(scenario()) == [
        FixOutcome.APPLIED,
        FixOutcome.UNCHANGED,
        FixOutcome.REFUSED,
        FixOutcome.REJECTED,
        FixOutcome.SKIPPED,
    ]


def test_cancelled_format_leaves_other_document_check_running(fake_shfmt: str, fake_shellcheck: str) -> None:
    async def scenario() -> tuple[FormatResult, CheckResult | None, InMemoryDiagnosticSink, float]:
        pipeline, sink = await _pipeline(
            ShfmtPlugin(ShfmtTool(fake_shfmt)),
            ShellcheckPlugin(ShellcheckTool(fake_shellcheck)),
        )
        stalled = TextDocument(uri="file:///a.sh", text="SLEEP\n")
        other = TextDocument(uri="file:///b.sh", text="unused=1\n")
        source = CancellationTokenSource()
        started = time.monotonic()

        formatting = asyncio.create_task(pipeline.format_document(stalled, source.token))
        checking = asyncio.create_task(pipeline.diagnose_now(other))
        await asyncio.sleep(0.2)
        source.cancel()
        formatted = await formatting
        elapsed = time.monotonic() - started
        checked = await checking
        return formatted, checked, sink, elapsed

    formatted, checked, sink, elapsed = asyncio.run(scenario())

    assert formatted.inconclusive
    assert formatted.text_edits == ()
    assert elapsed < 5
    assert checked is not None and not checked.inconclusive
    assert [item.code for item in sink.get("file:///b.sh")] == ["SC2034"]
    assert sink.get("file:///a.sh") == ()
