# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Debounced diagnosis of open documents.

Open and save events diagnose immediately; edits wait until the document has
been quiet for the debounce interval. Each document owns a
:class:`~shellqa.orchestration.session.DiagnosisSession`, so cancelling or
superseding work for one document never touches another.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from enum import Enum

from shellqa.config.models import DEFAULT_DEBOUNCE_MS
from shellqa.core.metrics import DIAGNOSIS_RUN, PerformanceMonitor
from shellqa.core.models import CheckResult, FormatResult
from shellqa.diagnostics.factory import is_blocking_diagnostic
from shellqa.documents import is_shell_document
from shellqa.interfaces import CancellationToken, DiagnosticSink, Document, EditSink
from shellqa.plugins.interface import CheckOptions, FormatOptions
from shellqa.plugins.manager import PluginManager

from .session import DiagnosisSession, SessionRegistry

LOGGER = logging.getLogger(__name__)


class FixOutcome(str, Enum):
    """Result of :meth:`DiagnosisPipeline.fix_all`."""

    APPLIED = "applied"
    UNCHANGED = "unchanged"
    REFUSED = "refused"
    REJECTED = "rejected"
    INCONCLUSIVE = "inconclusive"
    SKIPPED = "skipped"


class DiagnosisPipeline:
    """Drive plugin checks for open documents and publish to a sink.

    Args:
        manager: Plugin manager the checks fan out to.
        sink: Diagnostic surface receiving replace-all updates.
        debounce_ms: Quiet period required after an edit.
        timeout_ms: Per-tool timeout override; adapters' default when ``None``.
        diagnose_on_change: When ``False`` edits are ignored until save.
        monitor: Metrics sink for run durations.
    """

    def __init__(
        self,
        manager: PluginManager,
        sink: DiagnosticSink,
        *,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
        timeout_ms: int | None = None,
        diagnose_on_change: bool = True,
        monitor: PerformanceMonitor | None = None,
    ) -> None:
        self.manager = manager
        self.sink = sink
        self.debounce_ms = debounce_ms
        self.timeout_ms = timeout_ms
        self.diagnose_on_change = diagnose_on_change
        self.monitor = monitor or PerformanceMonitor(enabled=False)
        self.sessions = SessionRegistry()

    # Events -----------------------------------------------------------

    async def on_open(self, document: Document) -> CheckResult | None:
        return await self.diagnose_now(document)

    async def on_save(self, document: Document) -> CheckResult | None:
        return await self.diagnose_now(document)

    def on_change(self, document: Document) -> None:
        """Restart the debounce timer for ``document``.

        Must be called from within a running event loop.
        """

        if not self.diagnose_on_change or not is_shell_document(document):
            return
        session = self.sessions.get_or_create(document.uri)
        session.cancel_pending()
        session.debounce = asyncio.create_task(self._debounced(session, document))

    def on_close(self, document: Document) -> None:
        """Tear down the document's session and clear its diagnostics."""

        self.sessions.close(document.uri)
        self.sink.delete(document.uri)

    # Diagnosis --------------------------------------------------------

    async def diagnose_now(self, document: Document) -> CheckResult | None:
        """Diagnose ``document`` immediately, superseding pending work.

        Returns:
            CheckResult | None: The run's result, or ``None`` when the
            document is not a shell script.
        """

        if not is_shell_document(document):
            LOGGER.debug("skipping %s", document.file_name)
            return None
        session = self.sessions.get_or_create(document.uri)
        session.cancel_pending()
        return await self._dispatch(session, document)

    async def diagnose_all(self, documents: Iterable[Document]) -> dict[str, CheckResult]:
        """Diagnose every shell document concurrently."""

        targets = [document for document in documents if is_shell_document(document)]
        results = await asyncio.gather(*(self.diagnose_now(document) for document in targets))
        return {
            document.uri: result for document, result in zip(targets, results, strict=True) if result is not None
        }

    async def _debounced(self, session: DiagnosisSession, document: Document) -> None:
        await asyncio.sleep(self.debounce_ms / 1000.0)
        session.debounce = None
        await self._dispatch(session, document)

    def _dispatch(self, session: DiagnosisSession, document: Document) -> asyncio.Task[CheckResult]:
        sequence, source = session.supersede()
        task = asyncio.create_task(self._run(session, document, sequence, source.token))
        session.track(task)
        return task

    async def _run(
        self,
        session: DiagnosisSession,
        document: Document,
        sequence: int,
        token: CancellationToken,
    ) -> CheckResult:
        with self.monitor.timer(DIAGNOSIS_RUN):
            result = await self.manager.check(document, CheckOptions(token=token, timeout_ms=self.timeout_ms))
        if result.inconclusive:
            LOGGER.debug("run %s for %s inconclusive, keeping previous diagnostics", sequence, session.uri)
            return result
        if not session.may_publish(sequence):
            LOGGER.debug("discarding stale run %s for %s", sequence, session.uri)
            return result
        session.mark_published(sequence)
        self.sink.set(session.uri, result.diagnostics)
        return result

    # Formatting -------------------------------------------------------

    async def format_document(self, document: Document, token: CancellationToken | None = None) -> FormatResult:
        """Return formatting edits for ``document``.

        No edits are produced when the formatter reports a blocking
        diagnostic; in that case a fresh diagnosis is published so the user
        sees why.
        """

        result = await self.manager.format(document, FormatOptions(token=token, timeout_ms=self.timeout_ms))
        if result.text_edits:
            return result
        if any(is_blocking_diagnostic(diagnostic) for diagnostic in result.diagnostics):
            await self.diagnose_now(document)
        return result

    async def fix_all(
        self,
        document: Document,
        edits: EditSink,
        token: CancellationToken | None = None,
    ) -> FixOutcome:
        """Format ``document`` and apply the edits through ``edits``."""

        if not is_shell_document(document):
            return FixOutcome.SKIPPED
        result = await self.format_document(document, token)
        if result.text_edits:
            if not edits.apply(document.uri, result.text_edits):
                LOGGER.warning("host rejected formatting edits for %s", document.uri)
                return FixOutcome.REJECTED
            await self.diagnose_now(document)
            return FixOutcome.APPLIED
        if result.inconclusive:
            return FixOutcome.INCONCLUSIVE
        if result.diagnostics:
            LOGGER.warning("formatting %s failed: %s", document.uri, result.error_message or "see diagnostics")
            return FixOutcome.REFUSED
        return FixOutcome.UNCHANGED

    # Lifecycle --------------------------------------------------------

    async def shutdown(self) -> None:
        """Cancel all sessions and wait for in-flight runs to settle."""

        sessions = self.sessions.close_all()
        tasks = [task for session in sessions for task in session.tasks()]
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)


__all__ = ["DiagnosisPipeline", "FixOutcome"]
