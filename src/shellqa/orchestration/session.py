# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Per-document diagnosis state and its registry."""

from __future__ import annotations

import asyncio
from collections.abc import Iterator
from dataclasses import dataclass, field

from shellqa.core.cancellation import CancellationTokenSource
from shellqa.core.models import CheckResult


@dataclass(slots=True)
class DiagnosisSession:
    """Debounce timer, in-flight run and sequence numbers for one document.

    Every dispatched run takes the next sequence number. Only the run holding
    the most recent number may publish, which keeps a slow superseded run
    from overwriting the result of a newer one.
    """

    uri: str
    debounce: asyncio.Task[None] | None = None
    run: asyncio.Task[CheckResult] | None = None
    source: CancellationTokenSource | None = None
    dispatched: int = 0
    published: int = 0
    closed: bool = False
    _tasks: set[asyncio.Task[CheckResult]] = field(default_factory=set)

    @property
    def pending(self) -> bool:
        """Return ``True`` while a debounce timer is waiting to fire."""

        return self.debounce is not None and not self.debounce.done()

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks)

    def cancel_pending(self) -> None:
        """Drop the debounce timer if it has not fired yet."""

        if self.debounce is not None and not self.debounce.done():
            self.debounce.cancel()
        self.debounce = None

    def supersede(self) -> tuple[int, CancellationTokenSource]:
        """Cancel the in-flight run and reserve the next sequence number.

        Returns:
            tuple[int, CancellationTokenSource]: Sequence number and the
            cancellation source for the new run.
        """

        if self.source is not None:
            self.source.cancel()
        self.dispatched += 1
        self.source = CancellationTokenSource()
        return self.dispatched, self.source

    def track(self, task: asyncio.Task[CheckResult]) -> None:
        self.run = task
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def may_publish(self, sequence: int) -> bool:
        """Return ``True`` when run ``sequence`` is still the newest one."""

        return not self.closed and sequence == self.dispatched and sequence > self.published

    def mark_published(self, sequence: int) -> None:
        self.published = sequence

    def close(self) -> None:
        """Cancel the timer and the in-flight run; later results are discarded."""

        self.closed = True
        self.cancel_pending()
        if self.source is not None:
            self.source.cancel()

    def tasks(self) -> tuple[asyncio.Task[CheckResult], ...]:
        return tuple(self._tasks)


class SessionRegistry:
    """Map document URIs to their :class:`DiagnosisSession`."""

    def __init__(self) -> None:
        self._sessions: dict[str, DiagnosisSession] = {}

    def get(self, uri: str) -> DiagnosisSession | None:
        return self._sessions.get(uri)

    def get_or_create(self, uri: str) -> DiagnosisSession:
        session = self._sessions.get(uri)
        if session is None:
            session = DiagnosisSession(uri=uri)
            self._sessions[uri] = session
        return session

    def close(self, uri: str) -> DiagnosisSession | None:
        """Tear down and forget the session for ``uri``."""

        session = self._sessions.pop(uri, None)
        if session is not None:
            session.close()
        return session

    def close_all(self) -> list[DiagnosisSession]:
        sessions = list(self._sessions.values())
        self._sessions.clear()
        for session in sessions:
            session.close()
        return sessions

    def __contains__(self, uri: object) -> bool:
        return uri in self._sessions

    def __iter__(self) -> Iterator[DiagnosisSession]:
        return iter(tuple(self._sessions.values()))

    def __len__(self) -> int:
        return len(self._sessions)


__all__ = ["DiagnosisSession", "SessionRegistry"]
