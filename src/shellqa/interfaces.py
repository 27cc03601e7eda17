# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Protocols describing the collaborators supplied by the editing host."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Protocol, runtime_checkable

from shellqa.core.models import Diagnostic, TextEdit


@runtime_checkable
class Disposable(Protocol):
    """Handle that releases a subscription when disposed."""

    def dispose(self) -> None:
        """Release the subscription. Calling twice is harmless."""


@runtime_checkable
class CancellationToken(Protocol):
    """Cooperative cancellation signal observed by long running operations."""

    @property
    def is_cancellation_requested(self) -> bool:
        """Return ``True`` once cancellation has been requested."""

    def on_cancellation_requested(self, callback: Callable[[], None]) -> Disposable:
        """Invoke ``callback`` when cancellation is requested.

        Args:
            callback: Zero-argument callable. Runs immediately when the token
                is already cancelled.

        Returns:
            Disposable: Handle removing the subscription.
        """


@runtime_checkable
class Document(Protocol):
    """Snapshot-able text document owned by the host."""

    @property
    def uri(self) -> str:
        """Stable identity of the document."""

    @property
    def file_name(self) -> str:
        """File system path (or pseudo path) of the document."""

    @property
    def language_id(self) -> str:
        """Host language identifier such as ``shellscript``."""

    def get_text(self) -> str:
        """Return the current document content."""


class DiagnosticSink(Protocol):
    """Per-document replace-all diagnostic surface."""

    def set(self, uri: str, diagnostics: Sequence[Diagnostic]) -> None:
        """Replace the diagnostics published for ``uri``."""

    def delete(self, uri: str) -> None:
        """Remove every diagnostic published for ``uri``."""


class EditSink(Protocol):
    """Surface applying text edits to a document."""

    def apply(self, uri: str, edits: Sequence[TextEdit]) -> bool:
        """Apply ``edits`` to ``uri`` and return whether the host accepted them."""


__all__ = [
    "CancellationToken",
    "DiagnosticSink",
    "Disposable",
    "Document",
    "EditSink",
]
