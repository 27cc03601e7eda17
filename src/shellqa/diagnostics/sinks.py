# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""In-memory implementations of the host diagnostic and edit surfaces."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from shellqa.core.models import Diagnostic, TextEdit
from shellqa.documents import TextDocument, full_range


@dataclass(slots=True)
class InMemoryDiagnosticSink:
    """Collect published diagnostics per document URI.

    ``history`` keeps every publication in order, which lets callers assert
    how often a document was diagnosed.
    """

    published: dict[str, tuple[Diagnostic, ...]] = field(default_factory=dict)
    history: list[tuple[str, tuple[Diagnostic, ...]]] = field(default_factory=list)

    def set(self, uri: str, diagnostics: Sequence[Diagnostic]) -> None:
        snapshot = tuple(diagnostics)
        self.published[uri] = snapshot
        self.history.append((uri, snapshot))

    def delete(self, uri: str) -> None:
        self.published.pop(uri, None)

    def get(self, uri: str) -> tuple[Diagnostic, ...]:
        return self.published.get(uri, ())

    def publish_count(self, uri: str) -> int:
        return sum(1 for entry_uri, _ in self.history if entry_uri == uri)


@dataclass(slots=True)
class InMemoryEditSink:
    """Apply full-document replacements to registered :class:`TextDocument` buffers."""

    documents: Mapping[str, TextDocument] = field(default_factory=dict)
    applied: list[tuple[str, tuple[TextEdit, ...]]] = field(default_factory=list)

    def apply(self, uri: str, edits: Sequence[TextEdit]) -> bool:
        """Apply ``edits`` when each replaces the whole buffer.

        Returns:
            bool: ``False`` when the document is unknown or an edit is partial.
        """

        document = self.documents.get(uri)
        if document is None:
            return False
        for edit in edits:
            if edit.range != full_range(document.text):
                return False
            document.update(edit.new_text)
        self.applied.append((uri, tuple(edits)))
        return True


__all__ = ["InMemoryDiagnosticSink", "InMemoryEditSink"]
