# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Diagnostic construction and in-memory sinks."""

from __future__ import annotations

from .factory import (
    EXECUTION_ERROR_CODE,
    FORMAT_ISSUE_CODE,
    SYNTAX_ERROR_CODE,
    DiagnosticFactory,
    is_blocking_diagnostic,
    text_edits_for,
)
from .sinks import InMemoryDiagnosticSink, InMemoryEditSink

__all__ = [
    "DiagnosticFactory",
    "EXECUTION_ERROR_CODE",
    "FORMAT_ISSUE_CODE",
    "InMemoryDiagnosticSink",
    "InMemoryEditSink",
    "SYNTAX_ERROR_CODE",
    "is_blocking_diagnostic",
    "text_edits_for",
]
