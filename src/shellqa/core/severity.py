# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Severity related types and helpers."""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Final


class Severity(str, Enum):
    """Severity levels surfaced to the diagnostic sink."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class LinterSeverity(str, Enum):
    """Severity vocabulary reported by the shell linter."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    STYLE = "style"


LINTER_LABELS: Final[Mapping[str, LinterSeverity]] = {
    "error": LinterSeverity.ERROR,
    "warning": LinterSeverity.WARNING,
    "info": LinterSeverity.INFO,
    "note": LinterSeverity.INFO,
    "style": LinterSeverity.STYLE,
}

_LINTER_TO_SEVERITY: Final[Mapping[LinterSeverity, Severity]] = {
    LinterSeverity.ERROR: Severity.ERROR,
    LinterSeverity.WARNING: Severity.WARNING,
    LinterSeverity.INFO: Severity.INFO,
    LinterSeverity.STYLE: Severity.INFO,
}


def linter_severity_from_label(label: str | None, default: LinterSeverity = LinterSeverity.WARNING) -> LinterSeverity:
    """Return the linter severity matching ``label``.

    Args:
        label: Raw severity token emitted by the tool (``error``, ``note``...).
        default: Severity used when ``label`` is unknown.

    Returns:
        LinterSeverity: Normalised severity value.
    """

    if not label:
        return default
    return LINTER_LABELS.get(label.strip().lower(), default)


def to_severity(value: LinterSeverity) -> Severity:
    """Map a linter severity onto the sink severity scale."""

    return _LINTER_TO_SEVERITY[value]


def severity_rank(severity: Severity) -> int:
    """Return an ordering rank where lower numbers are more severe.

    Args:
        severity: Severity to rank.

    Returns:
        int: ``0`` for errors, increasing for less severe levels.
    """

    return _RANKS[severity]


_RANKS: Final[Mapping[Severity, int]] = {
    Severity.ERROR: 0,
    Severity.WARNING: 1,
    Severity.INFO: 2,
}


__all__ = [
    "LINTER_LABELS",
    "LinterSeverity",
    "Severity",
    "linter_severity_from_label",
    "severity_rank",
    "to_severity",
]
