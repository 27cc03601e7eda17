# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Document lifecycle handling on top of the plugin manager."""

from __future__ import annotations

from .context import OrchestrationContext
from .pipeline import DiagnosisPipeline, FixOutcome
from .session import DiagnosisSession, SessionRegistry

__all__ = [
    "DiagnosisPipeline",
    "DiagnosisSession",
    "FixOutcome",
    "OrchestrationContext",
    "SessionRegistry",
]
