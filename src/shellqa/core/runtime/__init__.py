# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Process execution runtime."""

from __future__ import annotations

from .process import DEFAULT_TIMEOUT_MS, ExecutionOptions, ExecutionRequest, execute, find_executable, run

__all__ = ["DEFAULT_TIMEOUT_MS", "ExecutionOptions", "ExecutionRequest", "execute", "find_executable", "run"]
