# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Parsers turning raw tool output into :class:`~shellqa.core.models.ToolResult` values."""

from __future__ import annotations

from .shellcheck import parse_shellcheck_output
from .shfmt import parse_shfmt_output

__all__ = ["parse_shellcheck_output", "parse_shfmt_output"]
