# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Adapters binding external shell tools to the executor and parsers."""

from __future__ import annotations

from .base import ExternalTool
from .shellcheck import ShellcheckSettings, ShellcheckTool
from .shfmt import ShfmtSettings, ShfmtTool

__all__ = ["ExternalTool", "ShellcheckSettings", "ShellcheckTool", "ShfmtSettings", "ShfmtTool"]
