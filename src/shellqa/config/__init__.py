# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models and loaders."""

from __future__ import annotations

from .loader import ConfigLoader, load_config
from .models import (
    SHELLCHECK_PLUGIN,
    SHFMT_PLUGIN,
    Config,
    ConfigError,
    DiagnosisConfig,
    OnErrorMode,
    ShellcheckConfig,
    ShfmtConfig,
    TabSizeMode,
)

__all__ = [
    "Config",
    "ConfigError",
    "ConfigLoader",
    "DiagnosisConfig",
    "OnErrorMode",
    "SHELLCHECK_PLUGIN",
    "SHFMT_PLUGIN",
    "ShellcheckConfig",
    "ShfmtConfig",
    "TabSizeMode",
    "load_config",
]
