# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Plugin contract, built-in plugins and the plugin manager."""

from __future__ import annotations

from .discovery import PLUGIN_GROUP, PluginFactory, load_plugin_factories
from .initializer import build_plugins, initialize_plugins
from .interface import BasePlugin, CheckOptions, FormatOptions, FormattingPlugin, Plugin
from .manager import PluginError, PluginInfo, PluginManager, PluginNotRegisteredError, PluginStats
from .shellcheck import ShellcheckPlugin
from .shfmt import ShfmtPlugin

__all__ = [
    "BasePlugin",
    "CheckOptions",
    "FormatOptions",
    "FormattingPlugin",
    "PLUGIN_GROUP",
    "Plugin",
    "PluginError",
    "PluginFactory",
    "PluginInfo",
    "PluginManager",
    "PluginNotRegisteredError",
    "PluginStats",
    "ShellcheckPlugin",
    "ShfmtPlugin",
    "build_plugins",
    "initialize_plugins",
    "load_plugin_factories",
]
