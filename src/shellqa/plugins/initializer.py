# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Build plugin instances from configuration and activate them."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence

from shellqa.config.models import Config, OnErrorMode
from shellqa.core.metrics import PerformanceMonitor
from shellqa.tools.shellcheck import ShellcheckSettings, ShellcheckTool
from shellqa.tools.shfmt import ShfmtSettings, ShfmtTool

from .discovery import PluginFactory, load_plugin_factories
from .interface import Plugin
from .manager import PluginManager
from .shellcheck import ShellcheckPlugin
from .shfmt import ShfmtPlugin

LOGGER = logging.getLogger(__name__)

FactoryLoader = Callable[[], Sequence[PluginFactory]]


def build_shfmt_plugin(config: Config, monitor: PerformanceMonitor | None = None) -> ShfmtPlugin:
    settings = ShfmtSettings(
        indent=config.effective_indent(),
        binary_next_line=config.shfmt.binary_next_line,
        case_indent=config.shfmt.case_indent,
        space_redirects=config.shfmt.space_redirects,
    )
    tool = ShfmtTool(config.shfmt.path, settings, timeout_ms=config.diagnosis.timeout_ms, monitor=monitor)
    return ShfmtPlugin(tool, report_execution_errors=config.diagnosis.on_error is OnErrorMode.SHOW_PROBLEM)


def build_shellcheck_plugin(config: Config, monitor: PerformanceMonitor | None = None) -> ShellcheckPlugin:
    settings = ShellcheckSettings(
        exclude=config.shellcheck.exclude,
        severity=config.shellcheck.severity,
        shell=config.shellcheck.shell,
    )
    tool = ShellcheckTool(config.shellcheck.path, settings, timeout_ms=config.diagnosis.timeout_ms, monitor=monitor)
    return ShellcheckPlugin(tool, report_execution_errors=config.diagnosis.on_error is OnErrorMode.SHOW_PROBLEM)


def build_plugins(
    config: Config,
    *,
    monitor: PerformanceMonitor | None = None,
    factory_loader: FactoryLoader = load_plugin_factories,
) -> list[Plugin]:
    """Return fresh plugin instances for ``config``.

    Built-in backends come first (formatter before linter) and only when
    enabled; entry-point factories follow in discovery order.

    Args:
        config: Effective configuration.
        monitor: Metrics sink handed to the tool adapters.
        factory_loader: Source of third-party plugin factories.

    Returns:
        list[Plugin]: Plugins ready to register.
    """

    plugins: list[Plugin] = []
    if config.shfmt.enabled:
        plugins.append(build_shfmt_plugin(config, monitor))
    if config.shellcheck.enabled:
        plugins.append(build_shellcheck_plugin(config, monitor))
    for factory in factory_loader():
        try:
            plugin = factory(config)
        except Exception:  # noqa: BLE001 - a broken third-party factory is skipped
            LOGGER.exception("plugin factory %r raised", factory)
            continue
        if plugin is not None:
            plugins.append(plugin)
    return plugins


async def initialize_plugins(
    manager: PluginManager,
    config: Config,
    *,
    names: Iterable[str] | None = None,
    monitor: PerformanceMonitor | None = None,
    factory_loader: FactoryLoader = load_plugin_factories,
) -> int:
    """Replace the manager's plugins with ones built from ``config`` and activate them.

    Args:
        manager: Registry to populate.
        config: Effective configuration.
        names: Plugins to activate; every built plugin when omitted. Names
            that were not built (for example disabled backends) are dropped.
        monitor: Metrics sink handed to the tool adapters.
        factory_loader: Source of third-party plugin factories.

    Returns:
        int: Number of active plugins.
    """

    plugins = build_plugins(config, monitor=monitor, factory_loader=factory_loader)
    return await manager.replace(plugins, names)


__all__ = [
    "build_plugins",
    "build_shellcheck_plugin",
    "build_shfmt_plugin",
    "initialize_plugins",
]
