# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Plugin registry owning registration, activation and fan-out of checks."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Iterator, Mapping

from pydantic import BaseModel, ConfigDict

from shellqa.core.metrics import PLUGIN_ACTIVATE, PLUGIN_CHECK, PLUGIN_FORMAT, PerformanceMonitor
from shellqa.core.models import CheckResult, Diagnostic, FormatResult
from shellqa.diagnostics.factory import DiagnosticFactory
from shellqa.interfaces import Document

from .interface import CheckOptions, FormatOptions, FormattingPlugin, Plugin

LOGGER = logging.getLogger(__name__)


class PluginError(RuntimeError):
    """Base class for plugin registry errors."""


class PluginNotRegisteredError(PluginError, KeyError):
    """Raised when a plugin name is looked up but was never registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Plugin '{name}' is not registered")
        self.name = name


class PluginInfo(BaseModel):
    """Descriptive snapshot of one registered plugin."""

    model_config = ConfigDict(frozen=True)

    name: str
    display_name: str
    version: str
    active: bool


class PluginStats(BaseModel):
    """Registry summary returned by :meth:`PluginManager.stats`."""

    model_config = ConfigDict(frozen=True)

    total: int
    active: int
    plugins: tuple[PluginInfo, ...]


class PluginManager(Mapping[str, Plugin]):
    """Registry of plugins with a separately tracked active set.

    ``PluginManager`` behaves like a read-only mapping of plugin names to
    plugins in registration order. The active set is an immutable
    ``frozenset`` replaced wholesale on every change, so a ``check`` or
    ``format`` call works against the set that was current when it started
    even if a reactivation completes while it is running.
    """

    def __init__(self, *, monitor: PerformanceMonitor | None = None) -> None:
        self._plugins: dict[str, Plugin] = {}
        self._active: frozenset[str] = frozenset()
        self._lock = asyncio.Lock()
        self.monitor = monitor or PerformanceMonitor(enabled=False)

    # Registration -----------------------------------------------------

    def register(self, plugin: Plugin) -> None:
        """Register ``plugin``, replacing any plugin with the same name.

        A replaced plugin is also deactivated; the new instance must pass its
        own availability check before it runs.

        Args:
            plugin: Plugin to register.
        """

        if plugin.name in self._plugins:
            LOGGER.warning("plugin %s already registered, replacing it", plugin.name)
            self._active = self._active - {plugin.name}
        self._plugins[plugin.name] = plugin
        LOGGER.debug("registered plugin %s", plugin.name)

    def unregister(self, name: str) -> bool:
        """Deactivate and remove the plugin called ``name``.

        Returns:
            bool: ``False`` when no such plugin was registered.
        """

        if name not in self._plugins:
            LOGGER.warning("cannot unregister unknown plugin %s", name)
            return False
        self._active = self._active - {name}
        del self._plugins[name]
        LOGGER.debug("unregistered plugin %s", name)
        return True

    def get(self, name: str, default: Plugin | None = None) -> Plugin | None:
        return self._plugins.get(name, default)

    def has(self, name: str) -> bool:
        return name in self._plugins

    def require(self, name: str) -> Plugin:
        """Return the plugin called ``name``.

        Raises:
            PluginNotRegisteredError: If ``name`` is not registered.
        """

        try:
            return self._plugins[name]
        except KeyError as exc:
            raise PluginNotRegisteredError(name) from exc

    def all(self) -> tuple[Plugin, ...]:
        """Return every registered plugin in registration order."""

        return tuple(self._plugins.values())

    def clear(self) -> None:
        """Deactivate and remove every plugin."""

        self._active = frozenset()
        self._plugins.clear()

    def __len__(self) -> int:
        return len(self._plugins)

    def __iter__(self) -> Iterator[str]:
        return iter(self._plugins)

    def __getitem__(self, name: str) -> Plugin:
        return self._plugins[name]

    # Activation -------------------------------------------------------

    def is_active(self, name: str) -> bool:
        return name in self._active

    def active_names(self) -> tuple[str, ...]:
        """Return active plugin names in registration order."""

        active = self._active
        return tuple(name for name in self._plugins if name in active)

    async def activate(self, name: str) -> bool:
        """Activate ``name`` when its backend reports itself available.

        Args:
            name: Registered plugin name.

        Returns:
            bool: ``True`` when the plugin is active afterwards.
        """

        async with self._lock:
            if not await self._check(name):
                return False
            self._active = self._active | {name}
            return True

    async def activate_multiple(self, names: Iterable[str]) -> int:
        """Activate ``names`` concurrently.

        A plugin that fails its availability check stays inactive and does not affect the
        others.

        Args:
            names: Plugin names to activate.

        Returns:
            int: Number of plugins activated.
        """

        async with self._lock:
            activated = await self._check_many(names)
            self._active = self._active | activated
            return len(activated)

    def deactivate(self, name: str) -> None:
        self._active = self._active - {name}

    def deactivate_all(self) -> None:
        self._active = frozenset()

    async def reactivate(self, names: Iterable[str]) -> int:
        """Replace the active set with whichever of ``names`` pass their availability check.

        Previously active plugins not listed in ``names`` end up inactive. The
        new set becomes visible in a single step once every check has
        finished.

        Args:
            names: Plugin names to activate.

        Returns:
            int: Number of plugins active afterwards.
        """

        async with self._lock:
            activated = await self._check_many(names)
            self._active = activated
            LOGGER.debug("active plugins: %s", ", ".join(self.active_names()) or "<none>")
            return len(activated)

    async def replace(self, plugins: Iterable[Plugin], names: Iterable[str] | None = None) -> int:
        """Swap in new plugin instances and activate ``names`` among them.

        Used after a configuration change. The new instances are checked
        before anything is published; the registry and the active set then
        change together, so no call observes a half-rebuilt manager.

        Args:
            plugins: Freshly built plugins, in registration order.
            names: Plugins to activate; all of ``plugins`` when omitted.

        Returns:
            int: Number of plugins active afterwards.
        """

        fresh: dict[str, Plugin] = {}
        for plugin in plugins:
            if plugin.name in fresh:
                LOGGER.warning("plugin %s built twice, keeping the last instance", plugin.name)
            fresh[plugin.name] = plugin
        wanted = tuple(fresh) if names is None else tuple(name for name in dict.fromkeys(names) if name in fresh)
        async with self._lock:
            outcomes = await asyncio.gather(*(self._check_plugin(fresh[name]) for name in wanted))
            activated = frozenset(name for name, ok in zip(wanted, outcomes, strict=True) if ok)
            self._plugins = fresh
            self._active = activated
            LOGGER.debug("active plugins: %s", ", ".join(self.active_names()) or "<none>")
            return len(activated)

    async def get_available_plugins(self) -> tuple[str, ...]:
        """Check every registered plugin concurrently and return the available names."""

        names = tuple(self._plugins)
        outcomes = await asyncio.gather(*(self._check(name) for name in names))
        return tuple(name for name, available in zip(names, outcomes, strict=True) if available)

    async def _check_many(self, names: Iterable[str]) -> frozenset[str]:
        requested = tuple(dict.fromkeys(names))
        outcomes = await asyncio.gather(*(self._check(name) for name in requested))
        failed = [name for name, ok in zip(requested, outcomes, strict=True) if not ok]
        if failed:
            LOGGER.warning("failed to activate plugins: %s", ", ".join(failed))
        return frozenset(name for name, ok in zip(requested, outcomes, strict=True) if ok)

    async def _check(self, name: str) -> bool:
        plugin = self._plugins.get(name)
        if plugin is None:
            LOGGER.warning("cannot activate unknown plugin %s", name)
            return False
        return await self._check_plugin(plugin)

    async def _check_plugin(self, plugin: Plugin) -> bool:
        name = plugin.name
        try:
            with self.monitor.timer(PLUGIN_ACTIVATE):
                available = await plugin.is_available()
        except Exception:  # noqa: BLE001 - a failing check leaves the plugin inactive
            LOGGER.exception("availability check for plugin %s raised", name)
            return False
        if not available:
            LOGGER.info("plugin %s is not available", name)
        return bool(available)

    # Execution --------------------------------------------------------

    def _snapshot(self, document: Document) -> tuple[Plugin, ...]:
        active = self._active
        return tuple(
            plugin
            for name, plugin in self._plugins.items()
            if name in active and _supports(plugin, document)
        )

    async def check(self, document: Document, options: CheckOptions | None = None) -> CheckResult:
        """Run every active plugin's check concurrently and merge the results.

        Diagnostics are concatenated in registration order. A plugin that
        raises contributes one error diagnostic instead of aborting the run.

        Args:
            document: Document to diagnose.
            options: Cancellation and timeout options shared by all plugins.

        Returns:
            CheckResult: Merged result; ``inconclusive`` when any plugin was
            cancelled or timed out.
        """

        plugins = self._snapshot(document)
        if not plugins:
            return CheckResult()
        results = await asyncio.gather(*(self._run_check(plugin, document, options) for plugin in plugins))
        diagnostics: list[Diagnostic] = []
        messages: list[str] = []
        for result in results:
            diagnostics.extend(result.diagnostics)
            if result.error_message:
                messages.append(result.error_message)
        return CheckResult(
            has_errors=any(result.has_errors for result in results),
            diagnostics=tuple(diagnostics),
            error_message="\n".join(messages) or None,
            inconclusive=any(result.inconclusive for result in results),
        )

    async def _run_check(self, plugin: Plugin, document: Document, options: CheckOptions | None) -> CheckResult:
        try:
            with self.monitor.timer(PLUGIN_CHECK):
                return await plugin.check(document, options)
        except Exception as exc:  # noqa: BLE001 - converted into a diagnostic for this plugin
            LOGGER.exception("plugin %s raised during check", plugin.name)
            return _plugin_failure(plugin, document, f"{plugin.display_name} check failed: {exc}")

    async def format(self, document: Document, options: FormatOptions | None = None) -> FormatResult:
        """Return the edits of the first active formatter that produces any.

        Formatters run one at a time in registration order. An empty result
        means either no formatter changed anything or none was available;
        the diagnostics collected along the way tell the two apart.

        Args:
            document: Document to format.
            options: Cancellation and timeout options.

        Returns:
            FormatResult: Winning formatter result, or the merged diagnostics
            of every formatter that produced no edits.
        """

        diagnostics: list[Diagnostic] = []
        messages: list[str] = []
        has_errors = False
        inconclusive = False
        for plugin in self._snapshot(document):
            if not isinstance(plugin, FormattingPlugin):
                continue
            try:
                with self.monitor.timer(PLUGIN_FORMAT):
                    result = await plugin.format(document, options)
            except Exception as exc:  # noqa: BLE001 - the next formatter is tried
                LOGGER.exception("plugin %s raised during format", plugin.name)
                failure = _plugin_failure(plugin, document, f"{plugin.display_name} format failed: {exc}")
                diagnostics.extend(failure.diagnostics)
                has_errors = True
                continue
            if result.text_edits:
                return result
            diagnostics.extend(result.diagnostics)
            has_errors = has_errors or result.has_errors
            inconclusive = inconclusive or result.inconclusive
            if result.error_message:
                messages.append(result.error_message)
        return FormatResult(
            has_errors=has_errors,
            diagnostics=tuple(diagnostics),
            error_message="\n".join(messages) or None,
            inconclusive=inconclusive,
        )

    # Introspection ----------------------------------------------------

    def stats(self) -> PluginStats:
        active = self._active
        infos = tuple(
            PluginInfo(
                name=plugin.name,
                display_name=plugin.display_name,
                version=plugin.version,
                active=plugin.name in active,
            )
            for plugin in self._plugins.values()
        )
        return PluginStats(total=len(infos), active=sum(1 for info in infos if info.active), plugins=infos)


def _supports(plugin: Plugin, document: Document) -> bool:
    supports = getattr(plugin, "supports", None)
    if callable(supports):
        return bool(supports(document))
    return True


def _plugin_failure(plugin: Plugin, document: Document, message: str) -> CheckResult:
    diagnostic = DiagnosticFactory(plugin.name).error(message, document.get_text())
    return CheckResult(has_errors=True, diagnostics=(diagnostic,), error_message=message)


__all__ = [
    "PluginError",
    "PluginInfo",
    "PluginManager",
    "PluginNotRegisteredError",
    "PluginStats",
]
