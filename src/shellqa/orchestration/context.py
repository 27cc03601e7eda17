# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Top-level wiring of configuration, plugins and the diagnosis pipeline."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from shellqa.config.models import SHELLCHECK_PLUGIN, SHFMT_PLUGIN, Config
from shellqa.core.metrics import PerformanceMonitor
from shellqa.core.models import CheckResult, FormatResult
from shellqa.interfaces import CancellationToken, DiagnosticSink, Document, EditSink
from shellqa.plugins.discovery import load_plugin_factories
from shellqa.plugins.initializer import FactoryLoader, initialize_plugins
from shellqa.plugins.manager import PluginManager

from .pipeline import DiagnosisPipeline, FixOutcome

LOGGER = logging.getLogger(__name__)


class OrchestrationContext:
    """Own the plugin manager, the pipeline and the set of open documents.

    Hosts forward editor events here and receive diagnostics through the
    sink passed at construction.
    """

    def __init__(
        self,
        config: Config,
        sink: DiagnosticSink,
        *,
        monitor: PerformanceMonitor | None = None,
        factory_loader: FactoryLoader = load_plugin_factories,
    ) -> None:
        self.config = config
        self.monitor = monitor or PerformanceMonitor(enabled=False)
        self.manager = PluginManager(monitor=self.monitor)
        self.pipeline = DiagnosisPipeline(
            self.manager,
            sink,
            debounce_ms=config.diagnosis.debounce_ms,
            timeout_ms=config.diagnosis.timeout_ms,
            diagnose_on_change=config.diagnosis.diagnose_on_change,
            monitor=self.monitor,
        )
        self.documents: dict[str, Document] = {}
        self._factory_loader = factory_loader

    async def start(self) -> int:
        """Build and activate plugins for the current configuration.

        Returns:
            int: Number of active plugins.
        """

        active = await initialize_plugins(
            self.manager,
            self.config,
            monitor=self.monitor,
            factory_loader=self._factory_loader,
        )
        LOGGER.info("%d plugin(s) active: %s", active, ", ".join(self.manager.active_names()) or "<none>")
        return active

    # Document events --------------------------------------------------

    async def open_document(self, document: Document) -> CheckResult | None:
        self.documents[document.uri] = document
        return await self.pipeline.on_open(document)

    def change_document(self, document: Document) -> None:
        self.documents[document.uri] = document
        self.pipeline.on_change(document)

    async def save_document(self, document: Document) -> CheckResult | None:
        self.documents[document.uri] = document
        return await self.pipeline.on_save(document)

    def close_document(self, document: Document) -> None:
        self.documents.pop(document.uri, None)
        self.pipeline.on_close(document)

    async def format_document(self, document: Document, token: CancellationToken | None = None) -> FormatResult:
        return await self.pipeline.format_document(document, token)

    async def fix_all(
        self,
        document: Document,
        edits: EditSink,
        token: CancellationToken | None = None,
    ) -> FixOutcome:
        return await self.pipeline.fix_all(document, edits, token)

    # Configuration ----------------------------------------------------

    async def apply_configuration(self, config: Config, open_documents: Iterable[Document] = ()) -> None:
        """Switch to ``config`` and re-diagnose every open document.

        Plugins are rebuilt only when a setting they depend on changed.
        Previously active plugins stay active unless disabled; backends whose
        own settings changed are activated alongside them.

        Args:
            config: New effective configuration.
            open_documents: Documents the host has open that were never
                passed to :meth:`open_document`.
        """

        for document in open_documents:
            self.documents.setdefault(document.uri, document)
        previous = self.config
        self.config = config
        self.pipeline.debounce_ms = config.diagnosis.debounce_ms
        self.pipeline.timeout_ms = config.diagnosis.timeout_ms
        self.pipeline.diagnose_on_change = config.diagnosis.diagnose_on_change

        if previous.affects_plugins(config):
            names = [*self.manager.active_names(), *_retried_plugins(previous, config)]
            active = await initialize_plugins(
                self.manager,
                config,
                names=dict.fromkeys(names),
                monitor=self.monitor,
                factory_loader=self._factory_loader,
            )
            LOGGER.info("configuration changed, %d plugin(s) active", active)
        await self.pipeline.diagnose_all(tuple(self.documents.values()))

    async def shutdown(self) -> None:
        await self.pipeline.shutdown()
        self.manager.deactivate_all()
        self.documents.clear()


def _retried_plugins(previous: Config, config: Config) -> tuple[str, ...]:
    """Return enabled built-in backends whose own settings changed.

    These are activated even when inactive before, so enabling a backend or
    fixing its path takes effect without a restart.
    """

    changed: list[str] = []
    if previous.shfmt != config.shfmt or previous.effective_indent() != config.effective_indent():
        changed.append(SHFMT_PLUGIN)
    if previous.shellcheck != config.shellcheck:
        changed.append(SHELLCHECK_PLUGIN)
    return tuple(name for name in changed if name in config.enabled_plugins())


__all__ = ["OrchestrationContext"]
