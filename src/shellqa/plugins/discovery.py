# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Entry-point discovery for third-party plugins.

Packages contribute plugins by exposing a factory under the
``shellqa.plugins`` entry-point group. A factory receives the effective
:class:`~shellqa.config.Config` and returns a plugin, or ``None`` to opt out.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from importlib import metadata
from importlib.metadata import EntryPoint, EntryPoints
from typing import TypeAlias, TypeVar, cast

from shellqa.config.models import Config

from .interface import Plugin

LOGGER = logging.getLogger(__name__)

PLUGIN_GROUP = "shellqa.plugins"

PluginFactory: TypeAlias = Callable[[Config], Plugin | None]

_EntryPointSource: TypeAlias = EntryPoints | Mapping[str, Sequence[EntryPoint]]
_FactoryT = TypeVar("_FactoryT")


def _select_entry_points(entries: _EntryPointSource, group: str) -> Iterable[EntryPoint]:
    """Return entry points exposed under ``group`` from ``entries``.

    Args:
        entries: Raw entry-point container returned by :func:`metadata.entry_points`.
        group: Name of the entry-point group to extract.

    Returns:
        Iterable[EntryPoint]: Entry points belonging to ``group``.
    """

    if isinstance(entries, Mapping):
        return entries.get(group, ())
    return entries.select(group=group)


def _discover_entry_points(group: str, loader: Callable[[EntryPoint], _FactoryT]) -> tuple[_FactoryT, ...]:
    """Return objects exposed by the entry-point ``group``.

    Entries that fail to import are logged and skipped.
    """

    selected = _select_entry_points(metadata.entry_points(), group)
    loaded: list[_FactoryT] = []
    for entry in selected:
        try:
            loaded.append(loader(entry))
        except (AttributeError, ImportError, ValueError, RuntimeError) as exc:
            LOGGER.warning("skipping plugin entry point %s: %s", entry.name, exc)
    return tuple(loaded)


def load_plugin_factories() -> tuple[PluginFactory, ...]:
    """Return plugin factories discovered via entry points."""

    return _discover_entry_points(PLUGIN_GROUP, loader=lambda entry: cast(PluginFactory, entry.load()))


__all__ = ["PLUGIN_GROUP", "PluginFactory", "load_plugin_factories"]
